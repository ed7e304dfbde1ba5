"""HTTP errors raised by the request guards."""

from fastapi import HTTPException


class Unauthenticated(HTTPException):
    """401: no token, bad token, or the token's subject is gone."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    """403: authenticated, but the role is not allowed here."""

    def __init__(self, detail: str):
        super().__init__(status_code=403, detail=detail)

"""Token cookie helpers shared by the user and shop routers.

Learn: the cookie lives exactly as long as the token inside it, and is
httponly so page scripts cannot read it. Browsers send it back
automatically, which is why the guards check the cookie before the
Authorization header.
"""

from fastapi import Response

from storefront.config import settings


def set_token_cookie(response: Response, cookie_name: str, token: str) -> None:
    response.set_cookie(
        key=cookie_name,
        value=token,
        max_age=int(settings.token_ttl.total_seconds()),
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )


def clear_token_cookie(response: Response, cookie_name: str) -> None:
    response.delete_cookie(
        key=cookie_name,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.cookie_samesite,
    )

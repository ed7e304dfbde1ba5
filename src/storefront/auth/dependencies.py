"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract and
validate the acting principal from the request. The resolved Principal
is the return value of the dependency, so handlers receive it as a
typed argument instead of reading a field off the request.

Token lookup order for both variants:
1. Cookie (`token` for customers, `seller_token` for sellers)
2. `Authorization: Bearer <token>` header

A token whose subject no longer exists is rejected with the same 401
as a forged one; callers cannot tell the two apart.
"""

import enum
import uuid
from dataclasses import dataclass
from typing import Optional, Type, Union

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth.exceptions import Unauthenticated
from storefront.auth.jwt import InvalidOrExpiredToken, verify_token
from storefront.config import settings
from storefront.db.engine import get_db
from storefront.db.models import Shop, User

logger = structlog.get_logger()

NO_TOKEN_MESSAGE = "Please login to continue"


class PrincipalKind(str, enum.Enum):
    CUSTOMER = "customer"
    SELLER = "seller"


@dataclass(frozen=True)
class Principal:
    """The authenticated account attached to one request."""

    kind: PrincipalKind
    account: Union[User, Shop]

    @property
    def id(self) -> uuid.UUID:
        return self.account.id

    @property
    def role(self) -> Optional[str]:
        return self.account.role

    @property
    def is_seller(self) -> bool:
        return self.kind is PrincipalKind.SELLER


@dataclass(frozen=True)
class _GuardVariant:
    kind: PrincipalKind
    model: Type[Union[User, Shop]]
    invalid_message: str
    not_found_message: str

    @property
    def cookie_name(self) -> str:
        if self.kind is PrincipalKind.SELLER:
            return settings.seller_cookie_name
        return settings.user_cookie_name


CUSTOMER = _GuardVariant(
    kind=PrincipalKind.CUSTOMER,
    model=User,
    invalid_message="Invalid or expired token",
    not_found_message="User not found",
)

SELLER = _GuardVariant(
    kind=PrincipalKind.SELLER,
    model=Shop,
    invalid_message="Invalid or expired seller token",
    not_found_message="Seller not found",
)


def extract_token(
    cookies: dict, authorization: Optional[str], cookie_name: str
) -> Optional[str]:
    """Cookie first, then a Bearer header. Anything else means no token."""
    token = cookies.get(cookie_name)
    if token:
        return token
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()
        if token:
            return token
    return None


async def authenticate(
    variant: _GuardVariant,
    token: Optional[str],
    db: AsyncSession,
) -> Principal:
    """Verify a token and load its subject. Raises Unauthenticated."""
    if not token:
        logger.info("auth.token_missing", principal=variant.kind.value)
        raise Unauthenticated(NO_TOKEN_MESSAGE)

    try:
        subject_id = uuid.UUID(verify_token(token))
    except (InvalidOrExpiredToken, ValueError) as e:
        logger.info(
            "auth.token_invalid", principal=variant.kind.value, reason=str(e)
        )
        raise Unauthenticated(variant.invalid_message)

    try:
        account = await db.get(variant.model, subject_id)
    except SQLAlchemyError:
        logger.exception(
            "auth.principal_lookup_failed",
            principal=variant.kind.value,
            subject_id=str(subject_id),
        )
        raise Unauthenticated(variant.invalid_message)

    if account is None:
        logger.info(
            "auth.principal_not_found",
            principal=variant.kind.value,
            subject_id=str(subject_id),
        )
        raise Unauthenticated(variant.not_found_message)

    logger.debug(
        "auth.authenticated", principal=variant.kind.value, subject_id=str(subject_id)
    )
    return Principal(kind=variant.kind, account=account)


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Authenticate a customer (401 on any failure)."""
    token = extract_token(request.cookies, authorization, CUSTOMER.cookie_name)
    return await authenticate(CUSTOMER, token, db)


async def get_current_seller(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Authenticate a seller (401 on any failure)."""
    token = extract_token(request.cookies, authorization, SELLER.cookie_name)
    return await authenticate(SELLER, token, db)

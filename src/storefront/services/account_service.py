"""Account service — the credential store for users and shops.

Learn: Service layer separates business logic from HTTP routing.
API routes and the admin CLI call the service, the service calls the
database. Passwords are assigned as plaintext here; the before_flush
hook in db/models.py hashes them on the way to the database.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from storefront.db.models import Address, Shop, User

logger = structlog.get_logger()


class AccountError(Exception):
    """Base class for account-service failures."""


class EmailAlreadyRegistered(AccountError):
    pass


class InvalidCredentials(AccountError):
    pass


class AddressTypeExists(AccountError):
    pass


class AddressNotFound(AccountError):
    pass


_ADDRESS_FIELDS = ("country", "city", "address1", "address2", "zip_code", "address_type")
_PROFILE_FIELDS = ("name", "email", "phone_number")


class AccountService:
    """Business logic for customer and seller accounts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Users ──────────────────────────────────────────

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_email(
        self, email: str, with_password: bool = False
    ) -> Optional[User]:
        q = select(User).where(User.email == email)
        if with_password:
            q = q.options(undefer(User.password)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(q)
        return result.scalars().first()

    async def register_user(
        self, name: str, email: str, password: str, avatar: str
    ) -> User:
        if await self._email_taken(User, email):
            raise EmailAlreadyRegistered(email)

        user = User(
            name=name,
            email=email,
            password=password,
            avatar=avatar,
            addresses=[],
        )
        self.db.add(user)
        await self._commit_unique_email(email)
        logger.info("accounts.user_registered", user_id=str(user.id))
        return user

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Return the user if the email/password pair matches."""
        user = await self.get_user_by_email(email, with_password=True)
        if user is None or not user.check_password(password):
            return None
        return user

    async def update_user_info(
        self,
        user: User,
        password: str,
        changes: dict,
    ) -> User:
        """Update profile fields; the current password must be supplied.

        Only the keys present in changes are written, so a field left out
        of the request keeps its stored value.
        """
        if not await self._password_matches(User, user.id, password):
            raise InvalidCredentials()
        email = changes.get("email", user.email)
        if email != user.email and await self._email_taken(User, email):
            raise EmailAlreadyRegistered(email)

        for field in _PROFILE_FIELDS:
            if field in changes:
                setattr(user, field, changes[field])
        await self._commit_unique_email(email)
        return user

    async def update_password(
        self, user: User, old_password: str, new_password: str
    ) -> User:
        loaded = await self._with_password(User, user.id)
        if loaded is None or not loaded.check_password(old_password):
            raise InvalidCredentials()

        loaded.password = new_password
        await self.db.commit()
        logger.info("accounts.password_changed", user_id=str(loaded.id))
        return loaded

    async def upsert_address(self, user: User, data: dict) -> User:
        """Update the address with data["id"], or append a new one.

        Only one address per address_type is allowed. An id that matches
        none of the user's addresses raises AddressNotFound.
        """
        address_id = data.get("id")
        existing = next((a for a in user.addresses if a.id == address_id), None)
        if address_id is not None and existing is None:
            raise AddressNotFound(str(address_id))

        address_type = data.get("address_type")
        if address_type and any(
            a.address_type == address_type and a.id != address_id
            for a in user.addresses
        ):
            raise AddressTypeExists(address_type)

        if existing is not None:
            for field in _ADDRESS_FIELDS:
                setattr(existing, field, data.get(field))
        else:
            user.addresses.append(
                Address(**{field: data.get(field) for field in _ADDRESS_FIELDS})
            )
        await self.db.commit()
        return user

    async def delete_address(self, user: User, address_id: uuid.UUID) -> User:
        address = next((a for a in user.addresses if a.id == address_id), None)
        if address is None:
            raise AddressNotFound(str(address_id))
        user.addresses.remove(address)
        await self.db.commit()
        return user

    # ─── Admin ──────────────────────────────────────────

    async def list_users(self) -> list[User]:
        result = await self.db.execute(
            select(User).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        user = await self.get_user(user_id)
        if user is None:
            return False
        await self.db.delete(user)
        await self.db.commit()
        logger.info("accounts.user_deleted", user_id=str(user_id))
        return True

    async def set_role(self, user: User, role: str) -> User:
        user.role = role
        await self.db.commit()
        logger.info("accounts.role_changed", user_id=str(user.id), role=role)
        return user

    # ─── Shops ──────────────────────────────────────────

    async def get_shop(self, shop_id: uuid.UUID) -> Optional[Shop]:
        return await self.db.get(Shop, shop_id)

    async def get_shop_by_email(
        self, email: str, with_password: bool = False
    ) -> Optional[Shop]:
        q = select(Shop).where(Shop.email == email)
        if with_password:
            q = q.options(undefer(Shop.password)).execution_options(
                populate_existing=True
            )
        result = await self.db.execute(q)
        return result.scalars().first()

    async def register_shop(
        self,
        name: str,
        email: str,
        password: str,
        avatar: str,
        address: str,
        phone_number: str,
        zip_code: str,
        description: Optional[str] = None,
    ) -> Shop:
        if await self._email_taken(Shop, email):
            raise EmailAlreadyRegistered(email)

        shop = Shop(
            name=name,
            email=email,
            password=password,
            avatar=avatar,
            address=address,
            phone_number=phone_number,
            zip_code=zip_code,
            description=description,
        )
        self.db.add(shop)
        await self._commit_unique_email(email)
        logger.info("accounts.shop_registered", shop_id=str(shop.id))
        return shop

    async def authenticate_shop(self, email: str, password: str) -> Optional[Shop]:
        shop = await self.get_shop_by_email(email, with_password=True)
        if shop is None or not shop.check_password(password):
            return None
        return shop

    # ─── Helpers ────────────────────────────────────────

    async def _commit_unique_email(self, email: str) -> None:
        """Commit, turning a unique-email violation into EmailAlreadyRegistered."""
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("accounts.email_conflict")
            raise EmailAlreadyRegistered(email)

    async def _email_taken(self, model, email: str) -> bool:
        result = await self.db.execute(select(model.id).where(model.email == email))
        return result.first() is not None

    async def _with_password(self, model, account_id: uuid.UUID):
        """Load an account with its password hash (refreshing the identity map)."""
        q = (
            select(model)
            .where(model.id == account_id)
            .options(undefer(model.password))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(q)
        return result.scalars().first()

    async def _password_matches(
        self, model, account_id: uuid.UUID, password: str
    ) -> bool:
        loaded = await self._with_password(model, account_id)
        return loaded is not None and loaded.check_password(password)

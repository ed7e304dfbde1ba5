"""Storefront admin CLI: bootstrap the database and manage accounts.

Usage:
    storefront init-db                                   # Create tables (dev)
    storefront create-admin -e a@b.c -n Admin -p secret  # Create an admin user
    storefront set-role a@b.c admin                      # Change a user's role
    storefront issue-token a@b.c                         # Print a token for a user
    storefront issue-token shop@b.c --seller             # ... or for a shop

Learn: The CLI talks to the database directly through AccountService,
the same code path the HTTP routes use, so passwords are hashed by the
same before_flush hook. Every command builds its own engine from
--database-url and disposes it before returning.
"""

from __future__ import annotations

import asyncio
import sys
from contextlib import asynccontextmanager
from typing import Optional

import click
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront import __version__
from storefront.auth.roles import Role
from storefront.config import settings
from storefront.db.engine import make_engine
from storefront.db.models import Base
from storefront.services.account_service import (
    AccountService,
    EmailAlreadyRegistered,
)

DEFAULT_AVATAR = "avatars/default.png"


@asynccontextmanager
async def _session(database_url: str):
    """Yield a session on a short-lived engine."""
    engine = make_engine(database_url)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


def _fail(message: str) -> None:
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="storefront")
@click.option(
    "--database-url",
    envvar="STOREFRONT_DATABASE_URL",
    default=settings.database_url,
    show_default=False,
    help="Async SQLAlchemy URL (defaults to STOREFRONT_DATABASE_URL)",
)
@click.pass_context
def main(ctx: click.Context, database_url: str):
    """Storefront account administration."""
    ctx.obj = {"database_url": database_url}


@main.command("init-db")
@click.pass_obj
def init_db(obj: dict):
    """Create all tables. Use Alembic migrations outside development."""

    async def _impl():
        engine = make_engine(obj["database_url"])
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        finally:
            await engine.dispose()

    asyncio.run(_impl())
    click.echo("Tables created.")


@main.command("create-admin")
@click.option("--email", "-e", required=True)
@click.option("--name", "-n", required=True)
@click.option("--password", "-p", required=True, prompt=True, hide_input=True)
@click.option("--avatar", default=DEFAULT_AVATAR, show_default=True)
@click.pass_obj
def create_admin(obj: dict, email: str, name: str, password: str, avatar: str):
    """Register a user and give it the admin role."""

    async def _impl():
        async with _session(obj["database_url"]) as db:
            service = AccountService(db)
            user = await service.register_user(
                name=name, email=email, password=password, avatar=avatar
            )
            await service.set_role(user, Role.ADMIN.value)
            return user

    try:
        user = asyncio.run(_impl())
    except EmailAlreadyRegistered:
        _fail(f"A user with email {email} already exists")
    click.echo(f"Admin {user.email} created ({user.id})")


@main.command("set-role")
@click.argument("email")
@click.argument("role")
@click.pass_obj
def set_role(obj: dict, email: str, role: str):
    """Change the role of the user with EMAIL."""

    async def _impl():
        async with _session(obj["database_url"]) as db:
            service = AccountService(db)
            user = await service.get_user_by_email(email)
            if user is None:
                return None
            return await service.set_role(user, role)

    user = asyncio.run(_impl())
    if user is None:
        _fail(f"No user with email {email}")
    click.echo(f"{user.email} is now {user.role}")


@main.command("issue-token")
@click.argument("email")
@click.option("--seller", is_flag=True, help="Look EMAIL up among shops")
@click.pass_obj
def issue_token(obj: dict, email: str, seller: bool):
    """Print a signed token for the account with EMAIL."""

    async def _impl() -> Optional[str]:
        async with _session(obj["database_url"]) as db:
            service = AccountService(db)
            if seller:
                account = await service.get_shop_by_email(email)
            else:
                account = await service.get_user_by_email(email)
            return account.get_jwt_token() if account is not None else None

    token = asyncio.run(_impl())
    if token is None:
        _fail(f"No {'shop' if seller else 'user'} with email {email}")
    click.echo(token)


if __name__ == "__main__":
    main()

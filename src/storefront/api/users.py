"""User API — registration, login, profile, addresses, admin.

Learn: Routes for the customer account lifecycle:
- POST /user/create-user → create a new customer account
- POST /user/login-user → email/password → token cookie + body token
- GET /user/getuser → current customer (customer guard)
- GET /user/logout → clear the token cookie
- PUT /user/update-user-info, /update-user-addresses, /update-user-password
- DELETE /user/delete-user-address/:id
- GET /user/admin-all-users, DELETE /user/delete-user/:id → admin only
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.cookies import clear_token_cookie, set_token_cookie
from storefront.auth.dependencies import Principal, get_current_user
from storefront.auth.roles import Role, is_admin
from storefront.config import settings
from storefront.db.engine import get_db
from storefront.schemas.account import (
    AddressWrite,
    LoginRequest,
    PasswordUpdate,
    UserCreate,
    UserInfoUpdate,
    UserLoginResponse,
    UserRead,
)
from storefront.services.account_service import (
    AccountService,
    AddressNotFound,
    AddressTypeExists,
    EmailAlreadyRegistered,
    InvalidCredentials,
)

router = APIRouter(prefix="/user")

_admin_only = is_admin(Role.ADMIN)


# ─── Register / login ────────────────────────────────────


@router.post("/create-user", response_model=UserRead, status_code=201)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create a new customer account."""
    try:
        return await AccountService(db).register_user(
            name=body.name,
            email=body.email,
            password=body.password,
            avatar=body.avatar,
        )
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=409, detail="User already exists")


@router.post("/login-user", response_model=UserLoginResponse)
async def login_user(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Login with email and password. Sets the `token` cookie."""
    user = await AccountService(db).authenticate_user(body.email, body.password)
    if user is None:
        raise HTTPException(
            status_code=400, detail="Please provide the correct information"
        )

    token = user.get_jwt_token()
    set_token_cookie(response, settings.user_cookie_name, token)
    return UserLoginResponse(user=UserRead.model_validate(user), token=token)


@router.get("/logout")
async def logout(response: Response):
    clear_token_cookie(response, settings.user_cookie_name)
    return {"success": True, "message": "Log out successful!"}


# ─── Current user ───────────────────────────────────────


@router.get("/getuser", response_model=UserRead)
async def get_user(principal: Principal = Depends(get_current_user)):
    return principal.account


@router.put("/update-user-info", response_model=UserRead)
async def update_user_info(
    body: UserInfoUpdate,
    principal: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update name, email and phone number. Requires the current password."""
    try:
        return await AccountService(db).update_user_info(
            principal.account,
            password=body.password,
            changes=body.model_dump(exclude_unset=True, exclude={"password"}),
        )
    except InvalidCredentials:
        raise HTTPException(
            status_code=400, detail="Please provide the correct information"
        )
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=409, detail="Email already registered")


@router.put("/update-user-addresses", response_model=UserRead)
async def update_user_addresses(
    body: AddressWrite,
    principal: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Add an address, or update the one whose id is given (404 if unknown)."""
    try:
        return await AccountService(db).upsert_address(
            principal.account, body.model_dump()
        )
    except AddressTypeExists as e:
        raise HTTPException(status_code=400, detail=f"{e} address already exists")
    except AddressNotFound:
        raise HTTPException(status_code=404, detail="Address not found")


@router.delete("/delete-user-address/{address_id}", response_model=UserRead)
async def delete_user_address(
    address_id: uuid.UUID,
    principal: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await AccountService(db).delete_address(principal.account, address_id)
    except AddressNotFound:
        raise HTTPException(status_code=404, detail="Address not found")


@router.put("/update-user-password")
async def update_user_password(
    body: PasswordUpdate,
    principal: Principal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if body.new_password != body.confirm_password:
        raise HTTPException(
            status_code=400, detail="Password doesn't match with each other!"
        )
    try:
        await AccountService(db).update_password(
            principal.account, body.old_password, body.new_password
        )
    except InvalidCredentials:
        raise HTTPException(status_code=400, detail="Old password is incorrect!")
    return {"success": True, "message": "Password updated successfully!"}


# ─── Admin ───────────────────────────────────────────────


@router.get(
    "/admin-all-users",
    response_model=list[UserRead],
    dependencies=[Depends(_admin_only)],
)
async def admin_all_users(db: AsyncSession = Depends(get_db)):
    """List every customer, newest first."""
    return await AccountService(db).list_users()


@router.delete("/delete-user/{user_id}", dependencies=[Depends(_admin_only)])
async def delete_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await AccountService(db).delete_user(user_id):
        raise HTTPException(
            status_code=404, detail="User is not available with this id"
        )
    return {"success": True, "message": "User deleted successfully!"}

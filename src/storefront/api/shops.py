"""Shop API: seller registration, login and session.

Learn: Sellers are a separate principal type with their own table,
their own id space and their own cookie (`seller_token`). A customer
token never authenticates a seller route, and vice versa, because the
id it carries is looked up in the other table.
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.cookies import clear_token_cookie, set_token_cookie
from storefront.auth.dependencies import Principal, get_current_seller
from storefront.config import settings
from storefront.db.engine import get_db
from storefront.schemas.account import (
    LoginRequest,
    ShopCreate,
    ShopLoginResponse,
    ShopRead,
)
from storefront.services.account_service import (
    AccountService,
    EmailAlreadyRegistered,
)

router = APIRouter(prefix="/shop")


@router.post("/create-shop", response_model=ShopRead, status_code=201)
async def create_shop(body: ShopCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await AccountService(db).register_shop(**body.model_dump())
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=409, detail="Shop already exists")


@router.post("/login-shop", response_model=ShopLoginResponse)
async def login_shop(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """Login as a seller. Sets the `seller_token` cookie."""
    shop = await AccountService(db).authenticate_shop(body.email, body.password)
    if shop is None:
        raise HTTPException(
            status_code=400, detail="Please provide the correct information"
        )

    token = shop.get_jwt_token()
    set_token_cookie(response, settings.seller_cookie_name, token)
    return ShopLoginResponse(seller=ShopRead.model_validate(shop), token=token)


@router.get("/getSeller", response_model=ShopRead)
async def get_seller(principal: Principal = Depends(get_current_seller)):
    return principal.account


@router.get("/logout")
async def logout(response: Response):
    clear_token_cookie(response, settings.seller_cookie_name)
    return {"success": True, "message": "Log out successful!"}

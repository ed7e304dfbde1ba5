"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied per route here rather than per router. The user
router mixes open routes (create/login/logout) with guarded ones, and
the admin routes stack a role gate on top of the customer guard.
"""

from fastapi import APIRouter

from storefront.api.health import router as health_router
from storefront.api.shops import router as shops_router
from storefront.api.users import router as users_router

api_router = APIRouter(prefix="/api/v2")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(shops_router, tags=["shops"])

"""Pydantic schemas for users, addresses, and shops.

Learn: Pydantic v2 models validate request/response data. Separate
"Create" schemas (input) from "Read" schemas (output) for clean APIs.
No Read schema carries a password field, hashed or otherwise.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ─── Addresses ──────────────────────────────────────────

class AddressWrite(BaseModel):
    id: Optional[uuid.UUID] = Field(None, description="Set to update an existing address")
    country: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    address1: Optional[str] = Field(None, max_length=255)
    address2: Optional[str] = Field(None, max_length=255)
    zip_code: Optional[str] = Field(None, max_length=20)
    address_type: Optional[str] = Field(None, max_length=30)


class AddressRead(BaseModel):
    id: uuid.UUID
    country: Optional[str] = None
    city: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    zip_code: Optional[str] = None
    address_type: Optional[str] = None

    model_config = {"from_attributes": True}


# ─── Users ──────────────────────────────────────────────

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=4)
    avatar: str = Field(..., min_length=1, max_length=500)


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone_number: Optional[str] = None
    addresses: list[AddressRead] = []
    role: str
    avatar: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UserInfoUpdate(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str
    phone_number: Optional[str] = Field(None, max_length=30)
    name: str = Field(..., min_length=1, max_length=100)


class PasswordUpdate(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=4)
    confirm_password: str


# ─── Shops ──────────────────────────────────────────────

class ShopCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    avatar: str = Field(..., min_length=1, max_length=500)
    address: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1, max_length=30)
    zip_code: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = None


class ShopRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    description: Optional[str] = None
    address: str
    phone_number: str
    role: str
    avatar: str
    zip_code: str
    created_at: datetime

    model_config = {"from_attributes": True}


# ─── Login ──────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: str
    password: str


class UserLoginResponse(BaseModel):
    user: UserRead
    token: str
    token_type: str = "bearer"


class ShopLoginResponse(BaseModel):
    seller: ShopRead
    token: str
    token_type: str = "bearer"

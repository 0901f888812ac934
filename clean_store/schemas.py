"""Pydantic schemas for API responses. Keys are camelCase on the wire."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# User schemas
class RegisteredUserResponse(ApiModel):
    user_id: str


class UserResponse(ApiModel):
    id: str
    email: str
    created_at: datetime


class ProductResponse(ApiModel):
    id: str
    name: str
    description: str
    price: float
    currency: str
    stock: int
    is_in_stock: bool
    created_at: datetime
    updated_at: datetime


class UserWithProductsResponse(UserResponse):
    products: list[ProductResponse]


# Auth schemas
class TokenResponse(ApiModel):
    token: str
    expires_at: datetime


class AuthUserResponse(ApiModel):
    id: str
    email: str


class MessageResponse(ApiModel):
    message: str


# Product schemas
class CreatedProductResponse(ApiModel):
    product_id: str


class ProductListItemResponse(ApiModel):
    id: str
    name: str
    price: float
    currency: str
    stock: int
    is_in_stock: bool


# System schemas
class HealthResponse(ApiModel):
    status: str
    timestamp: datetime
    database: str

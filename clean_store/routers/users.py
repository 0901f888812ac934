"""User endpoints."""
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from ..container import Container, get_container
from ..schemas import MessageResponse, RegisteredUserResponse, UserResponse, UserWithProductsResponse

router = APIRouter(tags=["users"])


@router.post("/register", response_model=RegisteredUserResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: Any = Body(default=None), container: Container = Depends(get_container)):
    """Register a new user."""
    result = await container.register_user.execute(payload)
    return RegisteredUserResponse.model_validate(result.unwrap())


@router.get("/users", response_model=UserResponse)
async def get_user_by_email(
    email: Optional[str] = Query(default=None),
    container: Container = Depends(get_container),
):
    """Look up a user by email."""
    raw = {"email": email} if email is not None else {}
    result = await container.get_user_by_email.execute(raw)
    return UserResponse.model_validate(result.unwrap())


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, container: Container = Depends(get_container)):
    """Get user by ID."""
    result = await container.get_user_by_id.execute({"user_id": user_id})
    return UserResponse.model_validate(result.unwrap())


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, container: Container = Depends(get_container)):
    """Delete a user. Their tokens are revoked and product links dropped."""
    result = await container.delete_user.execute({"user_id": user_id})
    result.unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}/products", response_model=UserWithProductsResponse)
async def get_user_products(user_id: str, container: Container = Depends(get_container)):
    result = await container.get_user_with_products.execute({"user_id": user_id})
    return UserWithProductsResponse.model_validate(result.unwrap())


@router.post("/users/{user_id}/products/{product_id}", response_model=MessageResponse)
async def associate_product(user_id: str, product_id: str, container: Container = Depends(get_container)):
    result = await container.associate_product_with_user.execute({"user_id": user_id, "product_id": product_id})
    result.unwrap()
    return MessageResponse(message="Product associated with user")


@router.delete("/users/{user_id}/products/{product_id}", response_model=MessageResponse)
async def disassociate_product(user_id: str, product_id: str, container: Container = Depends(get_container)):
    result = await container.disassociate_product_from_user.execute({"user_id": user_id, "product_id": product_id})
    result.unwrap()
    return MessageResponse(message="Product disassociated from user")

"""Product endpoints."""
from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status

from ..container import Container, get_container
from ..schemas import CreatedProductResponse, ProductListItemResponse, ProductResponse

router = APIRouter(prefix="/products", tags=["products"])


def _with_product_id(product_id: str, payload: Any) -> Any:
    # Non-object bodies pass through so validation reports them.
    if payload is None:
        return {"product_id": product_id}
    if isinstance(payload, dict):
        body = {key: value for key, value in payload.items() if key != "productId"}
        return {**body, "product_id": product_id}
    return payload


@router.post("", response_model=CreatedProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(payload: Any = Body(default=None), container: Container = Depends(get_container)):
    """Create a product."""
    result = await container.create_product.execute(payload)
    return CreatedProductResponse.model_validate(result.unwrap())


@router.get("", response_model=list[ProductListItemResponse])
async def list_products(container: Container = Depends(get_container)):
    """List all products."""
    result = await container.list_products.execute()
    return [ProductListItemResponse.model_validate(p) for p in result.unwrap()]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, container: Container = Depends(get_container)):
    result = await container.get_product_by_id.execute({"product_id": product_id})
    return ProductResponse.model_validate(result.unwrap())


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, container: Container = Depends(get_container)):
    result = await container.delete_product.execute({"product_id": product_id})
    result.unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{product_id}/stock/reduce", response_model=ProductResponse)
async def reduce_stock(
    product_id: str,
    payload: Any = Body(default=None),
    container: Container = Depends(get_container),
):
    """Take ``quantity`` units out of stock."""
    result = await container.reduce_product_stock.execute(_with_product_id(product_id, payload))
    return ProductResponse.model_validate(result.unwrap())


@router.post("/{product_id}/stock/increase", response_model=ProductResponse)
async def increase_stock(
    product_id: str,
    payload: Any = Body(default=None),
    container: Container = Depends(get_container),
):
    result = await container.increase_product_stock.execute(_with_product_id(product_id, payload))
    return ProductResponse.model_validate(result.unwrap())

from fastapi import APIRouter, HTTPException, Query, Path, Body, Depends
from typing import List, Optional
from models.product import Product
from models.errors import ProductNotFoundError
from models.query import QueryFilter
from managers.auth_manager import JWTPayload, requires_scope
from repository import product as product_repo
from services.events import publish_product_created
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/products", response_model=List[Product], tags=["products"])
async def list_products(
    title: Optional[str] = Query(None, description="Filter by title"),
    limit: int = Query(50, description="Maximum number of products to return"),
    token_data: JWTPayload = Depends(requires_scope("products.read")),
):
    """商品の一覧を取得する"""
    qf = QueryFilter()
    qf.add_filter(f"title eq @title", {"title": title})
    try:
        return product_repo.query_products(qf, limit)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/products", response_model=Product, status_code=201, tags=["products"])
async def create_product(
    product: Product = Body(..., description="Product to create"),
    token_data: JWTPayload = Depends(requires_scope("products.write")),
):
    """新しい商品を作成し、商品作成イベントを発行する"""
    if product_repo.find_product(product.id) is not None:
        raise HTTPException(
            status_code=409,
            detail=f"ID '{product.id}' を持つ商品が既に存在します",
        )

    try:
        product_repo.create_product(product)
    except ValueError as e:
        raise HTTPException(status_code=500, detail=str(e))

    try:
        publish_product_created(product)
    except Exception as e:
        logger.exception("Failed to publish product-created for %s", product.id)
        # イベント未発行のレコードは残さない（再POSTで作り直せるようにする）
        try:
            product_repo.delete_product(product.id)
        except ValueError:
            logger.exception("Failed to remove unpublished product %s", product.id)
        raise HTTPException(status_code=500, detail=f"商品作成イベントの発行に失敗しました: {e}")

    return product


@router.get("/products/{product_id}", response_model=Product, tags=["products"])
async def get_product(
    product_id: str = Path(..., description="Product ID to get"),
    token_data: JWTPayload = Depends(requires_scope("products.read")),
):
    """指定されたIDの商品を取得する"""
    try:
        return product_repo.get_product(product_id)
    except ProductNotFoundError:
        raise HTTPException(
            status_code=404,
            detail=f"指定されたID {product_id} の商品が見つかりません",
        )


@router.delete("/products/{product_id}", status_code=204, tags=["products"])
async def delete_product(
    product_id: str = Path(..., description="Product ID to delete"),
    token_data: JWTPayload = Depends(requires_scope("products.write")),
):
    """指定されたIDの商品を削除する"""
    if product_repo.find_product(product_id) is None:
        raise HTTPException(
            status_code=404,
            detail=f"指定されたID {product_id} の商品が見つかりません",
        )
    product_repo.delete_product(product_id)

from typing import List

from fastapi import APIRouter, Depends, Query
from src.api.dependencies import get_product_service
from src.core.config import settings
from src.domain.models import Page, ProductView
from src.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=Page[ProductView])
async def list_products(
    page: int = 0,
    size: int = settings.default_page_size,
    svc: ProductService = Depends(get_product_service),
):
    return await svc.get_all_products(page, size)


@router.get("/top-selling", response_model=List[ProductView])
async def top_selling(
    limit: int = 10, svc: ProductService = Depends(get_product_service)
):
    return await svc.get_top_selling_products(limit)


@router.get("/low-stock", response_model=List[ProductView])
async def low_stock(
    threshold: int = 10, svc: ProductService = Depends(get_product_service)
):
    return await svc.get_low_stock_products(threshold)


@router.get("/search", response_model=Page[ProductView])
async def search(
    q: str = Query(..., description="Substring of the product name"),
    page: int = 0,
    size: int = settings.default_page_size,
    svc: ProductService = Depends(get_product_service),
):
    return await svc.search_products(q, page, size)

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import TypeAdapter
from sqlalchemy.orm import Session
from src.core.errors import ValidationError
from src.domain.models import Page, ProductView
from src.infrastructure.database.models import Product
from src.infrastructure.database.repositories import ProductRepository

from shared.constants import CacheNamespaces

from .base import QueryService, to_money

_PAGE = TypeAdapter(Page[ProductView])
_LIST = TypeAdapter(List[ProductView])


def to_view(
    product: Product,
    total_revenue: Optional[Decimal] = None,
    units_sold: Optional[int] = None,
) -> ProductView:
    return ProductView(
        id=product.id,
        name=product.name,
        sku=product.sku,
        price=to_money(product.price),
        inventory=product.inventory,
        category_name=product.category.name if product.category else None,
        vendor_name=product.vendor.name if product.vendor else None,
        rating=product.rating if product.rating is not None else Decimal("0"),
        review_count=product.review_count or 0,
        total_revenue=total_revenue,
        units_sold=units_sold,
    )


class ProductService(QueryService):
    async def get_all_products(self, page: int, size: int) -> Page[ProductView]:
        self._check_page(page, size)

        def load(session: Session) -> Page[ProductView]:
            rows, total = ProductRepository(session).find_active(
                self._offset(page, size), size
            )
            return Page[ProductView].build([to_view(p) for p in rows], page, size, total)

        return await self.cache.get_or_compute(
            CacheNamespaces.PRODUCT_METRICS,
            "all",
            {"page": page, "size": size},
            lambda: self._query(load),
            _PAGE,
        )

    async def get_top_selling_products(self, limit: int) -> List[ProductView]:
        """Active products by order-item revenue, highest first."""
        if limit < 1 or limit > self.config.max_top_selling_limit:
            raise ValidationError(
                f"limit must be between 1 and {self.config.max_top_selling_limit}",
                field="limit",
            )

        def load(session: Session) -> List[ProductView]:
            return [
                to_view(product, to_money(revenue), units)
                for product, revenue, units in ProductRepository(
                    session
                ).find_top_selling(limit)
            ]

        return await self.cache.get_or_compute(
            CacheNamespaces.PRODUCT_METRICS,
            "topSelling",
            {"limit": limit},
            lambda: self._query(load),
            _LIST,
        )

    async def get_low_stock_products(self, threshold: int) -> List[ProductView]:
        if threshold < 0:
            raise ValidationError("threshold must be >= 0", field="threshold")

        def load(session: Session) -> List[ProductView]:
            return [
                to_view(p) for p in ProductRepository(session).find_low_stock(threshold)
            ]

        return await self.cache.get_or_compute(
            CacheNamespaces.PRODUCT_METRICS,
            "lowStock",
            {"threshold": threshold},
            lambda: self._query(load),
            _LIST,
        )

    async def search_products(
        self, query: str, page: int, size: int
    ) -> Page[ProductView]:
        """Case-insensitive name search, ordered by id for stable paging."""
        if query is None or not query.strip():
            raise ValidationError("query must not be blank", field="q")
        self._check_page(page, size)
        term = query.strip()

        def load(session: Session) -> Page[ProductView]:
            rows, total = ProductRepository(session).search_by_name(
                term, self._offset(page, size), size
            )
            return Page[ProductView].build([to_view(p) for p in rows], page, size, total)

        return await self.cache.get_or_compute(
            CacheNamespaces.PRODUCT_METRICS,
            "search",
            {"q": term.lower(), "page": page, "size": size},
            lambda: self._query(load),
            _PAGE,
        )

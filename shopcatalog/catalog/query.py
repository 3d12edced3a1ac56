"""Product query engine.

Filtered, sorted and paginated product listings over active products.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Generic, TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.catalog.models import Product
from shopcatalog.catalog.repository import ProductRepository
from shopcatalog.domain.exceptions import ValidationError

logger = structlog.get_logger()

T = TypeVar("T")


class SortOption(str, Enum):
    """Supported listing orders."""

    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    RATING = "rating"
    NEWEST = "newest"

    @classmethod
    def parse(cls, value: "str | SortOption | None") -> "SortOption":
        """Parse a sort value, falling back to newest first."""
        if isinstance(value, SortOption):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.NEWEST


@dataclass
class ProductFilter:
    """Filter parameters for product listings.

    Attributes:
        search: Text searched in name, description and tags.
        category_id: Filter by linked category (wins over category_name).
        category_name: Filter by cached category name.
        brand: Filter by brand.
        min_price: Minimum regular price.
        max_price: Maximum regular price.
        is_featured: Filter by featured flag.
        on_discount: Only products with a discount price.
        in_stock: Only products with stock.
        sort_by: Sort option (price_asc, price_desc, rating, newest).
        page: Page number (1-indexed).
        page_size: Items per page.
    """

    search: str | None = None
    category_id: int | None = None
    category_name: str | None = None
    brand: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_featured: bool | None = None
    on_discount: bool | None = None
    in_stock: bool | None = None
    sort_by: str | None = None
    page: int = 1
    page_size: int = 20

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (alias for page_size)."""
        return self.page_size


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total_count: Matching items before paging.
        current_page: Current page.
        page_size: Items per page.
    """

    items: list[T]
    total_count: int
    current_page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return math.ceil(self.total_count / self.page_size)


class ProductQueryEngine:
    """Executes product listings against the catalog store.

    Example usage:
        async with async_session_factory() as session:
            engine = ProductQueryEngine(session)
            page = await engine.search(
                ProductFilter(brand="Acme", in_stock=True, sort_by="price_asc"),
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize engine with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.repository = ProductRepository(session)

    async def search(self, filters: ProductFilter) -> PaginatedResult[Product]:
        """Search products with filters and pagination.

        Args:
            filters: Filter, sort and paging parameters.

        Returns:
            Paginated product results.

        Raises:
            ValidationError: If page or page_size is below 1.
        """
        if filters.page < 1:
            raise ValidationError("page", "must be at least 1")
        if filters.page_size < 1:
            raise ValidationError("page_size", "must be at least 1")

        sort_by = SortOption.parse(filters.sort_by)

        total = await self.repository.count_filtered(filters)
        products = await self.repository.find_filtered(
            filters,
            sort_by=sort_by,
            limit=filters.limit,
            offset=filters.offset,
        )

        logger.debug(
            "Product search executed",
            total_count=total,
            page=filters.page,
            page_size=filters.page_size,
            sort_by=sort_by.value,
        )

        return PaginatedResult(
            items=list(products),
            total_count=total,
            current_page=filters.page,
            page_size=filters.page_size,
        )

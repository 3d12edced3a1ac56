"""Product management.

CRUD over products: category assignment, partial updates, stock changes
and the soft-delete lifecycle.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.catalog.models import DEFAULT_BRAND, DEFAULT_CATEGORY_NAME, Product, utcnow
from shopcatalog.catalog.repository import CategoryRepository, ProductRepository
from shopcatalog.domain.access import AuthContext
from shopcatalog.domain.exceptions import NotFoundError, ValidationError
from shopcatalog.infrastructure.config import settings
from shopcatalog.infrastructure.database import transaction

logger = structlog.get_logger()


# ============================================================================
# Product Data Transfer Objects
# ============================================================================


@dataclass
class ProductCreate:
    """Fields for a new product."""

    name: str
    price: Decimal
    description: str = ""
    discount_price: Decimal | None = None
    stock: int = 0
    category_id: int | None = None
    category_name: str | None = None
    brand: str = DEFAULT_BRAND
    color: str | None = None
    size: str | None = None
    material: str | None = None
    image_url: str | None = None
    is_featured: bool = False
    sku: str | None = None
    tags: str | None = None


@dataclass
class ProductUpdate:
    """Partial product update.

    name, description, brand and category_name apply only when non-empty;
    price, stock, category_id, is_active and is_featured only when not
    None. discount_price, color, size, material, image_url, sku and tags
    are always written, so leaving them out clears them.
    """

    name: str | None = None
    description: str | None = None
    price: Decimal | None = None
    discount_price: Decimal | None = None
    stock: int | None = None
    category_id: int | None = None
    category_name: str | None = None
    brand: str | None = None
    color: str | None = None
    size: str | None = None
    material: str | None = None
    image_url: str | None = None
    is_active: bool | None = None
    is_featured: bool | None = None
    sku: str | None = None
    tags: str | None = None


def _validate_pricing(price: Decimal | None, discount_price: Decimal | None) -> None:
    if price is not None and price <= 0:
        raise ValidationError("price", "must be greater than zero")
    if discount_price is not None and discount_price <= 0:
        raise ValidationError("discount_price", "must be greater than zero")


def _validate_stock(stock: int | None) -> None:
    if stock is not None and stock < 0:
        raise ValidationError("stock", "must not be negative")


# ============================================================================
# Product Manager
# ============================================================================


class ProductManager:
    """Service for product operations.

    Mutating operations require the admin role on the supplied
    AuthContext. Reads only see active products.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize manager with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.products = ProductRepository(session)
        self.categories = CategoryRepository(session)

    async def create(self, auth: AuthContext, data: ProductCreate) -> Product:
        """Create a product.

        When a category ID is given the category must exist and its name
        is cached on the product. Without one, the given category name
        (or "General") is stored as-is.

        Args:
            auth: Caller context (admin required).
            data: Product fields.

        Returns:
            The created product with its category loaded.

        Raises:
            ValidationError: If name, price or stock are invalid.
            NotFoundError: If the category does not exist.
        """
        auth.require_role(settings.admin_role)

        if not data.name or not data.name.strip():
            raise ValidationError("name", "is required")
        _validate_pricing(data.price, data.discount_price)
        _validate_stock(data.stock)

        async with transaction(self.session):
            category_name = data.category_name or DEFAULT_CATEGORY_NAME
            if data.category_id is not None:
                category = await self.categories.get_by_id(data.category_id)
                if category is None:
                    raise NotFoundError("Category", data.category_id)
                category_name = category.name

            now = utcnow()
            product = Product(
                name=data.name,
                description=data.description or "",
                price=data.price,
                discount_price=data.discount_price,
                stock=data.stock,
                category_id=data.category_id,
                category_name=category_name,
                brand=data.brand or DEFAULT_BRAND,
                color=data.color,
                size=data.size,
                material=data.material,
                image_url=data.image_url,
                is_featured=data.is_featured,
                sku=data.sku,
                tags=data.tags,
                rating=0.0,
                review_count=0,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            await self.products.save(product)

        logger.info("Product created", product_id=product.id, product_name=product.name)
        return await self._reload(product.id)

    async def get(self, product_id: int) -> Product:
        """Get an active product.

        Args:
            product_id: Product ID.

        Returns:
            The product with its category loaded.

        Raises:
            NotFoundError: If the product is missing or soft-deleted.
        """
        product = await self.products.get_by_id(product_id, active_only=True)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def update(self, auth: AuthContext, product_id: int, data: ProductUpdate) -> Product:
        """Apply a partial update to a product.

        Args:
            auth: Caller context (admin required).
            product_id: Product ID.
            data: Fields to change (see ProductUpdate).

        Returns:
            The updated product with its category loaded.

        Raises:
            ValidationError: If price or stock are invalid.
            NotFoundError: If the product or the new category does not exist.
        """
        auth.require_role(settings.admin_role)

        _validate_pricing(data.price, data.discount_price)
        _validate_stock(data.stock)

        async with transaction(self.session):
            product = await self.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)

            if data.category_id is not None and data.category_id != product.category_id:
                category = await self.categories.get_by_id(data.category_id)
                if category is None:
                    raise NotFoundError("Category", data.category_id)
                product.category_id = category.id
                product.category = category
                product.category_name = category.name
            elif data.category_name and data.category_name != product.category_name:
                # Cached name only; the category link is left as it is
                product.category_name = data.category_name

            if data.name:
                product.name = data.name
            if data.description:
                product.description = data.description
            if data.price is not None:
                product.price = data.price
            if data.stock is not None:
                product.stock = data.stock
            if data.brand:
                product.brand = data.brand
            if data.is_active is not None:
                product.is_active = data.is_active
            if data.is_featured is not None:
                product.is_featured = data.is_featured

            # Clearable fields
            product.discount_price = data.discount_price
            product.color = data.color
            product.size = data.size
            product.material = data.material
            product.image_url = data.image_url
            product.sku = data.sku
            product.tags = data.tags

            product.updated_at = utcnow()
            await self.products.save(product)

        logger.info("Product updated", product_id=product_id)
        return await self._reload(product_id)

    async def delete(self, auth: AuthContext, product_id: int) -> None:
        """Soft-delete a product.

        Args:
            auth: Caller context (admin required).
            product_id: Product ID.

        Raises:
            NotFoundError: If the product does not exist.
        """
        auth.require_role(settings.admin_role)

        async with transaction(self.session):
            product = await self.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            product.is_active = False
            product.updated_at = utcnow()
            await self.products.save(product)

        logger.info("Product soft-deleted", product_id=product_id)

    async def update_stock(self, auth: AuthContext, product_id: int, quantity: int) -> Product:
        """Overwrite a product's stock level.

        Args:
            auth: Caller context (admin required).
            product_id: Product ID.
            quantity: New stock level (not a delta).

        Returns:
            The updated product.

        Raises:
            ValidationError: If quantity is negative.
            NotFoundError: If the product does not exist.
        """
        auth.require_role(settings.admin_role)
        _validate_stock(quantity)

        async with transaction(self.session):
            product = await self.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            product.stock = quantity
            product.updated_at = utcnow()
            await self.products.save(product)

        logger.info("Product stock updated", product_id=product_id, stock=quantity)
        return product

    async def list_all(self) -> Sequence[Product]:
        """Active products, newest first."""
        return await self.products.find_active()

    async def list_featured(self, count: int | None = None) -> Sequence[Product]:
        """Newest featured products.

        Args:
            count: Maximum results (defaults to the configured count).
        """
        return await self.products.find_active(
            featured_only=True,
            limit=count if count is not None else settings.featured_count,
        )

    async def list_by_category_name(self, category_name: str) -> Sequence[Product]:
        """Active products whose cached category name matches exactly."""
        return await self.products.find_active(category_name=category_name)

    async def list_by_category_id(self, category_id: int) -> Sequence[Product]:
        """Active products linked to a category."""
        return await self.products.find_active(category_id=category_id)

    async def list_brands(self) -> list[str]:
        """Distinct brands of active products."""
        return await self.products.get_brands()

    async def _reload(self, product_id: int) -> Product:
        product = await self.products.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

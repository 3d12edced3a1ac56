"""SQLAlchemy models for the product catalog.

Defines Category, Product and Review tables for persistent storage.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopcatalog.infrastructure.database import Base

DEFAULT_CATEGORY_NAME = "General"
DEFAULT_BRAND = "Generic"


def utcnow() -> datetime:
    """Current UTC time."""
    return datetime.now(timezone.utc)


class Category(Base):
    """Category entity in the catalog.

    Attributes:
        id: Unique category identifier.
        name: Display name, unique ignoring case.
        description: Optional description.
        image_url: Optional image URL.
        is_active: Whether the category is active.
        created_at: Creation timestamp.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Relationships
    products: Mapped[list["Product"]] = relationship(
        "Product",
        back_populates="category",
        passive_deletes=True,
    )

    # Filled in by the repository; not a column.
    product_count = 0

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, name={self.name})>"

    def to_dict(self) -> dict:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "product_count": self.product_count,
        }


# Case-insensitive uniqueness of category names
Index("uq_categories_name_lower", func.lower(Category.name), unique=True)


class Product(Base):
    """Product entity in the catalog.

    ``category_name`` is a read-optimized copy of the linked category's
    name; products created without a category link keep the literal name
    they were given.

    Attributes:
        id: Unique product identifier.
        name: Product name.
        description: Product description.
        price: Regular price.
        discount_price: Optional discounted price.
        stock: Units in stock.
        category_id: Owning category, if linked.
        category_name: Cached category name.
        brand: Brand name.
        rating: Average review rating (0.0 without reviews).
        review_count: Number of reviews.
        is_active: False once soft-deleted.
        is_featured: Whether the product is featured.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, index=True)
    discount_price: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    category_name: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_CATEGORY_NAME, index=True
    )
    brand: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_BRAND, index=True)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)
    size: Mapped[str | None] = mapped_column(String(50), nullable=True)
    material: Mapped[str | None] = mapped_column(String(50), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(200), nullable=True)
    sku: Mapped[str | None] = mapped_column(String(20), nullable=True)
    tags: Mapped[str | None] = mapped_column(String(100), nullable=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Relationships
    category: Mapped["Category | None"] = relationship("Category", back_populates="products")
    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="product",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, name={self.name[:30]})>"

    @property
    def final_price(self) -> Decimal:
        """Price the customer pays."""
        return self.discount_price if self.discount_price is not None else self.price

    @property
    def has_discount(self) -> bool:
        """Whether a discount price is set."""
        return self.discount_price is not None

    @property
    def discount_percentage(self) -> int:
        """Discount as a whole percentage of the regular price."""
        if self.discount_price is None:
            return 0
        return round((1 - Decimal(self.discount_price) / Decimal(self.price)) * 100)

    @property
    def category_image_url(self) -> str | None:
        """Image URL of the linked category.

        Requires ``category`` to be loaded.
        """
        return self.category.image_url if self.category is not None else None

    def to_dict(self) -> dict:
        """Convert to dictionary.

        Requires ``category`` to be loaded.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "discount_price": self.discount_price,
            "final_price": self.final_price,
            "discount_percentage": self.discount_percentage,
            "has_discount": self.has_discount,
            "stock": self.stock,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "category_image_url": self.category_image_url,
            "brand": self.brand,
            "color": self.color,
            "size": self.size,
            "material": self.material,
            "image_url": self.image_url,
            "sku": self.sku,
            "tags": self.tags,
            "rating": self.rating,
            "review_count": self.review_count,
            "is_active": self.is_active,
            "is_featured": self.is_featured,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class Review(Base):
    """Customer review of a product.

    Attributes:
        id: Unique review identifier.
        product_id: Reviewed product.
        user_id: Reviewing user.
        username: Reviewer display name.
        rating: Star rating, 1 to 5.
        comment: Optional free text.
        created_at: Creation timestamp.
        updated_at: Last edit timestamp, if any.
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    product: Mapped["Product"] = relationship("Product", back_populates="reviews")

    # One review per user per product
    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_reviews_product_user"),
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Review(id={self.id}, product_id={self.product_id}, rating={self.rating})>"

    def to_dict(self) -> dict:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "product_id": self.product_id,
            "user_id": self.user_id,
            "username": self.username,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

"""API schemas for the catalog API.

Pydantic models for request/response validation and serialization.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str = Field(..., description="Outcome message")


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryCreateRequest(BaseModel):
    """Request to create a category."""

    name: str = Field(..., min_length=1, max_length=50, description="Category name")
    description: str | None = Field(default=None, max_length=200, description="Description")
    image_url: str | None = Field(default=None, max_length=200, description="Image URL")


class CategoryUpdateRequest(BaseModel):
    """Request to update a category. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, max_length=50, description="New name")
    description: str | None = Field(default=None, max_length=200, description="New description")
    image_url: str | None = Field(default=None, max_length=200, description="New image URL")
    is_active: bool | None = Field(default=None, description="New active flag")


class CategoryResponse(BaseModel):
    """Category with its active product count."""

    id: int = Field(..., description="Category identifier")
    name: str = Field(..., description="Category name")
    description: str | None = Field(default=None, description="Description")
    image_url: str | None = Field(default=None, description="Image URL")
    is_active: bool = Field(..., description="Whether the category is active")
    created_at: datetime = Field(..., description="When the category was created")
    product_count: int = Field(default=0, description="Number of active products")


class CategoryToggleResponse(BaseModel):
    """Result of toggling a category."""

    id: int = Field(..., description="Category identifier")
    is_active: bool = Field(..., description="New active flag")


class CategoryDeletedResponse(BaseModel):
    """Result of deleting a category."""

    message: str = Field(..., description="Outcome message")
    products_removed: int = Field(..., description="Products physically removed")
    reviews_removed: int = Field(..., description="Reviews physically removed")


# ============================================================================
# Product Schemas
# ============================================================================


class ProductCreateRequest(BaseModel):
    """Request to create a product."""

    name: str = Field(..., min_length=1, max_length=100, description="Product name")
    description: str = Field(default="", max_length=500, description="Description")
    price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2, description="Price")
    discount_price: Decimal | None = Field(
        default=None, gt=0, max_digits=18, decimal_places=2, description="Discounted price"
    )
    stock: int = Field(default=0, ge=0, description="Units in stock")
    category_id: int | None = Field(default=None, description="Linked category")
    category_name: str | None = Field(
        default=None, max_length=50, description="Category name when no category is linked"
    )
    brand: str = Field(default="Generic", max_length=50, description="Brand")
    color: str | None = Field(default=None, max_length=50)
    size: str | None = Field(default=None, max_length=50)
    material: str | None = Field(default=None, max_length=50)
    image_url: str | None = Field(default=None, max_length=200)
    is_featured: bool = Field(default=False, description="Featured flag")
    sku: str | None = Field(default=None, max_length=20, description="Stock keeping unit")
    tags: str | None = Field(default=None, max_length=100, description="Search tags")


class ProductUpdateRequest(BaseModel):
    """Request to update a product.

    discount_price, color, size, material, image_url, sku and tags are
    always written: omitting them clears them.
    """

    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    price: Decimal | None = Field(default=None, gt=0, max_digits=18, decimal_places=2)
    discount_price: Decimal | None = Field(default=None, gt=0, max_digits=18, decimal_places=2)
    stock: int | None = Field(default=None, ge=0)
    category_id: int | None = None
    category_name: str | None = Field(default=None, max_length=50)
    brand: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=50)
    size: str | None = Field(default=None, max_length=50)
    material: str | None = Field(default=None, max_length=50)
    image_url: str | None = Field(default=None, max_length=200)
    is_active: bool | None = None
    is_featured: bool | None = None
    sku: str | None = Field(default=None, max_length=20)
    tags: str | None = Field(default=None, max_length=100)


class StockUpdateRequest(BaseModel):
    """Request to overwrite stock."""

    quantity: int = Field(..., ge=0, description="New stock level")


class ProductResponse(BaseModel):
    """Product display form."""

    id: int = Field(..., description="Product identifier")
    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Description")
    price: float = Field(..., description="Regular price")
    discount_price: float | None = Field(default=None, description="Discounted price")
    final_price: float = Field(..., description="Price the customer pays")
    discount_percentage: int = Field(..., description="Discount as a percentage")
    has_discount: bool = Field(..., description="Whether a discount applies")
    stock: int = Field(..., description="Units in stock")
    category_id: int | None = Field(default=None, description="Linked category")
    category_name: str = Field(..., description="Category name")
    category_image_url: str | None = Field(default=None, description="Linked category image")
    brand: str = Field(..., description="Brand")
    color: str | None = None
    size: str | None = None
    material: str | None = None
    image_url: str | None = None
    sku: str | None = None
    tags: str | None = None
    rating: float = Field(..., ge=0, le=5, description="Average rating")
    review_count: int = Field(..., description="Number of reviews")
    is_active: bool = Field(..., description="False once deleted")
    is_featured: bool = Field(..., description="Featured flag")
    created_at: datetime = Field(..., description="When the product was created")
    updated_at: datetime = Field(..., description="When the product was last updated")


class PaginationSchema(BaseModel):
    """Paging metadata of a listing."""

    total_count: int = Field(..., description="Matching products before paging")
    total_pages: int = Field(..., description="Number of pages")
    current_page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Items per page")


class ProductPageResponse(BaseModel):
    """Filtered product listing."""

    products: list[ProductResponse] = Field(..., description="Products on this page")
    pagination: PaginationSchema = Field(..., description="Paging metadata")


# ============================================================================
# Review Schemas
# ============================================================================


class ReviewCreateRequest(BaseModel):
    """Request to add a review."""

    user_id: int = Field(..., description="Reviewing user")
    username: str = Field(..., min_length=1, max_length=100, description="Reviewer name")
    rating: int = Field(default=5, ge=1, le=5, description="Star rating")
    comment: str | None = Field(default=None, max_length=1000, description="Review text")


class ReviewResponse(BaseModel):
    """A product review."""

    id: int = Field(..., description="Review identifier")
    product_id: int = Field(..., description="Reviewed product")
    user_id: int = Field(..., description="Reviewing user")
    username: str = Field(..., description="Reviewer name")
    rating: int = Field(..., description="Star rating")
    comment: str | None = Field(default=None, description="Review text")
    created_at: datetime = Field(..., description="When the review was created")
    updated_at: datetime | None = Field(default=None, description="When the review was edited")

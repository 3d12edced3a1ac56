"""Product API endpoints.

Provides endpoints for browsing and managing products:
- GET /products - active products, newest first
- GET /products/featured - newest featured products
- GET /products/filter - filtered, sorted and paginated listing
- GET /products/categories - active categories with product counts
- GET /products/category-names - names of active categories
- GET /products/brands - distinct brands
- GET /products/category/{name} - products by cached category name
- GET /products/category/id/{category_id} - products by linked category
- GET /products/{id} - product details
- POST/PUT/PATCH/DELETE - admin management
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.api.middleware import get_auth_context
from shopcatalog.api.schemas import (
    CategoryResponse,
    ErrorResponse,
    MessageResponse,
    PaginationSchema,
    ProductCreateRequest,
    ProductPageResponse,
    ProductResponse,
    ProductUpdateRequest,
    StockUpdateRequest,
)
from shopcatalog.catalog.categories import CategoryManager
from shopcatalog.catalog.models import Product
from shopcatalog.catalog.products import ProductCreate, ProductManager, ProductUpdate
from shopcatalog.catalog.query import ProductFilter, ProductQueryEngine, SortOption
from shopcatalog.domain.access import AuthContext
from shopcatalog.infrastructure.config import settings
from shopcatalog.infrastructure.database import get_session

router = APIRouter(prefix="/products", tags=["Products"])

ADMIN_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_manager(session: Annotated[AsyncSession, Depends(get_session)]) -> ProductManager:
    """Get product manager bound to the request session."""
    return ProductManager(session)


def get_query_engine(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProductQueryEngine:
    """Get product query engine bound to the request session."""
    return ProductQueryEngine(session)


def get_category_manager(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CategoryManager:
    """Get category manager bound to the request session."""
    return CategoryManager(session)


# ============================================================================
# Helper Functions
# ============================================================================


def _to_response(product: Product) -> ProductResponse:
    """Convert product model to its display form."""
    return ProductResponse(**product.to_dict())


def _to_responses(products) -> list[ProductResponse]:
    return [_to_response(p) for p in products]


# ============================================================================
# Listing Endpoints
# ============================================================================


@router.get(
    "",
    response_model=list[ProductResponse],
    summary="List products",
    description="All active products, newest first.",
)
async def list_products(
    manager: Annotated[ProductManager, Depends(get_manager)],
) -> list[ProductResponse]:
    """List active products."""
    return _to_responses(await manager.list_all())


@router.get(
    "/featured",
    response_model=list[ProductResponse],
    summary="List featured products",
)
async def list_featured_products(
    manager: Annotated[ProductManager, Depends(get_manager)],
    count: int | None = Query(default=None, ge=1, description="Maximum results"),
) -> list[ProductResponse]:
    """List the newest featured products."""
    return _to_responses(await manager.list_featured(count))


@router.get(
    "/filter",
    response_model=ProductPageResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Filter products",
    description="Filter, sort and paginate active products.",
)
async def filter_products(
    engine: Annotated[ProductQueryEngine, Depends(get_query_engine)],
    search: str | None = Query(default=None, description="Text in name, description or tags"),
    category_id: int | None = Query(default=None, description="Linked category"),
    category_name: str | None = Query(default=None, description="Cached category name"),
    brand: str | None = Query(default=None, description="Brand"),
    min_price: Decimal | None = Query(default=None, description="Minimum price"),
    max_price: Decimal | None = Query(default=None, description="Maximum price"),
    is_featured: bool | None = Query(default=None, description="Featured flag"),
    on_discount: bool | None = Query(default=None, description="Only discounted products"),
    in_stock: bool | None = Query(default=None, description="Only products in stock"),
    sort_by: str | None = Query(
        default=None,
        description=", ".join(option.value for option in SortOption),
    ),
    page: int = Query(default=1, description="Page number"),
    page_size: int | None = Query(default=None, description="Items per page"),
) -> ProductPageResponse:
    """Run a filtered product query.

    Raises:
        ValidationError: If page or page_size is below 1.
    """
    filters = ProductFilter(
        search=search,
        category_id=category_id,
        category_name=category_name,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        is_featured=is_featured,
        on_discount=on_discount,
        in_stock=in_stock,
        sort_by=sort_by,
        page=page,
        page_size=page_size if page_size is not None else settings.default_page_size,
    )

    result = await engine.search(filters)

    return ProductPageResponse(
        products=_to_responses(result.items),
        pagination=PaginationSchema(
            total_count=result.total_count,
            total_pages=result.total_pages,
            current_page=result.current_page,
            page_size=result.page_size,
        ),
    )


@router.get(
    "/categories",
    response_model=list[CategoryResponse],
    summary="List active categories",
)
async def list_active_categories(
    categories: Annotated[CategoryManager, Depends(get_category_manager)],
) -> list[CategoryResponse]:
    """List active categories with their active product counts."""
    return [CategoryResponse(**c.to_dict()) for c in await categories.list_active()]


@router.get(
    "/category-names",
    response_model=list[str],
    summary="List active category names",
)
async def list_category_names(
    categories: Annotated[CategoryManager, Depends(get_category_manager)],
) -> list[str]:
    """List the names of active categories, sorted."""
    return await categories.active_names()


@router.get("/brands", response_model=list[str], summary="List brands")
async def list_brands(
    manager: Annotated[ProductManager, Depends(get_manager)],
) -> list[str]:
    """List distinct brands of active products."""
    return await manager.list_brands()


@router.get(
    "/category/id/{category_id}",
    response_model=list[ProductResponse],
    summary="List products by category ID",
)
async def list_products_by_category_id(
    category_id: int,
    manager: Annotated[ProductManager, Depends(get_manager)],
) -> list[ProductResponse]:
    """List active products linked to a category."""
    return _to_responses(await manager.list_by_category_id(category_id))


@router.get(
    "/category/{category_name}",
    response_model=list[ProductResponse],
    summary="List products by category name",
)
async def list_products_by_category_name(
    category_name: str,
    manager: Annotated[ProductManager, Depends(get_manager)],
) -> list[ProductResponse]:
    """List active products whose category name matches exactly."""
    return _to_responses(await manager.list_by_category_name(category_name))


# ============================================================================
# Single Product Endpoints
# ============================================================================


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product details",
)
async def get_product(
    product_id: int,
    manager: Annotated[ProductManager, Depends(get_manager)],
) -> ProductResponse:
    """Get an active product by ID.

    Raises:
        NotFoundError: If the product is missing or deleted.
    """
    return _to_response(await manager.get(product_id))


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ADMIN_RESPONSES,
    summary="Create product",
)
async def create_product(
    request: ProductCreateRequest,
    manager: Annotated[ProductManager, Depends(get_manager)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> ProductResponse:
    """Create a product."""
    product = await manager.create(auth, ProductCreate(**request.model_dump()))
    return _to_response(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses=ADMIN_RESPONSES,
    summary="Update product",
    description=(
        "Partial update. discount_price, color, size, material, image_url, sku "
        "and tags are cleared when omitted."
    ),
)
async def update_product(
    product_id: int,
    request: ProductUpdateRequest,
    manager: Annotated[ProductManager, Depends(get_manager)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> ProductResponse:
    """Update a product."""
    product = await manager.update(auth, product_id, ProductUpdate(**request.model_dump()))
    return _to_response(product)


@router.patch(
    "/{product_id}/stock",
    response_model=ProductResponse,
    responses=ADMIN_RESPONSES,
    summary="Set product stock",
)
async def update_stock(
    product_id: int,
    request: StockUpdateRequest,
    manager: Annotated[ProductManager, Depends(get_manager)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> ProductResponse:
    """Overwrite a product's stock level."""
    product = await manager.update_stock(auth, product_id, request.quantity)
    return _to_response(product)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses=ADMIN_RESPONSES,
    summary="Delete product",
    description="Soft delete: the product is hidden but kept with its reviews.",
)
async def delete_product(
    product_id: int,
    manager: Annotated[ProductManager, Depends(get_manager)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> MessageResponse:
    """Soft-delete a product."""
    await manager.delete(auth, product_id)
    return MessageResponse(message="Product deleted")

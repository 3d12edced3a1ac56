"""Category API endpoints.

Provides endpoints for category management:
- GET /categories - list categories with active product counts
- GET /categories/{id} - category details
- POST /categories - create a category (admin)
- PUT /categories/{id} - update a category (admin)
- PATCH /categories/{id}/toggle - flip the active flag (admin)
- DELETE /categories/{id} - delete with products and reviews (admin)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.api.middleware import get_auth_context
from shopcatalog.api.schemas import (
    CategoryCreateRequest,
    CategoryDeletedResponse,
    CategoryResponse,
    CategoryToggleResponse,
    CategoryUpdateRequest,
    ErrorResponse,
)
from shopcatalog.catalog.categories import CategoryManager
from shopcatalog.domain.access import AuthContext
from shopcatalog.infrastructure.database import get_session

router = APIRouter(prefix="/categories", tags=["Categories"])

ADMIN_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_manager(session: Annotated[AsyncSession, Depends(get_session)]) -> CategoryManager:
    """Get category manager bound to the request session."""
    return CategoryManager(session)


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="List categories",
    description="List all categories ordered by name with active product counts.",
)
async def list_categories(
    manager: Annotated[CategoryManager, Depends(get_manager)],
) -> list[CategoryResponse]:
    """List all categories."""
    categories = await manager.list_all()
    return [CategoryResponse(**c.to_dict()) for c in categories]


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category details",
)
async def get_category(
    category_id: int,
    manager: Annotated[CategoryManager, Depends(get_manager)],
) -> CategoryResponse:
    """Get a category by ID.

    Raises:
        NotFoundError: If category not found.
    """
    category = await manager.get(category_id)
    return CategoryResponse(**category.to_dict())


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**ADMIN_RESPONSES, 409: {"model": ErrorResponse}},
    summary="Create category",
)
async def create_category(
    request: CategoryCreateRequest,
    manager: Annotated[CategoryManager, Depends(get_manager)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> CategoryResponse:
    """Create a category with a case-insensitively unique name."""
    category = await manager.create(
        auth,
        name=request.name,
        description=request.description,
        image_url=request.image_url,
    )
    return CategoryResponse(**category.to_dict())


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Update category",
)
async def update_category(
    category_id: int,
    request: CategoryUpdateRequest,
    manager: Annotated[CategoryManager, Depends(get_manager)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> CategoryResponse:
    """Update the supplied fields of a category."""
    category = await manager.update(
        auth,
        category_id,
        name=request.name,
        description=request.description,
        image_url=request.image_url,
        is_active=request.is_active,
    )
    return CategoryResponse(**category.to_dict())


@router.patch(
    "/{category_id}/toggle",
    response_model=CategoryToggleResponse,
    responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponse}},
    summary="Toggle category status",
)
async def toggle_category(
    category_id: int,
    manager: Annotated[CategoryManager, Depends(get_manager)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> CategoryToggleResponse:
    """Flip a category between active and inactive."""
    is_active = await manager.toggle_active(auth, category_id)
    return CategoryToggleResponse(id=category_id, is_active=is_active)


@router.delete(
    "/{category_id}",
    response_model=CategoryDeletedResponse,
    responses={**ADMIN_RESPONSES, 404: {"model": ErrorResponse}},
    summary="Delete category",
    description="Delete a category together with all of its products and their reviews.",
)
async def delete_category(
    category_id: int,
    manager: Annotated[CategoryManager, Depends(get_manager)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> CategoryDeletedResponse:
    """Delete a category and everything that depends on it."""
    result = await manager.delete(auth, category_id)
    return CategoryDeletedResponse(
        message="Category and its products deleted",
        products_removed=result.products_removed,
        reviews_removed=result.reviews_removed,
    )

"""Review API endpoints.

Provides endpoints for product reviews:
- GET /products/{id}/reviews - reviews of a product, newest first
- POST /products/{id}/reviews - add a review (authenticated)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.api.middleware import get_auth_context
from shopcatalog.api.schemas import ErrorResponse, ReviewCreateRequest, ReviewResponse
from shopcatalog.catalog.reviews import ReviewCreate, ReviewManager
from shopcatalog.domain.access import AuthContext
from shopcatalog.infrastructure.database import get_session

router = APIRouter(prefix="/products/{product_id}/reviews", tags=["Reviews"])


def get_manager(session: Annotated[AsyncSession, Depends(get_session)]) -> ReviewManager:
    """Get review manager bound to the request session."""
    return ReviewManager(session)


@router.get("", response_model=list[ReviewResponse], summary="List product reviews")
async def list_reviews(
    product_id: int,
    manager: Annotated[ReviewManager, Depends(get_manager)],
) -> list[ReviewResponse]:
    """List reviews of a product, newest first."""
    reviews = await manager.list_reviews(product_id)
    return [ReviewResponse(**r.to_dict()) for r in reviews]


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Add review",
    description="Add a review and refresh the product's average rating.",
)
async def add_review(
    product_id: int,
    request: ReviewCreateRequest,
    manager: Annotated[ReviewManager, Depends(get_manager)],
    auth: Annotated[AuthContext, Depends(get_auth_context)],
) -> ReviewResponse:
    """Add a review to a product.

    Raises:
        AuthenticationError: If the caller is anonymous.
        NotFoundError: If the product is missing or inactive.
        AlreadyReviewedError: If the user already reviewed the product.
    """
    review = await manager.add_review(
        auth,
        product_id,
        ReviewCreate(
            user_id=request.user_id,
            username=request.username,
            rating=request.rating,
            comment=request.comment,
        ),
    )
    return ReviewResponse(**review.to_dict())

"""Customer reviews and product rating aggregation.

A review insert and the recompute of the product's denormalized rating
run in one transaction that holds a lock on the product row, so readers
never see a review count that disagrees with the stored reviews.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.catalog.models import Product, Review, utcnow
from shopcatalog.catalog.repository import ProductRepository, ReviewRepository
from shopcatalog.domain.access import AuthContext
from shopcatalog.domain.exceptions import AlreadyReviewedError, NotFoundError, ValidationError
from shopcatalog.infrastructure.database import transaction

logger = structlog.get_logger()

MIN_RATING = 1
MAX_RATING = 5
COMMENT_MAX_LENGTH = 1000
USERNAME_MAX_LENGTH = 100


@dataclass
class ReviewCreate:
    """Fields for a new review.

    ``user_id`` is taken from the payload as-is.
    """

    user_id: int
    username: str
    rating: int
    comment: str | None = None


@dataclass(frozen=True)
class RatingSummary:
    """Aggregate of a product's reviews."""

    rating: float
    review_count: int


class RatingAggregator:
    """Recomputes the denormalized rating of a product."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize aggregator with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.reviews = ReviewRepository(session)

    async def recompute(self, product: Product) -> RatingSummary:
        """Store the mean rating and review count on a product.

        Must run inside the caller's transaction.

        Args:
            product: Product whose reviews changed.

        Returns:
            The new summary.
        """
        count, average = await self.reviews.get_rating_summary(product.id)
        product.rating = average
        product.review_count = count
        product.updated_at = utcnow()
        return RatingSummary(rating=average, review_count=count)


class ReviewManager:
    """Service for review operations.

    Example usage:
        async with async_session_factory() as session:
            manager = ReviewManager(session)
            review = await manager.add_review(
                customer,
                product_id=42,
                data=ReviewCreate(user_id=7, username="ana", rating=4),
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize manager with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.products = ProductRepository(session)
        self.reviews = ReviewRepository(session)
        self.aggregator = RatingAggregator(session)

    async def add_review(
        self,
        auth: AuthContext,
        product_id: int,
        data: ReviewCreate,
    ) -> Review:
        """Add a review and refresh the product's rating.

        Args:
            auth: Caller context (authentication required).
            product_id: Reviewed product.
            data: Review fields.

        Returns:
            The created review.

        Raises:
            ValidationError: If rating, username or comment are invalid.
            NotFoundError: If the product is missing or inactive.
            AlreadyReviewedError: If the user already reviewed the product.
        """
        auth.require_authenticated()
        self._validate(data)

        async with transaction(self.session):
            product = await self.products.get_by_id(product_id, active_only=True, for_update=True)
            if product is None:
                raise NotFoundError("Product", product_id)

            if await self.reviews.get_by_product_and_user(product_id, data.user_id) is not None:
                raise AlreadyReviewedError(product_id, data.user_id)

            review = Review(
                product_id=product_id,
                user_id=data.user_id,
                username=data.username,
                rating=data.rating,
                comment=data.comment,
                created_at=utcnow(),
            )
            try:
                await self.reviews.save(review)
            except IntegrityError as e:
                # A concurrent request inserted the same (product, user) pair
                raise AlreadyReviewedError(product_id, data.user_id) from e

            summary = await self.aggregator.recompute(product)

        logger.info(
            "Review added",
            product_id=product_id,
            user_id=data.user_id,
            review_id=review.id,
            rating=summary.rating,
            review_count=summary.review_count,
        )
        return review

    async def list_reviews(self, product_id: int) -> Sequence[Review]:
        """Reviews of a product, newest first."""
        return await self.reviews.find_by_product(product_id)

    def _validate(self, data: ReviewCreate) -> None:
        if not MIN_RATING <= data.rating <= MAX_RATING:
            raise ValidationError("rating", f"must be between {MIN_RATING} and {MAX_RATING}")
        if not data.username or not data.username.strip():
            raise ValidationError("username", "is required")
        if len(data.username) > USERNAME_MAX_LENGTH:
            raise ValidationError("username", f"must be at most {USERNAME_MAX_LENGTH} characters")
        if data.comment is not None and len(data.comment) > COMMENT_MAX_LENGTH:
            raise ValidationError("comment", f"must be at most {COMMENT_MAX_LENGTH} characters")

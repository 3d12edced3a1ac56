"""Tests for reviews and rating aggregation."""

import pytest

from shopcatalog.catalog import ProductManager, ReviewCreate, ReviewManager
from shopcatalog.catalog.models import Product
from shopcatalog.domain.access import AuthContext
from shopcatalog.domain.exceptions import (
    AlreadyReviewedError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


class TestAddReview:
    """Tests for ReviewManager.add_review."""

    @pytest.mark.asyncio
    async def test_first_review_sets_rating(
        self,
        reviews: ReviewManager,
        products: ProductManager,
        customer: AuthContext,
        chips: Product,
    ) -> None:
        """A single review defines the rating."""
        review = await reviews.add_review(
            customer, chips.id, ReviewCreate(user_id=7, username="ana", rating=4, comment="Crunchy")
        )

        assert review.id is not None
        assert review.product_id == chips.id
        assert review.rating == 4
        assert review.comment == "Crunchy"
        assert review.created_at is not None
        assert review.updated_at is None

        product = await products.get(chips.id)
        assert product.rating == 4.0
        assert product.review_count == 1

    @pytest.mark.asyncio
    async def test_rating_is_mean_of_reviews(
        self,
        reviews: ReviewManager,
        products: ProductManager,
        customer: AuthContext,
        chips: Product,
    ) -> None:
        """The rating is the mean of every review."""
        for user_id, rating in ((1, 5), (2, 4), (3, 2)):
            await reviews.add_review(
                customer, chips.id, ReviewCreate(user_id=user_id, username=f"user{user_id}", rating=rating)
            )

        product = await products.get(chips.id)
        assert product.rating == pytest.approx(11 / 3)
        assert product.review_count == 3

    @pytest.mark.asyncio
    async def test_second_review_by_same_user_conflicts(
        self,
        reviews: ReviewManager,
        products: ProductManager,
        customer: AuthContext,
        chips: Product,
    ) -> None:
        """A user may review a product only once."""
        chips_id = chips.id
        await reviews.add_review(customer, chips_id, ReviewCreate(user_id=7, username="ana", rating=5))

        with pytest.raises(AlreadyReviewedError) as exc_info:
            await reviews.add_review(
                customer, chips_id, ReviewCreate(user_id=7, username="ana", rating=1)
            )
        assert isinstance(exc_info.value, ConflictError)

        product = await products.get(chips_id)
        assert product.rating == 5.0
        assert product.review_count == 1

    @pytest.mark.asyncio
    async def test_anonymous_rejected(
        self, reviews: ReviewManager, anonymous: AuthContext, chips: Product
    ) -> None:
        """Reviews require an authenticated caller."""
        with pytest.raises(AuthenticationError):
            await reviews.add_review(
                anonymous, chips.id, ReviewCreate(user_id=7, username="ana", rating=5)
            )

    @pytest.mark.asyncio
    async def test_inactive_product_rejected(
        self,
        reviews: ReviewManager,
        products: ProductManager,
        admin: AuthContext,
        customer: AuthContext,
        chips: Product,
    ) -> None:
        """Deleted products cannot be reviewed."""
        chips_id = chips.id
        await products.delete(admin, chips_id)

        with pytest.raises(NotFoundError):
            await reviews.add_review(
                customer, chips_id, ReviewCreate(user_id=7, username="ana", rating=5)
            )

    @pytest.mark.asyncio
    async def test_missing_product_rejected(
        self, reviews: ReviewManager, customer: AuthContext
    ) -> None:
        """Unknown products cannot be reviewed."""
        with pytest.raises(NotFoundError):
            await reviews.add_review(customer, 404, ReviewCreate(user_id=7, username="ana", rating=5))

    @pytest.mark.parametrize(
        "data, field",
        [
            (ReviewCreate(user_id=7, username="ana", rating=0), "rating"),
            (ReviewCreate(user_id=7, username="ana", rating=6), "rating"),
            (ReviewCreate(user_id=7, username="  ", rating=3), "username"),
            (ReviewCreate(user_id=7, username="ana", rating=3, comment="x" * 1001), "comment"),
        ],
    )
    @pytest.mark.asyncio
    async def test_invalid_input(
        self,
        reviews: ReviewManager,
        customer: AuthContext,
        chips: Product,
        data: ReviewCreate,
        field: str,
    ) -> None:
        """Invalid review fields raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            await reviews.add_review(customer, chips.id, data)
        assert exc_info.value.field == field


class TestListReviews:
    """Tests for ReviewManager.list_reviews."""

    @pytest.mark.asyncio
    async def test_newest_first(
        self, reviews: ReviewManager, customer: AuthContext, chips: Product
    ) -> None:
        """Reviews are listed newest first."""
        for user_id in (1, 2, 3):
            await reviews.add_review(
                customer, chips.id, ReviewCreate(user_id=user_id, username=f"user{user_id}", rating=3)
            )

        listed = await reviews.list_reviews(chips.id)
        assert [r.user_id for r in listed] == [3, 2, 1]

    @pytest.mark.asyncio
    async def test_unknown_product_has_no_reviews(self, reviews: ReviewManager) -> None:
        """Listing reviews of an unknown product is empty."""
        assert list(await reviews.list_reviews(404)) == []


class TestRatingAggregator:
    """Tests for RatingAggregator.recompute."""

    @pytest.mark.asyncio
    async def test_no_reviews_gives_zero(
        self, reviews: ReviewManager, chips: Product
    ) -> None:
        """Products without reviews have rating 0.0 and count 0."""
        summary = await reviews.aggregator.recompute(chips)

        assert summary.rating == 0.0
        assert summary.review_count == 0
        assert chips.rating == 0.0
        assert chips.review_count == 0

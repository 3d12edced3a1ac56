"""Catalog repositories for database operations.

Provides CRUD operations for categories, products and reviews, plus the
filtering and sorting used by product listings.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shopcatalog.catalog.models import Category, Product, Review

if TYPE_CHECKING:
    from shopcatalog.catalog.query import ProductFilter, SortOption


def _active_product_count() -> Any:
    """Correlated subquery counting a category's active products."""
    return (
        select(func.count(Product.id))
        .where(
            Product.category_id == Category.id,
            Product.is_active.is_(True),
        )
        .correlate(Category)
        .scalar_subquery()
    )


class CategoryRepository:
    """Repository for Category database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = CategoryRepository(session)
            categories = await repo.find_all(active_only=True)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, category: Category) -> Category:
        """Save a category to database.

        Args:
            category: Category to save.

        Returns:
            Saved category.
        """
        self.session.add(category)
        await self.session.flush()
        return category

    async def get_by_id(self, category_id: int) -> Category | None:
        """Get category by ID.

        Args:
            category_id: Category ID.

        Returns:
            Category if found, None otherwise.
        """
        return await self.session.get(Category, category_id)

    async def get_with_count(self, category_id: int) -> Category | None:
        """Get category by ID with its active product count.

        Args:
            category_id: Category ID.

        Returns:
            Category with ``product_count`` set, None if not found.
        """
        query = select(Category, _active_product_count().label("product_count")).where(
            Category.id == category_id
        )
        result = await self.session.execute(query)
        row = result.one_or_none()
        if row is None:
            return None
        category, count = row
        category.product_count = count
        return category

    async def find_by_name(
        self,
        name: str,
        exclude_id: int | None = None,
    ) -> Category | None:
        """Find a category by name, ignoring case.

        Args:
            name: Category name.
            exclude_id: Category ID to ignore (the one being renamed).

        Returns:
            Matching category, None otherwise.
        """
        query = select(Category).where(func.lower(Category.name) == name.lower())
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def find_all(self, active_only: bool = False) -> list[Category]:
        """List categories ordered by name with active product counts.

        Args:
            active_only: Only return active categories.

        Returns:
            Categories with ``product_count`` set.
        """
        query = select(Category, _active_product_count().label("product_count"))
        if active_only:
            query = query.where(Category.is_active.is_(True))
        query = query.order_by(Category.name)

        result = await self.session.execute(query)
        categories = []
        for category, count in result.all():
            category.product_count = count
            categories.append(category)
        return categories

    async def get_active_names(self) -> list[str]:
        """Get distinct names of active categories.

        Returns:
            Sorted list of names.
        """
        query = (
            select(Category.name)
            .where(Category.is_active.is_(True))
            .distinct()
            .order_by(Category.name)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def delete(self, category_id: int) -> None:
        """Delete a category row.

        Args:
            category_id: Category ID.
        """
        await self.session.execute(delete(Category).where(Category.id == category_id))


class ProductRepository:
    """Repository for Product database operations.

    Handles all database interactions for products including
    filtering, sorting, and pagination. Product rows are always
    returned with their category loaded.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, product: Product) -> Product:
        """Save a product to database.

        Args:
            product: Product to save.

        Returns:
            Saved product.
        """
        self.session.add(product)
        await self.session.flush()
        return product

    async def get_by_id(
        self,
        product_id: int,
        active_only: bool = False,
        for_update: bool = False,
    ) -> Product | None:
        """Get product by ID.

        Args:
            product_id: Product ID.
            active_only: Treat soft-deleted products as missing.
            for_update: Lock the row until the transaction ends.

        Returns:
            Product if found, None otherwise.
        """
        query = (
            select(Product)
            .where(Product.id == product_id)
            .options(selectinload(Product.category))
            .execution_options(populate_existing=True)
        )

        if active_only:
            query = query.where(Product.is_active.is_(True))

        if for_update:
            query = query.with_for_update()

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_active(
        self,
        category_id: int | None = None,
        category_name: str | None = None,
        featured_only: bool = False,
        limit: int | None = None,
    ) -> Sequence[Product]:
        """List active products, newest first.

        Args:
            category_id: Filter by linked category.
            category_name: Filter by cached category name.
            featured_only: Only featured products.
            limit: Maximum results.

        Returns:
            Sequence of matching products.
        """
        conditions = [Product.is_active.is_(True)]

        if category_id is not None:
            conditions.append(Product.category_id == category_id)

        if category_name is not None:
            conditions.append(Product.category_name == category_name)

        if featured_only:
            conditions.append(Product.is_featured.is_(True))

        query = (
            select(Product)
            .where(and_(*conditions))
            .order_by(Product.created_at.desc(), Product.id.desc())
            .options(selectinload(Product.category))
        )

        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def find_filtered(
        self,
        filters: "ProductFilter",
        sort_by: "SortOption",
        limit: int,
        offset: int,
    ) -> Sequence[Product]:
        """Find active products with filtering, sorting, and pagination.

        Args:
            filters: Filter parameters.
            sort_by: Sort option.
            limit: Maximum results.
            offset: Result offset for pagination.

        Returns:
            Sequence of matching products.
        """
        query = (
            select(Product)
            .where(and_(*self._filter_conditions(filters)))
            .order_by(self._get_sort_clause(sort_by), Product.id.desc())
            .limit(limit)
            .offset(offset)
            .options(selectinload(Product.category))
        )

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_filtered(self, filters: "ProductFilter") -> int:
        """Count active products matching filters.

        Args:
            filters: Filter parameters.

        Returns:
            Count of matching products.
        """
        query = select(func.count(Product.id)).where(and_(*self._filter_conditions(filters)))
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_brands(self) -> list[str]:
        """Get list of unique brands of active products.

        Returns:
            Sorted list of brand names.
        """
        query = (
            select(Product.brand)
            .where(Product.is_active.is_(True))
            .distinct()
            .order_by(Product.brand)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_ids_in_category(self, category_id: int) -> list[int]:
        """Get IDs of every product linked to a category, active or not.

        Args:
            category_id: Category ID.

        Returns:
            List of product IDs.
        """
        query = select(Product.id).where(Product.category_id == category_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def delete_in_category(self, category_id: int) -> int:
        """Physically delete every product linked to a category.

        Args:
            category_id: Category ID.

        Returns:
            Number of deleted products.
        """
        result = await self.session.execute(
            delete(Product).where(Product.category_id == category_id)
        )
        return result.rowcount

    async def set_category_name(self, category_id: int, category_name: str) -> int:
        """Re-sync the cached category name of linked products.

        Args:
            category_id: Category ID.
            category_name: New category name.

        Returns:
            Number of updated products.
        """
        result = await self.session.execute(
            update(Product)
            .where(Product.category_id == category_id)
            .values(category_name=category_name)
        )
        return result.rowcount

    def _filter_conditions(self, filters: "ProductFilter") -> list[Any]:
        """Build filter conditions shared by listing and counting.

        Args:
            filters: Filter parameters.

        Returns:
            List of SQLAlchemy conditions.
        """
        conditions: list[Any] = [Product.is_active.is_(True)]

        if filters.search:
            # % and _ in the search text match literally
            conditions.append(
                or_(
                    Product.name.icontains(filters.search, autoescape=True),
                    Product.description.icontains(filters.search, autoescape=True),
                    Product.tags.icontains(filters.search, autoescape=True),
                )
            )

        # Category ID takes precedence over category name
        if filters.category_id is not None:
            conditions.append(Product.category_id == filters.category_id)
        elif filters.category_name:
            conditions.append(Product.category_name == filters.category_name)

        if filters.brand:
            conditions.append(Product.brand == filters.brand)

        if filters.min_price is not None:
            conditions.append(Product.price >= filters.min_price)

        if filters.max_price is not None:
            conditions.append(Product.price <= filters.max_price)

        if filters.is_featured is not None:
            conditions.append(Product.is_featured.is_(filters.is_featured))

        if filters.on_discount:
            conditions.append(Product.discount_price.is_not(None))

        if filters.in_stock:
            conditions.append(Product.stock > 0)

        return conditions

    def _get_sort_clause(self, sort_by: "SortOption") -> Any:
        """Get SQLAlchemy order clause for a sort option.

        Args:
            sort_by: Sort option.

        Returns:
            SQLAlchemy order clause.
        """
        clauses = {
            "price_asc": Product.price.asc(),
            "price_desc": Product.price.desc(),
            "rating": Product.rating.desc(),
            "newest": Product.created_at.desc(),
        }
        return clauses.get(sort_by.value, Product.created_at.desc())


class ReviewRepository:
    """Repository for Review database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, review: Review) -> Review:
        """Save a review to database.

        Args:
            review: Review to save.

        Returns:
            Saved review.
        """
        self.session.add(review)
        await self.session.flush()
        return review

    async def get_by_product_and_user(self, product_id: int, user_id: int) -> Review | None:
        """Get a user's review of a product.

        Args:
            product_id: Product ID.
            user_id: User ID.

        Returns:
            Review if found, None otherwise.
        """
        query = select(Review).where(
            and_(
                Review.product_id == product_id,
                Review.user_id == user_id,
            )
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def find_by_product(self, product_id: int) -> Sequence[Review]:
        """List reviews of a product, newest first.

        Args:
            product_id: Product ID.

        Returns:
            Sequence of reviews.
        """
        query = (
            select(Review)
            .where(Review.product_id == product_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_rating_summary(self, product_id: int) -> tuple[int, float]:
        """Aggregate the ratings of a product.

        Args:
            product_id: Product ID.

        Returns:
            Tuple of (review count, average rating). Average is 0.0
            when there are no reviews.
        """
        query = select(func.count(Review.id), func.avg(Review.rating)).where(
            Review.product_id == product_id
        )
        result = await self.session.execute(query)
        count, average = result.one()
        return count, float(average) if average is not None else 0.0

    async def delete_for_products(self, product_ids: list[int]) -> int:
        """Delete every review of the given products.

        Args:
            product_ids: Product IDs.

        Returns:
            Number of deleted reviews.
        """
        if not product_ids:
            return 0
        result = await self.session.execute(
            delete(Review).where(Review.product_id.in_(product_ids))
        )
        return result.rowcount

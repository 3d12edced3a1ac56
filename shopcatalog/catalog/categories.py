"""Category management.

CRUD over categories, including the cascading removal of a category's
products and their reviews.
"""

from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopcatalog.catalog.models import Category
from shopcatalog.catalog.repository import (
    CategoryRepository,
    ProductRepository,
    ReviewRepository,
)
from shopcatalog.domain.access import AuthContext
from shopcatalog.domain.exceptions import DuplicateNameError, NotFoundError, ValidationError
from shopcatalog.infrastructure.config import settings
from shopcatalog.infrastructure.database import transaction

logger = structlog.get_logger()

NAME_MAX_LENGTH = 50
TEXT_MAX_LENGTH = 200


@dataclass
class CategoryDeletion:
    """Result of a cascading category delete."""

    category_id: int
    products_removed: int
    reviews_removed: int


def _check_length(field: str, value: str | None, max_length: int) -> None:
    if value is not None and len(value) > max_length:
        raise ValidationError(field, f"must be at most {max_length} characters")


class CategoryManager:
    """Service for category operations.

    Mutating operations require the admin role on the supplied
    AuthContext.

    Example usage:
        async with async_session_factory() as session:
            manager = CategoryManager(session)
            snacks = await manager.create(admin, "Snacks")
            await manager.delete(admin, snacks.id)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize manager with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.categories = CategoryRepository(session)
        self.products = ProductRepository(session)
        self.reviews = ReviewRepository(session)

    async def create(
        self,
        auth: AuthContext,
        name: str,
        description: str | None = None,
        image_url: str | None = None,
    ) -> Category:
        """Create a category.

        Args:
            auth: Caller context (admin required).
            name: Category name, unique ignoring case.
            description: Optional description.
            image_url: Optional image URL.

        Returns:
            The new category with a product count of 0.

        Raises:
            ValidationError: If the name is blank or too long.
            DuplicateNameError: If the name is already taken.
        """
        auth.require_role(settings.admin_role)

        if not name or not name.strip():
            raise ValidationError("name", "is required")
        _check_length("name", name, NAME_MAX_LENGTH)
        _check_length("description", description, TEXT_MAX_LENGTH)
        _check_length("image_url", image_url, TEXT_MAX_LENGTH)

        async with transaction(self.session):
            if await self.categories.find_by_name(name) is not None:
                raise DuplicateNameError(name)

            category = Category(
                name=name,
                description=description,
                image_url=image_url,
                is_active=True,
            )
            try:
                await self.categories.save(category)
            except IntegrityError as e:
                # A concurrent request took the name after the lookup
                raise DuplicateNameError(name) from e

        category.product_count = 0
        logger.info("Category created", category_id=category.id, category_name=category.name)
        return category

    async def get(self, category_id: int) -> Category:
        """Get a category with its active product count.

        Args:
            category_id: Category ID.

        Returns:
            The category.

        Raises:
            NotFoundError: If the category does not exist.
        """
        category = await self.categories.get_with_count(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    async def list_all(self) -> list[Category]:
        """List all categories ordered by name."""
        return await self.categories.find_all()

    async def list_active(self) -> list[Category]:
        """List active categories ordered by name."""
        return await self.categories.find_all(active_only=True)

    async def active_names(self) -> list[str]:
        """Names of active categories, sorted."""
        return await self.categories.get_active_names()

    async def update(
        self,
        auth: AuthContext,
        category_id: int,
        name: str | None = None,
        description: str | None = None,
        image_url: str | None = None,
        is_active: bool | None = None,
    ) -> Category:
        """Update supplied category fields.

        An empty or missing name leaves the name unchanged; None leaves
        the other fields unchanged. Renaming also refreshes the cached
        category name of linked products.

        Args:
            auth: Caller context (admin required).
            category_id: Category ID.
            name: New name.
            description: New description.
            image_url: New image URL.
            is_active: New active flag.

        Returns:
            The updated category with its product count.

        Raises:
            NotFoundError: If the category does not exist.
            DuplicateNameError: If the new name is taken by another category.
        """
        auth.require_role(settings.admin_role)

        _check_length("name", name, NAME_MAX_LENGTH)
        _check_length("description", description, TEXT_MAX_LENGTH)
        _check_length("image_url", image_url, TEXT_MAX_LENGTH)

        async with transaction(self.session):
            category = await self.categories.get_by_id(category_id)
            if category is None:
                raise NotFoundError("Category", category_id)

            renamed = bool(name) and name != category.name
            if renamed and not name.strip():
                raise ValidationError("name", "must not be blank")
            if renamed:
                if await self.categories.find_by_name(name, exclude_id=category_id) is not None:
                    raise DuplicateNameError(name)
                category.name = name
                try:
                    await self.categories.save(category)
                except IntegrityError as e:
                    raise DuplicateNameError(name) from e
                await self.products.set_category_name(category_id, name)

            if description is not None:
                category.description = description
            if image_url is not None:
                category.image_url = image_url
            if is_active is not None:
                category.is_active = is_active

            await self.categories.save(category)

        logger.info("Category updated", category_id=category_id, renamed=renamed)
        return await self.get(category_id)

    async def toggle_active(self, auth: AuthContext, category_id: int) -> bool:
        """Flip a category's active flag.

        Args:
            auth: Caller context (admin required).
            category_id: Category ID.

        Returns:
            The new active state.

        Raises:
            NotFoundError: If the category does not exist.
        """
        auth.require_role(settings.admin_role)

        async with transaction(self.session):
            category = await self.categories.get_by_id(category_id)
            if category is None:
                raise NotFoundError("Category", category_id)
            category.is_active = not category.is_active
            await self.categories.save(category)

        logger.info(
            "Category status toggled",
            category_id=category_id,
            is_active=category.is_active,
        )
        return category.is_active

    async def delete(self, auth: AuthContext, category_id: int) -> CategoryDeletion:
        """Delete a category with all of its products and their reviews.

        Products are removed physically whether active or not. Reviews,
        products and the category go in that order within one
        transaction.

        Args:
            auth: Caller context (admin required).
            category_id: Category ID.

        Returns:
            Counts of removed rows.

        Raises:
            NotFoundError: If the category does not exist.
        """
        auth.require_role(settings.admin_role)

        async with transaction(self.session):
            category = await self.categories.get_by_id(category_id)
            if category is None:
                raise NotFoundError("Category", category_id)

            product_ids = await self.products.get_ids_in_category(category_id)
            reviews_removed = await self.reviews.delete_for_products(product_ids)
            products_removed = await self.products.delete_in_category(category_id)
            await self.categories.delete(category_id)

        logger.info(
            "Category deleted",
            category_id=category_id,
            products_removed=products_removed,
            reviews_removed=reviews_removed,
        )
        return CategoryDeletion(
            category_id=category_id,
            products_removed=products_removed,
            reviews_removed=reviews_removed,
        )

"""Tests for product management."""

from decimal import Decimal

import pytest

from shopcatalog.catalog import CategoryManager, ProductCreate, ProductManager, ProductUpdate
from shopcatalog.catalog.models import Category, Product
from shopcatalog.domain.access import AuthContext
from shopcatalog.domain.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class TestCreateProduct:
    """Tests for ProductManager.create."""

    @pytest.mark.asyncio
    async def test_defaults(self, products: ProductManager, admin: AuthContext) -> None:
        """Omitted fields take their catalog defaults."""
        product = await products.create(admin, ProductCreate(name="Mug", price=Decimal("7.50")))

        assert product.stock == 0
        assert product.brand == "Generic"
        assert product.category_name == "General"
        assert product.category_id is None
        assert product.is_featured is False
        assert product.is_active is True
        assert product.rating == 0.0
        assert product.review_count == 0
        assert product.created_at is not None
        assert product.updated_at is not None

    @pytest.mark.asyncio
    async def test_category_id_copies_category_name(
        self, chips: Product, snacks: Category
    ) -> None:
        """Linking a category caches its name and exposes its image."""
        assert chips.category_id == snacks.id
        assert chips.category_name == "Snacks"
        assert chips.category is not None
        assert chips.category_image_url == snacks.image_url

    @pytest.mark.asyncio
    async def test_category_name_only_keeps_literal(
        self, products: ProductManager, admin: AuthContext
    ) -> None:
        """A bare category name is stored without a link."""
        product = await products.create(
            admin, ProductCreate(name="Soda", price=Decimal("5.00"), category_name="Drinks")
        )

        assert product.category_name == "Drinks"
        assert product.category_id is None
        assert product.category_image_url is None

    @pytest.mark.asyncio
    async def test_unknown_category_id(
        self, products: ProductManager, admin: AuthContext
    ) -> None:
        """Linking a missing category raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            await products.create(
                admin, ProductCreate(name="Soda", price=Decimal("5.00"), category_id=99)
            )
        assert exc_info.value.entity_type == "Category"

    @pytest.mark.parametrize(
        "data, field",
        [
            (ProductCreate(name="Free", price=Decimal("0")), "price"),
            (ProductCreate(name="Owed", price=Decimal("-1")), "price"),
            (ProductCreate(name="Ghost", price=Decimal("1"), stock=-1), "stock"),
            (
                ProductCreate(name="Odd", price=Decimal("1"), discount_price=Decimal("0")),
                "discount_price",
            ),
            (ProductCreate(name=" ", price=Decimal("1")), "name"),
        ],
    )
    @pytest.mark.asyncio
    async def test_invalid_input(
        self,
        products: ProductManager,
        admin: AuthContext,
        data: ProductCreate,
        field: str,
    ) -> None:
        """Invalid fields raise ValidationError naming the field."""
        with pytest.raises(ValidationError) as exc_info:
            await products.create(admin, data)
        assert exc_info.value.field == field

    @pytest.mark.asyncio
    async def test_requires_admin(
        self,
        products: ProductManager,
        customer: AuthContext,
        anonymous: AuthContext,
    ) -> None:
        """Only administrators may create products."""
        data = ProductCreate(name="Mug", price=Decimal("7.50"))
        with pytest.raises(PermissionDeniedError):
            await products.create(customer, data)
        with pytest.raises(AuthenticationError):
            await products.create(anonymous, data)


class TestPricing:
    """Tests for derived price fields."""

    def test_discount_fields(self) -> None:
        """Discounted products expose the discount price and percentage."""
        product = Product(price=Decimal("80.00"), discount_price=Decimal("60.00"))

        assert product.has_discount is True
        assert product.final_price == Decimal("60.00")
        assert product.discount_percentage == 25

    def test_without_discount(self) -> None:
        """Undiscounted products sell at their regular price."""
        product = Product(price=Decimal("80.00"), discount_price=None)

        assert product.has_discount is False
        assert product.final_price == Decimal("80.00")
        assert product.discount_percentage == 0

    def test_percentage_is_rounded(self) -> None:
        """Percentages are rounded to whole numbers."""
        product = Product(price=Decimal("3.00"), discount_price=Decimal("2.00"))
        assert product.discount_percentage == 33


class TestUpdateProduct:
    """Tests for ProductManager.update."""

    @pytest.mark.asyncio
    async def test_partial_update(
        self, products: ProductManager, admin: AuthContext, chips: Product
    ) -> None:
        """Empty strings and None leave regular fields unchanged."""
        updated = await products.update(
            admin, chips.id, ProductUpdate(name="", price=Decimal("12.00"), brand=None)
        )

        assert updated.name == "Chips"
        assert updated.price == Decimal("12.00")
        assert updated.brand == "Generic"
        assert updated.stock == 5

    @pytest.mark.asyncio
    async def test_omitted_clearable_fields_are_cleared(
        self, products: ProductManager, admin: AuthContext
    ) -> None:
        """discount_price, color and friends are cleared when left out."""
        product = await products.create(
            admin,
            ProductCreate(
                name="Shirt",
                price=Decimal("20.00"),
                discount_price=Decimal("15.00"),
                color="Red",
                size="M",
                material="Cotton",
                sku="SH-1",
                tags="summer",
            ),
        )

        updated = await products.update(admin, product.id, ProductUpdate(name="Shirt v2"))

        assert updated.name == "Shirt v2"
        assert updated.discount_price is None
        assert updated.color is None
        assert updated.size is None
        assert updated.material is None
        assert updated.sku is None
        assert updated.tags is None

    @pytest.mark.asyncio
    async def test_move_to_other_category(
        self,
        products: ProductManager,
        categories: CategoryManager,
        admin: AuthContext,
        chips: Product,
    ) -> None:
        """Changing category_id re-syncs the cached name."""
        drinks = await categories.create(admin, "Drinks", image_url="http://img/drinks.png")

        updated = await products.update(admin, chips.id, ProductUpdate(category_id=drinks.id))

        assert updated.category_id == drinks.id
        assert updated.category_name == "Drinks"
        assert updated.category_image_url == "http://img/drinks.png"

    @pytest.mark.asyncio
    async def test_name_only_change_keeps_link(
        self, products: ProductManager, admin: AuthContext, chips: Product, snacks: Category
    ) -> None:
        """A category name without an ID only changes the cached name."""
        chips_id = chips.id
        snacks_id = snacks.id

        updated = await products.update(admin, chips_id, ProductUpdate(category_name="Crisps"))

        assert updated.category_name == "Crisps"
        assert updated.category_id == snacks_id

    @pytest.mark.asyncio
    async def test_move_to_missing_category(
        self, products: ProductManager, admin: AuthContext, chips: Product
    ) -> None:
        """Moving to an unknown category raises NotFoundError."""
        chips_id = chips.id

        with pytest.raises(NotFoundError):
            await products.update(admin, chips_id, ProductUpdate(category_id=404))

        assert (await products.get(chips_id)).category_name == "Snacks"

    @pytest.mark.asyncio
    async def test_update_missing_product(
        self, products: ProductManager, admin: AuthContext
    ) -> None:
        """Updating an unknown product raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await products.update(admin, 404, ProductUpdate(name="x"))

    @pytest.mark.asyncio
    async def test_update_requires_admin(
        self, products: ProductManager, customer: AuthContext, chips: Product
    ) -> None:
        """Customers cannot update products."""
        with pytest.raises(PermissionDeniedError):
            await products.update(customer, chips.id, ProductUpdate(name="Hacked"))


class TestDeleteAndStock:
    """Tests for soft delete and stock updates."""

    @pytest.mark.asyncio
    async def test_soft_delete_hides_product(
        self, products: ProductManager, admin: AuthContext, chips: Product
    ) -> None:
        """Deleted products disappear from reads but keep their row."""
        chips_id = chips.id

        await products.delete(admin, chips_id)

        with pytest.raises(NotFoundError):
            await products.get(chips_id)
        assert await products.list_all() == []
        stored = await products.products.get_by_id(chips_id)
        assert stored is not None
        assert stored.is_active is False

    @pytest.mark.asyncio
    async def test_delete_missing_product(
        self, products: ProductManager, admin: AuthContext
    ) -> None:
        """Deleting an unknown product raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await products.delete(admin, 404)

    @pytest.mark.asyncio
    async def test_stock_is_overwritten(
        self, products: ProductManager, admin: AuthContext, chips: Product
    ) -> None:
        """update_stock sets the level rather than adding to it."""
        updated = await products.update_stock(admin, chips.id, 3)
        assert updated.stock == 3

        updated = await products.update_stock(admin, chips.id, 0)
        assert updated.stock == 0

    @pytest.mark.asyncio
    async def test_negative_stock_rejected(
        self, products: ProductManager, admin: AuthContext, chips: Product
    ) -> None:
        """Negative stock levels are invalid."""
        with pytest.raises(ValidationError):
            await products.update_stock(admin, chips.id, -1)


class TestProductListings:
    """Tests for the listing helpers."""

    @pytest.mark.asyncio
    async def test_listings_newest_first(
        self, products: ProductManager, admin: AuthContext
    ) -> None:
        """Listings return newest products first."""
        for name in ("First", "Second", "Third"):
            await products.create(admin, ProductCreate(name=name, price=Decimal("1.00")))

        assert [p.name for p in await products.list_all()] == ["Third", "Second", "First"]

    @pytest.mark.asyncio
    async def test_featured_respects_count(
        self, products: ProductManager, admin: AuthContext
    ) -> None:
        """Only featured products are returned, up to the count."""
        for i in range(10):
            await products.create(
                admin,
                ProductCreate(name=f"Item {i}", price=Decimal("1.00"), is_featured=i % 2 == 0),
            )

        featured = await products.list_featured(count=3)
        assert [p.name for p in featured] == ["Item 8", "Item 6", "Item 4"]
        assert len(await products.list_featured()) == 5

    @pytest.mark.asyncio
    async def test_by_category(
        self, products: ProductManager, admin: AuthContext, chips: Product, snacks: Category
    ) -> None:
        """Products can be listed by category ID or cached name."""
        await products.create(
            admin, ProductCreate(name="Soda", price=Decimal("5.00"), category_name="Drinks")
        )

        assert [p.name for p in await products.list_by_category_id(snacks.id)] == ["Chips"]
        assert [p.name for p in await products.list_by_category_name("Drinks")] == ["Soda"]
        assert await products.list_by_category_name("drinks") == []

    @pytest.mark.asyncio
    async def test_brands_are_distinct_and_sorted(
        self, products: ProductManager, admin: AuthContext
    ) -> None:
        """Brands of active products only, without duplicates."""
        for name, brand in (("A", "Zeta"), ("B", "Acme"), ("C", "Acme"), ("D", "Hidden")):
            product = await products.create(
                admin, ProductCreate(name=name, price=Decimal("1.00"), brand=brand)
            )
            if brand == "Hidden":
                await products.delete(admin, product.id)

        assert await products.list_brands() == ["Acme", "Zeta"]

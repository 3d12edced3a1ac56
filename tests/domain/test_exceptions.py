"""Tests for domain exceptions."""

from shopcatalog.domain.exceptions import (
    AlreadyReviewedError,
    AuthenticationError,
    CatalogError,
    ConflictError,
    DuplicateNameError,
    NotFoundError,
    PermissionDeniedError,
    StoreError,
    ValidationError,
)


class TestCatalogErrors:
    """Tests for the exception hierarchy."""

    def test_all_errors_are_catalog_errors(self) -> None:
        """Every domain error derives from CatalogError."""
        errors = [
            NotFoundError("Product", 1),
            DuplicateNameError("Snacks"),
            AlreadyReviewedError(1, 2),
            ConflictError("taken"),
            ValidationError("price", "must be greater than zero"),
            AuthenticationError(),
            PermissionDeniedError("Admin"),
            StoreError("down"),
        ]
        assert all(isinstance(e, CatalogError) for e in errors)

    def test_uniqueness_errors_are_conflicts(self) -> None:
        """Duplicate names and repeat reviews are conflicts."""
        assert isinstance(DuplicateNameError("Snacks"), ConflictError)
        assert isinstance(AlreadyReviewedError(1, 2), ConflictError)

    def test_not_found_details(self) -> None:
        """Not-found errors carry entity type and ID."""
        error = NotFoundError("Category", 5)

        assert error.message == "Category 5 not found"
        assert error.details == {"entity_type": "Category", "entity_id": 5}

    def test_validation_error_names_field(self) -> None:
        """Validation errors carry the field and reason."""
        error = ValidationError("stock", "must not be negative")

        assert error.field == "stock"
        assert error.details["reason"] == "must not be negative"
        assert "stock" in str(error)

    def test_details_default_to_empty(self) -> None:
        """Errors without details expose an empty mapping."""
        assert StoreError("down").details == {}

"""Domain exceptions.

All catalog-level errors. They are raised synchronously by the component
that detects the condition and surfaced to the transport layer unmodified.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions.

    All catalog errors should inherit from this class to allow
    catching domain-specific errors at the API layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Lookup Errors
# ============================================================================


class NotFoundError(CatalogError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Category", "Product").
            entity_id: ID of the missing entity.
        """
        super().__init__(
            f"{entity_type} {entity_id} not found",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


# ============================================================================
# Uniqueness Errors
# ============================================================================


class ConflictError(CatalogError):
    """Raised when the target of a write already exists."""

    pass


class DuplicateNameError(ConflictError):
    """Raised when a category name collides case-insensitively."""

    def __init__(self, name: str) -> None:
        """Initialize duplicate name error.

        Args:
            name: The conflicting category name.
        """
        super().__init__(
            f"Category '{name}' already exists",
            details={"name": name},
        )


class AlreadyReviewedError(ConflictError):
    """Raised when a user reviews the same product twice."""

    def __init__(self, product_id: int, user_id: int) -> None:
        """Initialize already reviewed error.

        Args:
            product_id: ID of the reviewed product.
            user_id: ID of the reviewing user.
        """
        super().__init__(
            f"User {user_id} has already reviewed product {product_id}",
            details={"product_id": product_id, "user_id": user_id},
        )


# ============================================================================
# Input Errors
# ============================================================================


class ValidationError(CatalogError):
    """Raised when operation input is malformed."""

    def __init__(self, field: str, reason: str) -> None:
        """Initialize validation error.

        Args:
            field: Name of the offending field.
            reason: Explanation of why the value is invalid.
        """
        super().__init__(
            f"Invalid {field}: {reason}",
            details={"field": field, "reason": reason},
        )
        self.field = field


# ============================================================================
# Access Errors
# ============================================================================


class AuthenticationError(CatalogError):
    """Raised when an operation requires an authenticated caller."""

    def __init__(self) -> None:
        """Initialize authentication error."""
        super().__init__("Authentication required")


class PermissionDeniedError(CatalogError):
    """Raised when the caller lacks the role an operation requires."""

    def __init__(self, required_role: str) -> None:
        """Initialize permission denied error.

        Args:
            required_role: Role the operation requires.
        """
        super().__init__(
            f"Role '{required_role}' required",
            details={"required_role": required_role},
        )


# ============================================================================
# Store Errors
# ============================================================================


class StoreError(CatalogError):
    """Raised when the underlying persistence layer fails."""

    pass

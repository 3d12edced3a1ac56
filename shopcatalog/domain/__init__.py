"""Domain layer - caller access context and catalog exceptions.

Example usage:
    from shopcatalog.domain import AuthContext, NotFoundError

    auth = AuthContext(authenticated=True, user_id=7, role="Admin")
    auth.require_role("Admin")
"""

from shopcatalog.domain.access import AuthContext
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

__all__ = [
    # Access
    "AuthContext",
    # Exceptions
    "AlreadyReviewedError",
    "AuthenticationError",
    "CatalogError",
    "ConflictError",
    "DuplicateNameError",
    "NotFoundError",
    "PermissionDeniedError",
    "StoreError",
    "ValidationError",
]

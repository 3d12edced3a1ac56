"""Caller authorization context.

The identity service authenticates callers; the catalog only asks whether
a caller is authenticated and whether it holds a given role.
"""

from dataclasses import dataclass

from shopcatalog.domain.exceptions import AuthenticationError, PermissionDeniedError


@dataclass(frozen=True)
class AuthContext:
    """Authorization decision inputs for a single request.

    Attributes:
        authenticated: Whether the caller presented valid credentials.
        user_id: Caller's user identifier, if known.
        username: Caller's username, if known.
        role: Caller's role (e.g., "Admin", "Customer").
    """

    authenticated: bool = False
    user_id: int | None = None
    username: str | None = None
    role: str | None = None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        """Create an unauthenticated context."""
        return cls()

    def has_role(self, role: str) -> bool:
        """Check whether the caller is authenticated with the given role."""
        return self.authenticated and self.role == role

    def require_authenticated(self) -> None:
        """Ensure the caller is authenticated.

        Raises:
            AuthenticationError: If the caller is anonymous.
        """
        if not self.authenticated:
            raise AuthenticationError()

    def require_role(self, role: str) -> None:
        """Ensure the caller holds a role.

        Args:
            role: Required role.

        Raises:
            AuthenticationError: If the caller is anonymous.
            PermissionDeniedError: If the caller holds another role.
        """
        self.require_authenticated()
        if not self.has_role(role):
            raise PermissionDeniedError(role)

"""Domain exceptions.

All catalog-level errors that represent rule violations or failures of
the backing stores. Repositories, the asset store gateway and the catalog
synchronizer raise these; the API layer maps them to HTTP responses.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Catalog Errors
# ============================================================================


class CatalogError(DomainError):
    """Base class for catalog-related errors."""

    pass


class ValidationError(CatalogError):
    """Raised when client-supplied data violates a precondition.

    Recoverable: the user must correct the named field and resubmit.
    """

    def __init__(self, field: str, reason: str) -> None:
        """Initialize validation error.

        Args:
            field: Name of the first field that failed validation.
            reason: Explanation of why the value was rejected.
        """
        super().__init__(
            f"Invalid {field}: {reason}",
            details={"field": field, "reason": reason},
        )
        self.field = field
        self.reason = reason


class ConflictError(CatalogError):
    """Raised when a write would violate a uniqueness rule."""

    def __init__(self, entity_type: str, field: str, value: str) -> None:
        """Initialize conflict error.

        Args:
            entity_type: Type of entity (e.g., "Category").
            field: Unique field that collided.
            value: The colliding value.
        """
        super().__init__(
            f"{entity_type} with {field} '{value}' already exists",
            details={"entity_type": entity_type, "field": field, "value": value},
        )


class NotFoundError(CatalogError):
    """Raised when an operation targets a nonexistent identifier.

    Usually means the caller's cached view is stale; it should re-fetch
    and retry the user's intent.
    """

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Product").
            entity_id: The identifier that was not found.
        """
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class StorageError(CatalogError):
    """Raised when the relational or object store reports a failure.

    Not retried by the catalog; surfaced verbatim to the caller.
    """

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize storage error.

        Args:
            operation: The store operation that failed.
            reason: Message reported by the underlying transport.
        """
        super().__init__(
            f"Storage operation '{operation}' failed: {reason}",
            details={"operation": operation, "reason": reason},
        )


class UploadError(StorageError):
    """Raised when an image upload to the object store fails."""

    def __init__(self, filename: str, reason: str) -> None:
        """Initialize upload error.

        Args:
            filename: Original name of the file being uploaded.
            reason: Message reported by the object store.
        """
        super().__init__("upload", reason)
        self.message = f"Upload of '{filename}' failed: {reason}"
        self.args = (self.message,)
        self.details["filename"] = filename


# ============================================================================
# Authorization Errors
# ============================================================================


class AuthorizationError(DomainError):
    """Raised when a write is attempted without an admin capability."""

    def __init__(self, operation: str) -> None:
        """Initialize authorization error.

        Args:
            operation: The write operation that was refused.
        """
        super().__init__(
            f"Admin session required for '{operation}'",
            details={"operation": operation},
        )

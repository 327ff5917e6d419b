"""
Custom exceptions for media filters.

Backends and the filters core raise these exceptions so callers can
apply one error policy regardless of which store is in use.
"""


class FiltersError(Exception):
    """Base exception for all media filters errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotAContainerError(FiltersError):
    """Raised when a scan root cannot list child items.

    This is a contract violation by the caller (an item id outside the
    container types was used as a scope), not a recoverable condition.
    """

    def __init__(self, item_id: str, item_type: str | None = None):
        details = {"item_id": item_id}
        if item_type:
            details["item_type"] = item_type
        message = f"Item is not a container: {item_id}"
        if item_type:
            message += f" ({item_type})"
        super().__init__(message, details)
        self.item_id = item_id
        self.item_type = item_type


class StorageIOError(FiltersError):
    """Raised when a storage I/O operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Storage I/O error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class StorageConnectionError(FiltersError):
    """Raised when a connection to the backing database fails.

    Note: Named StorageConnectionError to avoid shadowing the builtin ConnectionError.
    """

    def __init__(self, endpoint: str, cause: Exception | None = None):
        details = {"endpoint": endpoint}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Connection failed to {endpoint}", details)
        self.endpoint = endpoint
        self.cause = cause


class SnapshotError(FiltersError):
    """Raised when a library snapshot cannot be read or is malformed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Invalid library snapshot {path}: {reason}",
            {"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason


class ValidationError(FiltersError):
    """Raised when request parameter validation fails."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value

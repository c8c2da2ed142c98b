"""
Custom exceptions for the block service.

All store and resolver implementations should raise these exceptions
so the HTTP layer can map them to status codes consistently.
"""


class BlockServiceError(Exception):
    """Base exception for all block service errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StorageError(BlockServiceError):
    """Raised when a store or resolver backend fails."""


class NotFoundError(StorageError):
    """Raised when a CID or name has no associated value."""


class BlockNotFoundError(NotFoundError):
    """Raised when no block is stored under a CID."""

    def __init__(self, cid: str):
        super().__init__(f"Block not found for {cid}", {"cid": cid})
        self.cid = cid


class NameNotFoundError(NotFoundError):
    """Raised when a name has never been associated with a CID."""

    def __init__(self, name: str):
        super().__init__(f"Block not found for name: {name}", {"name": name})
        self.name = name


class StorageIOError(StorageError):
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


class StorageConnectionError(StorageError):
    """Raised when a storage backend cannot be opened.

    Note: Named StorageConnectionError to avoid shadowing the builtin ConnectionError.
    """

    def __init__(self, endpoint: str, cause: Exception | None = None):
        details = {"endpoint": endpoint}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Connection failed to {endpoint}", details)
        self.endpoint = endpoint
        self.cause = cause


class MalformedRequestError(BlockServiceError):
    """Raised when a request is missing a required query parameter."""

    def __init__(self, parameter: str, reason: str = "missing"):
        super().__init__(
            f"Malformed request: parameter {parameter!r} is {reason}",
            {"parameter": parameter, "reason": reason},
        )
        self.parameter = parameter
        self.reason = reason


class ServiceStateError(BlockServiceError):
    """Raised when the service lifecycle is driven out of order."""

    def __init__(self, operation: str, state: str):
        super().__init__(
            f"Cannot {operation} a service in state {state}",
            {"operation": operation, "state": state},
        )
        self.operation = operation
        self.state = state


class ConfigurationError(BlockServiceError):
    """Raised when a configuration value is invalid."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Invalid configuration for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value

"""Exception classes for the cache package."""


class CacheError(Exception):
    """Base exception for cache errors."""

    pass


class ConfigurationError(CacheError, ValueError):
    """Raised when the cache configuration is missing or invalid."""

    pass


class CacheConnectionError(CacheError):
    """Raised when a database backend cannot open its connection."""

    def __init__(self, driver: str, details: str = ""):
        """Initialize with driver name and details."""
        self.driver = driver
        message = f"Error connecting to {driver} database"
        if details:
            message += f": {details}"
        super().__init__(message)


class StatementError(CacheError):
    """Raised when a SQL statement fails."""

    def __init__(self, operation: str, details: str = ""):
        """Initialize with the failed operation and details."""
        self.operation = operation
        message = f"Cache statement failed during {operation}"
        if details:
            message += f": {details}"
        super().__init__(message)


class SerializationError(CacheError):
    """Raised when a value cannot be encoded for storage."""

    pass


class DeserializationError(SerializationError):
    """Raised when a stored payload cannot be decoded.

    This signals corruption, not a cache miss.
    """

    def __init__(self, location: str, details: str = ""):
        """Initialize with the payload location and details."""
        self.location = location
        message = f"Corrupt cache payload at {location}"
        if details:
            message += f": {details}"
        super().__init__(message)

"""Exception classes for query evaluation."""


class QueryError(Exception):
    """Base exception for query-related errors."""

    pass


class InvalidQueryError(QueryError, ValueError):
    """Raised when a query expression is structurally malformed."""

    def __init__(self, message: str, path: str | None = None):
        """Initialize with message and the offending query path."""
        self.path = path
        if path:
            message = f"{message} (at '{path}')"
        super().__init__(f"Invalid query: {message}")


class UnsupportedOperatorError(QueryError, ValueError):
    """Raised when a query uses an operator the registry does not know."""

    def __init__(self, operator: str):
        """Initialize with operator name."""
        self.operator = operator
        super().__init__(f"Unsupported operator: {operator}")


class InvalidOptionsError(QueryError, ValueError):
    """Raised when match options fail validation."""

    PREFIX = "Invalid options: "

    def __init__(self, message: str):
        """Initialize with message."""
        super().__init__(f"{self.PREFIX}{message}")


class RecordSourceError(QueryError):
    """Raised when a record collection cannot be loaded."""

    def __init__(self, source: str, details: str = ""):
        """Initialize with source and details."""
        self.source = source
        message = f"Cannot load records from {source}"
        if details:
            message += f": {details}"
        super().__init__(message)

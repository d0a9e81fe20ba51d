"""
Application Exceptions

Error taxonomy shared by the order stores and the HTTP layer.

    OrderAPIError
     ├── InvalidOrderIdError          -> 400
     └── PersistenceError             -> 500
          ├── OrderNotFoundError      -> 500
          └── PersistenceTimeoutError -> 500

Request bodies that fail to decode or validate surface as FastAPI's
RequestValidationError and are answered with 400 in app.main.
"""


class OrderAPIError(Exception):
    """Base class for all application errors."""


class InvalidOrderIdError(OrderAPIError):
    """Raised when an order id is not a valid ObjectId and strict ids are on."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"invalid order id: {value!r}")


class PersistenceError(OrderAPIError):
    """Any failure reported by the order store."""


class OrderNotFoundError(PersistenceError):
    """A single-document lookup matched nothing."""

    def __init__(self, message: str = "mongo: no documents in result"):
        super().__init__(message)


class PersistenceTimeoutError(PersistenceError):
    """A store operation did not finish within the configured timeout."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} timed out after {timeout:g}s")

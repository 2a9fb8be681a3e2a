"""Error types for the storefront checkout library."""

from typing import Optional


class errmsg:
    """Error message constants shared across the store client and CLI."""

    CART_ID_REQUIRED = "Cart ID is required"
    LINE_ID_REQUIRED = "Line item ID is required"
    PRODUCT_ID_REQUIRED = "Product ID is required"
    LOCKER_NAME_REQUIRED = "Pakiautomaat location is required"
    INVALID_CUSTOMER_TYPE = "Customer type must be 'business' or 'individual'"
    ADMIN_TOKEN_REQUIRED = "Admin token is required to update products"
    CART_NOT_IN_RESPONSE = "Response did not contain a cart"


class StoreError(Exception):
    """Base class for store client errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class ConnectionError(StoreError):
    """Failed to reach the commerce backend."""

    def __init__(self, message: str):
        super().__init__(f"connection failed: {message}")


class TransportError(StoreError):
    """Transport-level error."""

    def __init__(self, cause: Exception):
        super().__init__("transport error", cause)


class HTTPStatusError(StoreError):
    """The commerce backend answered with an error status."""

    def __init__(self, status_code: int, detail: str = ""):
        message = f"backend returned {status_code}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    def is_not_found(self) -> bool:
        """Return True if this is a 404."""
        return self.status_code == 404

    def is_unauthorized(self) -> bool:
        """Return True if this is a 401 or 403."""
        return self.status_code in (401, 403)

    def is_invalid_request(self) -> bool:
        """Return True if the backend rejected the request payload."""
        return self.status_code in (400, 422)


class InvalidArgumentError(StoreError):
    """Invalid argument provided by caller."""

    def __init__(self, message: str):
        super().__init__(f"invalid argument: {message}")


class CheckoutTimeoutError(StoreError):
    """Every attempt of a backend call timed out."""

    is_timeout = True

    def __init__(self, attempt: int, total_attempts: int):
        super().__init__(f"Request timed out after {attempt} attempts")
        self.attempt = attempt
        self.total_attempts = total_attempts


class OperationTimedOutError(StoreError):
    """A named checkout operation gave up after timing out."""

    def __init__(self, operation: str):
        super().__init__(
            f"{operation} timed out. Please check your connection and try again."
        )
        self.operation = operation

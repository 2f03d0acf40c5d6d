"""Domain exceptions. Each one knows the HTTP status it maps to."""


class ShopError(Exception):
    status_code = 500

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)
        self.message = message


# --- 400 ---
class ValidationError(ShopError):
    status_code = 400


class EmptyOrderError(ValidationError):
    def __init__(self, message: str = "Order must have items"):
        super().__init__(message)


class InvalidOrderPayload(ValidationError):
    pass


class InvalidStatusTransition(ValidationError):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change order status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


# --- 401 / 403 ---
class AuthenticationRequired(ShopError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class PermissionDenied(ShopError):
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


# --- 404 ---
class NotFoundError(ShopError):
    status_code = 404


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


# --- 409 ---
class InsufficientStockError(ShopError):
    status_code = 409

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: requested {requested}, available {available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class IdempotencyConflictError(ShopError):
    status_code = 409


# --- 500 ---
class DeliveryWindowExhausted(ShopError):
    def __init__(self, days: int):
        super().__init__(f"No delivery date available within {days} days")
        self.days = days

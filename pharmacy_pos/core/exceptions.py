"""Domain errors raised by the POS services and mapped to HTTP responses in main.py"""


class POSError(Exception):
    """Base class for all domain errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# 400 - rejected before any write
class ValidationError(POSError):
    pass


class EmptyCart(ValidationError):
    def __init__(self):
        super().__init__("Sale must contain at least one item")


class InvalidPaymentMethod(ValidationError):
    def __init__(self, payment_method):
        self.payment_method = payment_method
        super().__init__("Valid payment method is required (cash, card, transfer)")


class BelowCostPrice(ValidationError):
    def __init__(self, product_id: str, unit_sell_price, unit_buy_price):
        self.product_id = product_id
        super().__init__(
            f"Sell price {unit_sell_price} is below buy price {unit_buy_price} "
            f"for product {product_id}"
        )


# 404
class NotFoundError(POSError):
    pass


class ProductNotFound(NotFoundError):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found with ID: {product_id}")


class SaleNotFound(NotFoundError):
    def __init__(self, sale_id: str):
        self.sale_id = sale_id
        super().__init__(f"Sale not found with ID: {sale_id}")


class ServiceNotFound(NotFoundError):
    def __init__(self, service_id: str):
        self.service_id = service_id
        super().__init__(f"Service not found or inactive: {service_id}")


class CustomerNotFound(NotFoundError):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer not found with ID: {customer_id}")


# 409
class ConflictError(POSError):
    pass


class InsufficientStock(ConflictError):
    def __init__(self, product_id: str, available: int, requested: int, name: str = None):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        label = name or product_id
        super().__init__(
            f"Insufficient stock for {label}. Available: {available}, Requested: {requested}"
        )


class DuplicateRecord(ConflictError):
    pass


# Sync - recorded in the sync state, never raised to API callers
class SyncError(POSError):
    pass


class TransportError(SyncError):
    pass


class RemoteRejection(SyncError):
    pass

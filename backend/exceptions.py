"""
Domain exceptions for the gift basket shop.

Services raise these; the HTTP layer maps them to status codes.
"""


class ShopException(Exception):
    """
    Base exception for all shop errors.

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (entity IDs, limits, etc.)
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class LimitExceeded(ShopException):
    """Raised when a basket customization would go over its extra-item limit."""

    def __init__(self, basket_id: int, limit: int, selected: int):
        super().__init__(
            f"Basket {basket_id} allows at most {limit} extra items, {selected} selected",
            details={'basket_id': basket_id, 'limit': limit, 'selected': selected}
        )
        self.basket_id = basket_id
        self.limit = limit
        self.selected = selected


class NotFound(ShopException):
    """Base exception for lookups of absent entries."""
    pass


class SelectionEntryNotFound(NotFound):
    """Raised when removing a candy that is not in the customization."""

    def __init__(self, candy_id: int):
        super().__init__(
            f"Candy {candy_id} is not part of the customization",
            details={'candy_id': candy_id}
        )
        self.candy_id = candy_id


class CartEntryNotFound(NotFound):
    """Raised when a cart-local entry reference does not exist."""

    def __init__(self, entry_id: str):
        super().__init__(
            f"Cart entry {entry_id} not found",
            details={'entry_id': entry_id}
        )
        self.entry_id = entry_id


class CatalogItemNotFound(NotFound):
    """Raised when a basket, candy or payment type is missing or inactive."""

    def __init__(self, kind: str, item_id: int):
        super().__init__(
            f"{kind} {item_id} not found",
            details={'kind': kind, 'item_id': item_id}
        )
        self.kind = kind
        self.item_id = item_id


class OrderNotFound(NotFound):
    """Raised when an order does not exist or belongs to another user."""

    def __init__(self, order_id: int):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InvalidCartOperation(ShopException):
    """Raised when a cart entry cannot take the requested change."""

    def __init__(self, entry_id: str, reason: str):
        super().__init__(
            f"Cart entry {entry_id}: {reason}",
            details={'entry_id': entry_id, 'reason': reason}
        )
        self.entry_id = entry_id
        self.reason = reason


class InvalidOrder(ShopException):
    """Raised when a checkout request is incomplete or inconsistent."""

    def __init__(self, reason: str, details: dict | None = None):
        super().__init__(f"Invalid order: {reason}", details={'reason': reason, **(details or {})})
        self.reason = reason


class PersistenceError(ShopException):
    """Raised when the order transaction fails and has been rolled back."""

    def __init__(self, user_id: int, cause: Exception | None = None):
        super().__init__(
            f"Order for user {user_id} could not be saved",
            details={'user_id': user_id}
        )
        self.user_id = user_id
        self.cause = cause

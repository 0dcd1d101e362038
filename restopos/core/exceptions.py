"""Failure taxonomy shared by the store, the ledger and the order lifecycle."""


class POSError(Exception):
    """Base class for every failure the core reports to its caller."""

    code = "pos_error"


class ValidationError(POSError):
    """Empty cart, missing or unavailable table, bad quantity or field."""

    code = "validation_error"


class InsufficientStockError(POSError):
    code = "insufficient_stock"

    def __init__(self, menu_item_id: str, requested: int, available: int):
        self.menu_item_id = menu_item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for menu item {menu_item_id}. "
            f"Requested: {requested}, Available: {available}"
        )


class InvalidTransitionError(POSError):
    """Status edge not in the state machine, or role lacks permission for it."""

    code = "invalid_transition"


class NotFoundError(POSError):
    code = "not_found"


class PersistenceError(POSError):
    """An underlying store operation failed."""

    code = "persistence_error"

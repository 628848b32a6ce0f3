"""Error types raised across the TaniMart core.

Input problems are reported with Protean's ``ValidationError`` (a mapping of
field name to messages). The classes below cover the failures that are not
form errors and need their own handling by callers.
"""


class StockConflictError(Exception):
    """The requested quantity exceeds the stock available right now.

    Retryable: the client should re-fetch current stock and resubmit.
    """

    def __init__(self, product_id, requested=None, available=None):
        self.product_id = str(product_id) if product_id is not None else None
        self.requested = requested
        self.available = available
        super().__init__(
            f"Stock changed for product {self.product_id}: requested {requested}, available {available}"
        )


class AuthorizationError(Exception):
    """The acting user may not perform this operation on this record."""


class PersistenceError(Exception):
    """The underlying store failed while committing; nothing was persisted."""

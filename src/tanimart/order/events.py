"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from tanimart.domain import tanimart


@tanimart.event(part_of="Order")
class OrderPlaced:
    """A checkout committed and the order awaits payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of item snapshots
    subtotal = Integer(required=True)
    delivery_fee = Integer(required=True)
    total_price = Integer(required=True)
    placed_at = DateTime(required=True)


@tanimart.event(part_of="Order")
class OrderStatusChanged:
    """An administrator moved the order through its lifecycle."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = Identifier()
    changed_at = DateTime(required=True)


@tanimart.event(part_of="Order")
class OrderDeleted:
    """An order and its items were removed from the ledger."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    status = String(required=True)
    total_price = Integer(required=True)
    deleted_by = Identifier()
    deleted_at = DateTime(required=True)

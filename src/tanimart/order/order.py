"""Order aggregate (CQRS): the durable record of a checkout.

State Machine:
    PENDING -> PROCESSING -> COMPLETED
    PENDING | PROCESSING -> CANCELLED
    PENDING -> COMPLETED
    COMPLETED and CANCELLED are terminal.

Items and prices are fixed when the order is placed. Prices always come from
the catalog at checkout time, never from the client.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from tanimart.domain import tanimart
from tanimart.order.events import OrderDeleted, OrderPlaced, OrderStatusChanged
from tanimart.shared.pricing import DELIVERY_FEE, price_lines


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


@tanimart.entity(part_of="Order")
class OrderItem:
    """One purchased product, with the name, seller and price it had at checkout."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    seller_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    unit_price = Integer(required=True, min_value=0)

    @property
    def line_total(self):
        return self.unit_price * self.quantity


@tanimart.aggregate
class Order:
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    address = String(required=True, max_length=255)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    subtotal = Integer(default=0, min_value=0)
    delivery_fee = Integer(default=DELIVERY_FEE, min_value=0)
    total_price = Integer(default=0, min_value=0)
    idempotency_key = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_include_delivery_fee(self):
        if self.total_price != (self.subtotal or 0) + (self.delivery_fee or 0):
            raise ValidationError({"total_price": ["Total must equal subtotal plus delivery fee"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, address, items_data, customer_name=None, idempotency_key=None):
        """Create a pending order from validated, catalog-priced lines.

        Args:
            customer_id: The customer placing the order.
            address: Delivery address as entered at checkout.
            items_data: List of dicts with product_id, product_name, seller_id,
                        quantity and unit_price.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        pricing = price_lines((item["unit_price"], item["quantity"]) for item in items_data)

        order = cls(
            customer_id=customer_id,
            customer_name=customer_name,
            address=address,
            status=OrderStatus.PENDING.value,
            items=[OrderItem(**item) for item in items_data],
            subtotal=pricing["subtotal"],
            delivery_fee=pricing["delivery_fee"],
            total_price=pricing["total"],
            idempotency_key=idempotency_key,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                items=json.dumps([{**item, "product_id": str(item["product_id"])} for item in items_data], default=str),
                subtotal=order.subtotal,
                delivery_fee=order.delivery_fee,
                total_price=order.total_price,
                placed_at=now,
            )
        )
        return order

    @property
    def reference(self):
        """Customer-facing reference: the id followed by the creation date as ddmmyy."""
        return f"{self.id}{self.created_at:%d%m%y}"

    @property
    def is_terminal(self):
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def transition_to(self, new_status, changed_by=None):
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status '{new_status}'"]}) from None

        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_by=changed_by,
                changed_at=now,
            )
        )

    def mark_deleted(self, deleted_by=None):
        """Record the deletion and drop the items ahead of removing the order."""
        for item in list(self.items):
            self.remove_items(item)

        self.raise_(
            OrderDeleted(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                status=self.status,
                total_price=self.total_price,
                deleted_by=deleted_by,
                deleted_at=datetime.now(UTC),
            )
        )

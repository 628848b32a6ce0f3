"""Shopping Cart aggregate (CQRS): the session-scoped selection a shopper checks out.

A cart belongs to one browser session. Lines carry the product's name, price,
seller and stock as they were when the line was last touched. Those snapshots
drive the preview only; checkout re-reads everything from the catalog.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from tanimart.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from tanimart.domain import tanimart
from tanimart.shared.pricing import DELIVERY_FEE, price_lines


@tanimart.entity(part_of="ShoppingCart")
class CartLine:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Integer(required=True, min_value=0)
    seller_id = Identifier()
    stock = Integer(default=0, min_value=0)  # as of the last fetch


@tanimart.value_object(part_of="ShoppingCart")
class CartTotals:
    """Preview totals for a cart. Display only; never persisted on an order."""

    subtotal = Integer(default=0)
    delivery_fee = Integer(default=DELIVERY_FEE)
    total = Integer(default=DELIVERY_FEE)


@tanimart.aggregate
class ShoppingCart:
    session_id = String(required=True, max_length=255)
    customer_id = Identifier()
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, session_id, customer_id=None):
        now = datetime.now(UTC)
        return cls(
            session_id=session_id,
            customer_id=customer_id,
            created_at=now,
            updated_at=now,
        )

    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product_id, product_name, unit_price, stock, seller_id=None, quantity=1):
        """Add ``quantity`` of a product, never exceeding the stock just fetched.

        An existing line is topped up to ``min(existing + quantity, stock)`` and
        its stock snapshot refreshed; the price snapshot of the line is kept.
        A new line starts at ``quantity`` clamped to ``[1, stock]``.
        """
        if stock is None or stock < 1:
            raise ValidationError({"product_id": ["Product is out of stock"]})
        if quantity is None or quantity < 1:
            quantity = 1

        now = datetime.now(UTC)
        line = self.line_for(product_id)
        if line:
            line.stock = stock
            line.quantity = min(line.quantity + quantity, stock)
        else:
            line = CartLine(
                product_id=product_id,
                product_name=product_name,
                quantity=min(quantity, stock),
                unit_price=unit_price,
                seller_id=seller_id,
                stock=stock,
            )
            self.add_lines(line)

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                session_id=self.session_id,
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=line.quantity,
            )
        )

    def update_quantity(self, product_id, new_quantity):
        """Set a line's quantity, clamped to its stock snapshot. Below 1 removes it."""
        line = self.line_for(product_id)
        if line is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})

        if new_quantity < 1:
            self.remove_item(product_id)
            return

        previous = line.quantity
        line.quantity = min(new_quantity, line.stock) if line.stock else new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous,
                new_quantity=line.quantity,
            )
        )

    def remove_item(self, product_id):
        line = self.line_for(product_id)
        if line is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})

        self.remove_lines(line)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def clear(self):
        removed = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)

        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                session_id=self.session_id,
                lines_removed=removed,
            )
        )

    @property
    def is_empty(self):
        return not self.lines

    # -------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------
    def compute_totals(self) -> CartTotals:
        priced = price_lines((line.unit_price, line.quantity) for line in self.lines)
        return CartTotals(
            subtotal=priced["subtotal"],
            delivery_fee=priced["delivery_fee"],
            total=priced["total"],
        )

    def seller_partition(self) -> bool:
        """True when every line comes from the same seller.

        Advisory only: the storefront shows a hint when sellers are mixed.
        An empty cart has no single seller.
        """
        return len({str(line.seller_id) for line in self.lines}) == 1

    def checkout_lines(self):
        """Lines as ``{product_id, quantity}`` dicts for the checkout boundary."""
        return [{"product_id": str(line.product_id), "quantity": line.quantity} for line in self.lines]

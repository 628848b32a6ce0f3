"""Session store for shopping carts."""

from tanimart.cart.cart import ShoppingCart
from tanimart.domain import tanimart


@tanimart.repository(part_of=ShoppingCart)
class CartRepository:
    def for_session(self, session_id) -> ShoppingCart | None:
        return self._dao.query.filter(session_id=session_id).all().first

    def discard(self, cart: ShoppingCart) -> None:
        """Drop the cart and its lines from the session store."""
        if cart.lines:
            cart.clear()
        self.add(cart)
        self._dao.delete(cart)

"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, String

from tanimart.domain import tanimart


@tanimart.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its line was topped up."""

    __version__ = 1

    cart_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@tanimart.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart line was changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@tanimart.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@tanimart.event(part_of="ShoppingCart")
class CartCleared:
    """All lines were dropped, either by the shopper or after checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)
    lines_removed = Integer(required=True)

"""Cart line management: commands and handler.

Each command names a session rather than a cart id. The session's cart is
created on the first add and removed from the store as soon as it is empty.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from tanimart.cart.cart import ShoppingCart
from tanimart.catalog.product import Product
from tanimart.domain import tanimart

logger = structlog.get_logger(__name__)


@tanimart.command(part_of="ShoppingCart")
class AddToCart:
    session_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(default=1)
    customer_id = Identifier()


@tanimart.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    session_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    new_quantity = Integer(required=True)


@tanimart.command(part_of="ShoppingCart")
class RemoveFromCart:
    session_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)


def _cart_for(session_id) -> ShoppingCart:
    cart = current_domain.repository_for(ShoppingCart).for_session(session_id)
    if cart is None:
        raise ValidationError({"session_id": ["No cart for this session"]})
    return cart


def _save(cart: ShoppingCart) -> None:
    repo = current_domain.repository_for(ShoppingCart)
    if cart.is_empty:
        repo.discard(cart)
    else:
        repo.add(cart)


@tanimart.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get_product(command.product_id)
        if not product.is_active:
            raise ValidationError({"product_id": ["Product is not available"]})

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_session(command.session_id)
        if cart is None:
            cart = ShoppingCart.create(
                session_id=command.session_id,
                customer_id=command.customer_id,
            )
            logger.debug("Cart created", session_id=command.session_id)

        cart.add_item(
            product_id=str(product.id),
            product_name=product.name,
            unit_price=product.price,
            stock=product.stock,
            seller_id=product.seller_id,
            quantity=command.quantity,
        )
        repo.add(cart)
        return cart

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = _cart_for(command.session_id)
        cart.update_quantity(command.product_id, command.new_quantity)
        _save(cart)
        return cart

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _cart_for(command.session_id)
        cart.remove_item(command.product_id)
        _save(cart)
        return cart

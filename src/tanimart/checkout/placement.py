"""Checkout Orchestrator: turns a set of cart lines into a committed order.

Everything a checkout writes happens inside the command handler's unit of
work: the stock decrements, the order with its items, and the customer's
"order placed" notification. Any failure rolls all of it back.

Validation runs before the first write and stops at the first problem:

1. the delivery address is present and at most 255 characters;
2. there is at least one line;
3. every line has a quantity of at least 1 and names a product that exists,
   is approved and is not discontinued;
4. every line's quantity fits the product's current stock
   (``StockConflictError`` otherwise).

Prices are always read from the catalog; whatever the client showed the
shopper is ignored.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from tanimart.cart.cart import ShoppingCart
from tanimart.catalog.product import Product
from tanimart.domain import tanimart
from tanimart.notification.notification import Notification
from tanimart.order.order import Order
from tanimart.shared.errors import AuthorizationError, PersistenceError, StockConflictError

logger = structlog.get_logger(__name__)

ADDRESS_MAX_LENGTH = 255


@tanimart.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    # Address and items are checked by the handler so that errors are
    # reported in a fixed order.
    address = Text()
    items = Text()  # JSON: list of {product_id, quantity}
    idempotency_key = String(max_length=255)


@tanimart.command(part_of="ShoppingCart")
class CheckoutCart:
    session_id = String(required=True, max_length=255)
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    address = Text()
    idempotency_key = String(max_length=255)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def _validate_address(address):
    address = (address or "").strip()
    if not address:
        raise ValidationError({"address": ["Address is required"]})
    if len(address) > ADDRESS_MAX_LENGTH:
        raise ValidationError({"address": [f"Address may not be longer than {ADDRESS_MAX_LENGTH} characters"]})
    return address


def _merge_lines(lines):
    """Sum quantities per product, keeping the position of each product's first line.

    Returns a list of ``(index, product_id, quantity)``.
    """
    if not lines:
        raise ValidationError({"items": ["Cart is empty"]})

    merged = {}
    for index, line in enumerate(lines):
        product_id = line.get("product_id") if isinstance(line, dict) else None
        if not product_id:
            raise ValidationError({f"items.{index}.product_id": ["Product is required"]})

        quantity = line.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({f"items.{index}.quantity": ["Quantity must be at least 1"]})

        key = str(product_id)
        if key in merged:
            first_index, _, total = merged[key]
            merged[key] = (first_index, key, total + quantity)
        else:
            merged[key] = (index, key, quantity)

    return list(merged.values())


def _load_products(merged_lines):
    """Read each product once and check it can be sold.

    Returns ``(product, quantity)`` pairs in line order.
    """
    repo = current_domain.repository_for(Product)
    resolved = []
    for index, product_id, quantity in merged_lines:
        try:
            product = repo.get_product(product_id)
        except ObjectNotFoundError:
            raise ValidationError({f"items.{index}.product_id": ["Product does not exist"]}) from None
        if not product.is_active:
            raise ValidationError({f"items.{index}.product_id": ["Product is not available"]})
        resolved.append((product, quantity))

    for product, quantity in resolved:
        if quantity > product.stock:
            raise StockConflictError(product.id, requested=quantity, available=product.stock)

    return resolved


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------
def place_order(customer_id, address, lines, customer_name=None, idempotency_key=None) -> Order:
    """Validate ``lines`` and write the order, stock and notification.

    Must run inside a unit of work; the command handlers below provide one.
    A repeated ``idempotency_key`` from the same customer returns the order it
    created the first time and writes nothing.
    """
    order_repo = current_domain.repository_for(Order)
    previous = order_repo.find_by_idempotency_key(customer_id, idempotency_key)
    if previous is not None:
        logger.info(
            "Duplicate checkout submission",
            order_id=str(previous.id),
            customer_id=str(customer_id),
        )
        return previous

    address = _validate_address(address)
    resolved = _load_products(_merge_lines(lines))

    product_repo = current_domain.repository_for(Product)
    for product, quantity in resolved:
        product_repo.decrement_stock(product.id, quantity, expected_stock=product.stock)

    order = Order.place(
        customer_id=customer_id,
        customer_name=customer_name,
        address=address,
        items_data=[
            {
                "product_id": str(product.id),
                "product_name": product.name,
                "seller_id": product.seller_id,
                "quantity": quantity,
                "unit_price": product.price,
            }
            for product, quantity in resolved
        ],
        idempotency_key=idempotency_key,
    )
    order_repo.add(order)

    notification = Notification.for_order_placed(customer_id, order.reference)
    current_domain.repository_for(Notification).add(notification)

    logger.info(
        "Order placed",
        order_id=str(order.id),
        customer_id=str(customer_id),
        lines=len(resolved),
        total_price=order.total_price,
    )
    return order


@tanimart.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        lines = json.loads(command.items) if command.items else []
        return place_order(
            customer_id=command.customer_id,
            address=command.address,
            lines=lines,
            customer_name=command.customer_name,
            idempotency_key=command.idempotency_key,
        )


@tanimart.command_handler(part_of=ShoppingCart)
class CheckoutCartHandler:
    @handle(CheckoutCart)
    def checkout_cart(self, command):
        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.for_session(command.session_id)

        order = place_order(
            customer_id=command.customer_id,
            address=command.address,
            lines=cart.checkout_lines() if cart else [],
            customer_name=command.customer_name,
            idempotency_key=command.idempotency_key,
        )

        if cart is not None:
            cart_repo.discard(cart)
        return order


# ---------------------------------------------------------------------------
# Boundary
# ---------------------------------------------------------------------------
_DOMAIN_ERRORS = (ValidationError, ObjectNotFoundError, StockConflictError, AuthorizationError)


def _requested_lines(command):
    """``(product_id, quantity)`` pairs a checkout command asks for."""
    if isinstance(command, CheckoutCart):
        cart = current_domain.repository_for(ShoppingCart).for_session(command.session_id)
        lines = cart.checkout_lines() if cart else []
    else:
        lines = json.loads(command.items) if command.items else []

    requested = {}
    for line in lines:
        if not isinstance(line, dict) or not line.get("product_id"):
            continue
        quantity = line.get("quantity")
        key = str(line["product_id"])
        requested[key] = requested.get(key, 0) + (quantity if isinstance(quantity, int) else 0)
    return list(requested.items())


def _stock_snapshot(requested):
    """Stock and version of each requested product, as persisted right now."""
    repo = current_domain.repository_for(Product)
    snapshot = {}
    for product_id, _ in requested:
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            continue
        snapshot[product_id] = (product.stock, product._version)
    return snapshot


def _lost_update(requested, snapshot, exc) -> StockConflictError:
    """Name the product whose stock moved while the checkout was committing.

    When no product visibly changed, the first ordered product is reported.
    """
    repo = current_domain.repository_for(Product)
    current = {}
    for product_id, _ in requested:
        if product_id not in snapshot:
            continue
        try:
            current[product_id] = repo.get(product_id)
        except ObjectNotFoundError:
            continue

    changed = [
        product_id
        for product_id, product in current.items()
        if (product.stock, product._version) != snapshot[product_id]
    ]
    candidates = changed or list(current)
    if not candidates:
        logger.warning("Checkout lost a concurrent update", error=str(exc))
        return StockConflictError(None)

    product_id = candidates[0]
    quantity = dict(requested)[product_id]
    available = current[product_id].stock
    logger.warning(
        "Checkout lost a concurrent stock update",
        product_id=product_id,
        requested=quantity,
        available=available,
        error=str(exc),
    )
    return StockConflictError(product_id, requested=quantity, available=available)


def _dispatch(command) -> Order:
    requested = _requested_lines(command)
    snapshot = _stock_snapshot(requested)
    try:
        return current_domain.process(command, asynchronous=False)
    except _DOMAIN_ERRORS:
        raise
    except ExpectedVersionError as exc:
        raise _lost_update(requested, snapshot, exc) from exc
    except Exception as exc:
        logger.exception("Checkout failed while persisting", command=type(command).__name__)
        raise PersistenceError("Checkout could not be committed") from exc


def submit_checkout(customer_id, address, lines, customer_name=None, idempotency_key=None) -> Order:
    """Check out an explicit list of ``{product_id, quantity}`` lines."""
    return _dispatch(
        PlaceOrder(
            customer_id=customer_id,
            customer_name=customer_name,
            address=address,
            items=json.dumps(lines or []),
            idempotency_key=idempotency_key,
        )
    )


def checkout_cart(session_id, customer_id, address, customer_name=None, idempotency_key=None) -> Order:
    """Check out the cart stored for ``session_id`` and discard it."""
    return _dispatch(
        CheckoutCart(
            session_id=session_id,
            customer_id=customer_id,
            customer_name=customer_name,
            address=address,
            idempotency_key=idempotency_key,
        )
    )

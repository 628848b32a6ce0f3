"""FastAPI routes for checkout, carts and orders."""

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from tanimart.api.identity import CurrentActor, OptionalActor
from tanimart.api.schemas import (
    AddToCartRequest,
    CartCheckoutRequest,
    CartLineResponse,
    CartResponse,
    ChangeOrderStatusRequest,
    CheckoutRequest,
    CheckoutResponse,
    OrderItemResponse,
    OrderPageResponse,
    OrderResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
)
from tanimart.cart.cart import ShoppingCart
from tanimart.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from tanimart.cart.management import ClearCart
from tanimart.checkout.placement import checkout_cart, submit_checkout
from tanimart.order.deletion import DeleteOrder
from tanimart.order.order import Order
from tanimart.order.repository import ADMIN_PAGE_SIZE
from tanimart.order.status import ChangeOrderStatus
from tanimart.shared.errors import AuthorizationError
from tanimart.shared.pricing import price_lines
from tanimart.shared.roles import Role, require_role


def _receipt(order: Order) -> CheckoutResponse:
    return CheckoutResponse(
        order_id=str(order.id),
        reference=order.reference,
        status=order.status,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        total=order.total_price,
    )


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        reference=order.reference,
        customer_id=str(order.customer_id),
        customer_name=order.customer_name,
        address=order.address,
        status=order.status,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        total_price=order.total_price,
        is_terminal=order.is_terminal,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                product_name=item.product_name,
                seller_id=str(item.seller_id) if item.seller_id else None,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in order.items
        ],
    )


def _cart_response(session_id: str, cart: ShoppingCart | None) -> CartResponse:
    if cart is None:
        totals = price_lines([])
        return CartResponse(
            session_id=session_id,
            subtotal=totals["subtotal"],
            delivery_fee=totals["delivery_fee"],
            total=totals["total"],
            single_seller=False,
        )

    totals = cart.compute_totals()
    return CartResponse(
        session_id=session_id,
        lines=[
            CartLineResponse(
                product_id=str(line.product_id),
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                seller_id=str(line.seller_id) if line.seller_id else None,
                stock=line.stock,
            )
            for line in cart.lines
        ],
        subtotal=totals.subtotal,
        delivery_fee=totals.delivery_fee,
        total=totals.total,
        single_seller=cart.seller_partition(),
    )


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
async def checkout(body: CheckoutRequest, actor: CurrentActor) -> CheckoutResponse:
    require_role(actor.role, Role.CUSTOMER)
    order = submit_checkout(
        customer_id=actor.id,
        customer_name=actor.name,
        address=body.address,
        lines=[{"product_id": line.product_id, "quantity": line.quantity} for line in body.items],
        idempotency_key=body.idempotency_key,
    )
    return _receipt(order)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{session_id}", response_model=CartResponse)
async def get_cart(session_id: str) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).for_session(session_id)
    return _cart_response(session_id, cart)


@cart_router.post("/{session_id}/items", response_model=CartResponse)
async def add_cart_item(session_id: str, body: AddToCartRequest, actor: OptionalActor) -> CartResponse:
    command = AddToCart(
        session_id=session_id,
        product_id=body.product_id,
        quantity=body.quantity,
        customer_id=actor.id if actor else None,
    )
    cart = current_domain.process(command, asynchronous=False)
    return _cart_response(session_id, cart)


@cart_router.put("/{session_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item(session_id: str, product_id: str, body: UpdateCartQuantityRequest) -> CartResponse:
    command = UpdateCartQuantity(
        session_id=session_id,
        product_id=product_id,
        new_quantity=body.quantity,
    )
    cart = current_domain.process(command, asynchronous=False)
    return _cart_response(session_id, None if cart.is_empty else cart)


@cart_router.delete("/{session_id}/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(session_id: str, product_id: str) -> CartResponse:
    command = RemoveFromCart(session_id=session_id, product_id=product_id)
    cart = current_domain.process(command, asynchronous=False)
    return _cart_response(session_id, None if cart.is_empty else cart)


@cart_router.delete("/{session_id}", response_model=StatusResponse)
async def clear_cart(session_id: str) -> StatusResponse:
    current_domain.process(ClearCart(session_id=session_id), asynchronous=False)
    return StatusResponse()


@cart_router.post("/{session_id}/checkout", status_code=201, response_model=CheckoutResponse)
async def checkout_session_cart(session_id: str, body: CartCheckoutRequest, actor: CurrentActor) -> CheckoutResponse:
    require_role(actor.role, Role.CUSTOMER)
    order = checkout_cart(
        session_id=session_id,
        customer_id=actor.id,
        customer_name=actor.name,
        address=body.address,
        idempotency_key=body.idempotency_key,
    )
    return _receipt(order)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderPageResponse)
async def list_orders(
    actor: CurrentActor,
    search: str | None = None,
    status: str | None = None,
    min_price: int | None = Query(default=None, alias="minPrice"),
    max_price: int | None = Query(default=None, alias="maxPrice"),
    page: int = Query(default=1, ge=1),
) -> OrderPageResponse:
    require_role(actor.role, Role.ADMIN)
    result = current_domain.repository_for(Order).search(
        customer_name=search,
        status=status,
        min_total=min_price,
        max_total=max_price,
        page=page,
    )
    return OrderPageResponse(
        items=[_order_response(order) for order in result.items],
        total=result.total,
        page=page,
        page_size=ADMIN_PAGE_SIZE,
    )


@order_router.get("/mine", response_model=list[OrderResponse])
async def order_history(
    actor: CurrentActor,
    customer_id: str | None = Query(default=None, alias="customerId"),
) -> list[OrderResponse]:
    """The caller's orders, newest first. Admins may look up any customer."""
    if customer_id and not actor.is_admin:
        raise AuthorizationError("Only administrators may view another customer's orders")
    orders = current_domain.repository_for(Order).for_customer(customer_id or actor.id)
    return [_order_response(order) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: CurrentActor) -> OrderResponse:
    order = current_domain.repository_for(Order).visible_to(order_id, actor.id, actor.role)
    return _order_response(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def change_order_status(order_id: str, body: ChangeOrderStatusRequest, actor: CurrentActor) -> OrderResponse:
    command = ChangeOrderStatus(
        order_id=order_id,
        status=body.status,
        actor_id=actor.id,
        actor_role=actor.role,
    )
    order = current_domain.process(command, asynchronous=False)
    return _order_response(order)


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str, actor: CurrentActor) -> StatusResponse:
    command = DeleteOrder(order_id=order_id, actor_id=actor.id, actor_role=actor.role)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deleted")

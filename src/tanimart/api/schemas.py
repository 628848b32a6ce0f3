"""Pydantic request/response schemas for the TaniMart API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands. Field names travel as camelCase on the wire.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutLineSchema(CamelModel):
    product_id: str
    quantity: int
    # Shown to the shopper by the storefront; never used for pricing
    price: int | None = None

    @field_validator("product_id", mode="before")
    @classmethod
    def _coerce_product_id(cls, value):
        return str(value) if value is not None else value


class CheckoutRequest(CamelModel):
    address: str | None = None
    items: list[CheckoutLineSchema] = Field(default_factory=list)
    idempotency_key: str | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "address": "Jl. Merdeka No. 1, Bandung",
                    "items": [{"productId": "prod-001", "quantity": 2}],
                    "idempotencyKey": "5a1f0c9e-checkout-1",
                }
            ]
        },
    )


class CartCheckoutRequest(CamelModel):
    address: str | None = None
    idempotency_key: str | None = None


class CheckoutResponse(CamelModel):
    order_id: str
    reference: str
    status: str
    subtotal: int
    delivery_fee: int
    total: int


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(CamelModel):
    product_id: str
    quantity: int = 1

    @field_validator("product_id", mode="before")
    @classmethod
    def _coerce_product_id(cls, value):
        return str(value) if value is not None else value


class UpdateCartQuantityRequest(CamelModel):
    quantity: int


class CartLineResponse(CamelModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: int
    seller_id: str | None = None
    stock: int


class CartResponse(CamelModel):
    session_id: str
    lines: list[CartLineResponse] = Field(default_factory=list)
    subtotal: int
    delivery_fee: int
    total: int
    single_seller: bool


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemResponse(CamelModel):
    product_id: str
    product_name: str
    seller_id: str | None = None
    quantity: int
    unit_price: int


class OrderResponse(CamelModel):
    id: str
    reference: str
    customer_id: str
    customer_name: str | None = None
    address: str
    status: str
    subtotal: int
    delivery_fee: int
    total_price: int
    is_terminal: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    items: list[OrderItemResponse] = Field(default_factory=list)


class OrderPageResponse(CamelModel):
    items: list[OrderResponse]
    total: int
    page: int
    page_size: int


class ChangeOrderStatusRequest(CamelModel):
    status: str


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class NotificationResponse(CamelModel):
    id: str
    message: str
    is_read: bool
    created_at: datetime | None = None
    read_at: datetime | None = None


class NotificationListResponse(CamelModel):
    notifications: list[NotificationResponse]
    unread_count: int


class MarkAllReadResponse(CamelModel):
    count: int


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class ListProductRequest(CamelModel):
    name: str
    price: int = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    category_id: str | None = None
    description: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    seller_id: str | None = None


class AdjustStockRequest(CamelModel):
    stock: int


class ModerateProductRequest(CamelModel):
    moderation: str


class ProductResponse(CamelModel):
    id: str
    name: str
    price: int
    stock: int
    seller_id: str
    category_id: str | None = None
    moderation: str
    discontinued: bool
    is_active: bool


class StatusResponse(CamelModel):
    status: str = "ok"

"""FastAPI routes for the catalog: the product operations ordering depends on."""

import json

from fastapi import APIRouter, Query
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from tanimart.api.identity import CurrentActor
from tanimart.api.schemas import (
    AdjustStockRequest,
    ListProductRequest,
    ModerateProductRequest,
    ProductResponse,
    StatusResponse,
)
from tanimart.catalog.listing import ListProduct
from tanimart.catalog.moderation import DiscontinueProduct, ModerateProduct
from tanimart.catalog.product import Product
from tanimart.catalog.stock import AdjustStock
from tanimart.shared.errors import AuthorizationError
from tanimart.shared.roles import Role, require_role

product_router = APIRouter(prefix="/products", tags=["products"])


def _product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        price=product.price,
        stock=product.stock,
        seller_id=str(product.seller_id),
        category_id=str(product.category_id) if product.category_id else None,
        moderation=product.moderation,
        discontinued=product.discontinued,
        is_active=product.is_active,
    )


@product_router.post("", status_code=201, response_model=ProductResponse)
async def list_product(body: ListProductRequest, actor: CurrentActor) -> ProductResponse:
    command = ListProduct(
        actor_id=actor.id,
        actor_role=actor.role,
        name=body.name,
        price=body.price,
        stock=body.stock,
        category_id=body.category_id,
        description=body.description,
        image_urls=json.dumps(body.image_urls),
        seller_id=body.seller_id,
    )
    product_id = current_domain.process(command, asynchronous=False)
    product = current_domain.repository_for(Product).get_product(product_id)
    return _product_response(product)


@product_router.get("", response_model=list[ProductResponse])
async def seller_products(
    actor: CurrentActor,
    seller_id: str | None = Query(default=None, alias="sellerId"),
) -> list[ProductResponse]:
    """A seller's own listings, newest first. Admins pass ``sellerId``."""
    require_role(actor.role, Role.SELLER, Role.ADMIN)
    if actor.is_admin:
        if not seller_id:
            raise ValidationError({"seller_id": ["sellerId is required"]})
    elif seller_id and seller_id != actor.id:
        raise AuthorizationError("Sellers may only list their own products")

    products = current_domain.repository_for(Product).for_seller(seller_id or actor.id)
    return [_product_response(product) for product in products]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get_product(product_id)
    return _product_response(product)


@product_router.put("/{product_id}/stock", response_model=ProductResponse)
async def adjust_stock(product_id: str, body: AdjustStockRequest, actor: CurrentActor) -> ProductResponse:
    command = AdjustStock(
        product_id=product_id,
        stock=body.stock,
        actor_id=actor.id,
        actor_role=actor.role,
    )
    current_domain.process(command, asynchronous=False)
    return _product_response(current_domain.repository_for(Product).get_product(product_id))


@product_router.put("/{product_id}/moderation", response_model=ProductResponse)
async def moderate_product(product_id: str, body: ModerateProductRequest, actor: CurrentActor) -> ProductResponse:
    command = ModerateProduct(
        product_id=product_id,
        decision=body.moderation,
        actor_role=actor.role,
    )
    current_domain.process(command, asynchronous=False)
    return _product_response(current_domain.repository_for(Product).get_product(product_id))


@product_router.put("/{product_id}/discontinue", response_model=StatusResponse)
async def discontinue_product(product_id: str, actor: CurrentActor) -> StatusResponse:
    command = DiscontinueProduct(product_id=product_id, actor_id=actor.id, actor_role=actor.role)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="discontinued")

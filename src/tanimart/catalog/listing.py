"""Listing a product: command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from tanimart.catalog.product import Product
from tanimart.domain import tanimart
from tanimart.shared.roles import Role, require_role

logger = structlog.get_logger(__name__)


@tanimart.command(part_of="Product")
class ListProduct:
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    name: String(required=True, max_length=255)
    price: Integer(required=True, min_value=0)
    stock: Integer(default=0, min_value=0)
    category_id: Identifier()
    description: Text()
    image_urls: Text()  # JSON array
    seller_id: Identifier()  # admins may list on behalf of a seller


@tanimart.command_handler(part_of=Product)
class ListProductHandler:
    @handle(ListProduct)
    def list_product(self, command):
        role = require_role(command.actor_role, Role.SELLER, Role.ADMIN)
        seller_id = command.actor_id
        if role is Role.ADMIN and command.seller_id:
            seller_id = command.seller_id

        product = Product.create(
            seller_id=seller_id,
            name=command.name,
            price=command.price,
            stock=command.stock or 0,
            category_id=command.category_id,
            description=command.description,
            image_urls=json.loads(command.image_urls) if command.image_urls else [],
        )
        current_domain.repository_for(Product).add(product)

        logger.info(
            "Product listed",
            product_id=str(product.id),
            seller_id=str(seller_id),
            stock=product.stock,
        )
        return str(product.id)

"""Moderation and discontinuation: the two switches that take a product off sale."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from tanimart.catalog.product import ModerationStatus, Product
from tanimart.domain import tanimart
from tanimart.shared.errors import AuthorizationError
from tanimart.shared.roles import Role, require_role

logger = structlog.get_logger(__name__)


@tanimart.command(part_of="Product")
class ModerateProduct:
    product_id: Identifier(required=True)
    decision: String(required=True, choices=ModerationStatus)
    actor_role: String(required=True, max_length=20)


@tanimart.command(part_of="Product")
class DiscontinueProduct:
    product_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)


@tanimart.command_handler(part_of=Product)
class ModerationHandler:
    @handle(ModerateProduct)
    def moderate_product(self, command):
        require_role(command.actor_role, Role.ADMIN)

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.moderate(command.decision)
        repo.add(product)

        logger.info("Product moderated", product_id=str(product.id), moderation=product.moderation)

    @handle(DiscontinueProduct)
    def discontinue_product(self, command):
        role = require_role(command.actor_role, Role.ADMIN, Role.SELLER)

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        if role is Role.SELLER and str(product.seller_id) != str(command.actor_id):
            raise AuthorizationError("Sellers can only discontinue their own products")

        product.discontinue()
        repo.add(product)

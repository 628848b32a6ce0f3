"""Manual stock edits by the owning seller or an administrator."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from tanimart.catalog.product import Product
from tanimart.domain import tanimart
from tanimart.shared.errors import AuthorizationError
from tanimart.shared.roles import Role, require_role


@tanimart.command(part_of="Product")
class AdjustStock:
    product_id: Identifier(required=True)
    stock: Integer(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)


@tanimart.command_handler(part_of=Product)
class AdjustStockHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        role = require_role(command.actor_role, Role.ADMIN, Role.SELLER)

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        if role is Role.SELLER and str(product.seller_id) != str(command.actor_id):
            raise AuthorizationError("Sellers can only edit stock of their own products")

        product.set_stock(command.stock, adjusted_by=command.actor_id)
        repo.add(product)
        return product.stock

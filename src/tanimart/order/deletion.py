"""Hard deletion of orders by administrators.

Deletion removes the order and its items outright. It leaves an
``OrderDeleted`` event and a warning-level log line behind as the audit trail.
Stock consumed by the order is not given back.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from tanimart.domain import tanimart
from tanimart.order.order import Order
from tanimart.shared.roles import Role, require_role

logger = structlog.get_logger(__name__)


@tanimart.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)


@tanimart.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        require_role(command.actor_role, Role.ADMIN)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_deleted(deleted_by=command.actor_id)

        # Persist the item removals and publish OrderDeleted before the row goes
        repo.add(order)
        repo._dao.delete(order)

        logger.warning(
            "Order deleted",
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            status=order.status,
            total_price=order.total_price,
            deleted_by=str(command.actor_id),
        )

"""Admin status transitions: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from tanimart.domain import tanimart
from tanimart.order.order import Order, OrderStatus
from tanimart.shared.roles import Role, require_role

logger = structlog.get_logger(__name__)


@tanimart.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)


@tanimart.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_status(self, command):
        require_role(command.actor_role, Role.ADMIN)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.transition_to(command.status, changed_by=command.actor_id)
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
            changed_by=str(command.actor_id),
        )
        return order

"""Order Ledger queries."""

from tanimart.domain import tanimart
from tanimart.order.order import Order
from tanimart.shared.errors import AuthorizationError
from tanimart.shared.roles import Role

# Orders per page on the admin order list.
ADMIN_PAGE_SIZE = 4


@tanimart.repository(part_of=Order)
class OrderRepository:
    def find_by_idempotency_key(self, customer_id, idempotency_key) -> Order | None:
        if not idempotency_key:
            return None
        return (
            self._dao.query.filter(customer_id=customer_id, idempotency_key=idempotency_key)
            .all()
            .first
        )

    def search(
        self,
        customer_name=None,
        status=None,
        min_total=None,
        max_total=None,
        page=1,
        page_size=ADMIN_PAGE_SIZE,
    ):
        """Admin order list, newest first.

        Returns a ResultSet whose ``items`` hold one page and whose ``total``
        counts every order matching the filters.
        """
        filters = {}
        if customer_name:
            filters["customer_name__icontains"] = customer_name
        if status:
            filters["status"] = status
        if min_total is not None:
            filters["total_price__gte"] = min_total
        if max_total is not None:
            filters["total_price__lte"] = max_total

        page = max(int(page or 1), 1)
        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        return query.order_by("-created_at").limit(page_size).offset((page - 1) * page_size).all()

    def for_customer(self, customer_id) -> list[Order]:
        return self._dao.query.filter(customer_id=customer_id).order_by("-created_at").all().items

    def visible_to(self, order_id, actor_id, actor_role) -> Order:
        """Fetch an order for an admin or for the customer who placed it."""
        order = self.get(order_id)
        if actor_role != Role.ADMIN.value and str(order.customer_id) != str(actor_id):
            raise AuthorizationError("Order belongs to another customer")
        return order

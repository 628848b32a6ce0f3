"""Catalog Store: the product queries and the stock write checkout relies on."""

import structlog
from protean.exceptions import ExpectedVersionError

from tanimart.catalog.product import Product
from tanimart.domain import tanimart
from tanimart.shared.errors import StockConflictError

logger = structlog.get_logger(__name__)


@tanimart.repository(part_of=Product)
class ProductRepository:
    def get_product(self, product_id) -> Product:
        """Current price, stock and sellability of a product.

        Raises ``ObjectNotFoundError`` when the product does not exist.
        """
        return self.get(product_id)

    def decrement_stock(self, product_id, amount, expected_stock=None) -> Product:
        """Take ``amount`` units off the persisted stock.

        Stock is re-read here rather than trusted from the caller's snapshot.
        When ``expected_stock`` is given, the persisted value must still equal
        it (compare-and-set). A writer that races past the re-read is caught
        by the aggregate version check. All three cases surface as
        ``StockConflictError``.
        """
        product = self.get(product_id)
        if expected_stock is not None and product.stock != expected_stock:
            logger.warning(
                "Stock changed since it was read",
                product_id=str(product_id),
                expected=expected_stock,
                actual=product.stock,
            )
            raise StockConflictError(product_id, requested=amount, available=product.stock)

        product.decrement_stock(amount)

        try:
            self.add(product)
        except ExpectedVersionError as exc:
            logger.warning(
                "Concurrent stock update detected",
                product_id=str(product_id),
                requested=amount,
            )
            raise StockConflictError(product_id, requested=amount) from exc

        return product

    def for_seller(self, seller_id) -> list[Product]:
        return self._dao.query.filter(seller_id=seller_id).order_by("-created_at").all().items

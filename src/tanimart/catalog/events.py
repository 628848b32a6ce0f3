"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from tanimart.domain import tanimart


@tanimart.event(part_of="Product")
class ProductListed:
    """A seller put a new product on the marketplace."""

    __version__ = 1

    product_id: Identifier(required=True)
    seller_id: Identifier(required=True)
    name: String(required=True)
    price: Integer(required=True)
    stock: Integer(required=True)
    listed_at: DateTime(required=True)


@tanimart.event(part_of="Product")
class StockAdjusted:
    """Stock was set by hand by a seller or an administrator."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
    adjusted_by: Identifier()
    adjusted_at: DateTime(required=True)


@tanimart.event(part_of="Product")
class StockDecremented:
    """Stock was consumed by a placed order."""

    __version__ = 1

    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    remaining_stock: Integer(required=True)
    decremented_at: DateTime(required=True)


@tanimart.event(part_of="Product")
class ProductModerated:
    """An administrator approved or rejected a product."""

    __version__ = 1

    product_id: Identifier(required=True)
    moderation: String(required=True)
    moderated_at: DateTime(required=True)


@tanimart.event(part_of="Product")
class ProductDiscontinued:
    """A product was withdrawn from sale."""

    __version__ = 1

    product_id: Identifier(required=True)
    discontinued_at: DateTime(required=True)

"""Product aggregate: the catalog record checkout prices and reserves against.

Product administration (categories, images, descriptions) belongs to the
seller and admin screens; this aggregate carries what the ordering core
needs from it: the authoritative price, the stock level and whether the
product may be sold at all.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from tanimart.catalog.events import (
    ProductDiscontinued,
    ProductListed,
    ProductModerated,
    StockAdjusted,
    StockDecremented,
)
from tanimart.domain import tanimart
from tanimart.shared.errors import StockConflictError


class ModerationStatus(Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"


@tanimart.aggregate
class Product:
    """A product offered by one seller."""

    seller_id: Identifier(required=True)
    category_id: Identifier()
    name: String(required=True, max_length=255)
    description: Text()
    price: Integer(required=True, min_value=0)  # rupiah
    stock: Integer(default=0, min_value=0)
    moderation: String(choices=ModerationStatus, default=ModerationStatus.APPROVED.value)
    discontinued: Boolean(default=False)
    image_urls: Text()  # JSON array of image references
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(
        cls,
        seller_id,
        name,
        price,
        stock=0,
        category_id=None,
        description=None,
        image_urls=None,
        moderation=ModerationStatus.APPROVED.value,
    ):
        now = datetime.now(UTC)
        product = cls(
            seller_id=seller_id,
            category_id=category_id,
            name=name,
            description=description,
            price=price,
            stock=stock,
            moderation=moderation,
            image_urls=json.dumps(image_urls or []),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                seller_id=str(seller_id),
                name=name,
                price=price,
                stock=stock,
                listed_at=now,
            )
        )
        return product

    @property
    def is_active(self):
        """Approved and not discontinued: the product can be bought."""
        return self.moderation == ModerationStatus.APPROVED.value and not self.discontinued

    def set_stock(self, new_stock, adjusted_by=None):
        if new_stock is None or new_stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        previous = self.stock
        now = datetime.now(UTC)
        self.stock = new_stock
        self.updated_at = now

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                previous_stock=previous,
                new_stock=new_stock,
                adjusted_by=adjusted_by,
                adjusted_at=now,
            )
        )

    def decrement_stock(self, quantity):
        """Consume ``quantity`` units, refusing to drive stock below zero."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if quantity > self.stock:
            raise StockConflictError(self.id, requested=quantity, available=self.stock)

        now = datetime.now(UTC)
        self.stock = self.stock - quantity
        self.updated_at = now

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                quantity=quantity,
                remaining_stock=self.stock,
                decremented_at=now,
            )
        )

    def moderate(self, decision):
        try:
            moderation = ModerationStatus(decision)
        except ValueError:
            raise ValidationError(
                {"moderation": [f"Unknown moderation decision '{decision}'"]}
            ) from None

        now = datetime.now(UTC)
        self.moderation = moderation.value
        self.updated_at = now
        self.raise_(
            ProductModerated(
                product_id=str(self.id),
                moderation=moderation.value,
                moderated_at=now,
            )
        )

    def discontinue(self):
        if self.discontinued:
            raise ValidationError({"discontinued": ["Product is already discontinued"]})

        now = datetime.now(UTC)
        self.discontinued = True
        self.updated_at = now
        self.raise_(ProductDiscontinued(product_id=str(self.id), discontinued_at=now))

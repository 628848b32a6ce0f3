"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared between
users except the catalog seeded at test start.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks state for one simulated shopper."""

    headers: dict = field(default_factory=dict)
    session_id: str | None = None
    cart_lines: int = 0
    order_ids: list[str] = field(default_factory=list)


@dataclass
class CatalogState:
    """Products listed for the run, filled once in ``test_start``."""

    product_ids: list[str] = field(default_factory=list)
    scarce_product_id: str | None = None


catalog = CatalogState()

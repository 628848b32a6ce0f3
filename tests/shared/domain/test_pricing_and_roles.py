"""Tests for the pricing rule and role checks shared across components."""

import pytest
from tanimart.shared.errors import AuthorizationError, StockConflictError
from tanimart.shared.pricing import DELIVERY_FEE, price_lines
from tanimart.shared.roles import Role, require_role


class TestPriceLines:
    def test_delivery_fee_is_flat(self):
        assert DELIVERY_FEE == 13000

    def test_totals(self):
        assert price_lines([(10000, 2)]) == {"subtotal": 20000, "delivery_fee": 13000, "total": 33000}

    def test_empty(self):
        assert price_lines([]) == {"subtotal": 0, "delivery_fee": 13000, "total": 13000}

    def test_custom_fee(self):
        assert price_lines([(1000, 1)], delivery_fee=0)["total"] == 1000


class TestRequireRole:
    def test_allowed(self):
        assert require_role("admin", Role.ADMIN, Role.SELLER) is Role.ADMIN

    def test_not_allowed(self):
        with pytest.raises(AuthorizationError):
            require_role("customer", Role.ADMIN)

    def test_unknown_role(self):
        with pytest.raises(AuthorizationError):
            require_role("superuser", Role.ADMIN)


def test_stock_conflict_carries_product():
    exc = StockConflictError("prod-7", requested=10, available=5)
    assert exc.product_id == "prod-7"
    assert "prod-7" in str(exc)

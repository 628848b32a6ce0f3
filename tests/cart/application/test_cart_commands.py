"""Application tests for cart commands and the session store."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from tanimart.cart.cart import ShoppingCart
from tanimart.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from tanimart.cart.management import ClearCart


def _add(session_id, product_id, quantity=1, **kwargs):
    return current_domain.process(
        AddToCart(session_id=session_id, product_id=product_id, quantity=quantity, **kwargs),
        asynchronous=False,
    )


def _stored(session_id):
    return current_domain.repository_for(ShoppingCart).for_session(session_id)


class TestAddToCartCommand:
    def test_first_add_creates_cart(self, product):
        _add("sess-001", product.id, 2, customer_id="cust-001")
        cart = _stored("sess-001")
        assert cart is not None
        assert cart.customer_id == "cust-001"
        assert cart.lines[0].quantity == 2

    def test_line_snapshots_catalog_data(self, make_product):
        product = make_product(name="Bawang Merah 1kg", price=38000, stock=7, seller_id="seller-009")
        _add("sess-001", product.id)
        line = _stored("sess-001").lines[0]
        assert line.product_name == "Bawang Merah 1kg"
        assert line.unit_price == 38000
        assert line.stock == 7
        assert line.seller_id == "seller-009"

    def test_add_clamps_to_current_stock(self, product):
        _add("sess-001", product.id, 4)
        _add("sess-001", product.id, 4)
        assert _stored("sess-001").lines[0].quantity == 5

    def test_sessions_are_isolated(self, product):
        _add("sess-a", product.id, 1)
        _add("sess-b", product.id, 3)
        assert _stored("sess-a").lines[0].quantity == 1
        assert _stored("sess-b").lines[0].quantity == 3

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            _add("sess-001", "prod-404")

    def test_rejected_product_not_added(self, make_product):
        product = make_product(moderation="Rejected")
        with pytest.raises(ValidationError):
            _add("sess-001", product.id)
        assert _stored("sess-001") is None

    def test_out_of_stock_product_not_added(self, make_product):
        product = make_product(stock=0)
        with pytest.raises(ValidationError):
            _add("sess-001", product.id)


class TestUpdateAndRemove:
    def test_update_quantity_persists(self, product):
        _add("sess-001", product.id, 1)
        current_domain.process(
            UpdateCartQuantity(session_id="sess-001", product_id=product.id, new_quantity=3),
            asynchronous=False,
        )
        assert _stored("sess-001").lines[0].quantity == 3

    def test_update_to_zero_drops_empty_cart(self, product):
        _add("sess-001", product.id, 1)
        current_domain.process(
            UpdateCartQuantity(session_id="sess-001", product_id=product.id, new_quantity=0),
            asynchronous=False,
        )
        assert _stored("sess-001") is None

    def test_remove_last_line_drops_cart(self, product):
        _add("sess-001", product.id, 1)
        current_domain.process(RemoveFromCart(session_id="sess-001", product_id=product.id), asynchronous=False)
        assert _stored("sess-001") is None

    def test_remove_keeps_other_lines(self, make_product):
        first, second = make_product(), make_product(name="Jagung Manis")
        _add("sess-001", first.id)
        _add("sess-001", second.id)
        current_domain.process(RemoveFromCart(session_id="sess-001", product_id=first.id), asynchronous=False)
        cart = _stored("sess-001")
        assert [line.product_id for line in cart.lines] == [second.id]

    def test_update_without_cart(self, product):
        with pytest.raises(ValidationError):
            current_domain.process(
                UpdateCartQuantity(session_id="sess-none", product_id=product.id, new_quantity=2),
                asynchronous=False,
            )


class TestClearCart:
    def test_clear_removes_session_entry(self, product):
        _add("sess-001", product.id, 2)
        removed = current_domain.process(ClearCart(session_id="sess-001"), asynchronous=False)
        assert removed == 1
        assert _stored("sess-001") is None

    def test_clear_missing_cart_is_noop(self):
        assert current_domain.process(ClearCart(session_id="sess-none"), asynchronous=False) == 0

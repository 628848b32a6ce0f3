"""Application tests for checkout: validation order, atomic writes, idempotency."""

import re

import pytest
from protean import current_domain
from protean.core.unit_of_work import UnitOfWork
from protean.exceptions import ExpectedVersionError, ValidationError
from tanimart.catalog.product import Product
from tanimart.catalog.repository import ProductRepository
from tanimart.checkout import placement
from tanimart.checkout.placement import submit_checkout
from tanimart.notification.notification import Notification
from tanimart.order.order import Order
from tanimart.shared.errors import PersistenceError, StockConflictError


def _checkout(lines, address="Jl. Merdeka No. 1, Bandung", customer_id="cust-001", **kwargs):
    return submit_checkout(customer_id=customer_id, address=address, lines=lines, **kwargs)


def _stock(product):
    return current_domain.repository_for(Product).get(product.id).stock


def _orders():
    return current_domain.repository_for(Order)._dao.query.all()


def _notifications():
    return current_domain.repository_for(Notification)._dao.query.all()


class TestSuccessfulCheckout:
    def test_order_total_includes_delivery_fee(self, product):
        order = _checkout([{"product_id": product.id, "quantity": 2}])

        assert order.status == "pending"
        assert order.subtotal == 20000
        assert order.delivery_fee == 13000
        assert order.total_price == 33000

    def test_stock_decremented(self, product):
        _checkout([{"product_id": product.id, "quantity": 2}])
        assert _stock(product) == 3

    def test_order_items_snapshot_catalog(self, make_product):
        product = make_product(name="Kentang Dieng 1kg", price=18000, seller_id="seller-777")
        order = _checkout([{"product_id": product.id, "quantity": 1}])

        stored = current_domain.repository_for(Order).get(order.id)
        assert len(stored.items) == 1
        item = stored.items[0]
        assert item.product_name == "Kentang Dieng 1kg"
        assert item.unit_price == 18000
        assert item.seller_id == "seller-777"

    def test_client_price_is_ignored(self, product):
        order = _checkout([{"product_id": product.id, "quantity": 1, "price": 1}])
        assert order.subtotal == 10000

    def test_notification_appended(self, product):
        order = _checkout([{"product_id": product.id, "quantity": 1}])

        notifications = current_domain.repository_for(Notification).list_recent("cust-001")
        assert len(notifications) == 1
        message = notifications[0].message
        assert message == f"Pesanan #{order.reference} telah dibuat dan sedang menunggu pembayaran"
        assert re.search(r"\d{6} telah dibuat", message)

    def test_duplicate_lines_are_merged(self, product):
        order = _checkout(
            [
                {"product_id": product.id, "quantity": 2},
                {"product_id": product.id, "quantity": 1},
            ]
        )
        stored = current_domain.repository_for(Order).get(order.id)
        assert len(stored.items) == 1
        assert stored.items[0].quantity == 3
        assert _stock(product) == 2

    def test_multiple_sellers_single_order(self, make_product):
        first = make_product(seller_id="seller-a")
        second = make_product(seller_id="seller-b", price=5000)
        order = _checkout(
            [
                {"product_id": first.id, "quantity": 1},
                {"product_id": second.id, "quantity": 2},
            ]
        )
        assert _orders().total == 1
        assert order.total_price == 10000 + 10000 + 13000

    def test_customer_name_recorded(self, product):
        order = _checkout([{"product_id": product.id, "quantity": 1}], customer_name="Siti Rahma")
        assert current_domain.repository_for(Order).get(order.id).customer_name == "Siti Rahma"

    def test_address_trimmed(self, product):
        order = _checkout([{"product_id": product.id, "quantity": 1}], address="  Jl. Asia Afrika 8  ")
        assert order.address == "Jl. Asia Afrika 8"


class TestValidation:
    def test_blank_address(self, product):
        with pytest.raises(ValidationError) as exc:
            _checkout([{"product_id": product.id, "quantity": 1}], address="   ")
        assert "address" in exc.value.messages
        assert _orders().total == 0
        assert _stock(product) == 5

    def test_address_too_long(self, product):
        with pytest.raises(ValidationError) as exc:
            _checkout([{"product_id": product.id, "quantity": 1}], address="x" * 256)
        assert "address" in exc.value.messages

    def test_address_at_limit_accepted(self, product):
        order = _checkout([{"product_id": product.id, "quantity": 1}], address="x" * 255)
        assert len(order.address) == 255

    def test_empty_lines(self):
        with pytest.raises(ValidationError) as exc:
            _checkout([])
        assert "items" in exc.value.messages

    def test_address_checked_before_lines(self):
        with pytest.raises(ValidationError) as exc:
            _checkout([], address="")
        assert list(exc.value.messages) == ["address"]

    def test_zero_quantity(self, product):
        with pytest.raises(ValidationError) as exc:
            _checkout([{"product_id": product.id, "quantity": 0}])
        assert "items.0.quantity" in exc.value.messages

    def test_unknown_product(self, product):
        with pytest.raises(ValidationError) as exc:
            _checkout(
                [
                    {"product_id": product.id, "quantity": 1},
                    {"product_id": "prod-404", "quantity": 1},
                ]
            )
        assert "items.1.product_id" in exc.value.messages
        assert _stock(product) == 5

    def test_rejected_product(self, make_product):
        product = make_product(moderation="Rejected")
        with pytest.raises(ValidationError) as exc:
            _checkout([{"product_id": product.id, "quantity": 1}])
        assert "items.0.product_id" in exc.value.messages

    def test_discontinued_product(self, product):
        stored = current_domain.repository_for(Product).get(product.id)
        stored.discontinue()
        current_domain.repository_for(Product).add(stored)

        with pytest.raises(ValidationError):
            _checkout([{"product_id": product.id, "quantity": 1}])

    def test_unavailable_product_reported_before_stock(self, make_product):
        scarce = make_product(stock=1)
        rejected = make_product(moderation="Rejected")
        with pytest.raises(ValidationError):
            _checkout(
                [
                    {"product_id": scarce.id, "quantity": 5},
                    {"product_id": rejected.id, "quantity": 1},
                ]
            )


class TestStockConflicts:
    def test_quantity_above_stock(self, product):
        with pytest.raises(StockConflictError) as exc:
            _checkout([{"product_id": product.id, "quantity": 10}])

        assert exc.value.product_id == str(product.id)
        assert _stock(product) == 5
        assert _orders().total == 0
        assert _notifications().total == 0

    def test_merged_lines_exceeding_stock(self, product):
        with pytest.raises(StockConflictError):
            _checkout(
                [
                    {"product_id": product.id, "quantity": 3},
                    {"product_id": product.id, "quantity": 3},
                ]
            )

    def test_second_checkout_for_remaining_stock_conflicts(self, product):
        _checkout([{"product_id": product.id, "quantity": 3}], customer_id="cust-001")

        with pytest.raises(StockConflictError):
            _checkout([{"product_id": product.id, "quantity": 3}], customer_id="cust-002")

        assert _stock(product) == 2
        assert _orders().total == 1

    def test_stock_never_negative(self, product):
        for customer in ("cust-1", "cust-2", "cust-3"):
            try:
                _checkout([{"product_id": product.id, "quantity": 2}], customer_id=customer)
            except StockConflictError:
                pass
        assert _stock(product) == 1
        assert _orders().total == 2

    def test_race_during_decrement_leaves_no_order(self, make_product, monkeypatch):
        first = make_product(name="Tomat Sayur")
        second = make_product(name="Cabai Keriting")
        original = ProductRepository.decrement_stock

        def _racing(self, product_id, amount, expected_stock=None):
            if str(product_id) == str(second.id):
                raise StockConflictError(product_id, requested=amount, available=0)
            return original(self, product_id, amount, expected_stock=expected_stock)

        monkeypatch.setattr(ProductRepository, "decrement_stock", _racing)

        with pytest.raises(StockConflictError) as exc:
            _checkout(
                [
                    {"product_id": first.id, "quantity": 1},
                    {"product_id": second.id, "quantity": 1},
                ]
            )

        assert exc.value.product_id == str(second.id)
        assert _stock(first) == 5
        assert _stock(second) == 5
        assert _orders().total == 0
        assert _notifications().total == 0


class TestIdempotency:
    def test_repeated_key_returns_first_order(self, product):
        first = _checkout([{"product_id": product.id, "quantity": 1}], idempotency_key="key-001")
        second = _checkout([{"product_id": product.id, "quantity": 1}], idempotency_key="key-001")

        assert second.id == first.id
        assert _orders().total == 1
        assert _notifications().total == 1
        assert _stock(product) == 4

    def test_key_is_scoped_to_customer(self, product):
        _checkout([{"product_id": product.id, "quantity": 1}], customer_id="cust-001", idempotency_key="key-001")
        _checkout([{"product_id": product.id, "quantity": 1}], customer_id="cust-002", idempotency_key="key-001")
        assert _orders().total == 2

    def test_without_key_every_submit_is_new(self, product):
        _checkout([{"product_id": product.id, "quantity": 1}])
        _checkout([{"product_id": product.id, "quantity": 1}])
        assert _orders().total == 2


class TestStorageFailure:
    def test_unexpected_error_becomes_persistence_error(self, product, monkeypatch):
        def _broken(self, product_id, amount, expected_stock=None):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(ProductRepository, "decrement_stock", _broken)

        with pytest.raises(PersistenceError):
            _checkout([{"product_id": product.id, "quantity": 1}])
        assert _orders().total == 0
        assert _stock(product) == 5

    def test_failure_after_stock_write_rolls_back(self, product, monkeypatch):
        def _broken(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(Notification, "for_order_placed", _broken)

        with pytest.raises(PersistenceError):
            _checkout([{"product_id": product.id, "quantity": 2}])

        assert _stock(product) == 5
        assert _orders().total == 0
        assert _notifications().total == 0


def _version_clash(self):
    raise ExpectedVersionError("Wrong expected version: 0 (Schema: product)")


class TestCommitTimeConflict:
    def test_conflict_names_the_ordered_product(self, product, monkeypatch):
        monkeypatch.setattr(UnitOfWork, "commit", _version_clash)

        with pytest.raises(StockConflictError) as exc:
            _checkout([{"product_id": product.id, "quantity": 2}])

        assert exc.value.product_id == str(product.id)
        assert exc.value.requested == 2
        assert exc.value.available == 5
        assert _stock(product) == 5
        assert _orders().total == 0
        assert _notifications().total == 0

    def test_conflict_names_the_product_that_changed(self, make_product, monkeypatch):
        first = make_product(name="Tomat Sayur")
        second = make_product(name="Cabai Keriting")
        read_stock = placement._stock_snapshot

        def _snapshot_then_competing_write(requested):
            snapshot = read_stock(requested)
            repo = current_domain.repository_for(Product)
            competing = repo.get(second.id)
            competing.set_stock(1)
            repo.add(competing)
            monkeypatch.setattr(UnitOfWork, "commit", _version_clash)
            return snapshot

        monkeypatch.setattr(placement, "_stock_snapshot", _snapshot_then_competing_write)

        with pytest.raises(StockConflictError) as exc:
            _checkout(
                [
                    {"product_id": first.id, "quantity": 1},
                    {"product_id": second.id, "quantity": 1},
                ]
            )

        assert exc.value.product_id == str(second.id)
        assert exc.value.available == 1
        assert _stock(first) == 5
        assert _orders().total == 0

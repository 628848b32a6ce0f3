"""BDD tests for checkout and the notifications it leaves behind."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when
from tanimart.catalog.product import Product
from tanimart.checkout.placement import submit_checkout
from tanimart.notification.notification import Notification
from tanimart.notification.outbox import AppendNotification, MarkAllNotificationsRead
from tanimart.order.order import Order
from tanimart.shared.errors import StockConflictError

scenarios("features/checkout.feature")


@pytest.fixture()
def products():
    return {}


@pytest.fixture()
def outcome():
    """Last checkout result or error, plus the last mark-all-read count."""
    return {"order": None, "exc": None, "marked": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{name}" priced {price:d} with stock {stock:d}'))
def catalog_product(products, name, price, stock):
    product = Product.create(seller_id="seller-001", name=name, price=price, stock=stock)
    current_domain.repository_for(Product).add(product)
    products[name] = str(product.id)


@given(parsers.cfparse('customer "{customer_id}" has {count:d} unread notifications'))
def unread_notifications(customer_id, count):
    for n in range(count):
        current_domain.process(
            AppendNotification(user_id=customer_id, message=f"Pesanan #{n} telah dibuat"),
            asynchronous=False,
        )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('customer "{customer_id}" checks out {qty:d} of "{name}" to "{address}"'))
def checks_out(products, outcome, customer_id, qty, name, address):
    try:
        outcome["order"] = submit_checkout(
            customer_id=customer_id,
            address=address,
            lines=[{"product_id": products[name], "quantity": qty}],
        )
    except (ValidationError, StockConflictError) as exc:
        outcome["exc"] = exc


@when(parsers.cfparse('customer "{customer_id}" checks out {qty:d} of "{name}" without an address'))
def checks_out_without_address(products, outcome, customer_id, qty, name):
    checks_out(products, outcome, customer_id, qty, name, address="")


@when(parsers.cfparse('customer "{customer_id}" marks all notifications read'))
def marks_all_read(outcome, customer_id):
    outcome["marked"] = current_domain.process(
        MarkAllNotificationsRead(user_id=customer_id),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("an order totalling {total:d} is pending"))
def order_pending(outcome, total):
    order = current_domain.repository_for(Order).get(outcome["order"].id)
    assert order.status == "pending"
    assert order.total_price == total


@then(parsers.cfparse('the stock of "{name}" is {stock:d}'))
def stock_is(products, name, stock):
    assert current_domain.repository_for(Product).get(products[name]).stock == stock


@then(parsers.cfparse('customer "{customer_id}" has {count:d} unread notification'))
def unread_count(customer_id, count):
    assert current_domain.repository_for(Notification).unread_count(customer_id) == count


@then("the checkout fails with a stock conflict")
def stock_conflict(outcome):
    assert isinstance(outcome["exc"], StockConflictError)


@then(parsers.cfparse('the checkout fails on "{field}"'))
def fails_on(outcome, field):
    assert isinstance(outcome["exc"], ValidationError)
    assert field in outcome["exc"].messages


@then("no order exists")
def no_order():
    assert current_domain.repository_for(Order)._dao.query.all().total == 0


@then(parsers.cfparse("exactly {count:d} order exists"))
def order_count(count):
    assert current_domain.repository_for(Order)._dao.query.all().total == count


@then(parsers.cfparse("{count:d} notifications were marked read"))
def marked_read(outcome, count):
    assert outcome["marked"] == count

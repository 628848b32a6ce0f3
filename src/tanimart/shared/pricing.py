"""Pricing rules shared by the cart preview and the checkout boundary.

Amounts are integers in minor currency units (rupiah).
"""

# Flat delivery charge added to every order, regardless of weight, distance
# or number of sellers.
DELIVERY_FEE = 13000


def price_lines(lines, delivery_fee=DELIVERY_FEE):
    """Price a sequence of ``(unit_price, quantity)`` pairs.

    Returns a dict with ``subtotal``, ``delivery_fee`` and ``total``.
    """
    subtotal = sum(unit_price * quantity for unit_price, quantity in lines)
    return {
        "subtotal": subtotal,
        "delivery_fee": delivery_fee,
        "total": subtotal + delivery_fee,
    }

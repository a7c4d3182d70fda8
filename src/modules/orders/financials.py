"""Financial derivations for orders.

Pure functions over amounts in the local currency (MRU).  Amounts are
rounded half-up to whole units, matching how invoices are printed.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional

from modules.orders.constants import (
    DEFAULT_SHIPPING_RATES,
    CommissionType,
    OrderStatus,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

NON_BILLABLE_STATES = {OrderStatus.NEW, OrderStatus.CANCELLED}


class PaymentStatus:
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_amount(value: Any) -> Decimal:
    """Round to a whole amount, halves away from zero."""
    return to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def shipping_cost(
    weight: Any,
    shipping_type: str,
    rates: Optional[Mapping[str, Decimal]] = None,
) -> Decimal:
    """``weight × rate(shipping_type)``; unknown types use the normal rate."""
    rates = rates or DEFAULT_SHIPPING_RATES
    rate = rates.get(shipping_type, rates.get("normal", DEFAULT_SHIPPING_RATES["normal"]))
    return to_decimal(weight) * to_decimal(rate)


def commission_for(
    price_in_mru: Any,
    commission_type: str,
    rate: Any = None,
    fixed_amount: Any = None,
) -> Decimal:
    if commission_type == CommissionType.FIXED:
        return round_amount(fixed_amount)
    return round_amount(to_decimal(price_in_mru) * to_decimal(rate) / HUNDRED)


def split_commission(order: Any, split_quantity: int, split_price: Any) -> Decimal:
    """Commission carried by *split_quantity* items priced at *split_price*.

    Percentage commissions are recomputed on the new price base at the same
    rate.  Fixed commissions are apportioned by quantity.
    """
    if order.commission_type == CommissionType.FIXED:
        per_item = to_decimal(order.commission) / Decimal(order.quantity)
        return round_amount(per_item * split_quantity)
    return commission_for(split_price, CommissionType.PERCENTAGE, order.commission_rate)


def product_total(order: Any) -> Decimal:
    return to_decimal(order.price_in_mru) + to_decimal(order.commission)


def grand_total(order: Any) -> Decimal:
    return product_total(order) + to_decimal(order.shipping_cost)


def remaining(order: Any) -> Decimal:
    return grand_total(order) - to_decimal(order.amount_paid)


def payment_status(order: Any) -> str:
    total = grand_total(order)
    left = total - to_decimal(order.amount_paid)
    if left <= 0 and total > 0:
        return PaymentStatus.PAID
    if to_decimal(order.amount_paid) > 0 and left > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


def delivery_due(order: Any) -> Decimal:
    """Amount collected at pickup: unpaid goods plus shipping."""
    unpaid_goods = max(ZERO, product_total(order) - to_decimal(order.amount_paid))
    return unpaid_goods + to_decimal(order.shipping_cost)


def billing_summary(orders: Iterable[Any]) -> dict:
    """Totals over billable orders.

    ``collection_rate`` is the collected share of billed revenue as a
    rounded percentage (0 when nothing was billed).
    """
    counts = {PaymentStatus.PAID: 0, PaymentStatus.PARTIAL: 0, PaymentStatus.UNPAID: 0}
    billed = paid = outstanding = ZERO
    order_count = 0
    for order in orders:
        if order.status in NON_BILLABLE_STATES:
            continue
        order_count += 1
        billed += grand_total(order)
        paid += to_decimal(order.amount_paid)
        outstanding += max(ZERO, remaining(order))
        counts[payment_status(order)] += 1

    rate = round_amount(paid / billed * HUNDRED) if billed > 0 else ZERO
    return {
        "order_count": order_count,
        "total_billed": billed,
        "total_paid": paid,
        "total_outstanding": outstanding,
        "collection_rate": rate,
        "paid_count": counts[PaymentStatus.PAID],
        "partial_count": counts[PaymentStatus.PARTIAL],
        "unpaid_count": counts[PaymentStatus.UNPAID],
    }

"""Proportional allocation of an order-level refund across its line items"""

from collections import defaultdict
from typing import Callable, Dict, MutableMapping, Sequence

from sales_snapshot.domain.models import LineItem, ProductSalesRecord
from sales_snapshot.domain.money import divide_round_half_away


def refund_shares(
    line_items: Sequence[LineItem],
    refund_minor: int,
    is_tracked: Callable[[str], bool],
) -> Dict[str, int]:
    """
    Split one refund over an order's line items by their share of the order total.

    Rules:
    - The order total includes line items without a product
    - A zero or negative order total allocates nothing
    - share = round(refund * item / total), ties away from zero, integers only
    - Items without a product, or whose product is not tracked, get nothing;
      their portion of the refund is not attributed to any product

    Returns:
        product_id -> refund delta in minor units (line items of the same
        product are summed)
    """
    order_total = sum(item.amount_minor for item in line_items)
    if order_total <= 0:
        return {}

    shares: Dict[str, int] = defaultdict(int)
    for item in line_items:
        if item.product_id is None or not is_tracked(item.product_id):
            continue
        shares[item.product_id] += divide_round_half_away(refund_minor * item.amount_minor, order_total)

    return dict(shares)


def allocate_refund(
    line_items: Sequence[LineItem],
    refund_minor: int,
    records: MutableMapping[str, ProductSalesRecord],
) -> None:
    """Apply one refund's shares to the records of tracked products"""
    for product_id, delta in refund_shares(line_items, refund_minor, records.__contains__).items():
        records[product_id].refund_minor += delta

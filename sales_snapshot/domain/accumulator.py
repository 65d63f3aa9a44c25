"""Per-product sales accumulation over the paid-order feed"""

import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Dict, Mapping

from sales_snapshot.domain.allocation import allocate_refund
from sales_snapshot.domain.models import Order, ProductSalesRecord

logger = logging.getLogger(__name__)


class SalesAccumulator:
    """
    Folds orders into product_id -> {gross, refund} totals.

    Every order is folded exactly once; the result does not depend on the order
    in which orders are folded, since it is made of sums and of refund passes
    that only look at their own order.
    """

    def __init__(self) -> None:
        self._records: Dict[str, ProductSalesRecord] = {}
        self.orders_folded = 0
        self.line_items_skipped = 0
        self.refunds_applied = 0
        self.refunds_ignored = 0

    def fold_order(self, order: Order) -> None:
        # Gross first, so every product of this order is tracked before its refunds
        for item in order.line_items:
            if item.product_id is None:
                self.line_items_skipped += 1
                logger.debug("Line item without product skipped", extra={"order_id": order.id})
                continue
            record = self._records.setdefault(item.product_id, ProductSalesRecord())
            record.gross_minor += item.amount_minor

        for transaction in order.refund_transactions:
            if not transaction.is_effective:
                self.refunds_ignored += 1
                continue
            allocate_refund(order.line_items, transaction.amount_minor, self._records)
            self.refunds_applied += 1

        self.orders_folded += 1

    def snapshot(self) -> Mapping[str, ProductSalesRecord]:
        """Read-only copy of the current totals"""
        return MappingProxyType({pid: replace(record) for pid, record in self._records.items()})

    def __len__(self) -> int:
        return len(self._records)

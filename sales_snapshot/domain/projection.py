"""Projection of accumulated totals into metafield write requests"""

import json
import logging
from typing import List, Mapping, Sequence

from sales_snapshot.domain.models import MetafieldWrite, NetSalesSnapshot, Product, ProductSalesRecord
from sales_snapshot.domain.money import to_decimal_string

logger = logging.getLogger(__name__)

SALES_CENTS_KEY = "lifetime_sales_cents"
SALES_AMOUNT_KEY = "lifetime_sales_amount"


def project_net_sales(
    records: Mapping[str, ProductSalesRecord],
    products: Sequence[Product],
) -> List[NetSalesSnapshot]:
    """
    Derive net sales for every catalog product that has sales.

    Products without a record are skipped so that any existing metafield keeps
    its value. Net sales are not clamped: refunds larger than recorded sales
    give a negative figure, which is logged for the operator.
    """
    snapshots = []
    for product in products:
        record = records.get(product.id)
        if record is None:
            continue

        net_minor = record.net_minor
        if net_minor < 0:
            logger.warning(
                "Negative net sales",
                extra={
                    "product_id": product.id,
                    "title": product.title,
                    "gross_minor": record.gross_minor,
                    "refund_minor": record.refund_minor,
                    "net_minor": net_minor,
                },
            )
        snapshots.append(NetSalesSnapshot(product_id=product.id, title=product.title, net_minor=net_minor))

    return snapshots


def build_metafield_writes(
    snapshots: Sequence[NetSalesSnapshot],
    namespace: str,
    currency_code: str,
) -> List[MetafieldWrite]:
    """Two writes per product: integer minor units, then a money value"""
    writes = []
    for snapshot in snapshots:
        writes.append(
            MetafieldWrite(
                owner_id=snapshot.product_id,
                namespace=namespace,
                key=SALES_CENTS_KEY,
                type="number_integer",
                value=str(snapshot.net_minor),
            )
        )
        writes.append(
            MetafieldWrite(
                owner_id=snapshot.product_id,
                namespace=namespace,
                key=SALES_AMOUNT_KEY,
                type="money",
                value=json.dumps(
                    {"amount": to_decimal_string(snapshot.net_minor), "currency_code": currency_code},
                    separators=(",", ":"),
                ),
            )
        )
    return writes

"""Sales snapshot run: fold paid orders, project net sales, write metafields"""

import logging
import time
from dataclasses import dataclass, field
from typing import List

from sales_snapshot.config import Settings, settings as default_settings
from sales_snapshot.domain.accumulator import SalesAccumulator
from sales_snapshot.domain.exceptions import MetafieldWriteError
from sales_snapshot.domain.models import MetafieldWrite, NetSalesSnapshot, WriteSummary
from sales_snapshot.domain.money import to_decimal_string
from sales_snapshot.domain.projection import build_metafield_writes, project_net_sales
from sales_snapshot.infrastructure.clients.shopify import ShopifyClient
from sales_snapshot.infrastructure.observability.logging import log_product_sales, log_run_summary
from sales_snapshot.infrastructure.observability.metrics import (
    negative_net_sales_gauge,
    record_fold,
    record_writes,
)

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """What a run computed and wrote"""

    orders_folded: int = 0
    products_in_catalog: int = 0
    snapshots: List[NetSalesSnapshot] = field(default_factory=list)
    writes: List[MetafieldWrite] = field(default_factory=list)
    summary: WriteSummary = field(default_factory=WriteSummary)
    dry_run: bool = False

    @property
    def negative_products(self) -> List[NetSalesSnapshot]:
        return [s for s in self.snapshots if s.net_minor < 0]


async def aggregate_sales(client: ShopifyClient) -> SalesAccumulator:
    """Fold every paid order into a fresh accumulator"""
    logger.info("Fetching paid orders")
    accumulator = SalesAccumulator()
    async for order in client.iter_paid_orders():
        accumulator.fold_order(order)

    record_fold(
        accumulator.orders_folded,
        accumulator.refunds_applied,
        accumulator.refunds_ignored,
        accumulator.line_items_skipped,
    )
    logger.info(
        "Sales aggregated",
        extra={
            "orders_folded": accumulator.orders_folded,
            "products_with_sales": len(accumulator),
            "refunds_applied": accumulator.refunds_applied,
            "refunds_ignored": accumulator.refunds_ignored,
            "line_items_skipped": accumulator.line_items_skipped,
        },
    )
    return accumulator


async def run_snapshot(
    client: ShopifyClient,
    config: Settings | None = None,
    dry_run: bool = False,
) -> RunReport:
    """
    Compute lifetime net sales per product and write them as metafields.

    Flow:
    1. Fold all paid orders (gross per product, proportional refunds)
    2. Fetch the product catalog
    3. Project net sales for catalog products that have sales
    4. Write two metafields per product in paced batches

    Read failures propagate before anything is written.

    Raises:
        ShopifyAPIError: If orders or products cannot be read
        InvalidAmount: If an order carries an unparseable amount
        MetafieldWriteError: If any write batch reported errors
    """
    config = config or default_settings
    start_time = time.time()
    report = RunReport(dry_run=dry_run)

    # 1. Aggregate
    accumulator = await aggregate_sales(client)
    report.orders_folded = accumulator.orders_folded

    # 2. Catalog
    logger.info("Fetching products")
    products = await client.fetch_all_products()
    report.products_in_catalog = len(products)

    # 3. Project
    report.snapshots = project_net_sales(accumulator.snapshot(), products)
    report.writes = build_metafield_writes(report.snapshots, config.metafield_namespace, config.currency_code)
    negative_net_sales_gauge.set(len(report.negative_products))
    for snapshot in report.snapshots:
        log_product_sales(
            snapshot.product_id,
            snapshot.title,
            snapshot.net_minor,
            to_decimal_string(snapshot.net_minor),
        )

    # 4. Write
    if not report.writes:
        logger.info("No metafields to update")
    elif dry_run:
        logger.info("Dry run, skipping metafield update", extra={"writes_requested": len(report.writes)})
    else:
        results = await client.set_metafields(report.writes, config.write_batching())
        report.summary = WriteSummary(batches=results)
        record_writes(report.summary.applied_count, report.summary.error_count)

    duration_ms = (time.time() - start_time) * 1000
    log_run_summary(
        report.orders_folded,
        len(report.snapshots),
        len(report.writes),
        report.summary.applied_count,
        report.summary.error_count,
        duration_ms,
    )

    if report.summary.failed:
        raise MetafieldWriteError(report.summary)
    return report

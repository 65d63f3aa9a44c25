"""Prometheus metrics for the sales snapshot job"""

from prometheus_client import REGISTRY, Counter, Gauge, Histogram, write_to_textfile

# Aggregation metrics
orders_folded_counter = Counter(
    "sales_snapshot_orders_folded_total",
    "Paid orders folded into the sales totals",
)

refund_transactions_counter = Counter(
    "sales_snapshot_refund_transactions_total",
    "Refund transactions seen while folding",
    ["outcome"],  # applied | ignored
)

line_items_skipped_counter = Counter(
    "sales_snapshot_line_items_skipped_total",
    "Line items without a product reference",
)

negative_net_sales_gauge = Gauge(
    "sales_snapshot_negative_net_sales_products",
    "Products whose refunds exceed recorded sales in the last run",
)

# Write metrics
metafield_writes_counter = Counter(
    "sales_snapshot_metafield_writes_total",
    "Metafield inputs submitted",
    ["outcome"],  # applied | error
)

# Shopify API metrics
shopify_request_latency_histogram = Histogram(
    "shopify_request_latency_seconds",
    "Shopify Admin GraphQL response time",
    ["operation"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

shopify_failures_counter = Counter(
    "shopify_request_failures_total",
    "Failed Shopify Admin GraphQL calls",
    ["operation"],
)


def record_fold(orders_folded: int, refunds_applied: int, refunds_ignored: int, line_items_skipped: int) -> None:
    """Record aggregation counts of a completed fold"""
    orders_folded_counter.inc(orders_folded)
    refund_transactions_counter.labels(outcome="applied").inc(refunds_applied)
    refund_transactions_counter.labels(outcome="ignored").inc(refunds_ignored)
    line_items_skipped_counter.inc(line_items_skipped)


def record_writes(applied_count: int, error_count: int) -> None:
    metafield_writes_counter.labels(outcome="applied").inc(applied_count)
    metafield_writes_counter.labels(outcome="error").inc(error_count)


def write_metrics(path: str) -> None:
    """Dump the default registry for the node exporter textfile collector"""
    write_to_textfile(path, REGISTRY)

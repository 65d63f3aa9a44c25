"""Command line entry point for the sales snapshot job"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

from sales_snapshot.config import settings
from sales_snapshot.domain.exceptions import DomainException
from sales_snapshot.infrastructure.clients.shopify import ShopifyClient
from sales_snapshot.infrastructure.observability.logging import setup_logging
from sales_snapshot.infrastructure.observability.metrics import write_metrics
from sales_snapshot.runner import run_snapshot

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sales-snapshot",
        description="Write lifetime net sales per product to Shopify metafields.",
    )
    subparsers = parser.add_subparsers(dest="command")

    aggregate = subparsers.add_parser("aggregate", help="Compute net sales and update metafields (default)")
    aggregate.add_argument("--dry-run", action="store_true", help="Compute and log without writing")

    subparsers.add_parser("check", help="Verify credentials and API access")

    inspect = subparsers.add_parser("inspect", help="Show stored metafields of the first products")
    inspect.add_argument("--namespace", default=None, help="Metafield namespace (default: configured namespace)")
    inspect.add_argument("--first", type=int, default=10, help="Number of products to show")

    return parser


async def check_connection(client: ShopifyClient) -> None:
    info = await client.fetch_shop_info()
    print("API connection OK")
    print(f"Shop: {info.name} ({info.domain}), currency {info.currency_code}")
    print(f"Products (first {len(info.sample_products)}):")
    for index, product in enumerate(info.sample_products, start=1):
        print(f"  {index}. {product.title} ({product.handle})")
    print(f"Paid orders (first {len(info.sample_orders)}):")
    for index, order in enumerate(info.sample_orders, start=1):
        print(f"  {index}. {order['name']} - {order['amount']} {order['currency_code']}")


async def inspect_metafields(client: ShopifyClient, namespace: str, first: int) -> None:
    for entry in await client.fetch_product_metafields(namespace, first=first):
        print(f"{entry.product.title} ({entry.product.handle}) {entry.product.id}")
        if not entry.metafields:
            print("  no metafields")
        for metafield in entry.metafields:
            print(f"  {metafield.key}: {metafield.value} ({metafield.type})")


async def _dispatch(args: argparse.Namespace) -> None:
    settings.require_credentials()
    client = ShopifyClient()

    if args.command == "check":
        await check_connection(client)
    elif args.command == "inspect":
        await inspect_metafields(client, args.namespace or settings.metafield_namespace, args.first)
    else:
        logger.info("Sales snapshot started", extra={"started_at": datetime.now(timezone.utc).isoformat()})
        await run_snapshot(client, settings, dry_run=getattr(args, "dry_run", False))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.log_level)

    try:
        asyncio.run(_dispatch(args))
        return 0
    except DomainException as e:
        logger.error(f"Sales snapshot failed: {e}", extra={"error_type": type(e).__name__})
        return 1
    finally:
        if settings.metrics_textfile:
            write_metrics(settings.metrics_textfile)


if __name__ == "__main__":
    sys.exit(main())

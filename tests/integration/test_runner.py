"""Integration tests for the sales snapshot run"""

import json

import pytest

from mock_shop.main import MockShop
from sales_snapshot.config import Settings
from sales_snapshot.domain.exceptions import InvalidAmount, MetafieldWriteError
from sales_snapshot.runner import aggregate_sales, run_snapshot

PRODUCT_A = "gid://shopify/Product/1001"
PRODUCT_B = "gid://shopify/Product/1002"
PRODUCT_C = "gid://shopify/Product/1003"


async def test_aggregate_sales_over_stub_shop(shop_client):
    """
    #1001: A 1200.00, B 3000.00
    #1002: A 700.00, B 300.00, refund 500.00 -> A 350.00, B 150.00
    #1003: A 1000.00, deleted 1000.00, refund 1000.00 -> A 500.00; pending 200.00 ignored
    """
    accumulator = await aggregate_sales(shop_client)
    snapshot = accumulator.snapshot()

    assert snapshot[PRODUCT_A].gross_minor == 290000
    assert snapshot[PRODUCT_A].refund_minor == 85000
    assert snapshot[PRODUCT_B].gross_minor == 330000
    assert snapshot[PRODUCT_B].refund_minor == 15000
    assert PRODUCT_C not in snapshot
    assert accumulator.orders_folded == 3
    assert accumulator.refunds_ignored == 1


async def test_run_writes_net_sales_metafields(shop_client, stub_shop: MockShop, test_settings: Settings):
    report = await run_snapshot(shop_client, test_settings)

    assert report.orders_folded == 3
    assert report.products_in_catalog == 3
    assert report.summary.applied_count == 4
    assert report.summary.error_count == 0

    stored = stub_shop.metafields
    assert stored[(PRODUCT_A, "stats", "lifetime_sales_cents")]["value"] == "205000"
    assert json.loads(stored[(PRODUCT_A, "stats", "lifetime_sales_amount")]["value"]) == {
        "amount": "2050.00",
        "currency_code": "JPY",
    }
    assert stored[(PRODUCT_B, "stats", "lifetime_sales_cents")]["value"] == "315000"
    assert stored[(PRODUCT_B, "stats", "lifetime_sales_amount")]["type"] == "money"
    assert not any(owner == PRODUCT_C for owner, _, _ in stored)


async def test_rerun_overwrites_with_identical_values(shop_client, stub_shop: MockShop, test_settings: Settings):
    first = await run_snapshot(shop_client, test_settings)
    stored_after_first = {k: v["value"] for k, v in stub_shop.metafields.items()}

    second = await run_snapshot(shop_client, test_settings)

    assert first.writes == second.writes
    assert {k: v["value"] for k, v in stub_shop.metafields.items()} == stored_after_first


async def test_dry_run_does_not_write(shop_client, stub_shop: MockShop, test_settings: Settings):
    report = await run_snapshot(shop_client, test_settings, dry_run=True)

    assert len(report.writes) == 4
    assert "metafieldsSet" not in stub_shop.operations
    assert stub_shop.metafields == {}


async def test_partial_write_failure_reports_counts(make_client, stub_shop: MockShop):
    stub_shop.failing_batches = {2}
    config = Settings(
        _env_file=None,
        shopify_shop_domain="mock-shop.myshopify.com",
        shopify_admin_access_token="shpat_test",
        write_batch_size=3,
        write_inter_batch_delay_seconds=0,
    )

    with pytest.raises(MetafieldWriteError) as exc_info:
        await run_snapshot(make_client(stub_shop), config)

    summary = exc_info.value.summary
    assert summary.applied_count == 3
    assert summary.error_count == 1
    assert stub_shop.batch_sizes == [3, 1]


async def test_invalid_amount_aborts_before_any_write(make_client, stub_shop: MockShop, test_settings: Settings):
    stub_shop.orders[1]["lineItems"]["edges"][0]["node"]["discountedTotalSet"]["shopMoney"]["amount"] = "7OO.00"

    with pytest.raises(InvalidAmount):
        await run_snapshot(make_client(stub_shop), test_settings)

    assert "getProducts" not in stub_shop.operations
    assert "metafieldsSet" not in stub_shop.operations

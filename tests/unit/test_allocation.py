"""Unit tests for proportional refund allocation"""

import random

from sales_snapshot.domain.allocation import allocate_refund, refund_shares
from sales_snapshot.domain.models import LineItem, ProductSalesRecord


def _always(_product_id: str) -> bool:
    return True


def test_refund_split_by_line_item_share():
    """700/300 order with a 500 refund -> 350/150"""
    items = [LineItem("A", 700), LineItem("B", 300)]

    assert refund_shares(items, 500, _always) == {"A": 350, "B": 150}


def test_zero_order_total_allocates_nothing():
    items = [LineItem("A", 0), LineItem("B", 0)]
    assert refund_shares(items, 500, _always) == {}


def test_negative_order_total_allocates_nothing():
    items = [LineItem("A", 100), LineItem("B", -300)]
    assert refund_shares(items, 500, _always) == {}


def test_line_item_without_product_counts_toward_total_only():
    """Its portion of the refund is not attributed to anyone"""
    items = [LineItem("A", 1000), LineItem(None, 1000)]

    assert refund_shares(items, 1000, _always) == {"A": 500}


def test_untracked_product_receives_nothing():
    items = [LineItem("A", 500), LineItem("B", 500)]

    assert refund_shares(items, 100, lambda pid: pid == "A") == {"A": 50}


def test_repeated_product_shares_are_summed():
    items = [LineItem("A", 250), LineItem("A", 250), LineItem("B", 500)]

    assert refund_shares(items, 1000, _always) == {"A": 500, "B": 500}


def test_shares_round_half_away_from_zero():
    # 3 * 1 / 2 = 1.5 -> 2 for both items
    items = [LineItem("A", 1), LineItem("B", 1)]

    assert refund_shares(items, 3, _always) == {"A": 2, "B": 2}


def test_refund_conservation_within_rounding_residue():
    """With every item tracked, shares add up to the refund within one cent per item"""
    rng = random.Random(20250501)
    for _ in range(500):
        count = rng.randint(1, 8)
        items = [LineItem(f"P{i}", rng.randint(1, 500_000)) for i in range(count)]
        refund = rng.randint(0, sum(item.amount_minor for item in items))

        shares = refund_shares(items, refund, _always)

        assert abs(sum(shares.values()) - refund) <= count


def test_allocate_refund_updates_tracked_records_only():
    records = {"A": ProductSalesRecord(gross_minor=700), "B": ProductSalesRecord(gross_minor=300, refund_minor=10)}
    items = [LineItem("A", 700), LineItem("B", 300), LineItem("Z", 1000)]

    allocate_refund(items, 1000, records)

    assert records["A"].refund_minor == 350
    assert records["B"].refund_minor == 10 + 150
    assert "Z" not in records

"""Pytest fixtures for testing"""

import httpx
import pytest

from mock_shop.main import DATA_DIR, MockShop, create_app
from sales_snapshot.config import Settings
from sales_snapshot.domain.models import LineItem, Order, RefundTransaction
from sales_snapshot.infrastructure.clients.shopify import ShopifyClient


@pytest.fixture
def test_settings() -> Settings:
    """Settings with credentials and no pacing delay"""
    return Settings(
        _env_file=None,
        shopify_shop_domain="mock-shop.myshopify.com",
        shopify_admin_access_token="shpat_test",
        write_batch_size=25,
        write_inter_batch_delay_seconds=0,
    )


@pytest.fixture
def stub_shop() -> MockShop:
    """Mock shop loaded from the bundled stub data"""
    return MockShop.from_directory(DATA_DIR)


@pytest.fixture
def make_client():
    """Build a ShopifyClient talking to a mock shop in-process"""

    def _make(shop: MockShop, page_size: int = 2, access_token: str = "shpat_test") -> ShopifyClient:
        return ShopifyClient(
            shop_domain=shop.domain,
            access_token=access_token,
            api_version="2025-04",
            page_size=page_size,
            transport=httpx.ASGITransport(app=create_app(shop)),
        )

    return _make


@pytest.fixture
def shop_client(stub_shop: MockShop, make_client) -> ShopifyClient:
    return make_client(stub_shop)


@pytest.fixture
def sample_orders() -> list[Order]:
    """Orders over two products, one refund and one line item without product"""
    return [
        Order(
            id="gid://shopify/Order/1",
            line_items=(
                LineItem(product_id="gid://shopify/Product/A", amount_minor=70000),
                LineItem(product_id="gid://shopify/Product/B", amount_minor=30000),
            ),
            refund_transactions=(RefundTransaction(amount_minor=50000, kind="refund", status="success"),),
        ),
        Order(
            id="gid://shopify/Order/2",
            line_items=(LineItem(product_id="gid://shopify/Product/A", amount_minor=12345),),
        ),
        Order(
            id="gid://shopify/Order/3",
            line_items=(
                LineItem(product_id="gid://shopify/Product/B", amount_minor=999),
                LineItem(product_id=None, amount_minor=1001),
            ),
            refund_transactions=(
                RefundTransaction(amount_minor=777, kind="refund", status="success"),
                RefundTransaction(amount_minor=500, kind="refund", status="pending"),
            ),
        ),
        Order(
            id="gid://shopify/Order/4",
            line_items=(
                LineItem(product_id="gid://shopify/Product/C", amount_minor=333),
                LineItem(product_id="gid://shopify/Product/A", amount_minor=667),
            ),
            refund_transactions=(
                RefundTransaction(amount_minor=100, kind="refund", status="success"),
                RefundTransaction(amount_minor=101, kind="refund", status="success"),
            ),
        ),
    ]

"""Shopify Admin GraphQL client for orders, products and metafields"""

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import httpx

from sales_snapshot.config import settings
from sales_snapshot.domain.exceptions import ShopifyAPIError
from sales_snapshot.domain.models import (
    BatchResult,
    LineItem,
    MetafieldWrite,
    Order,
    Product,
    ProductMetafields,
    RefundTransaction,
    ShopInfo,
    StoredMetafield,
    WriteBatching,
)
from sales_snapshot.domain.money import to_minor_units
from sales_snapshot.infrastructure.clients.queries import (
    METAFIELDS_SET_MUTATION,
    PAID_ORDERS_QUERY,
    PRODUCT_METAFIELDS_QUERY,
    PRODUCTS_QUERY,
    SHOP_INFO_QUERY,
)
from sales_snapshot.infrastructure.observability.metrics import (
    shopify_failures_counter,
    shopify_request_latency_histogram,
)
from sales_snapshot.utils.batching import chunked

logger = logging.getLogger(__name__)


class ShopifyClient:
    """Client for the Shopify Admin GraphQL API"""

    def __init__(
        self,
        shop_domain: str | None = None,
        access_token: str | None = None,
        api_version: str | None = None,
        page_size: int | None = None,
        line_items_page_size: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.shop_domain = shop_domain or settings.shopify_shop_domain
        self.access_token = access_token or settings.shopify_admin_access_token
        self.api_version = api_version or settings.shopify_api_version
        self.page_size = page_size or settings.page_size
        self.line_items_page_size = line_items_page_size or settings.line_items_page_size
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self.endpoint = f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "Content-Type": "application/json",
                "X-Shopify-Access-Token": self.access_token,
            },
            transport=self.transport,
        )

    async def _execute(
        self,
        http: httpx.AsyncClient,
        operation: str,
        document: str,
        variables: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """
        Run one GraphQL request and return its `data` member.

        Raises:
            ShopifyAPIError: On timeout, transport or HTTP errors, GraphQL errors,
                or a response without data
        """
        try:
            with shopify_request_latency_histogram.labels(operation=operation).time():
                response = await http.post(
                    self.endpoint,
                    json={"query": document, "variables": variables or {}},
                )
                response.raise_for_status()
                payload = response.json()

        except httpx.TimeoutException as e:
            shopify_failures_counter.labels(operation=operation).inc()
            raise ShopifyAPIError(f"Shopify API timeout after {self.timeout}s ({operation})") from e
        except httpx.HTTPStatusError as e:
            shopify_failures_counter.labels(operation=operation).inc()
            raise ShopifyAPIError(f"Shopify API error: {e.response.status_code} ({operation})") from e
        except httpx.RequestError as e:
            shopify_failures_counter.labels(operation=operation).inc()
            raise ShopifyAPIError(f"Shopify API unreachable: {e} ({operation})") from e
        except ValueError as e:
            shopify_failures_counter.labels(operation=operation).inc()
            raise ShopifyAPIError(f"Shopify API returned invalid JSON ({operation})") from e

        if payload.get("errors"):
            shopify_failures_counter.labels(operation=operation).inc()
            raise ShopifyAPIError(f"GraphQL errors: {json.dumps(payload['errors'], ensure_ascii=False)}")

        data = payload.get("data")
        if data is None:
            shopify_failures_counter.labels(operation=operation).inc()
            raise ShopifyAPIError(f"Shopify API response has no data ({operation})")
        return data

    async def _paginate(
        self,
        http: httpx.AsyncClient,
        operation: str,
        document: str,
        connection: str,
        extra_variables: Dict[str, Any] | None = None,
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        """Yield the nodes of a cursor-paginated connection, one page at a time"""
        cursor: Optional[str] = None
        while True:
            variables: Dict[str, Any] = {"first": self.page_size, **(extra_variables or {})}
            if cursor is not None:
                variables["cursor"] = cursor

            data = await self._execute(http, operation, document, variables)
            try:
                page = data[connection]
                nodes = [edge["node"] for edge in page["edges"]]
                has_next_page = page["pageInfo"]["hasNextPage"]
                cursor = page["pageInfo"]["endCursor"]
            except (KeyError, TypeError) as e:
                raise ShopifyAPIError(f"Invalid {connection} page from Shopify: {e}") from e
            if has_next_page and cursor is None:
                raise ShopifyAPIError(f"Shopify reported more {connection} but no endCursor")

            yield nodes

            if not has_next_page:
                break

    async def iter_paid_orders(self) -> AsyncIterator[Order]:
        """
        Stream every order whose financial status is paid.

        Pages are requested one after another; the next page is only fetched
        once the caller has consumed the current one.

        Raises:
            ShopifyAPIError: On API failures or malformed orders
            InvalidAmount: If an order carries an unparseable amount
        """
        async with self._http() as http:
            async for nodes in self._paginate(
                http,
                "getOrders",
                PAID_ORDERS_QUERY,
                "orders",
                {"lineItemsFirst": self.line_items_page_size},
            ):
                for node in nodes:
                    yield parse_order(node)

    async def fetch_paid_orders(self) -> List[Order]:
        return [order async for order in self.iter_paid_orders()]

    async def fetch_all_products(self) -> List[Product]:
        """Fetch the whole product catalog"""
        products = []
        async with self._http() as http:
            async for nodes in self._paginate(http, "getProducts", PRODUCTS_QUERY, "products"):
                products.extend(parse_product(node) for node in nodes)
        return products

    async def set_metafields(
        self,
        writes: Sequence[MetafieldWrite],
        batching: WriteBatching | None = None,
    ) -> List[BatchResult]:
        """
        Submit metafield writes in batches, pausing between batches.

        A batch that fails as a whole (HTTP or GraphQL error) is counted as
        errors for all of its inputs; the remaining batches are still sent.

        Returns:
            One BatchResult per batch, in submission order
        """
        batching = batching or settings.write_batching()
        batches = list(chunked(writes, batching.batch_size))
        results: List[BatchResult] = []

        async with self._http() as http:
            for index, batch in enumerate(batches, start=1):
                logger.info(
                    "Writing metafield batch",
                    extra={"batch": index, "batches": len(batches), "size": len(batch)},
                )
                try:
                    data = await self._execute(
                        http,
                        "metafieldsSet",
                        METAFIELDS_SET_MUTATION,
                        {"metafields": [write.to_input() for write in batch]},
                    )
                    result = parse_set_result(data)
                except ShopifyAPIError as e:
                    logger.error(f"Metafield batch {index} failed: {e}", extra={"batch": index})
                    result = BatchResult(applied_count=0, error_count=len(batch))
                results.append(result)

                # Rate limit: pause between batches, not after the last one
                if index < len(batches):
                    await asyncio.sleep(batching.inter_batch_delay_seconds)

        return results

    async def fetch_shop_info(self) -> ShopInfo:
        """Connection check: shop details plus a few products and paid orders"""
        async with self._http() as http:
            data = await self._execute(http, "shopInfo", SHOP_INFO_QUERY)
        try:
            shop = data["shop"]
            return ShopInfo(
                name=shop["name"],
                domain=shop["myshopifyDomain"],
                currency_code=shop["currencyCode"],
                sample_products=[parse_product(edge["node"]) for edge in data["products"]["edges"]],
                sample_orders=[
                    {
                        "name": edge["node"]["name"],
                        "amount": edge["node"]["totalPriceSet"]["shopMoney"]["amount"],
                        "currency_code": edge["node"]["totalPriceSet"]["shopMoney"]["currencyCode"],
                    }
                    for edge in data["orders"]["edges"]
                ],
            )
        except (KeyError, TypeError) as e:
            raise ShopifyAPIError(f"Invalid shop info from Shopify: {e}") from e

    async def fetch_product_metafields(self, namespace: str, first: int = 10) -> List[ProductMetafields]:
        """Fetch the first products with their metafields in `namespace`"""
        async with self._http() as http:
            data = await self._execute(
                http,
                "productMetafields",
                PRODUCT_METAFIELDS_QUERY,
                {"first": first, "namespace": namespace},
            )
        try:
            return [
                ProductMetafields(
                    product=parse_product(edge["node"]),
                    metafields=[
                        StoredMetafield(
                            namespace=mf["node"]["namespace"],
                            key=mf["node"]["key"],
                            value=mf["node"]["value"],
                            type=mf["node"]["type"],
                        )
                        for mf in edge["node"]["metafields"]["edges"]
                    ],
                )
                for edge in data["products"]["edges"]
            ]
        except (KeyError, TypeError) as e:
            raise ShopifyAPIError(f"Invalid metafield data from Shopify: {e}") from e


def _line_item_product_id(node: Dict[str, Any]) -> Optional[str]:
    # Deleted variants and products come back as null
    variant = node.get("variant")
    if variant is None:
        return None
    product = variant.get("product")
    if product is None:
        return None
    return product["id"]


def parse_order(node: Dict[str, Any]) -> Order:
    """
    Build an Order from a GraphQL order node.

    Raises:
        ShopifyAPIError: If the node is missing required fields
        InvalidAmount: If a line item or transaction amount cannot be parsed
    """
    try:
        line_items = tuple(
            LineItem(
                product_id=_line_item_product_id(edge["node"]),
                amount_minor=to_minor_units(edge["node"]["discountedTotalSet"]["shopMoney"]["amount"]),
            )
            for edge in node["lineItems"]["edges"]
        )

        transactions = []
        for refund in node.get("refunds") or []:
            for edge in (refund.get("transactions") or {}).get("edges", []):
                txn = edge["node"]
                transactions.append(
                    RefundTransaction(
                        amount_minor=to_minor_units(txn["amount"]),
                        kind=str(txn["kind"]).lower(),
                        status=str(txn["status"]).lower(),
                    )
                )

        return Order(
            id=node["id"],
            name=node.get("name") or "",
            line_items=line_items,
            refund_transactions=tuple(transactions),
        )
    except (KeyError, TypeError) as e:
        raise ShopifyAPIError(f"Invalid order data from Shopify: {e}") from e


def parse_product(node: Dict[str, Any]) -> Product:
    try:
        return Product(id=node["id"], title=node["title"], handle=node.get("handle") or "")
    except (KeyError, TypeError) as e:
        raise ShopifyAPIError(f"Invalid product data from Shopify: {e}") from e


def parse_set_result(data: Dict[str, Any]) -> BatchResult:
    """Count applied metafields and user errors of a metafieldsSet response"""
    try:
        payload = data["metafieldsSet"]
        metafields = payload.get("metafields") or []
        user_errors = payload.get("userErrors") or []
    except (KeyError, TypeError, AttributeError) as e:
        raise ShopifyAPIError(f"Invalid metafieldsSet response: {e}") from e

    if user_errors:
        logger.error("Metafield update errors", extra={"user_errors": user_errors})

    return BatchResult(applied_count=len(metafields), error_count=len(user_errors))

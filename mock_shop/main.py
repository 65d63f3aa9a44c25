"""Mock Shopify Admin GraphQL server backed by in-memory orders and products"""

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel

# Support both local development and Docker
DATA_DIR = Path("/shop_stub") if os.path.exists("/shop_stub") else Path(__file__).resolve().parent / "shop_stub"

_OPERATION = re.compile(r"\b(?:query|mutation)\s+(\w+)")


class GraphQLRequest(BaseModel):
    query: str
    variables: Dict[str, Any] = {}


@dataclass
class MockShop:
    """Shop state served by the mock; orders and products are raw GraphQL nodes"""

    orders: List[Dict[str, Any]] = field(default_factory=list)
    products: List[Dict[str, Any]] = field(default_factory=list)
    name: str = "Mock Shop"
    domain: str = "mock-shop.myshopify.com"
    currency_code: str = "JPY"
    failing_batches: Set[int] = field(default_factory=set)  # 1-based metafieldsSet calls
    metafields: Dict[Tuple[str, str, str], Dict[str, Any]] = field(default_factory=dict)
    operations: List[str] = field(default_factory=list)
    batch_sizes: List[int] = field(default_factory=list)

    @classmethod
    def from_directory(cls, path: Path) -> "MockShop":
        orders_file = path / "orders.json"
        products_file = path / "products.json"
        return cls(
            orders=json.loads(orders_file.read_text()) if orders_file.exists() else [],
            products=json.loads(products_file.read_text()) if products_file.exists() else [],
        )


def _page(nodes: List[Dict[str, Any]], first: int, cursor: Optional[str]) -> Dict[str, Any]:
    start = int(cursor) if cursor is not None else 0
    chunk = nodes[start : start + first]
    end = start + len(chunk)
    return {
        "pageInfo": {"hasNextPage": end < len(nodes), "endCursor": str(end) if chunk else None},
        "edges": [{"node": node} for node in chunk],
    }


def create_app(shop: MockShop) -> FastAPI:
    app = FastAPI(title="Mock Shopify Admin API", version="1.0.0")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/admin/api/{api_version}/graphql.json")
    def graphql(
        api_version: str,
        body: GraphQLRequest,
        x_shopify_access_token: Optional[str] = Header(default=None),
    ):
        if not x_shopify_access_token:
            raise HTTPException(status_code=401, detail="missing access token")

        match = _OPERATION.search(body.query)
        operation = match.group(1) if match else ""
        shop.operations.append(operation)
        variables = body.variables

        if operation == "getOrders":
            paid = _paid_orders(shop)
            return {"data": {"orders": _page(paid, variables["first"], variables.get("cursor"))}}

        if operation == "getProducts":
            return {"data": {"products": _page(shop.products, variables["first"], variables.get("cursor"))}}

        if operation == "metafieldsSet":
            return {"data": {"metafieldsSet": _set_metafields(shop, variables["metafields"])}}

        if operation == "shopInfo":
            return {
                "data": {
                    "shop": {"name": shop.name, "myshopifyDomain": shop.domain, "currencyCode": shop.currency_code},
                    "products": _page(shop.products, 5, None),
                    "orders": _page(_paid_orders(shop), 5, None),
                }
            }

        if operation == "productMetafields":
            return {"data": {"products": _page(_with_metafields(shop, variables["namespace"]), variables["first"], None)}}

        return {"errors": [{"message": f"Unknown operation {operation!r}"}]}

    return app


def _paid_orders(shop: MockShop) -> List[Dict[str, Any]]:
    return [o for o in shop.orders if o.get("displayFinancialStatus", "PAID") == "PAID"]


def _set_metafields(shop: MockShop, inputs: List[Dict[str, Any]]) -> Dict[str, Any]:
    shop.batch_sizes.append(len(inputs))
    if len(shop.batch_sizes) in shop.failing_batches:
        return {
            "metafields": None,
            "userErrors": [
                {"field": ["metafields", str(i), "value"], "message": "Value is invalid"} for i in range(len(inputs))
            ],
        }

    stored = []
    for item in inputs:
        key = (item["ownerId"], item["namespace"], item["key"])
        shop.metafields[key] = dict(item)
        stored.append({"id": f"gid://shopify/Metafield/{len(shop.metafields)}", **item})
    return {
        "metafields": [{k: m[k] for k in ("id", "namespace", "key", "value")} for m in stored],
        "userErrors": [],
    }


def _with_metafields(shop: MockShop, namespace: str) -> List[Dict[str, Any]]:
    nodes = []
    for product in shop.products:
        edges = [
            {"node": {"id": f"{owner}/{key}", "namespace": ns, "key": key, "value": m["value"], "type": m["type"]}}
            for (owner, ns, key), m in shop.metafields.items()
            if owner == product["id"] and ns == namespace
        ]
        nodes.append({**product, "metafields": {"edges": edges}})
    return nodes


app = create_app(MockShop.from_directory(DATA_DIR))

"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class LineItem:
    """One product entry of an order, carrying its discounted total"""

    product_id: Optional[str]  # None when the variant or product was deleted
    amount_minor: int


@dataclass(frozen=True)
class RefundTransaction:
    """Money movement attached to a refund"""

    amount_minor: int
    kind: str  # "refund", "void", ...
    status: str  # "success", "pending", "failure", ...

    @property
    def is_effective(self) -> bool:
        return self.kind == "refund" and self.status == "success"


@dataclass(frozen=True)
class Order:
    """Paid order read from the order feed"""

    id: str
    line_items: Tuple[LineItem, ...]
    refund_transactions: Tuple[RefundTransaction, ...] = ()
    name: str = ""


@dataclass(frozen=True)
class Product:
    """Catalog entry"""

    id: str
    title: str
    handle: str = ""


@dataclass
class ProductSalesRecord:
    """Running totals for one product; both fields only ever grow during a fold"""

    gross_minor: int = 0
    refund_minor: int = 0

    @property
    def net_minor(self) -> int:
        return self.gross_minor - self.refund_minor


@dataclass(frozen=True)
class NetSalesSnapshot:
    """Net sales figure ready to be written for one product"""

    product_id: str
    title: str
    net_minor: int


@dataclass(frozen=True)
class MetafieldWrite:
    """Single metafieldsSet input"""

    owner_id: str
    namespace: str
    key: str
    type: str
    value: str

    def to_input(self) -> Dict[str, str]:
        return {
            "ownerId": self.owner_id,
            "namespace": self.namespace,
            "key": self.key,
            "type": self.type,
            "value": self.value,
        }


@dataclass(frozen=True)
class WriteBatching:
    """Pacing for metafield writes"""

    batch_size: int = 25
    inter_batch_delay_seconds: float = 1.0


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one metafieldsSet call"""

    applied_count: int
    error_count: int


@dataclass
class WriteSummary:
    """Totals over every batch of a write step"""

    batches: List[BatchResult] = field(default_factory=list)

    @property
    def applied_count(self) -> int:
        return sum(b.applied_count for b in self.batches)

    @property
    def error_count(self) -> int:
        return sum(b.error_count for b in self.batches)

    @property
    def failed(self) -> bool:
        return self.error_count > 0


@dataclass(frozen=True)
class ShopInfo:
    """Shop details returned by the connection check"""

    name: str
    domain: str
    currency_code: str
    sample_products: List[Product]
    sample_orders: List[Dict[str, Any]]


@dataclass(frozen=True)
class StoredMetafield:
    """Metafield as currently stored on a product"""

    namespace: str
    key: str
    value: str
    type: str


@dataclass(frozen=True)
class ProductMetafields:
    """Product together with its stored metafields in one namespace"""

    product: Product
    metafields: List[StoredMetafield]

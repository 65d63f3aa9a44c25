"""Structured JSON logging for scheduled runs"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from sales_snapshot.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_product_sales(product_id: str, title: str, net_minor: int, amount: str) -> None:
    """Log the net sales figure computed for one product"""
    logging.info(
        "Product net sales",
        extra={
            "product_id": product_id,
            "title": title,
            "net_minor": net_minor,
            "amount": amount,
        },
    )


def log_run_summary(
    orders_folded: int,
    products_with_sales: int,
    writes_requested: int,
    applied_count: int,
    error_count: int,
    duration_ms: float,
) -> None:
    """Log structured run outcome"""
    logging.info(
        "Sales snapshot completed",
        extra={
            "step": "run_complete",
            "orders_folded": orders_folded,
            "products_with_sales": products_with_sales,
            "writes_requested": writes_requested,
            "applied_count": applied_count,
            "error_count": error_count,
            "duration_ms": duration_ms,
        },
    )

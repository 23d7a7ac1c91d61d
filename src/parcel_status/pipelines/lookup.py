# src/parcel_status/pipelines/lookup.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from parcel_status.models import Order

logger = logging.getLogger("parcel_status.pipelines.lookup")


# --- Public contract ---------------------------------------------------------

class OrderLookupError(RuntimeError):
    """A lookup that cannot be answered; `status_code` mirrors the HTTP boundary."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class OrderNotFoundError(OrderLookupError):
    status_code = 404

    def __init__(self, message: str = "Order not found") -> None:
        super().__init__(message)


class ZipMismatchError(OrderLookupError):
    status_code = 403

    def __init__(self, message: str = "ZIP mismatch") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class LookupResult:
    orders: tuple[Order, ...]
    has_zip: bool

    @property
    def primary(self) -> Optional[Order]:
        return self.orders[0] if self.orders else None


def clean_zip(zip_code: Optional[str]) -> str:
    return (zip_code or "").strip()


def sanitize_order(order: Order) -> Order:
    """Strip recipient details and package contents for ZIP-less lookups."""
    info = replace(
        order.delivery_info,
        recipient=None,
        recipient_notification=None,
        email=None,
        street=None,
        articles=None,
    )
    return replace(order, delivery_info=info, zip_code=None)


def _by_id(orders: Iterable[Order]) -> tuple[Order, ...]:
    return tuple(sorted(orders, key=lambda o: o.id or ""))


class OrderLookup:
    """In-memory answer to `GET /orders/<order_no>[?zip=]` over a set of shipments."""

    def __init__(self, orders: Iterable[Order]) -> None:
        self._orders = tuple(orders)

    def __len__(self) -> int:
        return len(self._orders)

    def find(self, order_no: str, zip_code: Optional[str] = None) -> LookupResult:
        """
        Shipments sharing `order_no`, sorted by id.

        - no shipment matches -> OrderNotFoundError
        - ZIP given and none of the matches carries it -> ZipMismatchError
        - ZIP matched -> full records
        - no ZIP -> sanitized records
        """
        matches = [o for o in self._orders if o.delivery_info.order_no == order_no]
        if not matches:
            logger.info("No shipments for order %s", order_no)
            raise OrderNotFoundError()

        zip_code = clean_zip(zip_code)
        if zip_code:
            zip_matches = [o for o in matches if o.zip_code == zip_code]
            if not zip_matches:
                logger.info("ZIP mismatch for order %s", order_no)
                raise ZipMismatchError()
            logger.debug("Order %s: %d shipment(s) with ZIP",
                         order_no, len(zip_matches))
            return LookupResult(_by_id(zip_matches), has_zip=True)

        logger.debug("Order %s: %d shipment(s), sanitized", order_no, len(matches))
        return LookupResult(_by_id(sanitize_order(o) for o in matches), has_zip=False)


__all__ = [
    "LookupResult",
    "OrderLookup",
    "OrderLookupError",
    "OrderNotFoundError",
    "ZipMismatchError",
    "clean_zip",
    "sanitize_order",
]

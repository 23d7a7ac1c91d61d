from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Optional, Sequence

from parcel_status.models import Order
from parcel_status.pipelines.lookup import LookupResult, OrderNotFoundError
from parcel_status.pipelines.merge import merge_orders
from parcel_status.pipelines.report import TrackingReport, build_report

if TYPE_CHECKING:
    from parcel_status.api.client import OrdersClient


class TrackingService:
    """Orchestrates fetch, merge with already-known shipments, and report building."""

    def __init__(
        self,
        logger,
        *,
        client: OrdersClient,
        reference_now: dt.datetime | None = None,
    ) -> None:
        self.logger = logger
        self.client = client
        self.reference_now = reference_now

    def fetch(
        self,
        order_no: str,
        zip_code: Optional[str] = None,
        *,
        known_orders: Sequence[Order] = (),
    ) -> LookupResult:
        result = self.client.fetch_orders(order_no, zip_code)
        self.logger.info(
            "Fetched %d shipment(s) for order %s (zip=%s)",
            len(result.orders), order_no, "yes" if result.has_zip else "no",
        )
        if not known_orders:
            return result

        merged = merge_orders(known_orders, result.orders)
        self.logger.debug(
            "Merged %d known shipment(s) -> %d", len(known_orders), len(merged))
        return LookupResult(tuple(merged), has_zip=result.has_zip)

    def lookup(
        self,
        order_no: str,
        zip_code: Optional[str] = None,
        *,
        known_orders: Sequence[Order] = (),
    ) -> TrackingReport:
        result = self.fetch(order_no, zip_code, known_orders=known_orders)
        if not result.orders:
            raise OrderNotFoundError()

        now = self.reference_now or dt.datetime.now(dt.timezone.utc)
        report = build_report(result.orders, has_zip=result.has_zip, now=now)
        self.logger.info("Order %s resolved to %s", order_no, report.status.code)
        return report

# src/parcel_status/api/client.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Optional, Protocol
from urllib.parse import quote

from parcel_status.api.normalize import normalize_orders
from parcel_status.api.transport import RequestsTransport
from parcel_status.pipelines.lookup import (
    LookupResult,
    OrderLookup,
    OrderLookupError,
    OrderNotFoundError,
    ZipMismatchError,
    clean_zip,
)

SAMPLE_DATA_PACKAGE = "parcel_status.data"
SAMPLE_DATA_FILE = "shipments.json"


class OrdersClient(Protocol):
    def fetch_orders(self, order_no: str, zip_code: Optional[str] = None) -> LookupResult:
        ...


def load_sample_payload() -> Any:
    """The bundled demo shipments as parsed JSON."""
    text = resources.files(SAMPLE_DATA_PACKAGE).joinpath(
        SAMPLE_DATA_FILE).read_text(encoding="utf-8")
    return json.loads(text)


@dataclass
class ReplayClient:
    """Serves lookups from a JSON file holding an array of order records.

    With no `data_file` the bundled sample shipments are used. The file is read
    once; lookups run against the in-memory index.
    """

    data_file: Optional[Path] = None
    _lookup: OrderLookup = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.data_file is None:
            raw = load_sample_payload()
        else:
            self.data_file = Path(self.data_file)
            if not self.data_file.is_file():
                raise FileNotFoundError(self.data_file)
            raw = json.loads(self.data_file.read_text(encoding="utf-8"))
        self._lookup = OrderLookup(normalize_orders(raw))

    def fetch_orders(self, order_no: str, zip_code: Optional[str] = None) -> LookupResult:
        return self._lookup.find(order_no, zip_code)


class OrdersApiClient:
    """Client for a REST endpoint `GET {base_url}/orders/{order_no}[?zip=]`.

    Responses:
    - 200 with a JSON array of orders (sanitized unless a matching ZIP was sent)
    - 403 when the ZIP does not match any shipment of the order
    - 404 when the order number is unknown
    """

    def __init__(
        self,
        base_url: str,
        transport: Optional[RequestsTransport] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.transport = transport or RequestsTransport()
        self.logger: logging.Logger = logger or logging.getLogger(
            "parcel_status.api.client"
        )

    def _endpoint(self, order_no: str) -> str:
        return f"{self.base_url}/orders/{quote(order_no, safe='')}"

    def fetch_orders(self, order_no: str, zip_code: Optional[str] = None) -> LookupResult:
        zip_code = clean_zip(zip_code)
        params = {"zip": zip_code} if zip_code else None
        endpoint = self._endpoint(order_no)

        self.logger.debug("GET %s (zip=%s)", endpoint, "yes" if zip_code else "no")
        try:
            resp = self.transport.get(endpoint, params=params)
        except Exception as ex:  # network/transport error
            self.logger.warning("Order lookup transport failed for %s: %s", endpoint, ex)
            raise OrderLookupError(f"Lookup failed: {ex}") from ex

        status = getattr(resp, "status_code", None)
        if status == 404:
            raise OrderNotFoundError()
        if status == 403:
            raise ZipMismatchError()
        if status is None or status >= 400:
            body = getattr(resp, "text", "") or ""
            self.logger.warning(
                "Order lookup returned error status=%s response_body=%s",
                status,
                (body[:2000] + "...") if len(body) > 2000 else body,
            )
            raise OrderLookupError(
                f"Lookup failed with status {status}", status_code=status or 500)

        try:
            payload = resp.json()
        except ValueError as ex:
            self.logger.warning("Order lookup returned a non-JSON body: %s", ex)
            raise OrderLookupError("Lookup returned an unreadable response") from ex

        orders = normalize_orders(payload)
        if not orders:
            raise OrderNotFoundError()
        self.logger.debug("Order %s: %d shipment(s) fetched", order_no, len(orders))
        return LookupResult(tuple(orders), has_zip=bool(zip_code))

import logging

import pytest
import requests

from parcel_status.api.client import OrdersApiClient
from parcel_status.api.transport import RequestsTransport
from parcel_status.pipelines.lookup import (
    OrderLookupError,
    OrderNotFoundError,
    ZipMismatchError,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


class FakeTransport:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, *, headers=None, params=None):
        self.calls.append((url, params))
        if self.exc is not None:
            raise self.exc
        return self.response


ORDERS = [
    {"_id": "2", "tracking_number": "TN2", "delivery_info": {"orderNo": "A B"}},
    {"_id": "1", "tracking_number": "TN1", "delivery_info": {"orderNo": "A B"}},
]


def test_fetch_orders_builds_endpoint_and_params():
    t = FakeTransport(FakeResponse(200, ORDERS))
    client = OrdersApiClient("https://api.example.com/", transport=t)

    result = client.fetch_orders("A B", " 60156 ")

    assert t.calls == [("https://api.example.com/orders/A%20B", {"zip": "60156"})]
    assert result.has_zip is True
    # server order is kept
    assert [o.id for o in result.orders] == ["2", "1"]


def test_fetch_orders_without_zip_sends_no_params():
    t = FakeTransport(FakeResponse(200, ORDERS))
    result = OrdersApiClient("https://api.example.com", transport=t).fetch_orders("AB")
    assert t.calls[0][1] is None
    assert result.has_zip is False


@pytest.mark.parametrize("status,exc", [(404, OrderNotFoundError), (403, ZipMismatchError)])
def test_fetch_orders_maps_answer_statuses(status, exc):
    t = FakeTransport(FakeResponse(status, {"message": "x"}))
    with pytest.raises(exc):
        OrdersApiClient("https://api.example.com", transport=t).fetch_orders("AB")


def test_fetch_orders_server_error_logs_and_raises(caplog):
    t = FakeTransport(FakeResponse(503, None, text="unavailable"))
    logger = logging.getLogger("test.orders_api")
    client = OrdersApiClient("https://api.example.com", transport=t, logger=logger)

    with caplog.at_level(logging.WARNING, logger="test.orders_api"):
        with pytest.raises(OrderLookupError) as ei:
            client.fetch_orders("AB")

    assert ei.value.status_code == 503
    assert "unavailable" in caplog.text


def test_fetch_orders_transport_failure_is_wrapped():
    t = FakeTransport(exc=requests.ConnectionError("boom"))
    with pytest.raises(OrderLookupError) as ei:
        OrdersApiClient("https://api.example.com", transport=t).fetch_orders("AB")
    assert ei.value.status_code == 500
    assert isinstance(ei.value.__cause__, requests.ConnectionError)


def test_fetch_orders_non_json_body():
    t = FakeTransport(FakeResponse(200, None, text="<html>"))
    with pytest.raises(OrderLookupError):
        OrdersApiClient("https://api.example.com", transport=t).fetch_orders("AB")


def test_fetch_orders_empty_list_is_not_found():
    t = FakeTransport(FakeResponse(200, []))
    with pytest.raises(OrderNotFoundError):
        OrdersApiClient("https://api.example.com", transport=t).fetch_orders("AB")


def test_requests_transport_configures_retries():
    transport = RequestsTransport(timeout=7, max_retries=2)
    try:
        adapter = transport.session.get_adapter("https://api.example.com")
        assert adapter.max_retries.total == 2
        assert 503 in adapter.max_retries.status_forcelist
        assert transport.session.headers["Accept"] == "application/json"
        assert transport.timeout == 7
    finally:
        transport.close()


def test_requests_transport_get_passes_timeout(monkeypatch):
    transport = RequestsTransport(timeout=5)
    seen = {}

    def fake_get(url, headers=None, params=None, timeout=None):
        seen.update(url=url, params=params, timeout=timeout)
        return FakeResponse(200, [])

    monkeypatch.setattr(transport.session, "get", fake_get)
    transport.get("https://api.example.com/orders/X", params={"zip": "1"})
    assert seen == {"url": "https://api.example.com/orders/X", "params": {"zip": "1"}, "timeout": 5}

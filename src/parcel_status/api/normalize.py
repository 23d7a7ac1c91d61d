# src/parcel_status/api/normalize.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from parcel_status.models import Article, Checkpoint, CheckpointMeta, DeliveryInfo, Order


def _str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _number(value: Any, cast=float):
    """Coerce to a number; None/garbage becomes 0."""
    try:
        return cast(value)
    except (TypeError, ValueError):
        return cast(0)


def _normalize_meta(raw: Any) -> Optional[CheckpointMeta]:
    if not isinstance(raw, dict):
        return None
    return CheckpointMeta(
        delivery_date=_str_or_none(raw.get("delivery_date")),
        delivery_time_frame_from=_str_or_none(raw.get("delivery_time_frame_from")),
        delivery_time_frame_to=_str_or_none(raw.get("delivery_time_frame_to")),
        pickup_address=_str_or_none(raw.get("pickup_address")),
    )


def normalize_checkpoint(raw: Dict[str, Any]) -> Checkpoint:
    return Checkpoint(
        event_timestamp=str(raw.get("event_timestamp") or ""),
        status=str(raw.get("status") or ""),
        status_details=_str_or_none(raw.get("status_details")),
        city=_str_or_none(raw.get("city")),
        country_iso3=_str_or_none(raw.get("country_iso3")),
        meta=_normalize_meta(raw.get("meta")),
    )


def _normalize_article(raw: Dict[str, Any]) -> Article:
    return Article(
        article_no=_str_or_none(raw.get("articleNo")),
        article_name=_str_or_none(raw.get("articleName")),
        article_image_url=_str_or_none(raw.get("articleImageUrl")),
        product_url=_str_or_none(raw.get("productUrl")),
        quantity=_number(raw.get("quantity"), int),
        price=_number(raw.get("price"), float),
    )


def normalize_delivery_info(raw: Any) -> DeliveryInfo:
    """
    Map a delivery_info object. `articles` stays None when the key is absent
    (a redacted payload), and becomes a tuple otherwise.
    """
    if not isinstance(raw, dict):
        return DeliveryInfo()

    articles = None
    raw_articles = raw.get("articles")
    if isinstance(raw_articles, list):
        articles = tuple(_normalize_article(a)
                         for a in raw_articles if isinstance(a, dict))

    return DeliveryInfo(
        order_no=_str_or_none(raw.get("orderNo")),
        timezone=_str_or_none(raw.get("timezone")),
        announced_delivery_date=_str_or_none(raw.get("announced_delivery_date")),
        recipient=_str_or_none(raw.get("recipient")),
        recipient_notification=_str_or_none(raw.get("recipient_notification")),
        email=_str_or_none(raw.get("email")),
        street=_str_or_none(raw.get("street")),
        articles=articles,
        city=_str_or_none(raw.get("city")),
        region=_str_or_none(raw.get("region")),
    )


def normalize_order(payload: Dict[str, Any]) -> Order:
    """Produce an Order from one JSON record; unknown keys are ignored."""
    raw_checkpoints = payload.get("checkpoints")
    checkpoints: tuple[Checkpoint, ...] = ()
    if isinstance(raw_checkpoints, list):
        checkpoints = tuple(
            normalize_checkpoint(c) for c in raw_checkpoints if isinstance(c, dict)
        )

    return Order(
        id=_str_or_none(payload.get("_id")),
        tracking_number=_str_or_none(payload.get("tracking_number")),
        courier=_str_or_none(payload.get("courier")),
        checkpoints=checkpoints,
        delivery_info=normalize_delivery_info(payload.get("delivery_info")),
        destination_country_iso3=_str_or_none(payload.get("destination_country_iso3")),
        zip_code=_str_or_none(payload.get("zip_code")),
        created=_str_or_none(payload.get("created")),
        updated=_str_or_none(payload.get("updated")),
    )


def normalize_orders(payload: Any) -> List[Order]:
    """
    Accept a JSON array of orders, a single order object, or an envelope
    ({"orders": [...]} / {"data": [...]}). Non-object entries are skipped.
    """
    entries: List[Any]
    if isinstance(payload, list):
        entries = payload
    elif isinstance(payload, dict):
        for key in ("orders", "data"):
            if isinstance(payload.get(key), list):
                entries = payload[key]
                break
        else:
            entries = [payload]
    else:
        entries = []

    return [normalize_order(e) for e in entries if isinstance(e, dict)]

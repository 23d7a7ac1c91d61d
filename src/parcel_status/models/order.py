from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Optional


def _compact(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """Drop None values so stripped fields vanish from the wire shape."""
    return {k: v for k, v in pairs if v is not None}


@dataclass(frozen=True)
class CheckpointMeta:
    delivery_date: Optional[str] = None          # calendar date, "YYYY-MM-DD"
    delivery_time_frame_from: Optional[str] = None  # "HH:MM"
    delivery_time_frame_to: Optional[str] = None
    pickup_address: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return _compact([(f.name, getattr(self, f.name)) for f in fields(self)])


@dataclass(frozen=True)
class Checkpoint:
    event_timestamp: str
    status: str = ""
    status_details: Optional[str] = None
    city: Optional[str] = None
    country_iso3: Optional[str] = None
    meta: Optional[CheckpointMeta] = None

    def to_dict(self) -> dict[str, Any]:
        return _compact([
            ("status", self.status),
            ("status_details", self.status_details),
            ("event_timestamp", self.event_timestamp),
            ("city", self.city),
            ("country_iso3", self.country_iso3),
            ("meta", self.meta.to_dict() if self.meta else None),
        ])


@dataclass(frozen=True)
class Article:
    article_no: Optional[str] = None
    article_name: Optional[str] = None
    article_image_url: Optional[str] = None
    product_url: Optional[str] = None
    quantity: int = 0
    price: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return _compact([
            ("articleNo", self.article_no),
            ("articleName", self.article_name),
            ("articleImageUrl", self.article_image_url),
            ("productUrl", self.product_url),
            ("quantity", self.quantity),
            ("price", self.price),
        ])


@dataclass(frozen=True)
class DeliveryInfo:
    # shared across every shipment of one order number
    order_no: Optional[str] = None
    timezone: Optional[str] = None               # IANA name; consumers default to UTC
    announced_delivery_date: Optional[str] = None

    # recipient details, stripped from ZIP-less lookups
    recipient: Optional[str] = None
    recipient_notification: Optional[str] = None
    email: Optional[str] = None
    street: Optional[str] = None
    articles: Optional[tuple[Article, ...]] = None

    city: Optional[str] = None
    region: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return _compact([
            ("orderNo", self.order_no),
            ("timezone", self.timezone),
            ("announced_delivery_date", self.announced_delivery_date),
            ("recipient", self.recipient),
            ("recipient_notification", self.recipient_notification),
            ("email", self.email),
            ("street", self.street),
            ("city", self.city),
            ("region", self.region),
            ("articles", [a.to_dict() for a in self.articles]
             if self.articles is not None else None),
        ])


@dataclass(frozen=True)
class Order:
    # identity
    id: Optional[str] = None
    tracking_number: Optional[str] = None
    courier: Optional[str] = None

    checkpoints: tuple[Checkpoint, ...] = ()
    delivery_info: DeliveryInfo = DeliveryInfo()

    destination_country_iso3: Optional[str] = None
    zip_code: Optional[str] = None
    created: Optional[str] = None
    updated: Optional[str] = None

    @property
    def timezone(self) -> str:
        return self.delivery_info.timezone or "UTC"

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible shape, same keys as the data source."""
        return _compact([
            ("_id", self.id),
            ("courier", self.courier),
            ("tracking_number", self.tracking_number),
            ("created", self.created),
            ("updated", self.updated),
            ("destination_country_iso3", self.destination_country_iso3),
            ("zip_code", self.zip_code),
            ("checkpoints", [c.to_dict() for c in self.checkpoints]),
            ("delivery_info", self.delivery_info.to_dict()),
        ])

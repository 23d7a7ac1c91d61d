# src/parcel_status/pipelines/merge.py
from __future__ import annotations

from dataclasses import fields, replace
from typing import Iterable, Optional, TypeVar

from parcel_status.models import DeliveryInfo, Order

T = TypeVar("T", Order, DeliveryInfo)


def order_key(order: Order) -> Optional[str]:
    """Identity used to line up records of the same shipment."""
    return order.id or order.tracking_number or None


def _overlay(base: T, top: T) -> T:
    """Copy every field of `top` that carries a value (not None, not an empty tuple)."""
    changes = {}
    for f in fields(top):
        value = getattr(top, f.name)
        if value is None or value == ():
            continue
        changes[f.name] = value
    return replace(base, **changes)


def merge_orders(preferred: Iterable[Order], fetched: Iterable[Order]) -> list[Order]:
    """
    Combine two views of the same shipments.

    Fetched records are indexed by key (records without a key are dropped). A
    preferred record with the same key overlays the fetched one; its delivery_info
    is merged field by field so a redacted fetch cannot erase recipient details
    already known. Unmatched preferred records are added. Sorted by id.
    """
    merged: dict[str, Order] = {}

    for order in fetched:
        key = order_key(order)
        if key is None:
            continue
        merged[key] = order

    for order in preferred:
        key = order_key(order)
        if key is None:
            continue
        existing = merged.get(key)
        if existing is None:
            merged[key] = order
            continue
        combined = _overlay(existing, order)
        merged[key] = replace(
            combined,
            delivery_info=_overlay(existing.delivery_info, order.delivery_info),
        )

    return sorted(merged.values(), key=lambda o: o.id or "")


__all__ = ["merge_orders", "order_key"]

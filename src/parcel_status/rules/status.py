# src/parcel_status/rules/status.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, NamedTuple, Optional, Sequence

from parcel_status.models import Checkpoint, DeliveryInfo
from parcel_status.utils.dates import coerce_now, parse_instant


@dataclass(frozen=True)
class ComputedStatus:
    code: str
    label: str


# The closed set of statuses we derive
DELIVERED = ComputedStatus("delivered", "Delivered")
READY_FOR_COLLECTION = ComputedStatus("ready_for_collection", "Ready for collection")
FAILED_ATTEMPT = ComputedStatus("failed_attempt", "Action required")
SCHEDULED = ComputedStatus("scheduled", "Delivery scheduled")
OUT_FOR_DELIVERY = ComputedStatus("out_for_delivery", "Out for Delivery")
IN_TRANSIT = ComputedStatus("in_transit", "In transit")
DELAYED = ComputedStatus("delayed", "Delayed")

ALL_STATUSES: tuple[ComputedStatus, ...] = (
    DELIVERED,
    READY_FOR_COLLECTION,
    FAILED_ATTEMPT,
    SCHEDULED,
    OUT_FOR_DELIVERY,
    IN_TRANSIT,
    DELAYED,
)
_BY_CODE = {s.code: s for s in ALL_STATUSES}

# -------- Text hints (lowercased) --------
_DELIVERED_HINTS: tuple[str, ...] = ("delivered",)
_COLLECTION_HINTS: tuple[str, ...] = ("collection", "pickup")
_FAILED_HINTS: tuple[str, ...] = ("failed", "attempt")
_DELAY_HINTS: tuple[str, ...] = ("delay",)
_OUT_FOR_DELIVERY_HINTS: tuple[str, ...] = (
    "out for delivery",
    "on the way to you",
    "on its way to recipient",
)
_SCHEDULE_HINTS: tuple[str, ...] = (
    "schedule",
    "delivery date set",
    "estimated delivery",
)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def status_for_code(code: str) -> ComputedStatus:
    """Look up one of the seven statuses; KeyError for anything else."""
    return _BY_CODE[code]


def _any_in(text: str, phrases: Iterable[str]) -> bool:
    t = (text or "").casefold()
    return any(p in t for p in phrases)


def _event_instant(cp: Checkpoint) -> datetime:
    # Unparseable timestamps sort behind every real event.
    return parse_instant(cp.event_timestamp) or _EPOCH


def sort_checkpoints(checkpoints: Iterable[Checkpoint]) -> list[Checkpoint]:
    """Newest first, as a new list; the input is never reordered."""
    return sorted(checkpoints, key=_event_instant, reverse=True)


def latest_checkpoint(checkpoints: Iterable[Checkpoint]) -> Optional[Checkpoint]:
    ordered = sort_checkpoints(checkpoints or ())
    return ordered[0] if ordered else None


def checkpoint_text(cp: Checkpoint) -> str:
    return f"{cp.status or ''} {cp.status_details or ''}".casefold()


def effective_delivery_date(
    latest: Optional[Checkpoint], delivery_info: Optional[DeliveryInfo]
) -> Optional[str]:
    """The latest checkpoint's meta.delivery_date, else the announced date."""
    if latest is not None and latest.meta is not None and latest.meta.delivery_date:
        return latest.meta.delivery_date
    if delivery_info is not None:
        return delivery_info.announced_delivery_date or None
    return None


def status_from_due_date(delivery_date: Optional[str], now: datetime) -> Optional[ComputedStatus]:
    """
    Delayed when the due date (midnight UTC for a bare date) is strictly before `now`,
    otherwise scheduled. None when there is no usable date.
    """
    due = parse_instant(delivery_date)
    if due is None:
        return None
    if due < now:
        return DELAYED
    return SCHEDULED


class _StatusRule(NamedTuple):
    hints: tuple[str, ...]
    resolve: Callable[[Optional[str], datetime], ComputedStatus]


# Evaluated top-down against the latest checkpoint; first match wins.
# Delivered is terminal and beats every other signal.
STATUS_RULES: tuple[_StatusRule, ...] = (
    _StatusRule(_DELIVERED_HINTS, lambda due, now: DELIVERED),
    _StatusRule(_COLLECTION_HINTS, lambda due, now: READY_FOR_COLLECTION),
    _StatusRule(_FAILED_HINTS, lambda due, now: FAILED_ATTEMPT),
    _StatusRule(_DELAY_HINTS, lambda due, now: DELAYED),
    _StatusRule(_OUT_FOR_DELIVERY_HINTS, lambda due, now: OUT_FOR_DELIVERY),
    _StatusRule(
        _SCHEDULE_HINTS,
        lambda due, now: status_from_due_date(due, now) or SCHEDULED,
    ),
)


def compute_status(
    checkpoints: Sequence[Checkpoint],
    delivery_info: Optional[DeliveryInfo] = None,
    *,
    now: Optional[datetime] = None,
) -> ComputedStatus:
    """
    Derive the canonical status of a shipment from its latest checkpoint.

    Precedence (top to bottom):
        Delivered
        ReadyForCollection
        FailedAttempt
        Delayed             (explicit "delay" text)
        OutForDelivery
        Scheduled/Delayed   (schedule text; split on the due date)
        Scheduled/Delayed   (due date alone)
        InTransit

    Without checkpoints only the announced delivery date is considered.
    """
    now = coerce_now(now)
    latest = latest_checkpoint(checkpoints)

    if latest is None:
        announced = delivery_info.announced_delivery_date if delivery_info else None
        return status_from_due_date(announced, now) or IN_TRANSIT

    text = checkpoint_text(latest)
    due = effective_delivery_date(latest, delivery_info)

    for rule in STATUS_RULES:
        if _any_in(text, rule.hints):
            return rule.resolve(due, now)

    return status_from_due_date(due, now) or IN_TRANSIT


__all__ = [
    "ALL_STATUSES",
    "ComputedStatus",
    "DELAYED",
    "DELIVERED",
    "FAILED_ATTEMPT",
    "IN_TRANSIT",
    "OUT_FOR_DELIVERY",
    "READY_FOR_COLLECTION",
    "SCHEDULED",
    "STATUS_RULES",
    "checkpoint_text",
    "compute_status",
    "effective_delivery_date",
    "latest_checkpoint",
    "sort_checkpoints",
    "status_for_code",
    "status_from_due_date",
]

# src/parcel_status/rules/explainer.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional

from parcel_status.models import Checkpoint, Order
from parcel_status.rules.status import (
    ComputedStatus,
    effective_delivery_date,
    latest_checkpoint,
)
from parcel_status.utils.dates import (
    calendar_day_label,
    coerce_now,
    format_short_date,
    format_time,
    relative_day_label,
)

# -------- Detail hints (lowercased) --------
_DEPOT_HINTS: tuple[str, ...] = ("depot", "facility")
_TRANSIT_DEPOT_HINTS: tuple[str, ...] = ("depot", "facility", "sorting center")
_ARRIVAL_HINTS: tuple[str, ...] = ("arrived", "arrival")


@dataclass(frozen=True)
class StatusExplanation:
    next_action: str
    explanation: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def _details_match(cp: Checkpoint, phrases: tuple[str, ...]) -> bool:
    text = (cp.status_details or "").casefold()
    return any(p in text for p in phrases)


def _day_suffix(day_label: str) -> str:
    """' yesterday' / ' Jan 5, 2023, ...'; nothing for today or an unknown day."""
    if day_label and day_label != "today":
        return f" {day_label}"
    return ""


def _prefixed(prefix: str, value: Optional[str]) -> str:
    return f"{prefix}{value}" if value else ""


@dataclass(frozen=True)
class _Context:
    """Everything the phrasing rules read, resolved once per call."""
    tz: str
    now: datetime
    latest: Optional[Checkpoint]
    announced_date: Optional[str]
    delivery_date: Optional[str]
    courier: Optional[str]

    @property
    def city(self) -> str:
        return (self.latest.city or "") if self.latest else ""

    @property
    def time_str(self) -> str:
        return format_time(self.latest.event_timestamp, self.tz) if self.latest else ""

    @property
    def day_label(self) -> str:
        if self.latest is None:
            return ""
        return relative_day_label(self.latest.event_timestamp, self.tz, self.now)

    @property
    def expected_date(self) -> Optional[str]:
        # Only the announced date drives "expected" phrasing for moving parcels.
        if not self.announced_date:
            return None
        return calendar_day_label(self.announced_date, self.tz, self.now) or None


def _explain_delivered(ctx: _Context) -> StatusExplanation:
    if ctx.latest is None:
        return StatusExplanation("No action required", "Your package has been delivered.")
    when = _prefixed(" ", ctx.day_label) + _prefixed(" at ", ctx.time_str)
    return StatusExplanation(
        "No action required",
        f"Your package was delivered{when}.",
    )


def _explain_ready_for_collection(ctx: _Context) -> StatusExplanation:
    pickup = None
    if ctx.latest is not None and ctx.latest.meta is not None:
        pickup = ctx.latest.meta.pickup_address
    pickup = pickup or "the pickup location"
    day = ctx.day_label if ctx.latest else "soon"
    return StatusExplanation(
        "Please collect your package",
        f"Your package is ready for collection{_prefixed(' ', day)} at {pickup}. "
        "Please bring a valid ID.",
    )


def _explain_failed_attempt(ctx: _Context) -> StatusExplanation:
    courier = ctx.courier.upper() if ctx.courier else "the carrier"
    return StatusExplanation(
        "Action required: Please contact carrier",
        f"A delivery attempt failed{_prefixed(' ', ctx.day_label)}. "
        f"Please contact {courier} to arrange a new delivery or collection.",
    )


def _explain_scheduled(ctx: _Context) -> StatusExplanation:
    if not ctx.delivery_date:
        return StatusExplanation(
            "Delivery scheduled",
            "Your package has a scheduled delivery date.",
        )

    date_label = calendar_day_label(ctx.delivery_date, ctx.tz, ctx.now)
    meta = ctx.latest.meta if ctx.latest is not None else None
    window = ""
    if meta is not None and meta.delivery_time_frame_from and meta.delivery_time_frame_to:
        window = f" between {meta.delivery_time_frame_from} and {meta.delivery_time_frame_to}"

    explanation = f"Your package is scheduled for delivery{_prefixed(' ', date_label)}{window}."
    if ctx.city:
        explanation += (
            f" It departed from {ctx.city}{_prefixed(' at ', ctx.time_str)}"
            f"{_day_suffix(ctx.day_label)}."
        )

    next_action = f"Expected delivery {date_label}" if date_label else "Delivery scheduled"
    return StatusExplanation(next_action, explanation)


def _explain_delayed(ctx: _Context) -> StatusExplanation:
    original = format_short_date(ctx.announced_date, ctx.tz) or "the expected date"
    new_date = calendar_day_label(ctx.delivery_date, ctx.tz, ctx.now) or "soon"
    return StatusExplanation(
        "Delivery delayed",
        f"Your package was expected on {original} but has been delayed. "
        f"New expected delivery: {new_date}.",
    )


def _expected_tail(expected: Optional[str], *, colon: bool, fallback: str) -> str:
    if expected:
        sep = ": " if colon else " "
        return f". Expected delivery{sep}{expected}."
    return fallback


def _explain_out_for_delivery(ctx: _Context) -> StatusExplanation:
    expected = ctx.expected_date
    tail = _expected_tail(expected, colon=False, fallback=" today.")

    if ctx.latest is None:
        explanation = f"Your package is out for delivery{tail}"
    elif _details_match(ctx.latest, _DEPOT_HINTS):
        origin = f"from {ctx.city}" if ctx.city else "the local depot"
        explanation = (
            f"Your parcel departed {origin}{_prefixed(' at ', ctx.time_str)}"
            f"{_day_suffix(ctx.day_label)} and is out for delivery{tail}"
        )
    else:
        explanation = (
            f"Your package is out for delivery{_prefixed(' from ', ctx.city)}"
            f"{_prefixed(' (departed at ', ctx.time_str)}{')' if ctx.time_str else ''}{tail}"
        )

    next_action = f"Expected delivery {expected}" if expected else "Expected delivery today"
    return StatusExplanation(next_action, explanation)


def _explain_in_transit(ctx: _Context) -> StatusExplanation:
    expected = ctx.expected_date
    tail = _expected_tail(expected, colon=True, fallback=".")

    if ctx.latest is None:
        explanation = f"Your package is in transit{tail}"
    elif _details_match(ctx.latest, _TRANSIT_DEPOT_HINTS):
        origin = f"from {ctx.city}" if ctx.city else "the local depot"
        explanation = (
            f"Your parcel departed {origin}{_prefixed(' at ', ctx.time_str)}"
            f"{_day_suffix(ctx.day_label)}{_prefixed(' and is expected ', expected)}."
        )
    elif _details_match(ctx.latest, _ARRIVAL_HINTS):
        explanation = (
            f"Your package arrived{_prefixed(' in ', ctx.city)}{_prefixed(' at ', ctx.time_str)}"
            f"{_day_suffix(ctx.day_label)}{tail}"
        )
    else:
        explanation = (
            f"Your package is in transit{_prefixed(' from ', ctx.city)}"
            f"{_prefixed(' (last update: ', ctx.time_str)}{')' if ctx.time_str else ''}{tail}"
        )

    next_action = f"Expected delivery {expected}" if expected else "In transit"
    return StatusExplanation(next_action, explanation)


_EXPLAINERS = {
    "delivered": _explain_delivered,
    "ready_for_collection": _explain_ready_for_collection,
    "failed_attempt": _explain_failed_attempt,
    "scheduled": _explain_scheduled,
    "delayed": _explain_delayed,
    "out_for_delivery": _explain_out_for_delivery,
    "in_transit": _explain_in_transit,
}


def explain_status(
    order: Order,
    status: ComputedStatus,
    *,
    now: Optional[datetime] = None,
) -> StatusExplanation:
    """
    Build the next-action directive and the explanation sentence for `status`.

    Phrasing reads the latest checkpoint (time and calendar day in the order's
    time zone, UTC when unset), the announced and checkpoint delivery dates, and
    keywords in the checkpoint details. Missing fields drop their clause.
    """
    latest = latest_checkpoint(order.checkpoints)
    info = order.delivery_info
    ctx = _Context(
        tz=order.timezone,
        now=coerce_now(now),
        latest=latest,
        announced_date=info.announced_delivery_date if info else None,
        delivery_date=effective_delivery_date(latest, info),
        courier=order.courier,
    )

    explainer = _EXPLAINERS.get(status.code)
    if explainer is None:
        return StatusExplanation("Tracking in progress", "Your package is being processed.")
    return explainer(ctx)


__all__ = ["StatusExplanation", "explain_status"]

# src/parcel_status/pipelines/report.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from parcel_status.models import Order
from parcel_status.pipelines.lookup import OrderNotFoundError
from parcel_status.rules.explainer import StatusExplanation, explain_status
from parcel_status.rules.status import (
    ComputedStatus,
    compute_status,
    effective_delivery_date,
    latest_checkpoint,
    sort_checkpoints,
)
from parcel_status.utils.dates import (
    anchor_calendar_date,
    calendar_day_label,
    coerce_now,
    format_long_date,
    format_time,
    relative_day_label,
)

HIDDEN_CONTENTS_NOTICE = "Enter the ZIP code of the delivery address to see package contents."


@dataclass(frozen=True)
class TimelineEntry:
    status: str
    details: Optional[str]
    timestamp: str
    time: str
    day_label: str
    location: Optional[str]
    is_latest: bool


@dataclass(frozen=True)
class ShipmentTimeline:
    title: str
    tracking_number: Optional[str]
    courier: Optional[str]
    entries: tuple[TimelineEntry, ...]


@dataclass(frozen=True)
class DeliveryEstimate:
    heading: str
    date_label: str
    formatted_date: str
    is_today: bool
    is_tomorrow: bool
    is_past: bool
    window: Optional[str]
    address_lines: tuple[str, ...]


@dataclass(frozen=True)
class ArticleLine:
    name: str
    sku: str
    quantity: int
    price: Optional[str]
    product_url: Optional[str]


@dataclass(frozen=True)
class ParcelSummary:
    label: Optional[str]
    articles: tuple[ArticleLine, ...]
    total_items: int
    total_value: Optional[str]


@dataclass(frozen=True)
class OrderHeader:
    order_no: str
    tracking: tuple[str, ...]
    status_label: str
    recipient: Optional[str]
    email: Optional[str]
    destination: Optional[str]
    updated_label: str


@dataclass(frozen=True)
class TrackingReport:
    status: ComputedStatus
    explanation: StatusExplanation
    header: OrderHeader
    estimate: Optional[DeliveryEstimate]
    parcels: tuple[ParcelSummary, ...]
    timelines: tuple[ShipmentTimeline, ...]
    has_zip: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def format_usd(amount: float) -> str:
    return f"${amount:,.2f}"


def _location(city: Optional[str], country: Optional[str]) -> Optional[str]:
    parts = [p for p in (city, country) if p]
    return ", ".join(parts) or None


def _tracking_label(order: Order) -> str:
    tn = order.tracking_number or "N/A"
    return f"{tn} ({order.courier.upper()})" if order.courier else tn


def build_timeline(order: Order, tz: str, now: datetime, *, title: str) -> ShipmentTimeline:
    entries = tuple(
        TimelineEntry(
            status=cp.status,
            details=cp.status_details,
            timestamp=cp.event_timestamp,
            time=format_time(cp.event_timestamp, tz),
            day_label=relative_day_label(cp.event_timestamp, tz, now),
            location=_location(cp.city, cp.country_iso3),
            is_latest=idx == 0,
        )
        for idx, cp in enumerate(sort_checkpoints(order.checkpoints))
    )
    return ShipmentTimeline(
        title=title,
        tracking_number=order.tracking_number,
        courier=order.courier,
        entries=entries,
    )


def build_estimate(order: Order, *, has_zip: bool, now: datetime) -> Optional[DeliveryEstimate]:
    """Expected (or past) delivery date card; None when no date is known."""
    tz = order.timezone
    latest = latest_checkpoint(order.checkpoints)
    info = order.delivery_info
    delivery_date = effective_delivery_date(latest, info)
    anchored = anchor_calendar_date(delivery_date)
    if anchored is None:
        return None

    date_label = calendar_day_label(delivery_date, tz, now)
    is_past = anchored < now

    window = None
    meta = latest.meta if latest is not None else None
    if meta is not None:
        start, end = meta.delivery_time_frame_from, meta.delivery_time_frame_to
        if start and end:
            window = f"{start} - {end}"
        else:
            window = start or end

    address: tuple[str, ...] = ()
    if has_zip and info.street:
        locality = ", ".join(p for p in (info.city, info.region) if p)
        address = tuple(p for p in (info.street, locality) if p)

    return DeliveryEstimate(
        heading="Delivery Date" if is_past else "Expected Delivery",
        date_label=date_label,
        formatted_date=format_long_date(delivery_date, tz),
        is_today=date_label == "today",
        is_tomorrow=date_label == "tomorrow",
        is_past=is_past,
        window=window,
        address_lines=address,
    )


def build_parcel_summary(order: Order, *, label: Optional[str] = None) -> Optional[ParcelSummary]:
    articles = order.delivery_info.articles or ()
    if not articles:
        return None

    lines = tuple(
        ArticleLine(
            name=a.article_name or "Unnamed Product",
            sku=a.article_no or "N/A",
            quantity=a.quantity or 0,
            price=format_usd(a.price) if a.price > 0 else None,
            product_url=a.product_url,
        )
        for a in articles
    )
    total_items = sum(a.quantity or 0 for a in articles)
    total_value = sum((a.price or 0) * (a.quantity or 0) for a in articles)
    return ParcelSummary(
        label=label,
        articles=lines,
        total_items=total_items,
        total_value=format_usd(total_value) if total_value > 0 else None,
    )


def build_report(
    orders: Sequence[Order],
    *,
    has_zip: bool,
    now: Optional[datetime] = None,
) -> TrackingReport:
    """
    Assemble everything an order page shows. The first order carries the shared
    information (order number, recipient, time zone) for multi-parcel orders.
    """
    if not orders:
        raise OrderNotFoundError()
    now = coerce_now(now)
    primary = orders[0]
    tz = primary.timezone
    info = primary.delivery_info

    status = compute_status(primary.checkpoints, info, now=now)
    explanation = explain_status(primary, status, now=now)

    header = OrderHeader(
        order_no=info.order_no or "N/A",
        tracking=tuple(_tracking_label(o) for o in orders),
        status_label=status.label,
        recipient=info.recipient if has_zip else None,
        email=info.email if has_zip else None,
        destination=primary.destination_country_iso3,
        updated_label=relative_day_label(primary.updated, tz, now) or "N/A",
    )

    parcels: list[ParcelSummary] = []
    if has_zip:
        for idx, order in enumerate(orders):
            label = None
            if len(orders) > 1:
                label = f"Shipment {idx + 1}"
                if order.tracking_number:
                    label += f" • {order.tracking_number}"
            summary = build_parcel_summary(order, label=label)
            if summary is not None:
                parcels.append(summary)

    timelines = []
    for idx, order in enumerate(orders):
        title = "Tracking History"
        if len(orders) > 1:
            suffix = _tracking_label(order) if order.tracking_number else f"Tracking {idx + 1}"
            title += f" - {suffix}"
        # one zone for the whole page: the primary order's
        timelines.append(build_timeline(order, tz, now, title=title))

    return TrackingReport(
        status=status,
        explanation=explanation,
        header=header,
        estimate=build_estimate(primary, has_zip=has_zip, now=now),
        parcels=tuple(parcels),
        timelines=tuple(timelines),
        has_zip=has_zip,
    )


def render_text(report: TrackingReport) -> str:
    """Plain-text rendering of a report for terminals and logs."""
    out: list[str] = []
    h = report.header

    out.append(f"[{report.status.label}] {report.explanation.next_action}")
    out.append(report.explanation.explanation)
    out.append("")
    out.append(f"Order Number: {h.order_no}")
    label = "Tracking Numbers" if len(h.tracking) > 1 else "Tracking Number"
    out.append(f"{label}: {', '.join(h.tracking)}")
    out.append(f"Status: {h.status_label}")
    if h.recipient:
        out.append(f"Recipient: {h.recipient}" + (f" <{h.email}>" if h.email else ""))
    if h.destination:
        out.append(f"Destination: {h.destination}")
    out.append(f"Last Updated: {h.updated_label}")

    est = report.estimate
    if est is not None:
        out.append("")
        when = est.formatted_date
        if est.is_today or est.is_tomorrow:
            when = f"{est.date_label.capitalize()} ({est.formatted_date})"
        out.append(f"{est.heading}: {when}")
        if est.window:
            out.append(f"Delivery Window: {est.window}")
        if est.address_lines:
            out.append("Delivery Address: " + "; ".join(est.address_lines))

    out.append("")
    if not report.has_zip:
        out.append(HIDDEN_CONTENTS_NOTICE)
    for parcel in report.parcels:
        noun = "item" if parcel.total_items == 1 else "items"
        title = f"{parcel.label}: " if parcel.label else "Package contents: "
        total = f", total {parcel.total_value}" if parcel.total_value else ""
        out.append(f"{title}{parcel.total_items} {noun}{total}")
        for art in parcel.articles:
            price = f" @ {art.price}" if art.price else ""
            out.append(f"  - {art.name} (SKU: {art.sku}) x{art.quantity}{price}")

    for timeline in report.timelines:
        out.append("")
        out.append(timeline.title)
        if not timeline.entries:
            out.append("  No tracking events yet.")
        for e in timeline.entries:
            marker = "*" if e.is_latest else "-"
            where = f" [{e.location}]" if e.location else ""
            out.append(f"  {marker} {e.day_label} {e.time}  {e.status}{where}".rstrip())
            if e.details:
                out.append(f"      {e.details}")

    return "\n".join(out).rstrip() + "\n"


__all__ = [
    "ArticleLine",
    "DeliveryEstimate",
    "OrderHeader",
    "ParcelSummary",
    "ShipmentTimeline",
    "TimelineEntry",
    "TrackingReport",
    "build_estimate",
    "build_parcel_summary",
    "build_report",
    "build_timeline",
    "format_usd",
    "render_text",
]

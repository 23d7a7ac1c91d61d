from .lookup import (
    LookupResult,
    OrderLookup,
    OrderLookupError,
    OrderNotFoundError,
    ZipMismatchError,
)
from .merge import merge_orders
from .report import TrackingReport, build_report, render_text

__all__ = [
    "LookupResult",
    "OrderLookup",
    "OrderLookupError",
    "OrderNotFoundError",
    "TrackingReport",
    "ZipMismatchError",
    "build_report",
    "merge_orders",
    "render_text",
]

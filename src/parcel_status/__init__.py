# src/parcel_status/__init__.py
from .rules.explainer import StatusExplanation, explain_status
from .rules.status import ComputedStatus, compute_status
from .utils.dates import relative_day_label

__all__ = [
    "ComputedStatus",
    "StatusExplanation",
    "compute_status",
    "explain_status",
    "relative_day_label",
]

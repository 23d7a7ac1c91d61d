from .explainer import StatusExplanation, explain_status
from .status import ALL_STATUSES, ComputedStatus, compute_status

__all__ = [
    "ALL_STATUSES",
    "ComputedStatus",
    "StatusExplanation",
    "compute_status",
    "explain_status",
]

from .client import OrdersApiClient, OrdersClient, ReplayClient
from .normalize import normalize_order, normalize_orders

__all__ = [
    "OrdersApiClient",
    "OrdersClient",
    "ReplayClient",
    "normalize_order",
    "normalize_orders",
]

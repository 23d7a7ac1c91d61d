from .env_cfg import EnvCfg
from .order import Article, Checkpoint, CheckpointMeta, DeliveryInfo, Order

__all__ = [
    "Article",
    "Checkpoint",
    "CheckpointMeta",
    "DeliveryInfo",
    "EnvCfg",
    "Order",
]

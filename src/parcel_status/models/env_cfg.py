from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EnvCfg:
    """Shape returned by get_app_env()."""
    API_BASE_URL: Optional[str] = None
    DATA_FILE: Optional[str] = None
    HTTP_TIMEOUT: int = 30

    @property
    def has_source(self) -> bool:
        return bool(self.API_BASE_URL or self.DATA_FILE)

from __future__ import annotations

from typing import Any, Dict, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


class RequestsTransport:
    """Requests session wrapper with retry/backoff for the orders endpoint.

    Retries idempotent GETs on connection errors and on 429/5xx. 403 and 404 are
    answers, not failures, so they are returned to the caller untouched.
    """

    def __init__(self, timeout: int = 30, max_retries: int = 3, backoff_factor: float = 0.3) -> None:
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self.timeout = timeout

        retry = Retry(
            total=max_retries,
            read=max_retries,
            connect=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def get(self, url: str, *, headers: Optional[Dict[str, str]] = None, params: Optional[Dict[str, Any]] = None):
        return self.session.get(url, headers=headers, params=params, timeout=self.timeout)

    def close(self) -> None:
        self.session.close()

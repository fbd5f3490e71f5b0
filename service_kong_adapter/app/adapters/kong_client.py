"""
Kong admin API client for the Kong Adapter.
"""

from typing import Any, Dict, List, Optional

import httpx

from shared.metrics import MetricsCollector
from .remote_client import RemoteClient


class KongClient(RemoteClient):
    """Client for the gateway admin API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(base_url, "kong", timeout=timeout, metrics=metrics, transport=transport)

    async def get_status(self) -> Dict[str, Any]:
        return await self.get("status")

    async def get_apis(self) -> List[Dict[str, Any]]:
        """Return every API the gateway knows, following pagination."""
        apis: List[Dict[str, Any]] = []
        path: Optional[str] = "apis?size=1000"
        while path:
            page = await self.get(path) or {}
            apis.extend(page.get("data", []))
            path = self._next_path(page.get("next"))
        return apis

    def _next_path(self, next_url: Optional[str]) -> Optional[str]:
        if not next_url:
            return None
        if next_url.startswith(self.base_url):
            return next_url[len(self.base_url):]
        return next_url.lstrip("/")

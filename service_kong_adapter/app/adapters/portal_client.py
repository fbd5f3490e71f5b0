"""
Portal API client for the Kong Adapter.
"""

from typing import Any, Dict, List, Optional

import httpx

from shared.metrics import MetricsCollector
from ..models import ApiConfig, ApiList, Application, PlanList, Plan, Subscription, User
from .remote_client import RemoteClient


class PortalClient(RemoteClient):
    """Client for the portal API.

    Every request carries the impersonation header. By default it acts as
    the admin user; ``get_as_user`` acts as a specific user, which is the
    only way to see that user's client secret.
    """

    def __init__(
        self,
        base_url: str,
        *,
        impersonation_header: str = "X-UserId",
        admin_user_id: str = "1",
        timeout: float = 10.0,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.impersonation_header = impersonation_header
        self.admin_user_id = admin_user_id
        super().__init__(
            base_url,
            "portal",
            timeout=timeout,
            default_headers={impersonation_header: admin_user_id},
            metrics=metrics,
            transport=transport,
        )

    async def get_as_user(self, path: str, user_id: str, expected_status: int = 200) -> Any:
        """GET ``path`` acting as ``user_id``."""
        self.logger.debug("Impersonated request", path=path, user_id=user_id)
        return await self.get(path, expected_status, headers={self.impersonation_header: user_id})

    async def ping(self) -> Any:
        return await self.get("ping")

    async def get_globals(self) -> Dict[str, Any]:
        return await self.get("globals")

    async def get_apis(self) -> ApiList:
        return self.parse("apis", await self.get("apis"), ApiList)

    async def get_api_config(self, api_id: str) -> ApiConfig:
        path = f"apis/{api_id}/config"
        return self.parse(path, await self.get(path), ApiConfig)

    async def get_plans(self) -> List[Plan]:
        return self.parse("plans", await self.get("plans"), PlanList).plans

    async def get_applications(self) -> List[Application]:
        payload = await self.get("applications")
        return [self.parse("applications", item, Application) for item in payload or []]

    async def get_subscriptions(self, application_id: str) -> List[Subscription]:
        path = f"applications/{application_id}/subscriptions"
        payload = await self.get(path)
        return [self.parse(path, item, Subscription) for item in payload or []]

    async def get_users(self) -> List[User]:
        payload = await self.get("users")
        return [self.parse("users", item, User) for item in payload or []]

    async def get_user(self, user_id: str) -> User:
        """Fetch a user's detail record as that user, so client secrets are included."""
        path = f"users/{user_id}"
        return self.parse(path, await self.get_as_user(path, user_id), User)

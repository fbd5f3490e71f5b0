"""
Process-lifetime cache of the portal's subscription plans.
"""

from typing import List, Optional

from shared.errors import NotFoundError
from shared.logging import get_logger
from ..adapters.portal_client import PortalClient
from ..models import Plan


class PlanCache:
    """Plans loaded once from the portal and kept for the life of the process.

    There is no refresh or expiry; the process has to restart to see new
    plans. Two concurrent first loads both fetch and store the same list.
    """

    def __init__(self, portal: PortalClient):
        self.portal = portal
        self.logger = get_logger("sync.plan_cache")
        self._plans: Optional[List[Plan]] = None

    def get(self) -> Optional[List[Plan]]:
        """Return the cached plans without touching the network."""
        return self._plans

    async def get_or_load(self) -> List[Plan]:
        """Return the cached plans, fetching them on first use."""
        if self._plans is None:
            plans = await self.portal.get_plans()
            self.logger.info("Plans loaded", count=len(plans))
            self._plans = plans
        return self._plans

    async def get_plans(self) -> List[Plan]:
        return await self.get_or_load()

    async def get_plan(self, plan_id: str) -> Plan:
        """Resolve a plan by id; unknown ids raise NotFoundError."""
        return self.find(await self.get_or_load(), plan_id)

    @staticmethod
    def find(plans: List[Plan], plan_id: str) -> Plan:
        for plan in plans:
            if plan.id == plan_id:
                return plan
        raise NotFoundError(f"Unknown plan ID: {plan_id}", details={"plan": plan_id})

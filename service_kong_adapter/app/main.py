"""
Kong Adapter service.

Serves the synthesized API and consumer configuration, and a drift report
against the gateway's current APIs.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from shared.base_service import BaseService
from shared.config import AdapterConfig
from shared.logging import clear_context, set_run_id
from .adapters import KongClient, PortalClient
from .models import ApiList, Consumer, SynthesisPolicy
from .sync import ApiSynthesizer, ConsumerSynthesizer, PlanCache, api_drift_report

T = TypeVar("T")


class KongAdapterService(BaseService):
    """Kong Adapter service implementation."""

    def __init__(
        self,
        config: Optional[AdapterConfig] = None,
        portal: Optional[PortalClient] = None,
        kong: Optional[KongClient] = None,
    ):
        super().__init__(config)
        self.portal = portal or PortalClient(
            self.config.portal_api_url,
            impersonation_header=self.config.impersonation_header,
            admin_user_id=self.config.admin_user_id,
            timeout=self.config.http_timeout,
            metrics=self.metrics,
        )
        self.kong = kong or KongClient(
            self.config.kong_admin_url,
            timeout=self.config.http_timeout,
            metrics=self.metrics,
        )
        self.plan_cache = PlanCache(self.portal)
        self._policy: Optional[SynthesisPolicy] = None

        self._setup_adapter_routes()

    def _setup_adapter_routes(self):
        """Set up adapter-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": self.service_name,
                "message": "Kong Adapter",
                "version": "1.0.0"
            }

        @self.app.get("/apis")
        async def get_apis():
            """Synthesized API definitions."""
            api_list = await self.synthesize_apis()
            return api_list.to_payload()

        @self.app.get("/consumers")
        async def get_consumers():
            """Synthesized consumers."""
            consumers = await self.synthesize_consumers()
            return [consumer.to_payload() for consumer in consumers]

        @self.app.get("/sync/apis")
        async def get_api_drift():
            """Drift between synthesized APIs and the gateway."""
            api_list = await self.synthesize_apis()
            gateway_apis = await self.kong.get_apis()
            report = api_drift_report(api_list, gateway_apis)
            return {"apis": [item.model_dump(mode="json") for item in report]}

    async def get_policy(self) -> SynthesisPolicy:
        """Policy from the portal globals, loaded on first use."""
        if self._policy is None:
            self._policy = SynthesisPolicy.from_globals(await self.portal.get_globals())
            self.logger.info(
                "Policy loaded",
                api_host=self._policy.api_host,
                enable_portal_api=self._policy.enable_portal_api,
            )
        return self._policy

    async def synthesize_apis(self) -> ApiList:
        async def _synthesize() -> ApiList:
            policy = await self.get_policy()
            return await ApiSynthesizer(self.portal, policy).synthesize()

        api_list = await self._run("apis", _synthesize)
        self.metrics.set_produced("apis", len(api_list.apis))
        return api_list

    async def synthesize_consumers(self) -> List[Consumer]:
        async def _synthesize() -> List[Consumer]:
            policy = await self.get_policy()
            return await ConsumerSynthesizer(self.portal, self.plan_cache, policy).synthesize()

        consumers = await self._run("consumers", _synthesize)
        self.metrics.set_produced("consumers", len(consumers))
        return consumers

    async def _run(self, artifact: str, synthesize: Callable[[], Awaitable[T]]) -> T:
        """Run one synthesis with its own run id and timing."""
        run_id = set_run_id()
        self.logger.info("Synthesis started", artifact=artifact, sync_run_id=run_id)
        try:
            with self.metrics.time_synthesis(artifact):
                return await synthesize()
        finally:
            clear_context()

    async def _check_dependencies(self) -> Dict[str, str]:
        checks: Dict[str, Callable[[], Awaitable[Any]]] = {
            "portal": self.portal.ping,
            "kong": self.kong.get_status,
        }
        statuses: Dict[str, str] = {}
        for name, check in checks.items():
            try:
                await check()
                statuses[name] = "ok"
            except Exception as e:
                self.logger.warning("Dependency check failed", dependency=name, error=str(e))
                statuses[name] = "error"
        return statuses

    async def shutdown(self) -> None:
        await self.portal.close()
        await self.kong.close()


def create_app(
    config: Optional[AdapterConfig] = None,
    portal: Optional[PortalClient] = None,
    kong: Optional[KongClient] = None,
):
    """Create FastAPI application."""
    service = KongAdapterService(config, portal, kong)
    return service.app


if __name__ == "__main__":
    service = KongAdapterService()
    service.run()

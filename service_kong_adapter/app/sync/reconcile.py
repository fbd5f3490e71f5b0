"""
Drift report between synthesized APIs and the gateway's current APIs.
"""

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from shared.logging import get_logger
from ..models import ApiList
from .matcher import matches

logger = get_logger("sync.reconcile")


class DriftState(str, Enum):
    IN_SYNC = "in_sync"
    CHANGED = "changed"
    MISSING = "missing"


class ApiDrift(BaseModel):
    """State of one synthesized API relative to the gateway."""
    api: str
    state: DriftState
    desired: Dict[str, Any] = Field(default_factory=dict)
    observed: Dict[str, Any] = Field(default_factory=dict)


def api_drift_report(desired: ApiList, observed: List[Dict[str, Any]]) -> List[ApiDrift]:
    """Classify every desired API as in_sync, changed or missing.

    The gateway API is looked up by ``name == id``; its routing is compared
    with the desired ``config.api`` using the subset matcher. Gateway APIs
    unknown to the portal are not reported.
    """
    by_name = {api.get("name"): api for api in observed}
    report: List[ApiDrift] = []
    for api in desired.apis:
        routing = api.config.api.to_payload()
        routing.setdefault("name", api.id)
        gateway_api = by_name.get(api.id)
        if gateway_api is None:
            state = DriftState.MISSING
        elif matches(routing, gateway_api):
            state = DriftState.IN_SYNC
        else:
            state = DriftState.CHANGED
        report.append(ApiDrift(api=api.id, state=state, desired=routing, observed=gateway_api or {}))

    logger.info(
        "Drift report built",
        total=len(report),
        changed=sum(1 for item in report if item.state == DriftState.CHANGED),
        missing=sum(1 for item in report if item.state == DriftState.MISSING),
    )
    return report

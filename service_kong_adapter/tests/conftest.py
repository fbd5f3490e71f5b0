"""
Shared fixtures for Kong Adapter tests.
"""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from service_kong_adapter.app.adapters import KongClient, PortalClient
from service_kong_adapter.app.models import (
    ApiConfig, ApiList, Application, Plan, Subscription, SynthesisPolicy, User,
)
from shared.errors import TransportError
from shared.test_helpers import PortalDataFactory


def create_portal_mock(
    apis: Optional[List[Dict[str, Any]]] = None,
    api_configs: Optional[Dict[str, Dict[str, Any]]] = None,
    plans: Optional[List[Dict[str, Any]]] = None,
    subscriptions: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    users: Optional[List[Dict[str, Any]]] = None,
    globals_doc: Optional[Dict[str, Any]] = None,
) -> AsyncMock:
    """AsyncMock standing in for PortalClient, serving already-parsed models.

    ``subscriptions`` maps application id to its subscription list; the
    application list is derived from its keys. ``users`` are full detail
    records, returned both from the list and the impersonated detail call.
    """
    api_configs = api_configs or {}
    subscriptions = subscriptions or {}
    users = users or []
    user_details = {user["id"]: user for user in users}

    def _missing(path: str):
        return TransportError("portal", f"http://portal-api:3001/{path}", 404, "not found")

    def _api_config(api_id: str) -> ApiConfig:
        if api_id not in api_configs:
            raise _missing(f"apis/{api_id}/config")
        return ApiConfig.model_validate(api_configs[api_id])

    def _subscriptions(application_id: str) -> List[Subscription]:
        return [Subscription.model_validate(item) for item in subscriptions.get(application_id, [])]

    def _user(user_id: str) -> User:
        if user_id not in user_details:
            raise _missing(f"users/{user_id}")
        return User.model_validate(user_details[user_id])

    portal = AsyncMock(spec=PortalClient)
    portal.get_apis.side_effect = lambda: ApiList.model_validate({"apis": apis or []})
    portal.get_api_config.side_effect = _api_config
    portal.get_plans.side_effect = lambda: [Plan.model_validate(plan) for plan in plans or []]
    portal.get_applications.side_effect = lambda: [
        Application.model_validate({"id": application_id}) for application_id in subscriptions
    ]
    portal.get_subscriptions.side_effect = _subscriptions
    portal.get_users.side_effect = lambda: [
        User.model_validate({"id": user["id"], "email": user.get("email"), "groups": user.get("groups")})
        for user in users
    ]
    portal.get_user.side_effect = _user
    portal.get_globals.return_value = globals_doc or PortalDataFactory.create_globals()
    portal.ping.return_value = {"message": "OK"}
    return portal


@pytest.fixture
def portal_data():
    """Portal payload factory."""
    return PortalDataFactory


@pytest.fixture
def make_portal():
    """Builder for a mocked PortalClient."""
    return create_portal_mock


@pytest.fixture
def kong_mock():
    """Mocked KongClient with no APIs configured."""
    kong = AsyncMock(spec=KongClient)
    kong.get_status.return_value = {"database": {"reachable": True}}
    kong.get_apis.return_value = []
    return kong


@pytest.fixture
def policy():
    """Policy matching the default globals document."""
    return SynthesisPolicy.from_globals(PortalDataFactory.create_globals())

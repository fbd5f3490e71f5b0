"""
Unit tests for the portal and Kong admin clients.
"""

import json

import httpx
import pytest

from service_kong_adapter.app.adapters import KongClient, PortalClient
from shared.errors import PayloadError, TransportError
from shared.metrics import MetricsCollector


class RecordingTransport:
    """Routes requests to canned responses and records what was sent."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path + (f"?{request.url.query.decode()}" if request.url.query else ""))
        if key not in self.routes:
            return httpx.Response(404, json={"message": "Not found"})
        status_code, body = self.routes[key]
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, content=json.dumps(body))


def _portal(routes, **kwargs):
    recorder = RecordingTransport(routes)
    client = PortalClient("http://portal-api:3001/", transport=httpx.MockTransport(recorder), **kwargs)
    return client, recorder


def _kong(routes):
    recorder = RecordingTransport(routes)
    client = KongClient("http://kong:8001", transport=httpx.MockTransport(recorder))
    return client, recorder


class TestPortalClient:
    """Test cases for PortalClient."""

    @pytest.mark.asyncio
    async def test_get_sends_admin_identity(self):
        """Plain requests act as the admin user."""
        client, recorder = _portal({("GET", "/apis"): (200, {"apis": [{"id": "petstore", "auth": "key-auth"}]})})

        api_list = await client.get_apis()
        await client.close()

        assert api_list.apis[0].id == "petstore"
        assert api_list.apis[0].auth == "key-auth"
        assert recorder.requests[0].headers["X-UserId"] == "1"

    @pytest.mark.asyncio
    async def test_get_user_impersonates(self):
        """User detail is fetched as that user."""
        client, recorder = _portal({("GET", "/users/u7"): (200, {
            "id": "u7", "email": "u7@example.com", "groups": ["dev"],
            "clientId": "abc", "clientSecret": "xyz",
        })})

        user = await client.get_user("u7")
        await client.close()

        assert user.client_id == "abc"
        assert user.client_secret == "xyz"
        assert recorder.requests[0].headers["X-UserId"] == "u7"

    @pytest.mark.asyncio
    async def test_get_user_with_null_groups(self):
        """A null group list parses as empty."""
        client, _ = _portal({("GET", "/users/u7"): (200, {"id": "u7", "email": "u7@example.com", "groups": None})})

        user = await client.get_user("u7")
        await client.close()

        assert user.groups == []
        assert user.has_group("partners") is False

    @pytest.mark.asyncio
    async def test_custom_impersonation_header(self):
        """The impersonation header name and admin id are configurable."""
        client, recorder = _portal({("GET", "/ping"): (200, {"message": "OK"})},
                                   impersonation_header="X-Portal-User", admin_user_id="42")

        await client.ping()
        await client.close()

        assert recorder.requests[0].headers["X-Portal-User"] == "42"

    @pytest.mark.asyncio
    async def test_unexpected_status_raises(self):
        """Any status other than the expected one raises TransportError."""
        client, _ = _portal({("GET", "/applications"): (500, {"message": "boom"})})

        with pytest.raises(TransportError) as exc_info:
            await client.get_applications()
        await client.close()

        assert exc_info.value.status == 500
        assert exc_info.value.service == "portal"
        assert exc_info.value.url == "http://portal-api:3001/applications"

    @pytest.mark.asyncio
    async def test_success_status_must_match_exactly(self):
        """A 2xx that is not the expected code still fails."""
        client, _ = _portal({("PUT", "/apis/petstore"): (201, {"id": "petstore"})})

        with pytest.raises(TransportError) as exc_info:
            await client.put("apis/petstore", {"id": "petstore"})
        await client.close()

        assert exc_info.value.status == 201

    @pytest.mark.asyncio
    async def test_connection_failure(self):
        """Transport-level failures carry no status."""
        def _fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = PortalClient("http://portal-api:3001/", transport=httpx.MockTransport(_fail))

        with pytest.raises(TransportError) as exc_info:
            await client.get_plans()
        await client.close()

        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        """Bodies that do not fit the model raise PayloadError."""
        client, _ = _portal({("GET", "/applications/a1/subscriptions"): (200, [{"id": "s1"}])})

        with pytest.raises(PayloadError) as exc_info:
            await client.get_subscriptions("a1")
        await client.close()

        assert exc_info.value.code == "PAYLOAD_ERROR"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [b'{"apis": "\xff\xfe"}', b"<html>Bad Gateway</html>"])
    async def test_undecodable_body(self, content):
        """Bodies that are not UTF-8 JSON raise PayloadError with the URL."""
        client = PortalClient(
            "http://portal-api:3001/",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=content)),
        )

        with pytest.raises(PayloadError) as exc_info:
            await client.get("apis")
        await client.close()

        assert exc_info.value.details["service"] == "portal"
        assert exc_info.value.details["url"] == "http://portal-api:3001/apis"

    @pytest.mark.asyncio
    async def test_get_plans_unwraps_list(self):
        """The plans document is unwrapped into Plan models."""
        client, _ = _portal({("GET", "/plans"): (200, {"plans": [
            {"id": "basic"},
            {"id": "limited", "config": {"plugins": [{"name": "rate-limiting", "config": {"hour": 100}}]}},
        ]})})

        plans = await client.get_plans()
        await client.close()

        assert [plan.id for plan in plans] == ["basic", "limited"]
        assert plans[0].plugins == []
        assert plans[1].plugins[0].config == {"hour": 100}

    @pytest.mark.asyncio
    async def test_delete_expects_204(self):
        """delete() succeeds on 204 with no body."""
        client, recorder = _portal({("DELETE", "/subscriptions/s1"): (204, None)})

        assert await client.delete("subscriptions/s1") is None
        await client.close()

        assert recorder.requests[0].method == "DELETE"

    @pytest.mark.asyncio
    async def test_remote_requests_are_counted(self):
        """Each request is recorded with its status."""
        metrics = MetricsCollector("kong-adapter")
        recorder = RecordingTransport({("GET", "/ping"): (200, {"message": "OK"})})
        client = PortalClient("http://portal-api:3001/", metrics=metrics, transport=httpx.MockTransport(recorder))

        await client.ping()
        await client.close()

        value = metrics.registry.get_sample_value(
            "remote_requests_total",
            {"service": "portal", "method": "GET", "status_code": "200"},
        )
        assert value == 1.0


class TestKongClient:
    """Test cases for KongClient."""

    @pytest.mark.asyncio
    async def test_post_and_patch_status_contracts(self):
        """POST expects 201 and PATCH expects 200 by default."""
        client, recorder = _kong({
            ("POST", "/consumers"): (201, {"id": "c1", "username": "my-app$petstore"}),
            ("PATCH", "/consumers/c1"): (200, {"id": "c1", "custom_id": "sub-1"}),
        })

        created = await client.post("consumers", {"username": "my-app$petstore"})
        patched = await client.patch("consumers/c1", {"custom_id": "sub-1"})
        await client.close()

        assert created["id"] == "c1"
        assert patched["custom_id"] == "sub-1"
        assert json.loads(recorder.requests[0].content) == {"username": "my-app$petstore"}
        assert "X-UserId" not in recorder.requests[0].headers

    @pytest.mark.asyncio
    async def test_get_apis_follows_pagination(self):
        """All pages of the API list are collected."""
        client, _ = _kong({
            ("GET", "/apis?size=1000"): (200, {
                "data": [{"name": "petstore"}],
                "next": "http://kong:8001/apis?size=1000&offset=abc",
            }),
            ("GET", "/apis?size=1000&offset=abc"): (200, {"data": [{"name": "weather"}]}),
        })

        apis = await client.get_apis()
        await client.close()

        assert [api["name"] for api in apis] == ["petstore", "weather"]

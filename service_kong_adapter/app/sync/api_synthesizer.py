"""
Synthesis of the gateway's API definitions from portal data.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from shared.errors import ValidationError
from shared.logging import get_logger
from ..adapters.portal_client import PortalClient
from ..models import ApiConfig, ApiDefinition, ApiList, ApiRouting, AuthStrategy, Plugin, SynthesisPolicy

DEFAULT_PORTAL_URL = "http://portal:3000"
DEFAULT_API_URL = "http://portal-api:3001"

FORWARDED_SENTINEL = "%%Forwarded"

# ACL group shared by the portal's own API and the users allowed to call it
PORTAL_API_ID = "portal-api-internal"

# Plugins the adapter injects itself; portal data must not declare them
# alongside an auth strategy.
INJECTED_PLUGIN_NAMES = ("key-auth", "oauth2", "acl")

TOKEN_EXPIRATION_SECONDS = 3600


@dataclass
class InjectionResult:
    """Outcome of injecting auth plugins into one API."""
    api: ApiDefinition
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ApiSynthesizer:
    """Builds the complete, auth-injected API list for the gateway."""

    def __init__(self, portal: PortalClient, policy: SynthesisPolicy):
        self.portal = portal
        self.policy = policy
        self.logger = get_logger("sync.api_synthesizer")

    async def synthesize(self) -> ApiList:
        """Return ``{apis: [...]}``: portal APIs, then the four system APIs.

        Raises on the first transport or validation failure; no partial
        list is ever returned.
        """
        self._log_policy_defaults()
        api_list = await self.portal.get_apis()

        # One at a time, in order: a failure stops before later APIs are touched
        for api in api_list.apis:
            config = await self.portal.get_api_config(api.id)
            api.config = self.normalize_config(config)

        api_list.apis.extend(self.system_apis())

        results = [inject_auth_plugins(api, self.policy.header_name) for api in api_list.apis]
        for result in results:
            if not result.ok:
                self.logger.error("Auth plugin injection failed", api=result.api.id, error=result.error.message)
                raise result.error

        self.logger.info("APIs synthesized", count=len(api_list.apis))
        return api_list

    def normalize_config(self, config: ApiConfig) -> ApiConfig:
        """Expand the ``%%Forwarded`` sentinel in request-transformer plugins."""
        for plugin in config.plugins:
            if plugin.is_named("request-transformer"):
                self._expand_forwarded_header(config, plugin)
        return config

    def _expand_forwarded_header(self, config: ApiConfig, plugin: Plugin) -> None:
        add = plugin.config.get("add")
        if not isinstance(add, dict) or not isinstance(add.get("headers"), list):
            return

        headers = add["headers"]
        for index, header in enumerate(headers):
            if header == FORWARDED_SENTINEL:
                headers[index] = self.forwarded_header(config.api.request_path)

    def forwarded_header(self, prefix: Optional[str]) -> str:
        proto = self.policy.scheme
        host, port = self._split_api_host(proto)
        return f"Forwarded: host={host};port={port};proto={proto};prefix={prefix}"

    def _split_api_host(self, proto: str) -> Tuple[str, str]:
        raw_host = self.policy.api_host
        if not raw_host:
            raise ValidationError(
                f"network.apiHost must be set to expand '{FORWARDED_SENTINEL}'",
                details={"setting": "network.apiHost"}
            )
        if raw_host.find(":") > 0:
            host, port = raw_host.split(":")[:2]
            return host, port
        return raw_host, "443" if proto == "https" else "80"

    def system_apis(self) -> List[ApiDefinition]:
        """The swagger-ui tunnel, ping, deploy and portal API definitions."""
        portal_url = self._base_url(self.policy.portal_url, DEFAULT_PORTAL_URL, "portalUrl")
        api_url = self._base_url(self.policy.api_url, DEFAULT_API_URL, "apiUrl")
        return [
            _system_api("swagger-ui", "/swagger-ui", portal_url + "/swagger-ui"),
            _system_api("ping", "/ping", portal_url + "/ping"),
            _system_api("deploy", "/deploy/v1", api_url + "/deploy"),
            _system_api(PORTAL_API_ID, "/portal-api/v1", api_url, auth=AuthStrategy.OAUTH2.value),
        ]

    def _log_policy_defaults(self) -> None:
        defaults = (
            ("scheme", "schema", self.policy.scheme),
            ("header_name", "headerName", self.policy.header_name),
        )
        for field, setting, value in defaults:
            if field not in self.policy.model_fields_set:
                self.logger.info("Policy setting not set, using default", setting=setting, default=value)

    def _base_url(self, value: Optional[str], default: str, setting: str) -> str:
        if not value:
            self.logger.info("Network setting not set, using default", setting=setting, default=default)
            value = default
        return value.rstrip("/")


def _system_api(api_id: str, request_path: str, upstream_url: str,
                auth: str = AuthStrategy.NONE.value) -> ApiDefinition:
    return ApiDefinition(
        id=api_id,
        name=api_id,
        auth=auth,
        config=ApiConfig(
            api=ApiRouting(
                name=api_id,
                request_path=request_path,
                upstream_url=upstream_url,
                strip_request_path=True,
                preserve_host=False,
            ),
            plugins=[],
        ),
    )


def inject_auth_plugins(api: ApiDefinition, header_name: str) -> InjectionResult:
    """Append the auth and acl plugins the API's strategy requires.

    The API is left untouched when the result carries an error.
    """
    strategy = api.auth
    if not strategy or strategy == AuthStrategy.NONE.value:
        return InjectionResult(api)

    if strategy == AuthStrategy.KEY_AUTH.value:
        auth_plugin = key_auth_plugin(header_name)
    elif strategy == AuthStrategy.OAUTH2.value:
        auth_plugin = client_credentials_plugin()
    else:
        return InjectionResult(api, ValidationError(
            f"Unknown 'auth' setting: {strategy}",
            details={"api": api.id, "auth": strategy}
        ))

    for plugin in api.config.plugins:
        for name in INJECTED_PLUGIN_NAMES:
            if plugin.is_named(name):
                return InjectionResult(api, ValidationError(
                    f"If you use '{strategy}' for API '{api.id}', you must not provide "
                    f"a '{name}' plugin yourself. Remove it and retry.",
                    details={"api": api.id, "auth": strategy, "plugin": name}
                ))

    api.config.plugins = api.config.plugins + [auth_plugin, acl_plugin(api.id)]
    return InjectionResult(api)


def key_auth_plugin(header_name: str) -> Plugin:
    return Plugin(
        name="key-auth",
        enabled=True,
        config={
            "hide_credentials": True,
            "key_names": [header_name],
        },
    )


def client_credentials_plugin() -> Plugin:
    """OAuth2 restricted to the client credentials grant."""
    return Plugin(
        name="oauth2",
        enabled=True,
        config={
            "scopes": ["api"],
            "token_expiration": TOKEN_EXPIRATION_SECONDS,
            "enable_authorization_code": False,
            "enable_client_credentials": True,
            "enable_implicit_grant": False,
            "enable_password_grant": False,
            "hide_credentials": True,
            "accept_http_if_already_terminated": True,
        },
    )


def acl_plugin(api_id: str) -> Plugin:
    return Plugin(
        name="acl",
        enabled=True,
        config={"whitelist": [api_id]},
    )

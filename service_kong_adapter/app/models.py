"""
Payload models for the Kong Adapter.

Portal and gateway payloads are validated into these models at the remote
access boundary. Unknown fields are kept so opaque configuration passes
through to the gateway untouched.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AuthStrategy(str, Enum):
    """Auth strategies understood by the synthesizers."""
    NONE = "none"
    KEY_AUTH = "key-auth"
    OAUTH2 = "oauth2"


class PortalModel(BaseModel):
    """Base model for portal payloads."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the JSON shape the gateway driver consumes."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ======== Gateway-facing API definitions ========

class Plugin(PortalModel):
    """Gateway plugin; the name is compared case-insensitively."""
    name: Optional[str] = None
    enabled: Optional[bool] = None
    config: Dict[str, Any] = Field(default_factory=dict)

    def is_named(self, name: str) -> bool:
        return bool(self.name) and self.name.lower() == name.lower()


class ApiRouting(PortalModel):
    """Routing part of an API config (``config.api``)."""
    request_path: Optional[str] = None
    upstream_url: Optional[str] = None


class ApiConfig(PortalModel):
    api: ApiRouting = Field(default_factory=ApiRouting)
    plugins: List[Plugin] = Field(default_factory=list)


class ApiDefinition(PortalModel):
    """An API as pushed to the gateway."""
    id: str
    name: Optional[str] = None
    auth: Optional[str] = None
    config: ApiConfig = Field(default_factory=ApiConfig)


class ApiList(PortalModel):
    apis: List[ApiDefinition] = Field(default_factory=list)


# ======== Portal entities ========

class PlanConfig(PortalModel):
    plugins: List[Plugin] = Field(default_factory=list)


class Plan(PortalModel):
    """Subscription plan; its plugins apply to every subscription on it."""
    id: str
    name: Optional[str] = None
    config: Optional[PlanConfig] = None

    @property
    def plugins(self) -> List[Plugin]:
        if self.config is None:
            return []
        return self.config.plugins


class PlanList(PortalModel):
    plans: List[Plan] = Field(default_factory=list)


class Application(PortalModel):
    id: str
    name: Optional[str] = None


class Subscription(PortalModel):
    """Link between an application and an API under a plan."""
    id: str
    application: str
    api: str
    plan: Optional[str] = None
    approved: bool = False
    auth: Optional[str] = None
    apikey: Optional[str] = None
    client_id: Optional[str] = Field(default=None, alias="clientId")
    client_secret: Optional[str] = Field(default=None, alias="clientSecret")


class User(PortalModel):
    """Portal user; client credentials are only present when fetched as the user."""
    id: str
    email: Optional[str] = None
    groups: List[str] = Field(default_factory=list)
    client_id: Optional[str] = Field(default=None, alias="clientId")
    client_secret: Optional[str] = Field(default=None, alias="clientSecret")

    @field_validator("groups", mode="before")
    @classmethod
    def _null_groups(cls, value: Any) -> Any:
        return [] if value is None else value

    def has_client_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def has_group(self, group: str) -> bool:
        return group in self.groups


# ======== Synthesized consumers ========

class ConsumerIdentity(PortalModel):
    username: str
    custom_id: str


class KeyAuthCredential(PortalModel):
    key: Optional[str] = None


class AclGroup(PortalModel):
    group: str


class OAuth2Credential(PortalModel):
    name: str
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_uri: List[str] = Field(default_factory=lambda: ["http://dummy.org"])


class ConsumerPlugins(PortalModel):
    key_auth: Optional[List[KeyAuthCredential]] = Field(default=None, alias="key-auth")
    acls: List[AclGroup] = Field(default_factory=list)
    oauth2: Optional[List[OAuth2Credential]] = None


class Consumer(PortalModel):
    """A gateway consumer with its credentials and plan-derived API plugins."""
    consumer: ConsumerIdentity
    plugins: ConsumerPlugins = Field(default_factory=ConsumerPlugins)
    api_plugins: List[Plugin] = Field(default_factory=list, alias="apiPlugins")


# ======== Policy ========

class SynthesisPolicy(BaseModel):
    """Network and API policy values taken from the portal's globals."""

    portal_url: Optional[str] = None
    api_url: Optional[str] = None
    scheme: str = Field(default="https", alias="schema")
    api_host: Optional[str] = None
    header_name: str = "X-ApiKey"
    enable_portal_api: bool = False
    required_group: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_globals(cls, globals_doc: Dict[str, Any]) -> "SynthesisPolicy":
        """Build the policy from the portal ``globals`` document."""
        network = globals_doc.get("network") or {}
        api = globals_doc.get("api") or {}
        portal = api.get("portal") or {}
        values: Dict[str, Any] = {
            "portal_url": network.get("portalUrl"),
            "api_url": network.get("apiUrl"),
            "api_host": network.get("apiHost"),
            "enable_portal_api": bool(portal.get("enableApi")),
            "required_group": portal.get("requiredGroup"),
        }
        if network.get("schema"):
            values["scheme"] = network["schema"]
        if api.get("headerName"):
            values["header_name"] = api["headerName"]
        return cls(**values)

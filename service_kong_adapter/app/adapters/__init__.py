"""
Adapters package for the Kong Adapter.

Contains HTTP client wrappers for the two remote services (portal API and
Kong admin API). These adapters encapsulate:

- Base URLs and the impersonation header
- Expected-status contracts mapped to TransportError
- Payload shape validation into the models in app.models

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .remote_client import RemoteClient
from .portal_client import PortalClient
from .kong_client import KongClient

__all__ = [
    "RemoteClient",
    "PortalClient",
    "KongClient",
]

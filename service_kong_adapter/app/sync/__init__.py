"""
Synthesis package.

Turns live portal state into gateway configuration:

- api_synthesizer: portal APIs plus system APIs, with auth plugins injected
- consumer_synthesizer: consumers from approved subscriptions and portal users
- plan_cache: plans, loaded once per process
- matcher: subset match used to decide whether the gateway already agrees
- reconcile: read-only drift report built on the matcher

Nothing here writes to the gateway; a provisioning driver consumes the
produced artifacts.
"""

from .api_synthesizer import ApiSynthesizer, InjectionResult, inject_auth_plugins
from .consumer_synthesizer import ConsumerSynthesizer
from .matcher import matches
from .plan_cache import PlanCache
from .reconcile import ApiDrift, DriftState, api_drift_report

__all__ = [
    "ApiSynthesizer",
    "InjectionResult",
    "inject_auth_plugins",
    "ConsumerSynthesizer",
    "matches",
    "PlanCache",
    "ApiDrift",
    "DriftState",
    "api_drift_report",
]

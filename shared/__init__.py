"""
Shared utilities for the Kong Adapter.

This package holds the building blocks the adapter service is assembled from:

- config: Process configuration via pydantic-settings
- logging: Structured logging with synthesis run correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI application scaffold
- test_helpers: Portal and gateway payload factories for tests

Do not import from service_* packages into shared/.
"""

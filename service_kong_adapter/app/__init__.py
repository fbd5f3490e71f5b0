"""
Kong Adapter service package.

Synthesizes Kong configuration from the portal's data model:
- API definitions, with auth plugins injected by policy
- Consumers, with credentials, ACL groups and plan-derived API plugins

Structure:
- app.main: FastAPI app and routes.
- app.adapters: HTTP clients for the portal API and the Kong admin API.
- app.models: Payload models validated at the adapter boundary.
- app.sync: Synthesizers, plan cache, subset matcher and drift report.
"""

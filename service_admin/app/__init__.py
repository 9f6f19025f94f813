"""
Admin Service package.

The service authenticates admin users, validates admin requests and
forwards them to the user, order, payment and auth services. Payment
confirm/fail actions publish lifecycle events to advance the order saga.

Structure:
- app.main: FastAPI app, routes and controller wiring.
- app.core: transport strategies (direct / sidecar) and the invocation facade.
- app.messaging: messaging providers, envelope builder and event publisher.
- app.adapters: per-service clients built on the invocation facade.
- app.domain: JWT auth middleware and request validators.
"""

"""
Shared utilities for the Admin Service.

This package aggregates common building blocks:

- config: Service configuration via pydantic-settings
- logging: Structured logging with trace and correlation context
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- secrets: Sidecar secret store client
- base_service: FastAPI service skeleton (middleware, health, error handlers)

Do not import from service_* packages into shared/.
"""

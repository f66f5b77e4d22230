"""
Shared utilities for the Follow Service.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI application scaffolding and lifecycle
- test_helpers: Token and test data factories

Do not import from service_* packages into shared/.
"""

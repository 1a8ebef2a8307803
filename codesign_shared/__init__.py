"""
Shared utilities for the code-signing thumbprint bundle verifier.

This package aggregates common building blocks consumed by the verifier
service and its command line:

- config: Expected issuer/audience and leeway via pydantic-settings
- logging: Structured logging with correlation ids
- errors: Canonical error types and responses
- test_helpers: Key, certificate and bundle factories for tests

Do not import from service_* packages into codesign_shared/.
"""

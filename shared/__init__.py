"""
Shared utilities for the Redis learning project.

This package aggregates the building blocks used by the application:

- config: Settings via pydantic-settings
- logging: Structured logging with run/section correlation
- metrics: Prometheus cache counters
- errors: Canonical error types and responses

Do not import from redis_learning into shared/.
"""

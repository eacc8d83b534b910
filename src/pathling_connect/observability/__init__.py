"""Logging setup for pathling-connect."""

from pathling_connect.observability.logging import configure_logging, redact_secrets

__all__ = ["configure_logging", "redact_secrets"]

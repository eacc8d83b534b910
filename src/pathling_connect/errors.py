"""
Error Taxonomy

Every failure raised by the client, the pipeline stages and the workbench
derives from PathlingError:
- TransportError: network or HTTP failure without a FHIR error body
- OperationOutcomeError: server-reported FHIR error
- ProtocolViolation: response of an unexpected shape or resource type
- ValidationError: client-side precondition not met
- ConfigurationError: required settings missing
"""

from typing import Any, Optional


class PathlingError(Exception):
    """Base error for pathling-connect."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TransportError(PathlingError):
    """Network or HTTP-layer failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OperationOutcomeError(PathlingError):
    """Error reported by the server as an OperationOutcome resource."""

    def __init__(
        self,
        message: str,
        outcome: dict[str, Any],
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.outcome = outcome
        self.status_code = status_code


class ProtocolViolation(PathlingError):
    """Response was well-formed but not what the operation returns."""
    pass


class ValidationError(PathlingError):
    """Client-side precondition not met."""
    pass


class ConfigurationError(PathlingError):
    """Required configuration is missing or invalid."""
    pass

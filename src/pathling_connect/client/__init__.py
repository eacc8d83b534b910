"""HTTP access to FHIR and Pathling endpoints."""

from pathling_connect.client.auth import SmartTokenProvider, TokenSet, token_provider_for
from pathling_connect.client.cancellation import CancelToken, CancelTokenSource
from pathling_connect.client.http import FhirHttpClient, JobStatus
from pathling_connect.client.pathling import PathlingClient

__all__ = [
    "SmartTokenProvider",
    "TokenSet",
    "token_provider_for",
    "CancelToken",
    "CancelTokenSource",
    "FhirHttpClient",
    "JobStatus",
    "PathlingClient",
]

"""
Pathling Client

Operation-level access to a Pathling server:
- $import of NDJSON sources
- $aggregate-query over aggregations, groupings and filters
- status checks for asynchronous jobs
"""

from typing import Dict, Optional

import structlog

from pathling_connect.client.cancellation import CancelToken
from pathling_connect.client.http import FhirHttpClient, JobStatus
from pathling_connect.codec import (
    AggregateQuery,
    ImportQuery,
    aggregate_query_to_parameters,
    import_query_to_parameters,
)
from pathling_connect.fhir.resources import Parameters

logger = structlog.get_logger(__name__)


class PathlingClient:
    """Client for the operations of a single Pathling endpoint."""

    def __init__(self, endpoint: str, http: Optional[FhirHttpClient] = None):
        self.endpoint = endpoint.rstrip("/")
        self.http = http or FhirHttpClient()

    # =========================================================================
    # Import
    # =========================================================================

    async def import_(self, query: ImportQuery) -> str:
        """Start an import of the given sources, returning the job status URL."""
        return await self.import_with_params(import_query_to_parameters(query))

    async def import_with_params(self, parameters: Parameters) -> str:
        """Start an import from a ready-made Parameters resource."""
        logger.info(
            "Starting import",
            endpoint=self.endpoint,
            sources=len(parameters.get("parameter", [])),
        )
        return await self.http.kick_off("POST", f"{self.endpoint}/$import", parameters)

    # =========================================================================
    # Aggregate
    # =========================================================================

    async def aggregate(
        self,
        query: AggregateQuery,
        headers: Optional[Dict[str, str]] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Optional[Parameters]:
        """
        Run an aggregate query.

        Returns None when the request is cancelled through the token.
        """
        return await self.aggregate_with_params(
            aggregate_query_to_parameters(query), headers=headers, cancel=cancel
        )

    async def aggregate_with_params(
        self,
        parameters: Parameters,
        headers: Optional[Dict[str, str]] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Optional[Parameters]:
        return await self.http.post_parameters(
            f"{self.endpoint}/$aggregate-query",
            parameters,
            headers=headers,
            cancel=cancel,
        )

    # =========================================================================
    # Jobs
    # =========================================================================

    async def job_status(self, status_url: str) -> JobStatus:
        """Check an asynchronous job once."""
        return await self.http.check_status(status_url)

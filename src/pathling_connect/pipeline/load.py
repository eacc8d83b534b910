"""
Pathling Import Stages

Submission of staged sources to the Pathling $import operation, and the
status check of the resulting job.
"""

import structlog

from pathling_connect.client.pathling import PathlingClient
from pathling_connect.codec import import_query_from_parameters, import_query_to_parameters
from pathling_connect.errors import ValidationError
from pathling_connect.fhir.resources import Parameters
from pathling_connect.pipeline.models import ImportStatus

logger = structlog.get_logger(__name__)


async def start_import(pathling: PathlingClient, parameters: Parameters) -> str:
    """
    Submit an import request.

    Returns:
        Status URL of the import job
    """
    query = import_query_from_parameters(parameters)
    if not query.source:
        raise ValidationError("Import request has no sources.")

    for source in query.source:
        logger.debug("Import source", resource_type=source.resource_type, url=source.url)

    return await pathling.import_with_params(import_query_to_parameters(query))


async def check_import_status(pathling: PathlingClient, status_url: str) -> ImportStatus:
    """Check the import job once."""
    job = await pathling.job_status(status_url)
    if not job.complete:
        logger.info("Import in progress", status_url=status_url, progress=job.progress)
        return ImportStatus(status="in-progress", progress=job.progress)

    logger.info("Import complete", status_url=status_url)
    return ImportStatus(
        status="complete",
        response=job.body if isinstance(job.body, dict) else None,
    )

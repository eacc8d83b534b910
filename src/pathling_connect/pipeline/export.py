"""
Bulk Export Stages

Kick-off and status check of a FHIR Bulk Data export against the source
server. Polling over time is left to the orchestrator: each call here makes
one request.
"""

from typing import Dict

import structlog

from pathling_connect.client.http import FhirHttpClient
from pathling_connect.config import SourceSettings
from pathling_connect.errors import ProtocolViolation
from pathling_connect.pipeline.models import BulkExportResult, ExportStatus

logger = structlog.get_logger(__name__)


def export_params(settings: SourceSettings) -> Dict[str, str]:
    """Query parameters of the $export kick-off request."""
    params = {}
    if settings.type_list:
        params["_type"] = ",".join(settings.type_list)
    if settings.since:
        params["_since"] = settings.since
    return params


async def start_export(settings: SourceSettings, http: FhirHttpClient) -> str:
    """
    Initiate a system-level bulk export.

    Returns:
        Status URL from the Content-Location header
    """
    url = f"{settings.base_url}/$export"
    status_url = await http.kick_off("GET", url, params=export_params(settings))
    logger.info("Bulk export initiated", source=settings.base_url, status_url=status_url)
    return status_url


async def check_export_status(http: FhirHttpClient, status_url: str) -> ExportStatus:
    """Check the export job once."""
    job = await http.check_status(status_url)
    if not job.complete:
        logger.info("Bulk export in progress", status_url=status_url, progress=job.progress)
        return ExportStatus(status="in-progress", progress=job.progress)

    if not isinstance(job.body, dict):
        raise ProtocolViolation("Completed export did not return a manifest.")
    manifest = BulkExportResult.model_validate(job.body)
    logger.info(
        "Bulk export complete",
        status_url=status_url,
        files=len(manifest.output),
        errors=len(manifest.error),
    )
    return ExportStatus(status="complete", manifest=manifest)

"""
S3 Staging

Copies the files listed in a completed bulk export manifest into the S3
staging location and describes them as import sources:

    s3://{bucket}/{prefix}/{job}/{resourceType}.{n}.ndjson

Files are transferred one after another. The job segment is derived from the
export's transactionTime, so repeating a transfer overwrites the same keys.
"""

import re
import uuid
from typing import Optional

import aioboto3
import structlog

from pathling_connect.client.http import FHIR_NDJSON, FhirHttpClient
from pathling_connect.codec import ImportQuery, ImportSource, import_query_to_parameters
from pathling_connect.config import StagingSettings
from pathling_connect.errors import ValidationError
from pathling_connect.fhir.resources import Parameters
from pathling_connect.pipeline.models import BulkExportResult, ExportStatus

logger = structlog.get_logger(__name__)


class S3Stager:
    """Writes staged NDJSON files to S3."""

    def __init__(self, settings: StagingSettings, session=None):
        self.settings = settings
        self.session = session or aioboto3.Session()

    def key_for(self, job_id: str, resource_type: str, index: int) -> str:
        name = f"{job_id}/{resource_type}.{index}.ndjson"
        return f"{self.settings.prefix}/{name}" if self.settings.prefix else name

    async def put(self, key: str, body: bytes) -> str:
        """Upload one object, returning its s3:// URL."""
        client_kwargs = {"region_name": self.settings.region}
        if self.settings.endpoint_url:
            client_kwargs["endpoint_url"] = self.settings.endpoint_url

        async with self.session.client("s3", **client_kwargs) as s3:
            await s3.put_object(
                Bucket=self.settings.bucket,
                Key=key,
                Body=body,
                ContentType=FHIR_NDJSON,
            )

        s3_url = f"s3://{self.settings.bucket}/{key}"
        logger.info("Staged file in S3", url=s3_url, bytes=len(body))
        return s3_url


def job_id_for(manifest: BulkExportResult) -> str:
    """Stable staging folder name for an export."""
    if manifest.transaction_time:
        return re.sub(r"[^0-9A-Za-z]", "", manifest.transaction_time)
    return uuid.uuid4().hex


def completed_manifest(result: ExportStatus | BulkExportResult) -> BulkExportResult:
    if isinstance(result, BulkExportResult):
        return result
    if not result.complete or result.manifest is None:
        raise ValidationError("Export has not completed; nothing to transfer.")
    return result.manifest


async def transfer_to_s3(
    result: ExportStatus | BulkExportResult,
    http: FhirHttpClient,
    stager: S3Stager,
    job_id: Optional[str] = None,
) -> Parameters:
    """
    Stage every output file of the export and build the $import parameters.

    Returns:
        Parameters with one source per staged file, in manifest order
    """
    manifest = completed_manifest(result)
    job_id = job_id or job_id_for(manifest)
    counters: dict[str, int] = {}
    sources = []

    for output in manifest.output:
        index = counters.get(output.type, 0)
        counters[output.type] = index + 1

        body = await http.download(output.url, authenticated=manifest.requires_access_token)
        s3_url = await stager.put(stager.key_for(job_id, output.type, index), body)
        sources.append(ImportSource(resource_type=output.type, url=s3_url))

    logger.info("Transfer to S3 complete", job_id=job_id, files=len(sources))
    return import_query_to_parameters(ImportQuery(source=sources))

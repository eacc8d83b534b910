"""
Pipeline Handlers

The five stages of the bulk export/import chain, as event-in/event-out
coroutines. Each stage reads one named field from its input event and
returns a dict with one named field for the next stage:

    fhir_export          -> {statusUrl}
    check_export_status  {statusUrl}  -> {result}
    transfer_to_s3       {result}     -> {parameters}
    pathling_import      {parameters} -> {statusUrl}
    check_import_status  {statusUrl}  -> {result}

Errors are not caught here; they surface to the caller (the Lambda runtime
and the state machine driving it).
"""

from typing import Any, Optional

import httpx
import structlog

from pathling_connect.client.auth import token_provider_for
from pathling_connect.client.http import FhirHttpClient
from pathling_connect.client.pathling import PathlingClient
from pathling_connect.config import EndpointSettings, Settings
from pathling_connect.errors import ValidationError
from pathling_connect.pipeline import (
    ExportStatus,
    S3Stager,
    check_export_status,
    check_import_status,
    start_export,
    start_import,
    transfer_to_s3,
)

logger = structlog.get_logger(__name__)


def _field(event: Any, name: str) -> Any:
    if not isinstance(event, dict) or event.get(name) is None:
        raise ValidationError(f"Input event must have a '{name}' field.")
    return event[name]


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


class PipelineHandlers:
    """
    Stage handlers bound to one Settings value.

    Clients are built per invocation, so nothing is shared between calls
    apart from the settings themselves.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        s3_session=None,
    ):
        self.settings = settings
        self.transport = transport
        self.s3_session = s3_session

    def _http_for(self, endpoint: EndpointSettings) -> FhirHttpClient:
        timeout = self.settings.app.request_timeout
        return FhirHttpClient(
            token_provider=token_provider_for(endpoint, transport=self.transport, timeout=timeout),
            timeout=timeout,
            transport=self.transport,
        )

    def _pathling(self) -> PathlingClient:
        return PathlingClient(
            self.settings.target.base_url,
            http=self._http_for(self.settings.target),
        )

    async def fhir_export(self, event: Any = None) -> dict:
        """Start a bulk export from the source server."""
        logger.info("Handler invoked", handler="fhir_export")
        status_url = await start_export(self.settings.source, self._http_for(self.settings.source))
        return {"statusUrl": status_url}

    async def check_export_status(self, event: Any) -> dict:
        """Check a bulk export status URL once."""
        logger.info("Handler invoked", handler="check_export_status")
        status = await check_export_status(
            self._http_for(self.settings.source),
            _field(event, "statusUrl"),
        )
        return {"result": _dump(status)}

    async def transfer_to_s3(self, event: Any) -> dict:
        """Stage the exported files in S3 and build the import parameters."""
        logger.info("Handler invoked", handler="transfer_to_s3")
        result = ExportStatus.model_validate(_field(event, "result"))
        parameters = await transfer_to_s3(
            result,
            self._http_for(self.settings.source),
            S3Stager(self.settings.staging, session=self.s3_session),
        )
        return {"parameters": parameters}

    async def pathling_import(self, event: Any) -> dict:
        """Submit the staged files to Pathling."""
        logger.info("Handler invoked", handler="pathling_import")
        status_url = await start_import(self._pathling(), _field(event, "parameters"))
        return {"statusUrl": status_url}

    async def check_import_status(self, event: Any) -> dict:
        """Check a Pathling import status URL once."""
        logger.info("Handler invoked", handler="check_import_status")
        status = await check_import_status(self._pathling(), _field(event, "statusUrl"))
        return {"result": _dump(status)}

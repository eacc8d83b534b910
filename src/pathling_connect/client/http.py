"""
FHIR HTTP Client

Thin httpx wrapper that every remote call goes through:
- FHIR JSON Accept/Content-Type headers
- Optional bearer authentication
- Cooperative cancellation
- Mapping of failures onto the pathling_connect error taxonomy

One call, one request: there are no retries and no backoff.
"""

from typing import Any, Dict, Optional
import asyncio
import json

import httpx
import structlog
from pydantic import BaseModel

from pathling_connect.client.cancellation import CancelToken, RequestCancelled
from pathling_connect.errors import ProtocolViolation, TransportError
from pathling_connect.fhir.operation_outcome import op_outcome_from_json_response
from pathling_connect.fhir.resources import (
    FHIR_JSON,
    Parameters,
    is_fhir_json,
    is_resource_of_type,
)

logger = structlog.get_logger(__name__)

FHIR_NDJSON = "application/fhir+ndjson"


class JobStatus(BaseModel):
    """Result of checking an asynchronous job status URL."""
    complete: bool
    progress: Optional[str] = None
    body: Optional[Any] = None


class FhirHttpClient:
    """
    HTTP client for FHIR endpoints.

    A token provider, when given, is asked for a bearer token before each
    request. A transport can be supplied to route requests somewhere other
    than the network (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        token_provider=None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.token_provider = token_provider
        self.timeout = timeout
        self.transport = transport
        self.default_headers = headers or {}

    # =========================================================================
    # Request Plumbing
    # =========================================================================

    async def _headers(
        self,
        extra: Optional[Dict[str, str]],
        accept: str,
        has_body: bool,
    ) -> Dict[str, str]:
        headers = {"Accept": accept, **self.default_headers}
        if has_body:
            headers["Content-Type"] = FHIR_JSON
        if self.token_provider is not None:
            token = await self.token_provider.get_token()
            headers["Authorization"] = f"Bearer {token}"
        if extra:
            headers.update(extra)
        return headers

    async def _perform(
        self,
        method: str,
        url: str,
        body: Optional[Any],
        headers: Dict[str, str],
    ) -> httpx.Response:
        content = json.dumps(body).encode("utf-8") if body is not None else None
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self.transport,
            ) as client:
                return await client.request(method, url, content=content, headers=headers)
        except httpx.HTTPError as e:
            logger.error("FHIR request failed", method=method, url=url, error=str(e))
            raise TransportError(str(e) or type(e).__name__) from e

    async def _perform_cancellable(
        self,
        method: str,
        url: str,
        body: Optional[Any],
        headers: Dict[str, str],
        cancel: CancelToken,
    ) -> httpx.Response:
        if cancel.cancelled:
            raise RequestCancelled()

        request_task = asyncio.ensure_future(self._perform(method, url, body, headers))
        cancel_task = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait(
                {request_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_task.cancel()
            if cancel.cancelled or not request_task.done():
                request_task.cancel()
                await asyncio.gather(request_task, return_exceptions=True)

        if cancel.cancelled:
            raise RequestCancelled()
        return request_task.result()

    @staticmethod
    def raise_for_failure(response: httpx.Response) -> None:
        """Raise the matching PathlingError for an unsuccessful response."""
        if response.is_success:
            return

        if is_fhir_json(response.headers.get("content-type")):
            try:
                body = response.json()
            except ValueError:
                body = None
            if is_resource_of_type(body, "OperationOutcome"):
                raise op_outcome_from_json_response(body, response.status_code)

        raise TransportError(
            f"Request failed with status code {response.status_code}",
            status_code=response.status_code,
        )

    @staticmethod
    def decode_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProtocolViolation("Response body is not valid JSON.") from e

    async def send(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        cancel: Optional[CancelToken] = None,
        accept: str = FHIR_JSON,
    ) -> Optional[httpx.Response]:
        """
        Send a single request.

        Returns the successful response, or None if the request was cancelled.
        Raises OperationOutcomeError or TransportError on failure.
        """
        request_headers = await self._headers(headers, accept, body is not None)
        logger.debug("Sending FHIR request", method=method, url=url)

        try:
            if cancel is None:
                response = await self._perform(method, url, body, request_headers)
            else:
                response = await self._perform_cancellable(
                    method, url, body, request_headers, cancel
                )
        except RequestCancelled:
            logger.info("FHIR request cancelled", method=method, url=url)
            return None

        logger.info(
            "FHIR response received",
            method=method,
            url=url,
            status=response.status_code,
        )
        self.raise_for_failure(response)
        return response

    # =========================================================================
    # Operations
    # =========================================================================

    async def request_parameters(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Optional[Parameters]:
        """Send a request whose successful response must be a Parameters resource."""
        response = await self.send(method, url, body, headers=headers, cancel=cancel)
        if response is None:
            return None
        data = self.decode_json(response)
        if not is_resource_of_type(data, "Parameters"):
            raise ProtocolViolation("Response is not of type Parameters.")
        return data

    async def post_parameters(
        self,
        url: str,
        body: Any,
        headers: Optional[Dict[str, str]] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Optional[Parameters]:
        return await self.request_parameters("POST", url, body, headers, cancel)

    async def get_parameters(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        cancel: Optional[CancelToken] = None,
    ) -> Optional[Parameters]:
        return await self.request_parameters("GET", url, None, headers, cancel)

    async def kick_off(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> str:
        """
        Start an asynchronous FHIR operation.

        Returns the status URL from the Content-Location header of the 202
        response.
        """
        if params:
            url = str(httpx.URL(url, params=params))
        response = await self.send(
            method, url, body, headers={"Prefer": "respond-async"}
        )
        status_url = response.headers.get("content-location")
        if response.status_code != 202 or not status_url:
            raise ProtocolViolation(
                f"Expected 202 Accepted with Content-Location from {url}, "
                f"got {response.status_code}"
            )
        logger.info("Asynchronous operation started", url=url, status_url=status_url)
        return status_url

    async def check_status(self, status_url: str) -> JobStatus:
        """Check an asynchronous job once: 202 is in progress, 200 is complete."""
        response = await self.send("GET", status_url)
        if response.status_code == 202:
            return JobStatus(complete=False, progress=response.headers.get("x-progress"))
        body = self.decode_json(response) if response.content else None
        return JobStatus(complete=True, body=body)

    async def download(self, url: str, authenticated: bool = False) -> bytes:
        """Fetch an NDJSON file, attaching the bearer token only when asked."""
        if authenticated:
            response = await self.send("GET", url, accept=FHIR_NDJSON)
            return response.content

        unauthenticated = FhirHttpClient(
            timeout=self.timeout,
            transport=self.transport,
            headers=self.default_headers,
        )
        response = await unauthenticated.send("GET", url, accept=FHIR_NDJSON)
        return response.content

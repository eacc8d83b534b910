"""
SMART Backend Services Authentication

Client-credentials token retrieval for servers that require it:
- Token endpoint discovery via .well-known/smart-configuration
- client_credentials grant with the configured scopes
- Token reuse until shortly before expiry, per provider instance
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
import structlog
from pydantic import BaseModel, Field

from pathling_connect.config import EndpointSettings
from pathling_connect.errors import ConfigurationError, ProtocolViolation, TransportError

logger = structlog.get_logger(__name__)


def _json_object(response: httpx.Response, what: str) -> dict:
    try:
        data = response.json()
    except ValueError as e:
        raise ProtocolViolation(f"{what} is not valid JSON.") from e
    if not isinstance(data, dict):
        raise ProtocolViolation(f"{what} is not a JSON object.")
    return data


class TokenSet(BaseModel):
    """OAuth token set."""
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 300
    scope: str = ""

    # Calculated
    expires_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def __init__(self, **data):
        super().__init__(**data)
        self.expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.expires_in)

    @property
    def is_expired(self) -> bool:
        """Check if token is expired (with 30-second buffer)."""
        return datetime.now(timezone.utc) >= (self.expires_at - timedelta(seconds=30))


class SmartTokenProvider:
    """Obtains bearer tokens for one endpoint using client credentials."""

    def __init__(
        self,
        settings: EndpointSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        if not settings.client_id:
            raise ConfigurationError("Client credentials require a client_id")
        self.settings = settings
        self.transport = transport
        self.timeout = timeout
        self._tokens: Optional[TokenSet] = None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )

    async def discover_token_endpoint(self) -> str:
        """Read token_endpoint from the server's SMART configuration."""
        if self.settings.token_endpoint:
            return self.settings.token_endpoint

        url = f"{self.settings.base_url}/.well-known/smart-configuration"
        try:
            async with self._client() as client:
                response = await client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise TransportError(
                f"SMART configuration request failed with status code {response.status_code}",
                status_code=response.status_code,
            )
        token_endpoint = _json_object(response, "SMART configuration").get("token_endpoint")
        if not token_endpoint:
            raise ProtocolViolation(f"No token_endpoint in SMART configuration at {url}")
        return token_endpoint

    async def fetch_token(self) -> TokenSet:
        """Request a new access token."""
        token_endpoint = await self.discover_token_endpoint()
        data = {
            "grant_type": "client_credentials",
            "client_id": self.settings.client_id,
            "scope": self.settings.scopes,
        }
        if self.settings.client_secret:
            data["client_secret"] = self.settings.client_secret.get_secret_value()

        try:
            async with self._client() as client:
                response = await client.post(
                    token_endpoint,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        if response.status_code != 200:
            logger.error(
                "Token request failed",
                token_endpoint=token_endpoint,
                status=response.status_code,
            )
            raise TransportError(
                f"Token request failed with status code {response.status_code}",
                status_code=response.status_code,
            )

        token_data = _json_object(response, "Token response")
        if "access_token" not in token_data:
            raise ProtocolViolation("Token response has no access_token.")

        logger.info("Obtained access token", token_endpoint=token_endpoint)
        return TokenSet(
            access_token=token_data["access_token"],
            token_type=token_data.get("token_type", "Bearer"),
            expires_in=token_data.get("expires_in", 300),
            scope=token_data.get("scope", ""),
        )

    async def get_token(self) -> str:
        """Return a valid access token, fetching a new one when needed."""
        if self._tokens is None or self._tokens.is_expired:
            self._tokens = await self.fetch_token()
        return self._tokens.access_token


def token_provider_for(
    settings: EndpointSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    timeout: Optional[float] = None,
) -> Optional[SmartTokenProvider]:
    """Build a token provider when the endpoint has client credentials."""
    if not settings.requires_auth:
        return None
    return SmartTokenProvider(settings, transport=transport, timeout=timeout)

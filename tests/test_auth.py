from urllib.parse import parse_qs

import httpx
import pytest

from pathling_connect.client.auth import SmartTokenProvider, TokenSet, token_provider_for
from pathling_connect.config import EndpointSettings
from pathling_connect.errors import ConfigurationError, PathlingError, ProtocolViolation, TransportError


def _settings(**kwargs):
    return EndpointSettings(endpoint="https://fhir.example.org/fhir/", **kwargs)


def test_token_provider_only_with_client_id():
    assert token_provider_for(_settings()) is None
    assert isinstance(token_provider_for(_settings(client_id="pipeline")), SmartTokenProvider)


def test_provider_requires_client_id():
    with pytest.raises(ConfigurationError):
        SmartTokenProvider(_settings())


def test_token_set_expiry():
    assert TokenSet(access_token="a", expires_in=300).is_expired is False
    assert TokenSet(access_token="a", expires_in=10).is_expired is True


@pytest.mark.asyncio
async def test_discovers_token_endpoint_and_reuses_token():
    requests = []

    def handler(request):
        requests.append(request)
        if request.url.path.endswith("/.well-known/smart-configuration"):
            return httpx.Response(200, json={"token_endpoint": "https://auth.example.org/token"})
        return httpx.Response(
            200, json={"access_token": "tok-1", "expires_in": 600, "token_type": "Bearer"}
        )

    provider = SmartTokenProvider(
        _settings(client_id="pipeline", client_secret="s3cret", scopes="system/*.read"),
        transport=httpx.MockTransport(handler),
    )

    assert await provider.get_token() == "tok-1"
    assert await provider.get_token() == "tok-1"
    assert len(requests) == 2

    discovery, token_request = requests
    assert str(discovery.url) == "https://fhir.example.org/fhir/.well-known/smart-configuration"
    assert str(token_request.url) == "https://auth.example.org/token"
    form = parse_qs(token_request.content.decode())
    assert form["grant_type"] == ["client_credentials"]
    assert form["client_id"] == ["pipeline"]
    assert form["client_secret"] == ["s3cret"]
    assert form["scope"] == ["system/*.read"]


@pytest.mark.asyncio
async def test_configured_token_endpoint_skips_discovery():
    urls = []

    def handler(request):
        urls.append(str(request.url))
        return httpx.Response(200, json={"access_token": "tok-2"})

    provider = SmartTokenProvider(
        _settings(client_id="pipeline", token_endpoint="https://auth.example.org/oauth/token"),
        transport=httpx.MockTransport(handler),
    )

    assert await provider.get_token() == "tok-2"
    assert urls == ["https://auth.example.org/oauth/token"]


@pytest.mark.asyncio
async def test_rejected_token_request():
    def handler(request):
        return httpx.Response(401, json={"error": "invalid_client"})

    provider = SmartTokenProvider(
        _settings(client_id="pipeline", token_endpoint="https://auth.example.org/token"),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(TransportError) as exc_info:
        await provider.get_token()
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_token_response_not_json():
    def handler(request):
        return httpx.Response(200, text="<html>oops</html>", headers={"Content-Type": "text/html"})

    provider = SmartTokenProvider(
        _settings(client_id="pipeline", token_endpoint="https://auth.example.org/token"),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ProtocolViolation) as exc_info:
        await provider.get_token()
    assert exc_info.value.message == "Token response is not valid JSON."


@pytest.mark.asyncio
async def test_token_response_not_an_object():
    def handler(request):
        return httpx.Response(200, json=["access_token"])

    provider = SmartTokenProvider(
        _settings(client_id="pipeline", token_endpoint="https://auth.example.org/token"),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(ProtocolViolation):
        await provider.get_token()


@pytest.mark.asyncio
async def test_smart_configuration_not_an_object():
    def handler(request):
        return httpx.Response(200, json=[{"token_endpoint": "https://auth.example.org/token"}])

    provider = SmartTokenProvider(
        _settings(client_id="pipeline"),
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(PathlingError) as exc_info:
        await provider.get_token()
    assert isinstance(exc_info.value, ProtocolViolation)
    assert exc_info.value.message == "SMART configuration is not a JSON object."

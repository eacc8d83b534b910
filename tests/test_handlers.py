import json

import httpx
import pytest

from pathling_connect.config import Settings, SourceSettings, StagingSettings, TargetSettings
from pathling_connect.errors import TransportError, ValidationError
from pathling_connect.handlers import PipelineHandlers


def _handlers(handler, session):
    settings = Settings(
        source=SourceSettings(endpoint="https://source/fhir", types="Patient"),
        target=TargetSettings(endpoint="https://pathling/fhir"),
        staging=StagingSettings(url="s3://staging/pipeline"),
    )
    return PipelineHandlers(
        settings,
        transport=httpx.MockTransport(handler),
        s3_session=session,
    )


def _server(request):
    url = str(request.url)
    if url == "https://source/fhir/$export?_type=Patient":
        return httpx.Response(202, headers={"Content-Location": "https://source/fhir/status/1"})
    if url == "https://source/fhir/status/1":
        return httpx.Response(
            200,
            json={
                "transactionTime": "2024-05-01T10:00:00Z",
                "requiresAccessToken": False,
                "output": [{"type": "Patient", "url": "https://files/Patient.ndjson"}],
            },
        )
    if url == "https://files/Patient.ndjson":
        return httpx.Response(200, content=b'{"resourceType":"Patient","id":"1"}\n')
    if url == "https://pathling/fhir/$import":
        body = json.loads(request.content)
        assert body["parameter"][0]["name"] == "source"
        return httpx.Response(202, headers={"Content-Location": "https://pathling/fhir/$job?id=7"})
    if url == "https://pathling/fhir/$job?id=7":
        return httpx.Response(
            200,
            json={"resourceType": "OperationOutcome", "issue": [{"severity": "information", "code": "informational"}]},
            headers={"Content-Type": "application/fhir+json"},
        )
    return httpx.Response(404)


@pytest.mark.asyncio
async def test_handler_chain(s3_session):
    session = s3_session
    handlers = _handlers(_server, session)

    export = await handlers.fhir_export({})
    assert export == {"statusUrl": "https://source/fhir/status/1"}

    status = await handlers.check_export_status(export)
    assert status["result"]["status"] == "complete"
    assert status["result"]["manifest"]["transactionTime"] == "2024-05-01T10:00:00Z"

    transfer = await handlers.transfer_to_s3(status)
    assert transfer["parameters"]["parameter"][0]["part"] == [
        {"name": "resourceType", "valueString": "Patient"},
        {"name": "url", "valueString": "s3://staging/pipeline/20240501T100000Z/Patient.0.ndjson"},
    ]
    assert session.objects[0]["Body"] == b'{"resourceType":"Patient","id":"1"}\n'

    started = await handlers.pathling_import(transfer)
    assert started == {"statusUrl": "https://pathling/fhir/$job?id=7"}

    finished = await handlers.check_import_status(started)
    assert finished["result"]["status"] == "complete"
    assert finished["result"]["response"]["resourceType"] == "OperationOutcome"


@pytest.mark.asyncio
async def test_handler_output_is_json_serializable(s3_session):
    handlers = _handlers(_server, s3_session)
    status = await handlers.check_export_status({"statusUrl": "https://source/fhir/status/1"})
    assert json.loads(json.dumps(status)) == status


@pytest.mark.asyncio
async def test_missing_input_field(s3_session):
    handlers = _handlers(_server, s3_session)

    with pytest.raises(ValidationError) as exc_info:
        await handlers.check_export_status({})
    assert exc_info.value.message == "Input event must have a 'statusUrl' field."


@pytest.mark.asyncio
async def test_errors_propagate(s3_session):
    def handler(request):
        return httpx.Response(500, text="boom")

    handlers = _handlers(handler, s3_session)
    with pytest.raises(TransportError) as exc_info:
        await handlers.fhir_export({})
    assert exc_info.value.status_code == 500


def test_lambda_entrypoint_runs_handler(monkeypatch, s3_session):
    monkeypatch.setenv("SOURCE_ENDPOINT", "https://source/fhir")
    from pathling_connect import lambda_function

    monkeypatch.setattr(lambda_function, "handlers", _handlers(_server, s3_session))

    assert lambda_function.fhir_export({}, None) == {"statusUrl": "https://source/fhir/status/1"}

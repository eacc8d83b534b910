import httpx
import pytest

from pathling_connect.client.http import FhirHttpClient
from pathling_connect.config import StagingSettings
from pathling_connect.errors import ValidationError
from pathling_connect.pipeline.models import BulkExportResult, ExportStatus
from pathling_connect.pipeline.transfer import S3Stager, job_id_for, transfer_to_s3


def _manifest(requires_access_token=False):
    return BulkExportResult.model_validate(
        {
            "transactionTime": "2024-05-01T10:00:00Z",
            "requiresAccessToken": requires_access_token,
            "output": [
                {"type": "Patient", "url": "https://files/a.ndjson"},
                {"type": "Condition", "url": "https://files/b.ndjson"},
                {"type": "Patient", "url": "https://files/c.ndjson"},
            ],
        }
    )


def _files_client(seen_auth):
    def handler(request):
        seen_auth.append(request.headers.get("authorization"))
        return httpx.Response(200, content=f"{request.url.path}\n".encode())

    return FhirHttpClient(transport=httpx.MockTransport(handler))


def test_job_id_from_transaction_time():
    assert job_id_for(_manifest()) == "20240501T100000Z"
    assert len(job_id_for(BulkExportResult())) == 32


def test_key_layout(s3_session):
    stager = S3Stager(StagingSettings(url="s3://bucket/staging"), session=s3_session)
    assert stager.key_for("job1", "Patient", 0) == "staging/job1/Patient.0.ndjson"

    unprefixed = S3Stager(StagingSettings(url="s3://bucket"), session=s3_session)
    assert unprefixed.key_for("job1", "Patient", 2) == "job1/Patient.2.ndjson"


@pytest.mark.asyncio
async def test_transfer_stages_every_file(s3_session):
    session = s3_session
    stager = S3Stager(
        StagingSettings(url="s3://bucket/staging", endpoint_url="http://localhost:4566"),
        session=session,
    )
    seen_auth = []

    params = await transfer_to_s3(
        ExportStatus(status="complete", manifest=_manifest()),
        _files_client(seen_auth),
        stager,
    )

    assert [o["Key"] for o in session.objects] == [
        "staging/20240501T100000Z/Patient.0.ndjson",
        "staging/20240501T100000Z/Condition.0.ndjson",
        "staging/20240501T100000Z/Patient.1.ndjson",
    ]
    assert session.objects[0]["Bucket"] == "bucket"
    assert session.objects[0]["Body"] == b"/a.ndjson\n"
    assert session.objects[0]["ContentType"] == "application/fhir+ndjson"
    assert session.client_kwargs[0]["endpoint_url"] == "http://localhost:4566"

    assert params["resourceType"] == "Parameters"
    assert [p["part"][0]["valueString"] for p in params["parameter"]] == [
        "Patient",
        "Condition",
        "Patient",
    ]
    assert params["parameter"][1]["part"][1]["valueString"] == (
        "s3://bucket/staging/20240501T100000Z/Condition.0.ndjson"
    )
    assert seen_auth == [None, None, None]


@pytest.mark.asyncio
async def test_transfer_refuses_incomplete_export(s3_session):
    stager = S3Stager(StagingSettings(url="s3://bucket"), session=s3_session)

    with pytest.raises(ValidationError):
        await transfer_to_s3(
            ExportStatus(status="in-progress"),
            _files_client([]),
            stager,
        )

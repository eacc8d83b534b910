import pytest

from pathling_connect.config import (
    AppSettings,
    Settings,
    SourceSettings,
    StagingSettings,
    TargetSettings,
)
from pathling_connect.errors import ConfigurationError


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SOURCE_ENDPOINT", "https://source.example.org/fhir/")
    monkeypatch.setenv("SOURCE_TYPES", "Patient, Condition,,Observation")
    monkeypatch.setenv("TARGET_ENDPOINT", "https://pathling.example.org/fhir")
    monkeypatch.setenv("TARGET_CLIENT_ID", "importer")
    monkeypatch.setenv("STAGING_URL", "s3://staging-bucket/exports/")
    monkeypatch.setenv("PATHLING_CONNECT_REQUEST_TIMEOUT", "30")

    settings = Settings.from_environment()

    assert settings.source.base_url == "https://source.example.org/fhir"
    assert settings.source.type_list == ["Patient", "Condition", "Observation"]
    assert settings.source.requires_auth is False
    assert settings.target.requires_auth is True
    assert settings.target.scopes == "system/*.write"
    assert settings.staging.bucket == "staging-bucket"
    assert settings.staging.prefix == "exports"
    assert settings.app.request_timeout == 30.0


def test_timeout_unset_by_default(monkeypatch):
    monkeypatch.delenv("PATHLING_CONNECT_REQUEST_TIMEOUT", raising=False)
    assert AppSettings().request_timeout is None


def test_missing_endpoint():
    with pytest.raises(ConfigurationError):
        TargetSettings(endpoint="").base_url


def test_invalid_staging_url():
    with pytest.raises(ConfigurationError):
        StagingSettings(url="https://bucket/prefix").bucket


def test_staging_url_without_prefix():
    staging = StagingSettings(url="s3://bucket")
    assert staging.bucket == "bucket"
    assert staging.prefix == ""


def test_explicit_groups():
    settings = Settings(source=SourceSettings(endpoint="https://s/fhir", since="2024-01-01T00:00:00Z"))
    assert settings.source.since == "2024-01-01T00:00:00Z"


def test_app_settings_fields():
    assert set(AppSettings.model_fields) == {"log_level", "log_json", "request_timeout"}

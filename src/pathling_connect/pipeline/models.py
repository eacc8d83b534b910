"""
Pipeline Stage Models

Payloads passed between pipeline stages. Field aliases follow the JSON the
orchestrator stores between steps (camelCase, as in the FHIR Bulk Data
manifest).
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class BulkExportOutput(BaseModel):
    """One NDJSON file listed in a bulk export manifest."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: str
    url: str
    count: Optional[int] = None


class BulkExportResult(BaseModel):
    """The manifest returned once a bulk export completes."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    transaction_time: Optional[str] = Field(default=None, alias="transactionTime")
    request: Optional[str] = None
    requires_access_token: bool = Field(default=False, alias="requiresAccessToken")
    output: List[BulkExportOutput] = Field(default_factory=list)
    error: List[BulkExportOutput] = Field(default_factory=list)


class ExportStatus(BaseModel):
    """Outcome of a single export status check."""
    status: Literal["in-progress", "complete"]
    progress: Optional[str] = None
    manifest: Optional[BulkExportResult] = None

    @property
    def complete(self) -> bool:
        return self.status == "complete"


class ImportStatus(BaseModel):
    """Outcome of a single import status check."""
    status: Literal["in-progress", "complete"]
    progress: Optional[str] = None

    # OperationOutcome returned by the completed import
    response: Optional[dict[str, Any]] = None

    @property
    def complete(self) -> bool:
        return self.status == "complete"

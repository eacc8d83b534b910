"""
Export/Import Pipeline Stages

Each stage builds one request from its input, sends it, and shapes the
response for the next stage. Stages keep no state between calls.
"""

from pathling_connect.pipeline.export import check_export_status, start_export
from pathling_connect.pipeline.load import check_import_status, start_import
from pathling_connect.pipeline.models import (
    BulkExportOutput,
    BulkExportResult,
    ExportStatus,
    ImportStatus,
)
from pathling_connect.pipeline.transfer import S3Stager, transfer_to_s3

__all__ = [
    "start_export",
    "check_export_status",
    "transfer_to_s3",
    "S3Stager",
    "start_import",
    "check_import_status",
    "BulkExportOutput",
    "BulkExportResult",
    "ExportStatus",
    "ImportStatus",
]

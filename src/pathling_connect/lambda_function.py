"""
AWS Lambda entrypoints.

Settings are read once when the runtime loads this module; every invocation
of a warm container reuses that value.
"""

import asyncio

from pathling_connect.config import Settings
from pathling_connect.handlers import PipelineHandlers
from pathling_connect.observability.logging import configure_logging

settings = Settings.from_environment()
configure_logging(settings.app.log_level, settings.app.log_json)
handlers = PipelineHandlers(settings)


def fhir_export(event, context):
    return asyncio.run(handlers.fhir_export(event))


def check_export_status(event, context):
    return asyncio.run(handlers.check_export_status(event))


def transfer_to_s3(event, context):
    return asyncio.run(handlers.transfer_to_s3(event))


def pathling_import(event, context):
    return asyncio.run(handlers.pathling_import(event))


def check_import_status(event, context):
    return asyncio.run(handlers.check_import_status(event))

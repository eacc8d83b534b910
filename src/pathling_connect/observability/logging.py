"""
Structured Logging

structlog configuration shared by the Lambda entrypoints and the workbench:
- JSON (or console) rendering
- ISO timestamps, logger names and levels
- Redaction of bearer tokens and client secrets
"""

import logging
import re
import sys

import structlog

_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE)
_SECRET_KEYS = {"authorization", "client_secret", "access_token", "token"}


def redact_secrets(logger, method_name, event_dict):
    """Mask credentials before they reach the renderer."""
    for key, value in event_dict.items():
        if key.lower() in _SECRET_KEYS and value:
            event_dict[key] = "***"
        elif isinstance(value, str):
            event_dict[key] = _BEARER.sub(r"\1***", value)
    return event_dict


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """Configure stdlib logging and structlog for the process."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

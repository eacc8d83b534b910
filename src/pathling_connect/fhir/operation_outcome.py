"""
OperationOutcome Handling

Turns a FHIR OperationOutcome error body into an OperationOutcomeError whose
message is the text of the first issue.
"""

from typing import Any, Optional

from pathling_connect.errors import OperationOutcomeError, ProtocolViolation
from pathling_connect.fhir.resources import OperationOutcome, is_resource_of_type

DEFAULT_MESSAGE = "Unknown error"


def message_from_outcome(outcome: OperationOutcome) -> str:
    """
    Extract a human-readable message from the first issue.

    Prefers diagnostics, then details.text, then the issue code.
    """
    issues = outcome.get("issue") or []
    if not issues:
        return DEFAULT_MESSAGE
    issue = issues[0]
    if issue.get("diagnostics"):
        return issue["diagnostics"]
    details = issue.get("details") or {}
    if details.get("text"):
        return details["text"]
    return issue.get("code") or DEFAULT_MESSAGE


def op_outcome_from_json_response(
    body: Any,
    status_code: Optional[int] = None,
) -> OperationOutcomeError:
    """Build the error for a decoded FHIR JSON error body."""
    if not is_resource_of_type(body, "OperationOutcome"):
        raise ProtocolViolation("Error response is not an OperationOutcome.")
    return OperationOutcomeError(
        message_from_outcome(body),
        outcome=body,
        status_code=status_code,
    )

"""FHIR wire types and OperationOutcome handling."""

from pathling_connect.fhir.resources import (
    FHIR_JSON,
    OperationOutcome,
    OperationOutcomeIssue,
    Parameter,
    Parameters,
    first_part,
    is_fhir_json,
    is_resource_of_type,
    parameter_value,
    parameters_named,
    parts_by_name,
)
from pathling_connect.fhir.operation_outcome import (
    message_from_outcome,
    op_outcome_from_json_response,
)

__all__ = [
    "FHIR_JSON",
    "OperationOutcome",
    "OperationOutcomeIssue",
    "Parameter",
    "Parameters",
    "first_part",
    "is_fhir_json",
    "is_resource_of_type",
    "parameter_value",
    "parameters_named",
    "parts_by_name",
    "message_from_outcome",
    "op_outcome_from_json_response",
]

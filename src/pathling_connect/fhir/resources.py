"""FHIR R4 resource shapes used on the wire."""

from typing import Any, NotRequired, Optional, TypedDict

FHIR_JSON = "application/fhir+json"


class Parameter(TypedDict):
    name: str
    valueString: NotRequired[str]
    valueInteger: NotRequired[int]
    valueDecimal: NotRequired[float]
    valueBoolean: NotRequired[bool]
    valueCode: NotRequired[str]
    valueUri: NotRequired[str]
    valueUrl: NotRequired[str]
    valueDate: NotRequired[str]
    valueDateTime: NotRequired[str]
    valueInstant: NotRequired[str]
    valueCoding: NotRequired[dict[str, Any]]
    resource: NotRequired[dict[str, Any]]
    part: NotRequired[list["Parameter"]]


class Parameters(TypedDict):
    resourceType: str
    parameter: NotRequired[list[Parameter]]


class OperationOutcomeIssue(TypedDict):
    severity: str
    code: str
    diagnostics: NotRequired[str]
    details: NotRequired[dict[str, Any]]


class OperationOutcome(TypedDict):
    resourceType: str
    issue: list[OperationOutcomeIssue]


def is_resource_of_type(body: Any, resource_type: str) -> bool:
    """Check that a decoded JSON body is a resource of the given type."""
    return isinstance(body, dict) and body.get("resourceType") == resource_type


def is_fhir_json(content_type: Optional[str]) -> bool:
    """Check a Content-Type header against the FHIR JSON media type."""
    return bool(content_type) and FHIR_JSON in content_type.lower()


def parameter_value(parameter: Parameter) -> Any:
    """
    Return the value[x] of a parameter, or None when it only has parts.

    Coding values are returned as-is (the dict).
    """
    for key, value in parameter.items():
        if key.startswith("value"):
            return value
    return None


def parts_by_name(parameter: Parameter, name: str) -> list[Parameter]:
    return [p for p in parameter.get("part", []) if p.get("name") == name]


def first_part(parameter: Parameter, name: str) -> Optional[Parameter]:
    matching = parts_by_name(parameter, name)
    return matching[0] if matching else None


def parameters_named(parameters: Parameters, name: str) -> list[Parameter]:
    return [p for p in parameters.get("parameter", []) if p.get("name") == name]

"""
FHIR Parameter Codec

Converts domain query objects into FHIR Parameters resources:
- Import queries (one source parameter per NDJSON file)
- Aggregate queries (aggregations, groupings, filters)

and decodes the few response shapes the workbench displays. Expressions are
passed through untouched; the server is the only judge of their syntax.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pathling_connect.errors import ProtocolViolation
from pathling_connect.fhir.resources import (
    Parameter,
    Parameters,
    first_part,
    is_resource_of_type,
    parameter_value,
    parameters_named,
    parts_by_name,
)


# =============================================================================
# Domain Models
# =============================================================================

class ImportSource(BaseModel):
    """A source NDJSON file containing resources of a single type."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    resource_type: str = Field(alias="resourceType", min_length=1)
    url: str = Field(min_length=1)


class ImportQuery(BaseModel):
    """The parameters that make up an import request."""
    source: List[ImportSource] = Field(default_factory=list)


class Aggregation(BaseModel):
    """An aggregation expression, with an optional display label."""
    model_config = ConfigDict(frozen=True)

    expression: str
    label: Optional[str] = None


class Grouping(BaseModel):
    """A grouping expression, with an optional display label."""
    model_config = ConfigDict(frozen=True)

    expression: str
    label: Optional[str] = None


class Filter(BaseModel):
    model_config = ConfigDict(frozen=True)

    expression: str


class AggregateQuery(BaseModel):
    """A complete aggregate query, as submitted in a single request."""
    model_config = ConfigDict(frozen=True)

    aggregations: tuple[Aggregation, ...] = ()
    groupings: tuple[Grouping, ...] = ()
    filters: tuple[Filter, ...] = ()


class GroupingRow(BaseModel):
    """One row of an aggregate result: grouping labels and aggregation results."""
    labels: List[Any] = Field(default_factory=list)
    results: List[Any] = Field(default_factory=list)
    drill_down: Optional[str] = None


# =============================================================================
# Encoding
# =============================================================================

def _string_part(name: str, value: str) -> Parameter:
    return {"name": name, "valueString": value}


def _labelled_parameter(name: str, expression: str, label: Optional[str]) -> Parameter:
    parts = [_string_part("expression", expression)]
    if label:
        parts.append(_string_part("label", label))
    return {"name": name, "part": parts}


def import_source_to_parameter(source: ImportSource) -> Parameter:
    return {
        "name": "source",
        "part": [
            _string_part("resourceType", source.resource_type),
            _string_part("url", source.url),
        ],
    }


def import_query_to_parameters(query: ImportQuery) -> Parameters:
    """Convert an ImportQuery into the Parameters body of $import."""
    return {
        "resourceType": "Parameters",
        "parameter": [import_source_to_parameter(s) for s in query.source],
    }


def aggregation_to_parameter(aggregation: Aggregation) -> Parameter:
    return _labelled_parameter("aggregation", aggregation.expression, aggregation.label)


def grouping_to_parameter(grouping: Grouping) -> Parameter:
    return _labelled_parameter("grouping", grouping.expression, grouping.label)


def filter_to_parameter(filter_: Filter) -> Parameter:
    return _string_part("filter", filter_.expression)


def aggregate_query_to_parameters(query: AggregateQuery) -> Parameters:
    """
    Convert an aggregate query into the Parameters body of $aggregate-query.

    Aggregations come first, then groupings, then filters, each in the order
    they appear in the query.
    """
    parameter = (
        [aggregation_to_parameter(a) for a in query.aggregations]
        + [grouping_to_parameter(g) for g in query.groupings]
        + [filter_to_parameter(f) for f in query.filters]
    )
    return {"resourceType": "Parameters", "parameter": parameter}


def to_parameters(query: ImportQuery | AggregateQuery) -> Parameters:
    """Encode any supported query object."""
    if isinstance(query, ImportQuery):
        return import_query_to_parameters(query)
    if isinstance(query, AggregateQuery):
        return aggregate_query_to_parameters(query)
    raise TypeError(f"Cannot encode {type(query).__name__} as Parameters")


# =============================================================================
# Decoding
# =============================================================================

def parameters_from_json(body: Any) -> Parameters:
    """Typed pass-through for a decoded response body."""
    if not is_resource_of_type(body, "Parameters"):
        raise ProtocolViolation("Response is not of type Parameters.")
    return body


def import_query_from_parameters(parameters: Parameters) -> ImportQuery:
    """Decode the source parameters of an $import request body."""
    parameters = parameters_from_json(parameters)
    sources = []
    for param in parameters_named(parameters, "source"):
        resource_type = first_part(param, "resourceType")
        url = first_part(param, "url")
        if resource_type is None or url is None:
            raise ProtocolViolation("Import source must have resourceType and url parts.")
        sources.append(
            ImportSource(
                resource_type=parameter_value(resource_type),
                url=parameter_value(url),
            )
        )
    return ImportQuery(source=sources)


def aggregate_result_groupings(parameters: Parameters) -> list[GroupingRow]:
    """Decode the grouping rows of an $aggregate-query response."""
    parameters = parameters_from_json(parameters)
    rows = []
    for param in parameters_named(parameters, "grouping"):
        drill_down = first_part(param, "drillDown")
        rows.append(
            GroupingRow(
                labels=[parameter_value(p) for p in parts_by_name(param, "label")],
                results=[parameter_value(p) for p in parts_by_name(param, "result")],
                drill_down=parameter_value(drill_down) if drill_down else None,
            )
        )
    return rows

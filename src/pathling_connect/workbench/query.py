"""
Query State

The aggregations, groupings and filters the user has assembled. Every change
goes through an action; the reducer returns a new QueryState.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pathling_connect.codec import AggregateQuery, Aggregation, Filter, Grouping


class QueryState(AggregateQuery):
    """Current query, submitted as one snapshot per request."""
    pass


# =============================================================================
# Actions
# =============================================================================

@dataclass(frozen=True)
class AddAggregation:
    aggregation: Aggregation


@dataclass(frozen=True)
class UpdateAggregation:
    index: int
    aggregation: Aggregation


@dataclass(frozen=True)
class RemoveAggregation:
    index: int


@dataclass(frozen=True)
class AddGrouping:
    grouping: Grouping


@dataclass(frozen=True)
class UpdateGrouping:
    index: int
    grouping: Grouping


@dataclass(frozen=True)
class RemoveGrouping:
    index: int


@dataclass(frozen=True)
class AddFilter:
    filter: Filter


@dataclass(frozen=True)
class UpdateFilter:
    index: int
    filter: Filter


@dataclass(frozen=True)
class RemoveFilter:
    index: int


@dataclass(frozen=True)
class ClearQuery:
    pass


@dataclass(frozen=True)
class LoadQuery:
    query: QueryState


def add_aggregation(expression: str, label: Optional[str] = None) -> AddAggregation:
    return AddAggregation(Aggregation(expression=expression, label=label))


def add_grouping(expression: str, label: Optional[str] = None) -> AddGrouping:
    return AddGrouping(Grouping(expression=expression, label=label))


def add_filter(expression: str) -> AddFilter:
    return AddFilter(Filter(expression=expression))


# =============================================================================
# Reducer
# =============================================================================

def _replaced(items: tuple, index: int, item: Any) -> tuple:
    if not 0 <= index < len(items):
        return items
    return items[:index] + (item,) + items[index + 1:]


def _removed(items: tuple, index: int) -> tuple:
    if not 0 <= index < len(items):
        return items
    return items[:index] + items[index + 1:]


def query_reducer(state: Optional[QueryState], action: Any) -> QueryState:
    if state is None:
        state = QueryState()

    if isinstance(action, AddAggregation):
        return state.model_copy(update={"aggregations": state.aggregations + (action.aggregation,)})
    if isinstance(action, UpdateAggregation):
        return state.model_copy(
            update={"aggregations": _replaced(state.aggregations, action.index, action.aggregation)}
        )
    if isinstance(action, RemoveAggregation):
        return state.model_copy(update={"aggregations": _removed(state.aggregations, action.index)})

    if isinstance(action, AddGrouping):
        return state.model_copy(update={"groupings": state.groupings + (action.grouping,)})
    if isinstance(action, UpdateGrouping):
        return state.model_copy(
            update={"groupings": _replaced(state.groupings, action.index, action.grouping)}
        )
    if isinstance(action, RemoveGrouping):
        return state.model_copy(update={"groupings": _removed(state.groupings, action.index)})

    if isinstance(action, AddFilter):
        return state.model_copy(update={"filters": state.filters + (action.filter,)})
    if isinstance(action, UpdateFilter):
        return state.model_copy(
            update={"filters": _replaced(state.filters, action.index, action.filter)}
        )
    if isinstance(action, RemoveFilter):
        return state.model_copy(update={"filters": _removed(state.filters, action.index)})

    if isinstance(action, ClearQuery):
        return QueryState()
    if isinstance(action, LoadQuery):
        return action.query

    return state

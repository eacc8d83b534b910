"""
Query Result Actions

Fetching, receiving and cancelling aggregate query results.

fetch_query_result dispatches exactly one of RECEIVE_QUERY_RESULT or
CATCH_QUERY_ERROR per request, or nothing when the request is cancelled.
Submitting while a request is in flight cancels the earlier request first.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog

from pathling_connect.client.cancellation import CancelTokenSource
from pathling_connect.client.pathling import PathlingClient
from pathling_connect.errors import OperationOutcomeError, PathlingError, ValidationError
from pathling_connect.fhir.resources import Parameters
from pathling_connect.workbench.error import CatchError, ClearError
from pathling_connect.workbench.query import QueryState

logger = structlog.get_logger(__name__)


# =============================================================================
# State & Actions
# =============================================================================

@dataclass(frozen=True)
class ResultState:
    loading: bool = False
    result: Optional[Parameters] = None
    query: Optional[QueryState] = None
    cancel: Optional[CancelTokenSource] = None
    error_message: Optional[str] = None
    op_outcome: Optional[dict] = None


@dataclass(frozen=True)
class SendQueryRequest:
    cancel: CancelTokenSource


@dataclass(frozen=True)
class ReceiveQueryResult:
    result: Parameters
    query: QueryState


@dataclass(frozen=True)
class CatchQueryError:
    message: str
    op_outcome: Optional[dict] = None


@dataclass(frozen=True)
class ClearResult:
    pass


def result_reducer(state: Optional[ResultState], action: Any) -> ResultState:
    if state is None:
        state = ResultState()

    if isinstance(action, SendQueryRequest):
        return ResultState(
            loading=True,
            result=state.result,
            query=state.query,
            cancel=action.cancel,
        )
    if isinstance(action, ReceiveQueryResult):
        return ResultState(result=action.result, query=action.query)
    if isinstance(action, CatchQueryError):
        return ResultState(
            result=state.result,
            query=state.query,
            error_message=action.message,
            op_outcome=action.op_outcome,
        )
    if isinstance(action, ClearResult):
        return ResultState()
    return state


# =============================================================================
# Thunks
# =============================================================================

def fetch_query_result(client: PathlingClient):
    """
    Run the current query against the server and record the outcome.

    The returned thunk is a coroutine function; dispatching it returns a
    coroutine resolving to the result Parameters, or None.
    """

    async def thunk(dispatch, get_state) -> Optional[Parameters]:
        state = get_state()
        query: QueryState = state["query"]

        in_flight = state["result"].cancel
        if in_flight is not None:
            in_flight.cancel("Superseded by a new query")

        if not query.aggregations:
            error = ValidationError("Query must have at least one aggregation.")
            dispatch(CatchQueryError(message=error.message))
            return None

        if state["error"].message is not None:
            dispatch(ClearError())

        cancel = CancelTokenSource()
        dispatch(SendQueryRequest(cancel=cancel))

        try:
            result = await client.aggregate(query, cancel=cancel.token)
        except PathlingError as e:
            if cancel.cancelled:
                return None
            op_outcome = e.outcome if isinstance(e, OperationOutcomeError) else None
            logger.warning("Query failed", error=e.message, error_type=type(e).__name__)
            dispatch(CatchQueryError(message=e.message, op_outcome=op_outcome))
            dispatch(CatchError(message=e.message, op_outcome=op_outcome))
            return None
        except Exception as e:
            if cancel.cancelled:
                return None
            logger.exception("Unexpected error running query")
            message = str(e) or type(e).__name__
            dispatch(CatchQueryError(message=message))
            dispatch(CatchError(message=message))
            return None

        if result is None or cancel.cancelled:
            return None

        dispatch(ReceiveQueryResult(result=result, query=get_state()["query"]))
        return result

    return thunk


def cancel_and_clear_result():
    """Cancel any outstanding request and clear the result."""

    def thunk(dispatch, get_state) -> None:
        cancel = get_state()["result"].cancel
        if cancel is not None:
            cancel.cancel()
        dispatch(ClearResult())

    return thunk

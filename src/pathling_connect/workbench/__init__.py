"""
Query Workbench State

State and actions behind the aggregate query workbench. The UI renders from
store.get_state() and changes it only through store.dispatch().
"""

from pathling_connect.workbench.error import CatchError, ClearError, ErrorState, error_reducer
from pathling_connect.workbench.query import (
    AddAggregation,
    AddFilter,
    AddGrouping,
    ClearQuery,
    LoadQuery,
    QueryState,
    RemoveAggregation,
    RemoveFilter,
    RemoveGrouping,
    UpdateAggregation,
    UpdateFilter,
    UpdateGrouping,
    add_aggregation,
    add_filter,
    add_grouping,
    query_reducer,
)
from pathling_connect.workbench.result import (
    CatchQueryError,
    ClearResult,
    ReceiveQueryResult,
    ResultState,
    SendQueryRequest,
    cancel_and_clear_result,
    fetch_query_result,
    result_reducer,
)
from pathling_connect.workbench.saved import (
    ChangeSaveName,
    CloseSaveDialog,
    DeleteSavedQuery,
    OpenSaveDialog,
    SavedQuery,
    SaveQuery,
    load_saved_query,
    save_dialog_reducer,
    save_query,
    saved_queries_reducer,
)
from pathling_connect.workbench.store import Store, combine_reducers

root_reducer = combine_reducers(
    query=query_reducer,
    result=result_reducer,
    error=error_reducer,
    saved=saved_queries_reducer,
    save_dialog=save_dialog_reducer,
)


def create_store() -> Store:
    """Create a store holding the initial workbench state."""
    return Store(root_reducer)


__all__ = [
    "Store",
    "combine_reducers",
    "create_store",
    "root_reducer",
    "QueryState",
    "AddAggregation",
    "UpdateAggregation",
    "RemoveAggregation",
    "AddGrouping",
    "UpdateGrouping",
    "RemoveGrouping",
    "AddFilter",
    "UpdateFilter",
    "RemoveFilter",
    "ClearQuery",
    "LoadQuery",
    "add_aggregation",
    "add_grouping",
    "add_filter",
    "ResultState",
    "SendQueryRequest",
    "ReceiveQueryResult",
    "CatchQueryError",
    "ClearResult",
    "fetch_query_result",
    "cancel_and_clear_result",
    "ErrorState",
    "CatchError",
    "ClearError",
    "SavedQuery",
    "SaveQuery",
    "DeleteSavedQuery",
    "OpenSaveDialog",
    "CloseSaveDialog",
    "ChangeSaveName",
    "save_query",
    "load_saved_query",
]

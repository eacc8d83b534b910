"""
Saved Queries

Named snapshots of the query state, the save-query dialog that collects the
name, and the thunks that save and restore them.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from pathling_connect.errors import ValidationError
from pathling_connect.workbench.error import CatchError
from pathling_connect.workbench.query import LoadQuery, QueryState

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SavedQuery:
    id: str
    name: str
    query: QueryState


@dataclass(frozen=True)
class SavedQueriesState:
    queries: tuple[SavedQuery, ...] = ()

    def get(self, query_id: str) -> Optional[SavedQuery]:
        for saved in self.queries:
            if saved.id == query_id:
                return saved
        return None


@dataclass(frozen=True)
class SaveDialogState:
    is_open: bool = False
    name: str = ""


# =============================================================================
# Actions
# =============================================================================

@dataclass(frozen=True)
class SaveQuery:
    saved: SavedQuery


@dataclass(frozen=True)
class DeleteSavedQuery:
    id: str


@dataclass(frozen=True)
class OpenSaveDialog:
    pass


@dataclass(frozen=True)
class CloseSaveDialog:
    pass


@dataclass(frozen=True)
class ChangeSaveName:
    name: str


# =============================================================================
# Reducers
# =============================================================================

def saved_queries_reducer(state: Optional[SavedQueriesState], action: Any) -> SavedQueriesState:
    if state is None:
        state = SavedQueriesState()
    if isinstance(action, SaveQuery):
        return SavedQueriesState(queries=state.queries + (action.saved,))
    if isinstance(action, DeleteSavedQuery):
        remaining = tuple(q for q in state.queries if q.id != action.id)
        if len(remaining) == len(state.queries):
            return state
        return SavedQueriesState(queries=remaining)
    return state


def save_dialog_reducer(state: Optional[SaveDialogState], action: Any) -> SaveDialogState:
    if state is None:
        state = SaveDialogState()
    if isinstance(action, OpenSaveDialog):
        return SaveDialogState(is_open=True, name="")
    if isinstance(action, ChangeSaveName):
        return SaveDialogState(is_open=state.is_open, name=action.name)
    if isinstance(action, CloseSaveDialog):
        return SaveDialogState()
    return state


# =============================================================================
# Thunks
# =============================================================================

def save_query(name: Optional[str] = None):
    """
    Save the current query under a name.

    The name defaults to the one typed into the save dialog. A blank name is
    reported through the error state and nothing is saved.
    """

    def thunk(dispatch, get_state) -> Optional[SavedQuery]:
        state = get_state()
        query_name = (name if name is not None else state["save_dialog"].name).strip()
        if not query_name:
            error = ValidationError("Saved query must have a name.")
            dispatch(CatchError(message=error.message))
            return None

        saved = SavedQuery(id=uuid.uuid4().hex, name=query_name, query=state["query"])
        dispatch(SaveQuery(saved=saved))
        dispatch(CloseSaveDialog())
        logger.info("Query saved", query_id=saved.id, name=saved.name)
        return saved

    return thunk


def load_saved_query(query_id: str):
    """Replace the current query with a saved one."""

    def thunk(dispatch, get_state) -> Optional[QueryState]:
        saved = get_state()["saved"].get(query_id)
        if saved is None:
            dispatch(CatchError(message=f"No saved query with id {query_id}."))
            return None
        dispatch(LoadQuery(query=saved.query))
        return saved.query

    return thunk

"""Global error state shown by the workbench error display."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ErrorState:
    message: Optional[str] = None
    op_outcome: Optional[dict] = None


@dataclass(frozen=True)
class CatchError:
    message: str
    op_outcome: Optional[dict] = None


@dataclass(frozen=True)
class ClearError:
    pass


def error_reducer(state: Optional[ErrorState], action: Any) -> ErrorState:
    if state is None:
        state = ErrorState()
    if isinstance(action, CatchError):
        return ErrorState(message=action.message, op_outcome=action.op_outcome)
    if isinstance(action, ClearError):
        return ErrorState()
    return state

"""
Store

Redux-style state container for the query workbench:
- A single reducer (usually built with combine_reducers) owns all state
- dispatch() is the only way state changes
- Callables dispatched are thunks: they receive (dispatch, get_state) and
  may return a coroutine for the caller to await
- Subscribers are called with (action, state) after every plain action
"""

from typing import Any, Callable, Dict, List

import structlog

logger = structlog.get_logger(__name__)

Reducer = Callable[[Any, Any], Any]
Listener = Callable[[Any, Any], None]


class Store:
    """Single-writer state container."""

    def __init__(self, reducer: Reducer, initial_state: Any = None):
        self._reducer = reducer
        self._state = reducer(initial_state, None)
        self._listeners: List[Listener] = []

    def get_state(self) -> Any:
        return self._state

    def dispatch(self, action: Any) -> Any:
        """Apply an action, or run a thunk and return whatever it returns."""
        if callable(action):
            return action(self.dispatch, self.get_state)

        self._state = self._reducer(self._state, action)
        logger.debug("Action dispatched", action=type(action).__name__)
        for listener in list(self._listeners):
            listener(action, self._state)
        return action

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


def combine_reducers(**reducers: Reducer) -> Reducer:
    """
    Combine slice reducers into one reducer over a dict of slices.

    Each slice reducer receives None as its state on the first call and must
    return its initial state.
    """

    def combined(state: Dict[str, Any] | None, action: Any) -> Dict[str, Any]:
        state = state or {}
        next_state = {
            key: reducer(state.get(key), action)
            for key, reducer in reducers.items()
        }
        if all(next_state[key] is state.get(key) for key in reducers):
            return state
        return next_state

    return combined

"""
Client-Side Routing

Pages never navigate on their own; they push a path onto a Router.
The dashboard uses StreamlitRouter, tests use InMemoryRouter.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, MutableMapping, Optional


PATH_STATE_KEY = "path"


class Router(ABC):
    """Navigation capability handed to views."""

    @abstractmethod
    def push(self, path: str) -> None:
        """Navigate to path."""
        pass

    @property
    @abstractmethod
    def current_path(self) -> str:
        pass


class InMemoryRouter(Router):
    """Router that only records where it was sent."""

    def __init__(self, initial_path: str = "/"):
        self.history: list[str] = [initial_path]

    def push(self, path: str) -> None:
        self.history.append(path)

    @property
    def current_path(self) -> str:
        return self.history[-1]


class StreamlitRouter(Router):
    """
    Router backed by Streamlit session state.

    Args:
        state: Mapping holding the current path. Defaults to
            st.session_state.
        rerun: Called after every push so the new page renders
            (st.rerun in the app).
        initial_path: Path used before anything was pushed
    """

    def __init__(
        self,
        state: Optional[MutableMapping[str, Any]] = None,
        rerun: Optional[Callable[[], None]] = None,
        initial_path: str = "/dashboard",
    ):
        if state is None:
            import streamlit as st
            state = st.session_state
        self._state = state
        self._rerun = rerun
        self._state.setdefault(PATH_STATE_KEY, initial_path)

    def push(self, path: str) -> None:
        changed = self._state.get(PATH_STATE_KEY) != path
        self._state[PATH_STATE_KEY] = path
        if changed and self._rerun is not None:
            self._rerun()

    @property
    def current_path(self) -> str:
        return self._state[PATH_STATE_KEY]

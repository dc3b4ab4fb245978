"""
Current Session Capability

DESIGN DECISION: The dashboard never authenticates anyone itself.
Sign-in belongs to the identity provider; the dashboard only asks
"who is signed in?" through this interface. This allows us to:
1. Use the provider's session in production
2. Pin a user from the environment for local runs
3. Use a static session in tests
"""

from abc import ABC, abstractmethod
from typing import Any, MutableMapping, Optional

from fintio.config import SessionSettings, get_settings


USER_ID_STATE_KEY = "user_id"


class CurrentSession(ABC):
    """Answers who is signed in, if anyone."""

    @abstractmethod
    def user_id(self) -> Optional[str]:
        """
        Return the signed-in user's ID.

        Returns:
            The user ID, or None when nobody is signed in
        """
        pass


class StaticSession(CurrentSession):
    """Session with a fixed user. Pass None for a signed-out session."""

    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id

    def user_id(self) -> Optional[str]:
        return self._user_id


class EnvironmentSession(CurrentSession):
    """Session pinned by FINTIO_SESSION_USER_ID."""

    def __init__(self, settings: Optional[SessionSettings] = None):
        self._settings = settings or get_settings().session

    def user_id(self) -> Optional[str]:
        return self._settings.user_id or None


class StreamlitSession(CurrentSession):
    """
    Session stored in Streamlit's per-browser session state.

    The identity provider callback writes the user ID under
    USER_ID_STATE_KEY; signing out removes it.
    """

    def __init__(self, state: Optional[MutableMapping[str, Any]] = None):
        if state is None:
            import streamlit as st
            state = st.session_state
        self._state = state

    def user_id(self) -> Optional[str]:
        return self._state.get(USER_ID_STATE_KEY) or None

    def sign_in(self, user_id: str) -> None:
        self._state[USER_ID_STATE_KEY] = user_id

    def sign_out(self) -> None:
        self._state.pop(USER_ID_STATE_KEY, None)

"""Session package."""

from fintio.auth.session import (
    USER_ID_STATE_KEY,
    CurrentSession,
    EnvironmentSession,
    StaticSession,
    StreamlitSession,
)

__all__ = [
    "USER_ID_STATE_KEY",
    "CurrentSession",
    "EnvironmentSession",
    "StaticSession",
    "StreamlitSession",
]

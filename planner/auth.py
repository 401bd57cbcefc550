"""
Caller sessions and tool visibility for the Project Planner.

The OAuth handler hands over the identity claims of a signed-in user; each
registration becomes a session keyed by the user's access token. The set of
tools a session may see is fixed when the session is registered.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterable, Optional, Union


@dataclass(frozen=True)
class Identity:
    login: str
    name: str
    email: str
    access_token: str


@dataclass(frozen=True)
class Session:
    identity: Identity
    tools: frozenset[str]


class AuthorizationGate:
    """Static allow-list check for privileged tools."""

    def __init__(self, allowed_logins: Iterable[str] = ()):
        self.allowed_logins = frozenset(allowed_logins)

    def is_privileged(self, login: str) -> bool:
        return login in self.allowed_logins

    def visible_tools(self, login: str, operations: dict[str, dict]) -> frozenset[str]:
        privileged = self.is_privileged(login)
        return frozenset(
            name for name, op in operations.items() if privileged or not op.get("privileged")
        )


class SessionStore:
    # access token -> session
    def __init__(self, gate: AuthorizationGate, operations: dict[str, dict]):
        self.gate = gate
        self.operations = operations
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def register(self, identity: Identity) -> Session:
        session = Session(
            identity=identity,
            tools=self.gate.visible_tools(identity.login, self.operations),
        )
        with self._lock:
            self._sessions[identity.access_token] = session
        return session

    def get(self, access_token: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(access_token)

    def revoke(self, access_token: str) -> bool:
        with self._lock:
            return self._sessions.pop(access_token, None) is not None

    def reset(self) -> None:
        with self._lock:
            self._sessions.clear()


def validate_auth(
    auth_header: str | None,
    sessions: SessionStore,
) -> Union[
    dict,  # {"valid": True, "session": Session} or {"valid": False, "status": int, "code": str, "message": str}
]:
    if not auth_header or not auth_header.startswith("Bearer "):
        return {
            "valid": False,
            "status": 401,
            "code": "AUTH_REQUIRED",
            "message": "Authorization header with Bearer token is required",
        }

    token = auth_header[7:]
    session = sessions.get(token)

    if session is None:
        return {
            "valid": False,
            "status": 401,
            "code": "AUTH_REQUIRED",
            "message": "Invalid or expired token",
        }

    return {"valid": True, "session": session}


def check_visible(session: Session, op: str) -> dict:
    if op not in session.tools:
        return {
            "valid": False,
            "status": 403,
            "code": "FORBIDDEN",
            "message": f"Operation {op} is not available to {session.identity.login}",
        }
    return {"valid": True}

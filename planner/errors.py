"""
Fault types raised by the persistence layer and the tool handlers.
"""

from __future__ import annotations


class ValidationError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ServerError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(message)


class NotFoundError(ServerError):
    """A project or todo does not exist for the calling owner.

    Reported as a domain error (HTTP 200, state "error") rather than a
    transport failure.
    """

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(
            200,
            f"{kind.upper()}_NOT_FOUND",
            f"{kind.capitalize()} with id '{entity_id}' not found",
        )


class StoreError(ServerError):
    def __init__(self, message: str):
        super().__init__(500, "STORE_ERROR", message)


class UpstreamError(ServerError):
    def __init__(self, message: str):
        super().__init__(502, "UPSTREAM_ERROR", message)

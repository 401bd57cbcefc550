"""
FastAPI application for the Project Planner.
"""

from __future__ import annotations

import hashlib
import json
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from .auth import Identity, validate_auth
from .config import PlannerConfig
from .kv import KVStore
from .registry import build_registry
from .router import handle_call
from .runtime import Runtime, build_runtime
from .upstream import UpstreamClient


def _reject_constant(name: str) -> None:
    raise ValueError(f"Non-finite number {name} is not allowed")


def _parse_body(raw: bytes) -> object:
    # JSONDecodeError, UnicodeDecodeError and UnicodeEncodeError are all ValueError
    body = json.loads(raw, parse_constant=_reject_constant)
    # Overflowing literals such as 1e400 decode to inf; \u escapes can decode to
    # lone surrogates. Neither can be echoed back in a response.
    json.dumps(body, ensure_ascii=False, allow_nan=False).encode("utf-8")
    return body


def _error_response(status: int, code: str, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={
            "requestId": str(uuid.uuid4()),
            "state": "error",
            "error": {"code": code, "message": message},
        },
        headers=headers,
    )


def create_app(
    config: Optional[PlannerConfig] = None,
    store: Optional[KVStore] = None,
    upstream: Optional[UpstreamClient] = None,
) -> FastAPI:
    runtime: Runtime = build_runtime(config, store, upstream)
    app = FastAPI(title="Project Planner")
    app.state.runtime = runtime

    # -----------------------------------------------------------------------
    # Discovery
    # -----------------------------------------------------------------------

    @app.get("/.well-known/ops")
    async def well_known_ops(request: Request) -> Response:
        auth_result = validate_auth(request.headers.get("authorization"), runtime.sessions)
        if not auth_result["valid"]:
            return _error_response(auth_result["status"], auth_result["code"], auth_result["message"])

        registry_json = json.dumps(build_registry(auth_result["session"].tools), separators=(",", ":"))
        etag = f'"{hashlib.sha256(registry_json.encode()).hexdigest()}"'
        if request.headers.get("if-none-match") == etag:
            return Response(status_code=304)
        return Response(
            content=registry_json,
            status_code=200,
            media_type="application/json",
            headers={"Cache-Control": "private, max-age=3600", "ETag": etag},
        )

    # -----------------------------------------------------------------------
    # Calls
    # -----------------------------------------------------------------------

    @app.get("/call")
    async def get_call_not_allowed() -> JSONResponse:
        return _error_response(
            405,
            "METHOD_NOT_ALLOWED",
            "Use POST /call to invoke operations. Discover available operations at GET /.well-known/ops",
            headers={"Allow": "POST"},
        )

    @app.post("/call")
    async def call_endpoint(request: Request) -> JSONResponse:
        try:
            envelope = _parse_body(await request.body())
        except ValueError:
            return _error_response(400, "INVALID_REQUEST", "Invalid JSON in request body")

        auth_header = request.headers.get("authorization")
        result = await run_in_threadpool(handle_call, envelope, auth_header, runtime)
        return JSONResponse(status_code=result["status"], content=result["body"])

    # -----------------------------------------------------------------------
    # Session registration (called by the OAuth handler)
    # -----------------------------------------------------------------------

    def _internal_allowed(request: Request) -> bool:
        expected = runtime.config.access.internal_token
        return not expected or request.headers.get("x-internal-token") == expected

    @app.post("/_internal/sessions")
    async def register_session(request: Request) -> JSONResponse:
        if not _internal_allowed(request):
            return _error_response(403, "FORBIDDEN", "Invalid internal token")
        try:
            body = _parse_body(await request.body())
        except ValueError:
            return _error_response(400, "INVALID_REQUEST", "Invalid JSON in request body")

        fields = ("login", "name", "email", "accessToken")
        if not isinstance(body, dict) or not all(isinstance(body.get(f), str) for f in fields):
            return _error_response(
                400, "VALIDATION_ERROR", f"Identity requires string fields: {', '.join(fields)}"
            )
        if not body["login"] or not body["accessToken"]:
            return _error_response(400, "VALIDATION_ERROR", "login and accessToken must not be empty")

        session = runtime.sessions.register(
            Identity(
                login=body["login"],
                name=body["name"],
                email=body["email"],
                access_token=body["accessToken"],
            )
        )
        return JSONResponse(
            status_code=200,
            content={"ok": True, "login": session.identity.login, "tools": sorted(session.tools)},
        )

    @app.delete("/_internal/sessions")
    async def revoke_session(request: Request) -> JSONResponse:
        if not _internal_allowed(request):
            return _error_response(403, "FORBIDDEN", "Invalid internal token")
        auth_header = request.headers.get("authorization") or ""
        if not auth_header.startswith("Bearer "):
            return _error_response(401, "AUTH_REQUIRED", "Authorization header with Bearer token is required")
        return JSONResponse(status_code=200, content={"ok": runtime.sessions.revoke(auth_header[7:])})

    return app

"""
Envelope dispatch for the Project Planner.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional

from .auth import check_visible, validate_auth
from .errors import ServerError, ValidationError
from .operations import OPERATIONS, CallContext, ImageContent
from .runtime import Runtime

logger = logging.getLogger(__name__)


def _render(result: Any) -> tuple[Any, list[dict]]:
    """Return the structured result and its text-bearing content items."""
    if isinstance(result, ImageContent):
        item = {"type": "image", "data": result.data, "mimeType": result.mime_type}
        return item, [item]
    if isinstance(result, (dict, list)):
        text = json.dumps(result, indent=2)
    else:
        text = str(result)
    return result, [{"type": "text", "text": text}]


def _error(base: dict, status: int, code: str, message: str) -> dict:
    return {
        "status": status,
        "body": {
            **base,
            "state": "error",
            "error": {"code": code, "message": message},
        },
    }


def handle_call(
    envelope: Any,
    auth_header: Optional[str],
    runtime: Runtime,
) -> dict:
    """
    Process a /call request envelope and return {"status": int, "body": dict}.
    """
    if not isinstance(envelope, dict):
        return _error({"requestId": str(uuid.uuid4())}, 400, "INVALID_REQUEST",
                      "Request body must be a JSON object")

    ctx = envelope.get("ctx") or {}
    if not isinstance(ctx, dict):
        ctx = {}
    request_id = ctx.get("requestId") or str(uuid.uuid4())
    session_id = ctx.get("sessionId")

    base: dict[str, Any] = {"requestId": request_id}
    if session_id:
        base["sessionId"] = session_id

    # Validate op is present and a string
    op = envelope.get("op")
    if not op or not isinstance(op, str):
        return _error(base, 400, "INVALID_REQUEST", "Missing or invalid 'op' field")

    # Look up operation
    operation = OPERATIONS.get(op)
    if operation is None:
        return _error(base, 400, "UNKNOWN_OP", f"Unknown operation: {op}")

    # Identify the caller
    auth_result = validate_auth(auth_header, runtime.sessions)
    if not auth_result["valid"]:
        return _error(base, auth_result["status"], auth_result["code"], auth_result["message"])
    session = auth_result["session"]

    args = envelope.get("args")
    if args is None:
        args = {}

    try:
        if not isinstance(args, dict):
            raise ValidationError(f"args: Expected object, received {type(args).__name__}")
        parsed = operation["parse"](args)

        # Visibility check, after validation and before any store access
        visible = check_visible(session, op)
        if not visible["valid"]:
            return _error(base, visible["status"], visible["code"], visible["message"])

        call_ctx = CallContext(
            session=session,
            projects=runtime.projects,
            todos=runtime.todos,
            upstream=runtime.upstream,
        )
        result, content = _render(operation["handler"](call_ctx, parsed))
        return {
            "status": 200,
            "body": {**base, "state": "complete", "result": result, "content": content},
        }

    except ValidationError as err:
        return _error(base, 400, "VALIDATION_ERROR", err.message)

    except ServerError as err:
        # Domain errors (not found, out of range) carry status 200
        return _error(base, err.status_code, err.code, err.message)

    except Exception as err:
        logger.exception("Operation %s failed", op)
        return _error(base, 500, "INTERNAL_ERROR", str(err) if str(err) else "Unknown error")

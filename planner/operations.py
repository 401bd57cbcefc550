"""
All tool handlers for the Project Planner.

Each operation has an argument parser, which raises ValidationError before
anything touches the store, and a handler that receives the parsed
arguments together with the caller's context.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

from .auth import Session
from .errors import ServerError, ValidationError
from .projects import ProjectRepository
from .schemas import TODO_PRIORITIES, TODO_STATUSES, ProjectWithTodosDict
from .todos import TodoRepository
from .upstream import UpstreamClient


@dataclass
class CallContext:
    session: Session
    projects: ProjectRepository
    todos: TodoRepository
    upstream: UpstreamClient

    @property
    def owner(self) -> str:
        return self.session.identity.login


@dataclass
class ImageContent:
    data: str
    mime_type: str = "image/jpeg"


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _reject_unknown(args: dict, allowed: list[str]) -> None:
    extra = sorted(k for k in args if k not in allowed)
    if extra:
        raise ValidationError(f"Unrecognized key(s) in object: {', '.join(repr(k) for k in extra)}")


def _validate_string(args: dict, field: str, required: bool = False,
                     min_length: Optional[int] = None) -> Optional[str]:
    val = args.get(field)
    if val is None:
        if required:
            raise ValidationError(f"{field}: Required")
        return None
    if not isinstance(val, str):
        raise ValidationError(f"{field}: Expected string, received {type(val).__name__}")
    try:
        val.encode("utf-8")
    except UnicodeEncodeError:
        raise ValidationError(f"{field}: Invalid unicode string")
    if min_length is not None and len(val) < min_length:
        raise ValidationError(f"{field}: String must contain at least {min_length} character(s)")
    return val


def _validate_number(args: dict, field: str, required: bool = False) -> Optional[float]:
    val = args.get(field)
    if val is None:
        if required:
            raise ValidationError(f"{field}: Required")
        return None
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ValidationError(f"{field}: Expected number, received {type(val).__name__}")
    if isinstance(val, float) and not math.isfinite(val):
        raise ValidationError(f"{field}: Number must be finite")
    return val


def _validate_int(args: dict, field: str, required: bool = False,
                  minimum: Optional[int] = None, maximum: Optional[int] = None,
                  default: Optional[int] = None) -> Optional[int]:
    val = args.get(field)
    if val is None:
        if required:
            raise ValidationError(f"{field}: Required")
        return default
    if isinstance(val, bool):
        raise ValidationError(f"{field}: Expected number, received boolean")
    if not isinstance(val, (int, float)):
        raise ValidationError(f"{field}: Expected number, received {type(val).__name__}")
    if isinstance(val, float) and not math.isfinite(val):
        raise ValidationError(f"{field}: Number must be finite")
    if isinstance(val, float) and not val.is_integer():
        raise ValidationError(f"{field}: Expected integer, received float")
    val = int(val)
    if minimum is not None and val < minimum:
        raise ValidationError(f"{field}: Number must be greater than or equal to {minimum}")
    if maximum is not None and val > maximum:
        raise ValidationError(f"{field}: Number must be less than or equal to {maximum}")
    return val


def _validate_enum(args: dict, field: str, options: list[str],
                   required: bool = False, default: Optional[str] = None) -> Optional[str]:
    val = args.get(field)
    if val is None:
        if required:
            raise ValidationError(f"{field}: Required")
        return default
    if not isinstance(val, str):
        raise ValidationError(f"{field}: Expected string, received {type(val).__name__}")
    if val not in options:
        raise ValidationError(
            f"{field}: Invalid enum value. Expected {' | '.join(repr(o) for o in options)}, received {val!r}"
        )
    return val


# ---------------------------------------------------------------------------
# Argument parsers
# ---------------------------------------------------------------------------

def parse_no_args(args: dict) -> dict:
    _reject_unknown(args, [])
    return {}


def parse_add(args: dict) -> dict:
    _reject_unknown(args, ["a", "b"])
    return {
        "a": _validate_number(args, "a", required=True),
        "b": _validate_number(args, "b", required=True),
    }


def parse_generate_image(args: dict) -> dict:
    _reject_unknown(args, ["prompt", "steps"])
    return {
        "prompt": _validate_string(args, "prompt", required=True),
        "steps": _validate_int(args, "steps", minimum=4, maximum=8, default=4),
    }


def parse_create_project(args: dict) -> dict:
    _reject_unknown(args, ["name", "description"])
    return {
        "name": _validate_string(args, "name", required=True),
        "description": _validate_string(args, "description"),
    }


def parse_project_id(args: dict) -> dict:
    _reject_unknown(args, ["projectId"])
    return {"projectId": _validate_string(args, "projectId", required=True)}


def parse_todo_id(args: dict) -> dict:
    _reject_unknown(args, ["todoId"])
    return {"todoId": _validate_string(args, "todoId", required=True)}


def parse_create_todo(args: dict) -> dict:
    _reject_unknown(args, ["projectId", "title", "description", "priority"])
    return {
        "projectId": _validate_string(args, "projectId", required=True),
        "title": _validate_string(args, "title", required=True, min_length=1),
        "description": _validate_string(args, "description"),
        "priority": _validate_enum(args, "priority", TODO_PRIORITIES),
    }


def parse_update_todo(args: dict) -> dict:
    _reject_unknown(args, ["todoId", "title", "description", "status", "priority"])
    return {
        "todoId": _validate_string(args, "todoId", required=True),
        "title": _validate_string(args, "title", required=True, min_length=1),
        "description": _validate_string(args, "description"),
        "status": _validate_enum(args, "status", TODO_STATUSES),
        "priority": _validate_enum(args, "priority", TODO_PRIORITIES),
    }


def parse_list_todos(args: dict) -> dict:
    _reject_unknown(args, ["projectId", "status"])
    return {
        "projectId": _validate_string(args, "projectId", required=True),
        "status": _validate_enum(args, "status", TODO_STATUSES + ["all"]),
    }


# ---------------------------------------------------------------------------
# Operation handlers
# ---------------------------------------------------------------------------

def add(ctx: CallContext, args: dict) -> Any:
    try:
        total = args["a"] + args["b"]
    except OverflowError:
        total = math.inf
    if isinstance(total, float) and not math.isfinite(total):
        raise ServerError(200, "OUT_OF_RANGE", "Sum is too large to represent")
    return total


def user_info(ctx: CallContext, args: dict) -> dict:
    return ctx.upstream.github_user(ctx.session.identity.access_token)


def generate_image(ctx: CallContext, args: dict) -> ImageContent:
    return ImageContent(data=ctx.upstream.generate_image(args["prompt"], args["steps"]))


def create_project(ctx: CallContext, args: dict) -> dict:
    return ctx.projects.create(ctx.owner, args["name"], args["description"] or "")


def get_project_list(ctx: CallContext, args: dict) -> list:
    return ctx.projects.list(ctx.owner)


def get_project(ctx: CallContext, args: dict) -> ProjectWithTodosDict:
    project = ctx.projects.get(ctx.owner, args["projectId"])
    todos = ctx.todos.list_by_project(ctx.owner, project["id"])
    return {"project": project, "todos": todos}


def delete_project(ctx: CallContext, args: dict) -> dict:
    project_id = args["projectId"]
    removed = ctx.projects.delete(ctx.owner, project_id)
    return {
        "deleted": True,
        "projectId": project_id,
        "deletedTodos": removed,
        "message": f"Project {project_id} and its {removed} todo(s) have been deleted",
    }


def create_todo(ctx: CallContext, args: dict) -> dict:
    return ctx.todos.create(
        ctx.owner,
        args["projectId"],
        args["title"],
        description=args["description"] or "",
        priority=args["priority"],
    )


def update_todo(ctx: CallContext, args: dict) -> dict:
    return ctx.todos.update(
        ctx.owner,
        args["todoId"],
        args["title"],
        description=args["description"],
        status=args["status"],
        priority=args["priority"],
    )


def delete_todo(ctx: CallContext, args: dict) -> dict:
    todo_id = args["todoId"]
    ctx.todos.delete(ctx.owner, todo_id)
    return {
        "deleted": True,
        "todoId": todo_id,
        "message": f"Todo {todo_id} has been deleted",
    }


def get_todo(ctx: CallContext, args: dict) -> dict:
    return ctx.todos.get(ctx.owner, args["todoId"])


def list_todos(ctx: CallContext, args: dict) -> list:
    return ctx.todos.list_by_project(ctx.owner, args["projectId"], args["status"])


# ---------------------------------------------------------------------------
# Operations table (handler dispatch)
# ---------------------------------------------------------------------------

OPERATIONS: dict[str, dict[str, Any]] = {
    "add": {
        "parse": parse_add,
        "handler": add,
        "side_effecting": False,
        "privileged": False,
    },
    "userInfoOctokit": {
        "parse": parse_no_args,
        "handler": user_info,
        "side_effecting": False,
        "privileged": False,
    },
    "generateImage": {
        "parse": parse_generate_image,
        "handler": generate_image,
        "side_effecting": False,
        "privileged": True,
    },
    "createProject": {
        "parse": parse_create_project,
        "handler": create_project,
        "side_effecting": True,
        "privileged": True,
    },
    "get_project_list": {
        "parse": parse_no_args,
        "handler": get_project_list,
        "side_effecting": False,
        "privileged": True,
    },
    "get_project": {
        "parse": parse_project_id,
        "handler": get_project,
        "side_effecting": False,
        "privileged": True,
    },
    "delete_project": {
        "parse": parse_project_id,
        "handler": delete_project,
        "side_effecting": True,
        "privileged": True,
    },
    "create_todo": {
        "parse": parse_create_todo,
        "handler": create_todo,
        "side_effecting": True,
        "privileged": True,
    },
    "update_todo": {
        "parse": parse_update_todo,
        "handler": update_todo,
        "side_effecting": True,
        "privileged": True,
    },
    "delete_todo": {
        "parse": parse_todo_id,
        "handler": delete_todo,
        "side_effecting": True,
        "privileged": True,
    },
    "get_todo": {
        "parse": parse_todo_id,
        "handler": get_todo,
        "side_effecting": False,
        "privileged": True,
    },
    "list_todos": {
        "parse": parse_list_todos,
        "handler": list_todos,
        "side_effecting": False,
        "privileged": True,
    },
}

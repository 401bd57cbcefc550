"""
Operation registry builder for the Project Planner.
JSON Schema definitions for tool discovery, filtered to what a session can see.
"""

from __future__ import annotations

from typing import Iterable

from .operations import OPERATIONS
from .schemas import TODO_PRIORITIES, TODO_STATUSES

# ---------------------------------------------------------------------------
# Shared sub-schemas
# ---------------------------------------------------------------------------

_PROJECT_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string"},
        "description": {"type": "string"},
        "createdAt": {"type": "string"},
        "updatedAt": {"type": "string"},
    },
    "required": ["id", "name", "description", "createdAt", "updatedAt"],
    "additionalProperties": False,
}

_TODO_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "projectId": {"type": "string"},
        "title": {"type": "string"},
        "description": {"type": "string"},
        "status": {"type": "string", "enum": TODO_STATUSES},
        "priority": {"type": "string", "enum": TODO_PRIORITIES},
        "createdAt": {"type": "string"},
        "updatedAt": {"type": "string"},
    },
    "required": [
        "id", "projectId", "title", "description", "status", "priority", "createdAt", "updatedAt",
    ],
    "additionalProperties": False,
}

_EMPTY_ARGS = {"type": "object", "properties": {}, "additionalProperties": False}


def _id_args(field: str) -> dict:
    return {
        "type": "object",
        "properties": {field: {"type": "string"}},
        "required": [field],
        "additionalProperties": False,
    }


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

_DESCRIPTORS: dict[str, dict] = {
    "add": {
        "description": "Add two numbers the way only MCP can",
        "argsSchema": {
            "type": "object",
            "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
            "required": ["a", "b"],
            "additionalProperties": False,
        },
        "resultSchema": {"type": "number"},
    },
    "userInfoOctokit": {
        "description": "Get user info from GitHub, via Octokit",
        "argsSchema": _EMPTY_ARGS,
        "resultSchema": {"type": "object"},
    },
    "generateImage": {
        "description": "Generate an image using the `flux-1-schnell` model. Works best with 8 steps.",
        "argsSchema": {
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "A text description of the image you want to generate.",
                },
                "steps": {
                    "type": "integer",
                    "minimum": 4,
                    "maximum": 8,
                    "default": 4,
                    "description": (
                        "The number of diffusion steps; higher values can improve quality but "
                        "take longer. Must be between 4 and 8, inclusive."
                    ),
                },
            },
            "required": ["prompt"],
            "additionalProperties": False,
        },
        "resultSchema": {
            "type": "object",
            "properties": {
                "type": {"type": "string", "enum": ["image"]},
                "data": {"type": "string", "contentEncoding": "base64"},
                "mimeType": {"type": "string"},
            },
            "required": ["type", "data", "mimeType"],
        },
    },
    "createProject": {
        "description": "Create a new project",
        "argsSchema": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "description": {"type": "string"},
            },
            "required": ["name"],
            "additionalProperties": False,
        },
        "resultSchema": _PROJECT_SCHEMA,
    },
    "get_project_list": {
        "description": "List all of your projects",
        "argsSchema": _EMPTY_ARGS,
        "resultSchema": {"type": "array", "items": _PROJECT_SCHEMA},
    },
    "get_project": {
        "description": "Get a project together with its todos",
        "argsSchema": _id_args("projectId"),
        "resultSchema": {
            "type": "object",
            "properties": {
                "project": _PROJECT_SCHEMA,
                "todos": {"type": "array", "items": _TODO_SCHEMA},
            },
            "required": ["project", "todos"],
            "additionalProperties": False,
        },
    },
    "delete_project": {
        "description": "Delete a project and all of its todos",
        "argsSchema": _id_args("projectId"),
        "resultSchema": {
            "type": "object",
            "properties": {
                "deleted": {"type": "boolean"},
                "projectId": {"type": "string"},
                "deletedTodos": {"type": "integer"},
                "message": {"type": "string"},
            },
            "required": ["deleted", "projectId", "deletedTodos", "message"],
            "additionalProperties": False,
        },
    },
    "create_todo": {
        "description": "Create a todo in a project",
        "argsSchema": {
            "type": "object",
            "properties": {
                "projectId": {"type": "string"},
                "title": {"type": "string", "minLength": 1},
                "description": {"type": "string"},
                "priority": {"type": "string", "enum": TODO_PRIORITIES},
            },
            "required": ["projectId", "title"],
            "additionalProperties": False,
        },
        "resultSchema": _TODO_SCHEMA,
    },
    "update_todo": {
        "description": "Update a todo; fields left out keep their current value",
        "argsSchema": {
            "type": "object",
            "properties": {
                "todoId": {"type": "string"},
                "title": {"type": "string", "minLength": 1},
                "description": {"type": "string"},
                "status": {"type": "string", "enum": TODO_STATUSES},
                "priority": {"type": "string", "enum": TODO_PRIORITIES},
            },
            "required": ["todoId", "title"],
            "additionalProperties": False,
        },
        "resultSchema": _TODO_SCHEMA,
    },
    "delete_todo": {
        "description": "Delete a todo",
        "argsSchema": _id_args("todoId"),
        "resultSchema": {
            "type": "object",
            "properties": {
                "deleted": {"type": "boolean"},
                "todoId": {"type": "string"},
                "message": {"type": "string"},
            },
            "required": ["deleted", "todoId", "message"],
            "additionalProperties": False,
        },
    },
    "get_todo": {
        "description": "Get a todo by ID",
        "argsSchema": _id_args("todoId"),
        "resultSchema": _TODO_SCHEMA,
    },
    "list_todos": {
        "description": "List the todos of a project, optionally filtered by status",
        "argsSchema": {
            "type": "object",
            "properties": {
                "projectId": {"type": "string"},
                "status": {"type": "string", "enum": TODO_STATUSES + ["all"]},
            },
            "required": ["projectId"],
            "additionalProperties": False,
        },
        "resultSchema": {"type": "array", "items": _TODO_SCHEMA},
    },
}


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def build_registry(visible: Iterable[str]) -> dict:
    visible = set(visible)
    operations = []
    for name, op in OPERATIONS.items():
        if name not in visible:
            continue
        operations.append({
            "op": name,
            **_DESCRIPTORS[name],
            "sideEffecting": op["side_effecting"],
            "privileged": op["privileged"],
        })
    return {"callVersion": "2026-02-10", "operations": operations}

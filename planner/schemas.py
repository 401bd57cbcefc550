"""
Data models for the Project Planner.
Records are plain dicts; these TypedDicts document their stored shape.
"""

from __future__ import annotations

from typing import Literal, TypedDict

TodoStatus = Literal["pending", "in_progress", "completed"]
TodoPriority = Literal["low", "medium", "high"]

TODO_STATUSES = ["pending", "in_progress", "completed"]
TODO_PRIORITIES = ["low", "medium", "high"]


class ProjectDict(TypedDict):
    id: str
    name: str
    description: str
    createdAt: str
    updatedAt: str


class TodoDict(TypedDict):
    id: str
    projectId: str
    title: str
    description: str
    status: TodoStatus
    priority: TodoPriority
    createdAt: str
    updatedAt: str


class ProjectWithTodosDict(TypedDict):
    project: ProjectDict
    todos: list[TodoDict]

"""
Storage key layout. Every key is scoped by the owner's login.

    project:user-{owner}:list          project index
    project:{id}:user-{owner}          project record
    project:{id}:user-{owner}:todos    todo index of one project
    todo:user-{owner}:{id}             todo record
"""

from __future__ import annotations

from urllib.parse import quote


def _segment(value: str) -> str:
    # ':' is the separator; escaping it keeps caller-supplied ids inside their own segment
    return quote(value, safe="")


def project_list_key(owner: str) -> str:
    return f"project:user-{_segment(owner)}:list"


def project_key(owner: str, project_id: str) -> str:
    return f"project:{_segment(project_id)}:user-{_segment(owner)}"


def project_todos_key(owner: str, project_id: str) -> str:
    return f"{project_key(owner, project_id)}:todos"


def todo_key(owner: str, todo_id: str) -> str:
    return f"todo:user-{_segment(owner)}:{_segment(todo_id)}"

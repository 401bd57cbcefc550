"""
Todo repository. Todos hang off a project through the project's todo index.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from . import keys
from .errors import NotFoundError
from .index import IndexList
from .kv import KVStore
from .records import RecordStore, now_iso
from .schemas import TodoDict

logger = logging.getLogger(__name__)


class TodoRepository:
    def __init__(self, store: KVStore, index: Optional[IndexList] = None):
        self.store = store
        self.index = index or IndexList(store)
        self.records = RecordStore(store, "todo")
        self.projects = RecordStore(store, "project")

    def project_exists(self, owner: str, project_id: str) -> bool:
        return self.projects.get(keys.project_key(owner, project_id)) is not None

    def _require_project(self, owner: str, project_id: str) -> None:
        if not self.project_exists(owner, project_id):
            raise NotFoundError("project", project_id)

    def create(
        self,
        owner: str,
        project_id: str,
        title: str,
        description: str = "",
        priority: Optional[str] = None,
    ) -> TodoDict:
        self._require_project(owner, project_id)

        now = now_iso()
        todo: TodoDict = {
            "id": str(uuid.uuid4()),
            "projectId": project_id,
            "title": title,
            "description": description or "",
            "status": "pending",
            "priority": priority or "medium",
            "createdAt": now,
            "updatedAt": now,
        }
        # Record first: a crash before the append leaves an orphan, never a dangling id
        self.records.put(keys.todo_key(owner, todo["id"]), todo)
        self.index.append(keys.project_todos_key(owner, project_id), todo["id"])
        logger.info("Created todo %s in project %s for %s", todo["id"], project_id, owner)
        return todo

    def get(self, owner: str, todo_id: str) -> TodoDict:
        todo = self.records.get(keys.todo_key(owner, todo_id))
        if todo is None:
            raise NotFoundError("todo", todo_id)
        return todo  # type: ignore[return-value]

    def update(
        self,
        owner: str,
        todo_id: str,
        title: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> TodoDict:
        todo = self.get(owner, todo_id)

        updates: dict = {"title": title}
        if description is not None:
            updates["description"] = description
        if status is not None:
            updates["status"] = status
        if priority is not None:
            updates["priority"] = priority

        updated: TodoDict = {**todo, **updates, "updatedAt": now_iso()}  # type: ignore[typeddict-item]
        self.records.put(keys.todo_key(owner, todo_id), updated)
        return updated

    def delete(self, owner: str, todo_id: str) -> TodoDict:
        todo = self.get(owner, todo_id)
        # Not atomic: a failure between the two steps leaves an unreachable record
        self.index.remove_first(keys.project_todos_key(owner, todo["projectId"]), todo_id)
        self.records.delete(keys.todo_key(owner, todo_id))
        logger.info("Deleted todo %s from project %s for %s", todo_id, todo["projectId"], owner)
        return todo

    def _resolve(self, owner: str, project_id: str) -> list[TodoDict]:
        index_key = keys.project_todos_key(owner, project_id)
        todos: list[TodoDict] = []
        for todo_id in self.index.read(index_key):
            todo = self.records.get(keys.todo_key(owner, todo_id))
            if todo is None:
                logger.warning("Skipping dangling todo id %s in %s", todo_id, index_key)
                continue
            todos.append(todo)  # type: ignore[arg-type]
        return todos

    def list_by_project(
        self,
        owner: str,
        project_id: str,
        status: Optional[str] = None,
    ) -> list[TodoDict]:
        self._require_project(owner, project_id)
        todos = self._resolve(owner, project_id)
        if status and status != "all":
            todos = [t for t in todos if t.get("status") == status]
        return todos

    def delete_for_project(self, owner: str, project_id: str) -> int:
        """Delete every todo referenced by a project's index, then the index itself.

        Returns the number of todo records that actually existed; dangling ids
        are dropped with the index but not counted.
        """
        index_key = keys.project_todos_key(owner, project_id)
        todo_ids = self.index.read(index_key)
        removed = 0
        for todo_id in todo_ids:
            key = keys.todo_key(owner, todo_id)
            if self.store.get(key) is not None:
                removed += 1
            self.records.delete(key)
        self.index.drop(index_key)
        return removed

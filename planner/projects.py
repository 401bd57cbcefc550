"""
Project repository: project records plus each owner's project index.
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
from .schemas import ProjectDict
from .todos import TodoRepository

logger = logging.getLogger(__name__)


class ProjectRepository:
    def __init__(
        self,
        store: KVStore,
        todos: Optional[TodoRepository] = None,
        index: Optional[IndexList] = None,
    ):
        self.store = store
        self.index = index or IndexList(store)
        self.todos = todos or TodoRepository(store, self.index)
        self.records = RecordStore(store, "project")

    def create(self, owner: str, name: str, description: str = "") -> ProjectDict:
        now = now_iso()
        project: ProjectDict = {
            "id": str(uuid.uuid4()),
            "name": name,
            "description": description or "",
            "createdAt": now,
            "updatedAt": now,
        }
        self.records.put(keys.project_key(owner, project["id"]), project)
        self.index.append(keys.project_list_key(owner), project["id"])
        logger.info("Created project %s for %s", project["id"], owner)
        return project

    def list(self, owner: str) -> list[ProjectDict]:
        index_key = keys.project_list_key(owner)
        projects: list[ProjectDict] = []
        for project_id in self.index.read(index_key):
            project = self.records.get(keys.project_key(owner, project_id))
            if project is None:
                logger.warning("Skipping dangling project id %s in %s", project_id, index_key)
                continue
            projects.append(project)  # type: ignore[arg-type]
        return projects

    def get(self, owner: str, project_id: str) -> ProjectDict:
        project = self.records.get(keys.project_key(owner, project_id))
        if project is None:
            raise NotFoundError("project", project_id)
        return project  # type: ignore[return-value]

    def delete(self, owner: str, project_id: str) -> int:
        """Delete a project and everything under it. Returns the number of todos removed.

        Children go first: an interrupted delete leaves orphaned todos under a
        live project, never todos whose project is gone.
        """
        self.get(owner, project_id)
        removed = self.todos.delete_for_project(owner, project_id)
        self.records.delete(keys.project_key(owner, project_id))
        self.index.remove_first(keys.project_list_key(owner), project_id)
        logger.info("Deleted project %s (%d todos) for %s", project_id, removed, owner)
        return removed

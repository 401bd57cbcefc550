"""
Wiring of store, repositories, sessions and upstream clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .auth import AuthorizationGate, SessionStore
from .config import PlannerConfig
from .index import IndexList
from .kv import KVStore, open_store
from .operations import OPERATIONS
from .projects import ProjectRepository
from .todos import TodoRepository
from .upstream import UpstreamClient


@dataclass
class Runtime:
    config: PlannerConfig
    store: KVStore
    projects: ProjectRepository
    todos: TodoRepository
    sessions: SessionStore
    upstream: UpstreamClient


def build_runtime(
    config: Optional[PlannerConfig] = None,
    store: Optional[KVStore] = None,
    upstream: Optional[UpstreamClient] = None,
) -> Runtime:
    config = config or PlannerConfig()
    if store is None:
        store = open_store(config.store.backend, config.store.path)

    index = IndexList(store, cas_retries=config.store.cas_retries)
    todos = TodoRepository(store, index)
    projects = ProjectRepository(store, todos, index)
    gate = AuthorizationGate(config.access.allowed_logins)

    return Runtime(
        config=config,
        store=store,
        projects=projects,
        todos=todos,
        sessions=SessionStore(gate, OPERATIONS),
        upstream=upstream or UpstreamClient(config.upstream),
    )

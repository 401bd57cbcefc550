"""Shared fixtures."""

from __future__ import annotations

import itertools

import pytest
from fastapi.testclient import TestClient

from planner.config import AccessConfig, PlannerConfig
from planner.kv import MemoryKVStore
from planner.main import create_app
from planner.projects import ProjectRepository
from planner.todos import TodoRepository


class FakeUpstream:
    """Stands in for UpstreamClient; records calls instead of going to the network."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def github_user(self, access_token: str) -> dict:
        self.calls.append(("github_user", access_token))
        return {"login": "octocat", "id": 1}

    def generate_image(self, prompt: str, steps: int) -> str:
        self.calls.append(("generate_image", prompt, steps))
        return "aW1hZ2U="


@pytest.fixture
def clock(monkeypatch):
    """Deterministic, strictly increasing timestamps for records."""
    counter = itertools.count()

    def fake_now() -> str:
        return f"2026-01-01T00:00:{next(counter):02d}.000000Z"

    monkeypatch.setattr("planner.projects.now_iso", fake_now)
    monkeypatch.setattr("planner.todos.now_iso", fake_now)
    return fake_now


@pytest.fixture
def store() -> MemoryKVStore:
    return MemoryKVStore()


@pytest.fixture
def todos(store: MemoryKVStore) -> TodoRepository:
    return TodoRepository(store)


@pytest.fixture
def projects(store: MemoryKVStore, todos: TodoRepository) -> ProjectRepository:
    return ProjectRepository(store, todos)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def app(store: MemoryKVStore, upstream: FakeUpstream):
    config = PlannerConfig(access=AccessConfig(allowed_logins=frozenset({"alice", "bob"})))
    return create_app(config, store=store, upstream=upstream)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def register(client: TestClient):
    """Register a session for a login and return its auth headers."""

    def _register(login: str, token: str | None = None) -> dict:
        token = token or f"token-{login}"
        resp = client.post(
            "/_internal/sessions",
            json={"login": login, "name": login.title(), "email": f"{login}@example.com", "accessToken": token},
        )
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {token}"}

    return _register

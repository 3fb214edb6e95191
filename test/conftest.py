import json
import tempfile
from pathlib import Path

import httpx
import pytest

LEANNE = {
    "id": 1,
    "name": "Leanne Graham",
    "username": "Bret",
    "email": "Sincere@april.biz",
    "company": {"name": "Romaguera-Crona", "catchPhrase": "Multi-layered client-server neural-net"},
}

ERVIN = {
    "id": 2,
    "name": "Ervin Howell",
    "email": "Shanna@melissa.tv",
    "company": {"name": "Deckow-Crist"},
}


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def isolated_config(temp_dir, monkeypatch):
    cache_dir = temp_dir / "cache"
    config_dir = temp_dir / "config"
    cache_dir.mkdir()
    config_dir.mkdir()

    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.delenv("USERDESK_REQUEST_TIMEOUT", raising=False)

    return {"cache": cache_dir, "config": config_dir}


class FakeUsersAPI:
    """A /users endpoint that answers like jsonplaceholder: writes are echoed, never stored."""

    def __init__(self, users: list[dict]):
        self.users = users
        self.requests: list[httpx.Request] = []
        self.fail: set[str] = set()
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.method

        if method in self.fail:
            return httpx.Response(500, json={"error": "boom"})

        if method == "GET":
            return httpx.Response(200, json=self.users)
        if method == "POST":
            body = json.loads(request.content)
            return httpx.Response(201, json={**body, "id": 11})
        if method == "PUT":
            body = json.loads(request.content)
            user_id = int(request.url.path.rsplit("/", 1)[-1])
            return httpx.Response(200, json={**body, "id": user_id})
        if method == "DELETE":
            return httpx.Response(200, json={})
        return httpx.Response(405)

    def bodies(self, method: str) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.method == method]


@pytest.fixture
def fake_api():
    return FakeUsersAPI([dict(LEANNE)])


@pytest.fixture
def two_user_api():
    return FakeUsersAPI([dict(LEANNE), dict(ERVIN)])

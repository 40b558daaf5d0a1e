"""Shared fixtures."""

import json
import threading
from unittest.mock import MagicMock

import httpx
import pytest

from sparkskool.config import clear_config_cache
from sparkskool.services.cache import UpstashCache
from sparkskool.storage.local_store import LocalStore


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Default config, data under tmp_path, no credentials from the host."""
    monkeypatch.setenv("SPARKSKOOL_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("SPARKSKOOL_DATA_DIR", str(tmp_path / "data"))
    for name in (
        "GROQ_API_KEY",
        "OPENAI_API_KEY",
        "UPSTASH_REDIS_REST_URL",
        "UPSTASH_REDIS_REST_TOKEN",
        "QUIZ_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def store(tmp_path):
    return LocalStore(tmp_path / "data")


@pytest.fixture
def mock_llm():
    """LLM client double with credentials."""
    client = MagicMock()
    client.has_api_key = True
    return client


class FakeUpstash:
    """In-memory Upstash REST endpoint behind an httpx.MockTransport."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.commands: list[list[str]] = []
        self.headers: list[httpx.Headers] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        command = json.loads(request.content)
        self.commands.append(command)
        self.headers.append(request.headers)

        name = command[0].upper()
        if name == "GET":
            return httpx.Response(200, json={"result": self.data.get(command[1])})
        if name == "SET":
            self.data[command[1]] = command[2]
            return httpx.Response(200, json={"result": "OK"})
        return httpx.Response(400, json={"error": f"ERR unknown command '{name}'"})

    def cache(self) -> UpstashCache:
        return UpstashCache(
            url="https://fake.upstash.io",
            token="secret",
            http_client=httpx.Client(transport=httpx.MockTransport(self.handler)),
        )


@pytest.fixture
def fake_upstash():
    return FakeUpstash()


@pytest.fixture
def run_concurrently():
    """Run fn(i) for i in range(threads), all released together by a barrier."""

    def run(fn, threads=16):
        barrier = threading.Barrier(threads)
        results = [None] * threads

        def worker(i):
            barrier.wait()
            results[i] = fn(i)

        pool = [threading.Thread(target=worker, args=(i,)) for i in range(threads)]
        for t in pool:
            t.start()
        for t in pool:
            t.join()
        return results

    return run


@pytest.fixture
def recorded_http_clients(monkeypatch):
    """Make every new httpx.Client answer 503 and keep a list of them."""
    real_client = httpx.Client
    created: list[httpx.Client] = []

    def factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(lambda request: httpx.Response(503))
        client = real_client(*args, **kwargs)
        created.append(client)
        return client

    monkeypatch.setattr(httpx, "Client", factory)
    return created

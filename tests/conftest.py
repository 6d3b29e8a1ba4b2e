"""Shared fixtures: a scripted fake of the GameTorch HTTP API."""

import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from gametorch.config import AppConfig
from gametorch.utils.api_client import AnimationsClient


BASE_URL = "https://gametorch.test"
API_KEY = "test-key"


class FakeGameTorchAPI:
    """Answers requests from per-route queues of scripted responses.

    Each queued item is either an ``httpx.Response`` or an exception to raise.
    The last item of a queue is repeated once the queue runs dry.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any):
        self.routes.setdefault((method, path), []).extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"detail": "not found"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        # Fresh copy so a repeated item is never handed out twice
        return httpx.Response(item.status_code, headers=item.headers, content=item.content)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def json_body(self, request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture
def fake_api() -> FakeGameTorchAPI:
    return FakeGameTorchAPI()


@pytest.fixture
def make_client(fake_api) -> Callable[..., AnimationsClient]:
    def factory(api_key: str = API_KEY, base_url: str = BASE_URL) -> AnimationsClient:
        return AnimationsClient(
            api_key=api_key,
            base_url=base_url,
            transport=httpx.MockTransport(fake_api.handler)
        )
    return factory


@pytest.fixture
def app_config(monkeypatch) -> AppConfig:
    monkeypatch.setenv("GAMETORCH_API_KEY", API_KEY)
    monkeypatch.setenv("GAMETORCH_BASE_URL", BASE_URL)
    return AppConfig()

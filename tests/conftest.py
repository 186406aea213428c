import base64
import json

import httpx
import pytest

from mptrack.config import load_settings


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch):
    for name in ("TOKEN", "API_KEY", "API_HOST", "TIMEOUT", "DEBUG", "TEST"):
        monkeypatch.delenv(f"MPTRACK_{name}", raising=False)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


class FakeMixpanel:
    def __init__(self, body: str = "1") -> None:
        self.body = body
        self.requests = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, text=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def payload(self, request=None):
        request = request or self.last
        return json.loads(base64.b64decode(request.url.params["data"]))


@pytest.fixture
def server():
    return FakeMixpanel()

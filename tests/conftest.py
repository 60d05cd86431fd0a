import json
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from meta_adlib.api import ApiContext  # noqa: E402
from meta_adlib.config import Settings  # noqa: E402

ENV_VARS = [
    "META_TOKEN",
    "META_APP_ID",
    "META_APP_SECRET",
    "META_API_BASE_URL",
    "META_API_VERSION",
    "META_REQUEST_TIMEOUT",
    "META_ADLIB_CONFIG_PATH",
    "META_AUTH_CONFIG_PATH",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the real environment and credential files.

    Clears every variable the client reads, points both credential stores
    at a temporary directory and runs from there so no ``.env`` is picked up.
    Logging setup is marked as done so that ``main()`` leaves pytest's log
    capture handlers in place.
    """
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("META_ADLIB_CONFIG_PATH", str(tmp_path / "adlib" / "config.json"))
    monkeypatch.setenv("META_AUTH_CONFIG_PATH", str(tmp_path / "meta-auth" / "config.json"))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("meta_adlib.utils.security._LOGGING_CONFIGURED", True)
    yield


@pytest.fixture
def local_config_path(tmp_path) -> Path:
    return tmp_path / "adlib" / "config.json"


@pytest.fixture
def shared_config_path(tmp_path) -> Path:
    return tmp_path / "meta-auth" / "config.json"


@pytest.fixture
def write_config():
    """Write a credential file, creating parent directories."""

    def _write(path: Path, data: Dict) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


class RecordingTransport(httpx.MockTransport):
    """Mock transport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def recording_transport():
    """Build a :class:`RecordingTransport` from a handler function."""
    return RecordingTransport


@pytest.fixture
def make_context(settings):
    """Build an ApiContext around a mock transport."""

    def _make(transport: httpx.MockTransport, token: str = "test-token",
              context_settings: Optional[Settings] = None) -> ApiContext:
        return ApiContext.create(context_settings or settings, token, transport=transport)

    return _make


def _ads_page(start: int, count: int, next_url: Optional[str] = None) -> Dict:
    body: Dict = {
        "data": [
            {"id": str(i), "page_name": f"Page {i}"} for i in range(start, start + count)
        ]
    }
    if next_url:
        body["paging"] = {"cursors": {"after": f"c{start + count}"}, "next": next_url}
    return body


@pytest.fixture
def ads_page():
    """Build a page body of ``count`` fake ads numbered from ``start``."""
    return _ads_page

"""Test fixtures for reqtools unit tests."""

from dataclasses import dataclass, field

import pytest

from reqtools.core.toolkit import RequestToolkit
from reqtools.models.core import ToolkitConfig

BOUNDARY = "----reqtools-boundary"


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request. Keys are case-insensitive."""

    _data: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._data = {k.lower(): v for k, v in self._data.items()}

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key.lower(), default)

    def set(self, key: str, value: str) -> None:
        self._data[key.lower()] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key.lower()] = value


@dataclass
class MockRequest:
    """Mock Request object for Robyn."""

    body: str | bytes = b""
    headers: MockHeaders = field(default_factory=MockHeaders)
    files: dict[str, bytes] = field(default_factory=dict)
    path_params: dict[str, str] = field(default_factory=dict)
    method: str = "GET"
    path: str = "/"


# -----------------------------------------------------------------------------
# Toolkit fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def config() -> ToolkitConfig:
    return ToolkitConfig(
        max_upload_bytes=1024 * 1024,
        allowed_content_types=frozenset(),
        max_json_bytes=1024,
        allow_unknown_json_fields=False,
    )


@pytest.fixture
def toolkit(config: ToolkitConfig) -> RequestToolkit:
    return RequestToolkit(config)


@pytest.fixture
def make_json_request():
    """Factory fixture to create JSON requests."""

    def _make(body: str | bytes, content_type: str | None = "application/json") -> MockRequest:
        headers = MockHeaders({"content-type": content_type} if content_type else {})
        return MockRequest(body=body, headers=headers, method="POST")

    return _make


@pytest.fixture
def make_upload_request():
    """Factory fixture to create multipart requests carrying ``files``."""

    def _make(files: dict[str, bytes], content_type: str | None = None) -> MockRequest:
        size = sum(len(data) for data in files.values())
        headers = MockHeaders(
            {
                "content-type": content_type or f"multipart/form-data; boundary={BOUNDARY}",
                "content-length": str(size),
            }
        )
        return MockRequest(headers=headers, files=dict(files), method="POST")

    return _make


@pytest.fixture
def make_get_request():
    """Factory fixture for plain GET requests with optional headers."""

    def _make(headers: dict[str, str] | None = None) -> MockRequest:
        return MockRequest(headers=MockHeaders(dict(headers or {})))

    return _make

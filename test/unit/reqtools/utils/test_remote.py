"""Tests for remote JSON push."""

from unittest.mock import patch

import httpx
import orjson
import pytest

from reqtools.core.exceptions import JSONEncodingError, RemoteRequestError
from reqtools.utils.remote import push_json_to_remote


def _recording_client(captured: list[httpx.Request], status: int = 202) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(status, json={"ok": True})

    return httpx.Client(transport=httpx.MockTransport(handler))


def test_posts_json_with_content_type() -> None:
    captured: list[httpx.Request] = []
    with _recording_client(captured) as client:
        response, status = push_json_to_remote("http://remote.test/hook", {"foo": "bar"}, client=client)
        response.close()

    assert status == 202
    assert response.status_code == 202
    assert len(captured) == 1
    sent = captured[0]
    assert sent.method == "POST"
    assert str(sent.url) == "http://remote.test/hook"
    assert sent.headers["content-type"] == "application/json"
    assert orjson.loads(sent.content) == {"foo": "bar"}


def test_returns_error_statuses_untouched() -> None:
    captured: list[httpx.Request] = []
    with _recording_client(captured, status=500) as client:
        response, status = push_json_to_remote("http://remote.test/hook", [1, 2], client=client)

    assert status == 500
    assert response.json() == {"ok": True}


def test_transport_error_is_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(RemoteRequestError, match="connection refused") as exc_info:
            push_json_to_remote("http://remote.test/hook", {}, client=client)

    assert exc_info.value.url == "http://remote.test/hook"
    assert exc_info.value.status_code == 502


def test_unserializable_payload_is_not_sent() -> None:
    captured: list[httpx.Request] = []
    with _recording_client(captured) as client:
        with pytest.raises(JSONEncodingError):
            push_json_to_remote("http://remote.test/hook", {"bad": object()}, client=client)

    assert captured == []


def test_default_client_is_used_when_none_given() -> None:
    """Verify a per-call httpx.Client is opened and closed without an injected client."""
    captured: list[httpx.Request] = []
    mock_client = _recording_client(captured)

    with patch("reqtools.utils.remote.httpx.Client", return_value=mock_client):
        _, status = push_json_to_remote("http://remote.test/hook", {"a": 1})

    assert status == 202
    assert len(captured) == 1
    assert mock_client.is_closed

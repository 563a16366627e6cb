"""Tests for core models."""

import pytest
from pydantic import ValidationError

from reqtools.models.core import JSONResponse, RejectionPolicy, ToolkitConfig, UploadedFile


class TestJSONResponse:
    """Tests for the JSON envelope."""

    def test_data_omitted_when_none(self) -> None:
        envelope = JSONResponse(error=True, message="boom")
        assert envelope.to_wire() == {"error": True, "message": "boom"}

    def test_data_included_when_set(self) -> None:
        envelope = JSONResponse(message="ok", data={"id": 1})
        assert envelope.to_wire() == {"error": False, "message": "ok", "data": {"id": 1}}

    def test_falsy_data_is_kept(self) -> None:
        assert JSONResponse(data=[]).to_wire()["data"] == []

    def test_nested_models_are_dumped(self) -> None:
        record = UploadedFile(new_file_name="x.png", original_file_name="a.png", file_size=3)
        wire = JSONResponse(data=[record]).to_wire()
        assert wire["data"] == [{"new_file_name": "x.png", "original_file_name": "a.png", "file_size": 3}]


def test_uploaded_file_is_frozen() -> None:
    record = UploadedFile(new_file_name="x", original_file_name="y", file_size=1)
    with pytest.raises(ValidationError):
        record.file_size = 2  # type: ignore[misc]


def test_toolkit_config_defaults() -> None:
    config = ToolkitConfig()
    assert config.rejection_policy is RejectionPolicy.ABORT
    assert config.max_upload_bytes > config.max_json_bytes

"""Core models for request/response handling."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from reqtools.core.settings import settings as st


class RejectionPolicy(StrEnum):
    """What an upload does when one of its files has a disallowed type."""

    ABORT = "abort"
    SKIP = "skip"


@dataclass
class ToolkitConfig:
    """Limits and switches shared by the helpers. Mutate only before use.

    ``allowed_content_types`` entries match sniffed types case-insensitively and
    may be wildcards: ``*`` or ``*/*`` allow everything, ``image/*`` any image.
    An empty set allows every type.
    """

    max_upload_bytes: int = field(default_factory=lambda: st.MAX_UPLOAD_BYTES)
    allowed_content_types: frozenset[str] = field(default_factory=lambda: st.ALLOWED_CONTENT_TYPES)
    max_json_bytes: int = field(default_factory=lambda: st.MAX_JSON_BYTES)
    allow_unknown_json_fields: bool = field(default_factory=lambda: st.ALLOW_UNKNOWN_JSON_FIELDS)
    rejection_policy: RejectionPolicy = RejectionPolicy.ABORT


class UploadedFile(BaseModel):
    """A file accepted by an upload call."""

    model_config = ConfigDict(frozen=True)

    new_file_name: str
    original_file_name: str
    file_size: int


class JSONResponse(BaseModel):
    """Envelope used for every JSON response the helpers produce."""

    error: bool = False
    message: str = ""
    data: Any | None = None

    def to_wire(self) -> dict[str, Any]:
        """Dump for serialization, omitting ``data`` when unset."""
        return self.model_dump(mode="json", exclude={"data"} if self.data is None else None)

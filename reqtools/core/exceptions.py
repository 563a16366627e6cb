"""Error taxonomy for the request helpers.

Every helper raises a ``ToolkitError`` subclass. ``ClientInputError`` marks
failures attributable to the incoming request; everything else is an
environment or programming failure the server owns.
"""

from robyn import status_codes


class ToolkitError(Exception):
    """Base exception for all helper failures."""

    status_code: int = status_codes.HTTP_500_INTERNAL_SERVER_ERROR


class ClientInputError(ToolkitError):
    """The request itself is invalid."""

    status_code = status_codes.HTTP_400_BAD_REQUEST


# -----------------------------------------------------------------------------
# JSON decoding
# -----------------------------------------------------------------------------


class ContentTypeError(ClientInputError):
    status_code = status_codes.HTTP_415_UNSUPPORTED_MEDIA_TYPE

    def __init__(self, content_type: str | None) -> None:
        self.content_type = content_type
        super().__init__(f'unexpected content type of "{content_type or ""}"')


class BodyTooLargeError(ClientInputError):
    status_code = status_codes.HTTP_413_REQUEST_ENTITY_TOO_LARGE

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"body must not be larger than {limit} bytes")


class EmptyBodyError(ClientInputError):
    def __init__(self) -> None:
        super().__init__("body must not be empty")


class JSONDecodeError(ClientInputError):
    """Decoding failed for a reason with no more specific class."""


class MalformedJSONError(JSONDecodeError):
    def __init__(self, offset: int) -> None:
        self.offset = offset
        super().__init__(f"body contains badly formed JSON (at character {offset})")


class TruncatedJSONError(JSONDecodeError):
    def __init__(self) -> None:
        super().__init__("body contains badly formed JSON")


class JSONTypeError(JSONDecodeError):
    def __init__(self, field: str | None = None, offset: int | None = None) -> None:
        self.field = field
        self.offset = offset
        if field:
            super().__init__(f'body contains incorrect JSON type for field "{field}"')
        else:
            super().__init__(f"body contains incorrect JSON type (at character {offset})")


class UnknownFieldError(JSONDecodeError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f'body contains unknown field "{field}"')


class MissingFieldError(JSONDecodeError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f'body is missing required field "{field}"')


class MultipleJSONValuesError(JSONDecodeError):
    def __init__(self) -> None:
        super().__init__("body must contain only one JSON value")


class InvalidTargetError(ToolkitError):
    """The decode target cannot hold JSON data. A server-side programming error."""

    def __init__(self, target: object, reason: str) -> None:
        self.target = target
        super().__init__(f"error unmarshalling JSON into {target!r}: {reason}")


class JSONEncodingError(ToolkitError):
    """A payload could not be serialized to JSON."""


# -----------------------------------------------------------------------------
# Uploads & files
# -----------------------------------------------------------------------------


class MalformedMultipartError(ClientInputError):
    """The request is not a usable multipart/form-data body."""


class UploadTooLargeError(ClientInputError):
    status_code = status_codes.HTTP_413_REQUEST_ENTITY_TOO_LARGE

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"upload of {size} bytes exceeds the limit of {limit} bytes")


class NoFilesError(ClientInputError):
    def __init__(self) -> None:
        super().__init__("no files were uploaded")


class DisallowedFileTypeError(ClientInputError):
    status_code = status_codes.HTTP_415_UNSUPPORTED_MEDIA_TYPE

    def __init__(self, filename: str, content_type: str) -> None:
        self.filename = filename
        self.content_type = content_type
        super().__init__("the uploaded file type is not permitted")


class InvalidPathError(ClientInputError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__("invalid path")


class FileStorageError(ToolkitError):
    """Filesystem failure while creating directories or writing files."""


# -----------------------------------------------------------------------------
# Misc
# -----------------------------------------------------------------------------


class InvalidSlugError(ClientInputError):
    """Input cannot produce a non-empty slug."""


class RandomSourceError(ToolkitError):
    """The OS cryptographic random source is unavailable."""


class RemoteRequestError(ToolkitError):
    status_code = status_codes.HTTP_502_BAD_GATEWAY

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"request to {url} failed: {reason}")

"""Strict JSON request decoding and JSON response encoding."""

import re
from collections.abc import Mapping
from copy import copy
from functools import lru_cache
from types import UnionType
from typing import Annotated, Any, TypeVar, Union, get_args, get_origin

import orjson
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError, PydanticUserError
from pydantic.fields import FieldInfo
from robyn import Request, Response, status_codes

from reqtools.core.exceptions import (
    BodyTooLargeError,
    ContentTypeError,
    EmptyBodyError,
    InvalidTargetError,
    JSONDecodeError,
    JSONEncodingError,
    JSONTypeError,
    MalformedJSONError,
    MissingFieldError,
    MultipleJSONValuesError,
    TruncatedJSONError,
    UnknownFieldError,
)
from reqtools.core.logger import LogIcon, logger
from reqtools.models.core import JSONResponse, ToolkitConfig

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"

_POSITION = re.compile(r"line (\d+) column (\d+)")

# pydantic error types, besides the "*_type" family, raised for a value of the wrong JSON type
_TYPE_ERRORS = frozenset(
    {
        "int_parsing",
        "int_from_float",
        "float_parsing",
        "bool_parsing",
        "none_required",
        "literal_error",
        "enum",
        "is_instance_of",
    }
)


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------


def _byte_offset(body: bytes, message: str) -> int:
    """Translate a parser ``line X column Y`` position into an approximate byte offset."""
    match = _POSITION.search(message)
    if not match:
        return 0
    line, column = int(match.group(1)), int(match.group(2))
    lines = body.split(b"\n")
    return sum(len(chunk) + 1 for chunk in lines[: line - 1]) + column


def _field_name(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc)


def _is_model(target: Any) -> bool:
    return isinstance(target, type) and issubclass(target, BaseModel)


def _forbid_unknown(target: Any, seen: dict[Any, Any]) -> Any:
    """Rebuild ``target`` so every model reachable through it forbids extra keys.

    Returns ``target`` itself when nothing needs to change. A model that refers
    back to itself keeps its own ``extra`` setting below the first level.
    """
    if _is_model(target):
        if target in seen:
            return seen[target]
        seen[target] = target
        overrides: dict[str, tuple[Any, FieldInfo]] = {}
        for name, info in target.model_fields.items():
            annotation = _forbid_unknown(info.annotation, seen)
            if annotation is not info.annotation:
                overrides[name] = (annotation, copy(info))
        if not overrides and target.model_config.get("extra") == "forbid":
            return target

        namespace = {
            "__module__": target.__module__,
            "__annotations__": {name: annotation for name, (annotation, _) in overrides.items()},
            "model_config": ConfigDict(extra="forbid"),
            **{name: info for name, (_, info) in overrides.items()},
        }
        seen[target] = type(target.__name__, (target,), namespace)
        return seen[target]

    origin = get_origin(target)
    if origin is None:
        return target
    args = get_args(target)
    rebuilt = tuple(_forbid_unknown(arg, seen) for arg in args)
    if all(new is old for new, old in zip(rebuilt, args, strict=True)):
        return target
    if origin is Annotated:
        return Annotated[rebuilt]
    if origin in (Union, UnionType):
        return Union[rebuilt]
    return origin[rebuilt]


@lru_cache(maxsize=128)
def strict_target(target: type[T], allow_unknown_fields: bool) -> type[T]:
    """Return a variant of ``target`` whose models reject undeclared keys at every depth."""
    if allow_unknown_fields:
        return target
    return _forbid_unknown(target, {})


@lru_cache(maxsize=128)
def _adapter(target: Any) -> TypeAdapter:
    try:
        return TypeAdapter(target)
    except (PydanticSchemaGenerationError, PydanticUserError) as ex:
        raise InvalidTargetError(target, str(ex)) from ex


def classify_validation_error(body: bytes, error: ValidationError) -> JSONDecodeError:
    """Map the first pydantic error to the decode error taxonomy."""
    first = error.errors(include_url=False)[0]
    kind = first["type"]
    loc = tuple(first.get("loc", ()))

    if kind == "json_invalid":
        message = str(first.get("ctx", {}).get("error", first["msg"]))
        if "trailing characters" in message:
            return MultipleJSONValuesError()
        if "EOF while parsing" in message:
            return TruncatedJSONError()
        return MalformedJSONError(_byte_offset(body, message))
    if kind == "extra_forbidden":
        return UnknownFieldError(_field_name(loc))
    if kind == "missing":
        return MissingFieldError(_field_name(loc))
    if kind in _TYPE_ERRORS or kind.endswith("_type"):
        if loc:
            return JSONTypeError(field=_field_name(loc))
        # the whole value is wrong: point at where it starts
        return JSONTypeError(offset=len(body) - len(body.lstrip()))
    return JSONDecodeError(first["msg"])


def read_body(request: Request, max_bytes: int) -> bytes:
    body = request.body
    if body is None:
        return b""
    data = body.encode() if isinstance(body, str) else bytes(body)
    if len(data) > max_bytes:
        raise BodyTooLargeError(max_bytes)
    return data


def read_json(request: Request, target: type[T], config: ToolkitConfig) -> T:
    """Decode exactly one JSON value from ``request`` into ``target``.

    The content type must be exactly ``application/json``. Types are checked
    strictly, and unless ``config.allow_unknown_json_fields`` is set any key a
    model does not declare is rejected, at any nesting depth. Trailing data after
    the first value fails the whole decode and is reported ahead of type or field
    errors in that first value, since the body is parsed in full before validation.
    """
    content_type = request.headers.get("content-type")
    if content_type != JSON_CONTENT_TYPE:
        raise ContentTypeError(content_type)

    body = read_body(request, config.max_json_bytes)
    if not body.strip():
        raise EmptyBodyError()

    try:
        validating = strict_target(target, config.allow_unknown_json_fields)
        adapter = _adapter(validating)
    except TypeError as ex:
        # unhashable targets cannot be cached
        raise InvalidTargetError(target, str(ex)) from ex

    try:
        value = adapter.validate_json(body, strict=True)
    except (PydanticSchemaGenerationError, PydanticUserError) as ex:
        raise InvalidTargetError(target, str(ex)) from ex
    except ValidationError as ex:
        error = classify_validation_error(body, ex)
        logger.info("JSON body rejected", icon=LogIcon.VALIDATION, reason=str(error))
        raise error from ex

    if validating is not target:
        # rebuild with the caller's own classes, nested ones included
        return _adapter(target).validate_json(body, strict=True)
    return value


# -----------------------------------------------------------------------------
# Encoding
# -----------------------------------------------------------------------------


def _default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def encode_json(data: Any) -> bytes:
    """Serialize ``data`` in full, raising JSONEncodingError for unsupported values."""
    try:
        return orjson.dumps(data, default=_default)
    except orjson.JSONEncodeError as ex:
        raise JSONEncodingError(str(ex)) from ex


def write_json(status: int, data: Any, headers: Mapping[str, str] | None = None) -> Response:
    """Build a JSON response. ``content-type: application/json`` always overrides caller headers."""
    body = encode_json(data)

    merged = {k: v for k, v in (headers or {}).items() if k.lower() != "content-type"}
    merged["content-type"] = JSON_CONTENT_TYPE
    return Response(status_code=status, headers=merged, description=body)


def error_json(err: BaseException, status: int | None = None) -> Response:
    """Render ``err`` as an error envelope, as a bad request unless ``status`` is given.

    Pass ``err.status_code`` to use a ToolkitError's own code.
    """
    if status is None:
        status = status_codes.HTTP_400_BAD_REQUEST

    envelope = JSONResponse(error=True, message=str(err))
    logger.info("Error response", icon=LogIcon.ERROR, status=status, message=envelope.message)
    return write_json(status, envelope.to_wire())

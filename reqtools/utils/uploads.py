"""Multipart file uploads to a local directory."""

import io
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from robyn import Request

from reqtools.core.exceptions import (
    DisallowedFileTypeError,
    FileStorageError,
    MalformedMultipartError,
    NoFilesError,
    UploadTooLargeError,
)
from reqtools.core.logger import LogIcon, logger
from reqtools.models.core import RejectionPolicy, ToolkitConfig, UploadedFile
from reqtools.utils.filesystem import create_dir_if_not_exists
from reqtools.utils.sniffing import SNIFF_LEN, detect_content_type, mime_matches
from reqtools.utils.tokens import random_string

RANDOM_NAME_LENGTH = 25
COPY_CHUNK_SIZE = 64 * 1024


def _as_bytes(body: str | bytes | None) -> bytes:
    if body is None:
        return b""
    return body.encode() if isinstance(body, str) else bytes(body)


def _declared_length(request: Request) -> int:
    try:
        return int(request.headers.get("content-length") or 0)
    except ValueError:
        raise MalformedMultipartError("invalid content-length header") from None


def validate_multipart(request: Request, max_bytes: int) -> dict[str, bytes]:
    """Check the request is a bounded multipart/form-data body and return its files."""
    content_type = request.headers.get("content-type") or ""
    media_type, _, params = content_type.partition(";")
    if media_type.strip().lower() != "multipart/form-data":
        raise MalformedMultipartError(f'request content type "{content_type}" is not multipart/form-data')
    if "boundary=" not in params.lower():
        raise MalformedMultipartError("multipart request has no boundary")

    files = dict(getattr(request, "files", None) or {})
    size = max(
        _declared_length(request),
        len(_as_bytes(getattr(request, "body", None))),
        sum(len(data) for data in files.values()),
    )
    if size > max_bytes:
        raise UploadTooLargeError(size, max_bytes)
    return files


def sniff_stream(stream: BinaryIO) -> str:
    """Sniff the content type of ``stream`` and rewind it to the start."""
    head = stream.read(SNIFF_LEN)
    stream.seek(0)
    return detect_content_type(head)


def is_allowed(content_type: str, allowed_types: frozenset[str] | set[str]) -> bool:
    """An empty allow-list permits every type."""
    return not allowed_types or any(mime_matches(allowed, content_type) for allowed in allowed_types)


def extension(name: str) -> str:
    """Everything from the last dot of the final path element, dot included.

    Dotfiles keep their whole name (".bashrc") and a trailing dot is kept as ".".
    """
    base = name.rpartition("/")[2]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def stored_name(original_name: str, rename: bool) -> str:
    """Random name keeping the original extension, or the client name verbatim.

    A verbatim name is trusted as-is; collisions and path traversal are the caller's concern.
    """
    if not rename:
        return original_name
    return f"{random_string(RANDOM_NAME_LENGTH)}{extension(original_name)}"


def copy_stream(source: BinaryIO, destination: BinaryIO) -> int:
    """Copy ``source`` into ``destination`` in chunks and return the bytes written."""
    written = 0
    while chunk := source.read(COPY_CHUNK_SIZE):
        written += destination.write(chunk)
    return written


def _select_files(files: dict[str, bytes], config: ToolkitConfig) -> Iterator[tuple[str, BinaryIO]]:
    """Yield accepted ``(name, stream)`` pairs after checking every file's sniffed type.

    All files are checked before the first one is yielded, so an ABORT never
    leaves files behind.
    """
    accepted: list[tuple[str, BinaryIO]] = []
    for name, data in files.items():
        stream = io.BytesIO(data)
        content_type = sniff_stream(stream)
        if is_allowed(content_type, config.allowed_content_types):
            accepted.append((name, stream))
            continue

        stream.close()
        logger.warning("File type rejected", icon=LogIcon.FORBIDDEN, file=name, content_type=content_type)
        if config.rejection_policy is RejectionPolicy.ABORT:
            raise DisallowedFileTypeError(name, content_type)

    yield from accepted


def _remove_all(paths: list[Path]) -> None:
    for path in paths:
        path.unlink(missing_ok=True)


def upload_files(
    request: Request,
    directory: str | Path,
    config: ToolkitConfig,
    rename: bool = True,
) -> list[UploadedFile]:
    """Store every file of a multipart request in ``directory``.

    Files are processed one at a time in the order the form parts arrived.
    With ``RejectionPolicy.ABORT`` a single disallowed file fails the whole call;
    with ``SKIP`` it is left out. A write failure removes the files this call
    already stored before re-raising.
    """
    files = validate_multipart(request, config.max_upload_bytes)
    target_dir = create_dir_if_not_exists(directory)

    uploaded: list[UploadedFile] = []
    written: list[Path] = []
    try:
        for original_name, stream in _select_files(files, config):
            new_name = stored_name(original_name, rename)
            destination = target_dir / new_name
            with stream, destination.open("wb") as out:
                written.append(destination)
                size = copy_stream(stream, out)

            uploaded.append(UploadedFile(new_file_name=new_name, original_file_name=original_name, file_size=size))
            logger.info("File stored", icon=LogIcon.UPLOAD, file=original_name, stored_as=new_name, size=size)
    except OSError as ex:
        _remove_all(written)
        raise FileStorageError(f"cannot store upload in {target_dir}: {ex}") from ex

    return uploaded


def upload_one_file(
    request: Request,
    directory: str | Path,
    config: ToolkitConfig,
    rename: bool = True,
) -> UploadedFile:
    """Upload like ``upload_files`` and return the first stored file."""
    uploaded = upload_files(request, directory, config, rename=rename)
    if not uploaded:
        raise NoFilesError()
    return uploaded[0]

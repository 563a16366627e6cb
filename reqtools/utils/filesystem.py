"""Directory creation and static file downloads."""

import mimetypes
import re
from email.utils import formatdate
from pathlib import Path

from robyn import Headers, Request, Response, status_codes
from robyn.responses import FileResponse

from reqtools.core.exceptions import FileStorageError, InvalidPathError
from reqtools.core.logger import LogIcon, logger
from reqtools.utils.sniffing import SNIFF_LEN, detect_content_type

DIR_MODE = 0o755

_RANGE_PATTERN = re.compile(r"^bytes=(\d*)-(\d*)$")


def create_dir_if_not_exists(path: str | Path) -> Path:
    """Create ``path`` and any missing parents. Does nothing when the path exists.

    An existing non-directory at ``path`` is not reported.
    """
    if not str(path).strip():
        raise InvalidPathError(str(path))

    directory = Path(path)
    if not directory.exists():
        try:
            directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        except OSError as ex:
            raise FileStorageError(f"cannot create directory {directory}: {ex}") from ex
        logger.info("Directory created", icon=LogIcon.FOLDER, path=str(directory))
    return directory


def parse_range(header: str | None, size: int) -> tuple[int, int] | None:
    """Resolve a single ``bytes=`` range to inclusive ``(start, end)`` offsets.

    Returns None when the header is absent, malformed or lists several ranges,
    in which case the whole file is served. Raises ValueError when the range is
    well formed but cannot be satisfied.
    """
    if not header:
        return None
    match = _RANGE_PATTERN.match(header.strip())
    if not match:
        return None

    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        # suffix range: the final N bytes
        length = int(last)
        if length == 0 or size == 0:
            raise ValueError("unsatisfiable suffix range")
        return max(size - length, 0), size - 1

    start = int(first)
    end = int(last) if last else size - 1
    if start >= size or end < start:
        raise ValueError("unsatisfiable range")
    return start, min(end, size - 1)


def _content_type(path: Path) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    if guessed:
        return guessed
    with path.open("rb") as fh:
        return detect_content_type(fh.read(SNIFF_LEN))


def download_static_file(request: Request, directory: str | Path, file: str, display_name: str) -> Response | FileResponse:
    """Serve ``directory/file`` as an attachment named ``display_name``.

    ``file`` is joined without sanitization; callers must validate it.
    Honors a single byte range from the request's ``range`` header.
    """
    path = Path(directory) / file
    disposition = f'attachment; filename="{display_name}"'

    if not path.is_file():
        logger.info("Download target missing", icon=LogIcon.WARNING, path=str(path))
        return Response(
            status_code=status_codes.HTTP_404_NOT_FOUND,
            headers={"content-type": "text/plain; charset=utf-8", "x-content-type-options": "nosniff"},
            description="404 page not found\n",
        )

    stat = path.stat()
    size = stat.st_size
    headers = {
        "content-disposition": disposition,
        "content-type": _content_type(path),
        "accept-ranges": "bytes",
        "last-modified": formatdate(stat.st_mtime, usegmt=True),
    }

    try:
        byte_range = parse_range(request.headers.get("range"), size)
    except ValueError:
        logger.info("Unsatisfiable range", icon=LogIcon.WARNING, path=str(path), size=size)
        return Response(
            status_code=status_codes.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE,
            headers={**headers, "content-range": f"bytes */{size}"},
            description="invalid range: failed to overlap\n",
        )

    if byte_range is None:
        logger.info("Serving download", icon=LogIcon.DOWNLOAD, path=str(path), display_name=display_name)
        return FileResponse(
            file_path=str(path),
            status_code=status_codes.HTTP_200_OK,
            headers=Headers({**headers, "content-length": str(size)}),
        )

    start, end = byte_range
    with path.open("rb") as fh:
        fh.seek(start)
        chunk = fh.read(end - start + 1)

    logger.info("Serving partial download", icon=LogIcon.DOWNLOAD, path=str(path), start=start, end=end)
    return Response(
        status_code=status_codes.HTTP_206_PARTIAL_CONTENT,
        headers={
            **headers,
            "content-range": f"bytes {start}-{end}/{size}",
            "content-length": str(len(chunk)),
        },
        description=chunk,
    )

"""RequestToolkit: configuration-bearing entry point for the request helpers."""

from pathlib import Path
from typing import Any, TypeVar

import httpx
from robyn import Request, Response
from robyn.responses import FileResponse

from reqtools.models.core import ToolkitConfig, UploadedFile
from reqtools.utils import filesystem, jsonio, remote, slugs, tokens, uploads

T = TypeVar("T")


class RequestToolkit:
    """Binds a ToolkitConfig to the stateless request helpers.

    The config is read on every call and is not synchronized; adjust it before
    the toolkit starts serving requests.
    """

    def __init__(self, config: ToolkitConfig | None = None) -> None:
        self.config = config or ToolkitConfig()

    def random_string(self, n: int) -> str:
        return tokens.random_string(n)

    def upload_files(self, request: Request, directory: str | Path, rename: bool = True) -> list[UploadedFile]:
        return uploads.upload_files(request, directory, self.config, rename=rename)

    def upload_one_file(self, request: Request, directory: str | Path, rename: bool = True) -> UploadedFile:
        return uploads.upload_one_file(request, directory, self.config, rename=rename)

    def create_dir_if_not_exists(self, path: str | Path) -> Path:
        return filesystem.create_dir_if_not_exists(path)

    def slugify(self, text: str) -> str:
        return slugs.slugify(text)

    def download_static_file(
        self, request: Request, directory: str | Path, file: str, display_name: str
    ) -> Response | FileResponse:
        return filesystem.download_static_file(request, directory, file, display_name)

    def read_json(self, request: Request, target: type[T]) -> T:
        return jsonio.read_json(request, target, self.config)

    def write_json(self, status: int, data: Any, headers: dict[str, str] | None = None) -> Response:
        return jsonio.write_json(status, data, headers)

    def error_json(self, err: BaseException, status: int | None = None) -> Response:
        return jsonio.error_json(err, status)

    def push_json_to_remote(
        self, url: str, data: Any, client: httpx.Client | None = None
    ) -> tuple[httpx.Response, int]:
        return remote.push_json_to_remote(url, data, client)

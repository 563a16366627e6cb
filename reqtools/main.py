"""reqtools demo service - the request helpers wired into a Robyn app."""

from uuid import uuid4

from asgi_correlation_id import correlation_id
from pydantic import BaseModel
from robyn import Request, Response, Robyn, status_codes

from reqtools.core.exceptions import ToolkitError
from reqtools.core.logger import LogIcon, logger
from reqtools.core.settings import settings as st
from reqtools.core.toolkit import RequestToolkit
from reqtools.models.core import JSONResponse

app = Robyn(__file__)
tools = RequestToolkit()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str


class SlugRequest(BaseModel):
    text: str


@app.before_request()
async def bind_correlation_id(request: Request) -> Request:
    correlation_id.set(request.headers.get("x-request-id") or uuid4().hex)
    return request


@app.get("/health")
async def health_check() -> Response:
    logger.info("Health check requested", icon=LogIcon.HEALTHCHECK)
    return tools.write_json(
        status_codes.HTTP_200_OK,
        HealthResponse(status="healthy", service=st.API_NAME, version=st.API_VERSION),
    )


@app.post("/files/upload")
async def upload(request: Request) -> Response:
    """Store every uploaded file under UPLOAD_PATH."""
    try:
        uploaded = tools.upload_files(request, st.UPLOAD_PATH)
    except ToolkitError as ex:
        return tools.error_json(ex, ex.status_code)
    payload = JSONResponse(message=f"{len(uploaded)} file(s) uploaded", data=uploaded)
    return tools.write_json(status_codes.HTTP_201_CREATED, payload.to_wire())


@app.post("/slug")
async def slug(request: Request) -> Response:
    try:
        body = tools.read_json(request, SlugRequest)
        result = tools.slugify(body.text)
    except ToolkitError as ex:
        return tools.error_json(ex, ex.status_code)
    return tools.write_json(status_codes.HTTP_200_OK, JSONResponse(message="slug created", data=result).to_wire())


@app.get("/files/download/:name")
async def download(request: Request):
    name = request.path_params["name"]
    return tools.download_static_file(request, st.STATIC_PATH, name, name)


def main() -> None:
    logger.info("Starting %s", st.API_NAME, icon=LogIcon.START, host=st.API_HOST, port=st.API_PORT)
    tools.create_dir_if_not_exists(st.UPLOAD_PATH)
    tools.create_dir_if_not_exists(st.STATIC_PATH)
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()

"""Posting JSON payloads to remote endpoints."""

from typing import Any

import httpx

from reqtools.core.exceptions import RemoteRequestError
from reqtools.core.logger import LogIcon, logger
from reqtools.utils.jsonio import JSON_CONTENT_TYPE, encode_json


def push_json_to_remote(url: str, data: Any, client: httpx.Client | None = None) -> tuple[httpx.Response, int]:
    """POST ``data`` as JSON to ``url`` and return the response with its status code.

    Pass ``client`` to control timeouts, transports or auth; without one a
    default ``httpx.Client`` is opened for this call only. The response body is
    left untouched and the caller should close the response.
    """
    payload = encode_json(data)
    headers = {"content-type": JSON_CONTENT_TYPE}

    try:
        if client is not None:
            response = client.post(url, content=payload, headers=headers)
        else:
            with httpx.Client() as default_client:
                response = default_client.post(url, content=payload, headers=headers)
    except (httpx.TransportError, httpx.InvalidURL) as ex:
        logger.warning("Remote push failed", icon=LogIcon.NETWORK, url=url, error=str(ex))
        raise RemoteRequestError(url, str(ex)) from ex

    logger.info("Remote push sent", icon=LogIcon.NETWORK, url=url, status=response.status_code)
    return response, response.status_code

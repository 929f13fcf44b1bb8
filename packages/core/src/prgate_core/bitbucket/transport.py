"""Authenticated request/response plumbing for Bitbucket Cloud.

Transport is the only place that talks to httpx. It owns three concerns:
  - building requests: basic auth, the XSRF bypass header, and a JSON
    content type only when a body is sent;
  - executing them on a shared httpx.Client and mapping failures onto
    prgate_core.errors;
  - decoding JSON payloads into pydantic models.

Timeouts belong to the httpx.Client the caller supplies. Nothing here
retries.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

import httpx
import pydantic

from prgate_core.errors import DecodeError, ProtocolError, TransportError, ValidationError

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = frozenset({200, 201, 204})

# Disables the XSRF check Bitbucket applies to cookie-less API calls.
# See https://confluence.atlassian.com/cloudkb/xsrf-check-failed-when-calling-cloud-apis-826874382.html
XSRF_HEADER = ("X-Atlassian-Token", "no-check")

M = TypeVar("M", bound=pydantic.BaseModel)


class Transport:
    def __init__(self, http_client: httpx.Client, username: str, password: str):
        self._http = http_client
        self._auth = httpx.BasicAuth(username, password)

    def build_request(self, method: str, url: str, body: Any = None) -> httpx.Request:
        """Return a request carrying credentials and the headers Bitbucket expects."""
        headers = {XSRF_HEADER[0]: XSRF_HEADER[1]}
        content = None
        if body is not None:
            content = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"
        request = self._http.build_request(method, url, content=content, headers=headers)
        # BasicAuth's flow yields the request with the Authorization header set.
        return next(self._auth.auth_flow(request))

    def request(self, method: str, url: str, body: Any = None) -> bytes:
        """Execute one request and return the raw response body.

        Raises TransportError when the request cannot be built or sent and
        ProtocolError for any status outside SUCCESS_STATUS_CODES.
        """
        request_str = f"{method} {url}"
        try:
            request = self.build_request(method, url, body)
        except (TypeError, ValueError, httpx.InvalidURL) as e:
            raise TransportError(f"constructing request {request_str!r}: {e}", request=request_str) from e

        logger.debug("Bitbucket request: %s", request_str)
        try:
            response = self._http.send(request)
        except httpx.HTTPError as e:
            raise TransportError(f"making request {request_str!r}: {e}", request=request_str) from e

        if response.status_code not in SUCCESS_STATUS_CODES:
            raise ProtocolError(request_str, response.status_code, response.text)
        return response.content

    def request_model(self, method: str, url: str, model: type[M], body: Any = None) -> M:
        """Execute a request and validate its JSON body against ``model``."""
        payload = self.request(method, url, body)
        return decode(f"{method} {url}", payload, model)


def decode(request_str: str, payload: bytes, model: type[M]) -> M:
    """Parse ``payload`` as JSON and validate it against ``model``.

    Kept as two steps so a body that is not JSON at all (DecodeError) is
    reported differently from JSON that lacks required fields
    (ValidationError). Both carry the raw body for diagnosis.
    """
    text = payload.decode("utf-8", errors="replace")
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise DecodeError(request_str, text) from e
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(request_str, text, detail=str(e)) from e

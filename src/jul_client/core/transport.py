"""HTTP transport for the Jul REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any, Literal

import httpx

from jul_client.core.mappers import map_api_error
from jul_client.models.common import ApiError, JSONValue

logger = logging.getLogger(__name__)

type ResponseKind = Literal["auto", "json", "text"]
type HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

JSON_CONTENT_TYPE = "application/json"


class JulApiError(RuntimeError):
    """Raised when the server answers with a non-success status code."""

    def __init__(self, status: int, error: ApiError) -> None:
        super().__init__(error.message or error.error or f"http status {status}")
        self.status = status
        self.error = error

    @property
    def kind(self) -> str | None:
        """Machine-readable error kind, e.g. ``not_found``."""
        return self.error.error


def is_json_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_CONTENT_TYPE or media_type.endswith("+json")


class Transport:
    """Executes single requests against ``base_url + path``.

    The base URL and bearer token are plain attributes read when each request
    builds its headers; changing them affects every request built afterwards.
    There is no retry, timeout or request deduplication.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str,
        token: str | None = None,
    ) -> None:
        self._http = http_client
        self.base_url = base_url.rstrip("/")
        self.token = token

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        """Build request headers; ``extra`` may override the content type."""
        headers = {"Content-Type": JSON_CONTENT_TYPE, **(extra or {})}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: HttpMethod,
        path: str,
        *,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        expect: ResponseKind = "auto",
    ) -> JSONValue:
        """Perform one request and classify the response body.

        ``body`` may be a pre-encoded ``str``/``bytes`` payload or any JSON
        serializable value. Network failures propagate as ``httpx.HTTPError``;
        a non-2xx status raises :class:`JulApiError`. In ``json`` mode a body
        that does not decode raises ``json.JSONDecodeError`` unchanged.
        """
        url = self.url(path)
        content = self._encode_body(body)
        logger.debug("%s %s", method, url)
        response = await self._http.request(
            method,
            url,
            content=content,
            headers=self.headers(headers),
        )
        logger.debug("%s %s -> %s", method, url, response.status_code)

        if not response.is_success:
            raise JulApiError(response.status_code, self._error_payload(response))

        text = response.text
        if not text:
            return "" if expect == "text" else {}
        if expect == "text":
            return text
        if expect == "json":
            return json.loads(text)
        if is_json_content_type(response.headers.get("content-type")):
            return json.loads(text)
        return text

    @asynccontextmanager
    async def stream(
        self,
        method: HttpMethod,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Open a long-lived response whose body is consumed incrementally.

        The connection is released when the context exits.
        """
        url = self.url(path)
        logger.debug("%s %s (stream)", method, url)
        async with self._http.stream(method, url, headers=self.headers(headers)) as response:
            if not response.is_success:
                await response.aread()
                raise JulApiError(response.status_code, self._error_payload(response))
            yield response

    @staticmethod
    def _encode_body(body: Any) -> bytes | None:
        if body is None:
            return None
        if isinstance(body, bytes):
            return body
        if isinstance(body, str):
            return body.encode("utf-8")
        return json.dumps(body).encode("utf-8")

    @staticmethod
    def _error_payload(response: httpx.Response) -> ApiError:
        try:
            payload = json.loads(response.text)
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            return ApiError(error="unknown", message=response.reason_phrase)
        return map_api_error(payload)

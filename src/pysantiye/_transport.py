"""HTTP transport for the hosted Postgres REST interface."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pysantiye._constants import UNKNOWN_RESOURCE_CODES, USER_AGENT
from pysantiye._redact import redact_for_log
from pysantiye.config import SantiyeConfig
from pysantiye.exceptions import SantiyeApiError, SantiyeResourceNotFoundError, SantiyeTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`RestTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> Any: ...


def _raise_for_error_body(endpoint: str, status: int, text: str) -> None:
    """Map a non-2xx PostgREST reply onto the exception hierarchy."""
    try:
        body = json.loads(text) if text else {}
    except json.JSONDecodeError:
        body = {}

    if not isinstance(body, dict) or "message" not in body:
        raise SantiyeTransportError(
            f"HTTP {status} from {endpoint}: {text[:200]}",
            status_code=status,
            endpoint=endpoint,
        )

    code = str(body.get("code") or "")
    message = str(body.get("message") or "")
    exc_type = SantiyeResourceNotFoundError if code in UNKNOWN_RESOURCE_CODES else SantiyeApiError
    raise exc_type(
        f"{endpoint} failed: code={code} message={message}",
        code=code,
        endpoint=endpoint,
        status_code=status,
    )


class RestTransport:
    """HTTP transport that adds auth headers and decodes PostgREST replies."""

    def __init__(self, config: SantiyeConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    def _headers(self, prefer: str | None) -> dict[str, str]:
        headers: dict[str, str] = {
            "apikey": self._config.api_key,
            "authorization": f"Bearer {self._config.bearer_token}",
            "accept": "application/json",
            "accept-profile": self._config.schema,
            "content-profile": self._config.schema,
            "user-agent": USER_AGENT,
        }
        if prefer:
            headers["prefer"] = prefer
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> Any:
        """Send one REST request and return the decoded JSON body.

        Returns ``None`` for empty replies (e.g. ``204 No Content``).
        """
        url = f"{self._config.rest_url}{endpoint}"
        headers = self._headers(prefer)
        data: str | None = None
        if body is not None:
            headers["content-type"] = "application/json"
            data = json.dumps(body)

        _logger.debug(
            "%s %s params=%s headers=%s",
            method,
            url,
            dict(params or {}),
            redact_for_log(headers),
        )

        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)
        try:
            async with self._http.request(
                method,
                url,
                params=dict(params or {}),
                data=data,
                headers=headers,
                timeout=timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
        except TimeoutError as exc:
            raise SantiyeTransportError(f"Request to {endpoint} timed out", endpoint=endpoint) from exc
        except aiohttp.ClientError as exc:
            raise SantiyeTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        if not 200 <= status < 300:
            _raise_for_error_body(endpoint, status, text)

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise SantiyeTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

"""HTTP request tracking.

Turns httpx traffic into ApiCallRecord entries via response event hooks, so
that tests only need to attach a tracker to the client they already use.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from api_baseline.clock import utc_now_iso
from api_baseline.types import ApiCallRecord

logger = logging.getLogger(__name__)

UNPARSABLE_BODY = "[Unable to parse response body]"
BINARY_BODY = "[Binary content]"


def _decode_request_body(request: httpx.Request) -> Any:
    try:
        content = request.content
    except httpx.RequestNotRead:
        return None
    if not content:
        return None
    try:
        return json.loads(content)
    except ValueError:
        pass
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        return BINARY_BODY


def _decode_response_body(response: httpx.Response) -> Any:
    content_type = response.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            return response.json()
        if content_type.startswith("text/"):
            return response.text
    except ValueError:
        return UNPARSABLE_BODY
    if not response.content:
        return None
    return BINARY_BODY


def _elapsed_ms(response: httpx.Response) -> float | None:
    try:
        return round(response.elapsed.total_seconds() * 1000, 3)
    except RuntimeError:
        return None


class ApiCallTracker:
    """Records every response seen by the clients it is attached to."""

    def __init__(self, include_host: bool = False):
        """Initialize the tracker.

        Args:
            include_host: Record the absolute URL instead of the request
                target (path and query). Leave off to keep reports
                comparable across environments.
        """
        self.include_host = include_host
        self._calls: list[ApiCallRecord] = []

    @property
    def calls(self) -> list[ApiCallRecord]:
        return list(self._calls)

    def attach(self, client: httpx.Client | httpx.AsyncClient) -> None:
        """Install a response hook on the client."""
        hooks = client.event_hooks
        if isinstance(client, httpx.AsyncClient):
            hooks["response"] = [*hooks.get("response", []), self._on_response_async]
        else:
            hooks["response"] = [*hooks.get("response", []), self._on_response]
        client.event_hooks = hooks

    def drain(self) -> list[ApiCallRecord]:
        """Return the recorded calls and start over."""
        calls, self._calls = self._calls, []
        return calls

    def build_record(self, response: httpx.Response) -> ApiCallRecord:
        """Convert a read response into a call record."""
        request = response.request
        if self.include_host:
            url = str(request.url)
        else:
            url = request.url.raw_path.decode("ascii")

        return ApiCallRecord(
            method=request.method.upper(),
            url=url,
            headers=dict(request.headers),
            request_body=_decode_request_body(request),
            status_code=response.status_code,
            response_headers=dict(response.headers),
            response_body=_decode_response_body(response),
            duration=_elapsed_ms(response),
            timestamp=utc_now_iso(),
        )

    def record(self, response: httpx.Response) -> ApiCallRecord | None:
        """Record a response whose body has been read.

        Tracking never breaks the request: failures are logged and skipped.
        """
        try:
            call = self.build_record(response)
        except Exception as e:
            logger.warning("Failed to track API call to %s: %s", response.request.url, e)
            return None
        self._calls.append(call)
        return call

    def _on_response(self, response: httpx.Response) -> None:
        response.read()
        self.record(response)

    async def _on_response_async(self, response: httpx.Response) -> None:
        await response.aread()
        self.record(response)

"""HTTP client for the 1C:Enterprise HTTP service."""

from __future__ import annotations

import base64
import json
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import Any

from onec_mcp.models import JsonModel

DEFAULT_TIMEOUT = 30.0
_MAX_RESPONSE_SIZE = 50 << 20
_MAX_ERROR_BODY = 4096


class OneCError(Exception):
    """Raised when a request to the 1C service fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass
class Client:
    """Client for a 1C HTTP service; adds basic auth when ``user`` is set."""

    base_url: str
    user: str = ""
    password: str = field(default="", repr=False)
    timeout: float = DEFAULT_TIMEOUT

    def get(self, endpoint: str) -> Any:
        """GET ``endpoint`` and return the decoded JSON response."""
        return self._request("GET", endpoint)

    def post(self, endpoint: str, body: Any) -> Any:
        """POST ``body`` as JSON to ``endpoint`` and return the decoded JSON response."""
        if isinstance(body, JsonModel):
            body = body.to_dict()
        try:
            data = json.dumps(body).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise OneCError(f"marshaling request body: {exc}") from exc
        return self._request("POST", endpoint, data, {"Content-Type": "application/json"})

    def _request(self, method: str, endpoint: str, data: bytes | None = None,
                 headers: dict[str, str] | None = None) -> Any:
        # A fresh connection per request keeps 1C from running out of sessions.
        all_headers = {"Connection": "close", **(headers or {})}
        if self.user:
            credentials = f"{self.user}:{self.password}".encode("utf-8")
            all_headers["Authorization"] = "Basic " + base64.b64encode(credentials).decode("ascii")
        try:
            request = urllib.request.Request(
                self.base_url + endpoint, data=data, headers=all_headers, method=method
            )
        except ValueError as exc:
            raise OneCError(f"creating request: {exc}") from exc

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                status = response.status
                if status != 200:
                    payload = response.read(_MAX_ERROR_BODY)
                    raise OneCError(
                        f"1C returned status {status}: {payload.decode('utf-8', 'replace')}",
                        status=status,
                    )
                payload = response.read(_MAX_RESPONSE_SIZE)
        except urllib.error.HTTPError as exc:
            with exc:
                payload = exc.read(_MAX_ERROR_BODY)
            raise OneCError(
                f"1C returned status {exc.code}: {payload.decode('utf-8', 'replace')}",
                status=exc.code,
            ) from None
        except OneCError:
            raise
        except (urllib.error.URLError, OSError) as exc:
            raise OneCError(f"executing request to 1C: {exc}") from exc

        try:
            return json.loads(payload)
        except ValueError as exc:
            raise OneCError(f"decoding 1C response: {exc}") from exc
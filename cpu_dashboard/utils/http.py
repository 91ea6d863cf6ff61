"""JSON-over-HTTP session for the Grafana API, built on urllib."""

from __future__ import annotations

import base64
from dataclasses import dataclass
import http.client
import json
from typing import Any, Mapping, MutableMapping, Optional
import urllib.error
import urllib.request


@dataclass(slots=True)
class HttpResponse:
    """Lightweight HTTP response wrapper."""

    status_code: int
    text: str
    headers: Mapping[str, str]


def basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class HTTPSession:
    """Session posting JSON bodies; transport failures surface as ConnectionError."""

    def __init__(self) -> None:
        self.headers: MutableMapping[str, str] = {}

    # Public API ----------------------------------------------------------
    def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 30,
    ) -> HttpResponse:
        request_headers = dict(self.headers)
        if headers:
            request_headers.update(headers)

        body: Optional[bytes] = None
        if json is not None:
            body = self._encode_json(json)
            request_headers.setdefault("Content-Type", "application/json")

        try:
            request = urllib.request.Request(
                url,
                data=body,
                headers=request_headers,
                method=method.upper(),
            )
            with urllib.request.urlopen(request, timeout=timeout) as response:
                response_text = self._decode(response.read())
                response_headers = dict(response.headers.items())
                status = response.status
        except urllib.error.HTTPError as err:
            response_text = self._decode(err.read()) if err.fp else ""
            response_headers = dict(err.headers.items()) if err.headers else {}
            status = err.code
        except urllib.error.URLError as err:
            raise ConnectionError(str(err.reason)) from err
        except (http.client.HTTPException, ValueError) as err:
            # Malformed replies, unsupported URLs and invalid ports.
            raise ConnectionError(str(err) or type(err).__name__) from err

        return HttpResponse(status_code=status, text=response_text, headers=response_headers)

    def post(self, url: str, **kwargs: Any) -> HttpResponse:
        return self.request("POST", url, **kwargs)

    # Internal helpers ----------------------------------------------------
    @staticmethod
    def _encode_json(payload: Any) -> bytes:
        return json.dumps(payload).encode("utf-8")

    @staticmethod
    def _decode(raw: bytes) -> str:
        return raw.decode("utf-8", errors="replace")


__all__ = ["HTTPSession", "HttpResponse", "basic_auth_header"]

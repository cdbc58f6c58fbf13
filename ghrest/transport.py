"""Transport contract and the default httpx implementation."""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from ghrest.errors import TransportFailure
from ghrest.settings import GhRestSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Response:
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class Transport(ABC):
    """A single raw HTTP exchange against a fixed API origin.

    Paths are relative to ``api_url``; implementations must also accept absolute
    URLs on that origin and refuse any other. Implementations used from several
    threads must be thread-safe.
    """

    @property
    @abstractmethod
    def api_url(self) -> str: ...

    @abstractmethod
    def get(self, path: str, headers: Mapping[str, str]) -> Response: ...

    @abstractmethod
    def post(self, path: str, body: bytes, headers: Mapping[str, str]) -> Response: ...

    @abstractmethod
    def delete(self, path: str, headers: Mapping[str, str]) -> Response: ...


class HttpxTransport(Transport):
    def __init__(self, settings: GhRestSettings, client: httpx.Client | None = None) -> None:
        self._api_url = settings.api_url.rstrip("/")
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": settings.api_version,
            "User-Agent": settings.user_agent,
        }
        if settings.token is not None:
            self._headers["Authorization"] = f"Bearer {settings.token.get_secret_value()}"
        self._client = client or httpx.Client(timeout=settings.timeout)

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    @property
    def api_url(self) -> str:
        return self._api_url

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            # Credentials only ever travel to the configured origin.
            if not path.startswith(self._api_url + "/"):
                raise TransportFailure(f"Refusing request outside {self._api_url}: {path}")
            return path
        return f"{self._api_url}{path}"

    def _send(self, method: str, path: str, headers: Mapping[str, str], body: bytes | None = None) -> Response:
        start = time.monotonic()
        try:
            response = self._client.request(
                method,
                self._url(path),
                headers={**self._headers, **headers},
                content=body,
            )
        except httpx.RequestError as exc:
            raise TransportFailure(f"{method} {path} failed: {exc}") from exc
        logger.debug(
            "%s %s -> %d (%.0f ms)", method, path, response.status_code, (time.monotonic() - start) * 1000
        )
        return Response(status=response.status_code, headers=dict(response.headers), body=response.content)

    def get(self, path: str, headers: Mapping[str, str]) -> Response:
        return self._send("GET", path, headers)

    def post(self, path: str, body: bytes, headers: Mapping[str, str]) -> Response:
        return self._send("POST", path, {"Content-Type": "application/json", **headers}, body)

    def delete(self, path: str, headers: Mapping[str, str]) -> Response:
        return self._send("DELETE", path, headers)

"""Shared test fixtures."""

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

import pytest

from ghrest.api import GitHubApi
from ghrest.transport import Response, Transport

TESTDATA = Path(__file__).parent / "testdata"

NOT_FOUND_BODY = (TESTDATA / "not_found_testdata.json").read_bytes()


@dataclass
class _Trained:
    status: int
    headers: Mapping[str, str]
    body: bytes
    validator: Callable[[dict], bool] | None = None


class FakeTransport(Transport):
    """In-memory transport trained per (method, path).

    Untrained paths answer 404 with the usual error envelope. A trained
    validator receives the decoded request body and must return True.
    """

    def __init__(self) -> None:
        self._trained: dict[tuple[str, str], _Trained] = {}
        self.requests: list[tuple[str, str, bytes]] = []
        self.validated: list[str] = []

    @property
    def api_url(self) -> str:
        return "https://api.github.com"

    def train_get(self, path: str, body: bytes, headers: Mapping[str, str] | None = None, status: int = 200) -> None:
        self._trained[("GET", path)] = _Trained(status, headers or {}, body)

    def train_post(
        self, path: str, validator: Callable[[dict], bool], body: bytes, status: int = 200
    ) -> None:
        self._trained[("POST", path)] = _Trained(status, {}, body, validator)

    def train_delete(self, path: str, status: int, validator: Callable[[dict], bool] | None = None) -> None:
        self._trained[("DELETE", path)] = _Trained(status, {}, b"", validator)

    def _answer(self, method: str, path: str, body: bytes) -> Response:
        self.requests.append((method, path, body))
        trained = self._trained.get((method, path))
        if trained is None:
            return Response(status=404, headers={}, body=NOT_FOUND_BODY)
        if trained.validator is not None:
            payload = json.loads(body) if body else {}
            assert trained.validator(payload), f"Unexpected request body for {method} {path}: {payload}"
            self.validated.append(path)
        return Response(status=trained.status, headers=trained.headers, body=trained.body)

    def get(self, path: str, headers: Mapping[str, str]) -> Response:
        return self._answer("GET", path, b"")

    def post(self, path: str, body: bytes, headers: Mapping[str, str]) -> Response:
        return self._answer("POST", path, body)

    def delete(self, path: str, headers: Mapping[str, str]) -> Response:
        return self._answer("DELETE", path, b"")


@pytest.fixture
def resource() -> Callable[[str], bytes]:
    def load(name: str) -> bytes:
        return (TESTDATA / name).read_bytes()

    return load


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def api(transport: FakeTransport) -> GitHubApi:
    return GitHubApi(transport)

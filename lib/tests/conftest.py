from __future__ import annotations

import logging

import pytest

from respite_client import console


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in ("REMOTE_ADDR", "REMOTE_USER", console.ENV_SHOW_REQUEST, "RESPITE_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_loggers():
    yield
    for name in ("respite_client", "respite_client.client", "httpx", "httpcore"):
        logger = logging.getLogger(name)
        logger.setLevel(logging.NOTSET)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)


class FakeTransport:
    def __init__(self, status_code: int = 200, body: bytes = b"{}"):
        self.status_code = status_code
        self.body = body
        self.calls: list[tuple[str, dict[str, str], bytes]] = []
        self.closed = False

    def send(self, url, headers, body):
        self.calls.append((url, dict(headers), body))
        return self.status_code, self.body

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()

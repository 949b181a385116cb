from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol

import httpx

from .config_types import DEFAULT_TIMEOUT_S
from .errors import TransportError

USER_AGENT = "respite-client/0.1.0"

log = logging.getLogger(__name__)


class Transport(Protocol):
    def send(self, url: str, headers: Mapping[str, str], body: bytes) -> tuple[int, bytes]: ...

    def close(self) -> None: ...


class HttpxTransport:
    def __init__(self, *, timeout_s: float = DEFAULT_TIMEOUT_S, verify: bool = True,
                 client: httpx.Client | None = None):
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=timeout_s,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=False,
            verify=verify,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def send(self, url: str, headers: Mapping[str, str], body: bytes) -> tuple[int, bytes]:
        try:
            r = self._client.post(url, content=body, headers=dict(headers))
        except httpx.RequestError as e:
            raise TransportError(f"POST {url} failed: {e}") from e
        log.debug("POST %s -> %s (%d bytes)", url, r.status_code, len(r.content))
        return r.status_code, r.content

"""Request signing for the ``X-Respite-Auth`` header.

Standard mode signs the exact request body bytes together with the URL path
and a timestamp::

    md5_hex(pass ":" ts ":" "/path/method/brand" ":" md5_hex(body))

and is transmitted as ``digest:ts``. md5-pass mode sends only ``md5_hex(pass)``
and does not cover the body.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass

AUTH_HEADER = "X-Respite-Auth"


@dataclass(frozen=True)
class AuthToken:
    value: str
    timestamp: int | None = None

    def header_value(self) -> str:
        if self.timestamp is None:
            return self.value
        return f"{self.value}:{self.timestamp}"


def md5_hex(data: bytes | str) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.md5(data).hexdigest()


def current_timestamp() -> int:
    return int(time.time())


def signed_url_path(path: str, method: str, brand: str | None) -> str:
    url = f"/{path.strip('/')}/{method}"
    if brand:
        url += f"/{brand}"
    return url


def sign_request(
        body: bytes,
        path: str,
        method: str,
        brand: str | None,
        password: str,
        timestamp: int | None = None,
) -> AuthToken:
    if timestamp is None:
        timestamp = current_timestamp()
    secret = f"{password}:{timestamp}:{signed_url_path(path, method, brand)}:{md5_hex(body)}"
    return AuthToken(value=md5_hex(secret), timestamp=int(timestamp))


def md5_pass_token(password: str) -> AuthToken:
    return AuthToken(value=md5_hex(password))

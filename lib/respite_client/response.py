from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from typing import Any

from .errors import RemoteError, ResponseDecodeError

ERROR_KEY = "error"
MAX_DETAILS = 1000


class Result(Mapping[str, Any]):
    """Read-only view over a decoded response with an error check.

    The wrapped dict is neither copied nor modified; ``data`` hands it back.
    """

    __slots__ = ("_data", "_status_code")

    def __init__(self, data: dict[str, Any], status_code: int | None = None):
        self._data = data
        self._status_code = status_code

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Result({self._data!r})"

    @property
    def data(self) -> dict[str, Any]:
        return self._data

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def is_error(self) -> bool:
        return is_error(self._data)

    @property
    def error(self) -> Any:
        return self._data.get(ERROR_KEY)

    def raise_for_error(self) -> Result:
        if self.is_error:
            details = json.dumps(self._data, ensure_ascii=False, default=str)[:MAX_DETAILS]
            raise RemoteError(self._status_code, str(self.error), details)
        return self


def is_error(data: Mapping[str, Any]) -> bool:
    return ERROR_KEY in data


def _decode(body: bytes) -> Any:
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None


def _text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")[:MAX_DETAILS]


def normalize_response(status_code: int, body: bytes, flat: bool = False) -> Result | dict[str, Any]:
    data = _decode(body)

    if status_code >= 400:
        if not isinstance(data, dict):
            data = {}
            if body:
                data["body"] = _text(body)
        data.setdefault(ERROR_KEY, f"Remote returned HTTP {status_code}")
        data.setdefault("status_code", status_code)
    elif not isinstance(data, dict):
        raise ResponseDecodeError(status_code, "Remote did not return a JSON object", _text(body) or None)

    if flat:
        return data
    return Result(data, status_code)

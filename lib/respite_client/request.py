from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from . import context
from .config_types import ResolvedConnection

JSON_CONTENT_TYPE = "x-application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

META_REMOTE_IP = "_i"
META_REMOTE_USER = "_w"
META_AUTH_TOKEN = "_t"
META_CALLER = "_c"
MD5_PASS_KEY = "x_api_auth"

META_KEYS = (META_REMOTE_IP, META_REMOTE_USER, META_AUTH_TOKEN, META_CALLER)


@dataclass(frozen=True)
class BuiltRequest:
    method: str
    args: dict[str, Any]
    body: bytes
    content_type: str


def decode_utf8(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    if isinstance(value, Mapping):
        return {decode_utf8(k): decode_utf8(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [decode_utf8(v) for v in value]
    return value


def encode_json(args: Mapping[str, Any]) -> bytes:
    return json.dumps(args, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def encode_form(args: Mapping[str, Any]) -> bytes:
    pairs = []
    for key in sorted(args):
        value = args[key]
        if isinstance(value, (dict, list, tuple)):
            value = json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        elif isinstance(value, bool):
            value = int(value)
        elif value is None:
            value = ""
        pairs.append((key, value))
    return urlencode(pairs).encode("ascii")


def _meta_defaults(conn: ResolvedConnection, remote_ip: str | None, remote_user: str | None) -> dict[str, Any]:
    meta: dict[str, Any] = {
        META_REMOTE_IP: remote_ip or context.current_remote_ip(),
        META_REMOTE_USER: remote_user or context.current_remote_user(),
        META_AUTH_TOKEN: context.current_auth_token() or conn.token,
    }
    if conn.trace:
        meta[META_CALLER] = context.caller_trace()
    return meta


def build_request(
        conn: ResolvedConnection,
        method: str,
        args: Mapping[str, Any] | None = None,
        *,
        requested_method: str | None = None,
        remote_ip: str | None = None,
        remote_user: str | None = None,
        body_auth: str | None = None,
) -> BuiltRequest:
    """Merge caller args with the meta keys and serialize them once.

    A caller value wins over the ambient default; a caller value of ``None``
    drops the key. With trace disabled ``_c`` never reaches the wire, even if
    the caller passed one.
    """
    caller_args = dict(args or {})
    if conn.wants_utf8(method, requested_method or method):
        caller_args = decode_utf8(caller_args)

    merged: dict[str, Any] = {}
    for key, value in _meta_defaults(conn, remote_ip, remote_user).items():
        if value is not None:
            merged[key] = value
    merged.update(caller_args)
    merged = {k: v for k, v in merged.items() if not (k in META_KEYS and v is None)}
    if not conn.trace:
        merged.pop(META_CALLER, None)
    if body_auth is not None:
        merged[MD5_PASS_KEY] = body_auth

    if conn.form_encoded:
        return BuiltRequest(method=method, args=merged, body=encode_form(merged), content_type=FORM_CONTENT_TYPE)
    return BuiltRequest(method=method, args=merged, body=encode_json(merged), content_type=JSON_CONTENT_TYPE)

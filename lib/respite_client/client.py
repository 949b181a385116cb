from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from . import console, logging_
from .config_types import ClientConfig, ResolvedConnection
from .configs import ConfigStore, TomlConfigStore
from .errors import SigningError
from .request import BuiltRequest, build_request
from .response import Result, normalize_response
from .resolve import resolve_connection
from .signing import AUTH_HEADER, AuthToken, current_timestamp, md5_pass_token, sign_request
from .transport import HttpxTransport, Transport

log = logging.getLogger(__name__)


class RespiteClient:
    """Calls named methods on a Respite service.

    Any method name is accepted; whether it exists is up to the remote::

        with RespiteClient(ClientConfig(service="billing")) as client:
            result = client.invoke("get_invoice", {"id": 42})
            if result.is_error:
                ...
    """

    def __init__(
            self,
            cfg: ClientConfig,
            *,
            store: ConfigStore | None = None,
            transport: Transport | None = None,
    ):
        self._cfg = cfg
        self._store = store if store is not None else TomlConfigStore()
        self._t = transport
        self._owns_transport = transport is None
        self._conn: ResolvedConnection | None = None

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    @property
    def connection(self) -> ResolvedConnection:
        if self._conn is None:
            self._conn = resolve_connection(self._cfg, self._store)
        return self._conn

    def _transport(self) -> Transport:
        if self._t is None:
            self._t = HttpxTransport(timeout_s=self.connection.timeout_s)
        return self._t

    def close(self) -> None:
        if self._t is not None and self._owns_transport:
            self._t.close()
            self._t = None

    def __enter__(self) -> RespiteClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def method(self, name: str) -> Callable[..., Result | dict[str, Any]]:
        """Bind ``name`` so it can be called like a local function."""

        def call(args: Mapping[str, Any] | None = None, **kwargs: Any) -> Result | dict[str, Any]:
            merged = dict(args or {})
            merged.update(kwargs)
            return self.invoke(name, merged)

        call.__name__ = name
        return call

    def _auth(self, conn: ResolvedConnection) -> str | None:
        """Decide the signing mode: ``"md5_pass"``, ``"sign"`` or ``None``."""
        if conn.sign is False:
            return None
        if not conn.password:
            if conn.sign:
                raise SigningError(f"Signing is enabled for '{self._cfg.service}' but no pass is configured")
            return None
        return "md5_pass" if conn.md5_pass else "sign"

    def invoke(
            self,
            method: str,
            args: Mapping[str, Any] | None = None,
    ) -> Result | dict[str, Any]:
        """Call ``method`` on the remote and return its normalized result.

        Any string is passed through as the method name. Remote failures, HTTP
        or application level, come back as a result with an ``error`` key.
        Raises ``ConfigNotFound`` or ``SigningError`` before sending,
        ``TransportError`` when the request cannot be delivered, and
        ``ResponseDecodeError`` when a successful response is not a JSON object.
        """
        if not isinstance(method, str):
            raise TypeError(f"Method name must be a string, got {type(method).__name__}")

        conn = self.connection
        wire_method = conn.wire_method(method)
        mode = self._auth(conn)

        token: AuthToken | None = None
        body_auth = None
        if mode == "md5_pass":
            token = md5_pass_token(conn.password)
            if conn.md5_pass_in_body:
                body_auth, token = token.value, None

        req: BuiltRequest = build_request(
            conn,
            wire_method,
            args,
            requested_method=method,
            remote_ip=self._cfg.remote_ip,
            remote_user=self._cfg.remote_user,
            body_auth=body_auth,
        )
        if mode == "sign":
            token = sign_request(req.body, conn.path, wire_method, conn.brand, conn.password, current_timestamp())

        headers = dict(conn.headers)
        headers["Content-Type"] = req.content_type
        if token is not None:
            headers[AUTH_HEADER] = token.header_value()

        url = conn.base_url + conn.url_path(wire_method)
        if console.show_request_enabled():
            console.show_request(url, headers)
            logging_.enable_request_logging()
        log.debug("calling %s headers=%s", url, console.redact_headers(headers))

        status_code, body = self._transport().send(url, headers, req.body)
        result = normalize_response(status_code, body, flat=conn.flat)
        if status_code >= 400:
            log.info("%s returned HTTP %s", url, status_code)
        return result

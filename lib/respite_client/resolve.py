from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .config_types import DEFAULT_PORT, DEFAULT_TIMEOUT_S, ClientConfig, ResolvedConnection
from .configs import ConfigStore
from .errors import ConfigNotFound

SERVICE_SUFFIX = "_service"

log = logging.getLogger(__name__)


def find_service_entry(store: ConfigStore | None, service: str) -> tuple[str, dict[str, Any] | None]:
    """Return the matching store key and its entry.

    ``{service}_service`` is tried before ``{service}``. When neither exists the
    service name itself is returned with no entry.
    """
    if store is not None:
        for key in (f"{service}{SERVICE_SUFFIX}", service):
            entry = store.lookup(key)
            if isinstance(entry, Mapping):
                return key, dict(entry)
    return service, None


def default_path(service_key: str) -> str:
    if service_key.endswith(SERVICE_SUFFIX):
        return service_key[: -len(SERVICE_SUFFIX)]
    return service_key


def _pick(explicit: Any, entry: Mapping[str, Any], key: str, default: Any = None) -> Any:
    if explicit is not None:
        return explicit
    value = entry.get(key)
    if value is not None:
        return value
    return default


def _as_bool(value: Any) -> bool | None:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _as_utf8(value: Any) -> bool | frozenset[str]:
    if value is None:
        return False
    if isinstance(value, (bool, int)):
        return bool(value)
    if isinstance(value, str):
        return frozenset({value})
    return frozenset(str(m) for m in value)


def resolve_connection(cfg: ClientConfig, store: ConfigStore | None = None) -> ResolvedConnection:
    service = (cfg.service or "").strip()
    if not service:
        raise ConfigNotFound(service, "Service name is required")

    service_key, entry = find_service_entry(store, service)
    found = entry is not None
    entry = entry or {}

    host = str(_pick(cfg.host, entry, "host") or "").strip()
    if not host:
        if found:
            raise ConfigNotFound(service, f"Service entry '{service_key}' has no host")
        raise ConfigNotFound(service)

    brand = _pick(cfg.brand, entry, "brand")
    if brand is None and store is not None:
        site_brand = store.lookup("brand")
        if isinstance(site_brand, str):
            brand = site_brand
    brand = str(brand).strip() if brand is not None else None
    brand_required = _as_bool(_pick(cfg.brand_required, entry, "brand_required", True))
    if brand_required and not brand:
        raise ConfigNotFound(service, f"No brand configured for service '{service}'")

    headers = _pick(cfg.headers, entry, "headers", {})
    if not isinstance(headers, Mapping):
        headers = {}

    conn = ResolvedConnection(
        service_key=service_key,
        host=host,
        port=int(_pick(cfg.port, entry, "port", DEFAULT_PORT)),
        path=str(_pick(cfg.path, entry, "path") or default_path(service_key)).strip("/"),
        brand=brand or None,
        namespace=str(_pick(cfg.namespace, entry, "namespace", "")),
        flat=_as_bool(_pick(cfg.flat, entry, "flat", False)),
        use_ssl=_as_bool(_pick(cfg.use_ssl, entry, "ssl", True)),
        sign=_as_bool(_pick(cfg.sign, entry, "sign")),
        trace=_as_bool(_pick(cfg.trace, entry, "trace", True)),
        brand_required=brand_required,
        utf8_encoded=_as_utf8(_pick(cfg.utf8_encoded, entry, "utf8_encoded")),
        password=_pick(cfg.password, entry, "pass"),
        md5_pass=_as_bool(_pick(cfg.md5_pass, entry, "md5_pass", False)),
        md5_pass_in_body=_as_bool(_pick(cfg.md5_pass_in_body, entry, "md5_pass_in_body", False)),
        form_encoded=_as_bool(_pick(cfg.form_encoded, entry, "form_encoded", False)),
        token=_pick(cfg.token, entry, "token"),
        timeout_s=float(_pick(cfg.timeout_s, entry, "timeout", DEFAULT_TIMEOUT_S)),
        headers={str(k): str(v) for k, v in headers.items()},
    )
    log.debug("resolved service %s via %s -> %s", service, service_key if found else "overrides", conn.base_url)
    return conn

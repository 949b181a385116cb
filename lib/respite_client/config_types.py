from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field

DEFAULT_PORT = 443
DEFAULT_TIMEOUT_S = 15.0


@dataclass(frozen=True)
class ClientConfig:
    """Explicit per-client overrides. ``None`` means "take it from the store"."""

    service: str
    host: str | None = None
    port: int | None = None
    path: str | None = None
    brand: str | None = None
    namespace: str | None = None
    flat: bool | None = None
    use_ssl: bool | None = None
    sign: bool | None = None
    trace: bool | None = None
    brand_required: bool | None = None
    utf8_encoded: bool | Collection[str] | None = None
    password: str | None = field(default=None, repr=False)
    md5_pass: bool | None = None
    md5_pass_in_body: bool | None = None
    form_encoded: bool | None = None
    token: str | None = field(default=None, repr=False)
    remote_ip: str | None = None
    remote_user: str | None = None
    timeout_s: float | None = None
    headers: Mapping[str, str] | None = None


@dataclass(frozen=True)
class ResolvedConnection:
    service_key: str
    host: str
    port: int = DEFAULT_PORT
    path: str = ""
    brand: str | None = None
    namespace: str = ""
    flat: bool = False
    use_ssl: bool = True
    sign: bool | None = None
    trace: bool = True
    brand_required: bool = True
    utf8_encoded: bool | frozenset[str] = False
    password: str | None = field(default=None, repr=False)
    md5_pass: bool = False
    md5_pass_in_body: bool = False
    form_encoded: bool = False
    token: str | None = field(default=None, repr=False)
    timeout_s: float = DEFAULT_TIMEOUT_S
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def scheme(self) -> str:
        return "https" if self.use_ssl else "http"

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    def wire_method(self, method: str) -> str:
        if self.namespace:
            return f"{self.namespace}_{method}"
        return method

    def url_path(self, wire_method: str) -> str:
        url = f"/{self.path}/{wire_method}"
        if self.brand:
            url += f"/{self.brand}"
        return url

    def wants_utf8(self, *methods: str) -> bool:
        if isinstance(self.utf8_encoded, bool):
            return self.utf8_encoded
        return any(m in self.utf8_encoded for m in methods)

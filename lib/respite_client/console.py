from __future__ import annotations

import os
from collections.abc import Mapping

from rich.console import Console
from rich.markup import escape

from .signing import AUTH_HEADER

ENV_SHOW_REQUEST = "RESPITE_SHOW_REQUEST"

console = Console(stderr=True)


def show_request_enabled() -> bool:
    return os.getenv(ENV_SHOW_REQUEST, "").strip().lower() in {"1", "true", "yes", "on"}


def show_request(url: str, headers: Mapping[str, str]) -> None:
    """Dump the outgoing URL and headers to stderr."""
    console.print(f"[bold cyan]POST[/] {escape(url)}")
    for name, value in headers.items():
        console.print(f"  [dim]{escape(name)}:[/] {escape(value)}")


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {k: ("***" if k.lower() == AUTH_HEADER.lower() else v) for k, v in headers.items()}

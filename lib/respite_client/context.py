"""Ambient caller context for the meta parameters.

Web handlers that call remote services on behalf of an end user bind that
user's address and login with :func:`caller_context`; every request made
inside the block picks them up as ``_i`` / ``_w`` (and ``_t`` when an admin
token is given) unless the call overrides them.
"""

from __future__ import annotations

import getpass
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

DEFAULT_REMOTE_IP = "cmdline"

remote_ip_var: ContextVar[str | None] = ContextVar("respite_remote_ip", default=None)
remote_user_var: ContextVar[str | None] = ContextVar("respite_remote_user", default=None)
auth_token_var: ContextVar[str | None] = ContextVar("respite_auth_token", default=None)

_PACKAGE = __name__.rsplit(".", 1)[0]


@contextmanager
def caller_context(
        *,
        remote_ip: str | None = None,
        remote_user: str | None = None,
        auth_token: str | None = None,
) -> Iterator[None]:
    tokens = [
        (remote_ip_var, remote_ip_var.set(remote_ip)),
        (remote_user_var, remote_user_var.set(remote_user)),
        (auth_token_var, auth_token_var.set(auth_token)),
    ]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def current_remote_ip() -> str:
    return remote_ip_var.get() or os.getenv("REMOTE_ADDR") or DEFAULT_REMOTE_IP


def current_remote_user() -> str | None:
    value = remote_user_var.get() or os.getenv("REMOTE_USER")
    if value:
        return value
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return None


def current_auth_token() -> str | None:
    return auth_token_var.get()


def caller_trace(skip_prefix: str = _PACKAGE) -> str:
    """Describe the first stack frame outside this package.

    Rendered as ``module; file; line; function`` where ``function`` is the
    client entry point that was called.
    """
    frame = sys._getframe(1)
    entry = None
    while frame is not None:
        module = frame.f_globals.get("__name__", "")
        if module != skip_prefix and not module.startswith(skip_prefix + "."):
            break
        entry = frame.f_code.co_qualname
        frame = frame.f_back
    if frame is None:
        return f"{skip_prefix}; -; 0; {entry or '-'}"
    module = frame.f_globals.get("__name__", "")
    return f"{module}; {frame.f_code.co_filename}; {frame.f_lineno}; {_PACKAGE}.{entry or '-'}"

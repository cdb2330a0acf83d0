# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Environment-driven configuration for the SMTP bridge.

Environment variables:
  HTTP_BIND - Address the HTTP server binds to (default: 127.0.0.1:8080)
  SMTP_HOST - SMTP relay host (required)
  SMTP_PORT - SMTP relay port (default: 587)
  SMTP_USERNAME - SMTP login user (required)
  SMTP_PASSWORD - SMTP login password (required)
  SMTP_FROM - Sender mailbox, ``Name <addr>`` or ``addr`` (required)
  SMTP_TLS - Enforce TLS towards the relay (default: true)
  SMTP_TIMEOUT - Per-operation SMTP timeout in seconds (default: 10)
  SMTP_POOL_TTL - Idle connection lifetime in seconds (default: 300)
  LOG_LEVEL - Logging level (default: INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .errors import InvalidValueError, MissingVariableError
from .mailbox import Mailbox

DEFAULT_HTTP_BIND = "127.0.0.1:8080"
DEFAULT_SMTP_PORT = 587
DEFAULT_SMTP_TIMEOUT = 10.0
DEFAULT_POOL_TTL = 300

TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Immutable deployment settings, loaded once at startup."""

    http_bind: str
    smtp_host: str
    smtp_port: int
    smtp_username: str
    smtp_password: str
    smtp_from: Mailbox
    smtp_use_tls: bool = True
    smtp_timeout: float = DEFAULT_SMTP_TIMEOUT
    smtp_pool_ttl: int = DEFAULT_POOL_TTL

    @property
    def http_host(self) -> str:
        return split_bind_address(self.http_bind)[0]

    @property
    def http_port(self) -> int:
        return split_bind_address(self.http_bind)[1]

    def __repr__(self) -> str:
        return (
            f"Settings(http_bind={self.http_bind!r}, smtp_host={self.smtp_host!r}, "
            f"smtp_port={self.smtp_port}, smtp_username={self.smtp_username!r}, "
            f"smtp_password='***', smtp_from={str(self.smtp_from)!r}, "
            f"smtp_use_tls={self.smtp_use_tls})"
        )


def parse_bool(value: str | None) -> bool | None:
    """Map a boolean token to ``True``/``False``; unknown tokens give ``None``."""
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in TRUTHY:
        return True
    if normalized in FALSY:
        return False
    return None


def parse_port(value: str) -> int:
    """Parse an unsigned 16-bit port number.

    Raises:
        ValueError: If ``value`` is not a decimal integer in ``0..65535``.
    """
    text = value.strip()
    if not text.isdigit():
        raise ValueError(f"{value!r} is not an unsigned integer")
    port = int(text)
    if port > 65535:
        raise ValueError(f"{port} is out of range 0-65535")
    return port


def split_bind_address(value: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6]:port``) into its parts.

    Raises:
        ValueError: If the port is missing or invalid, or the host is empty.
    """
    host, sep, port = value.strip().rpartition(":")
    if not sep or not host:
        raise ValueError(f"{value!r} is not a host:port address")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if not host:
        raise ValueError(f"{value!r} has an empty host")
    return host, parse_port(port)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``).

    Raises:
        MissingVariableError: A required variable is unset or blank.
        InvalidValueError: A variable is set to something unparsable.
    """
    env = os.environ if environ is None else environ

    def get(name: str, default: str | None = None) -> str | None:
        value = env.get(name)
        return default if value is None else value

    def require(name: str) -> str:
        value = env.get(name)
        if value is None or not value.strip():
            raise MissingVariableError(name)
        return value

    def get_int(name: str, default: int) -> int:
        raw = get(name)
        if raw is None:
            return default
        try:
            return parse_port(raw) if name == "SMTP_PORT" else int(raw.strip())
        except ValueError as exc:
            raise InvalidValueError(name, str(exc)) from exc

    def get_float(name: str, default: float) -> float:
        raw = get(name)
        if raw is None:
            return default
        try:
            return float(raw.strip())
        except ValueError as exc:
            raise InvalidValueError(name, str(exc)) from exc

    smtp_from_raw = require("SMTP_FROM")
    try:
        smtp_from = Mailbox.parse(smtp_from_raw)
    except ValueError as exc:
        raise InvalidValueError("SMTP_FROM", "not a valid email") from exc

    smtp_port = get_int("SMTP_PORT", DEFAULT_SMTP_PORT)

    http_bind = get("HTTP_BIND", DEFAULT_HTTP_BIND).strip()
    try:
        split_bind_address(http_bind)
    except ValueError as exc:
        raise InvalidValueError("HTTP_BIND", str(exc)) from exc

    smtp_timeout = get_float("SMTP_TIMEOUT", DEFAULT_SMTP_TIMEOUT)
    if smtp_timeout <= 0:
        raise InvalidValueError("SMTP_TIMEOUT", "must be positive")
    smtp_pool_ttl = get_int("SMTP_POOL_TTL", DEFAULT_POOL_TTL)
    if smtp_pool_ttl < 0:
        raise InvalidValueError("SMTP_POOL_TTL", "must not be negative")

    tls = parse_bool(get("SMTP_TLS"))

    return Settings(
        http_bind=http_bind,
        smtp_host=require("SMTP_HOST").strip(),
        smtp_port=smtp_port,
        smtp_username=require("SMTP_USERNAME"),
        smtp_password=require("SMTP_PASSWORD"),
        smtp_from=smtp_from,
        smtp_use_tls=True if tls is None else tls,
        smtp_timeout=smtp_timeout,
        smtp_pool_ttl=smtp_pool_ttl,
    )

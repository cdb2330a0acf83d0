# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Lightweight asyncio-friendly SMTP connection pool.

The pool is bound to a single relay (host, port, credentials, TLS policy) for
its whole life. Callers check a connection out with :meth:`SMTPPool.connection`,
use it exclusively, and hand it back when the block exits cleanly. A
connection that raised while checked out is closed instead of being returned.

The pool automatically handles connection lifecycle management including:
- TTL-based expiration of idle connections
- Health checking via SMTP NOOP before reuse
- Graceful cleanup of stale connections

Example:
    Sending through the pool::

        pool = SMTPPool(RelayParams("smtp.example.com", 587, "user", "secret", TlsMode.STARTTLS))

        async with pool.connection() as smtp:
            await smtp.send_message(message)

        await pool.close()
"""

from __future__ import annotations

import asyncio
import enum
import ssl
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import aiosmtplib

from .logger import get_logger

logger = get_logger("smtp_bridge.smtp_pool")


class TlsMode(str, enum.Enum):
    """How the connection to the relay is secured.

    Attributes:
        IMPLICIT: TLS from the first byte (typically port 465).
        STARTTLS: Plain connect, then a mandatory STARTTLS upgrade.
        NONE: Plain SMTP, no encryption. Only for trusted relays.
    """

    IMPLICIT = "implicit"
    STARTTLS = "starttls"
    NONE = "none"


@dataclass(frozen=True)
class RelayParams:
    """Connection parameters shared by every connection of a pool."""

    host: str
    port: int
    user: str | None
    password: str | None
    tls_mode: TlsMode
    timeout: float = 10.0
    tls_context: ssl.SSLContext | None = None


class SMTPPool:
    """Asyncio-compatible SMTP connection pool for one relay.

    Attributes:
        params: The relay every connection is opened against.
        ttl: Maximum idle age in seconds before a connection is discarded.
        max_idle: Maximum number of idle connections kept around.
        idle: Idle connections with the time they were last released.
        lock: Asyncio lock guarding :attr:`idle`.
    """

    def __init__(self, params: RelayParams, ttl: int = 300, max_idle: int = 8):
        self.params = params
        self.ttl = ttl
        self.max_idle = max_idle
        self.idle: list[tuple[aiosmtplib.SMTP, float]] = []
        self.lock = asyncio.Lock()
        self._closed = False

    async def _connect(self) -> aiosmtplib.SMTP:
        """Open a new SMTP connection and authenticate if credentials are set.

        Raises:
            asyncio.TimeoutError: If connecting takes longer than the timeout.
            aiosmtplib.SMTPException: If connection or authentication fails.
        """
        p = self.params
        # Port 465: implicit TLS (use_tls=True, start_tls=False)
        # STARTTLS: start_tls=True makes the upgrade mandatory
        # No TLS: plain connection, the server's STARTTLS offer is ignored
        if p.tls_mode is TlsMode.IMPLICIT:
            smtp = aiosmtplib.SMTP(
                hostname=p.host, port=p.port, use_tls=True, start_tls=False,
                tls_context=p.tls_context, timeout=p.timeout,
            )
        elif p.tls_mode is TlsMode.STARTTLS:
            smtp = aiosmtplib.SMTP(
                hostname=p.host, port=p.port, use_tls=False, start_tls=True,
                tls_context=p.tls_context, timeout=p.timeout,
            )
        else:
            smtp = aiosmtplib.SMTP(hostname=p.host, port=p.port, use_tls=False, start_tls=False, timeout=p.timeout)

        async def _do_connect():
            await smtp.connect()
            if p.user and p.password:
                await smtp.login(p.user, p.password)

        # aiosmtplib applies the timeout per command; bound the whole handshake too
        try:
            await asyncio.wait_for(_do_connect(), timeout=p.timeout * 1.5)
        except BaseException:
            smtp.close()
            raise
        logger.debug("Opened SMTP connection to %s:%s (%s)", p.host, p.port, p.tls_mode.value)
        return smtp

    async def _is_alive(self, smtp: aiosmtplib.SMTP) -> bool:
        """Return ``True`` when the connection answers NOOP with 250."""
        try:
            code, _ = await asyncio.wait_for(smtp.noop(), timeout=5.0)
            return code == 250
        except Exception:
            return False

    async def _discard(self, smtp: aiosmtplib.SMTP) -> None:
        """Close ``smtp``, ignoring errors from an already broken connection."""
        try:
            await smtp.quit()
        except Exception:
            smtp.close()

    async def acquire(self) -> aiosmtplib.SMTP:
        """Return a healthy idle connection, or open a new one."""
        while True:
            async with self.lock:
                entry = self.idle.pop() if self.idle else None
            if entry is None:
                return await self._connect()
            smtp, released_at = entry
            if (time.time() - released_at) < self.ttl and await self._is_alive(smtp):
                return smtp
            await self._discard(smtp)

    async def release(self, smtp: aiosmtplib.SMTP) -> None:
        """Give ``smtp`` back to the pool, or close it when the pool is full."""
        async with self.lock:
            if not self._closed and smtp.is_connected and len(self.idle) < self.max_idle:
                self.idle.append((smtp, time.time()))
                return
        await self._discard(smtp)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosmtplib.SMTP]:
        """Check out a connection for exclusive use within the block."""
        smtp = await self.acquire()
        try:
            yield smtp
        except BaseException:
            await asyncio.shield(self._discard(smtp))
            raise
        await self.release(smtp)

    async def cleanup(self) -> None:
        """Close idle connections that expired or fail the health check."""
        now = time.time()
        async with self.lock:
            items, self.idle = self.idle, []

        keep: list[tuple[aiosmtplib.SMTP, float]] = []
        try:
            while items:
                smtp, released_at = items[0]
                if (now - released_at) <= self.ttl and await self._is_alive(smtp):
                    keep.append(items.pop(0))
                else:
                    await self._discard(smtp)
                    items.pop(0)
        finally:
            # unchecked connections go back too, so close() still sees them
            async with self.lock:
                if self._closed:
                    leftovers = keep + items
                else:
                    self.idle.extend(keep + items)
                    leftovers = []
            for smtp, _released_at in leftovers:
                smtp.close()

    async def close(self) -> None:
        """Close every idle connection and stop pooling new ones."""
        async with self.lock:
            self._closed = True
            items, self.idle = self.idle, []
        for smtp, _released_at in items:
            await self._discard(smtp)

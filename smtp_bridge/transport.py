# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP transport bound to a single relay.

:func:`build_transport` turns :class:`~smtp_bridge.config.Settings` into a
:class:`MailTransport`. Construction is pure: it validates the shape of the
relay configuration and prepares the TLS context, but never opens a socket.
The resulting transport is shared by every request handler.
"""

from __future__ import annotations

import asyncio
import ipaddress
import re
import ssl
from email.message import EmailMessage

import aiosmtplib

from .config import Settings
from .errors import DeliveryError, TlsSetupError
from .logger import get_logger
from .smtp_pool import RelayParams, SMTPPool, TlsMode

logger = get_logger("smtp_bridge.transport")

IMPLICIT_TLS_PORT = 465

_HOST_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def is_valid_relay_host(host: str) -> bool:
    """Return ``True`` for an IP literal or an RFC 1123 hostname."""
    candidate = host.strip("[]")
    try:
        ipaddress.ip_address(candidate)
        return True
    except ValueError:
        pass
    name = host.rstrip(".")
    if not name or len(name) > 253:
        return False
    return all(_HOST_LABEL.match(label) for label in name.split("."))


class MailTransport:
    """Deliver messages through one relay.

    Safe to share between concurrent requests: every :meth:`send` checks out
    its own connection from the underlying pool.
    """

    def __init__(self, pool: SMTPPool):
        self._pool = pool

    @property
    def params(self) -> RelayParams:
        return self._pool.params

    async def send(self, message: EmailMessage) -> None:
        """Send ``message`` and wait for the relay's acknowledgement.

        Raises:
            DeliveryError: The relay could not be reached or refused the message.
        """
        try:
            async with self._pool.connection() as smtp:
                await smtp.send_message(message)
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as exc:
            raise DeliveryError(f"{type(exc).__name__}: {exc}") from exc

    async def cleanup(self) -> None:
        await self._pool.cleanup()

    async def close(self) -> None:
        """Close pooled connections; called on application shutdown."""
        await self._pool.close()


def build_transport(settings: Settings) -> MailTransport:
    """Create the shared transport described by ``settings``.

    With TLS enabled the relay must be a valid hostname or IP literal, and the
    connection is encrypted either from the start (port 465) or through a
    mandatory STARTTLS upgrade. With TLS disabled the transport connects in
    plain text.

    Raises:
        TlsSetupError: TLS is enabled and the host is not usable for TLS.
    """
    host = settings.smtp_host
    if settings.smtp_use_tls:
        if not is_valid_relay_host(host):
            raise TlsSetupError(host, "not a valid hostname")
        try:
            context = ssl.create_default_context()
        except ssl.SSLError as exc:
            raise TlsSetupError(host, str(exc)) from exc
        mode = TlsMode.IMPLICIT if settings.smtp_port == IMPLICIT_TLS_PORT else TlsMode.STARTTLS
    else:
        logger.warning("TLS disabled: SMTP traffic to %s:%s is unencrypted", host, settings.smtp_port)
        context = None
        mode = TlsMode.NONE

    params = RelayParams(
        host=host,
        port=settings.smtp_port,
        user=settings.smtp_username,
        password=settings.smtp_password,
        tls_mode=mode,
        timeout=settings.smtp_timeout,
        tls_context=context,
    )
    return MailTransport(SMTPPool(params, ttl=settings.smtp_pool_ttl))

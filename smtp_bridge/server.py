# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""ASGI application wiring for uvicorn.

Usage:
    uvicorn smtp_bridge.server:app_factory --factory --host 127.0.0.1 --port 8080

Configuration is read from the environment, see :mod:`smtp_bridge.config`.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .api import create_app
from .config import Settings, load_settings
from .logger import get_logger
from .transport import MailTransport, build_transport

logger = get_logger("smtp_bridge.server")

CLEANUP_INTERVAL = 60.0


async def _cleanup_loop(transport: MailTransport, interval: float) -> None:
    """Periodically close stale idle SMTP connections."""
    while True:
        await asyncio.sleep(interval)
        try:
            await transport.cleanup()
        except Exception as exc:
            logger.exception("SMTP pool cleanup failed: %s", exc)


def build_app(settings: Settings, transport: MailTransport | None = None) -> FastAPI:
    """Create the application for ``settings``.

    Raises:
        TransportError: The transport cannot be built from ``settings``.
    """
    if transport is None:
        transport = build_transport(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Run the pool janitor and close SMTP connections on shutdown."""
        janitor = asyncio.create_task(_cleanup_loop(transport, CLEANUP_INTERVAL))
        try:
            yield
        finally:
            janitor.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await janitor
            await transport.close()

    return create_app(transport, settings.smtp_from, lifespan=lifespan)


def app_factory() -> FastAPI:
    """Uvicorn ``--factory`` entry point: build the app from the environment."""
    return build_app(load_settings())


def run_server(settings: Settings, host: str | None = None, port: int | None = None) -> None:
    """Build the transport and serve until the process is terminated."""
    app = build_app(settings)
    bind_host = host or settings.http_host
    bind_port = settings.http_port if port is None else port
    logger.info(
        "starting server (addr=%s:%s, relay=%s:%s, tls=%s)",
        bind_host, bind_port, settings.smtp_host, settings.smtp_port, settings.smtp_use_tls,
    )
    uvicorn.run(app, host=bind_host, port=bind_port, log_config=None)

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
aiohttp Server Lifecycle.

Wraps the ``web.AppRunner``/``web.TCPSite`` pair shared by the web service
and RPC adapters. ``start()`` and ``stop()`` are idempotent; binding
failures raise TransportStartupError chained to the original OSError.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from aiohttp import web

from omnibase_dispatch.enums import EnumTransportKind
from omnibase_dispatch.errors import ModelDispatchErrorContext, TransportStartupError

logger = logging.getLogger(__name__)


class ManagedHttpServer:
    """
    One aiohttp application bound to one host/port.

    Attributes:
        host: Bind address
        port: Requested port (0 picks a free port)
        transport: Transport kind used in errors and logs
    """

    def __init__(self, host: str, port: int, transport: EnumTransportKind) -> None:
        self.host = host
        self.port = port
        self.transport = transport
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._is_running: bool = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def bound_port(self) -> int | None:
        """Return the port actually bound, or None when not running."""
        if self._runner is None:
            return None
        for address in self._runner.addresses:
            if isinstance(address, tuple) and len(address) >= 2:
                return int(address[1])
        return self.port

    async def start(self, app: web.Application) -> None:
        """Start serving ``app``.

        Raises:
            TransportStartupError: If the listener cannot be bound.
        """
        if self._is_running:
            logger.debug("%s server already started, skipping", self.transport.value)
            return

        correlation_id = uuid4()
        context = ModelDispatchErrorContext(
            transport=self.transport,
            operation="listen",
            target_name=f"{self.host}:{self.port}",
            correlation_id=correlation_id,
        )

        try:
            self._runner = web.AppRunner(app, handle_signals=False)
            await self._runner.setup()
            self._site = web.TCPSite(self._runner, self.host, self.port)
            await self._site.start()
        except OSError as e:
            await self._cleanup()
            error_msg = f"Failed to bind {self.transport.value} listener on {self.host}:{self.port}: {e}"
            logger.exception(
                "%s (correlation_id=%s)",
                error_msg,
                correlation_id,
                extra={"error_type": type(e).__name__, "errno": e.errno},
            )
            raise TransportStartupError(error_msg, context=context) from e

        self._is_running = True
        logger.info(
            "%s listener started on %s:%s (correlation_id=%s)",
            self.transport.value,
            self.host,
            self.bound_port,
            correlation_id,
            extra={
                "transport": self.transport.value,
                "host": self.host,
                "port": self.bound_port,
            },
        )

    async def stop(self) -> None:
        """Stop the listener and release the runner. Never raises."""
        if not self._is_running:
            logger.debug("%s server already stopped, skipping", self.transport.value)
            return
        await self._cleanup()
        self._is_running = False
        logger.info(
            "%s listener stopped",
            self.transport.value,
            extra={"transport": self.transport.value},
        )

    async def _cleanup(self) -> None:
        if self._site is not None:
            try:
                await self._site.stop()
            except Exception as e:
                logger.warning(
                    "Error stopping TCPSite during shutdown",
                    extra={"error_type": type(e).__name__},
                )
        if self._runner is not None:
            try:
                await self._runner.cleanup()
            except Exception as e:
                logger.warning(
                    "Error cleaning up AppRunner during shutdown",
                    extra={"error_type": type(e).__name__},
                )
        self._site = None
        self._runner = None


__all__ = ["ManagedHttpServer"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Socket RPC Client.

Counterpart of ``RpcTransportAdapter``. Calls are correlated by a fresh
request id; responses may arrive in any order.

Usage:
    >>> async with RpcClient("ws://localhost:8080/") as client:
    ...     total = await client.call("add", 2, 3)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from uuid import uuid4

import aiohttp
from pydantic import ValidationError

from omnibase_dispatch.enums import EnumTransportKind
from omnibase_dispatch.errors import (
    ModelDispatchErrorContext,
    RpcCallError,
    RpcTimeoutError,
    TransportStartupError,
)
from omnibase_dispatch.models import ModelRpcResponse
from omnibase_dispatch.transports.payload_codec import to_jsonable

logger = logging.getLogger(__name__)

DEFAULT_CALL_TIMEOUT_SECONDS = 10.0


class RpcClient:
    """
    WebSocket RPC client with per-call timeouts.

    Attributes:
        url: WebSocket URL of the RPC endpoint
        default_timeout: Seconds to wait for a response when ``call()``
            receives no explicit timeout
    """

    def __init__(
        self,
        url: str,
        *,
        default_timeout: float = DEFAULT_CALL_TIMEOUT_SECONDS,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.url = url
        self.default_timeout = default_timeout
        self._session = session
        self._owns_session = session is None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader: asyncio.Task[None] | None = None
        self._pending: dict[str, asyncio.Future[Any]] = {}

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def connect(self) -> None:
        """Open the socket and start the response reader.

        Raises:
            TransportStartupError: If the endpoint cannot be reached.
        """
        if self.is_connected:
            return
        if self._session is None:
            self._session = aiohttp.ClientSession()
        try:
            self._ws = await self._session.ws_connect(self.url)
        except (aiohttp.ClientError, OSError) as e:
            context = ModelDispatchErrorContext(
                transport=EnumTransportKind.RPC,
                operation="connect",
                target_name=self.url,
                correlation_id=uuid4(),
            )
            await self._close_session()
            raise TransportStartupError(
                f"Failed to connect RPC client to {self.url}: {e}", context=context
            ) from e
        self._reader = asyncio.create_task(self._read_responses())
        logger.debug("RPC client connected", extra={"url": self.url})

    async def call(self, method: str, *args: Any, timeout: float | None = None) -> Any:
        """Invoke ``method`` remotely and return its result.

        Raises:
            RpcTimeoutError: If no response arrives within ``timeout``.
            RpcCallError: If the remote side answers with an error.
        """
        if not self.is_connected:
            await self.connect()
        assert self._ws is not None

        request_id = uuid4().hex
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        frame = {
            "type": "call",
            "method": method,
            "args": to_jsonable(list(args)),
            "id": request_id,
        }
        limit = self.default_timeout if timeout is None else timeout
        try:
            await self._ws.send_json(frame)
            return await asyncio.wait_for(future, timeout=limit)
        except TimeoutError as e:
            raise RpcTimeoutError(
                f"RPC call '{method}' timed out after {limit}s",
                method=method,
                request_id=request_id,
            ) from e
        finally:
            self._pending.pop(request_id, None)

    async def close(self) -> None:
        """Close the socket and fail every pending call."""
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._reader is not None:
            await self._reader
            self._reader = None
        self._ws = None
        self._fail_pending("RPC connection closed")
        await self._close_session()

    async def __aenter__(self) -> RpcClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _read_responses(self) -> None:
        assert self._ws is not None
        async for message in self._ws:
            if message.type is not aiohttp.WSMsgType.TEXT:
                if message.type is aiohttp.WSMsgType.ERROR:
                    break
                continue
            try:
                response = ModelRpcResponse.model_validate_json(message.data)
            except ValidationError:
                logger.warning(
                    "Ignoring malformed RPC response frame",
                    extra={"url": self.url},
                )
                continue
            self._resolve(response)
        self._fail_pending("RPC connection closed")

    def _resolve(self, response: ModelRpcResponse) -> None:
        if response.id is None:
            logger.warning(
                "RPC server rejected a frame: %s",
                response.error,
                extra={"url": self.url},
            )
            return
        future = self._pending.get(response.id)
        if future is None or future.done():
            logger.debug(
                "Dropping RPC response for unknown or expired id %s",
                response.id,
                extra={"request_id": response.id},
            )
            return
        if response.is_error:
            future.set_exception(
                RpcCallError(str(response.error), request_id=response.id)
            )
        else:
            future.set_result(response.result)

    def _fail_pending(self, reason: str) -> None:
        for request_id, future in list(self._pending.items()):
            if not future.done():
                future.set_exception(RpcCallError(reason, request_id=request_id))

    async def _close_session(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None


__all__ = ["RpcClient"]

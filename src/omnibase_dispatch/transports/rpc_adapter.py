# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Socket RPC Transport Adapter.

Serves ``rpc`` bindings, and plain handlers registered with
``ServiceOrchestrator.method()``, over a WebSocket endpoint.

Wire Format (JSON text frames):
    Request:  ``{"type": "call", "method": "add", "args": [2, 3], "id": "x1"}``
    Response: ``{"id": "x1", "result": 5}`` or ``{"id": "x1", "error": "..."}``

    - Invalid frames are answered with ``{"id": null, "error": ...}``
    - Unknown methods: ``"Method '<name>' not found"``
    - Handler failures: the exception message; ``on_error`` is emitted

Concurrency:
    Every frame is processed in its own task, so the calls of one
    connection interleave. Exactly one response is sent per request id.
    The adapter tracks no timeouts; a response for a closed socket is
    logged and dropped.

Argument Mapping:
    Handlers without parameter bindings receive ``args`` positionally.
    With bindings, ``body`` is the ``args`` list (or its sole element when
    exactly one object was passed) and ``path`` maps ``"0"``, ``"1"``, ...
    to the individual args.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aiohttp import WSCloseCode, WSMsgType, web
from pydantic import ValidationError

from omnibase_dispatch.enums import (
    EnumDispatchStatus,
    EnumParameterSource,
    EnumProtocolTag,
    EnumTransportKind,
)
from omnibase_dispatch.models import (
    ModelDispatchOutcome,
    ModelMethodBinding,
    ModelRegistryEntry,
    ModelRpcCallContext,
    ModelRpcRequest,
    ModelRpcResponse,
    ModelTransportConfig,
)
from omnibase_dispatch.transports.base import TransportAdapter
from omnibase_dispatch.transports.http_server import ManagedHttpServer
from omnibase_dispatch.transports.payload_codec import to_jsonable

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_PATH = "/"


class RpcTransportAdapter(TransportAdapter):
    """
    WebSocket RPC transport.

    Options:
        host: Bind address (default ``0.0.0.0``)
        port: Bind port (default 8080; 0 picks a free port)
        path: WebSocket route path (default ``/``)
    """

    config_key = "rpc"
    transport_kind = EnumTransportKind.RPC
    owned_tags = frozenset({EnumProtocolTag.RPC})
    supported_sources = frozenset(
        {
            EnumParameterSource.BODY,
            EnumParameterSource.PATH,
            EnumParameterSource.CONTEXT,
            EnumParameterSource.REQUEST,
        }
    )

    def __init__(self) -> None:
        super().__init__()
        self._server: ManagedHttpServer | None = None
        self._clients: set[web.WebSocketResponse] = set()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def host(self) -> str:
        return str(self.options.get("host", DEFAULT_HOST))

    @property
    def port(self) -> int:
        return int(self.options.get("port", DEFAULT_PORT))

    @property
    def path(self) -> str:
        return str(self.options.get("path", DEFAULT_PATH))

    @property
    def bound_port(self) -> int | None:
        return self._server.bound_port if self._server is not None else None

    async def initialize(self, config: ModelTransportConfig) -> None:
        await super().initialize(config)
        self._server = ManagedHttpServer(self.host, self.port, self.transport_kind)

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get(self.path, self._handle_connection)
        return app

    async def listen(self) -> None:
        if self._server is None:
            self._server = ManagedHttpServer(self.host, self.port, self.transport_kind)
        await self._server.start(self.build_app())

    async def close(self) -> None:
        # In-flight calls are not awaited.
        for ws in list(self._clients):
            await ws.close(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")
        if self._tasks:
            logger.info(
                "Closing RPC transport with %d calls in flight",
                len(self._tasks),
                extra={"transport": self.transport_kind.value},
            )
        if self._server is not None:
            await self._server.stop()

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    async def _handle_connection(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self._clients.add(ws)
        logger.info(
            "RPC client connected to %s",
            self.orchestrator.name,
            extra={"transport": self.transport_kind.value, "remote": request.remote},
        )
        try:
            async for message in ws:
                if message.type is WSMsgType.TEXT:
                    self._spawn(self.handle_frame(ws, message.data, remote=request.remote))
                elif message.type is WSMsgType.BINARY:
                    self._spawn(
                        self.handle_frame(
                            ws, message.data.decode("utf-8", "replace"), remote=request.remote
                        )
                    )
                elif message.type is WSMsgType.ERROR:
                    logger.warning(
                        "RPC client error for %s [client: %s]",
                        self.orchestrator.name,
                        request.remote,
                        extra={
                            "transport": self.transport_kind.value,
                            "error_type": type(ws.exception()).__name__,
                        },
                    )
        finally:
            self._clients.discard(ws)
            logger.info(
                "RPC client disconnected from %s",
                self.orchestrator.name,
                extra={"transport": self.transport_kind.value},
            )
        return ws

    def _spawn(self, coro: Any) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def handle_frame(
        self, ws: web.WebSocketResponse, raw: str, *, remote: str | None = None
    ) -> None:
        """Process one frame and send exactly one response."""
        response = await self.process_frame(raw, websocket=ws, remote=remote)
        await self._send(ws, response)

    async def process_frame(
        self, raw: str, *, websocket: Any = None, remote: str | None = None
    ) -> ModelRpcResponse:
        """Turn one request frame into its response frame."""
        try:
            payload = json.loads(raw)
        except ValueError:
            return ModelRpcResponse.failure(None, "Invalid JSON message")
        try:
            call = ModelRpcRequest.model_validate(payload)
        except ValidationError:
            return ModelRpcResponse.failure(None, "Invalid RPC request format")

        route = self.resolve(EnumProtocolTag.RPC, call.method)
        if route is None:
            return ModelRpcResponse.failure(call.id, f"Method '{call.method}' not found")
        entry, binding = route

        try:
            outcome = await self._dispatch_call(
                call, entry, binding, payload, websocket=websocket, remote=remote
            )
        except Exception:
            logger.exception(
                "RPC call %s (id=%s) failed outside the handler",
                call.method,
                call.id,
                extra={
                    "transport": self.transport_kind.value,
                    "method": call.method,
                    "request_id": call.id,
                },
            )
            return ModelRpcResponse.failure(call.id, "Method execution error")
        return self._to_response(call, outcome)

    async def _dispatch_call(
        self,
        call: ModelRpcRequest,
        entry: ModelRegistryEntry,
        binding: ModelMethodBinding | None,
        payload: Any,
        *,
        websocket: Any,
        remote: str | None,
    ) -> ModelDispatchOutcome:
        call_context = ModelRpcCallContext(
            request_id=call.id, method=call.method, remote=remote, websocket=websocket
        )
        if entry.parameters:
            sole_object = len(call.args) == 1 and isinstance(call.args[0], dict)
            view = self.build_view(
                body=call.args[0] if sole_object else list(call.args),
                path_params={str(index): value for index, value in enumerate(call.args)},
                raw_request=payload,
                raw_context=call_context,
            )
            return await self._dispatch(
                entry, binding, view, transport_context=call_context
            )
        view = self.build_view(
            body=list(call.args), raw_request=payload, raw_context=call_context
        )
        return await self._dispatch(
            entry, binding, view, transport_context=call_context, args=call.args
        )

    @staticmethod
    def _to_response(call: ModelRpcRequest, outcome: ModelDispatchOutcome) -> ModelRpcResponse:
        if outcome.status is EnumDispatchStatus.VALIDATION_FAILED:
            details = "; ".join(
                f"{field}: {', '.join(messages)}"
                for field, messages in outcome.field_errors.items()
            )
            return ModelRpcResponse.failure(call.id, f"Validation failed: {details}")
        if outcome.status is EnumDispatchStatus.HANDLER_ERROR:
            return ModelRpcResponse.failure(
                call.id, outcome.error_message or "Method execution error"
            )
        return ModelRpcResponse.success(call.id, to_jsonable(outcome.result))

    async def _send(self, ws: web.WebSocketResponse, response: ModelRpcResponse) -> None:
        if ws.closed:
            logger.warning(
                "Dropping RPC response for closed socket (id=%s)",
                response.id,
                extra={"transport": self.transport_kind.value, "request_id": response.id},
            )
            return
        try:
            await ws.send_json(response.to_wire())
        except ConnectionResetError:
            logger.warning(
                "RPC socket reset before response could be sent (id=%s)",
                response.id,
                extra={"transport": self.transport_kind.value, "request_id": response.id},
            )


__all__ = ["RpcTransportAdapter"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Web Service Transport Adapter.

Serves ``http-endpoint``, ``stream-endpoint`` and ``socket-event`` bindings
from one aiohttp application.

HTTP Endpoints:
    Route ``(verb, base_path + path)``; ``{id}`` and ``:id`` placeholders
    are both accepted. JSON and form bodies are parsed; uploaded files go
    to the ``files`` source. The handler result is returned as JSON, with
    status, headers and cookies taken from the mutable response slot
    (``EnumParameterSource.RESPONSE``); a handler returning an aiohttp
    response has it returned verbatim.

    - Validation failure: 400 ``{"message": "Validation failed", "errors": {...}}``
    - Unknown route: 404 ``{"message": "Not Found"}``
    - Handler failure: 500 ``{"message": "Internal Server Error"}``

Stream Endpoints:
    A ``text/event-stream`` response is prepared before invocation and is
    the response slot. If the handler returns an (async) iterable, every
    item is written as a ``data:`` frame; ``ModelSseEvent`` items carry
    ``event``/``id``. Failures after the stream started are written as an
    ``error`` event.

Socket Events (``websocket.enabled`` option):
    WebSocket route at ``websocket.path``. Frames ``{"event": name, "data":
    ...}``; replies ``{"event", "payload"}``; failures ``{"event", "error"[,
    "details"]}``. Several handlers may share one event; each one runs.
"""

from __future__ import annotations

import json
import logging
import re
import weakref
from collections.abc import AsyncIterable, Iterable, Mapping
from typing import Any

from aiohttp import WSCloseCode, WSMsgType, web
from pydantic import BaseModel

from omnibase_dispatch.enums import (
    EnumDispatchStatus,
    EnumParameterSource,
    EnumProtocolTag,
    EnumTransportKind,
)
from omnibase_dispatch.errors import HandlerExecutionError, ModelDispatchErrorContext
from omnibase_dispatch.models import (
    ModelDispatchOutcome,
    ModelHttpContext,
    ModelMethodBinding,
    ModelSocketEventContext,
    ModelSseEvent,
    ModelTransportConfig,
)
from omnibase_dispatch.runtime.invocation_context import InvocationContext
from omnibase_dispatch.transports.base import TransportAdapter
from omnibase_dispatch.transports.http_server import ManagedHttpServer
from omnibase_dispatch.transports.payload_codec import to_jsonable

logger = logging.getLogger(__name__)

_COLON_PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")
_SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}
_FORM_CONTENT_TYPES = frozenset({"multipart/form-data", "application/x-www-form-urlencoded"})
_SLOT_HEADER_SKIP = frozenset({"content-type", "content-length"})

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_WEBSOCKET_PATH = "/ws"


def join_route_path(base_path: str, path: str) -> str:
    """Join ``base_path`` and ``path`` and convert ``:name`` placeholders."""
    endpoint = path if path.startswith("/") else f"/{path}"
    if endpoint == "/":
        endpoint = ""
    full = base_path.rstrip("/") + endpoint
    full = full or "/"
    return _COLON_PLACEHOLDER.sub(r"{\1}", full)


def flatten_multidict(values: Any) -> dict[str, Any]:
    """Return a dict; keys with several values map to a list."""
    flat: dict[str, Any] = {}
    for key in values.keys():
        if key in flat:
            continue
        items = values.getall(key)
        flat[key] = items[0] if len(items) == 1 else list(items)
    return flat


@web.middleware
async def json_not_found_middleware(
    request: web.Request, handler: Any
) -> web.StreamResponse:
    """Answer unknown routes and wrong verbs with JSON instead of HTML."""
    try:
        return await handler(request)
    except web.HTTPNotFound:
        return web.json_response({"message": "Not Found"}, status=404)
    except web.HTTPMethodNotAllowed as e:
        return web.json_response(
            {"message": "Method Not Allowed"},
            status=405,
            headers={"Allow": ",".join(sorted(e.allowed_methods))},
        )


class WebServiceTransportAdapter(TransportAdapter):
    """
    HTTP, SSE and WebSocket event transport on aiohttp.

    Options:
        host: Bind address (default ``0.0.0.0``)
        port: Bind port (default 3000; 0 picks a free port)
        base_path: Prefix for every endpoint path
        websocket: ``{"enabled": bool, "path": str}``
    """

    config_key = "webservice"
    transport_kind = EnumTransportKind.WEBSERVICE
    owned_tags = frozenset(
        {
            EnumProtocolTag.HTTP_ENDPOINT,
            EnumProtocolTag.STREAM_ENDPOINT,
            EnumProtocolTag.SOCKET_EVENT,
        }
    )
    supported_sources = frozenset(EnumParameterSource)

    def __init__(self) -> None:
        super().__init__()
        self._server: ManagedHttpServer | None = None
        self._sockets: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @property
    def host(self) -> str:
        return str(self.options.get("host", DEFAULT_HOST))

    @property
    def port(self) -> int:
        return int(self.options.get("port", DEFAULT_PORT))

    @property
    def base_path(self) -> str:
        return str(self.options.get("base_path", ""))

    @property
    def websocket_enabled(self) -> bool:
        websocket = self.options.get("websocket") or {}
        return bool(websocket.get("enabled", False))

    @property
    def websocket_path(self) -> str:
        websocket = self.options.get("websocket") or {}
        return str(websocket.get("path", DEFAULT_WEBSOCKET_PATH))

    @property
    def bound_port(self) -> int | None:
        return self._server.bound_port if self._server is not None else None

    def route_key(self, binding: ModelMethodBinding) -> str:
        if binding.tag is EnumProtocolTag.SOCKET_EVENT:
            return binding.identifier
        verb = binding.http_method or "GET"
        return f"{verb} {join_route_path(self.base_path, binding.identifier)}"

    async def initialize(self, config: ModelTransportConfig) -> None:
        await super().initialize(config)
        self._server = ManagedHttpServer(self.host, self.port, self.transport_kind)

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def build_app(self) -> web.Application:
        """Build the aiohttp application for the registered routes."""
        app = web.Application(middlewares=[json_not_found_middleware])
        for tag in (EnumProtocolTag.HTTP_ENDPOINT, EnumProtocolTag.STREAM_ENDPOINT):
            for _, binding in self.routes(tag):
                key = self.route_key(binding)
                verb, path = key.split(" ", 1)
                app.router.add_route(verb, path, self._make_handler(tag, key))
                logger.debug(
                    "Registered %s route %s",
                    tag.value,
                    key,
                    extra={"transport": self.transport_kind.value, "route": key},
                )
        if self.websocket_enabled:
            app.router.add_get(self.websocket_path, self._handle_websocket)
        return app

    def _make_handler(self, tag: EnumProtocolTag, key: str) -> Any:
        async def handler(request: web.Request) -> web.StreamResponse:
            route = self.resolve(tag, key)
            if route is None:
                raise web.HTTPNotFound()
            entry, binding = route
            if tag is EnumProtocolTag.STREAM_ENDPOINT:
                return await self._handle_stream(request, entry, binding, key)
            return await self._handle_http(request, entry, binding, key)

        return handler

    async def listen(self) -> None:
        if self._server is None:
            self._server = ManagedHttpServer(self.host, self.port, self.transport_kind)
        await self._server.start(self.build_app())

    async def close(self) -> None:
        for ws in list(self._sockets):
            await ws.close(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")
        if self._server is not None:
            await self._server.stop()

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _read_body(self, request: web.Request) -> tuple[Any, dict[str, Any]]:
        if not request.body_exists:
            return None, {}
        if request.content_type in _FORM_CONTENT_TYPES:
            form = await request.post()
            body: dict[str, Any] = {}
            files: dict[str, Any] = {}
            for key in form.keys():
                values = form.getall(key)
                target = files if isinstance(values[0], web.FileField) else body
                target[key] = values[0] if len(values) == 1 else list(values)
            return body, files
        if request.content_type == "application/json" or request.content_type.endswith("+json"):
            return await request.json(), {}
        text = await request.text()
        return (text or None), {}

    def _build_http_view(
        self,
        request: web.Request,
        body: Any,
        files: Mapping[str, Any],
        response: web.StreamResponse,
        key: str,
    ) -> tuple[Any, ModelHttpContext]:
        http_context = ModelHttpContext(request=request, response=response, route=key)
        view = self.build_view(
            body=body,
            path_params=dict(request.match_info),
            query_params=flatten_multidict(request.query),
            headers=dict(request.headers),
            cookies=dict(request.cookies),
            session=request.get("session"),
            files=files,
            raw_request=request,
            raw_response=response,
            raw_context=http_context,
        )
        return view, http_context

    async def _handle_http(
        self,
        request: web.Request,
        entry: Any,
        binding: ModelMethodBinding,
        key: str,
    ) -> web.StreamResponse:
        try:
            body, files = await self._read_body(request)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return web.json_response({"message": "Invalid JSON body"}, status=400)

        slot = web.Response()
        view, http_context = self._build_http_view(request, body, files, slot, key)
        outcome = await self._dispatch(entry, binding, view, transport_context=http_context)
        return self._http_response(outcome, slot)

    def _http_response(
        self, outcome: ModelDispatchOutcome, slot: web.Response
    ) -> web.StreamResponse:
        if outcome.status is EnumDispatchStatus.VALIDATION_FAILED:
            return web.json_response(
                {"message": "Validation failed", "errors": outcome.field_errors},
                status=400,
            )
        if outcome.status is EnumDispatchStatus.HANDLER_ERROR:
            return web.json_response({"message": "Internal Server Error"}, status=500)

        result = outcome.result
        if isinstance(result, web.StreamResponse):
            return result
        response = web.json_response(to_jsonable(result), status=slot.status)
        for name, value in slot.headers.items():
            if name.lower() not in _SLOT_HEADER_SKIP:
                response.headers.add(name, value)
        for name, morsel in slot.cookies.items():
            response.cookies[name] = morsel
        return response

    # ------------------------------------------------------------------
    # Server-sent events
    # ------------------------------------------------------------------

    async def _handle_stream(
        self,
        request: web.Request,
        entry: Any,
        binding: ModelMethodBinding,
        key: str,
    ) -> web.StreamResponse:
        try:
            body, files = await self._read_body(request)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return web.json_response({"message": "Invalid JSON body"}, status=400)

        stream = web.StreamResponse(headers=_SSE_HEADERS)
        await stream.prepare(request)
        view, http_context = self._build_http_view(request, body, files, stream, key)
        context = self.new_context(view, transport_context=http_context)
        outcome = await self._dispatch(entry, binding, view, context=context)

        try:
            if outcome.status is EnumDispatchStatus.VALIDATION_FAILED:
                await stream.write(
                    _sse_frame(
                        ModelSseEvent(
                            event="error",
                            data={"message": "Validation failed", "errors": outcome.field_errors},
                        )
                    )
                )
            elif outcome.status is EnumDispatchStatus.HANDLER_ERROR:
                await stream.write(
                    _sse_frame(
                        ModelSseEvent(event="error", data={"message": "Internal Server Error"})
                    )
                )
            else:
                await self._stream_result(stream, outcome.result, entry, key, context)
            await stream.write_eof()
        except ConnectionResetError:
            logger.debug(
                "SSE client disconnected from %s",
                key,
                extra={"transport": self.transport_kind.value, "route": key},
            )
        return stream

    async def _stream_result(
        self,
        stream: web.StreamResponse,
        result: Any,
        entry: Any,
        key: str,
        context: InvocationContext,
    ) -> None:
        """Write ``result`` as frames; a failing generator ends with an ``error`` event."""
        try:
            await self._write_stream_result(stream, result)
        except ConnectionResetError:
            raise
        except Exception as e:
            failure = HandlerExecutionError(
                f"Stream handler {entry.name!r} failed: {type(e).__name__}",
                context=ModelDispatchErrorContext(
                    transport=self.transport_kind,
                    operation="stream",
                    target_name=entry.name,
                    correlation_id=context.correlation_id,
                ),
            )
            failure.__cause__ = e
            logger.exception(
                "Stream handler %s failed on %s (correlation_id=%s)",
                entry.name,
                key,
                context.correlation_id,
                extra={
                    "method_name": entry.name,
                    "transport": self.transport_kind.value,
                    "route": key,
                    "error_type": type(e).__name__,
                },
            )
            await self._report_error(failure, context)
            await stream.write(
                _sse_frame(ModelSseEvent(event="error", data={"message": "Internal Server Error"}))
            )

    async def _write_stream_result(self, stream: web.StreamResponse, result: Any) -> None:
        if result is None or result is stream:
            return
        if isinstance(result, AsyncIterable):
            async for item in result:
                await stream.write(_sse_frame(item))
        elif isinstance(result, Iterable) and not isinstance(
            result, (str, bytes, Mapping, BaseModel)
        ):
            for item in result:
                await stream.write(_sse_frame(item))
        else:
            await stream.write(_sse_frame(result))

    # ------------------------------------------------------------------
    # WebSocket events
    # ------------------------------------------------------------------

    async def _handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self._sockets.add(ws)
        logger.info(
            "WebSocket client connected via %s",
            self.websocket_path,
            extra={"transport": self.transport_kind.value, "remote": request.remote},
        )
        try:
            async for message in ws:
                if message.type is WSMsgType.TEXT:
                    await self._handle_event_frame(ws, request, message.data)
                elif message.type is WSMsgType.BINARY:
                    await _send_json(ws, {"error": "Invalid message format, expected string."})
                elif message.type is WSMsgType.ERROR:
                    logger.warning(
                        "WebSocket error on %s",
                        self.websocket_path,
                        extra={
                            "transport": self.transport_kind.value,
                            "error_type": type(ws.exception()).__name__,
                        },
                    )
        finally:
            self._sockets.discard(ws)
            logger.info(
                "WebSocket client disconnected from %s",
                self.websocket_path,
                extra={"transport": self.transport_kind.value},
            )
        return ws

    async def _handle_event_frame(
        self, ws: web.WebSocketResponse, request: web.Request, raw: str
    ) -> None:
        try:
            frame = json.loads(raw)
        except ValueError:
            await _send_json(ws, {"error": "Invalid JSON message."})
            return
        if not isinstance(frame, dict) or not frame.get("event"):
            await _send_json(ws, {"error": 'Invalid message format, "event" field is missing.'})
            return

        event = str(frame["event"])
        routes = self.resolve_all(EnumProtocolTag.SOCKET_EVENT, event)
        if not routes:
            await _send_json(ws, {"event": event, "error": f"No handler for event '{event}'"})
            return

        for entry, binding in routes:
            event_context = ModelSocketEventContext(event=event, websocket=ws, request=request)
            view = self.build_view(
                body=frame.get("data"),
                path_params=dict(request.match_info),
                query_params=flatten_multidict(request.query),
                headers=dict(request.headers),
                cookies=dict(request.cookies),
                session=request.get("session"),
                raw_request=request,
                raw_response=ws,
                raw_context=event_context,
            )
            outcome = await self._dispatch(
                entry, binding, view, transport_context=event_context
            )
            if outcome.status is EnumDispatchStatus.VALIDATION_FAILED:
                await _send_json(
                    ws,
                    {
                        "event": event,
                        "error": "Validation failed",
                        "details": outcome.field_errors,
                    },
                )
            elif outcome.status is EnumDispatchStatus.HANDLER_ERROR:
                await _send_json(
                    ws, {"event": event, "error": "Handler or middleware execution failed."}
                )
            elif outcome.result is not None:
                await _send_json(ws, {"event": event, "payload": to_jsonable(outcome.result)})


def _sse_frame(item: Any) -> bytes:
    if isinstance(item, ModelSseEvent):
        return item.model_copy(update={"data": to_jsonable(item.data)}).encode()
    return ModelSseEvent(data=to_jsonable(item)).encode()


async def _send_json(ws: web.WebSocketResponse, payload: dict[str, Any]) -> None:
    if ws.closed:
        return
    try:
        await ws.send_json(payload)
    except ConnectionResetError:
        logger.debug("WebSocket closed before reply could be sent")


__all__ = [
    "WebServiceTransportAdapter",
    "flatten_multidict",
    "join_route_path",
    "json_not_found_middleware",
]

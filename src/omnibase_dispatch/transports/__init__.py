# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Transports Module.

Exports:
    TransportAdapter: Base class for protocol adapters
    StdioTransportAdapter: Command line and interactive shell transport
    WebServiceTransportAdapter: HTTP, SSE and WebSocket event transport
    RpcTransportAdapter: WebSocket RPC server transport
    RpcClient: WebSocket RPC client
    ManagedHttpServer: Shared aiohttp listener lifecycle
"""

from omnibase_dispatch.transports.base import Route, TransportAdapter
from omnibase_dispatch.transports.http_server import ManagedHttpServer
from omnibase_dispatch.transports.rpc_adapter import RpcTransportAdapter
from omnibase_dispatch.transports.rpc_client import RpcClient
from omnibase_dispatch.transports.stdio_adapter import StdioTransportAdapter
from omnibase_dispatch.transports.webservice_adapter import WebServiceTransportAdapter

__all__: list[str] = [
    "ManagedHttpServer",
    "Route",
    "RpcClient",
    "RpcTransportAdapter",
    "StdioTransportAdapter",
    "TransportAdapter",
    "WebServiceTransportAdapter",
]

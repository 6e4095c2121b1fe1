# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Transport Kind Enumeration.

Identifies the transport adapter handling a request. Used for error
context, logging and the invocation context.
"""

from enum import Enum


class EnumTransportKind(str, Enum):
    """Transport adapters known to the dispatch runtime.

    Attributes:
        STDIO: Command line / REPL transport
        WEBSERVICE: HTTP, server-sent events and WebSocket events
        RPC: JSON socket RPC over WebSocket
        RUNTIME: Orchestrator-internal operations (bootstrap, lifecycle)
    """

    STDIO = "stdio"
    WEBSERVICE = "webservice"
    RPC = "rpc"
    RUNTIME = "runtime"


__all__ = ["EnumTransportKind"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol Tag Enumeration.

Defines the protocol families a service method can be bound to. Each
method binding is keyed by its tag, so one method can carry one binding
per tag at the same time.
"""

from enum import Enum


class EnumProtocolTag(str, Enum):
    """Protocol families a handler method can be bound to.

    Attributes:
        COMMAND: Command-line command (stdio transport)
        TOOL_CALL: Tool invocation exposed over the stdio transport
        SOCKET_EVENT: Named WebSocket event (webservice transport)
        HTTP_ENDPOINT: HTTP verb + path endpoint (webservice transport)
        STREAM_ENDPOINT: Server-sent event stream endpoint (webservice transport)
        RPC: Socket RPC method (rpc transport)
    """

    COMMAND = "command"
    TOOL_CALL = "tool-call"
    SOCKET_EVENT = "socket-event"
    HTTP_ENDPOINT = "http-endpoint"
    STREAM_ENDPOINT = "stream-endpoint"
    RPC = "rpc"


__all__ = ["EnumProtocolTag"]

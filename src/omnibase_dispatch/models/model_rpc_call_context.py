# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""RPC Call Context Model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ModelRpcCallContext(BaseModel):
    """Context of one inbound RPC call.

    Attributes:
        request_id: Correlation id from the request frame
        method: Called method name
        remote: Peer address, if known
        websocket: Underlying aiohttp WebSocketResponse
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    request_id: str
    method: str
    remote: str | None = None
    websocket: Any = None


__all__ = ["ModelRpcCallContext"]

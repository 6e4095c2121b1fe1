# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Socket Event Context Model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ModelSocketEventContext(BaseModel):
    """Context of one inbound WebSocket event frame.

    Attributes:
        event: Event name from the frame
        websocket: aiohttp WebSocketResponse the frame arrived on
        request: Upgrade request of the connection
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event: str
    websocket: Any = None
    request: Any = None


__all__ = ["ModelSocketEventContext"]

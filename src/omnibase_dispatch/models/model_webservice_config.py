# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Web Service Transport Config Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from omnibase_dispatch.models.model_websocket_config import ModelWebSocketConfig


class ModelWebServiceConfig(BaseModel):
    """Runtime configuration of the HTTP/SSE/WebSocket transport.

    Attributes:
        enabled: Whether the web service transport is registered
        host: Bind address
        port: Bind port (0 picks a free port)
        base_path: Prefix prepended to every endpoint path
        websocket: Socket-event listener settings
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=0, le=65535)
    base_path: str = Field(default="")
    websocket: ModelWebSocketConfig = Field(default_factory=ModelWebSocketConfig)


__all__ = ["ModelWebServiceConfig"]

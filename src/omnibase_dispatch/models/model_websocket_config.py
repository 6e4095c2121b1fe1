# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""WebSocket Event Listener Config Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelWebSocketConfig(BaseModel):
    """Socket-event listener mounted on the web service.

    Attributes:
        enabled: Mount the WebSocket route
        path: Route path of the WebSocket endpoint
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=False)
    path: str = Field(default="/ws", pattern=r"^/")


__all__ = ["ModelWebSocketConfig"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""RPC Transport Config Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelRpcConfig(BaseModel):
    """Runtime configuration of the socket RPC transport.

    Attributes:
        enabled: Whether the RPC transport is registered
        host: Bind address
        port: Bind port (0 picks a free port)
        path: WebSocket route path
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=0, le=65535)
    path: str = Field(default="/", pattern=r"^/")


__all__ = ["ModelRpcConfig"]

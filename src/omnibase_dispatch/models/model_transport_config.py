# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Transport Config Model.

Effective configuration handed to ``TransportAdapter.initialize()`` after
the orchestrator merged the registered options with the service's class
binding.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelTransportConfig(BaseModel):
    """Effective transport configuration.

    Attributes:
        enabled: Disabled transports are neither initialized nor started
        options: Adapter-specific options (host, port, interactive, ...)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True, description="Whether the transport runs")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Adapter-specific options",
    )


__all__ = ["ModelTransportConfig"]

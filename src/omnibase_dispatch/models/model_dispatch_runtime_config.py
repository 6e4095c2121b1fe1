# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Runtime Config Model.

Root of the YAML runtime configuration read by ``load_runtime_config()``.

Example YAML:
    service_name: calculator
    stdio:
      interactive: true
    webservice:
      port: 3000
      websocket:
        enabled: true
    rpc:
      port: 8080
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from omnibase_dispatch.models.model_rpc_config import ModelRpcConfig
from omnibase_dispatch.models.model_stdio_config import ModelStdioConfig
from omnibase_dispatch.models.model_webservice_config import ModelWebServiceConfig


class ModelDispatchRuntimeConfig(BaseModel):
    """Runtime configuration of one dispatch service process."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_name: str = Field(default="dispatch-service", min_length=1)
    stdio: ModelStdioConfig = Field(default_factory=ModelStdioConfig)
    webservice: ModelWebServiceConfig = Field(default_factory=ModelWebServiceConfig)
    rpc: ModelRpcConfig = Field(default_factory=ModelRpcConfig)
    shutdown_grace_period_seconds: float = Field(default=0.0, ge=0.0, le=60.0)


__all__ = ["ModelDispatchRuntimeConfig"]

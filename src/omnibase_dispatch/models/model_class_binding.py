# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Class Binding Model.

Per-service-type transport enablement, recorded by class decorators such
as ``@webservice(...)`` or ``@stdio(...)`` and read at bootstrap.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelClassBinding(BaseModel):
    """Transport configuration declared on a service class.

    Attributes:
        enabled: Whether the transport is enabled for this service
        options: Transport-specific options merged over the options the
            transport was registered with
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(
        default=True,
        description="Whether the transport is enabled for this service",
    )
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Transport-specific options",
    )


__all__ = ["ModelClassBinding"]

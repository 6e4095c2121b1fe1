# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Parameter Binding Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from omnibase_dispatch.enums import EnumParameterSource


class ModelParameterBinding(BaseModel):
    """Data source of one handler parameter.

    Attributes:
        index: 0-based position in the handler's argument list
        source: Where the value comes from
        key: Optional sub-key extracting a single field of the source
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    index: int = Field(ge=0, description="0-based argument position")
    source: EnumParameterSource = Field(description="Where the value comes from")
    key: str | None = Field(
        default=None,
        description="Sub-key extracting a single field of the source",
    )


__all__ = ["ModelParameterBinding"]

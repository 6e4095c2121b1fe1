# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""RPC Request Frame Model.

Wire format of one socket RPC call::

    {"type": "call", "method": "add", "args": [2, 3], "id": "1"}
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ModelRpcRequest(BaseModel):
    """Inbound RPC call frame.

    Attributes:
        type: Frame type; only ``"call"`` is defined
        method: Name of the remote method
        args: Positional arguments
        id: Caller-chosen correlation identifier
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["call"]
    method: str = Field(min_length=1)
    args: list[Any] = Field(default_factory=list)
    id: str = Field(min_length=1)


__all__ = ["ModelRpcRequest"]

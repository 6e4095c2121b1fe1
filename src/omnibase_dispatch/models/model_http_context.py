# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HTTP Context Model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ModelHttpContext(BaseModel):
    """Context of one HTTP or stream endpoint request.

    Attributes:
        request: aiohttp request
        response: Mutable response slot; handlers may set status, headers
            and cookies on it, or write to it for stream endpoints
        route: ``"<VERB> <path>"`` of the matched route
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    request: Any = None
    response: Any = None
    route: str


__all__ = ["ModelHttpContext"]

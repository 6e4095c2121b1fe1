# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Canonical Request View Model.

The transport-neutral record an adapter builds from a raw inbound message
before argument binding. Each adapter declares which sources it can fill
through ``available_sources``; the binder warns about the others.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from omnibase_dispatch.enums import EnumParameterSource


class ModelRequestView(BaseModel):
    """Transport-neutral view of one inbound message.

    Attributes:
        body: Payload (JSON body, parsed CLI flags, RPC args)
        path_params: Path parameters / CLI positionals
        query_params: Query parameters / parsed CLI flags
        headers: Request headers (any Mapping, case-insensitive lookup applies)
        cookies: Request cookies
        session: Session object, if the transport has one
        files: Uploaded files keyed by form field
        raw_request: Raw transport request object
        raw_response: Raw transport response object
        raw_context: Transport-specific context object
        available_sources: Sources this transport can provide
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    body: Any = None
    path_params: Mapping[str, Any] = Field(default_factory=dict)
    query_params: Mapping[str, Any] = Field(default_factory=dict)
    headers: Mapping[str, Any] = Field(default_factory=dict)
    cookies: Mapping[str, Any] = Field(default_factory=dict)
    session: Any = None
    files: Mapping[str, Any] = Field(default_factory=dict)
    raw_request: Any = None
    raw_response: Any = None
    raw_context: Any = None
    available_sources: frozenset[EnumParameterSource] = Field(
        default_factory=lambda: frozenset(EnumParameterSource),
    )


__all__ = ["ModelRequestView"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Method Binding Model.

One protocol binding on one service method. A method carries at most one
binding per protocol tag; bindings for different tags coexist.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from omnibase_dispatch.enums import EnumProtocolTag

_HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})


class ModelMethodBinding(BaseModel):
    """Binding of a method to one protocol.

    Attributes:
        tag: Protocol family of the binding
        identifier: Command name, event name, endpoint path, RPC or tool name
        http_method: HTTP verb for http/stream endpoints (upper case)
        payload_schema: Optional pydantic model or TypeAdapter-compatible type
            validating the body-bound argument
        disabled: Disabled bindings are never routed
        middleware: Binding-specific middleware, innermost in the chain
        description: Human-readable description used in help output
        options: Raw decorator options kept for adapters
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    tag: EnumProtocolTag = Field(description="Protocol family of the binding")
    identifier: str = Field(
        min_length=1,
        description="Command name, event name, endpoint path, RPC or tool name",
    )
    http_method: str | None = Field(
        default=None,
        description="HTTP verb for http/stream endpoints",
    )
    payload_schema: Any = Field(
        default=None,
        description="Schema validating the body-bound argument",
    )
    disabled: bool = Field(default=False, description="Disabled bindings are not routed")
    middleware: tuple[Any, ...] = Field(
        default=(),
        description="Binding-specific middleware",
    )
    description: str | None = Field(default=None, description="Help text")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw decorator options",
    )

    @field_validator("http_method")
    @classmethod
    def _normalize_http_method(cls, value: str | None) -> str | None:
        if value is None:
            return None
        upper = value.upper()
        if upper not in _HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {value!r}")
        return upper

    @property
    def has_schema(self) -> bool:
        """Return True if the binding declares a payload schema."""
        return self.payload_schema is not None


__all__ = ["ModelMethodBinding"]

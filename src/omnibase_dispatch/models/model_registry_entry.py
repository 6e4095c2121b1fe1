# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Registry Entry Model.

The compiled, transport-agnostic representation of one handler method,
produced once per service instance by the handler compiler. Adapters
route to entries; the dispatch pipeline invokes them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from omnibase_dispatch.enums import EnumParameterSource, EnumProtocolTag
from omnibase_dispatch.models.model_method_binding import ModelMethodBinding
from omnibase_dispatch.models.model_parameter_binding import ModelParameterBinding


class ModelRegistryEntry(BaseModel):
    """Compiled handler.

    Attributes:
        name: Method name (registry key)
        handler: Uniform callable ``(context, *args)`` returning a value or
            an awaitable
        bindings: Protocol bindings keyed by tag
        parameters: Parameter bindings, ordered by index
        middleware: Method-level middleware shared by all bindings
        arity: Number of positional arguments the handler declares
        variadic: True if the handler accepts ``*args``
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    handler: Callable[..., Any]
    bindings: Mapping[EnumProtocolTag, ModelMethodBinding] = Field(default_factory=dict)
    parameters: tuple[ModelParameterBinding, ...] = ()
    middleware: tuple[Any, ...] = ()
    arity: int = Field(default=0, ge=0)
    variadic: bool = False

    def get_binding(self, tag: EnumProtocolTag) -> ModelMethodBinding | None:
        """Return the enabled binding for ``tag``, or None."""
        binding = self.bindings.get(tag)
        if binding is None or binding.disabled:
            return None
        return binding

    def active_bindings(
        self, tags: Iterable[EnumProtocolTag]
    ) -> list[ModelMethodBinding]:
        """Return the enabled bindings whose tag is in ``tags``."""
        wanted = set(tags)
        return [
            binding
            for tag, binding in self.bindings.items()
            if tag in wanted and not binding.disabled
        ]

    def has_source(self, source: EnumParameterSource) -> bool:
        """Return True if any parameter binds to ``source``."""
        return any(param.source is source for param in self.parameters)


__all__ = ["ModelRegistryEntry"]

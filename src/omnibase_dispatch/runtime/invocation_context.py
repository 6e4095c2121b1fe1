# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Invocation Context.

Per-request mutable state threaded through the middleware chain and
passed as the first argument of every compiled handler. A context is
created for exactly one inbound message and discarded after the response;
it is never shared or reused.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from omnibase_dispatch.enums import EnumTransportKind
from omnibase_dispatch.errors import MiddlewareChainError

if TYPE_CHECKING:
    from omnibase_dispatch.models import (
        ModelMethodBinding,
        ModelRegistryEntry,
        ModelRequestView,
    )


class InvocationContext:
    """
    Mutable state of one invocation.

    Attributes:
        service_name: Name of the service handling the request
        transport: Transport the request arrived on
        methods: Read-only snapshot of the service's registry entries
        request: Canonical request view (mutable slot)
        response: Raw response object, or the short-circuit result set by a
            middleware that does not call ``call_next``
        transport_context: Transport-specific context model
        entry: Registry entry being invoked
        binding: Active method binding, None for plain RPC methods
        state: Free-form per-request storage for middleware
        correlation_id: Identifier used in logs for this request
    """

    def __init__(
        self,
        *,
        service_name: str,
        transport: EnumTransportKind,
        methods: Mapping[str, ModelRegistryEntry],
        request: ModelRequestView | None = None,
        response: Any = None,
        transport_context: Any = None,
        entry: ModelRegistryEntry | None = None,
        binding: ModelMethodBinding | None = None,
        correlation_id: UUID | None = None,
    ) -> None:
        self.service_name = service_name
        self.transport = transport
        self.methods: Mapping[str, ModelRegistryEntry] = MappingProxyType(dict(methods))
        self.request = request
        self.response = response
        self.transport_context = transport_context
        self.entry = entry
        self.binding = binding
        self.state: dict[str, Any] = {}
        self.correlation_id: UUID = correlation_id or uuid4()
        self._next: Callable[[], Awaitable[Any]] | None = None

    @property
    def method_name(self) -> str | None:
        return self.entry.name if self.entry is not None else None

    def set_next(self, continuation: Callable[[], Awaitable[Any]] | None) -> None:
        """Install the continuation of the currently running middleware."""
        self._next = continuation

    async def next(self) -> Any:
        """Run the rest of the chain; same as the middleware's ``call_next``."""
        if self._next is None:
            raise MiddlewareChainError(
                "No middleware continuation is active",
                method_name=self.method_name,
            )
        return await self._next()

    def __repr__(self) -> str:
        return (
            f"InvocationContext(service={self.service_name!r}, "
            f"transport={self.transport.value}, method={self.method_name!r}, "
            f"correlation_id={self.correlation_id})"
        )


__all__ = ["InvocationContext"]

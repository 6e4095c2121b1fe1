# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Transport Adapter Base.

Common base of every transport adapter. An adapter owns one listener
(stdin, an HTTP server, a WebSocket server), translates raw inbound
messages into a ``ModelRequestView`` and hands them to the shared
dispatch pipeline through ``_dispatch()``. Adapters never share in-flight
state with each other.

Lifecycle (driven by ``ServiceOrchestrator``):
    1. ``attach(orchestrator)`` when registered
    2. ``initialize(config)`` at bootstrap with the merged configuration
    3. ``register_entry(entry)`` for every compiled handler
    4. ``listen()`` on start
    5. ``close()`` on stop

Routing:
    Entries are indexed by ``(protocol tag, route key)`` for the tags the
    adapter owns. The route key is the binding identifier unless the
    adapter overrides ``route_key()`` (the web service adds the verb).
    Several entries may share one route key; ``resolve()`` returns the
    last registered one, ``resolve_all()`` returns all of them (fan-out).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from omnibase_dispatch.enums import (
    EnumDispatchStatus,
    EnumLifecycleEvent,
    EnumParameterSource,
    EnumProtocolTag,
    EnumTransportKind,
)
from omnibase_dispatch.errors import DispatchError, ModelDispatchErrorContext
from omnibase_dispatch.models import (
    ModelDispatchOutcome,
    ModelMethodBinding,
    ModelRegistryEntry,
    ModelRequestView,
    ModelTransportConfig,
)
from omnibase_dispatch.runtime.invocation_context import InvocationContext

if TYPE_CHECKING:
    from omnibase_dispatch.runtime.orchestrator import ServiceOrchestrator

logger = logging.getLogger(__name__)

Route = tuple[ModelRegistryEntry, ModelMethodBinding]


class TransportAdapter(ABC):
    """
    Abstract transport adapter.

    Subclasses set the class attributes and implement ``listen``/``close``.

    Attributes:
        config_key: Key of the adapter in class bindings and runtime config
        transport_kind: Transport identifier carried by contexts and errors
        owned_tags: Protocol tags this adapter routes
        supported_sources: Parameter sources this adapter can fill
    """

    config_key: ClassVar[str]
    transport_kind: ClassVar[EnumTransportKind]
    owned_tags: ClassVar[frozenset[EnumProtocolTag]]
    supported_sources: ClassVar[frozenset[EnumParameterSource]]

    def __init__(self) -> None:
        self._orchestrator: ServiceOrchestrator | None = None
        self._config: ModelTransportConfig = ModelTransportConfig()
        self._entries: dict[str, ModelRegistryEntry] = {}
        self._routes: dict[tuple[EnumProtocolTag, str], list[Route]] = {}
        self._initialized: bool = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def attach(self, orchestrator: ServiceOrchestrator) -> None:
        self._orchestrator = orchestrator

    @property
    def orchestrator(self) -> ServiceOrchestrator:
        if self._orchestrator is None:
            raise DispatchError(
                f"{type(self).__name__} is not attached to an orchestrator",
                context=self._error_context("attach"),
            )
        return self._orchestrator

    @property
    def config(self) -> ModelTransportConfig:
        return self._config

    @property
    def options(self) -> dict[str, Any]:
        return self._config.options

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self, config: ModelTransportConfig) -> None:
        """Store the effective configuration. Subclasses may extend."""
        self._config = config
        self._entries.clear()
        self._routes.clear()
        self._initialized = True
        logger.debug(
            "Initialized %s transport",
            self.config_key,
            extra={"transport": self.transport_kind.value},
        )

    @abstractmethod
    async def listen(self) -> None:
        """Start accepting messages."""

    @abstractmethod
    async def close(self) -> None:
        """Stop accepting messages. Must be idempotent."""

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def route_key(self, binding: ModelMethodBinding) -> str:
        return binding.identifier

    def register_entry(self, entry: ModelRegistryEntry) -> None:
        """Index ``entry`` under every enabled binding this adapter owns."""
        previous = self._entries.get(entry.name)
        if previous is not None:
            self._unindex(previous)
        self._entries[entry.name] = entry
        for binding in entry.active_bindings(self.owned_tags):
            key = (binding.tag, self.route_key(binding))
            self._routes.setdefault(key, []).append((entry, binding))

    def _unindex(self, entry: ModelRegistryEntry) -> None:
        for key, routes in list(self._routes.items()):
            kept = [route for route in routes if route[0].name != entry.name]
            if kept:
                self._routes[key] = kept
            else:
                del self._routes[key]

    def resolve(self, tag: EnumProtocolTag, identifier: str) -> Route | None:
        routes = self._routes.get((tag, identifier))
        return routes[-1] if routes else None

    def resolve_all(self, tag: EnumProtocolTag, identifier: str) -> Sequence[Route]:
        return tuple(self._routes.get((tag, identifier), ()))

    def routes(self, tag: EnumProtocolTag | None = None) -> list[Route]:
        """Return the last route per key, optionally filtered by tag."""
        return [
            routes[-1]
            for (route_tag, _), routes in self._routes.items()
            if routes and (tag is None or route_tag is tag)
        ]

    @property
    def entries(self) -> dict[str, ModelRegistryEntry]:
        return self._entries

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def build_view(self, **fields: Any) -> ModelRequestView:
        return ModelRequestView(available_sources=self.supported_sources, **fields)

    def new_context(
        self, view: ModelRequestView, *, transport_context: Any = None
    ) -> InvocationContext:
        """Create the invocation context for one inbound message."""
        orchestrator = self.orchestrator
        return InvocationContext(
            service_name=orchestrator.name,
            transport=self.transport_kind,
            methods=orchestrator.get_methods(),
            request=view,
            response=view.raw_response,
            transport_context=transport_context,
        )

    async def _dispatch(
        self,
        entry: ModelRegistryEntry,
        binding: ModelMethodBinding | None,
        view: ModelRequestView,
        *,
        transport_context: Any = None,
        args: Sequence[Any] | None = None,
        context: InvocationContext | None = None,
    ) -> ModelDispatchOutcome:
        """Run ``entry`` through the pipeline and report failures to ``on_error``."""
        if context is None:
            context = self.new_context(view, transport_context=transport_context)
        outcome = await self.orchestrator.pipeline.dispatch(
            context, entry, binding, view, args=args
        )
        if outcome.status is EnumDispatchStatus.HANDLER_ERROR and outcome.error is not None:
            await self._report_error(outcome.error, context)
        return outcome

    async def _report_error(self, error: BaseException, context: InvocationContext) -> None:
        await self.orchestrator.emit(EnumLifecycleEvent.ON_ERROR, error, context)

    def _error_context(
        self, operation: str, target_name: str | None = None
    ) -> ModelDispatchErrorContext:
        return ModelDispatchErrorContext(
            transport=self.transport_kind,
            operation=operation,
            target_name=target_name,
        )


__all__ = ["Route", "TransportAdapter"]

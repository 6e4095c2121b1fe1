# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Service Orchestrator.

Owns the transport adapters of one service instance and drives their
lifecycle::

    bootstrap() -> start() -> [serving] -> stop()

Bootstrap:
    1. Compile the service's registry entries (once)
    2. Freeze the binding registry
    3. For each registered adapter, merge its registered options with the
       service's class binding for the adapter's ``config_key`` (class
       values override; nested option dicts merge one level deep) and skip
       adapters whose effective ``enabled`` is False
    4. Initialize the remaining adapters and register every entry
    5. Call the service's optional ``on_module_init()``

Start/Stop:
    ``start()`` emits ``on_before_start``, bootstraps if needed, starts every
    active adapter concurrently and emits ``on_after_start``. Startup errors
    (TransportStartupError) propagate. ``stop()`` emits ``on_before_stop``,
    calls the service's optional ``on_application_shutdown()``, closes the
    adapters and emits ``on_after_stop``. In-flight invocations are neither
    awaited nor cancelled.

Lifecycle Hooks:
    Hook errors are logged and re-emitted to ``on_error`` subscribers. An
    error raised by an ``on_error`` subscriber is only logged.

Example:
    .. code-block:: python

        orchestrator = ServiceOrchestrator(Calculator(), registry=registry)
        orchestrator.register_transport(RpcTransportAdapter(), {"port": 8080})
        orchestrator.use(timing_middleware)
        exit_code = await orchestrator.run()
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from omnibase_dispatch.enums import EnumLifecycleEvent, EnumProtocolTag
from omnibase_dispatch.errors import BindingConfigurationError
from omnibase_dispatch.models import (
    ModelDispatchRuntimeConfig,
    ModelRegistryEntry,
    ModelTransportConfig,
)
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.dispatch_pipeline import DispatchPipeline
from omnibase_dispatch.runtime.handler_compiler import (
    compile_handlers,
    compile_plain_handler,
    register_entry,
)

if TYPE_CHECKING:
    from omnibase_dispatch.transports.base import TransportAdapter

logger = logging.getLogger(__name__)

LifecycleHandler = Callable[..., Any]


def merge_transport_config(
    registered: Mapping[str, Any],
    registered_enabled: bool,
    class_binding: Any,
) -> ModelTransportConfig:
    """Merge registered adapter options with a service class binding.

    Class binding values override registered ones. Option values that are
    dicts on both sides are merged one level deep.
    """
    options: dict[str, Any] = {
        key: dict(value) if isinstance(value, Mapping) else value
        for key, value in registered.items()
    }
    enabled = registered_enabled
    if class_binding is not None:
        enabled = class_binding.enabled
        for key, value in class_binding.options.items():
            current = options.get(key)
            if isinstance(current, dict) and isinstance(value, Mapping):
                options[key] = {**current, **value}
            else:
                options[key] = value
    return ModelTransportConfig(enabled=enabled, options=options)


class ServiceOrchestrator:
    """
    Lifecycle owner for one service instance and its transport adapters.

    Attributes:
        service: The service instance
        name: Service name used in contexts and logs
        config: Runtime configuration, if the service was built from one
    """

    def __init__(
        self,
        service: object,
        *,
        registry: BindingRegistry,
        name: str | None = None,
        config: ModelDispatchRuntimeConfig | None = None,
    ) -> None:
        self.service = service
        self.config = config
        if name is not None:
            self.name = name
        elif config is not None:
            self.name = config.service_name
        else:
            self.name = type(service).__name__
        self._registry = registry
        self._pipeline = DispatchPipeline()
        self._registered: list[tuple[TransportAdapter, dict[str, Any], bool]] = []
        self._active: list[TransportAdapter] = []
        self._methods: dict[str, ModelRegistryEntry] = {}
        self._methods_view: Mapping[str, ModelRegistryEntry] = MappingProxyType(
            self._methods
        )
        self._hooks: dict[EnumLifecycleEvent, list[LifecycleHandler]] = {
            event: [] for event in EnumLifecycleEvent
        }
        self._bootstrapped: bool = False
        self._is_running: bool = False
        self._shutdown_event: asyncio.Event | None = None
        self._exit_code: int = 0

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def registry(self) -> BindingRegistry:
        return self._registry

    @property
    def pipeline(self) -> DispatchPipeline:
        return self._pipeline

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def active_transports(self) -> list[TransportAdapter]:
        return list(self._active)

    @property
    def transports(self) -> list[TransportAdapter]:
        return [adapter for adapter, _, _ in self._registered]

    def register_transport(
        self,
        adapter: TransportAdapter,
        options: Mapping[str, Any] | None = None,
        *,
        enabled: bool = True,
    ) -> ServiceOrchestrator:
        """Register a transport adapter with its default options."""
        if self._bootstrapped:
            raise BindingConfigurationError(
                f"Cannot register transport {adapter.config_key!r} after bootstrap",
                service_name=self.name,
            )
        adapter.attach(self)
        self._registered.append((adapter, dict(options or {}), enabled))
        return self

    def use(self, middleware: Any) -> ServiceOrchestrator:
        """Append global middleware, outermost in every chain."""
        self._pipeline.global_middleware.append(middleware)
        return self

    def method(self, name: str, handler: Callable[..., Any]) -> ServiceOrchestrator:
        """Register a plain ``(context, *args)`` handler served over RPC.

        May be called after bootstrap; the entry is then registered with the
        active adapters right away.
        """
        entry = compile_plain_handler(name, handler)
        register_entry(self._methods, entry)
        if self._bootstrapped:
            for adapter in self._active:
                if EnumProtocolTag.RPC in adapter.owned_tags:
                    adapter.register_entry(entry)
        return self

    def get_method(self, name: str) -> ModelRegistryEntry | None:
        return self._methods.get(name)

    def get_methods(self) -> Mapping[str, ModelRegistryEntry]:
        """Return a read-only view of the registry entries."""
        return self._methods_view

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def on(
        self, event: EnumLifecycleEvent | str, handler: LifecycleHandler
    ) -> ServiceOrchestrator:
        self._hooks[EnumLifecycleEvent(event)].append(handler)
        return self

    async def emit(self, event: EnumLifecycleEvent | str, *args: Any) -> None:
        """Call every subscriber of ``event`` in registration order."""
        resolved = EnumLifecycleEvent(event)
        for handler in list(self._hooks[resolved]):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.exception(
                    "Lifecycle handler for %s failed in service %s",
                    resolved.value,
                    self.name,
                    extra={
                        "lifecycle_event": resolved.value,
                        "service_name": self.name,
                        "error_type": type(e).__name__,
                    },
                )
                if resolved is not EnumLifecycleEvent.ON_ERROR:
                    await self.emit(EnumLifecycleEvent.ON_ERROR, e, resolved.value)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def bootstrap(self) -> None:
        """Compile handlers and initialize adapters. Idempotent."""
        if self._bootstrapped:
            return

        compile_handlers(self.service, self._registry, self._methods)
        self._registry.freeze()

        class_bindings = self._registry.get_class_bindings(type(self.service))
        for adapter, options, enabled in self._registered:
            config = merge_transport_config(
                options, enabled, class_bindings.get(adapter.config_key)
            )
            if not config.enabled:
                logger.info(
                    "Transport %s disabled for service %s",
                    adapter.config_key,
                    self.name,
                    extra={"transport": adapter.config_key, "service_name": self.name},
                )
                continue
            await adapter.initialize(config)
            for entry in self._methods.values():
                adapter.register_entry(entry)
            self._active.append(adapter)

        self._bootstrapped = True
        await self._call_service_hook("on_module_init")

        logger.info(
            "Service %s bootstrapped with %d methods on %d transports",
            self.name,
            len(self._methods),
            len(self._active),
            extra={
                "service_name": self.name,
                "methods": list(self._methods),
                "transports": [adapter.config_key for adapter in self._active],
            },
        )

    async def start(self) -> None:
        """Bootstrap if needed and start every active adapter.

        Raises:
            TransportStartupError: If an adapter fails to bind its listener.
        """
        if self._is_running:
            logger.debug("Service %s already started, skipping", self.name)
            return

        await self.emit(EnumLifecycleEvent.ON_BEFORE_START)
        await self.bootstrap()
        self._shutdown_event = asyncio.Event()
        self._exit_code = 0

        results = await asyncio.gather(
            *(adapter.listen() for adapter in self._active),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            # Release the listeners that did come up before propagating.
            await self._close_adapters()
            raise failures[0]

        self._is_running = True
        logger.info(
            "Service %s started",
            self.name,
            extra={
                "service_name": self.name,
                "transports": [adapter.config_key for adapter in self._active],
            },
        )
        await self.emit(EnumLifecycleEvent.ON_AFTER_START)

    async def stop(self) -> None:
        """Close every adapter. In-flight invocations are not awaited. Idempotent."""
        if not self._is_running:
            logger.debug("Service %s already stopped, skipping", self.name)
            return

        logger.info(
            "Stopping service %s (in-flight invocations are not drained)",
            self.name,
            extra={"service_name": self.name},
        )
        await self.emit(EnumLifecycleEvent.ON_BEFORE_STOP)
        await self._call_service_hook("on_application_shutdown")
        await self._close_adapters()
        self._is_running = False
        if self._shutdown_event is not None:
            self._shutdown_event.set()
        await self.emit(EnumLifecycleEvent.ON_AFTER_STOP)
        logger.info("Service %s stopped", self.name, extra={"service_name": self.name})

    def request_shutdown(self, exit_code: int = 0) -> None:
        """Ask ``run()`` to stop the service and return ``exit_code``."""
        self._exit_code = exit_code
        if self._shutdown_event is not None:
            self._shutdown_event.set()

    async def wait_for_shutdown(self) -> int:
        if self._shutdown_event is None:
            return self._exit_code
        await self._shutdown_event.wait()
        return self._exit_code

    async def run(self) -> int:
        """Start, serve until ``request_shutdown()``, stop; return the exit code."""
        await self.start()
        try:
            exit_code = await self.wait_for_shutdown()
        finally:
            await self.stop()
        return exit_code

    async def _close_adapters(self) -> None:
        for adapter in self._active:
            try:
                await adapter.close()
            except Exception as e:
                logger.exception(
                    "Failed to close transport %s",
                    adapter.config_key,
                    extra={
                        "transport": adapter.config_key,
                        "service_name": self.name,
                        "error_type": type(e).__name__,
                    },
                )

    async def _call_service_hook(self, hook_name: str) -> None:
        hook = getattr(self.service, hook_name, None)
        if not callable(hook):
            return
        try:
            result = hook()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            if hook_name == "on_module_init":
                raise
            logger.exception(
                "Service hook %s failed in service %s",
                hook_name,
                self.name,
                extra={
                    "service_name": self.name,
                    "hook": hook_name,
                    "error_type": type(e).__name__,
                },
            )
            await self.emit(EnumLifecycleEvent.ON_ERROR, e, hook_name)


__all__ = ["ServiceOrchestrator", "merge_transport_config"]

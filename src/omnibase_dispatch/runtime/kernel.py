# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Dispatch Kernel - process entry point for dispatch services.

The kernel bootstraps one service process by:
    1. Configuring logging from DISPATCH_LOG_LEVEL
    2. Loading the runtime configuration (YAML file plus environment)
    3. Resolving the ``package.module:attr`` target into an orchestrator
    4. Installing SIGINT/SIGTERM handlers that request shutdown
    5. Starting the orchestrator and waiting for shutdown
    6. Stopping within ``shutdown_grace_period_seconds`` (0 waits without limit)

Targets:
    ``attr`` may name a ``ServiceOrchestrator``, a zero-argument factory
    returning one, or a service class. A service class is instantiated with
    no arguments and compiled against the module-level ``registry``
    (a ``BindingRegistry``); its transports are built from the runtime
    configuration.

Environment Variables:
    DISPATCH_LOG_LEVEL: Logging level (default: INFO)
    DISPATCH_TARGET: Target used by ``main()`` when no argument is given
    DISPATCH_CONFIG: Runtime config file used by ``main()``

Usage:
    # As a module
    python -m omnibase_dispatch.runtime.kernel examples.calculator:Calculator add 2 3

    # Through the CLI
    omnibase-dispatch run examples.calculator:Calculator -- add 2 3
"""

from __future__ import annotations

import asyncio
import importlib
import logging
import os
import signal
import sys
from collections.abc import Sequence
from pathlib import Path
from types import ModuleType
from typing import Any
from uuid import uuid4

from omnibase_dispatch.enums import EnumTransportKind
from omnibase_dispatch.errors import (
    DispatchConfigurationError,
    DispatchError,
    ModelDispatchErrorContext,
)
from omnibase_dispatch.models import ModelDispatchRuntimeConfig
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.config_loader import build_transports, load_runtime_config
from omnibase_dispatch.runtime.orchestrator import ServiceOrchestrator
from omnibase_dispatch.transports.stdio_adapter import StdioTransportAdapter

logger = logging.getLogger(__name__)

KERNEL_VERSION = "0.1.0"
REGISTRY_ATTR = "registry"


def _target_error(target: str, message: str) -> DispatchConfigurationError:
    context = ModelDispatchErrorContext(
        transport=EnumTransportKind.RUNTIME,
        operation="resolve_target",
        target_name=target,
        correlation_id=uuid4(),
    )
    return DispatchConfigurationError(message, context=context)


def resolve_target(target: str) -> tuple[ModuleType, Any]:
    """Import ``package.module:attr`` and return ``(module, attr value)``.

    Raises:
        DispatchConfigurationError: If the target is malformed or missing.
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise _target_error(
            target, f"Invalid target {target!r}: expected 'package.module:attr'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise _target_error(target, f"Cannot import module {module_name!r}: {e}") from e

    value: Any = module
    for part in attr_path.split("."):
        try:
            value = getattr(value, part)
        except AttributeError as e:
            raise _target_error(
                target, f"Module {module_name!r} has no attribute {attr_path!r}"
            ) from e
    return module, value


def find_registry(module: ModuleType, target: str) -> BindingRegistry:
    """Return the module-level ``registry`` of ``module``."""
    registry = getattr(module, REGISTRY_ATTR, None)
    if not isinstance(registry, BindingRegistry):
        raise _target_error(
            target,
            f"Module {module.__name__!r} must define a BindingRegistry named "
            f"{REGISTRY_ATTR!r} to serve a service class",
        )
    return registry


def build_orchestrator(
    target: str,
    *,
    config: ModelDispatchRuntimeConfig | None = None,
    argv: Sequence[str] | None = None,
) -> ServiceOrchestrator:
    """Resolve ``target`` into a ready-to-start orchestrator.

    Args:
        target: ``package.module:attr`` reference.
        config: Runtime configuration (defaults plus environment if None).
        argv: Command-line arguments for the stdio transport.

    Raises:
        DispatchConfigurationError: If the target cannot be resolved.
    """
    module, value = resolve_target(target)

    if isinstance(value, ServiceOrchestrator):
        return _forward_argv(value, argv)

    if isinstance(value, type):
        registry = find_registry(module, target)
        runtime_config = config if config is not None else load_runtime_config()
        orchestrator = ServiceOrchestrator(value(), registry=registry, config=runtime_config)
        for adapter, options in build_transports(
            runtime_config,
            registry,
            value,
            argv=list(argv) if argv is not None else None,
        ):
            orchestrator.register_transport(adapter, options)
        return orchestrator

    if callable(value):
        result = value()
        if isinstance(result, ServiceOrchestrator):
            return _forward_argv(result, argv)
        raise _target_error(
            target,
            f"Factory {target!r} returned {type(result).__name__}, "
            "expected ServiceOrchestrator",
        )

    raise _target_error(
        target,
        f"Target {target!r} is a {type(value).__name__}; expected an orchestrator, "
        "a factory or a service class",
    )


def _forward_argv(
    orchestrator: ServiceOrchestrator, argv: Sequence[str] | None
) -> ServiceOrchestrator:
    """Hand ``argv`` to stdio adapters that were built without explicit arguments."""
    if argv is not None:
        for adapter in orchestrator.transports:
            if isinstance(adapter, StdioTransportAdapter):
                adapter.set_argv(argv)
    return orchestrator


def _install_signal_handlers(orchestrator: ServiceOrchestrator) -> None:
    loop = asyncio.get_running_loop()

    def handle_shutdown(sig: signal.Signals) -> None:
        logger.info(
            "Received %s, initiating shutdown of %s",
            sig.name,
            orchestrator.name,
            extra={"service_name": orchestrator.name, "signal": sig.name},
        )
        orchestrator.request_shutdown(0)

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, handle_shutdown, sig)
    else:

        def windows_handler(signum: int, frame: object) -> None:
            loop.call_soon_threadsafe(handle_shutdown, signal.Signals(signum))

        signal.signal(signal.SIGINT, windows_handler)


async def bootstrap(
    target: str,
    *,
    config_path: Path | str | None = None,
    argv: Sequence[str] | None = None,
) -> int:
    """Run the service named by ``target`` until shutdown.

    Returns:
        Process exit code: the code requested through
        ``request_shutdown()`` (0 on signals), or 1 on failure.
    """
    correlation_id = uuid4()
    orchestrator: ServiceOrchestrator | None = None
    started = False
    try:
        config = load_runtime_config(config_path)
        orchestrator = build_orchestrator(target, config=config, argv=argv)
        _install_signal_handlers(orchestrator)

        logger.info(
            "Starting dispatch service %s (correlation_id=%s)",
            orchestrator.name,
            correlation_id,
            extra={"service_name": orchestrator.name},
        )
        await orchestrator.start()
        started = True
        exit_code = await orchestrator.wait_for_shutdown()

        grace_period = config.shutdown_grace_period_seconds or None
        try:
            await asyncio.wait_for(orchestrator.stop(), timeout=grace_period)
        except TimeoutError:
            logger.warning(
                "Shutdown timed out after %s seconds, forcing stop (correlation_id=%s)",
                grace_period,
                correlation_id,
            )
        started = False
        return exit_code

    except DispatchError as e:
        logger.exception(
            "Dispatch service failed (correlation_id=%s)",
            correlation_id,
            extra={"error_type": type(e).__name__},
        )
        return 1

    except Exception as e:
        logger.exception(
            "Dispatch service failed with unexpected error: %s (correlation_id=%s)",
            e,
            correlation_id,
            extra={"error_type": type(e).__name__},
        )
        return 1

    finally:
        if orchestrator is not None and started:
            try:
                await orchestrator.stop()
            except Exception as cleanup_error:
                logger.warning(
                    "Failed to stop service during cleanup: %s (correlation_id=%s)",
                    cleanup_error,
                    correlation_id,
                )


def configure_logging() -> None:
    """Configure process logging from DISPATCH_LOG_LEVEL (default INFO).

    Invalid levels fall back to INFO with a notice on stderr.
    """
    log_level = os.getenv("DISPATCH_LOG_LEVEL", "INFO").upper()

    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if log_level not in valid_levels:
        print(
            f"Warning: Invalid DISPATCH_LOG_LEVEL '{log_level}', using INFO. "
            f"Valid levels: {', '.join(sorted(valid_levels))}",
            file=sys.stderr,
        )
        log_level = "INFO"

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point: ``python -m omnibase_dispatch.runtime.kernel TARGET [ARGS...]``."""
    args = list(sys.argv[1:] if argv is None else argv)
    configure_logging()
    target = args.pop(0) if args else os.getenv("DISPATCH_TARGET")
    if not target:
        print("Usage: python -m omnibase_dispatch.runtime.kernel TARGET [ARGS...]", file=sys.stderr)
        sys.exit(1)
    logger.info("Dispatch Kernel v%s initializing...", KERNEL_VERSION)
    exit_code = asyncio.run(
        bootstrap(target, config_path=os.getenv("DISPATCH_CONFIG") or None, argv=args)
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()


__all__: list[str] = [
    "bootstrap",
    "build_orchestrator",
    "configure_logging",
    "find_registry",
    "main",
    "resolve_target",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Runtime Configuration Loader.

Loads ``ModelDispatchRuntimeConfig`` from an optional YAML file, applies
environment overrides and turns the result into transport adapters.

Configuration Precedence:
    1. Environment variables (highest)
    2. YAML file values
    3. Model defaults

Environment Variables:
    DISPATCH_SERVICE_NAME: Overrides ``service_name``
    DISPATCH_HTTP_HOST: Overrides ``webservice.host``
    DISPATCH_HTTP_PORT: Overrides ``webservice.port``
    DISPATCH_RPC_PORT: Overrides ``rpc.port``
    DISPATCH_INTERACTIVE: Overrides ``stdio.interactive`` (1/true/yes/on)

Invalid port values are ignored with a warning; the file or default value
stays in effect.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from uuid import uuid4

import yaml
from pydantic import ValidationError

from omnibase_dispatch.enums import EnumTransportKind
from omnibase_dispatch.errors import DispatchConfigurationError, ModelDispatchErrorContext
from omnibase_dispatch.models import ModelDispatchRuntimeConfig
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.transports.base import TransportAdapter
from omnibase_dispatch.transports.rpc_adapter import RpcTransportAdapter
from omnibase_dispatch.transports.stdio_adapter import StdioTransportAdapter
from omnibase_dispatch.transports.webservice_adapter import WebServiceTransportAdapter

logger = logging.getLogger(__name__)

MIN_PORT = 0
MAX_PORT = 65535
_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _env_port(name: str, environ: Mapping[str, str]) -> int | None:
    raw = environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        port = int(raw)
    except ValueError:
        logger.warning(
            "Invalid %s value '%s', keeping configured port",
            name,
            raw,
            extra={"env_var": name},
        )
        return None
    if not MIN_PORT <= port <= MAX_PORT:
        logger.warning(
            "%s %d outside valid range %d-%d, keeping configured port",
            name,
            port,
            MIN_PORT,
            MAX_PORT,
            extra={"env_var": name},
        )
        return None
    return port


def _env_flag(name: str, environ: Mapping[str, str]) -> bool | None:
    raw = environ.get(name)
    if raw is None or raw == "":
        return None
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    logger.warning("Invalid %s value '%s', ignoring", name, raw, extra={"env_var": name})
    return None


def apply_env_overrides(
    raw_config: dict[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Return a copy of ``raw_config`` with environment overrides applied."""
    env = os.environ if environ is None else environ
    merged: dict[str, Any] = dict(raw_config)

    def section(key: str) -> dict[str, Any]:
        value = merged.get(key)
        merged[key] = dict(value) if isinstance(value, Mapping) else {}
        return merged[key]

    service_name = env.get("DISPATCH_SERVICE_NAME")
    if service_name:
        merged["service_name"] = service_name

    http_host = env.get("DISPATCH_HTTP_HOST")
    if http_host:
        section("webservice")["host"] = http_host

    http_port = _env_port("DISPATCH_HTTP_PORT", env)
    if http_port is not None:
        section("webservice")["port"] = http_port

    rpc_port = _env_port("DISPATCH_RPC_PORT", env)
    if rpc_port is not None:
        section("rpc")["port"] = rpc_port

    interactive = _env_flag("DISPATCH_INTERACTIVE", env)
    if interactive is not None:
        section("stdio")["interactive"] = interactive

    return merged


def load_runtime_config(
    path: Path | str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ModelDispatchRuntimeConfig:
    """Load the runtime configuration.

    Args:
        path: YAML file to read. None uses defaults plus environment.
        environ: Environment mapping (defaults to ``os.environ``).

    Raises:
        DispatchConfigurationError: If the file cannot be read, is not
            valid YAML, or fails validation.
    """
    correlation_id = uuid4()
    config_path = Path(path) if path is not None else None
    context = ModelDispatchErrorContext(
        transport=EnumTransportKind.RUNTIME,
        operation="load_config",
        target_name=str(config_path) if config_path is not None else "<defaults>",
        correlation_id=correlation_id,
    )

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        logger.info(
            "Loading runtime config from %s (correlation_id=%s)",
            config_path,
            correlation_id,
        )
        try:
            with open(config_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise DispatchConfigurationError(
                f"Failed to parse runtime config YAML at {config_path}: {e}",
                context=context,
                config_path=str(config_path),
            ) from e
        except UnicodeDecodeError as e:
            raise DispatchConfigurationError(
                f"Runtime config file contains non-UTF-8 content: {config_path}",
                context=context,
                config_path=str(config_path),
            ) from e
        except OSError as e:
            raise DispatchConfigurationError(
                f"Failed to read runtime config at {config_path}: {e}",
                context=context,
                config_path=str(config_path),
            ) from e
        if not isinstance(loaded, dict):
            raise DispatchConfigurationError(
                f"Runtime config at {config_path} must be a mapping, "
                f"got {type(loaded).__name__}",
                context=context,
                config_path=str(config_path),
            )
        raw_config = loaded

    try:
        config = ModelDispatchRuntimeConfig.model_validate(
            apply_env_overrides(raw_config, environ)
        )
    except ValidationError as e:
        validation_errors = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise DispatchConfigurationError(
            f"Runtime config validation failed: {e.error_count()} error(s). "
            f"First errors: {'; '.join(validation_errors[:3])}",
            context=context,
            validation_errors=validation_errors,
            error_count=e.error_count(),
        ) from e

    logger.debug(
        "Runtime config loaded (correlation_id=%s)",
        correlation_id,
        extra={
            "service_name": config.service_name,
            "stdio_enabled": config.stdio.enabled,
            "webservice_enabled": config.webservice.enabled,
            "rpc_enabled": config.rpc.enabled,
        },
    )
    return config


def _serves(
    registry: BindingRegistry, service_type: type, adapter: type[TransportAdapter]
) -> bool:
    """Return True if the service declares anything the adapter serves."""
    if adapter.config_key in registry.get_class_bindings(service_type):
        return True
    return any(
        tag in adapter.owned_tags
        for method_name in registry.list_methods(service_type)
        for tag in registry.get_method_bindings(service_type, method_name)
    )


def build_transports(
    config: ModelDispatchRuntimeConfig,
    registry: BindingRegistry,
    service_type: type,
    *,
    argv: list[str] | None = None,
) -> list[tuple[TransportAdapter, dict[str, Any]]]:
    """Create the adapters the configuration enables and the service uses.

    Returns:
        ``(adapter, options)`` pairs ready for ``register_transport``.
    """
    transports: list[tuple[TransportAdapter, dict[str, Any]]] = []

    if config.stdio.enabled and _serves(registry, service_type, StdioTransportAdapter):
        transports.append(
            (
                StdioTransportAdapter(argv=argv),
                {"interactive": config.stdio.interactive, "prompt": config.stdio.prompt},
            )
        )

    if config.webservice.enabled and _serves(
        registry, service_type, WebServiceTransportAdapter
    ):
        transports.append(
            (
                WebServiceTransportAdapter(),
                {
                    "host": config.webservice.host,
                    "port": config.webservice.port,
                    "base_path": config.webservice.base_path,
                    "websocket": {
                        "enabled": config.webservice.websocket.enabled,
                        "path": config.webservice.websocket.path,
                    },
                },
            )
        )

    if config.rpc.enabled and _serves(registry, service_type, RpcTransportAdapter):
        transports.append(
            (
                RpcTransportAdapter(),
                {"host": config.rpc.host, "port": config.rpc.port, "path": config.rpc.path},
            )
        )

    logger.debug(
        "Built %d transports for %s",
        len(transports),
        service_type.__name__,
        extra={"transports": [adapter.config_key for adapter, _ in transports]},
    )
    return transports


__all__ = ["apply_env_overrides", "build_transports", "load_runtime_config"]

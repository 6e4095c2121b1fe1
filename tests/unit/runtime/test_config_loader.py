# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Unit tests for the runtime configuration loader.

Tests YAML loading, environment overrides with invalid-value fallbacks,
error wrapping, and transport construction from configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from omnibase_dispatch.errors import DispatchConfigurationError
from omnibase_dispatch.models import ModelDispatchRuntimeConfig
from omnibase_dispatch.runtime.config_loader import (
    apply_env_overrides,
    build_transports,
    load_runtime_config,
)
from omnibase_dispatch.transports.rpc_adapter import RpcTransportAdapter
from omnibase_dispatch.transports.stdio_adapter import StdioTransportAdapter
from tests.helpers import filter_records
from tests.helpers.sample_services import (
    CalculatorService,
    EchoService,
    LintedService,
    registry,
)


class TestApplyEnvOverrides:
    """Tests for apply_env_overrides()."""

    def test_overrides_applied_to_copy(self) -> None:
        raw = {"webservice": {"port": 3000}}

        merged = apply_env_overrides(
            raw,
            {
                "DISPATCH_SERVICE_NAME": "orders",
                "DISPATCH_HTTP_HOST": "127.0.0.1",
                "DISPATCH_HTTP_PORT": "8081",
                "DISPATCH_RPC_PORT": "9091",
                "DISPATCH_INTERACTIVE": "yes",
            },
        )

        assert merged == {
            "service_name": "orders",
            "webservice": {"port": 8081, "host": "127.0.0.1"},
            "rpc": {"port": 9091},
            "stdio": {"interactive": True},
        }
        assert raw == {"webservice": {"port": 3000}}

    @pytest.mark.parametrize("value", ["abc", "70000", "-1"])
    def test_invalid_port_is_ignored_with_warning(
        self, value: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            merged = apply_env_overrides({}, {"DISPATCH_HTTP_PORT": value})

        assert "webservice" not in merged
        assert filter_records(caplog.records, "omnibase_dispatch.runtime.config_loader")

    def test_empty_values_are_ignored(self) -> None:
        environ = {"DISPATCH_RPC_PORT": "", "DISPATCH_INTERACTIVE": ""}

        assert apply_env_overrides({}, environ) == {}


class TestLoadRuntimeConfig:
    """Tests for load_runtime_config()."""

    def test_defaults_without_file(self) -> None:
        config = load_runtime_config(environ={})

        assert config == ModelDispatchRuntimeConfig()
        assert config.webservice.port == 3000
        assert config.shutdown_grace_period_seconds == 0.0

    def test_yaml_file_with_env_precedence(self, tmp_path: Path) -> None:
        config_file = tmp_path / "dispatch.yaml"
        config_file.write_text(
            "service_name: calculator\n"
            "rpc:\n"
            "  port: 9000\n"
            "webservice:\n"
            "  enabled: false\n"
        )

        config = load_runtime_config(config_file, environ={"DISPATCH_RPC_PORT": "9100"})

        assert config.service_name == "calculator"
        assert config.rpc.port == 9100
        assert config.webservice.enabled is False

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert load_runtime_config(config_file, environ={}).service_name == "dispatch-service"

    def test_malformed_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("rpc: [unclosed\n")

        with pytest.raises(DispatchConfigurationError, match="parse"):
            load_runtime_config(config_file, environ={})

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(DispatchConfigurationError, match="Failed to read"):
            load_runtime_config(tmp_path / "missing.yaml", environ={})

    def test_non_mapping_document_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(DispatchConfigurationError, match="must be a mapping"):
            load_runtime_config(config_file, environ={})

    def test_validation_errors_are_collected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text("rpc:\n  port: 99999\nunknown_key: 1\n")

        with pytest.raises(DispatchConfigurationError) as exc_info:
            load_runtime_config(config_file, environ={})

        error = exc_info.value
        assert error.extra_context["error_count"] == 2
        assert error.context.operation == "load_config"
        assert error.correlation_id is not None


class TestBuildTransports:
    """Tests for build_transports()."""

    def test_only_transports_the_service_uses(self) -> None:
        config = ModelDispatchRuntimeConfig()

        echo = build_transports(config, registry, EchoService, argv=["echo", "--msg=hi"])
        calculator = build_transports(config, registry, CalculatorService)

        assert [type(adapter) for adapter, _ in echo] == [StdioTransportAdapter]
        assert echo[0][1] == {"interactive": False, "prompt": "> "}
        assert [type(adapter) for adapter, _ in calculator] == [RpcTransportAdapter]
        assert calculator[0][1]["port"] == config.rpc.port

    def test_disabled_in_config_is_not_built(self) -> None:
        config = ModelDispatchRuntimeConfig.model_validate({"stdio": {"enabled": False}})

        assert build_transports(config, registry, EchoService) == []

    def test_webservice_options_include_websocket(self) -> None:
        transports = build_transports(
            ModelDispatchRuntimeConfig(), registry, LintedService
        )

        assert len(transports) == 1
        _, options = transports[0]
        assert set(options) == {"host", "port", "base_path", "websocket"}
        assert set(options["websocket"]) == {"enabled", "path"}

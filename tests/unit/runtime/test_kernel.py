# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Unit tests for the dispatch kernel.

Tests target resolution, orchestrator construction from each target form,
bootstrap exit codes and logging configuration.
"""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, patch

import pytest

from omnibase_dispatch.errors import DispatchConfigurationError
from omnibase_dispatch.models import ModelDispatchRuntimeConfig
from omnibase_dispatch.runtime import kernel
from omnibase_dispatch.runtime.kernel import (
    bootstrap,
    build_orchestrator,
    configure_logging,
    resolve_target,
)
from omnibase_dispatch.runtime.orchestrator import ServiceOrchestrator
from omnibase_dispatch.transports.rpc_adapter import RpcTransportAdapter
from omnibase_dispatch.transports.stdio_adapter import StdioTransportAdapter
from tests.helpers.sample_services import CalculatorService, EchoService

SAMPLES = "tests.helpers.sample_services"


class TestResolveTarget:
    """Tests for resolve_target()."""

    def test_resolves_module_attribute(self) -> None:
        module, value = resolve_target(f"{SAMPLES}:EchoService")

        assert module.__name__ == SAMPLES
        assert value is EchoService

    @pytest.mark.parametrize(
        ("target", "message"),
        [
            ("no_colon", "expected 'package.module:attr'"),
            (":Attr", "expected 'package.module:attr'"),
            ("missing_module_xyz:Attr", "Cannot import module"),
            (f"{SAMPLES}:Missing", "has no attribute"),
        ],
    )
    def test_invalid_targets_raise(self, target: str, message: str) -> None:
        with pytest.raises(DispatchConfigurationError, match=message) as exc_info:
            resolve_target(target)

        assert exc_info.value.context.target_name == target


class TestBuildOrchestrator:
    """Tests for build_orchestrator()."""

    def test_service_class_target(self) -> None:
        """A class target is compiled against its module registry with config transports."""
        orchestrator = build_orchestrator(
            f"{SAMPLES}:CalculatorService",
            config=ModelDispatchRuntimeConfig(service_name="calc"),
        )

        assert isinstance(orchestrator.service, CalculatorService)
        assert orchestrator.name == "calc"
        assert [type(t) for t in orchestrator.transports] == [RpcTransportAdapter]

    def test_argv_reaches_stdio_transport(self) -> None:
        orchestrator = build_orchestrator(
            f"{SAMPLES}:EchoService",
            config=ModelDispatchRuntimeConfig(),
            argv=["echo", "--msg=hi"],
        )

        assert [type(t) for t in orchestrator.transports] == [StdioTransportAdapter]

    def test_factory_target(self) -> None:
        orchestrator = build_orchestrator(f"{SAMPLES}:build_calculator")

        assert isinstance(orchestrator, ServiceOrchestrator)
        assert orchestrator.name == "calculator"

    def test_factory_stdio_adapter_receives_argv(self) -> None:
        orchestrator = build_orchestrator(f"{SAMPLES}:build_echo", argv=["echo", "--msg=hi"])

        (adapter,) = orchestrator.transports
        assert isinstance(adapter, StdioTransportAdapter)
        assert adapter.argv == ["echo", "--msg=hi"]

    def test_non_service_target_raises(self) -> None:
        with pytest.raises(DispatchConfigurationError, match="expected an orchestrator"):
            build_orchestrator(f"{SAMPLES}:NOT_A_SERVICE")

    def test_factory_with_wrong_return_type_raises(self) -> None:
        with pytest.raises(DispatchConfigurationError, match="expected ServiceOrchestrator"):
            build_orchestrator(f"{SAMPLES}:ModelEchoArgs.model_json_schema")

    def test_class_without_module_registry_raises(self) -> None:
        with pytest.raises(DispatchConfigurationError, match="BindingRegistry"):
            build_orchestrator("omnibase_dispatch.models:ModelRequestView")


class TestBootstrap:
    """Tests for bootstrap() exit codes."""

    @pytest.mark.asyncio
    async def test_configuration_error_returns_one(self) -> None:
        assert await bootstrap("not-a-target") == 1

    @pytest.mark.asyncio
    async def test_requested_exit_code_is_returned(self) -> None:
        orchestrator = AsyncMock(spec=ServiceOrchestrator)
        orchestrator.name = "mock"
        orchestrator.wait_for_shutdown.return_value = 4

        with (
            patch.object(kernel, "build_orchestrator", return_value=orchestrator),
            patch.object(kernel, "_install_signal_handlers"),
        ):
            exit_code = await bootstrap("pkg.mod:svc")

        assert exit_code == 4
        orchestrator.start.assert_awaited_once()
        orchestrator.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_factory_target_runs_command_from_argv(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Process arguments of the tool CLI never reach a factory's stdio transport."""
        monkeypatch.setattr(
            "sys.argv",
            ["omnibase-dispatch", "run", f"{SAMPLES}:build_echo", "echo", "--msg=hi"],
        )

        with patch.object(kernel, "_install_signal_handlers"):
            exit_code = await bootstrap(f"{SAMPLES}:build_echo", argv=["echo", "--msg=hi"])

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "hi"

    @pytest.mark.asyncio
    async def test_start_failure_returns_one(self) -> None:
        orchestrator = AsyncMock(spec=ServiceOrchestrator)
        orchestrator.name = "mock"
        orchestrator.start.side_effect = RuntimeError("boom")

        with (
            patch.object(kernel, "build_orchestrator", return_value=orchestrator),
            patch.object(kernel, "_install_signal_handlers"),
        ):
            exit_code = await bootstrap("pkg.mod:svc")

        assert exit_code == 1
        orchestrator.stop.assert_not_awaited()


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_invalid_level_falls_back_to_info(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("DISPATCH_LOG_LEVEL", "LOUD")

        with patch.object(logging, "basicConfig") as basic_config:
            configure_logging()

        assert basic_config.call_args.kwargs["level"] == logging.INFO
        assert "Invalid DISPATCH_LOG_LEVEL" in capsys.readouterr().err

    def test_valid_level_is_used(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DISPATCH_LOG_LEVEL", "debug")

        with patch.object(logging, "basicConfig") as basic_config:
            configure_logging()

        assert basic_config.call_args.kwargs["level"] == logging.DEBUG

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pytest configuration and shared fixtures for omnibase_dispatch tests."""

from __future__ import annotations

import pytest
from rich.console import Console

from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from tests.helpers.console_helpers import make_console


@pytest.fixture
def binding_registry() -> BindingRegistry:
    """Create a fresh BindingRegistry for tests."""
    return BindingRegistry()


@pytest.fixture
def out_console() -> Console:
    """Console capturing regular command output."""
    return make_console()


@pytest.fixture
def err_console() -> Console:
    """Console capturing error output."""
    return make_console()

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Lifecycle Event Enumeration."""

from enum import Enum


class EnumLifecycleEvent(str, Enum):
    """Orchestrator lifecycle hooks that callers can subscribe to."""

    ON_BEFORE_START = "on_before_start"
    ON_AFTER_START = "on_after_start"
    ON_BEFORE_STOP = "on_before_stop"
    ON_AFTER_STOP = "on_after_stop"
    ON_ERROR = "on_error"


__all__ = ["EnumLifecycleEvent"]

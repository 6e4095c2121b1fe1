# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Suggestion Severity Enumeration."""

from enum import Enum


class EnumSuggestionSeverity(str, Enum):
    """Severity of a service definition suggestion."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


__all__ = ["EnumSuggestionSeverity"]

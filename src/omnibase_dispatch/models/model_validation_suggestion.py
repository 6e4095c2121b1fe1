# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Validation Suggestion Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from omnibase_dispatch.enums import EnumSuggestionSeverity


class ModelValidationSuggestion(BaseModel):
    """One finding of the service definition validator.

    Attributes:
        severity: Finding severity
        code: Stable code, e.g. ``DISPATCH-VAL-HTTP001``
        message: Human-readable description
        method_name: Method the finding refers to
        parameter_index: Parameter the finding refers to, if any
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    severity: EnumSuggestionSeverity
    code: str = Field(pattern=r"^DISPATCH-VAL-[A-Z]+\d{3}$")
    message: str
    method_name: str
    parameter_index: int | None = None

    def format_line(self) -> str:
        location = self.method_name
        if self.parameter_index is not None:
            location = f"{location}[{self.parameter_index}]"
        return f"{self.severity.value.upper()} {self.code} {location}: {self.message}"


__all__ = ["ModelValidationSuggestion"]

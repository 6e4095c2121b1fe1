# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Schema Validation Result Model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelSchemaValidationResult(BaseModel):
    """Result of validating one payload against a binding schema.

    Attributes:
        is_valid: True if the payload satisfied the schema
        value: Validated (and coerced) value; None when invalid
        field_errors: Field name -> error messages; empty when valid
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    is_valid: bool
    value: Any = None
    field_errors: dict[str, list[str]] = Field(default_factory=dict)


__all__ = ["ModelSchemaValidationResult"]

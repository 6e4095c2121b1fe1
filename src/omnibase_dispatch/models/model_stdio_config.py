# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Stdio Transport Config Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelStdioConfig(BaseModel):
    """Runtime configuration of the command-line transport.

    Attributes:
        enabled: Whether the stdio transport is registered
        interactive: Start a REPL when no process args are given and stdin
            is a TTY
        prompt: REPL prompt
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True)
    interactive: bool = Field(default=False)
    prompt: str = Field(default="> ")


__all__ = ["ModelStdioConfig"]

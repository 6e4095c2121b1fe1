# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""CLI Context Model.

Transport context handed to command and tool-call handlers through the
``context`` parameter source.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelCliContext(BaseModel):
    """Context of one CLI command invocation.

    Attributes:
        command: Command name as typed
        raw_args: Tokens following the command
        flags: Parsed ``--flag`` values
        positionals: Non-flag tokens in order
        interactive: True when invoked from the REPL
        console: Console used for user-facing output
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    command: str
    raw_args: tuple[str, ...] = ()
    flags: dict[str, Any] = Field(default_factory=dict)
    positionals: tuple[str, ...] = ()
    interactive: bool = False
    console: Any = None


__all__ = ["ModelCliContext"]

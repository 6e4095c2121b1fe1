# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""CLI Mode Enumeration.

States of the stdio transport adapter state machine:

    idle --(interactive configured and stdin is a TTY)--> interactive
    idle --(process arguments present)------------------> one_shot
    idle --(otherwise: usage, exit code 1)--------------> terminated
    interactive --(exit | quit | EOF)-------------------> terminated
    one_shot --(single dispatch completed)--------------> terminated
"""

from enum import Enum


class EnumCliMode(str, Enum):
    """States of the stdio transport adapter."""

    IDLE = "idle"
    INTERACTIVE = "interactive"
    ONE_SHOT = "one_shot"
    TERMINATED = "terminated"


__all__ = ["EnumCliMode"]

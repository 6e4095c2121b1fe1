# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""JSON encoding of handler results shared by the transport adapters.

Handler results may contain pydantic models, dataclasses, UUIDs or
datetimes; they are converted with pydantic's ``to_jsonable_python`` and
anything it cannot handle falls back to ``str``.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic_core import to_jsonable_python


def to_jsonable(value: Any) -> Any:
    """Convert ``value`` into plain JSON-compatible Python data."""
    return to_jsonable_python(value, fallback=str)


def dumps(value: Any, *, indent: int | None = None) -> str:
    """Serialize ``value`` to a JSON string."""
    return json.dumps(to_jsonable(value), indent=indent)


__all__ = ["dumps", "to_jsonable"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Server-Sent Event Model.

Stream handlers may yield plain values (sent as ``data:`` frames) or
``ModelSseEvent`` instances to set the event name and id.

Example:
    >>> ModelSseEvent(data={"n": 1}, event="tick").encode()
    b'event: tick\\ndata: {"n": 1}\\n\\n'
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelSseEvent(BaseModel):
    """One server-sent event frame."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    data: Any = None
    event: str | None = None
    id: str | None = None
    retry: int | None = Field(default=None, ge=0)

    def encode(self) -> bytes:
        """Encode the event in ``text/event-stream`` framing."""
        lines: list[str] = []
        if self.event is not None:
            lines.append(f"event: {self.event}")
        if self.id is not None:
            lines.append(f"id: {self.id}")
        if self.retry is not None:
            lines.append(f"retry: {self.retry}")
        payload = self.data if isinstance(self.data, str) else json.dumps(self.data, default=str)
        for line in payload.split("\n"):
            lines.append(f"data: {line}")
        return ("\n".join(lines) + "\n\n").encode("utf-8")


__all__ = ["ModelSseEvent"]

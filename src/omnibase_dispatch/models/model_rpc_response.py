# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""RPC Response Frame Model.

Exactly one of ``result`` / ``error`` is present on the wire::

    {"id": "1", "result": 5}
    {"id": "1", "error": "Method 'nope' not found"}
    {"id": null, "error": "Invalid RPC request format"}
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class ModelRpcResponse(BaseModel):
    """Outbound RPC response frame."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str | None = None
    result: Any = None
    error: str | None = None

    @classmethod
    def success(cls, request_id: str, result: Any) -> ModelRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: str | None, error: str) -> ModelRpcResponse:
        return cls(id=request_id, error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready frame with only one of result/error."""
        if self.error is not None:
            return {"id": self.id, "error": self.error}
        return {"id": self.id, "result": self.result}


__all__ = ["ModelRpcResponse"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Outcome Model.

Returned by the dispatch pipeline to the transport adapter, which maps it
to a protocol-specific response.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from omnibase_dispatch.enums import EnumDispatchStatus


class ModelDispatchOutcome(BaseModel):
    """Outcome of one pass through the dispatch pipeline.

    Attributes:
        status: Final dispatch status
        result: Handler result (or the short-circuit response)
        field_errors: Field errors when validation failed
        error: Exception raised by the handler or middleware
        handler_invoked: Whether the handler itself ran
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: EnumDispatchStatus
    result: Any = None
    field_errors: dict[str, list[str]] = Field(default_factory=dict)
    error: BaseException | None = None
    handler_invoked: bool = False

    @property
    def is_success(self) -> bool:
        """Return True unless the status is a failure status."""
        return not self.status.is_failure

    @property
    def error_message(self) -> str | None:
        """Return the error text reported to clients, if any."""
        if self.error is None:
            return None
        cause = self.error.__cause__
        if cause is not None and str(cause):
            return str(cause)
        return str(self.error) or type(self.error).__name__


__all__ = ["ModelDispatchOutcome"]

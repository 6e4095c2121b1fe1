# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Status Enumeration.

Final status of one pass through the dispatch pipeline. Transport
adapters map each status to a protocol-specific response.
"""

from enum import Enum


class EnumDispatchStatus(str, Enum):
    """Outcome of dispatching one inbound message.

    Attributes:
        SUCCESS: Handler ran and returned a result
        SHORT_CIRCUITED: A middleware did not call its continuation
        VALIDATION_FAILED: Payload rejected by the binding schema
        NOT_FOUND: No registry entry for the requested identifier
        HANDLER_ERROR: Handler or middleware raised an exception
    """

    SUCCESS = "success"
    SHORT_CIRCUITED = "short_circuited"
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    HANDLER_ERROR = "handler_error"

    @property
    def is_failure(self) -> bool:
        """Return True for statuses that should be reported as failures."""
        return self in (
            EnumDispatchStatus.VALIDATION_FAILED,
            EnumDispatchStatus.NOT_FOUND,
            EnumDispatchStatus.HANDLER_ERROR,
        )


__all__ = ["EnumDispatchStatus"]

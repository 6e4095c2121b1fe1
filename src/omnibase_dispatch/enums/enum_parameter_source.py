# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Parameter Source Enumeration.

Defines where the argument binder takes the value for one handler
parameter from. Sources that accept a sub-key extract a single field from
their container; without a key the whole container is passed.
"""

from enum import Enum


class EnumParameterSource(str, Enum):
    """Data sources a handler parameter can be bound to.

    Attributes:
        BODY: Request payload (JSON body, parsed CLI flags, RPC args)
        PATH: Path parameters (route placeholders, CLI positionals)
        QUERY: Query parameters (URL query, parsed CLI flags)
        HEADERS: Request headers (case-insensitive sub-key lookup)
        COOKIES: Request cookies
        SESSION: Session object attached to the request
        FILES: Uploaded files
        CONTEXT: Transport-specific raw context object
        REQUEST: Raw transport request object
        RESPONSE: Raw transport response object
    """

    BODY = "body"
    PATH = "path"
    QUERY = "query"
    HEADERS = "headers"
    COOKIES = "cookies"
    SESSION = "session"
    FILES = "files"
    CONTEXT = "context"
    REQUEST = "request"
    RESPONSE = "response"

    @property
    def accepts_key(self) -> bool:
        """Return True if this source supports single-field extraction."""
        return self in _KEYED_SOURCES


_KEYED_SOURCES = frozenset(
    {
        EnumParameterSource.BODY,
        EnumParameterSource.PATH,
        EnumParameterSource.QUERY,
        EnumParameterSource.HEADERS,
        EnumParameterSource.COOKIES,
        EnumParameterSource.FILES,
    }
)


__all__ = ["EnumParameterSource"]

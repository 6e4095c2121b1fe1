# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dispatch Enumerations Module.

Exports:
    EnumCliMode: Stdio adapter state machine states
    EnumDispatchStatus: Outcome of one dispatch pipeline pass
    EnumLifecycleEvent: Orchestrator lifecycle hooks
    EnumParameterSource: Handler parameter data sources
    EnumProtocolTag: Protocol families a method can be bound to
    EnumSuggestionSeverity: Definition validator severities
    EnumTransportKind: Transport adapter identifiers
"""

from omnibase_dispatch.enums.enum_cli_mode import EnumCliMode
from omnibase_dispatch.enums.enum_dispatch_status import EnumDispatchStatus
from omnibase_dispatch.enums.enum_lifecycle_event import EnumLifecycleEvent
from omnibase_dispatch.enums.enum_parameter_source import EnumParameterSource
from omnibase_dispatch.enums.enum_protocol_tag import EnumProtocolTag
from omnibase_dispatch.enums.enum_suggestion_severity import EnumSuggestionSeverity
from omnibase_dispatch.enums.enum_transport_kind import EnumTransportKind

__all__: list[str] = [
    "EnumCliMode",
    "EnumDispatchStatus",
    "EnumLifecycleEvent",
    "EnumParameterSource",
    "EnumProtocolTag",
    "EnumSuggestionSeverity",
    "EnumTransportKind",
]

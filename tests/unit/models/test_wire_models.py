# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Unit tests for wire and binding models.

Tests RPC frames, server-sent event framing, binding verb normalization,
suggestion codes and dispatch outcome error messages.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from omnibase_dispatch.enums import (
    EnumDispatchStatus,
    EnumParameterSource,
    EnumProtocolTag,
    EnumSuggestionSeverity,
)
from omnibase_dispatch.models import (
    ModelDispatchOutcome,
    ModelMethodBinding,
    ModelParameterBinding,
    ModelRpcRequest,
    ModelRpcResponse,
    ModelSseEvent,
    ModelValidationSuggestion,
)


class TestRpcFrames:
    """Tests for ModelRpcRequest and ModelRpcResponse."""

    def test_request_ignores_unknown_fields(self) -> None:
        request = ModelRpcRequest.model_validate(
            {"type": "call", "method": "add", "id": "1", "trace": "t"}
        )

        assert request.args == []
        assert request.method == "add"

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "call", "method": "", "id": "1"},
            {"type": "call", "method": "add", "id": ""},
            {"type": "reply", "method": "add", "id": "1"},
        ],
    )
    def test_request_rejects_invalid_frames(self, payload: dict) -> None:
        with pytest.raises(ValidationError):
            ModelRpcRequest.model_validate(payload)

    def test_success_frame_carries_result_only(self) -> None:
        response = ModelRpcResponse.success("7", None)

        assert not response.is_error
        assert response.to_wire() == {"id": "7", "result": None}

    def test_failure_frame_carries_error_only(self) -> None:
        response = ModelRpcResponse.failure(None, "Invalid JSON message")

        assert response.is_error
        assert response.to_wire() == {"id": None, "error": "Invalid JSON message"}


class TestSseEvent:
    """Tests for ModelSseEvent.encode()."""

    def test_all_fields_in_order(self) -> None:
        event = ModelSseEvent(event="tick", id="3", retry=500, data={"n": 1})

        assert event.encode() == b'event: tick\nid: 3\nretry: 500\ndata: {"n": 1}\n\n'

    def test_multiline_string_data(self) -> None:
        """Each line of string data becomes its own data field."""
        assert ModelSseEvent(data="a\nb").encode() == b"data: a\ndata: b\n\n"

    def test_negative_retry_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ModelSseEvent(data="x", retry=-1)


class TestBindings:
    """Tests for binding models."""

    def test_http_method_is_upper_cased(self) -> None:
        binding = ModelMethodBinding(
            tag=EnumProtocolTag.HTTP_ENDPOINT, identifier="/a", http_method="patch"
        )

        assert binding.http_method == "PATCH"
        assert not binding.has_schema

    def test_unknown_http_method_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported HTTP method"):
            ModelMethodBinding(
                tag=EnumProtocolTag.HTTP_ENDPOINT, identifier="/a", http_method="FETCH"
            )

    def test_parameter_index_must_not_be_negative(self) -> None:
        with pytest.raises(ValidationError):
            ModelParameterBinding(index=-1, source=EnumParameterSource.BODY)

    def test_bindings_are_frozen(self) -> None:
        binding = ModelParameterBinding(index=0, source=EnumParameterSource.QUERY, key="q")

        with pytest.raises(ValidationError):
            binding.key = "other"  # type: ignore[misc]


class TestValidationSuggestion:
    """Tests for ModelValidationSuggestion."""

    def test_format_line_with_parameter(self) -> None:
        suggestion = ModelValidationSuggestion(
            severity=EnumSuggestionSeverity.ERROR,
            code="DISPATCH-VAL-HTTP001",
            message="GET endpoint binds a request body",
            method_name="list_items",
            parameter_index=0,
        )

        assert suggestion.format_line() == (
            "ERROR DISPATCH-VAL-HTTP001 list_items[0]: GET endpoint binds a request body"
        )

    @pytest.mark.parametrize("code", ["VAL-HTTP001", "DISPATCH-VAL-http001", "DISPATCH-VAL-X1"])
    def test_code_pattern_enforced(self, code: str) -> None:
        with pytest.raises(ValidationError):
            ModelValidationSuggestion(
                severity=EnumSuggestionSeverity.INFO,
                code=code,
                message="m",
                method_name="m",
            )


class TestDispatchOutcome:
    """Tests for ModelDispatchOutcome."""

    def test_success_has_no_error_message(self) -> None:
        outcome = ModelDispatchOutcome(status=EnumDispatchStatus.SUCCESS, result=1)

        assert outcome.is_success
        assert outcome.error_message is None

    def test_error_message_prefers_cause(self) -> None:
        try:
            try:
                raise ValueError("insufficient funds")
            except ValueError as e:
                raise RuntimeError("Handler 'overdraw' failed") from e
        except RuntimeError as wrapped:
            error = wrapped

        outcome = ModelDispatchOutcome(status=EnumDispatchStatus.HANDLER_ERROR, error=error)

        assert not outcome.is_success
        assert outcome.error_message == "insufficient funds"

    def test_empty_error_falls_back_to_type_name(self) -> None:
        outcome = ModelDispatchOutcome(
            status=EnumDispatchStatus.HANDLER_ERROR, error=KeyError()
        )

        assert outcome.error_message == "KeyError"

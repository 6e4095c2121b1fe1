# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the argument binder."""

from __future__ import annotations

import logging
import warnings

import pytest

from omnibase_dispatch.enums import EnumParameterSource
from omnibase_dispatch.errors import RegistrationWarning
from omnibase_dispatch.models import ModelParameterBinding, ModelRequestView
from omnibase_dispatch.runtime.argument_binder import bind_arguments
from tests.helpers import filter_records


def binding(index: int, source: str, key: str | None = None) -> ModelParameterBinding:
    return ModelParameterBinding(index=index, source=EnumParameterSource(source), key=key)


@pytest.fixture
def view() -> ModelRequestView:
    return ModelRequestView(
        body={"name": "ada", "tags": ["x"]},
        path_params={"id": "42"},
        query_params={"page": "2"},
        headers={"Authorization": "Bearer t"},
        cookies={"sid": "abc"},
        raw_context="ctx",
        raw_request="req",
    )


class TestBindArguments:
    """Tests for bind_arguments()."""

    def test_keyed_and_whole_sources(self, view: ModelRequestView) -> None:
        """Keyed bindings extract a field; keyless bindings pass the container."""
        args = bind_arguments(
            [
                binding(0, "path", "id"),
                binding(1, "body"),
                binding(2, "query", "page"),
                binding(3, "cookies", "sid"),
                binding(4, "context"),
            ],
            view,
            arity=5,
        )

        assert args == ["42", {"name": "ada", "tags": ["x"]}, "2", "abc", "ctx"]

    def test_unbound_slots_are_none(self, view: ModelRequestView) -> None:
        """Slots without a binding are filled with None."""
        args = bind_arguments([binding(2, "body", "name")], view, arity=4)

        assert args == [None, None, "ada", None]

    def test_missing_key_is_none(self, view: ModelRequestView) -> None:
        """A key absent from its container resolves to None."""
        assert bind_arguments([binding(0, "query", "missing")], view, arity=1) == [None]

    def test_header_keys_match_case_insensitively(self, view: ModelRequestView) -> None:
        """Header lookup ignores case."""
        args = bind_arguments([binding(0, "headers", "authorization")], view, arity=1)

        assert args == ["Bearer t"]

    def test_binding_is_idempotent(self, view: ModelRequestView) -> None:
        """Binding twice against the same view yields equal lists."""
        parameters = [binding(0, "body"), binding(1, "path", "id")]

        first = bind_arguments(parameters, view, arity=2)
        second = bind_arguments(parameters, view, arity=2)

        assert first == second
        assert view.body == {"name": "ada", "tags": ["x"]}

    def test_variadic_handler_grows_past_arity(self, view: ModelRequestView) -> None:
        """Indices past the arity extend the list for variadic handlers."""
        args = bind_arguments([binding(2, "path", "id")], view, arity=0)

        assert args == [None, None, "42"]

    def test_unavailable_source_warns_and_binds_none(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A source the transport cannot provide yields None and a warning."""
        cli_view = ModelRequestView(
            body={"msg": "hi"},
            available_sources=frozenset(
                {EnumParameterSource.BODY, EnumParameterSource.QUERY}
            ),
        )

        with caplog.at_level(logging.WARNING), warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            args = bind_arguments(
                [binding(0, "body", "msg"), binding(1, "cookies", "sid")],
                cli_view,
                arity=2,
                transport="stdio",
                method_name="echo",
            )

        assert args == ["hi", None]
        assert any(issubclass(w.category, RegistrationWarning) for w in caught)
        records = filter_records(
            caplog.records, "omnibase_dispatch.runtime.argument_binder"
        )
        assert len(records) == 1
        assert "cookies" in records[0].getMessage()
        assert "stdio" in records[0].getMessage()

    def test_sequence_body_supports_digit_keys(self) -> None:
        """Digit keys index into list bodies."""
        rpc_view = ModelRequestView(body=[10, 20])

        assert bind_arguments([binding(0, "body", "1")], rpc_view, arity=1) == [20]

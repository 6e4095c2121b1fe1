# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the service definition validator."""

from __future__ import annotations

from pydantic import BaseModel

from omnibase_dispatch.enums import EnumSuggestionSeverity
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.decorators import command, get, param, post, rpc
from omnibase_dispatch.runtime.definition_validator import validate_service_definition
from tests.helpers.sample_services import EchoService, LintedService, registry


class ModelQuery(BaseModel):
    text: str


class TestValidateServiceDefinition:
    """Tests for validate_service_definition()."""

    def test_clean_service_has_no_suggestions(self) -> None:
        assert validate_service_definition(registry, EchoService) == []

    def test_linted_service_reports_body_misuse(self) -> None:
        """Body parameters on GET endpoints and streams are flagged."""
        suggestions = validate_service_definition(registry, LintedService)

        by_code = {s.code: s for s in suggestions}
        assert set(by_code) == {"DISPATCH-VAL-HTTP001", "DISPATCH-VAL-SSE001"}
        assert by_code["DISPATCH-VAL-HTTP001"].severity is EnumSuggestionSeverity.ERROR
        assert by_code["DISPATCH-VAL-HTTP001"].method_name == "list_items"
        assert by_code["DISPATCH-VAL-SSE001"].severity is EnumSuggestionSeverity.WARNING
        assert by_code["DISPATCH-VAL-SSE001"].parameter_index == 0

    def test_schema_without_parameters(self, binding_registry: BindingRegistry) -> None:
        """A schema on a parameterless handler is flagged."""

        @binding_registry.register_service
        class Status:
            @rpc(schema=ModelQuery)
            def status(self) -> str:
                return "ok"

        suggestions = validate_service_definition(binding_registry, Status)

        assert [s.code for s in suggestions] == ["DISPATCH-VAL-SCHEMA001"]

    def test_schema_without_payload_parameter(
        self, binding_registry: BindingRegistry
    ) -> None:
        """A schema with only header or context parameters is flagged."""

        @binding_registry.register_service
        class Search:
            @command(schema=ModelQuery)
            @param(0, "headers", "x-user")
            def search(self, user: str) -> list:
                return []

        suggestions = validate_service_definition(binding_registry, Search)

        assert [s.code for s in suggestions] == ["DISPATCH-VAL-SCHEMA002"]
        assert "body, query or path" in suggestions[0].message

    def test_post_with_body_is_clean(self, binding_registry: BindingRegistry) -> None:
        @binding_registry.register_service
        class Items:
            @post("/items", schema=ModelQuery)
            @param(0, "body")
            def create(self, body: ModelQuery) -> None: ...

            @get("/items/{id}")
            @param(0, "path", "id")
            def read(self, item_id: str) -> None: ...

        assert validate_service_definition(binding_registry, Items) == []

    def test_format_line(self) -> None:
        suggestion = validate_service_definition(registry, LintedService)[0]

        line = suggestion.format_line()

        assert line.startswith("ERROR DISPATCH-VAL-HTTP001 list_items[0]:")

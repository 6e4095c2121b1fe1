# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Schema Validator.

Validates the payload-body argument of a handler against the schema of
the active binding. A schema is either a pydantic ``BaseModel`` subclass
or any type accepted by ``pydantic.TypeAdapter`` (``dict[str, int]``,
a ``TypedDict``, a dataclass, ...).

Error Mapping:
    pydantic errors are folded into ``field -> [messages]``. The field is
    the dotted location of the error (``address.zip``); errors without a
    location are reported under ``_root``. Messages carry only the pydantic
    message text, never the rejected input.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from omnibase_dispatch.models import ModelSchemaValidationResult

logger = logging.getLogger(__name__)

ROOT_FIELD = "_root"


@lru_cache(maxsize=256)
def _adapter_for(schema: Any) -> TypeAdapter[Any]:
    return TypeAdapter(schema)


def format_field_errors(error: ValidationError) -> dict[str, list[str]]:
    """Fold a pydantic ValidationError into ``field -> [messages]``."""
    field_errors: dict[str, list[str]] = {}
    for item in error.errors(include_input=False, include_url=False):
        location = ".".join(str(part) for part in item.get("loc", ()))
        field_errors.setdefault(location or ROOT_FIELD, []).append(item["msg"])
    return field_errors


class SchemaValidator:
    """Validate payloads against binding schemas.

    Stateless; a single instance is shared by every pipeline.
    """

    def validate(self, schema: Any, value: Any) -> ModelSchemaValidationResult:
        """Validate ``value`` against ``schema``.

        Returns:
            ModelSchemaValidationResult with the coerced value on success, or
            the field error map on failure.
        """
        try:
            if isinstance(schema, type) and issubclass(schema, BaseModel):
                if isinstance(value, schema):
                    validated: Any = value
                else:
                    validated = schema.model_validate(value)
            else:
                validated = self._adapter(schema).validate_python(value)
        except ValidationError as e:
            field_errors = format_field_errors(e)
            logger.debug(
                "Payload rejected by schema %s (%d fields)",
                getattr(schema, "__name__", repr(schema)),
                len(field_errors),
                extra={"error_count": e.error_count()},
            )
            return ModelSchemaValidationResult(is_valid=False, field_errors=field_errors)
        return ModelSchemaValidationResult(is_valid=True, value=validated)

    def prepare(self, schema: Any) -> None:
        """Build the validator for ``schema`` ahead of the first request.

        Raises:
            PydanticUserError: If pydantic cannot generate a schema for it.
        """
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            return
        self._adapter(schema)

    @staticmethod
    def _adapter(schema: Any) -> TypeAdapter[Any]:
        try:
            return _adapter_for(schema)
        except TypeError:
            # Unhashable schema objects (e.g. parametrized Annotated metadata).
            return TypeAdapter(schema)


__all__ = ["ROOT_FIELD", "SchemaValidator", "format_field_errors"]

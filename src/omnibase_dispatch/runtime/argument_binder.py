# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Argument Binder.

Turns a handler's parameter bindings plus a canonical request view into
the positional argument list passed to the handler. Pure: no I/O, no
mutation of the view, and binding twice against the same view yields
equal lists.

Resolution rules:
    - The output list has ``arity`` slots (or the highest bound index + 1
      when the handler is variadic and a binding goes past ``arity``)
    - Unbound slots are ``None``
    - Keyed sources extract one field; without a key the whole container
      is passed
    - Header keys match case-insensitively
    - A source the transport cannot provide resolves to ``None`` and
      issues a RegistrationWarning; binding never raises
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from omnibase_dispatch.enums import EnumParameterSource
from omnibase_dispatch.errors import warn_registration
from omnibase_dispatch.models import ModelParameterBinding, ModelRequestView

logger = logging.getLogger(__name__)


def lookup_key(container: Any, key: str | None, *, case_insensitive: bool = False) -> Any:
    """Return field ``key`` of a mapping, sequence or object; the container when ``key`` is None."""
    if key is None:
        return container
    if container is None:
        return None
    if isinstance(container, Mapping):
        if key in container:
            return container[key]
        if case_insensitive:
            lowered = key.lower()
            for candidate, value in container.items():
                if isinstance(candidate, str) and candidate.lower() == lowered:
                    return value
        return None
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        if key.isdigit() and int(key) < len(container):
            return container[int(key)]
        return None
    return getattr(container, key, None)


def resolve_source(
    parameter: ModelParameterBinding,
    view: ModelRequestView,
) -> Any:
    """Return the value ``parameter`` binds to in ``view`` (no availability check)."""
    source = parameter.source
    key = parameter.key
    if source is EnumParameterSource.BODY:
        return lookup_key(view.body, key)
    if source is EnumParameterSource.PATH:
        return lookup_key(view.path_params, key)
    if source is EnumParameterSource.QUERY:
        return lookup_key(view.query_params, key)
    if source is EnumParameterSource.HEADERS:
        return lookup_key(view.headers, key, case_insensitive=True)
    if source is EnumParameterSource.COOKIES:
        return lookup_key(view.cookies, key)
    if source is EnumParameterSource.FILES:
        return lookup_key(view.files, key)
    if source is EnumParameterSource.SESSION:
        return view.session
    if source is EnumParameterSource.CONTEXT:
        return view.raw_context
    if source is EnumParameterSource.REQUEST:
        return view.raw_request
    return view.raw_response


def bind_arguments(
    parameters: Sequence[ModelParameterBinding],
    view: ModelRequestView,
    arity: int,
    *,
    transport: str = "unknown",
    method_name: str | None = None,
) -> list[Any]:
    """Build the positional argument list for one invocation.

    Args:
        parameters: Parameter bindings of the handler.
        view: Canonical request view built by the transport.
        arity: Number of positional parameters the handler declares.
        transport: Transport name used in warnings.
        method_name: Handler name used in warnings.

    Returns:
        List of argument values, unbound slots set to None.
    """
    size = max([arity, *(p.index + 1 for p in parameters)]) if parameters else arity
    args: list[Any] = [None] * size
    for parameter in parameters:
        if parameter.source not in view.available_sources:
            warn_registration(
                logger,
                f"Parameter source {parameter.source.value!r} is not available on "
                f"transport {transport!r}; argument {parameter.index} of "
                f"{method_name or '<handler>'} is None",
                method_name=method_name,
                transport=transport,
                parameter_index=parameter.index,
            )
            continue
        args[parameter.index] = resolve_source(parameter, view)
    return args


__all__ = ["bind_arguments", "lookup_key", "resolve_source"]

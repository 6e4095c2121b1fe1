# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Dispatch Pipeline.

The request-time sequence shared by every transport adapter::

    request view -> Argument Binder -> Schema Validator -> Middleware -> handler

The pipeline never raises for a single request's failure. It returns a
``ModelDispatchOutcome`` that the adapter maps to its wire format:

    - SUCCESS: handler ran, ``result`` holds its return value
    - SHORT_CIRCUITED: a middleware ended the chain, ``result`` is
      ``context.response``
    - VALIDATION_FAILED: schema rejected the payload, ``field_errors`` set,
      handler not invoked
    - HANDLER_ERROR: handler or middleware raised, ``error`` is a
      HandlerExecutionError chained to the original exception

Middleware Order:
    global middleware (``ServiceOrchestrator.use``), then method-level
    middleware, then binding-level middleware, handler innermost.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from omnibase_dispatch.enums import EnumDispatchStatus, EnumParameterSource
from omnibase_dispatch.errors import (
    DispatchError,
    HandlerExecutionError,
    ModelDispatchErrorContext,
    PayloadValidationError,
)
from omnibase_dispatch.models import (
    ModelDispatchOutcome,
    ModelMethodBinding,
    ModelRegistryEntry,
    ModelRequestView,
)
from omnibase_dispatch.runtime.argument_binder import bind_arguments, lookup_key
from omnibase_dispatch.runtime.invocation_context import InvocationContext
from omnibase_dispatch.runtime.middleware_executor import MiddlewareExecutor
from omnibase_dispatch.runtime.schema_validator import SchemaValidator

logger = logging.getLogger(__name__)


class DispatchPipeline:
    """Bind, validate and invoke one handler through its middleware chain.

    Attributes:
        global_middleware: Service-wide middleware, outermost in every chain
    """

    def __init__(
        self,
        *,
        global_middleware: Sequence[Any] = (),
        validator: SchemaValidator | None = None,
        executor: MiddlewareExecutor | None = None,
    ) -> None:
        self.global_middleware: list[Any] = list(global_middleware)
        self._validator = validator or SchemaValidator()
        self._executor = executor or MiddlewareExecutor()

    def build_chain(
        self, entry: ModelRegistryEntry, binding: ModelMethodBinding | None
    ) -> list[Any]:
        chain = [*self.global_middleware, *entry.middleware]
        if binding is not None:
            chain.extend(binding.middleware)
        return chain

    async def dispatch(
        self,
        context: InvocationContext,
        entry: ModelRegistryEntry,
        binding: ModelMethodBinding | None,
        view: ModelRequestView,
        *,
        args: Sequence[Any] | None = None,
    ) -> ModelDispatchOutcome:
        """Run one invocation.

        Args:
            context: Fresh context for this request.
            entry: Registry entry to invoke.
            binding: Active protocol binding (None for plain RPC methods).
            view: Canonical request view.
            args: Positional arguments to pass as-is instead of binding from
                the view (RPC passthrough).

        Returns:
            ModelDispatchOutcome describing what happened.
        """
        context.entry = entry
        context.binding = binding
        context.request = view
        transport = context.transport.value

        if args is not None:
            arguments = list(args)
        else:
            arguments = bind_arguments(
                entry.parameters,
                view,
                entry.arity,
                transport=transport,
                method_name=entry.name,
            )

        body_parameters = [
            p for p in entry.parameters if p.source is EnumParameterSource.BODY
        ]
        if (
            binding is not None
            and binding.has_schema
            and args is None
            and body_parameters
            and EnumParameterSource.BODY in view.available_sources
        ):
            validation = self._validator.validate(binding.payload_schema, view.body)
            if not validation.is_valid:
                error = PayloadValidationError(
                    "Validation failed",
                    field_errors=validation.field_errors,
                    context=self._error_context(context, entry),
                )
                logger.info(
                    "Validation failed for %s via %s (%d fields)",
                    entry.name,
                    transport,
                    len(validation.field_errors),
                    extra={
                        "method_name": entry.name,
                        "transport": transport,
                        "correlation_id": str(context.correlation_id),
                    },
                )
                return ModelDispatchOutcome(
                    status=EnumDispatchStatus.VALIDATION_FAILED,
                    field_errors=validation.field_errors,
                    error=error,
                )
            for parameter in body_parameters:
                arguments[parameter.index] = lookup_key(validation.value, parameter.key)

        invoked = False

        def terminal() -> Any:
            nonlocal invoked
            invoked = True
            return entry.handler(context, *arguments)

        try:
            reached, result = await self._executor.execute(
                context, self.build_chain(entry, binding), terminal
            )
        except Exception as e:
            if isinstance(e, HandlerExecutionError):
                failure: DispatchError = e
            else:
                failure = HandlerExecutionError(
                    f"Handler {entry.name!r} failed: {type(e).__name__}",
                    context=self._error_context(context, entry),
                )
                failure.__cause__ = e
            logger.exception(
                "Handler %s failed via %s (correlation_id=%s)",
                entry.name,
                transport,
                context.correlation_id,
                extra={
                    "method_name": entry.name,
                    "transport": transport,
                    "correlation_id": str(context.correlation_id),
                    "error_type": type(e).__name__,
                },
            )
            return ModelDispatchOutcome(
                status=EnumDispatchStatus.HANDLER_ERROR,
                error=failure,
                handler_invoked=invoked,
            )

        if not reached:
            return ModelDispatchOutcome(
                status=EnumDispatchStatus.SHORT_CIRCUITED,
                result=result,
            )
        return ModelDispatchOutcome(
            status=EnumDispatchStatus.SUCCESS,
            result=result,
            handler_invoked=True,
        )

    @staticmethod
    def _error_context(
        context: InvocationContext, entry: ModelRegistryEntry
    ) -> ModelDispatchErrorContext:
        return ModelDispatchErrorContext(
            transport=context.transport,
            operation="dispatch",
            target_name=entry.name,
            correlation_id=context.correlation_id,
        )


__all__ = ["DispatchPipeline"]

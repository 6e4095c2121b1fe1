# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Middleware Chain Executor.

Onion composition of an explicit, ordered middleware list around a
terminal handler call. ``advance(i)`` runs middleware ``i`` with a
continuation that calls ``advance(i + 1)``; past the end it runs the
terminal.

Accepted middleware forms:
    - A sync or async callable ``(context, call_next)``
    - An object with a ``use(context, call_next)`` method
    - A class with such a method, instantiated once without arguments

Ordering:
    For a chain of K middleware the side effects run
    ``m1-pre, ..., mK-pre, handler, mK-post, ..., m1-post``.

Short-circuit:
    A middleware that returns without calling ``call_next`` ends the chain;
    the result is whatever it stored on ``context.response``. Calling
    ``call_next`` twice raises MiddlewareChainError.

Result:
    When the handler ran, the result is the value returned by the outermost
    middleware, or the handler result if that value is None.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from omnibase_dispatch.errors import BindingConfigurationError, MiddlewareChainError
from omnibase_dispatch.runtime.invocation_context import InvocationContext

logger = logging.getLogger(__name__)

Middleware = Callable[[InvocationContext, Callable[[], Awaitable[Any]]], Any]


def normalize_middleware(middleware: Any) -> Middleware:
    """Return ``middleware`` as a callable ``(context, call_next)``.

    Raises:
        BindingConfigurationError: If ``middleware`` has none of the accepted forms.
    """
    if inspect.isclass(middleware):
        if not callable(getattr(middleware, "use", None)):
            raise BindingConfigurationError(
                f"Middleware class {middleware.__name__} has no use() method",
            )
        middleware = middleware()
    use = getattr(middleware, "use", None)
    if callable(use):
        return use
    if callable(middleware):
        return middleware
    raise BindingConfigurationError(
        f"Unsupported middleware object of type {type(middleware).__name__}",
    )


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class MiddlewareExecutor:
    """Run middleware chains around handler invocations."""

    async def execute(
        self,
        context: InvocationContext,
        middleware: Sequence[Any],
        terminal: Callable[[], Any],
    ) -> tuple[bool, Any]:
        """Run ``middleware`` around ``terminal``.

        Args:
            context: Invocation context; its ``next()`` tracks the active
                continuation.
            middleware: Chain in outer-to-inner order.
            terminal: Zero-argument callable invoking the handler (sync or
                async).

        Returns:
            ``(reached_terminal, result)``. When the chain short-circuited,
            ``result`` is ``context.response``.

        Raises:
            MiddlewareChainError: If a continuation is called twice.
            Exception: Whatever a middleware or the handler raised.
        """
        chain = [normalize_middleware(item) for item in middleware]
        reached = False
        terminal_result: Any = None

        async def advance(index: int) -> Any:
            nonlocal reached, terminal_result
            if index >= len(chain):
                reached = True
                context.set_next(None)
                terminal_result = await _maybe_await(terminal())
                return terminal_result

            called = False

            async def call_next() -> Any:
                nonlocal called
                if called:
                    raise MiddlewareChainError(
                        "call_next() called more than once",
                        method_name=context.method_name,
                        middleware_index=index,
                    )
                called = True
                try:
                    return await advance(index + 1)
                finally:
                    context.set_next(call_next)

            context.set_next(call_next)
            try:
                result = await _maybe_await(chain[index](context, call_next))
            finally:
                context.set_next(None)
            if not called:
                logger.debug(
                    "Middleware %d short-circuited %s",
                    index,
                    context.method_name,
                    extra={
                        "method_name": context.method_name,
                        "correlation_id": str(context.correlation_id),
                    },
                )
            return result

        result = await advance(0)
        if not reached:
            return False, context.response
        return True, terminal_result if result is None else result


__all__ = [
    "Middleware",
    "MiddlewareExecutor",
    "normalize_middleware",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Binding Declaration Decorators.

Decorators in this module only stamp pure binding data onto the decorated
function or class. They never touch a registry. The data is collected by
``BindingRegistry.register_service(cls)``, which reads the class's *own*
namespace (``vars(cls)``), so inherited handlers are never picked up by
accident.

Method decorators (stackable, one binding per protocol tag):
    - ``command`` / ``tool_call``: command-line transport
    - ``http_endpoint`` and the verb shortcuts ``get``/``post``/``put``/
      ``patch``/``delete``: HTTP request/response
    - ``stream_endpoint``: server-sent event stream
    - ``socket_event``: WebSocket event frames
    - ``rpc``: socket RPC
    - ``use_middleware``: method-level middleware shared by all bindings
    - ``param``: binds one handler parameter to a request source

Class decorators:
    - ``transport(config_key, enabled=True, **options)`` and the shortcuts
      ``stdio``, ``webservice`` and ``rpc_service``

Example:
    .. code-block:: python

        registry = BindingRegistry()

        @registry.register_service
        @stdio(interactive=False)
        @rpc_service(port=8080)
        class Calculator:
            @command("add", schema=ModelAddArgs)
            @rpc("add")
            @param(0, "body")
            def add(self, args: ModelAddArgs) -> int:
                return args.a + args.b

Parameter indices are 0-based positions in the handler's argument list,
not counting ``self``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from omnibase_dispatch.enums import EnumParameterSource, EnumProtocolTag
from omnibase_dispatch.errors import BindingConfigurationError

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)

METHOD_BINDINGS_ATTR = "__dispatch_method_bindings__"
PARAMETER_BINDINGS_ATTR = "__dispatch_parameter_bindings__"
MIDDLEWARE_ATTR = "__dispatch_middleware__"
CLASS_BINDINGS_ATTR = "__dispatch_class_bindings__"


@dataclass(frozen=True)
class PendingMethodBinding:
    """Method binding stamped by a decorator, resolved at registration.

    ``identifier`` may be None, in which case the method name is used.
    """

    tag: EnumProtocolTag
    identifier: str | None
    fields: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PendingParameterBinding:
    index: int
    source: EnumParameterSource
    key: str | None = None


def _target(func: Any) -> Any:
    if isinstance(func, (staticmethod, classmethod)):
        return func.__func__
    return func


def _stamp_list(func: Any, attr: str, item: object) -> None:
    target = _target(func)
    stamped = target.__dict__.get(attr)
    if stamped is None:
        stamped = []
        setattr(target, attr, stamped)
    stamped.append(item)


def _method_binding(
    tag: EnumProtocolTag,
    identifier: str | None,
    **fields: Any,
) -> Callable[[F], F]:
    if identifier is not None and not identifier:
        raise BindingConfigurationError(
            f"Empty identifier for {tag.value} binding",
            protocol_tag=tag.value,
        )
    # Drop unset fields so the model defaults apply.
    clean = {name: value for name, value in fields.items() if value is not None}
    if "middleware" in clean:
        clean["middleware"] = tuple(clean["middleware"])

    def decorator(func: F) -> F:
        _stamp_list(
            func,
            METHOD_BINDINGS_ATTR,
            PendingMethodBinding(tag=tag, identifier=identifier, fields=clean),
        )
        return func

    return decorator


def command(
    name: str | None = None,
    *,
    schema: Any = None,
    description: str | None = None,
    disabled: bool = False,
    middleware: tuple[Any, ...] | list[Any] | None = None,
    **options: Any,
) -> Callable[[F], F]:
    """Bind a method to a command-line command (defaults to the method name)."""
    return _method_binding(
        EnumProtocolTag.COMMAND,
        name,
        payload_schema=schema,
        description=description,
        disabled=disabled,
        middleware=middleware,
        options=options or None,
    )


def tool_call(
    name: str | None = None,
    *,
    schema: Any = None,
    description: str | None = None,
    disabled: bool = False,
    middleware: tuple[Any, ...] | list[Any] | None = None,
    **options: Any,
) -> Callable[[F], F]:
    """Bind a method to a tool call served by the command-line transport."""
    return _method_binding(
        EnumProtocolTag.TOOL_CALL,
        name,
        payload_schema=schema,
        description=description,
        disabled=disabled,
        middleware=middleware,
        options=options or None,
    )


def http_endpoint(
    path: str,
    method: str = "GET",
    *,
    schema: Any = None,
    description: str | None = None,
    disabled: bool = False,
    middleware: tuple[Any, ...] | list[Any] | None = None,
    **options: Any,
) -> Callable[[F], F]:
    """Bind a method to an HTTP route.

    Args:
        path: Route path; ``{id}`` and ``:id`` placeholders are accepted.
        method: HTTP verb.
        schema: Optional schema validating the body-bound parameter.
    """
    return _method_binding(
        EnumProtocolTag.HTTP_ENDPOINT,
        path,
        http_method=method,
        payload_schema=schema,
        description=description,
        disabled=disabled,
        middleware=middleware,
        options=options or None,
    )


def get(path: str, **kwargs: Any) -> Callable[[F], F]:
    return http_endpoint(path, "GET", **kwargs)


def post(path: str, **kwargs: Any) -> Callable[[F], F]:
    return http_endpoint(path, "POST", **kwargs)


def put(path: str, **kwargs: Any) -> Callable[[F], F]:
    return http_endpoint(path, "PUT", **kwargs)


def patch(path: str, **kwargs: Any) -> Callable[[F], F]:
    return http_endpoint(path, "PATCH", **kwargs)


def delete(path: str, **kwargs: Any) -> Callable[[F], F]:
    return http_endpoint(path, "DELETE", **kwargs)


def stream_endpoint(
    path: str,
    method: str = "GET",
    *,
    schema: Any = None,
    description: str | None = None,
    disabled: bool = False,
    middleware: tuple[Any, ...] | list[Any] | None = None,
    **options: Any,
) -> Callable[[F], F]:
    """Bind a method to a server-sent event stream route."""
    return _method_binding(
        EnumProtocolTag.STREAM_ENDPOINT,
        path,
        http_method=method,
        payload_schema=schema,
        description=description,
        disabled=disabled,
        middleware=middleware,
        options=options or None,
    )


def socket_event(
    event: str | None = None,
    *,
    schema: Any = None,
    description: str | None = None,
    disabled: bool = False,
    middleware: tuple[Any, ...] | list[Any] | None = None,
    **options: Any,
) -> Callable[[F], F]:
    """Bind a method to a WebSocket event (defaults to the method name)."""
    return _method_binding(
        EnumProtocolTag.SOCKET_EVENT,
        event,
        payload_schema=schema,
        description=description,
        disabled=disabled,
        middleware=middleware,
        options=options or None,
    )


def rpc(
    name: str | None = None,
    *,
    schema: Any = None,
    description: str | None = None,
    disabled: bool = False,
    middleware: tuple[Any, ...] | list[Any] | None = None,
    **options: Any,
) -> Callable[[F], F]:
    """Bind a method to a socket RPC method (defaults to the method name)."""
    return _method_binding(
        EnumProtocolTag.RPC,
        name,
        payload_schema=schema,
        description=description,
        disabled=disabled,
        middleware=middleware,
        options=options or None,
    )


def use_middleware(*middleware: Any) -> Callable[[F], F]:
    """Attach method-level middleware, shared by every binding of the method."""

    def decorator(func: F) -> F:
        _stamp_list(func, MIDDLEWARE_ATTR, tuple(middleware))
        return func

    return decorator


def param(
    index: int,
    source: EnumParameterSource | str,
    key: str | None = None,
) -> Callable[[F], F]:
    """Bind handler parameter ``index`` to a request source.

    Example:
        .. code-block:: python

            @get("/users/{id}")
            @param(0, "path", "id")
            @param(1, EnumParameterSource.HEADERS, "authorization")
            def get_user(self, user_id: str, token: str | None) -> dict: ...
    """
    try:
        resolved = EnumParameterSource(source)
    except ValueError as e:
        raise BindingConfigurationError(
            f"Unknown parameter source: {source!r}",
            parameter_index=index,
        ) from e
    if key is not None and not resolved.accepts_key:
        raise BindingConfigurationError(
            f"Parameter source {resolved.value!r} does not accept a key",
            parameter_index=index,
        )

    def decorator(func: F) -> F:
        _stamp_list(
            func,
            PARAMETER_BINDINGS_ATTR,
            PendingParameterBinding(index=index, source=resolved, key=key),
        )
        return func

    return decorator


def transport(
    config_key: str,
    enabled: bool = True,
    **options: Any,
) -> Callable[[C], C]:
    """Declare per-class configuration for the transport ``config_key``.

    Class values override the options the transport was registered with.
    """

    def decorator(cls: C) -> C:
        stamped = cls.__dict__.get(CLASS_BINDINGS_ATTR)
        if stamped is None:
            stamped = {}
            setattr(cls, CLASS_BINDINGS_ATTR, stamped)
        stamped[config_key] = {"enabled": enabled, "options": dict(options)}
        return cls

    return decorator


def stdio(enabled: bool = True, **options: Any) -> Callable[[C], C]:
    return transport("stdio", enabled, **options)


def webservice(enabled: bool = True, **options: Any) -> Callable[[C], C]:
    return transport("webservice", enabled, **options)


def rpc_service(enabled: bool = True, **options: Any) -> Callable[[C], C]:
    return transport("rpc", enabled, **options)


__all__ = [
    "CLASS_BINDINGS_ATTR",
    "METHOD_BINDINGS_ATTR",
    "MIDDLEWARE_ATTR",
    "PARAMETER_BINDINGS_ATTR",
    "PendingMethodBinding",
    "PendingParameterBinding",
    "command",
    "delete",
    "get",
    "http_endpoint",
    "param",
    "patch",
    "post",
    "put",
    "rpc",
    "rpc_service",
    "socket_event",
    "stdio",
    "stream_endpoint",
    "tool_call",
    "transport",
    "use_middleware",
    "webservice",
]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Stdio Transport Adapter.

Serves ``command`` and ``tool-call`` bindings from the command line, either
once from the process arguments or from an interactive prompt.

Modes:
    - INTERACTIVE: ``interactive`` option set and stdin is a TTY; a REPL
      reads commands until ``exit``/``quit`` or end of input
    - ONE_SHOT: process arguments present; the first one is the command
    - otherwise usage is printed and the adapter terminates with code 1

Argument Parsing:
    ``--flag=value`` (``true``/``false`` become bools, numeric strings
    become int/float), bare ``--flag`` is True, repeated flags collect into
    a list, every other token is positional. The flag map is both the
    ``body`` and the ``query`` source; positionals are the ``path`` source
    keyed ``"0"``, ``"1"``, ...; ``context`` is a ``ModelCliContext`` and
    ``request`` is the raw command line.

Exit Codes (one-shot):
    0 on success or help; 1 on unknown command, validation failure,
    handler failure, or when no command was given.

Example:
    .. code-block:: bash

        $ python -m calculator echo --msg=hi
        hi
        $ python -m calculator echo
        Invalid arguments for command 'echo':
          msg: Field required
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import shlex
import sys
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from pydantic import BaseModel
from rich.console import Console

from omnibase_dispatch.enums import (
    EnumCliMode,
    EnumDispatchStatus,
    EnumParameterSource,
    EnumProtocolTag,
    EnumTransportKind,
)
from omnibase_dispatch.models import (
    ModelCliContext,
    ModelMethodBinding,
    ModelTransportConfig,
)
from omnibase_dispatch.transports.base import Route, TransportAdapter
from omnibase_dispatch.transports.payload_codec import dumps

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_EXIT_TOKENS = frozenset({"exit", "quit"})
_DEFAULT_PROMPT = "> "

LineReader = Callable[[str], Awaitable[str | None]]
ExitHandler = Callable[[int], None]


def coerce_flag_value(value: str) -> Any:
    """Coerce a ``--flag=value`` string to bool, int, float or str."""
    if value == "true":
        return True
    if value == "false":
        return False
    if _INT_PATTERN.match(value):
        return int(value)
    if _FLOAT_PATTERN.match(value):
        return float(value)
    return value


def parse_cli_args(tokens: Sequence[str]) -> tuple[dict[str, Any], list[str], bool]:
    """Parse command tokens.

    Returns:
        ``(flags, positionals, help_requested)``
    """
    flags: dict[str, Any] = {}
    positionals: list[str] = []
    help_requested = False
    for token in tokens:
        if not token.startswith("--") or token == "--":
            positionals.append(token)
            continue
        name, has_value, raw_value = token[2:].partition("=")
        value: Any = coerce_flag_value(raw_value) if has_value else True
        if name == "help" and value is True:
            help_requested = True
        if name in flags:
            existing = flags[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                flags[name] = [existing, value]
        else:
            flags[name] = value
    return flags, positionals, help_requested


def _type_label(annotation: Any) -> str:
    origin = getattr(annotation, "__origin__", None)
    target = origin or annotation
    if target is str:
        return "string"
    if target is bool:
        return "boolean"
    if target in (int, float):
        return "number"
    if target in (list, tuple, set, frozenset):
        return "array"
    if target is dict or (isinstance(target, type) and issubclass(target, BaseModel)):
        return "object"
    return getattr(target, "__name__", None) or str(annotation)


def describe_schema_options(schema: Any) -> list[str]:
    """Return ``--name <type>  description`` lines for a schema's fields."""
    if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
        return []
    lines = []
    for name, field in schema.model_fields.items():
        option = f"--{name} <{_type_label(field.annotation)}>"
        if field.description:
            lines.append(f"  {option:<24}{field.description}")
        else:
            lines.append(f"  {option}")
    return lines


async def _read_line_from_console(console: Console, prompt: str) -> str | None:
    try:
        return await asyncio.to_thread(console.input, prompt)
    except EOFError:
        return None


class StdioTransportAdapter(TransportAdapter):
    """
    Command-line transport for command and tool-call bindings.

    Args:
        argv: Command tokens (defaults to ``sys.argv[1:]`` at listen time)
        console: Console for results and help
        error_console: Console for error messages (stderr by default)
        stdin_isatty: Returns whether stdin is a terminal
        line_reader: Reads one REPL line, returning None at end of input
        exit_handler: Called with the exit code when the adapter terminates;
            defaults to ``ServiceOrchestrator.request_shutdown``
    """

    config_key = "stdio"
    transport_kind = EnumTransportKind.STDIO
    owned_tags = frozenset({EnumProtocolTag.COMMAND, EnumProtocolTag.TOOL_CALL})
    supported_sources = frozenset(
        {
            EnumParameterSource.BODY,
            EnumParameterSource.QUERY,
            EnumParameterSource.PATH,
            EnumParameterSource.CONTEXT,
            EnumParameterSource.REQUEST,
        }
    )

    def __init__(
        self,
        *,
        argv: Sequence[str] | None = None,
        console: Console | None = None,
        error_console: Console | None = None,
        stdin_isatty: Callable[[], bool] | None = None,
        line_reader: LineReader | None = None,
        exit_handler: ExitHandler | None = None,
    ) -> None:
        super().__init__()
        self._argv = list(argv) if argv is not None else None
        self._console = console or Console()
        self._error_console = error_console or Console(stderr=True)
        self._stdin_isatty = stdin_isatty or sys.stdin.isatty
        self._line_reader = line_reader
        self._exit_handler = exit_handler
        self._mode: EnumCliMode = EnumCliMode.IDLE
        self._exit_code: int | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def argv(self) -> list[str] | None:
        return list(self._argv) if self._argv is not None else None

    def set_argv(self, argv: Sequence[str]) -> None:
        """Set the command tokens unless the adapter was built with explicit ``argv``."""
        if self._argv is None:
            self._argv = list(argv)

    @property
    def mode(self) -> EnumCliMode:
        return self._mode

    @property
    def exit_code(self) -> int | None:
        return self._exit_code

    @property
    def interactive(self) -> bool:
        return bool(self.options.get("interactive", False))

    @property
    def prompt(self) -> str:
        return str(self.options.get("prompt", _DEFAULT_PROMPT))

    async def initialize(self, config: ModelTransportConfig) -> None:
        await super().initialize(config)
        self._mode = EnumCliMode.IDLE
        self._exit_code = None

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _out(self, text: str) -> None:
        self._console.print(text, markup=False, highlight=False, soft_wrap=True)

    def _err(self, text: str) -> None:
        self._error_console.print(text, markup=False, highlight=False, soft_wrap=True)

    def command_names(self) -> list[str]:
        return [binding.identifier for _, binding in self.routes()]

    def _find(self, name: str) -> Route | None:
        return self.resolve(EnumProtocolTag.COMMAND, name) or self.resolve(
            EnumProtocolTag.TOOL_CALL, name
        )

    def general_help(self) -> str:
        lines = ["Available commands:"]
        for _, binding in self.routes():
            lines.append(f"  {binding.identifier:<15}{binding.description or ''}")
        lines.append(f"  {'help <command>':<15}Display help for a specific command.")
        lines.append(f"  {'exit|quit':<15}Exit interactive mode.")
        return "\n".join(lines)

    def command_help(self, name: str, binding: ModelMethodBinding) -> str:
        lines = [f"Usage: {name} [options]", ""]
        if binding.description:
            lines.extend([binding.description, ""])
        lines.append("Options:")
        options = describe_schema_options(binding.payload_schema)
        if options:
            lines.extend(options)
        else:
            lines.append("  No specific options defined in schema.")
        lines.append(f"  {'--help':<24}Display this help message")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(
        self,
        name: str,
        tokens: Sequence[str],
        *,
        raw_line: str | None = None,
        interactive: bool = False,
    ) -> bool:
        """Run one command; return True on success."""
        route = self._find(name)
        if route is None:
            self._err(f"Error: Command '{name}' not found.")
            return False
        entry, binding = route
        flags, positionals, _ = parse_cli_args(tokens)
        cli_context = ModelCliContext(
            command=name,
            raw_args=tuple(tokens),
            flags=flags,
            positionals=tuple(positionals),
            interactive=interactive,
            console=self._console,
        )
        view = self.build_view(
            body=flags,
            query_params=flags,
            path_params={str(index): token for index, token in enumerate(positionals)},
            raw_request=raw_line if raw_line is not None else shlex.join([name, *tokens]),
            raw_context=cli_context,
        )
        outcome = await self._dispatch(entry, binding, view, transport_context=cli_context)

        if outcome.status is EnumDispatchStatus.VALIDATION_FAILED:
            self._err(f"Invalid arguments for command '{name}':")
            for field, messages in outcome.field_errors.items():
                self._err(f"  {field}: {', '.join(messages)}")
            self._err("")
            self._err(self.command_help(name, binding))
            return False
        if outcome.status is EnumDispatchStatus.HANDLER_ERROR:
            self._err(f"Error executing command {name}: {outcome.error_message}")
            return False

        self._print_result(outcome.result)
        return True

    def _print_result(self, result: Any) -> None:
        if result is None:
            return
        if isinstance(result, str):
            self._out(result)
        else:
            self._out(dumps(result, indent=2))

    async def run_once(self, argv: Sequence[str]) -> int:
        """Run a one-shot invocation and return its exit code."""
        self._mode = EnumCliMode.ONE_SHOT
        try:
            return await self._one_shot(list(argv))
        finally:
            self._mode = EnumCliMode.TERMINATED

    async def _one_shot(self, argv: list[str]) -> int:
        name, tokens = argv[0], argv[1:]
        _, _, help_requested = parse_cli_args(tokens)

        if name == "help" and not help_requested:
            if not tokens:
                self._out(self.general_help())
                return 0
            route = self._find(tokens[0])
            if route is None:
                self._err(f"Error: Command '{tokens[0]}' not found for help.")
                self._out(self.general_help())
                return 1
            self._out(self.command_help(tokens[0], route[1]))
            return 0

        route = self._find(name)
        if route is None:
            self._err(f"Error: Command '{name}' not found.")
            self._out(self.general_help())
            return 1
        if help_requested:
            self._out(self.command_help(name, route[1]))
            return 0

        return 0 if await self.execute(name, tokens) else 1

    async def run_interactive(self) -> int:
        """Run the REPL until exit/quit or end of input; return 0."""
        self._mode = EnumCliMode.INTERACTIVE
        self._out("Interactive mode. Type 'help' for commands, 'exit' to quit.")
        try:
            while True:
                line = await self._read_line()
                if line is None:
                    break
                if not await self.handle_line(line):
                    break
        finally:
            self._mode = EnumCliMode.TERMINATED
        self._out("Exiting interactive mode.")
        return 0

    async def handle_line(self, line: str) -> bool:
        """Handle one REPL line; return False when the REPL should stop."""
        try:
            tokens = shlex.split(line)
        except ValueError as e:
            self._err(f"Could not parse input: {e}")
            return True
        if not tokens:
            return True
        name, args = tokens[0], tokens[1:]
        if name in _EXIT_TOKENS:
            return False
        if name == "help":
            if not args:
                self._out(self.general_help())
            else:
                route = self._find(args[0])
                if route is None:
                    self._out(f"Unknown command for help: {args[0]}")
                else:
                    self._out(self.command_help(args[0], route[1]))
            return True
        route = self._find(name)
        if route is None:
            self._out(f"Unknown command: {name}. Type 'help' for available commands.")
            return True
        if parse_cli_args(args)[2]:
            self._out(self.command_help(name, route[1]))
            return True
        await self.execute(name, args, raw_line=line, interactive=True)
        return True

    async def _read_line(self) -> str | None:
        if self._line_reader is not None:
            return await self._line_reader(self.prompt)
        return await _read_line_from_console(self._console, self.prompt)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def listen(self) -> None:
        """Pick the mode and run it in a background task."""
        argv = self._argv if self._argv is not None else sys.argv[1:]
        if self.interactive and self._stdin_isatty():
            self._task = asyncio.create_task(self._run(self.run_interactive()))
        elif argv:
            self._task = asyncio.create_task(self._run(self.run_once(argv)))
        else:
            if self.interactive:
                self._err("Interactive mode configured, but stdin is not a TTY.")
                self._err("For one-shot commands: <program> <command> [args...]")
            else:
                self._err("No command provided. Use interactive mode or pass a command.")
                self._out(self.general_help())
            self._mode = EnumCliMode.TERMINATED
            self._terminate(1)

    async def _run(self, mode_run: Awaitable[int]) -> None:
        code = await mode_run
        self._terminate(code)

    def _terminate(self, code: int) -> None:
        self._exit_code = code
        logger.debug(
            "Stdio transport terminated with exit code %d",
            code,
            extra={"transport": self.transport_kind.value, "exit_code": code},
        )
        if self._exit_handler is not None:
            self._exit_handler(code)
        else:
            self.orchestrator.request_shutdown(code)

    async def wait_closed(self) -> None:
        """Wait for the running mode to finish."""
        if self._task is not None:
            await self._task

    async def close(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


__all__ = [
    "StdioTransportAdapter",
    "coerce_flag_value",
    "describe_schema_options",
    "parse_cli_args",
]

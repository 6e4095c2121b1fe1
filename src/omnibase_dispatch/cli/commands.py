# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Dispatch CLI Commands.

Runs, inspects and validates dispatch services named by a
``package.module:attr`` target.
"""

from __future__ import annotations

import asyncio

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from omnibase_dispatch.enums import EnumSuggestionSeverity
from omnibase_dispatch.errors import DispatchError
from omnibase_dispatch.runtime.binding_registry import BindingRegistry
from omnibase_dispatch.runtime.orchestrator import ServiceOrchestrator

console = Console()


@click.group()
def cli() -> None:
    """Dispatch service CLI."""


@cli.command(
    "run",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("target")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Runtime config YAML file",
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def run_cmd(target: str, config_path: str | None, args: tuple[str, ...]) -> None:
    """Run the service TARGET; ARGS are passed to its command line transport."""
    from omnibase_dispatch.runtime.kernel import bootstrap, configure_logging

    configure_logging()
    exit_code = asyncio.run(bootstrap(target, config_path=config_path, argv=list(args)))
    raise SystemExit(exit_code)


@cli.command("inspect")
@click.argument("target")
def inspect_cmd(target: str) -> None:
    """List the methods and bindings declared by TARGET."""
    registry, service_type, orchestrator = _load_declarations(target)

    table = Table(title=f"{service_type.__name__} Bindings")
    table.add_column("Method", style="cyan")
    table.add_column("Tag", style="bold")
    table.add_column("Identifier", style="green")
    table.add_column("Schema", style="dim")
    table.add_column("Parameters", style="dim")
    table.add_column("Middleware", style="dim")

    rows = 0
    for method_name in registry.list_methods(service_type):
        parameters = registry.get_parameter_bindings(service_type, method_name)
        parameter_text = ", ".join(
            f"{p.index}:{p.source.value}" + (f"[{p.key}]" if p.key else "")
            for p in sorted(parameters, key=lambda p: p.index)
        )
        middleware_count = len(registry.get_method_middleware(service_type, method_name))
        for tag, binding in registry.get_method_bindings(service_type, method_name).items():
            identifier = binding.identifier
            if binding.http_method:
                identifier = f"{binding.http_method} {identifier}"
            if binding.disabled:
                identifier = f"{identifier} (disabled)"
            schema = getattr(binding.payload_schema, "__name__", None) or (
                "-" if binding.payload_schema is None else repr(binding.payload_schema)
            )
            table.add_row(
                method_name,
                tag.value,
                escape(identifier),
                escape(schema),
                escape(parameter_text) or "-",
                str(middleware_count),
            )
            rows += 1

    if orchestrator is not None:
        for name in orchestrator.get_methods():
            table.add_row(name, "rpc", name, "-", "-", "0")
            rows += 1

    if rows == 0:
        console.print(f"[yellow]{service_type.__name__} declares no bindings[/yellow]")
    else:
        console.print(table)

    class_bindings = registry.get_class_bindings(service_type)
    for config_key, class_binding in class_bindings.items():
        state = "enabled" if class_binding.enabled else "disabled"
        options = escape(str(class_binding.options))
        console.print(f"  transport [cyan]{config_key}[/cyan]: {state} {options}")


@cli.command("validate")
@click.argument("target")
def validate_cmd(target: str) -> None:
    """Check the declarations of TARGET for likely mistakes."""
    from omnibase_dispatch.runtime.definition_validator import validate_service_definition

    registry, service_type, _ = _load_declarations(target)
    console.print(f"[bold blue]Validating {service_type.__name__}...[/bold blue]")
    suggestions = validate_service_definition(registry, service_type)

    styles = {
        EnumSuggestionSeverity.ERROR: "red",
        EnumSuggestionSeverity.WARNING: "yellow",
        EnumSuggestionSeverity.INFO: "dim",
    }
    for suggestion in suggestions:
        style = styles[suggestion.severity]
        console.print(f"  [{style}]{escape(suggestion.format_line())}[/{style}]")

    has_errors = any(s.severity is EnumSuggestionSeverity.ERROR for s in suggestions)
    if has_errors:
        console.print(f"[bold red]{service_type.__name__}: FAIL[/bold red]")
    else:
        console.print(f"[bold green]{service_type.__name__}: PASS[/bold green]")
    raise SystemExit(1 if has_errors else 0)


def _load_declarations(
    target: str,
) -> tuple[BindingRegistry, type, ServiceOrchestrator | None]:
    """Resolve TARGET into its registry, service type and orchestrator."""
    from omnibase_dispatch.runtime.kernel import find_registry, resolve_target

    try:
        module, value = resolve_target(target)
        if isinstance(value, type) and not issubclass(value, ServiceOrchestrator):
            return find_registry(module, target), value, None
        if isinstance(value, ServiceOrchestrator):
            orchestrator = value
        elif callable(value):
            orchestrator = value()
        else:
            orchestrator = None
        if not isinstance(orchestrator, ServiceOrchestrator):
            raise click.ClickException(
                f"{target} does not resolve to a service class or orchestrator"
            )
        return orchestrator.registry, type(orchestrator.service), orchestrator
    except DispatchError as e:
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    cli()

"""CLI entry point for operator-bundler.

Invoked as::

    operator-bundler [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m operator_bundler.cli.main

Commands
--------
- ``version``      Show version information.
- ``components``   List the registered components.
- ``bundle``       Generate deployment bundles from a recipe.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(package_name="operator-bundler")
def cli() -> None:
    """Generate Helm deployment bundles for Kubernetes operator components"""


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from operator_bundler import __version__

    console.print(f"[bold]operator-bundler[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# components
# ---------------------------------------------------------------------------


@cli.command(name="components")
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output the component list as JSON.",
)
def components_command(json_output: bool) -> None:
    """List the registered components and their chart defaults."""
    from operator_bundler.registry import build_default_registry

    registry = build_default_registry(load_plugins=True)
    rows = []
    for name in registry.list_components():
        descriptor = registry.descriptor(name)
        rows.append(
            {
                "name": name,
                "display_name": descriptor.display_name if descriptor else name,
                "helm_repository": descriptor.default_helm_repository if descriptor else "",
                "helm_chart": descriptor.default_helm_chart if descriptor else "",
                "override_keys": list(descriptor.value_override_keys) if descriptor else [],
            }
        )

    if json_output:
        console.print_json(json.dumps(rows, indent=2))
        return

    table = Table(title="Registered Components", show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Display Name")
    table.add_column("Chart")
    table.add_column("Repository", style="dim")
    table.add_column("Override Keys")
    for row in rows:
        table.add_row(
            row["name"],
            row["display_name"],
            row["helm_chart"] or "-",
            row["helm_repository"] or "-",
            ", ".join(row["override_keys"]) or "-",
        )
    console.print(table)


# ---------------------------------------------------------------------------
# bundle
# ---------------------------------------------------------------------------


@cli.command(name="bundle")
@click.option(
    "--recipe",
    "-r",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Recipe file (YAML or JSON).",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory the bundles are written into.",
)
@click.option(
    "--bundlers",
    "-b",
    multiple=True,
    help="Component to bundle. Repeatable. Default: every registered component in the recipe.",
)
@click.option(
    "--set",
    "value_overrides",
    multiple=True,
    help="Value override as component:path.to.field=value. Repeatable.",
)
@click.option(
    "--system-node-selector",
    multiple=True,
    help="Node selector for system workloads as key=value. Repeatable.",
)
@click.option(
    "--system-node-toleration",
    multiple=True,
    help="Toleration for system workloads as key=value:effect. Repeatable.",
)
@click.option(
    "--accelerated-node-selector",
    multiple=True,
    help="Node selector for accelerator workloads as key=value. Repeatable.",
)
@click.option(
    "--accelerated-node-toleration",
    multiple=True,
    help="Toleration for accelerator workloads as key=value:effect. Repeatable.",
)
@click.option(
    "--no-readme",
    is_flag=True,
    default=False,
    help="Skip README.md generation.",
)
@click.option(
    "--no-checksums",
    is_flag=True,
    default=False,
    help="Skip checksums.txt generation.",
)
@click.option(
    "--json-output",
    is_flag=True,
    default=False,
    help="Output results as JSON.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
def bundle_command(
    recipe: Path,
    output: Path,
    bundlers: tuple[str, ...],
    value_overrides: tuple[str, ...],
    system_node_selector: tuple[str, ...],
    system_node_toleration: tuple[str, ...],
    accelerated_node_selector: tuple[str, ...],
    accelerated_node_toleration: tuple[str, ...],
    no_readme: bool,
    no_checksums: bool,
    json_output: bool,
    verbose: bool,
) -> None:
    """Generate deployment bundles from a recipe.

    Examples:

    \b
        operator-bundler bundle -r recipe.yaml -o ./bundles
        operator-bundler bundle -r recipe.yaml -b gpu-operator --set gpuoperator:driver.version=570.86.16
        operator-bundler bundle -r recipe.yaml --system-node-selector nodeGroup=system \\
            --accelerated-node-toleration nvidia.com/gpu=present:NoSchedule
    """
    from operator_bundler import __version__
    from operator_bundler.bundler.runner import make_all
    from operator_bundler.config.settings import (
        BundlerConfig,
        parse_node_selectors,
        parse_tolerations,
        parse_value_overrides,
    )
    from operator_bundler.recipe.models import load_recipe
    from operator_bundler.registry import build_default_registry

    _configure_logging(verbose)

    try:
        recipe_result = load_recipe(recipe)
    except (ValueError, FileNotFoundError, yaml.YAMLError) as exc:
        console.print(f"[red]Recipe error:[/red] {exc}")
        sys.exit(1)

    try:
        config = BundlerConfig(
            include_readme=not no_readme,
            include_checksums=not no_checksums,
            version=__version__,
            value_overrides=parse_value_overrides(value_overrides),
            system_node_selector=parse_node_selectors(system_node_selector),
            system_node_tolerations=tuple(parse_tolerations(system_node_toleration)),
            accelerated_node_selector=parse_node_selectors(accelerated_node_selector),
            accelerated_node_tolerations=tuple(parse_tolerations(accelerated_node_toleration)),
            verbose=verbose,
        )
    except ValueError as exc:
        console.print(f"[red]Invalid option:[/red] {exc}")
        sys.exit(1)

    registry = build_default_registry(load_plugins=True)
    if bundlers:
        unknown = [name for name in bundlers if name not in registry]
        if unknown:
            console.print(
                f"[red]Error:[/red] unknown component(s): {', '.join(unknown)}. "
                f"Available: {', '.join(registry.list_components())}"
            )
            sys.exit(1)
        names = list(dict.fromkeys(bundlers))
    else:
        names = [name for name in recipe_result.component_names() if name in registry]
    if not names:
        console.print("[yellow]No registered components found in the recipe.[/yellow]")
        sys.exit(1)

    outcome = make_all(registry, config, recipe_result, output, names)

    if json_output:
        summary = {
            "output_dir": str(output),
            "results": [outcome.results[n].to_dict() for n in names if n in outcome.results],
            "errors": {n: str(e) for n, e in outcome.errors.items()},
        }
        console.print_json(json.dumps(summary, indent=2))
        sys.exit(0 if outcome.success else 1)

    table = Table(title=f"Bundles in {output}", show_header=True)
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    table.add_column("Files", justify="right")
    table.add_column("Size (bytes)", justify="right")
    table.add_column("Duration", justify="right")
    for name in names:
        if name in outcome.results:
            result = outcome.results[name]
            table.add_row(
                name,
                "[green]OK[/green]",
                str(len(result.files)),
                f"{result.size:,}",
                f"{result.duration:.3f}s",
            )
        else:
            table.add_row(name, "[red]FAILED[/red]", "-", "-", "-")
    console.print(table)

    for name, error in sorted(outcome.errors.items()):
        console.print(f"  [red]x[/red] {name}: {error}")

    if not outcome.success:
        sys.exit(1)

    console.print(
        Panel(
            f"[bold green]{len(outcome.results)} bundle(s)[/bold green], "
            f"{outcome.total_files} file(s), {outcome.total_size:,} bytes",
            title="Bundles Generated",
            expand=False,
        )
    )


if __name__ == "__main__":
    cli()

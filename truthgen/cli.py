"""
Truthgen CLI - Command-line interface for view generation

Usage:
    truthgen generate [schema_file] -o <output_dir>
    truthgen view <schema_file> <view_name>
    truthgen analyze <schema_file>
    truthgen validate <schema_file>
    truthgen init <app_name>
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from truthgen.analyzer import TruthAnalyzer
from truthgen.config import DEFAULT_CONFIG_FILE, OutputPaths, ProjectConfig, load_config
from truthgen.errors import TruthgenError
from truthgen.gen_logging import configure_logging
from truthgen.generator import (
    GenerationResult,
    ViewGeneratorRegistry,
    generate_view,
    generate_views,
    write_generated,
)
from truthgen.paths import PathResolver
from truthgen.spec import AppDefinition
from truthgen.templates import TemplateLoader

app = typer.Typer(
    name="truthgen",
    help="Generate editable UI view modules from a declarative app schema",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show template resolution detail"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
    config: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help=f"Project config file (defaults to ./{DEFAULT_CONFIG_FILE})",
        resolve_path=True,
    ),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"config_path": config}


def _load_project(ctx: typer.Context) -> tuple[ProjectConfig, PathResolver]:
    config_path = (ctx.obj or {}).get("config_path")
    try:
        config = load_config(config_path)
    except TruthgenError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    base_dir = config_path.parent if config_path else Path.cwd()
    return config, PathResolver.from_config(config, base_dir)


def _load_schema(schema_file: Path) -> AppDefinition:
    try:
        return AppDefinition.from_file(schema_file)
    except TruthgenError as e:
        rprint(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def generate(
    ctx: typer.Context,
    schema_file: Optional[Path] = typer.Argument(
        None,
        help="Path to the app schema (defaults to the configured schemaFile)",
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output root (defaults to the configured output root)",
        resolve_path=True,
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite view modules that already exist",
    ),
    only: Optional[list[str]] = typer.Option(
        None,
        "--only",
        help="Generate just this view (repeatable)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be generated without writing files",
    ),
) -> None:
    """Generate view modules for every view in the schema."""
    config, resolver = _load_project(ctx)
    if output is not None:
        resolver.output = OutputPaths(root=str(output), views=config.output.views)

    schema_path = schema_file or resolver.get_schema_file()
    app_def = _load_schema(schema_path)
    rprint(f"[green]✓[/green] Loaded: [bold]{escape(app_def.name)}[/bold]")

    registry = ViewGeneratorRegistry(TemplateLoader.from_resolver(resolver), config.render, app_def)
    try:
        result = generate_views(app_def, only=only or None, registry=registry)
    except TruthgenError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if dry_run:
        rprint(f"\n[yellow]Dry run - would generate to: {resolver.get_output_path(config.output.views)}[/yellow]\n")
        _show_preview(app_def, result, resolver)
    else:
        write_generated(result, resolver, overwrite=force)
        rprint(f"[green]✓[/green] Wrote {len(result.written)} view modules")
        for skipped in result.skipped:
            rprint(f"[yellow]•[/yellow] Kept existing {escape(skipped)} (use --force to overwrite)")

    for error in result.errors:
        rprint(f"[red]✗[/red] {escape(error)}")
    if not result.success:
        raise typer.Exit(1)


@app.command()
def view(
    ctx: typer.Context,
    schema_file: Path = typer.Argument(
        ...,
        help="Path to the app schema",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    view_name: str = typer.Argument(..., help="View to generate"),
) -> None:
    """Print the generated module for one view."""
    config, resolver = _load_project(ctx)
    app_def = _load_schema(schema_file)

    registry = ViewGeneratorRegistry(TemplateLoader.from_resolver(resolver), config.render, app_def)
    try:
        content = generate_view(app_def, view_name, registry)
    except TruthgenError as e:
        rprint(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)
    typer.echo(content, nl=False)


@app.command()
def analyze(
    schema_file: Path = typer.Argument(
        ...,
        help="Path to the app schema",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full analysis as JSON"),
    graph: bool = typer.Option(False, "--graph", help="Print the field dependency graph as JSON"),
) -> None:
    """Report field usage, warnings and health for the schema."""
    app_def = _load_schema(schema_file)
    analyzer = TruthAnalyzer(app_def)

    if graph:
        typer.echo(json.dumps(analyzer.generate_dependency_graph().to_dict(), indent=2, ensure_ascii=False))
        return

    analysis = analyzer.analyze_system()
    if as_json:
        typer.echo(json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False))
        return

    table = Table(title=f"{app_def.name} entities")
    table.add_column("Entity", style="cyan")
    table.add_column("Fields", justify="right")
    table.add_column("Behaviors", justify="right")
    table.add_column("UI config", justify="right")
    table.add_column("Unused")
    for entity in analysis.entities:
        table.add_row(
            entity.name,
            str(entity.field_count),
            str(entity.behavior_count),
            str(entity.ui_config_points),
            ", ".join(entity.unused_fields) or "-",
        )
    rprint(table)

    for entity in analysis.entities:
        for warning in entity.warnings:
            rprint(f"[yellow]![/yellow] {escape(entity.name)}: {escape(warning)}")
        for suggestion in entity.suggestions:
            rprint(f"[blue]→[/blue] {escape(entity.name)}: {escape(suggestion)}")

    color = "green" if analysis.health_score >= 80 else "yellow" if analysis.health_score >= 50 else "red"
    rprint(f"\nHealth: [{color}]{analysis.health_score}/100[/{color}]  Complexity: {analysis.total_complexity}")


@app.command()
def validate(
    schema_file: Path = typer.Argument(
        ...,
        help="Path to the app schema",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
) -> None:
    """Validate an app schema file."""
    app_def = _load_schema(schema_file)
    problems = app_def.check_references()

    if problems:
        rprint(f"[red]✗[/red] Invalid: [bold]{escape(app_def.name)}[/bold]")
        for problem in problems:
            rprint(f"  [red]•[/red] {escape(problem)}")
        raise typer.Exit(1)

    rprint(f"[green]✓[/green] Valid: [bold]{escape(app_def.name)}[/bold]")

    table = Table()
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Version", app_def.version or "-")
    table.add_row("Entities", str(len(app_def.entities)))
    table.add_row("Views", str(len(app_def.views)))
    table.add_row("Workflows", str(len(app_def.workflows)))

    rprint(table)


@app.command()
def templates(ctx: typer.Context) -> None:
    """List the view templates available to generation."""
    _, resolver = _load_project(ctx)
    available = TemplateLoader.from_resolver(resolver).list_available_templates()

    table = Table()
    table.add_column("Source", style="cyan")
    table.add_column("Templates")
    table.add_row("app", ", ".join(available["app"]) or "-")
    table.add_row("core", ", ".join(available["core"]) or "-")
    table.add_row("static", ", ".join(available["static"]) or "-")
    rprint(table)


@app.command()
def paths(ctx: typer.Context) -> None:
    """Show resolved source and output locations."""
    _, resolver = _load_project(ctx)
    watched = set(resolver.get_watchable_paths())

    table = Table()
    table.add_column("Kind", style="cyan")
    table.add_column("Path")
    table.add_column("Watched", justify="center")

    kinds = ["schema_file", "entities", "templates", "static", "extensions", "views", "components", "shared"]
    for kind, path in zip(kinds, resolver.get_all_source_paths()):
        table.add_row(kind, str(path), "✓" if path in watched else "")
    table.add_row("output", str(resolver.get_output_path()), "")

    rprint(table)


@app.command()
def init(
    app_name: str = typer.Argument(..., help="Application name"),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", resolve_path=True),
) -> None:
    """Create a starter truthgen.yaml and app schema."""
    if output_dir is None:
        output_dir = Path.cwd()

    config = ProjectConfig()
    config_file = output_dir / DEFAULT_CONFIG_FILE
    schema_file = output_dir / config.sources.schema_file

    for target in (config_file, schema_file):
        if target.exists():
            if not typer.confirm(f"{target} exists. Overwrite?"):
                raise typer.Exit(0)

    schema_dict = {
        "name": app_name,
        "version": "0.1.0",
        "description": f"{app_name} application",
        "entities": {
            "Task": {
                "fields": {
                    "id": {"type": "uuid", "auto": True},
                    "title": {"type": "string", "required": True},
                    "status": {"type": "enum", "options": ["todo", "in-progress", "done"], "required": True},
                    "priority": {"type": "enum", "options": ["low", "medium", "high"]},
                    "dueDate": {"type": "date"},
                },
                "ui": {
                    "display": {"primary": "title", "badge": "status"},
                    "form": {"fields": ["title", "status", "priority", "dueDate"]},
                },
            }
        },
        "views": {
            "TaskList": {"type": "list", "route": "/tasks", "entity": "Task", "filters": ["status"]},
            "TaskDetail": {"type": "detail", "route": "/tasks/:id", "entity": "Task"},
            "TaskCreate": {"type": "form", "route": "/tasks/new", "entity": "Task", "mode": "create"},
            "TaskEdit": {"type": "form", "route": "/tasks/:id/edit", "entity": "Task", "mode": "edit"},
            "TaskBoard": {"type": "kanban", "route": "/tasks/board", "entity": "Task", "groupBy": "status"},
            "TaskCalendar": {"type": "calendar", "route": "/tasks/calendar", "entity": "Task", "dateField": "dueDate"},
            "TaskDashboard": {"type": "dashboard", "route": "/", "entity": "Task"},
        },
    }

    schema_file.parent.mkdir(parents=True, exist_ok=True)
    with open(schema_file, "w", encoding="utf-8") as f:
        yaml.dump(schema_dict, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
    config_file.write_text(config.to_yaml(), encoding="utf-8")

    rprint(f"[green]✓[/green] Created {config_file}")
    rprint(f"[green]✓[/green] Created {schema_file}")
    rprint("\nNext: [cyan]truthgen generate[/cyan]")


@app.command()
def version() -> None:
    """Show version."""
    from truthgen import __version__
    rprint(f"truthgen {__version__}")


def _show_preview(app_def: AppDefinition, result: GenerationResult, resolver: PathResolver) -> None:
    """Show what would be generated."""
    tree = Tree(f"[bold]{escape(app_def.name)}[/bold]")

    views = tree.add("[blue]Views[/blue]")
    for generated in result.files:
        view_def = app_def.views[generated.view_name]
        target = resolver.get_view_output_path(generated.view_name)
        state = "[yellow]exists[/yellow]" if target.exists() else "[green]new[/green]"
        views.add(f"[cyan]{escape(generated.view_name)}[/cyan] ({view_def.type.value}) -> {escape(str(target))} {state}")

    rprint(tree)
    if result.files:
        rprint(Panel(f"{len(result.files)} views ready, {len(result.errors)} failed", title="Preview"))


def main() -> None:
    app()


if __name__ == "__main__":
    main()

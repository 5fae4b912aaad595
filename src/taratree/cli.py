"""TaraTree CLI - Command line interface for attack tree evaluation."""

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from taratree import __version__

app = typer.Typer(
    name="taratree",
    help="Attack tree risk propagation - attack potential and critical paths for TARA projects",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]TaraTree[/] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """TaraTree - attack tree risk propagation engine."""
    pass


def _load_project(project_path: Path):
    from taratree.exceptions import ProjectLoadError
    from taratree.graph.loader import ProjectLoader

    try:
        return ProjectLoader().load(project_path)
    except ProjectLoadError as e:
        console.print(f"[red]Error:[/] {e.message}")
        raise typer.Exit(1)


@app.command()
def evaluate(
    project_path: Annotated[Path, typer.Argument(help="Path to the project JSON file")],
    root: Annotated[
        Optional[list[str]], typer.Option("--root", "-r", help="Root id(s) to evaluate")
    ] = None,
    residual: Annotated[
        bool, typer.Option("--residual", help="Show residual critical paths instead of initial")
    ] = False,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write a JSON report to this path")
    ] = None,
    config: Annotated[
        Optional[Path], typer.Option("--config", "-c", help="Config file path")
    ] = None,
) -> None:
    """Evaluate attack trees and print their feasibility and critical paths."""
    from taratree.config import load_config
    from taratree.engine.project import ProjectCalculator
    from taratree.exceptions import UnknownNodeError
    from taratree.output.json_report import JsonReporter

    cfg = load_config(config)
    project = _load_project(project_path)
    calculator = ProjectCalculator(project, cfg)

    try:
        assessments = calculator.assess_all(root or None)
    except UnknownNodeError as e:
        console.print(f"[red]Error:[/] {e.message}")
        raise typer.Exit(1)

    table = Table(title=f"Attack Trees ({project_path.name})")
    table.add_column("Root", style="cyan")
    table.add_column("Title")
    table.add_column("Initial AP", justify="right")
    table.add_column("Initial", style="bold")
    table.add_column("Residual AP", justify="right")
    table.add_column("Residual", style="bold")

    for a in assessments:
        table.add_row(
            a.root_id,
            a.title,
            str(a.initial.potential_score) if a.initial else "-",
            a.initial_label,
            str(a.residual.potential_score) if a.residual else "-",
            a.residual_label,
        )
    console.print(table)

    max_shown = cfg.output.max_paths_shown
    for a in assessments:
        result = a.residual if residual else a.initial
        if result is None:
            continue
        console.print(f"\n[bold]{a.root_id}[/] critical paths ({len(result.critical_paths)}):")
        for path in result.critical_paths[:max_shown]:
            console.print(f"   → {' → '.join(path)}")
        if len(result.critical_paths) > max_shown or result.truncated:
            console.print("   [dim]… more paths omitted[/]")

    if output:
        output_file = JsonReporter().generate(assessments, output, stats=project.graph.stats())
        console.print(f"\n[green]Report saved to:[/] {output_file}")


@app.command("check-link")
def check_link(
    project_path: Annotated[Path, typer.Argument(help="Path to the project JSON file")],
    source: Annotated[str, typer.Argument(help="Parent node id")],
    target: Annotated[str, typer.Argument(help="Child node id")],
) -> None:
    """Check whether a new link SOURCE -> TARGET would be accepted."""
    from taratree.exceptions import TopologyError
    from taratree.graph.topology import TopologyValidator

    project = _load_project(project_path)
    validator = TopologyValidator(project.graph)

    try:
        decision = validator.validate_link(source, target)
    except TopologyError as e:
        console.print(f"[red]Rejected[/] [bold]{e.error_code}[/]: {e.message}")
        raise typer.Exit(1)

    console.print(f"[green]Accepted:[/] {source} → {target}")
    if decision.assign_gate:
        console.print(f"  Gate of {source} must be set to [bold]{decision.assign_gate.value}[/]")


@app.command()
def classify(
    project_path: Annotated[Path, typer.Argument(help="Path to the project JSON file")],
    node: Annotated[str, typer.Argument(help="Node id")],
) -> None:
    """Show which reusable sub-trees a node belongs to."""
    from taratree.graph.classifier import SubtreeClassifier

    project = _load_project(project_path)
    classifier = SubtreeClassifier(project.graph)

    if node not in project.graph:
        console.print(f"[yellow]Node not in graph:[/] {node}")

    circumvent_root = classifier.find_owning_circumvent_root(node)
    technical_root = classifier.find_owning_technical_root(node)
    parents = classifier.find_parents(node)

    console.print(f"[bold cyan]{node}[/]")
    console.print(f"[dim]Circumvent tree:[/] {circumvent_root or '-'}")
    console.print(f"[dim]Technical tree:[/] {technical_root or '-'}")
    console.print(f"[dim]Parents:[/] {', '.join(parents) or '-'}")
    console.print(f"[dim]Guarded by circumvent tree:[/] {classifier.has_circumvent_children(node)}")


@app.command()
def stats(
    project_path: Annotated[Path, typer.Argument(help="Path to the project JSON file")],
) -> None:
    """Show graph statistics for a project."""
    project = _load_project(project_path)
    graph_stats = project.graph.stats()

    table = Table(title="Graph Statistics")
    table.add_column("Node type", style="cyan")
    table.add_column("Count", justify="right")
    for node_type, count in sorted(graph_stats["node_types"].items()):
        table.add_row(node_type, str(count))
    console.print(table)

    console.print(f"Nodes: {graph_stats['total_nodes']}  Edges: {graph_stats['total_edges']}")
    console.print(f"TOE configurations: {len(project.toe_configurations)}")
    if graph_stats["missing_children"]:
        console.print(f"[yellow]Missing children:[/] {', '.join(graph_stats['missing_children'])}")
    if not graph_stats["is_acyclic"]:
        console.print("[red]Graph contains a cycle[/]")


if __name__ == "__main__":
    app()

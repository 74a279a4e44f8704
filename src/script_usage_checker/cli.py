"""CLI interface using Typer."""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from script_usage_checker.classifier import UsageClassifier
from script_usage_checker.config import CONFIG_FILENAME, Config, find_config_file
from script_usage_checker.reporters.csv_report import CSVReporter
from script_usage_checker.reporters.json_formats import JSONReporter
from script_usage_checker.reporters.terminal import TerminalReporter
from script_usage_checker.scanner.reference_finder import CorpusReadError
from script_usage_checker.scanner.scene_snapshot import (
    JsonSceneSnapshotProvider,
    SceneSnapshotError,
    SceneSnapshotProvider,
    UnitySceneSnapshotProvider,
    build_attachments,
)

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="script-usage-checker",
    help="Find scripts that are neither attached in the scene nor referenced by other code",
    add_completion=False,
)

console = Console()


class OutputFormat(str, Enum):
    """Output format options."""
    terminal = "terminal"
    json = "json"
    csv = "csv"


def _load_config(project_path: Path, config_file: Path | None) -> Config:
    """Load the project config, preferring an explicit file."""
    if config_file is not None:
        if not config_file.exists():
            console.print(f"[red]Error: Config file not found: {config_file}[/red]")
            raise typer.Exit(1)
        return Config(config_file)

    return Config(find_config_file(project_path))


def _resolve_project(project_path: Path) -> Path:
    project_path = project_path.resolve()

    if not project_path.exists():
        console.print(f"[red]Error: Project path not found: {project_path}[/red]")
        raise typer.Exit(1)

    return project_path


def _display_path(path: Path, project_path: Path) -> str:
    try:
        return str(path.relative_to(project_path))
    except ValueError:
        return str(path)


def _scene_provider(
    classifier: UsageClassifier,
    project_path: Path,
    scenes: list[Path] | None,
    snapshot: Path | None,
) -> SceneSnapshotProvider | None:
    """Pick the scene snapshot source from the command line or config."""
    if snapshot is not None:
        if not snapshot.is_absolute():
            snapshot = project_path / snapshot
        if not snapshot.exists():
            console.print(f"[red]Error: Snapshot file not found: {snapshot}[/red]")
            raise typer.Exit(1)
        return JsonSceneSnapshotProvider(snapshot)

    scene_paths = [Path(p) for p in (scenes or classifier.config.scene_paths)]
    if not scene_paths:
        return None

    scene_files: list[Path] = []
    for scene in scene_paths:
        scene_file = scene if scene.is_absolute() else project_path / scene
        if not scene_file.exists():
            console.print(f"[red]Error: Scene file not found: {scene_file}[/red]")
            raise typer.Exit(1)
        scene_files.append(scene_file)

    return UnitySceneSnapshotProvider(
        scene_files,
        assets_root=classifier.corpus_root,
        type_info=classifier.type_info,
        extension=classifier.config.extension,
        exclude_patterns=classifier.config.exclude_patterns,
    )


def _set_verbose(verbose: bool) -> None:
    """Switch the root logger to debug output."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@app.command()
def check(
    project_path: Path = typer.Option(
        ".",
        "--project",
        "-p",
        help="Path to project root directory",
    ),
    root: str = typer.Option(
        None,
        "--root",
        "-r",
        help="Directory of scripts to check, relative to the project (default: Assets/Scripts)",
    ),
    scenes: list[Path] = typer.Option(
        None,
        "--scene",
        "-s",
        help="Scene file whose components count as attached (can be repeated)",
    ),
    snapshot: Path = typer.Option(
        None,
        "--snapshot",
        help="JSON scene snapshot exported from the editor",
    ),
    export_csv: Optional[bool] = typer.Option(
        None,
        "--export-csv/--no-export-csv",
        help="Write a CSV report",
    ),
    output_dir: str = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for the CSV report (default: Assets)",
    ),
    simple: bool = typer.Option(
        False,
        "--simple",
        help="Write only Name, AttachedTo and Status columns",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.terminal,
        "--format",
        "-f",
        help="Output format (terminal, json, csv)",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Path to configuration file (default: {CONFIG_FILENAME} in the project)",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Abort when a script cannot be read instead of skipping it",
    ),
    details: bool = typer.Option(
        False,
        "--details",
        "-d",
        help="Show references for each script",
    ),
    fail_on_unused: bool = typer.Option(
        False,
        "--fail-on-unused",
        help="Exit with code 1 if any script is unused (CI mode)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """Check which scripts are used."""

    _set_verbose(verbose)
    project_path = _resolve_project(project_path)
    config = _load_config(project_path, config_file)

    # Blank values keep the configured ones
    config.set("paths.target_directory", root)
    config.set("paths.output_directory", output_dir)
    config.set("output.export_csv", export_csv)
    if simple:
        config.set("output.simple", True)
    if strict:
        config.set("scan.strict", True)

    target_root = Path(config.target_directory)
    if not target_root.is_absolute():
        target_root = project_path / target_root
    if not target_root.is_dir():
        console.print(f"[red]Error: Script directory not found: {target_root}[/red]")
        raise typer.Exit(1)

    terminal = output_format == OutputFormat.terminal

    try:
        classifier = UsageClassifier(project_path, target_root=target_root, config=config)

        provider = _scene_provider(classifier, project_path, scenes, snapshot)
        if provider is not None:
            classifier.scene_provider = provider
        elif terminal:
            console.print("[yellow]⚠️  No scene given; no script counts as attached[/yellow]")

        if terminal:
            console.print(f"\n[bold cyan]🔍 Checking scripts in {escape(str(target_root))}[/bold cyan]")
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                progress.add_task("[green]Scanning scripts...", total=None)
                results = classifier.classify()
        else:
            results = classifier.classify()

    except (CorpusReadError, SceneSnapshotError) as e:
        console.print(f"\n[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if output_format == OutputFormat.terminal:
        if not results:
            console.print("\n[yellow]ℹ️  No scripts found to check[/yellow]")
        else:
            terminal_reporter = TerminalReporter(console=console)

            console.print("")
            terminal_reporter.print_statistics(results)
            terminal_reporter.print_summary_table(results)

            if details:
                for result in results:
                    terminal_reporter.print_detailed_report(result)

    elif output_format == OutputFormat.json:
        typer.echo(JSONReporter().generate_report(results))

    elif output_format == OutputFormat.csv:
        typer.echo(CSVReporter(simple=config.simple).generate_report(results), nl=False)

    if config.export_csv:
        report_dir = Path(config.output_directory)
        if not report_dir.is_absolute():
            report_dir = project_path / report_dir

        report_path = CSVReporter(simple=config.simple).write_to_directory(
            results, report_dir, timestamped=config.timestamped
        )
        if terminal:
            console.print(f"[green]✅ CSV report saved to: {escape(str(report_path))}[/green]")

    if fail_on_unused and any(not r.is_used for r in results):
        if terminal:
            console.print("\n[red]❌ Unused scripts found. CI check failed.[/red]")
        raise typer.Exit(1)


@app.command()
def scripts(
    project_path: Path = typer.Option(
        ".",
        "--project",
        "-p",
        help="Path to project root directory",
    ),
    root: str = typer.Option(
        None,
        "--root",
        "-r",
        help="Directory of scripts to list, relative to the project",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """List resolvable scripts and their kinds."""

    _set_verbose(verbose)
    project_path = _resolve_project(project_path)
    config = _load_config(project_path, config_file)
    config.set("paths.target_directory", root)

    classifier = UsageClassifier(project_path, config=config)
    entities = classifier.discover_entities()

    if not entities:
        console.print(f"\n[yellow]No scripts found in {escape(str(classifier.target_root))}[/yellow]")
        return

    table = Table(title="📜 Scripts", show_header=True, header_style="bold cyan")
    table.add_column("Script", style="bold")
    table.add_column("Kind", justify="center")
    table.add_column("Lifecycle Hook", justify="center")
    table.add_column("File")

    for entity in entities:
        table.add_row(
            escape(entity.name),
            entity.kind.value,
            "yes" if entity.declares_lifecycle_hook else "",
            escape(_display_path(entity.file_path, project_path)),
        )

    console.print(table)


@app.command()
def scene(
    project_path: Path = typer.Option(
        ".",
        "--project",
        "-p",
        help="Path to project root directory",
    ),
    scenes: list[Path] = typer.Option(
        None,
        "--scene",
        "-s",
        help="Scene file to read (can be repeated)",
    ),
    snapshot: Path = typer.Option(
        None,
        "--snapshot",
        help="JSON scene snapshot exported from the editor",
    ),
    config_file: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """Show which scripts are attached to which containers."""

    _set_verbose(verbose)
    project_path = _resolve_project(project_path)
    config = _load_config(project_path, config_file)
    classifier = UsageClassifier(project_path, config=config)

    provider = _scene_provider(classifier, project_path, scenes, snapshot)
    if provider is None:
        console.print("[red]Error: Give --scene or --snapshot, or set scene.paths in the config[/red]")
        raise typer.Exit(1)

    try:
        attachments = build_attachments(provider.snapshot())
    except SceneSnapshotError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not attachments:
        console.print("\n[yellow]No script components found in the scene[/yellow]")
        return

    table = Table(title="🎬 Scene Attachments", show_header=True, header_style="bold cyan")
    table.add_column("Script", style="bold")
    table.add_column("Containers")
    table.add_column("Instances", justify="right")

    for type_name in sorted(attachments):
        containers = attachments[type_name]
        table.add_row(escape(type_name), escape(", ".join(containers)), str(len(containers)))

    console.print(table)


@app.command(name="init-config")
def init_config(
    output: Path = typer.Option(
        CONFIG_FILENAME,
        "--output",
        "-o",
        help="Path to save example configuration file",
    ),
) -> None:
    """Create example configuration file."""

    from script_usage_checker.config import create_example_config_file

    output = Path(output)
    create_example_config_file(output)

    console.print(f"[green]✅ Created example config file: {escape(str(output))}[/green]")
    console.print("[dim]Edit this file to customize paths and lifecycle hooks[/dim]")


@app.command()
def version() -> None:
    """Show version information."""

    from script_usage_checker import __version__

    console.print(f"[bold]Script Usage Checker[/bold] v{__version__}")


if __name__ == "__main__":
    app()

"""Command-line interface for license_attribution.

Provides the main entry point and subcommands for generating the license
files of a project, inspecting the rule table, and cleaning up output.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from license_attribution.blob import BlobFormatError
from license_attribution.config import (
    DEFAULT_CONFIG_FILE,
    LicensingConfigError,
    ProjectConfig,
    load_config,
)
from license_attribution.engine import ScanEngine
from license_attribution.models import ScanResult
from license_attribution.output import LicenseWriter
from license_attribution.reporters import MarkdownReporter, TextReporter
from license_attribution.rules import build_table
from license_attribution.scanners import get_scanner

app = typer.Typer(
    name="license-attribution",
    help="Dependency license attribution for build outputs.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("license_attribution")


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("license_attribution").setLevel(level)


def _load_project(
    config: Path,
    build_dir: Optional[Path] = None,
    root_dir: Optional[Path] = None,
) -> ProjectConfig:
    """Load the project configuration, applying directory overrides.

    Raises:
        typer.Exit: With code 1 if the configuration cannot be loaded.
    """
    try:
        project = load_config(config)
    except (FileNotFoundError, LicensingConfigError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    if root_dir is not None:
        project.root_dir = root_dir
    if build_dir is not None:
        project.build_dir = build_dir
    return project


def _print_section(title: str, lines: list[str]) -> None:
    if not lines:
        return
    console.print(f"[bold]{title}:[/bold]")
    for line in lines:
        console.print(f"    {escape(line)}")


def _print_scan_summary(scan: ScanResult) -> None:
    _print_section("Preloaded license data", scan.known)
    _print_section("Embedded license data", scan.embedded)
    if scan.missing:
        console.print("[yellow]Missing license data:[/yellow]")
        for line in scan.missing:
            console.print(f"    {escape(line)}")
        console.print(
            "Please submit an issue with this information to include it in future license scans."
        )


@app.command()
def gen(
    graph: Annotated[
        Path,
        typer.Option(
            "--graph",
            "-g",
            help="Resolved dependency graph (*.json export or gradle dependencies report)",
            exists=True,
            readable=True,
        ),
    ],
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Licensing configuration (licensing.toml or pyproject.toml)",
        ),
    ] = Path(DEFAULT_CONFIG_FILE),
    configuration: Annotated[
        Optional[list[str]],
        typer.Option(
            "--configuration",
            help="Configuration (classpath) to include; repeatable. Default: all",
        ),
    ] = None,
    artifact_root: Annotated[
        Optional[Path],
        typer.Option(
            "--artifact-root",
            help="Module cache used to locate jars for report files",
            file_okay=False,
        ),
    ] = None,
    rules: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--rules",
            "-r",
            help="Extra TOML rule file; repeatable",
            exists=True,
            readable=True,
        ),
    ] = None,
    build_dir: Annotated[
        Optional[Path],
        typer.Option("--build-dir", help="Override the build directory"),
    ] = None,
    root_dir: Annotated[
        Optional[Path],
        typer.Option("--root-dir", help="Override the project root directory"),
    ] = None,
    report: Annotated[
        Optional[Path],
        typer.Option("--report", help="Also write a Markdown scan report here"),
    ] = None,
    template: Annotated[
        Optional[Path],
        typer.Option(
            "--template",
            "-t",
            help="Custom Jinja2 template for the Markdown report",
            exists=True,
            readable=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Generate LICENSE, LICENSE.blob and license text files.

    Scans the dependency graph, attributes every dependency it can, and
    writes the license files to the build and project root directories.
    """
    _setup_logging(verbose)

    project = _load_project(config, build_dir, root_dir)
    licenses = project.licensing.licenses

    try:
        project.licensing.validate()
    except LicensingConfigError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    try:
        table = build_table(rules or [])
    except (FileNotFoundError, ValueError) as e:
        err_console.print(f"[red]Error loading rules:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning dependencies...", total=None)

        try:
            scanner = get_scanner(graph, tuple(configuration or ()), artifact_root)
            if verbose:
                console.print(f"[dim]Using scanner: {scanner.source_name}[/dim]")
            nodes = scanner.scan()
        except (FileNotFoundError, ValueError) as e:
            err_console.print(f"[red]Error scanning {escape(str(graph))}:[/red] {escape(str(e))}")
            raise typer.Exit(code=1)

        engine = ScanEngine(table, project.project_coordinates)
        scan = engine.scan(nodes, licenses)
        progress.update(task, completed=True)

    console.print(f"Found [bold]{len(nodes)}[/bold] dependencies")

    writer = LicenseWriter(project.output_dirs)
    try:
        if licenses and writer.is_up_to_date(licenses):
            console.print("License files are up to date")
        else:
            result = writer.write(licenses)
            if result.did_work:
                console.print("[green]Generated license data[/green]")
                for path in result.files:
                    console.print(f"    {escape(str(path))}", style="dim")
    except (OSError, BlobFormatError) as e:
        err_console.print(f"[red]Error writing license files:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    _print_scan_summary(scan)

    if report:
        reporter = MarkdownReporter(template_path=template)
        try:
            reporter.write(licenses, report, scan)
        except OSError as e:
            err_console.print(f"[red]Error writing report:[/red] {escape(str(e))}")
            raise typer.Exit(code=1)
        console.print(f"[green]Generated:[/green] {escape(str(report))}")


@app.command()
def lookup(
    coordinate: Annotated[
        str,
        typer.Argument(help="Dependency coordinate, e.g. net.java.dev.jna:jna:5.8.0"),
    ],
    rules: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--rules",
            "-r",
            help="Extra TOML rule file; repeatable",
            exists=True,
            readable=True,
        ),
    ] = None,
) -> None:
    """Show the attribution the rule table has for a dependency.

    Exit codes:
        0 - A rule applies
        1 - No rule applies or the coordinate is invalid
    """
    try:
        table = build_table(rules or [])
        record = table.resolve(coordinate)
    except (FileNotFoundError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    if record is None:
        console.print(f"[yellow]No license rule for {escape(coordinate)}[/yellow]")
        raise typer.Exit(code=1)

    console.print(f"[bold]{escape(str(record.license))}[/bold] {escape(coordinate)}")
    console.print(TextReporter().render([record]), markup=False, end="")


@app.command()
def metadata(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Licensing configuration (licensing.toml or pyproject.toml)",
        ),
    ] = Path(DEFAULT_CONFIG_FILE),
) -> None:
    """Print the primary license fields for package metadata as JSON."""
    project = _load_project(config)
    published = project.licensing.publish_metadata()
    if published is None:
        err_console.print("[red]Error:[/red] No license declared in the configuration")
        raise typer.Exit(code=1)

    data = {"name": published.name, "url": published.url}
    if published.comments is not None:
        data["comments"] = published.comments
    console.print_json(json.dumps(data))


@app.command()
def clean(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Licensing configuration (licensing.toml or pyproject.toml)",
        ),
    ] = Path(DEFAULT_CONFIG_FILE),
    build_dir: Annotated[
        Optional[Path],
        typer.Option("--build-dir", help="Override the build directory"),
    ] = None,
    root_dir: Annotated[
        Optional[Path],
        typer.Option("--root-dir", help="Override the project root directory"),
    ] = None,
) -> None:
    """Remove every license file this tool generates."""
    project = _load_project(config, build_dir, root_dir)
    removed = LicenseWriter(project.output_dirs).clean()

    if removed:
        console.print(f"[green]Removed {len(removed)} file(s)[/green]")
    else:
        console.print("Nothing to clean")


if __name__ == "__main__":
    app()

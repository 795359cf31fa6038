"""Main CLI entry point for bem-examples."""

import asyncio
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from bem_examples import __version__
from bem_examples.config import load_config
from bem_examples.config.defaults import DEFAULT_DOC_EXTENSIONS, DEFAULT_FILE_SUFFIXES, DEFAULT_TECH_SUFFIXES
from bem_examples.context.extractor import InlineExtractor
from bem_examples.context.hasher import content_identity
from bem_examples.context.scanner import LevelScanner
from bem_examples.errors import BemExamplesError
from bem_examples.evaluators.sandbox import SandboxEvaluator
from bem_examples.models.example import EvaluationFailure
from bem_examples.naming import parse_notation
from bem_examples.orchestration.pseudo_levels import PseudoLevelBuilder
from bem_examples.orchestration.runner import BuildSummary, run_build
from bem_examples.utils.logging import setup_logging

# Create the main Typer app
app = typer.Typer(
    name="bem-examples",
    help="Content-addressed, demand-driven example materialization for BEM level-sets.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Console for rich output
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"bem-examples version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """BEM Examples.

    Collect examples from tech folders and documentation into a level-set.
    """
    pass


def _print_summary(summary: BuildSummary) -> None:
    """Print a summary table of a build pass."""
    table = Table(title="Build Summary")
    table.add_column("Event", style="cyan")
    table.add_column("Destination", style="cyan")
    table.add_column("Examples", style="green", justify="right")

    for name, events in sorted(summary.events.items()):
        for event in events:
            table.add_row(name, event.destination_root, str(len(event.examples)))

    console.print(table)
    console.print(f"  Built targets: {len(summary.built_targets)}")
    if summary.failures:
        console.print(f"  [yellow]Skipped fragments: {len(summary.failures)}[/yellow]")
        for failure in summary.failures:
            console.print(f"    {failure.source_path}: {failure}")


# Common options used across commands
ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration file (JSON or YAML).",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]

LevelOption = Annotated[
    Optional[list[Path]],
    typer.Option(
        "--level",
        "-l",
        help="Source level, repeat in precedence order.",
    ),
]

TechSuffixOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--tech-suffix",
        help="Suffix of example folders (default: examples).",
    ),
]

FileSuffixOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--file-suffix",
        help="Suffix of example files (default: bemjson.js).",
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        help="Verbosity level (0=quiet, 1=normal, 2=verbose, 3=debug).",
        min=0,
        max=3,
        count=True,
    ),
]


@app.command()
def build(
    targets: Annotated[
        Optional[list[str]],
        typer.Argument(help="Root-relative paths to build (default: every destination)."),
    ] = None,
    root: Annotated[
        Optional[Path],
        typer.Option(
            "--root",
            "-r",
            help="Project root (default: current directory or $BEM_EXAMPLES_ROOT).",
            exists=True,
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
    config: ConfigOption = None,
    dest: Annotated[
        Optional[str],
        typer.Option(
            "--dest",
            "-d",
            help="Destination level-set path, relative to the root.",
        ),
    ] = None,
    level: LevelOption = None,
    tech_suffix: TechSuffixOption = None,
    file_suffix: FileSuffixOption = None,
    transform: Annotated[
        Optional[str],
        typer.Option(
            "--transform",
            help="Inline transform callback as package.module:function.",
        ),
    ] = None,
    concurrency: Annotated[
        Optional[int],
        typer.Option(
            "--concurrency",
            help="Maximum examples processed at once.",
            min=1,
            max=256,
        ),
    ] = None,
    log_file: Annotated[
        Optional[Path],
        typer.Option(
            "--log-file",
            help="Also write a debug log to this file.",
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        Optional[int],
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level (0=quiet, 1=normal, 2=verbose, 3=debug; default from config).",
            min=0,
            max=3,
            count=True,
        ),
    ] = None,
) -> None:
    """Run one build pass for the requested targets.

    Logging follows the ``verbosity`` and ``logFile`` config keys unless
    --verbose or --log-file is given.

    Example:
        bem-examples build --dest set.examples --level blocks set.examples/button
    """
    try:
        cfg = load_config(
            config_path=config,
            root=root,
            dest=dest,
            levels=level,
            tech_suffixes=tech_suffix,
            file_suffixes=file_suffix,
            transform=transform,
            verbose=verbose,
            log_file=log_file,
            concurrency=concurrency,
        )
        setup_logging(verbosity=cfg.verbosity, log_file=cfg.log_file)

        console.print("[bold green]Building examples[/bold green]")
        console.print(f"  Root: {cfg.root}")
        for set_config in cfg.sets:
            levels = ", ".join(str(path) for path in set_config.levels)
            console.print(f"  {set_config.dest_path} <- {levels}")
        console.print()

        summary = asyncio.run(run_build(cfg, targets))
        _print_summary(summary)

    except KeyboardInterrupt:
        console.print("\n[yellow]Build interrupted by user[/yellow]")
        sys.exit(1)
    except (BemExamplesError, OSError) as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if (verbose or 0) >= 2:
            console.print_exception()
        sys.exit(1)


@app.command()
def scan(
    level: Annotated[
        list[Path],
        typer.Option(
            "--level",
            "-l",
            help="Source level, repeat in precedence order.",
            exists=True,
            file_okay=False,
            dir_okay=True,
        ),
    ],
    dest: Annotated[
        str,
        typer.Option(
            "--dest",
            "-d",
            help="Destination level-set path used to show where examples would go.",
        ),
    ] = "examples",
    tech_suffix: TechSuffixOption = None,
    file_suffix: FileSuffixOption = None,
    verbose: VerboseOption = 1,
) -> None:
    """List the examples found in the levels without writing anything.

    Inline fragments are evaluated so that broken ones show up here.

    Example:
        bem-examples scan --level common.blocks --level desktop.blocks
    """
    setup_logging(verbosity=verbose)

    try:
        builder = PseudoLevelBuilder(
            dest_path=dest,
            levels=level,
            tech_suffixes=tech_suffix or DEFAULT_TECH_SUFFIXES,
            file_suffixes=file_suffix or DEFAULT_FILE_SUFFIXES,
        )
        placeholders = builder.collect()
        documents = LevelScanner(level).find_documents(DEFAULT_DOC_EXTENSIONS)
    except BemExamplesError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)

    folders = Table(title="Folder Examples")
    folders.add_column("Destination", style="cyan")
    folders.add_column("Source", style="green")
    for placeholder in placeholders:
        kind = "/" if placeholder.is_dir else ""
        folders.add_row(placeholder.destination + kind, str(placeholder.source))
    console.print(folders)

    extractor = InlineExtractor()
    evaluator = SandboxEvaluator()
    inline = Table(title="Inline Examples")
    inline.add_column("Document", style="cyan")
    inline.add_column("Identity", style="green")
    inline.add_column("Status")

    for document in documents:
        if parse_notation(document.name.split(".", 1)[0]) is None:
            continue
        try:
            fragments = asyncio.run(extractor.extract_file(document))
        except BemExamplesError as e:
            inline.add_row(str(document), "", f"[red]{e}[/red]")
            continue
        for fragment in fragments:
            result = evaluator.evaluate(fragment.source, str(document))
            status = f"[red]{result}[/red]" if isinstance(result, EvaluationFailure) else "ok"
            inline.add_row(str(document), fragment.name, status)

    console.print(inline)


@app.command()
def identity(
    text: Annotated[
        Optional[str],
        typer.Argument(help="Fragment text to hash."),
    ] = None,
    file: Annotated[
        Optional[Path],
        typer.Option(
            "--file",
            "-f",
            help="Hash the bytes of a file instead.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
) -> None:
    """Print the content identity of a fragment.

    Example:
        bem-examples identity "{ block: 'button' }"
    """
    if file is not None:
        console.print(content_identity(file.read_bytes()))
    elif text is not None:
        console.print(content_identity(text))
    else:
        console.print("[bold red]Error:[/bold red] give TEXT or --file")
        sys.exit(1)


if __name__ == "__main__":
    app()

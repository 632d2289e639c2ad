from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from gobru.config import GenerateConfig
from gobru.diagnostics import Diagnostics
from gobru.extractors.go.lexer import GoParseError
from gobru.orchestrator.pipeline import collect_routes, run_generate
from gobru.render.descriptor import DEFAULT_BASE_URL

app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()


def _configure_logging(verbose: bool, default_level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else default_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _input_dir(input_dir: str) -> Path:
    input_path = Path(input_dir).expanduser().resolve()
    if not input_path.exists():
        raise typer.BadParameter(f"Input path does not exist: {input_path}")
    if not input_path.is_dir():
        raise typer.BadParameter(f"Input path is not a directory: {input_path}")
    return input_path


@app.command()
def generate(
    input_dir: str = typer.Argument(".", help="Directory containing Go handler code"),
    output: str = typer.Option("./bruno", envvar="GOBRU_OUTPUT", help="Directory for Bruno files"),
    base_url: str = typer.Option(DEFAULT_BASE_URL, envvar="GOBRU_BASE_URL", help="Prefix for every request URL"),
    collection_name: Optional[str] = typer.Option(None, help="Name written to bruno.json (default: input dir name)"),
    include_tests: bool = typer.Option(True, help="Also scan *_test.go files"),
    max_files: Optional[int] = typer.Option(None, help="Limit scanned files (debug)"),
    dry_run: bool = typer.Option(False, help="Resolve routes but write nothing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    _configure_logging(verbose)
    config = GenerateConfig(
        input_dir=_input_dir(input_dir),
        output_dir=Path(output),
        base_url=base_url,
        collection_name=collection_name,
        include_tests=include_tests,
        max_files=max_files,
        dry_run=dry_run,
    )

    console.print(f"Scanning {config.input_dir} for annotated handlers...")
    try:
        result = run_generate(config, Diagnostics())
    except GoParseError as e:
        console.print(f"[bold red]Error parsing code:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    console.print(f"Go files scanned: {result.files_scanned}")
    console.print(f"Found [bold]{len(result.routes)}[/bold] handlers with route annotations")

    if result.dry_run:
        for d in result.descriptors:
            console.print(f"  {d.method:<6} {d.url}")
        console.print("Dry run: no files written.")
        return

    if result.failed:
        console.print(f"[yellow]Skipped {len(result.failed)} route(s):[/yellow] {', '.join(result.failed)}")
    if result.diagnostics.warning_count:
        console.print(f"[yellow]{result.diagnostics.warning_count} warning(s)[/yellow], see log above")
    console.print("")
    console.print(f"[bold green]Done![/bold green] Generated {len(result.written)} Bruno files in {result.output_dir}")


@app.command("routes")
def routes_list(
    input_dir: str = typer.Argument(".", help="Directory containing Go handler code"),
    format: str = typer.Option("table", help="Output format: table|json"),
    include_tests: bool = typer.Option(True, help="Also scan *_test.go files"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    # listing output stays clean unless asked for progress logs
    _configure_logging(verbose, default_level=logging.WARNING)
    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    try:
        result = collect_routes(_input_dir(input_dir), Diagnostics(), include_tests=include_tests)
    except GoParseError as e:
        console.print(f"[bold red]Error parsing code:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    if fmt == "json":
        payload = [r.model_dump(mode="json") for r in result.routes]
        console.print_json(json.dumps(payload))
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("HANDLER")
    table.add_column("BODY")
    table.add_column("FILE:LINE", no_wrap=True)

    for r in result.routes:
        body = r.body_type_name or "-"
        if r.body_type_name and r.request_body is None:
            body += " (unresolved)"
        table.add_row(r.method, r.path, r.handler_name, body, f"{r.file_path}:{r.line}")

    console.print(f"[bold]Routes:[/bold] {len(result.routes)}")
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()

"""Command line entry point.

Loads a schema document, resolves it, renders the selected backend and
writes the generated files only after the whole run succeeded.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .codegen import (
    Backend,
    ConfigError,
    GeneratorError,
    RegistryError,
    SchemaError,
    TemplateError,
    UsageError,
    __version__,
    generate_code,
    get_generator,
    list_all_backend_info,
    load_config,
    resolve,
)
from .logging_config import get_logger, setup_logging
from .utils import SchemaLoaderError, load_schema

logger = get_logger(__name__)

console = Console()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the ``apigen`` command."""
    parser = argparse.ArgumentParser(
        prog="apigen",
        description="Generate typed client bindings and documentation from an API schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  apigen api.json --backend ts --output-dir ~/src/client
  apigen api.json -b docs -o docs/reference
  apigen --url https://example.com/api.json -b ts --dry-run
  apigen --list-backends
        """.strip(),
    )

    input_group = parser.add_mutually_exclusive_group()
    input_group.add_argument("schema", nargs="?", help="API schema JSON file")
    input_group.add_argument("--url", help="URL to fetch the schema from")

    parser.add_argument(
        "--backend", "-b", default="ts", help="Backend to generate (default: ts)"
    )
    parser.add_argument(
        "--output-dir", "-o", default=".", help="Directory for generated files (default: .)"
    )
    parser.add_argument("--config", help="Configuration file path (JSON)")
    parser.add_argument(
        "--no-comments", action="store_true", help="Don't add comments to generated code"
    )
    parser.add_argument("--indent-size", type=int, help="Indentation width of generated code")
    parser.add_argument(
        "--dry-run", action="store_true", help="Generate without writing any file"
    )

    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-backends", action="store_true", help="List supported backends and exit"
    )
    info_group.add_argument("--version", action="version", version=f"apigen {__version__}")

    log_group = parser.add_argument_group("logging")
    log_group.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    log_group.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: WARNING)",
    )
    log_group.add_argument("--log-file", help="Also write the log to this file")

    return parser


def _config_overrides(args: argparse.Namespace) -> dict:
    overrides = {}
    if args.no_comments:
        overrides["add_comments"] = False
    if args.indent_size is not None:
        overrides["indent_size"] = args.indent_size
    return overrides


def _list_backends() -> int:
    """List supported backends with details."""
    table = Table(title="📋 Supported Backends", box=box.ROUNDED, title_style="bold cyan")

    table.add_column("Backend", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Generator Class", style="dim")
    table.add_column("Aliases", style="blue")

    for name, info in list_all_backend_info().items():
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(f"🔧 {name}", info["file_extension"], info["class"], aliases)

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] apigen [dim]api.json[/dim] --backend [cyan]BACKEND[/cyan] "
            "--output-dir [cyan]DIR[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return EXIT_OK


def write_files(output_dir: Path, files: dict[str, str]) -> list[Path]:
    """Write generated files below ``output_dir``, creating it if needed."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name, text in files.items():
        path = output_dir / name
        path.write_text(text, encoding="utf-8")
        logger.debug("Wrote %s", path)
        written.append(path)
    return written


def _print_files(title: str, files: dict[str, str], output_dir: Path | None) -> None:
    table = Table(title=title, box=box.SIMPLE, header_style="bold cyan")
    table.add_column("File", style="bold")
    table.add_column("Lines", style="green", justify="right")
    for name, text in files.items():
        shown = str(output_dir / name) if output_dir else name
        table.add_row(shown, str(text.count("\n")))
    console.print(table)


def run(args: argparse.Namespace) -> int:
    """Run a generation described by parsed arguments."""
    if not (args.schema or args.url):
        console.print("[red]✗[/red] Input source required (schema file or --url)")
        return EXIT_USAGE

    try:
        backend = Backend.from_tag(args.backend)
        source, document = load_schema(file_path=args.schema, url=args.url)
        console.print(f"📄 Loaded: {source}")

        schema = resolve(document)
        config = load_config(backend.value, _config_overrides(args), args.config)
        generator = get_generator(backend, schema, config)
        result = generate_code(generator)
    except UsageError as e:
        console.print(f"[red]✗ Usage error:[/red] {e}")
        return EXIT_USAGE
    except (
        SchemaError,
        SchemaLoaderError,
        ConfigError,
        GeneratorError,
        TemplateError,
        RegistryError,
        FileNotFoundError,
    ) as e:
        logger.error("Generation failed: %s", e)
        console.print(f"[red]✗ Error:[/red] {e}")
        return EXIT_ERROR

    for warning in result.warnings:
        console.print(f"[yellow]⚠️  {warning}[/yellow]")

    if args.dry_run:
        _print_files("🧪 Dry run (nothing written)", result.files, None)
        return EXIT_OK

    output_dir = Path(args.output_dir).expanduser()
    try:
        write_files(output_dir, result.files)
    except OSError as e:
        logger.error("Could not write output: %s", e)
        console.print(f"[red]✗ Could not write output:[/red] {e}")
        return EXIT_ERROR

    _print_files(f"✅ Generated {backend.value}", result.files, output_dir)
    logger.info("Wrote %d file(s) to %s", len(result.files), output_dir)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Console script entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else args.log_level, args.log_file)

    if args.list_backends:
        return _list_backends()

    return run(args)


if __name__ == "__main__":
    sys.exit(main())

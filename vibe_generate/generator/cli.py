import argparse
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ..utils.config import load_settings
from .engine import ScaffoldEngine
from .errors import (
    ScaffoldError,
    SelectionCancelled,
    VibeGenerateError,
)
from .registry import TemplateRegistry
from .selector import Selector, prompt_choice

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130

console = Console()
err_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vibe-generate",
        description="Scaffold a new project from a boilerplate template.",
    )
    p.add_argument(
        "--template", "-t",
        help="Template to use (e.g. nextjs). If omitted, an interactive menu is shown.",
    )
    p.add_argument(
        "--name", "-n",
        help="Name of the new project; used as the directory name and placeholder value",
    )
    p.add_argument(
        "--output-dir", "-o", type=Path,
        help="Directory where the project folder is created (default: current directory)",
    )
    p.add_argument("--list", "-l", action="store_true", help="List available templates and exit")
    p.add_argument(
        "--atomic", action="store_true", default=None,
        help="Build in a temporary directory and move it into place on success",
    )
    p.add_argument("--config", type=Path, help="Path to a YAML settings file")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return p


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def list_templates(registry: TemplateRegistry) -> int:
    descriptors = registry.list()
    if not descriptors:
        err_console.print("[bold red]Error:[/] No templates found")
        return EXIT_ERROR
    for d in descriptors:
        console.print(f"{escape(d.name):20} [dim]{d.origin.value}[/]")
    return EXIT_OK


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.list and not args.name:
        parser.error("the following arguments are required: --name/-n")
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
        registry = TemplateRegistry.discover(settings)
        if args.list:
            return list_templates(registry)

        selector = Selector(registry, lambda names: prompt_choice(names, console))
        source = selector.select(args.template)

        output_dir = (args.output_dir or settings.output_dir or Path.cwd()).resolve()
        atomic = settings.atomic if args.atomic is None else args.atomic
        console.print(
            f"[bold]=>[/] Scaffolding project [bold green]{escape(args.name)}[/] "
            f"from template [bold green]{escape(source.name)}[/]..."
        )
        destination = ScaffoldEngine(atomic=atomic).generate(source, args.name, output_dir)
    except SelectionCancelled:
        err_console.print("[yellow]Cancelled.[/] No files were written.")
        return EXIT_CANCELLED
    except VibeGenerateError as e:
        err_console.print(f"[bold red]Error:[/] {escape(str(e))}")
        if isinstance(e, ScaffoldError) and e.partial:
            err_console.print(
                "The project directory may be partially written; inspect or delete "
                f"{escape(str(output_dir / args.name))} before retrying."
            )
        return EXIT_ERROR

    console.print(
        f"\n[bold green]Success![/] Project [bold]{escape(args.name)}[/] "
        f"created at {escape(str(destination))}"
    )
    console.print(f"\n  cd {escape(str(destination))} && get started!")
    return EXIT_OK


def run() -> None:
    raise SystemExit(main())

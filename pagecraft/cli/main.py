"""Main CLI entry point for pagecraft."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..adapters.io.logging_setup import PAGECRAFT_THEME, setup_logging
from ..adapters.io.writer import WriterError
from ..application.test_generator import GenerationResult
from ..config.loader import ConfigLoader, ConfigurationError
from ..config.models import PageCraftConfig
from ..domain.errors import (
    GenerationPipelineError,
    PipelineCancelledError,
    TemplateConfigurationError,
    TemplateNotFoundError,
    TemplateRenderError,
)
from ..domain.models import GenerationOptions, GenerationRequest, TestStructure
from ..ports.llm_error import LLMError
from .dependency_injection import DependencyError, create_dependency_container

logger = logging.getLogger(__name__)


class ClickContext:
    """Context object for Click commands."""

    def __init__(self) -> None:
        self.config: PageCraftConfig | None = None
        self.container: dict[str, Any] | None = None
        self.console: Console = Console(theme=PAGECRAFT_THEME, stderr=True)
        self.verbose: bool = False
        self.quiet: bool = False
        self.dry_run: bool = False


def display_error(console: Console, title: str, message: str) -> None:
    console.print(Panel(message, title=f"[error]{title}[/]", border_style="red"))


def handle_command_error(ctx: click.Context, error: Exception) -> None:
    """Report ``error`` under its category and exit with status 1."""
    console = ctx.obj.console
    if isinstance(error, TemplateRenderError):
        title = "Rendering Error"
    elif isinstance(error, (TemplateNotFoundError, TemplateConfigurationError)):
        title = "Template Error"
    elif isinstance(error, PipelineCancelledError):
        title = "Cancelled"
    elif isinstance(error, GenerationPipelineError):
        title = "Generation Error"
    elif isinstance(error, LLMError):
        title = "LLM Error"
    elif isinstance(error, (WriterError, OSError)):
        title = "File Error"
    else:
        title = "Unexpected Error"
        logger.error("Unexpected error: %s", error, exc_info=ctx.obj.verbose)

    display_error(console, title, str(error))
    sys.exit(1)


def display_summary(console: Console, result: GenerationResult) -> None:
    """Print a summary of the generated structure."""
    structure = result.structure
    table = Table(title="Generated test structure", show_header=False, box=None)
    table.add_column("Field", style="accent")
    table.add_column("Value")
    table.add_row("Page", structure.page_name or "(unnamed)")
    table.add_row("Elements", str(len(structure.elements)))
    table.add_row("Tasks", str(len(structure.tasks)))
    table.add_row("Test Cases", str(len(structure.test_cases)))
    if result.output_path is not None:
        table.add_row("Written to", str(result.output_path))
    console.print(table)

    for test_case in structure.test_cases:
        console.print(f"  [success]-[/] {test_case.name}: [muted]{test_case.description}[/]")


def parse_context_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated KEY=VALUE options."""
    context: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(
                f"Expected KEY=VALUE, got {pair!r}", param_hint="--context"
            )
        context[key.strip()] = value.strip()
    return context


def build_options(
    config: PageCraftConfig,
    ns: str | None,
    base_url: str | None,
    template: str | None,
    output: Path | None,
    include_comments: bool = True,
) -> GenerationOptions:
    return GenerationOptions(
        ns=ns,
        base_url=base_url,
        template_path=template or config.templates.default_template,
        output_path=str(output) if output else None,
        include_comments=include_comments,
    )


async def _run_and_close(container: dict[str, Any], coro: Any) -> Any:
    try:
        return await coro
    finally:
        await container["chat_adapter"].aclose()


def run_async(ctx: click.Context, coro: Any) -> Any:
    try:
        return asyncio.run(_run_and_close(ctx.obj.container, coro))
    except KeyboardInterrupt:
        display_error(ctx.obj.console, "Cancelled", "Interrupted by user")
        sys.exit(130)


@click.group()
@click.version_option(__version__, prog_name="pagecraft")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Reduce output: set log level to WARNING and hide INFO",
)
@click.option(
    "--dry-run", "--dry", is_flag=True, help="Preview output files without writing them"
)
@click.pass_context
def app(
    ctx: click.Context,
    config: Path | None,
    verbose: bool,
    quiet: bool,
    dry_run: bool,
) -> None:
    """pagecraft - generate Playwright tests from page descriptions."""
    ctx.ensure_object(ClickContext)
    ctx.obj.verbose = verbose
    ctx.obj.quiet = quiet
    ctx.obj.dry_run = dry_run

    # init-config must work without a valid configuration
    if ctx.invoked_subcommand == "init-config":
        setup_logging(logging.WARNING if quiet else logging.INFO, ctx.obj.console)
        return

    try:
        ctx.obj.config = ConfigLoader(config).load_config()

        if verbose and not quiet:
            level: int | str = logging.DEBUG
        elif quiet:
            level = logging.WARNING
        else:
            level = ctx.obj.config.logging.level
        setup_logging(level, ctx.obj.console, ctx.obj.config.logging.suppress_modules)
        logger.debug("Debug mode enabled")

        ctx.obj.container = create_dependency_container(ctx.obj.config, dry_run=dry_run)

    except ConfigurationError as e:
        display_error(ctx.obj.console, "Configuration Failed", f"Configuration error: {e}")
        sys.exit(1)
    except DependencyError as e:
        display_error(
            ctx.obj.console, "Initialization Failed", f"Dependency injection error: {e}"
        )
        sys.exit(1)


@app.command()
@click.argument("description_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--ns", help="Namespace for the generated test class")
@click.option("--base-url", help="Base URL the tests navigate to")
@click.option("--template", "-t", help="Template path relative to the templates root")
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write code to file"
)
@click.option(
    "--comments/--no-comments", default=True, help="Emit descriptions as code comments"
)
@click.option(
    "--context",
    "context_pairs",
    multiple=True,
    metavar="KEY=VALUE",
    help="Additional context passed to the model (repeatable)",
)
@click.pass_context
def generate(
    ctx: click.Context,
    description_file: Path,
    ns: str | None,
    base_url: str | None,
    template: str | None,
    output: Path | None,
    comments: bool,
    context_pairs: tuple[str, ...],
) -> None:
    """Generate a test file from a page description."""
    request = GenerationRequest(
        page_description=description_file.read_text(encoding="utf-8"),
        additional_context=parse_context_pairs(context_pairs),
        options=build_options(ctx.obj.config, ns, base_url, template, output, comments),
    )
    generator = ctx.obj.container["test_generator"]

    try:
        result = run_async(ctx, generator.generate(request))
    except Exception as e:
        handle_command_error(ctx, e)
        return

    if not ctx.obj.quiet:
        display_summary(ctx.obj.console, result)
    if output is None:
        click.echo(result.code)


@app.command()
@click.argument("description_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the structure JSON to file",
)
@click.pass_context
def extract(ctx: click.Context, description_file: Path, output: Path | None) -> None:
    """Run the extraction pipeline and emit the test structure as JSON."""
    pipeline = ctx.obj.container["pipeline"]
    description = description_file.read_text(encoding="utf-8")

    try:
        structure: TestStructure = run_async(ctx, pipeline.process(description))
        payload = json.dumps(structure.to_wire(), indent=2, ensure_ascii=False)
        if output is not None:
            ctx.obj.container["writer"].write(output, payload + "\n")
    except Exception as e:
        handle_command_error(ctx, e)
        return

    if output is None:
        click.echo(payload)


@app.command()
@click.argument("structure_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--ns", help="Namespace for the generated test class")
@click.option("--base-url", help="Base URL the tests navigate to")
@click.option("--template", "-t", help="Template path relative to the templates root")
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write code to file"
)
@click.option(
    "--comments/--no-comments", default=True, help="Emit descriptions as code comments"
)
@click.pass_context
def render(
    ctx: click.Context,
    structure_file: Path,
    ns: str | None,
    base_url: str | None,
    template: str | None,
    output: Path | None,
    comments: bool,
) -> None:
    """Render a saved test structure JSON file."""
    try:
        structure = TestStructure.model_validate(
            json.loads(structure_file.read_text(encoding="utf-8"))
        )
    except (json.JSONDecodeError, ValidationError) as e:
        display_error(ctx.obj.console, "Invalid Structure", str(e))
        sys.exit(1)

    generator = ctx.obj.container["test_generator"]
    options = build_options(ctx.obj.config, ns, base_url, template, output, comments)

    try:
        result = generator.render(structure, options)
    except Exception as e:
        handle_command_error(ctx, e)
        return

    if not ctx.obj.quiet:
        display_summary(ctx.obj.console, result)
    if output is None:
        click.echo(result.code)


@app.command("init-config")
@click.argument(
    "path", type=click.Path(dir_okay=False, path_type=Path), default=".pagecraft.toml"
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def init_config(ctx: click.Context, path: Path, force: bool) -> None:
    """Write a sample configuration file."""
    if path.exists() and not force:
        display_error(
            ctx.obj.console,
            "Configuration Exists",
            f"{path} already exists (use --force to overwrite)",
        )
        sys.exit(1)
    created = ConfigLoader().create_sample_config(path)
    ctx.obj.console.print(f"[success]Configuration written to[/] {created}")


if __name__ == "__main__":
    app()

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.panel import Panel

from .cli_config import (
    KNOWN_REPORTERS,
    ComprehensiveConfig,
    apply_config_data,
    create_sample_config,
    get_config,
    load_config,
    load_config_file,
    validate_config_values,
)
from .error_handling import ErrorCategory, ErrorContext, setup_error_handling
from .merge import MergeConflict
from .reporting import build_reporter_factories
from .structured_logging import clear_run_context, configure_logging
from .tool import DepTreeDiffTool

__version__ = "1.0.0"

console = Console()


def _print_warning(message: str) -> None:
    console.print(
        f"WARN - {message}",
        style="yellow",
        highlight=False,
        soft_wrap=True,
        markup=False,
        emoji=False,
    )


def _print_conflict(conflict: MergeConflict) -> None:
    _print_warning(conflict.message)


def _print_skipped_entry(context: ErrorContext) -> None:
    location = context.details.get("file_path", "?")
    if "line_number" in context.details:
        location += f":{context.details['line_number']}"
    reason = context.exception or context.message
    _print_warning(f"Skipped malformed entry at {location}: {reason}")


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version information")
@click.pass_context
def cli(ctx, version):
    """
    📦 dep-tree-diff: Dependency Tree Comparison Tool

    Compares "before" and "after" dependency tree reports and lists added,
    removed and upgraded dependencies by semantic-versioning severity.
    """
    if version:
        console.print(f"dep-tree-diff version {__version__}", style="bold blue")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@cli.command()
@click.option(
    "--original",
    "-a",
    "original_files",
    multiple=True,
    required=True,
    type=click.Path(exists=True, readable=True, dir_okay=False),
    help="Dependency tree file for the original side (repeatable, later files win)",
)
@click.option(
    "--new",
    "-b",
    "new_files",
    multiple=True,
    required=True,
    type=click.Path(exists=True, readable=True, dir_okay=False),
    help="Dependency tree file for the new side (repeatable, later files win)",
)
@click.option(
    "--reporter",
    "-r",
    "reporters",
    multiple=True,
    type=click.Choice(list(KNOWN_REPORTERS), case_sensitive=False),
    help="Extra reporter to run after the console reporter (repeatable)",
)
@click.option("--json-output", type=click.Path(), help="Output file for the json reporter")
@click.option(
    "--markdown-output", type=click.Path(), help="Output file for the markdown reporter"
)
@click.option(
    "--fail-on-major",
    is_flag=True,
    help="Exit with error code if any major version upgrade is found",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress non-critical output, including merge conflict and skipped entry warnings",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output with additional details",
)
def diff(
    original_files: Tuple[str, ...],
    new_files: Tuple[str, ...],
    reporters: Tuple[str, ...],
    json_output: Optional[str],
    markdown_output: Optional[str],
    fail_on_major: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """
    Compare the original dependency trees against the new ones.

    Each side may be given several files; they are merged in order and a
    warning is printed when a later file redefines a dependency at a
    different version.

    Examples:

      dep-tree-diff diff -a before.txt -b after.txt

      dep-tree-diff diff -a core-before.txt -a web-before.txt -b core-after.txt -b web-after.txt

      dep-tree-diff diff -a before.txt -b after.txt -r json --json-output diff.json
    """
    config = load_config()

    quiet = quiet or config.diff.quiet
    verbose = verbose or config.diff.verbose

    log_level = "DEBUG" if verbose else config.logging.log_level
    configure_logging(log_level)
    error_handler = setup_error_handling(
        log_level=getattr(logging, log_level.upper(), logging.ERROR)
    )
    if not quiet:
        error_handler.register_callback(_print_skipped_entry, ErrorCategory.PARSING)

    final_fail_on_major = fail_on_major or config.diff.fail_on_major

    extra_reporters = list(config.diff.reporters)
    for name in reporters:
        if name.lower() not in extra_reporters:
            extra_reporters.append(name.lower())

    output_files = {
        "json": json_output or config.reporting.json_output_file,
        "markdown": markdown_output or config.reporting.markdown_output_file,
    }

    try:
        if verbose and not quiet:
            for path in original_files:
                console.print(f"📁 Original: {path}", style="blue")
            for path in new_files:
                console.print(f"📁 New: {path}", style="blue")

        reporter_factories = build_reporter_factories(
            extra_reporters,
            console=console,
            show_summary=config.reporting.show_summary,
            output_files=output_files,
        )

        tool = DepTreeDiffTool.create(
            list(original_files),
            list(new_files),
            reporter_factories=reporter_factories,
            on_conflict=None if quiet else _print_conflict,
        )

        if not quiet:
            console.print(f"Original dependencies size: {len(tool.original)}")
            console.print(f"New dependencies size: {len(tool.new)}")

        result = tool.report_diffs()

        if verbose and not quiet:
            for name in extra_reporters:
                console.print(f"✅ {name} report saved to {output_files[name]}", style="green")

    except ValueError as e:
        raise click.ClickException(f"Diff failed: {e}")
    except OSError as e:
        raise click.ClickException(f"Could not write report: {e}")
    finally:
        error_handler.unregister_callback(_print_skipped_entry, ErrorCategory.PARSING)
        clear_run_context()

    if final_fail_on_major and result.has_major_changes:
        if quiet:
            Console(stderr=True).print(
                f"❌ {len(result.major_changes)} major version upgrade(s) found",
                style="red",
            )
        sys.exit(1)


@cli.command()
def info():
    """Show information about the input format and usage examples."""
    info_text = """
[bold blue]📋 Input Format:[/bold blue]

• [green]mvn dependency:tree[/green] text output, with or without [INFO] prefixes
• Coordinates: [cyan]group:artifact:type[:classifier]:version[:scope][/cyan]

[bold blue]🔍 Change Categories:[/bold blue]

• [green]Added[/green] - Dependency only present in the new tree
• [red]Removed[/red] - Dependency only present in the original tree
• [bold red]Major[/bold red] - Major version differs
• [yellow]Minor[/yellow] - Same major, minor version differs
• [cyan]Micro[/cyan] - Same major and minor, micro version differs

[bold blue]🌍 Environment Variables:[/bold blue]

• [cyan]DEP_TREE_DIFF_FAIL_ON_MAJOR[/cyan] - Fail on major version upgrades
• [cyan]DEP_TREE_DIFF_REPORTERS[/cyan] - Comma separated extra reporters (json, markdown)
• [cyan]DEP_TREE_DIFF_JSON_OUTPUT[/cyan] - Output file for the json reporter
• [cyan]DEP_TREE_DIFF_MARKDOWN_OUTPUT[/cyan] - Output file for the markdown reporter
• [cyan]DEP_TREE_DIFF_LOG_LEVEL[/cyan] - Log level for stderr logging

[bold blue]📄 Configuration Files:[/bold blue]

• [green].dep-tree-diff.json[/green] / [green].yaml[/green] / [green].toml[/green] - Project-level config
• [green]~/.config/dep-tree-diff/config.json[/green] - User-level config

[bold blue]💡 Usage Examples:[/bold blue]

  # Basic comparison
  dep-tree-diff diff -a before.txt -b after.txt

  # Multi-module project
  dep-tree-diff diff -a a-before.txt -a b-before.txt -b a-after.txt -b b-after.txt

  # Markdown report for a pull request comment
  dep-tree-diff diff -a before.txt -b after.txt -r markdown

  # Generate sample config
  dep-tree-diff config init
"""
    console.print(
        Panel(
            info_text,
            title="[bold]dep-tree-diff Information[/bold]",
            border_style="blue",
        )
    )


@cli.group()
def config():
    """Configuration management commands."""
    pass


@config.command("init")
@click.option(
    "--path",
    type=click.Path(),
    default=".dep-tree-diff.json",
    help="Path where to create the config file",
    show_default=True,
)
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def config_init(path: str, force: bool):
    """Create a sample configuration file."""
    config_path = Path(path)

    if config_path.exists() and not force:
        console.print(f"⚠️  Config file already exists at {config_path}", style="yellow")
        console.print("Use --force to overwrite", style="dim")
        return

    try:
        config_path.write_text(create_sample_config(), encoding="utf-8")
    except OSError as e:
        raise click.ClickException(f"Failed to create config file: {e}")

    console.print(f"✅ Created configuration file at {config_path}", style="green")
    console.print("Edit this file to customize your settings", style="dim")


@config.command("show")
def config_show():
    """Show current configuration settings."""
    current_config = get_config()

    console.print(
        Panel("[bold blue]🔧 Configuration[/bold blue]", border_style="blue")
    )

    console.print("\n[bold cyan]📊 Diff Settings:[/bold cyan]")
    console.print(f"  Fail on Major: {current_config.diff.fail_on_major}")
    console.print(f"  Quiet: {current_config.diff.quiet}")
    reporters = ", ".join(current_config.diff.reporters) or "console only"
    console.print(f"  Reporters: {reporters}")

    console.print("\n[bold cyan]📝 Reporting Settings:[/bold cyan]")
    console.print(f"  JSON Output: {current_config.reporting.json_output_file}")
    console.print(f"  Markdown Output: {current_config.reporting.markdown_output_file}")
    console.print(f"  Show Summary: {current_config.reporting.show_summary}")

    console.print("\n[bold cyan]🔒 Input Limits:[/bold cyan]")
    console.print(f"  Max File Size: {current_config.security.max_file_size_mb} MB")
    console.print(f"  Max Lines per File: {current_config.security.max_lines_per_file}")

    console.print("\n[bold cyan]🪵 Logging Settings:[/bold cyan]")
    console.print(f"  Log Level: {current_config.logging.log_level}")


@config.command("validate")
@click.argument("config_file", type=click.Path(exists=True))
def config_validate(config_file: str):
    """Validate a configuration file."""
    config_data = load_config_file(Path(config_file))

    if config_data is None:
        raise click.ClickException(f"Could not load config from {config_file}")

    candidate = ComprehensiveConfig()
    apply_config_data(candidate, config_data)
    errors = validate_config_values(candidate)

    if errors:
        console.print(f"❌ Configuration file {config_file} is invalid:", style="red")
        for error in errors:
            console.print(f"  • {error}", style="red")
        sys.exit(1)

    console.print(f"✅ Configuration file {config_file} is valid", style="green")


if __name__ == "__main__":
    cli()

"""
Reporting and output formatting for dependency tree diffs.

Reporters receive diff events through a fixed callback sequence and render
them: color-coded console tables using the Rich library, a JSON document or
a Markdown summary.
"""

import json
from abc import ABC, abstractmethod
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .dependency import VersionChange
from .differ import DiffResult
from .error_handling import ErrorCategory, get_error_handler
from .structured_logging import log_reporter_complete


class DepTreeDiffReporter(ABC):
    """
    Receives the results of one diff run.

    Callbacks arrive in this order: every added dependency, every removed
    dependency, every major, minor and micro version change, then a single
    done().
    """

    @abstractmethod
    def add_new_dependency(self, gav: str) -> None:
        pass

    @abstractmethod
    def add_removed_dependency(self, gav: str) -> None:
        pass

    @abstractmethod
    def add_major_version_upgrade(self, change: VersionChange) -> None:
        pass

    @abstractmethod
    def add_minor_version_upgrade(self, change: VersionChange) -> None:
        pass

    @abstractmethod
    def add_micro_version_upgrade(self, change: VersionChange) -> None:
        pass

    @abstractmethod
    def done(self) -> None:
        pass


class BufferingReporter(DepTreeDiffReporter):
    """Collects callbacks so subclasses can render everything on done()."""

    def __init__(self):
        self.added: List[str] = []
        self.removed: List[str] = []
        self.major: List[VersionChange] = []
        self.minor: List[VersionChange] = []
        self.micro: List[VersionChange] = []

    def add_new_dependency(self, gav: str) -> None:
        self.added.append(gav)

    def add_removed_dependency(self, gav: str) -> None:
        self.removed.append(gav)

    def add_major_version_upgrade(self, change: VersionChange) -> None:
        self.major.append(change)

    def add_minor_version_upgrade(self, change: VersionChange) -> None:
        self.minor.append(change)

    def add_micro_version_upgrade(self, change: VersionChange) -> None:
        self.micro.append(change)

    @property
    def event_count(self) -> int:
        return (
            len(self.added)
            + len(self.removed)
            + len(self.major)
            + len(self.minor)
            + len(self.micro)
        )

    def done(self) -> None:
        self.render()
        log_reporter_complete(type(self).__name__, self.event_count)

    @abstractmethod
    def render(self) -> None:
        pass

    def _write_output(self, output_file: str, content: str) -> None:
        try:
            path = Path(output_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            get_error_handler().error(
                ErrorCategory.REPORTING,
                f"Could not write report to {output_file}: {e}",
                "reporting",
                type(self).__name__,
                exception=e,
            )
            raise


class ConsoleReporter(BufferingReporter):
    """Formats and displays diff results on the console."""

    def __init__(self, console: Optional[Console] = None, show_summary: bool = True):
        super().__init__()
        self.console = console or Console()
        self.show_summary = show_summary

    def render(self) -> None:
        self.console.print()
        self.console.print(
            Panel(
                "📦 Dependency Tree Diff",
                title="[bold blue]dep-tree-diff[/bold blue]",
                border_style="blue",
            )
        )

        if self.event_count == 0:
            self.console.print("✅ No dependency changes found.", style="green")
            return

        if self.show_summary:
            self._print_summary()

        self._print_dependency_list("➕ Added Dependencies", self.added, "green")
        self._print_dependency_list("➖ Removed Dependencies", self.removed, "red")
        self._print_changes("🚨 Major Version Upgrades", self.major, "bold red")
        self._print_changes("⚠️  Minor Version Upgrades", self.minor, "yellow")
        self._print_changes("🔧 Micro Version Upgrades", self.micro, "cyan")

    def _print_summary(self) -> None:
        table = Table(title="📊 Diff Summary", box=box.ROUNDED, title_style="bold cyan")
        table.add_column("Change", style="bold")
        table.add_column("Count", justify="center")

        table.add_row("Added", f"[green]{len(self.added)}[/green]")
        table.add_row("Removed", f"[red]{len(self.removed)}[/red]")
        table.add_row("Major", f"[bold red]{len(self.major)}[/bold red]")
        table.add_row("Minor", f"[yellow]{len(self.minor)}[/yellow]")
        table.add_row("Micro", f"[cyan]{len(self.micro)}[/cyan]")

        self.console.print(table)
        self.console.print()

    def _print_dependency_list(self, title: str, gavs: List[str], color: str) -> None:
        if not gavs:
            return

        table = Table(title=title, box=box.SIMPLE, title_style=f"bold {color}")
        table.add_column("Dependency", style=color, no_wrap=True)
        for gav in gavs:
            table.add_row(Text(gav))

        self.console.print(table)

    def _print_changes(self, title: str, changes: List[VersionChange], color: str) -> None:
        if not changes:
            return

        table = Table(title=title, box=box.SIMPLE, title_style=color)
        table.add_column("Original", no_wrap=True)
        table.add_column("New", style=color, no_wrap=True)
        for change in changes:
            table.add_row(Text(change.original_gav_string), Text(change.new_gav_string))

        self.console.print(table)


class JsonReporter(BufferingReporter):
    """Writes the diff as a JSON document."""

    def __init__(self, output_file: str = "dep-tree-diff.json"):
        super().__init__()
        self.output_file = output_file

    def to_dict(self) -> Dict[str, Any]:
        def change_dict(change: VersionChange) -> Dict[str, str]:
            return {"original": change.original_gav_string, "new": change.new_gav_string}

        return {
            "summary": {
                "added": len(self.added),
                "removed": len(self.removed),
                "major": len(self.major),
                "minor": len(self.minor),
                "micro": len(self.micro),
            },
            "added": list(self.added),
            "removed": list(self.removed),
            "major": [change_dict(c) for c in self.major],
            "minor": [change_dict(c) for c in self.minor],
            "micro": [change_dict(c) for c in self.micro],
        }

    def render(self) -> None:
        self._write_output(
            self.output_file, json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
        )


class MarkdownReporter(BufferingReporter):
    """Writes the diff as Markdown, suitable for a pull request comment."""

    def __init__(self, output_file: str = "dep-tree-diff.md"):
        super().__init__()
        self.output_file = output_file

    def to_markdown(self) -> str:
        lines = ["## Dependency Tree Diff", ""]

        if self.event_count == 0:
            lines.append("No dependency changes found.")
            return "\n".join(lines) + "\n"

        sections = [
            ("Added dependencies", [f"`{gav}`" for gav in self.added]),
            ("Removed dependencies", [f"`{gav}`" for gav in self.removed]),
            ("Major version upgrades", [_markdown_change(c) for c in self.major]),
            ("Minor version upgrades", [_markdown_change(c) for c in self.minor]),
            ("Micro version upgrades", [_markdown_change(c) for c in self.micro]),
        ]
        for title, entries in sections:
            if not entries:
                continue
            lines.append(f"### {title} ({len(entries)})")
            lines.append("")
            lines.extend(f"- {entry}" for entry in entries)
            lines.append("")

        return "\n".join(lines)

    def render(self) -> None:
        self._write_output(self.output_file, self.to_markdown())


def _markdown_change(change: VersionChange) -> str:
    return f"`{change.original_gav_string}` → `{change.new_gav_string}`"


ReporterFactory = Callable[[], DepTreeDiffReporter]

REPORTER_REGISTRY: Dict[str, Callable[..., DepTreeDiffReporter]] = {
    "json": JsonReporter,
    "markdown": MarkdownReporter,
}


def build_reporter_factories(
    extra_reporters: Sequence[str] = (),
    console: Optional[Console] = None,
    show_summary: bool = True,
    output_files: Optional[Dict[str, str]] = None,
) -> List[ReporterFactory]:
    """
    Build the ordered reporter factory list: the console reporter first,
    then each named extra from REPORTER_REGISTRY in the order given.

    Raises:
        ValueError: If an extra reporter name is not registered
    """
    output_files = output_files or {}
    factories: List[ReporterFactory] = [
        partial(ConsoleReporter, console=console, show_summary=show_summary)
    ]

    for name in extra_reporters:
        reporter_class = REPORTER_REGISTRY.get(name)
        if reporter_class is None:
            raise ValueError(
                f"Unknown reporter: {name} (known: {', '.join(sorted(REPORTER_REGISTRY))})"
            )
        if name in output_files:
            factories.append(partial(reporter_class, output_file=output_files[name]))
        else:
            factories.append(reporter_class)

    return factories


class ReportDispatcher:
    """Feeds one DiffResult to every reporter in order."""

    def __init__(self, reporter_factories: Sequence[ReporterFactory]):
        self.reporters: List[DepTreeDiffReporter] = [
            factory() for factory in reporter_factories
        ]

    def dispatch(self, result: DiffResult) -> None:
        for reporter in self.reporters:
            for dep in result.added:
                reporter.add_new_dependency(dep.gav_string)
            for dep in result.removed:
                reporter.add_removed_dependency(dep.gav_string)
            for change in result.major_changes:
                reporter.add_major_version_upgrade(change)
            for change in result.minor_changes:
                reporter.add_minor_version_upgrade(change)
            for change in result.micro_changes:
                reporter.add_micro_version_upgrade(change)
            reporter.done()

"""Wires merging, diffing and reporting together for one comparison run."""

from typing import Callable, List, Optional, Sequence

from .differ import DiffResult, diff_dependencies
from .merge import DependencyMerger, DependencyParser, MergeConflict, MergeResult
from .parsers import parse_dependency_tree
from .reporting import ReportDispatcher, ReporterFactory, build_reporter_factories


class DepTreeDiffTool:
    """Compares one original side against one new side."""

    def __init__(
        self,
        reporter_factories: Sequence[ReporterFactory],
        original: MergeResult,
        new: MergeResult,
    ):
        self.reporter_factories = list(reporter_factories)
        self.original = original
        self.new = new

    @classmethod
    def create(
        cls,
        original_files: Sequence[str],
        new_files: Sequence[str],
        reporter_factories: Optional[Sequence[ReporterFactory]] = None,
        parser: DependencyParser = parse_dependency_tree,
        on_conflict: Optional[Callable[[MergeConflict], None]] = None,
    ) -> "DepTreeDiffTool":
        """
        Merge both sides. The original side is merged completely before the
        new side is read, so conflict warnings appear in input order.

        Raises:
            ValueError: If any input file cannot be read
        """
        merger = DependencyMerger(parser=parser, on_conflict=on_conflict)
        original = merger.merge(original_files)
        new = merger.merge(new_files)

        if reporter_factories is None:
            reporter_factories = build_reporter_factories()

        return cls(reporter_factories, original, new)

    @property
    def conflicts(self) -> List[MergeConflict]:
        return self.original.conflicts + self.new.conflicts

    def compute_diff(self) -> DiffResult:
        return diff_dependencies(self.original.dependencies, self.new.dependencies)

    def report_diffs(self) -> DiffResult:
        """Compute the diff and feed it to every reporter."""
        result = self.compute_diff()
        ReportDispatcher(self.reporter_factories).dispatch(result)
        return result

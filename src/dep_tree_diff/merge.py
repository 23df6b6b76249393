"""
Multi-file merge of dependency listings.

Each side of a comparison may be described by several dependency tree files
(one per module, say). The merger folds them into one canonical
DependencyKey -> Dependency mapping, where the last source to define an
identity wins and every overridden definition with a different version is
reported as a conflict.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .dependency import Dependency, DependencyKey
from .error_handling import log_merge_conflict
from .parsers import parse_dependency_tree
from .structured_logging import log_merge_complete, log_source_parsed

DependencyParser = Callable[[str], List[Dependency]]


@dataclass(frozen=True)
class MergeConflict:
    """An identity defined twice with different coordinates."""

    key: DependencyKey
    winner: Dependency
    winner_source: str
    superseded: Dependency
    superseded_source: str

    @property
    def message(self) -> str:
        return (
            f"'{self.winner.gav_string}' in '{self.winner_source}' was already found as "
            f"'{self.superseded.gav_string}' in '{self.superseded_source}'. "
            f"The last one ({Path(self.winner_source).name}) will be used for the comparison."
        )


@dataclass
class MergeResult:
    """Canonical mapping for one side, plus the conflicts met building it."""

    dependencies: Dict[DependencyKey, Dependency]
    conflicts: List[MergeConflict] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.dependencies)


class DependencyMerger:
    """
    Merges dependencies from an ordered list of sources.

    Per key only the last (source, dependency) pair is retained, which is
    all a conflict message needs.
    """

    def __init__(
        self,
        parser: DependencyParser = parse_dependency_tree,
        on_conflict: Optional[Callable[[MergeConflict], None]] = None,
    ):
        self.parser = parser
        self.on_conflict = on_conflict

    def merge(self, sources: Sequence[str]) -> MergeResult:
        """
        Merge all sources in order into one canonical mapping.

        Raises:
            ValueError: If any source cannot be read. Nothing is returned for
                the side in that case.
        """
        canonical: Dict[DependencyKey, Dependency] = {}
        last_seen: Dict[DependencyKey, Tuple[str, Dependency]] = {}
        conflicts: List[MergeConflict] = []

        for source in sources:
            source = str(source)
            dependencies = self.parser(source)
            log_source_parsed(source, len(dependencies))

            for dependency in dependencies:
                key = dependency.key
                previous = last_seen.get(key)
                if previous is not None:
                    previous_source, previous_dependency = previous
                    if previous_dependency.gav_string != dependency.gav_string:
                        conflict = MergeConflict(
                            key=key,
                            winner=dependency,
                            winner_source=source,
                            superseded=previous_dependency,
                            superseded_source=previous_source,
                        )
                        conflicts.append(conflict)
                        self._report_conflict(conflict)

                canonical[key] = dependency
                last_seen[key] = (source, dependency)

        log_merge_complete([str(s) for s in sources], len(canonical), len(conflicts))
        return MergeResult(dependencies=canonical, conflicts=conflicts)

    def _report_conflict(self, conflict: MergeConflict) -> None:
        log_merge_conflict(
            conflict.message,
            "merge",
            "merge",
            winner=conflict.winner.gav_string,
            winner_source=conflict.winner_source,
            superseded=conflict.superseded.gav_string,
            superseded_source=conflict.superseded_source,
        )
        if self.on_conflict is not None:
            self.on_conflict(conflict)


def merge_dependency_files(
    sources: Sequence[str],
    parser: DependencyParser = parse_dependency_tree,
    on_conflict: Optional[Callable[[MergeConflict], None]] = None,
) -> MergeResult:
    """Convenience wrapper around DependencyMerger.merge."""
    return DependencyMerger(parser=parser, on_conflict=on_conflict).merge(sources)

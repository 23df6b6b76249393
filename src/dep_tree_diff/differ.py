"""
Diff engine for canonical dependency mappings.

Computes added and removed dependencies and classifies version changes into
major, minor and micro tiers. Every result list is sorted by GAV string so
output never depends on mapping iteration order.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .dependency import Dependency, DependencyKey, Version, VersionChange
from .structured_logging import log_diff_complete, log_diff_start

DependencyMapping = Mapping[DependencyKey, Dependency]


class ChangeTier(Enum):
    """Severity of a version change, in priority order."""

    MAJOR = "major"
    MINOR = "minor"
    MICRO = "micro"


def classify_version_change(original: Version, new: Version) -> Optional[ChangeTier]:
    """
    Return the tier of the change from ``original`` to ``new``.

    Tiers are exclusive: a major difference wins over minor and micro ones.
    Returns None when all three components are equal.
    """
    if not new.same_major(original):
        return ChangeTier.MAJOR
    if not new.same_minor(original):
        return ChangeTier.MINOR
    if not new.same_micro(original):
        return ChangeTier.MICRO
    return None


def find_only_in_left(left: DependencyMapping, right: DependencyMapping) -> List[Dependency]:
    """Dependencies whose key is in ``left`` but not in ``right``, sorted by GAV."""
    only_left = [dep for key, dep in left.items() if key not in right]
    only_left.sort(key=lambda dep: dep.gav_string)
    return only_left


@dataclass
class DiffResult:
    """The ordered outcome of comparing two canonical mappings."""

    added: List[Dependency] = field(default_factory=list)
    removed: List[Dependency] = field(default_factory=list)
    major_changes: List[VersionChange] = field(default_factory=list)
    minor_changes: List[VersionChange] = field(default_factory=list)
    micro_changes: List[VersionChange] = field(default_factory=list)

    @property
    def total_changes(self) -> int:
        return (
            len(self.added)
            + len(self.removed)
            + len(self.major_changes)
            + len(self.minor_changes)
            + len(self.micro_changes)
        )

    @property
    def has_changes(self) -> bool:
        return self.total_changes > 0

    @property
    def has_major_changes(self) -> bool:
        return len(self.major_changes) > 0

    def summary(self) -> Dict[str, int]:
        return {
            "added": len(self.added),
            "removed": len(self.removed),
            "major": len(self.major_changes),
            "minor": len(self.minor_changes),
            "micro": len(self.micro_changes),
        }


class DependencyDiffer:
    """Compares an original and a new canonical mapping."""

    def __init__(self, original: DependencyMapping, new: DependencyMapping):
        self.original = MappingProxyType(dict(original))
        self.new = MappingProxyType(dict(new))

    def find_added(self) -> List[Dependency]:
        return find_only_in_left(self.new, self.original)

    def find_removed(self) -> List[Dependency]:
        return find_only_in_left(self.original, self.new)

    def find_version_changes(self, tier: ChangeTier) -> List[VersionChange]:
        """All version changes of one tier, sorted by the original GAV string."""
        changes = []
        for key, new_dep in self.new.items():
            original_dep = self.original.get(key)
            if original_dep is None:
                continue
            if classify_version_change(original_dep.version, new_dep.version) is tier:
                changes.append(VersionChange(original_dep, new_dep))

        changes.sort(key=lambda change: change.original_gav_string)
        return changes

    def find_major_version_changes(self) -> List[VersionChange]:
        return self.find_version_changes(ChangeTier.MAJOR)

    def find_minor_version_changes(self) -> List[VersionChange]:
        return self.find_version_changes(ChangeTier.MINOR)

    def find_micro_version_changes(self) -> List[VersionChange]:
        return self.find_version_changes(ChangeTier.MICRO)

    def diff(self) -> DiffResult:
        """Compute every result list."""
        start_time = time.time()
        log_diff_start(f"diff_{uuid.uuid4().hex[:12]}", len(self.original), len(self.new))

        result = DiffResult(
            added=self.find_added(),
            removed=self.find_removed(),
            major_changes=self.find_major_version_changes(),
            minor_changes=self.find_minor_version_changes(),
            micro_changes=self.find_micro_version_changes(),
        )

        log_diff_complete(result.summary(), int((time.time() - start_time) * 1000))
        return result


def diff_dependencies(original: DependencyMapping, new: DependencyMapping) -> DiffResult:
    """Diff two canonical mappings."""
    return DependencyDiffer(original, new).diff()

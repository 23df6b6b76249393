"""
Dependency data model for dep-tree-diff.

Defines the version value type with its per-component equality predicates,
the dependency record, the version-independent dependency key and the
version change pairing used by the diff engine.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


class _MissingComponent:
    """Sentinel for a version component that is absent or unparseable."""

    _instance: Optional["_MissingComponent"] = None

    def __new__(cls) -> "_MissingComponent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<missing>"

    def __bool__(self) -> bool:
        return False


MISSING = _MissingComponent()

VersionComponent = Union[int, str, _MissingComponent]

_DIGITS = re.compile(r"^[0-9]+$")
_LEADING_DIGITS = re.compile(r"^([0-9]+)(.+)$")


@dataclass(frozen=True)
class Version:
    """A major.minor.micro version as parsed from a dependency coordinate."""

    major: VersionComponent = MISSING
    minor: VersionComponent = MISSING
    micro: VersionComponent = MISSING
    qualifier: Optional[str] = None
    raw: str = ""

    @classmethod
    def parse(cls, text: str) -> "Version":
        """
        Parse a version string such as ``1.2.3``, ``2.0.0.Final`` or
        ``1.4-SNAPSHOT``.

        Numeric tokens become ints and other tokens are kept as strings.
        A token with a numeric prefix and a suffix (``4-SNAPSHOT``) yields the
        int and ends parsing; the suffix and anything after it become the
        qualifier, as does everything past the third token. Slots left
        unfilled stay MISSING, so ``1.0`` never compares equal to ``1.0.0``
        in the micro slot.
        """
        raw = (text or "").strip()
        tokens = raw.split(".") if raw else []
        components = []
        qualifier = None

        for index, token in enumerate(tokens):
            if len(components) == 3:
                qualifier = ".".join(tokens[index:]) or None
                break

            if _DIGITS.match(token):
                components.append(int(token))
                continue

            match = _LEADING_DIGITS.match(token)
            if match:
                components.append(int(match.group(1)))
                suffix = match.group(2).lstrip("-_")
                qualifier = ".".join([suffix] + tokens[index + 1 :]) or None
                break

            if token:
                components.append(token)
            else:
                components.append(MISSING)

        while len(components) < 3:
            components.append(MISSING)

        return cls(
            major=components[0],
            minor=components[1],
            micro=components[2],
            qualifier=qualifier,
            raw=raw,
        )

    @property
    def components(self) -> Tuple[VersionComponent, VersionComponent, VersionComponent]:
        return (self.major, self.minor, self.micro)

    def same_major(self, other: "Version") -> bool:
        """True iff the major components are equal."""
        return _component_equals(self.major, other.major)

    def same_minor(self, other: "Version") -> bool:
        """True iff the minor components are equal."""
        return _component_equals(self.minor, other.minor)

    def same_micro(self, other: "Version") -> bool:
        """True iff the micro components are equal."""
        return _component_equals(self.micro, other.micro)

    def __str__(self) -> str:
        if self.raw:
            return self.raw
        parts = [str(c) for c in self.components if c is not MISSING]
        rendered = ".".join(parts)
        if self.qualifier:
            rendered = f"{rendered}.{self.qualifier}" if rendered else self.qualifier
        return rendered


def _component_equals(left: VersionComponent, right: VersionComponent) -> bool:
    # MISSING is a singleton and only ever equals itself
    if left is MISSING or right is MISSING:
        return left is right
    return type(left) is type(right) and left == right


@dataclass(frozen=True)
class DependencyKey:
    """Identity of a dependency, excluding its version."""

    group_id: str
    artifact_id: str
    type: str = "jar"
    classifier: Optional[str] = None

    @classmethod
    def from_dependency(cls, dependency: "Dependency") -> "DependencyKey":
        return cls(
            group_id=dependency.group_id,
            artifact_id=dependency.artifact_id,
            type=dependency.type,
            classifier=dependency.classifier,
        )

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id]
        if self.type != "jar" or self.classifier:
            parts.append(self.type)
        if self.classifier:
            parts.append(self.classifier)
        return ":".join(parts)


@dataclass(frozen=True)
class Dependency:
    """A single resolved dependency as listed in a dependency tree."""

    group_id: str
    artifact_id: str
    version: Version
    type: str = "jar"
    classifier: Optional[str] = None
    scope: Optional[str] = field(default=None, compare=False)
    source_file: Optional[str] = field(default=None, compare=False)

    @property
    def key(self) -> DependencyKey:
        return DependencyKey.from_dependency(self)

    @property
    def gav_string(self) -> str:
        """Rendered coordinate, used for display and as the sort key."""
        return f"{self.key}:{self.version}"

    def __str__(self) -> str:
        return self.gav_string


@dataclass(frozen=True)
class VersionChange:
    """The same dependency seen at a different version on each side."""

    original: Dependency
    new: Dependency

    def __post_init__(self):
        if self.original.key != self.new.key:
            raise ValueError(
                f"Cannot pair {self.original.gav_string} with {self.new.gav_string}: "
                "dependency keys differ"
            )

    @property
    def key(self) -> DependencyKey:
        return self.original.key

    @property
    def original_gav_string(self) -> str:
        return self.original.gav_string

    @property
    def new_gav_string(self) -> str:
        return self.new.gav_string

    def __str__(self) -> str:
        return f"{self.original_gav_string} -> {self.new_gav_string}"

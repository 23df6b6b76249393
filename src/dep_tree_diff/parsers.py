import re
from pathlib import Path
from typing import Callable, List, Optional

from .cli_config import get_config
from .dependency import Dependency, Version
from .error_handling import (
    ErrorCallback,
    ErrorCategory,
    get_error_handler,
    log_filesystem_error,
    log_parsing_error,
)

# Optional "[INFO] " log prefix, then tree drawing characters, then "+- " or "\- "
_TREE_ENTRY = re.compile(r"^(?:\[[A-Z]+\]\s?)?[\s|]*[+\\]-\s*(?P<coordinate>.+)$")


def _validate_file_path(file_path: str) -> Path:
    """
    Validate that a dependency tree file exists and is within size limits.

    Args:
        file_path: The file path to validate

    Returns:
        Path: Validated and resolved path object

    Raises:
        ValueError: If path is invalid or unreadable
    """
    if not file_path or not isinstance(file_path, str):
        raise ValueError("File path must be a non-empty string")

    try:
        path = Path(file_path).resolve()
    except (OSError, ValueError) as e:
        raise ValueError(f"Invalid file path: {e}")

    if not path.exists():
        raise ValueError(f"File does not exist: {path}")

    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    config = get_config()
    try:
        file_size = path.stat().st_size
    except OSError as e:
        raise ValueError(f"Cannot access file: {e}")

    max_file_size = config.security.max_file_size_bytes
    if file_size > max_file_size:
        raise ValueError(f"File too large: {file_size} bytes (max: {max_file_size})")

    return path


def _process_file_line_by_line(
    file_path: str,
    line_processor: Callable[[str, int], Optional[Dependency]],
    max_lines: Optional[int] = None,
) -> List[Dependency]:
    """
    Process a file line by line, closing it before returning.

    Args:
        file_path: The file path to process
        line_processor: Function to process each line (line, line_number) -> Optional[Dependency]
        max_lines: Maximum number of lines to process (None = configured limit)

    Returns:
        List[Dependency]: Dependencies in file order

    Raises:
        ValueError: If the file cannot be read or has more than max_lines lines
    """
    validated_path = _validate_file_path(file_path)

    if max_lines is None:
        max_lines = get_config().security.max_lines_per_file

    results = []

    try:
        with open(validated_path, encoding="utf-8", errors="replace") as f:
            for line_num, line in enumerate(f, 1):
                if line_num > max_lines:
                    raise ValueError(
                        f"File has too many lines: {validated_path.name} "
                        f"(max: {max_lines})"
                    )

                try:
                    result = line_processor(line, line_num)
                except ValueError as e:
                    log_parsing_error(
                        f"Could not process line: {line.strip()[:100]}",
                        module="parsers",
                        function="_process_file_line_by_line",
                        line_number=line_num,
                        file_path=file_path,
                        exception=e,
                    )
                    continue

                if result is not None:
                    results.append(result)

        return results

    except PermissionError as e:
        log_filesystem_error(
            "Permission denied reading file",
            "parsers",
            "_process_file_line_by_line",
            file_path=file_path,
            exception=e,
        )
        raise ValueError(f"Permission denied reading file: {file_path}")
    except OSError as e:
        log_filesystem_error(
            f"Error reading file: {e}",
            "parsers",
            "_process_file_line_by_line",
            file_path=file_path,
            exception=e,
        )
        raise ValueError(f"Error reading file: {e}")


def parse_coordinate(coordinate: str, source_file: Optional[str] = None) -> Dependency:
    """
    Parse one Maven coordinate as printed by ``mvn dependency:tree``.

    Accepted shapes::

        group:artifact:type:version
        group:artifact:type:version:scope
        group:artifact:type:classifier:version:scope

    Anything after the first whitespace (e.g. ``(version managed from 1.0)``)
    is ignored.

    Raises:
        ValueError: If the coordinate does not have one of the shapes above
    """
    text = coordinate.strip().split()[0] if coordinate.strip() else ""
    parts = text.split(":")

    if len(parts) == 4:
        group_id, artifact_id, dep_type, version = parts
        classifier, scope = None, None
    elif len(parts) == 5:
        group_id, artifact_id, dep_type, version, scope = parts
        classifier = None
    elif len(parts) == 6:
        group_id, artifact_id, dep_type, classifier, version, scope = parts
    else:
        raise ValueError(f"Unrecognised coordinate: {coordinate.strip()!r}")

    if not group_id or not artifact_id or not version:
        raise ValueError(f"Incomplete coordinate: {coordinate.strip()!r}")

    return Dependency(
        group_id=group_id,
        artifact_id=artifact_id,
        version=Version.parse(version),
        type=dep_type or "jar",
        classifier=classifier or None,
        scope=scope or None,
        source_file=source_file,
    )


def parse_dependency_tree(
    file_path: str, error_callback: Optional[ErrorCallback] = None
) -> List[Dependency]:
    """
    Parse a ``mvn dependency:tree`` text report into dependencies.

    Only tree entries are returned, so the root project line is skipped.
    Entries wrapped in parentheses by verbose mode (omitted duplicates and
    conflicts) were not resolved and are skipped too.

    Args:
        file_path: Path to the dependency tree report
        error_callback: Optional callback for handling parsing errors

    Returns:
        List[Dependency]: Dependencies in the order they appear in the file

    Raises:
        ValueError: If the file cannot be read or exceeds the size or line limits
    """
    error_handler = get_error_handler()
    if error_callback:
        error_handler.register_callback(error_callback, ErrorCategory.PARSING)

    def process_tree_line(line: str, line_num: int) -> Optional[Dependency]:
        match = _TREE_ENTRY.match(line.rstrip())
        if not match:
            return None

        coordinate = match.group("coordinate").strip()
        if coordinate.startswith("("):
            return None

        return parse_coordinate(coordinate, source_file=file_path)

    try:
        return _process_file_line_by_line(file_path, process_tree_line)
    finally:
        if error_callback:
            error_handler.unregister_callback(error_callback, ErrorCategory.PARSING)

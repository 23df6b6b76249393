"""
Structured logging configuration for dep-tree-diff.

Emits machine-readable JSON events for the parse, merge, diff and reporting
stages. Events go to stderr so they never interleave with report output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "getMessage",
    "exc_info",
    "exc_text",
    "stack_info",
}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class DiffLogger:
    """Structured logger for one stage of a diff run."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(f"dep_tree_diff.{name}")
        self._setup_logger()
        self.run_context: Dict[str, Any] = {}

    def _setup_logger(self) -> None:
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.WARNING)
            self.logger.propagate = False

    def set_run_context(self, run_id: Optional[str] = None) -> None:
        self.run_context = {"run_id": run_id} if run_id else {}

    def clear_run_context(self) -> None:
        self.run_context.clear()

    def _log(self, level: str, event_type: str, **kwargs) -> None:
        log_data = {"event_type": event_type, **self.run_context, **kwargs}
        getattr(self.logger, level)(event_type, extra=log_data)

    def info(self, event_type: str, **kwargs) -> None:
        self._log("info", event_type, **kwargs)

    def debug(self, event_type: str, **kwargs) -> None:
        self._log("debug", event_type, **kwargs)


# Global logger instances
_merge_logger = DiffLogger("merge")
_diff_logger = DiffLogger("diff")
_reporting_logger = DiffLogger("reporting")

_ALL_LOGGERS = [_merge_logger, _diff_logger, _reporting_logger]


def log_source_parsed(file_path: str, dependency_count: int) -> None:
    """Log that one input source was read to completion."""
    _merge_logger.debug(
        "source_parsed", file_path=file_path, dependency_count=dependency_count
    )


def log_merge_complete(
    sources: List[str], total_dependencies: int, conflict_count: int
) -> None:
    """Log the outcome of merging one side's sources."""
    _merge_logger.info(
        "merge_completed",
        sources=sources,
        total_dependencies=total_dependencies,
        conflict_count=conflict_count,
    )


def log_diff_start(run_id: str, original_count: int, new_count: int) -> None:
    """Log diff start event."""
    set_run_context(run_id)
    _diff_logger.info(
        "diff_started",
        original_dependencies=original_count,
        new_dependencies=new_count,
    )


def log_diff_complete(summary: Dict[str, int], duration_ms: int) -> None:
    """Log diff completion event."""
    _diff_logger.info("diff_completed", duration_ms=duration_ms, **summary)


def log_reporter_complete(reporter_name: str, events: int) -> None:
    """Log that a reporter received its done signal."""
    _reporting_logger.debug(
        "reporter_completed", reporter=reporter_name, events_received=events
    )


def set_run_context(run_id: Optional[str] = None) -> None:
    """Set global run context for all loggers."""
    for logger in _ALL_LOGGERS:
        logger.set_run_context(run_id)


def clear_run_context() -> None:
    """Clear global run context."""
    for logger in _ALL_LOGGERS:
        logger.clear_run_context()


def configure_logging(log_level: str = "WARNING") -> None:
    """Apply the configured level to every stage logger."""
    level = getattr(logging, log_level.upper(), logging.WARNING)
    for logger in _ALL_LOGGERS:
        logger.logger.setLevel(level)

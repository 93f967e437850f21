from __future__ import annotations

"""
Export Domain Data Models.

Defines the result object and factory functions used to communicate the
outcome of an export run between the engine and the CLI layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from orgwalk.domain.directory_models import UserRecord

# -----------------------------------------------------------------------------
# PROCESS EXIT CODES
# -----------------------------------------------------------------------------

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_AUTH = 2
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ExportResult:
    """
    Unified result of a complete export run.

    Attributes:
        ok: True only when the whole hierarchy was walked and written.
        exit_code: Process exit code matching the outcome.
        error: Descriptive message in case of failure.
        root_id: Identifier of the resolved root user.
        root_display_name: Display name of the resolved root user.
        rows_written: Number of data rows flushed to the sink.
        output_path: Absolute file path, or "" for standard output.
        failures: One line per subtree that could not be expanded.
        cancelled: Whether the walk was interrupted.
        summary: Execution metadata for reporting.
    """
    ok: bool
    exit_code: int
    error: str = ""

    root_id: str = ""
    root_display_name: str = ""

    rows_written: int = 0
    output_path: str = ""

    failures: List[str] = field(default_factory=list)
    cancelled: bool = False

    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def partial(self) -> bool:
        return bool(self.failures) or self.cancelled

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        exit_code: int,
        root: Optional[UserRecord] = None,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> ExportResult:
    """
    Create a failed result for a run that produced no usable output.

    Args:
        error: Detailed error description.
        exit_code: Process exit code for this failure class.
        root: The resolved root, when resolution got that far.
        summary_extra: Additional metadata for the summary payload.
    """
    return ExportResult(
        ok=False,
        exit_code=exit_code,
        error=error,
        root_id=root.id if root else "",
        root_display_name=root.display_name if root else "",
        summary=summary_extra or {},
    )


def create_export_result(
        root: UserRecord,
        rows_written: int,
        output_path: str,
        failures: Optional[List[str]] = None,
        cancelled: bool = False,
        summary_extra: Optional[Dict[str, Any]] = None,
) -> ExportResult:
    """
    Create the result of a run that emitted rows.

    A run with failures or a cancellation is reported as not ok with a
    non-zero exit code, even though its rows were written.
    """
    failures = list(failures or [])
    partial = bool(failures) or cancelled

    error = ""
    exit_code = EXIT_OK
    if cancelled:
        error = "Traversal cancelled; output is incomplete."
        exit_code = EXIT_INTERRUPTED
    elif failures:
        error = f"{len(failures)} subtree(s) could not be expanded; output is incomplete."
        exit_code = EXIT_FAILURE

    return ExportResult(
        ok=not partial,
        exit_code=exit_code,
        error=error,
        root_id=root.id,
        root_display_name=root.display_name,
        rows_written=rows_written,
        output_path=output_path,
        failures=failures,
        cancelled=cancelled,
        summary=summary_extra or {},
    )

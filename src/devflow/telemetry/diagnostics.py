"""Diagnostic aggregation.

One diagnostics-changed notification names the files whose diagnostics
changed. For those files the aggregator recounts the *current* full
diagnostic lists (never a delta) and reports a failing build when any
error or warning is present. A file that stays broken is therefore
reported again on every notification that touches it.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from devflow.models.enums import DiagnosticSeverity, TaskKind, TaskResult
from devflow.telemetry.models import BuildEvent, Diagnostic

logger = logging.getLogger(__name__)

DiagnosticsProvider = Callable[[str], Sequence[Diagnostic]]


@dataclass(frozen=True)
class DiagnosticCounts:
    """Summed error and warning counts for one notification."""

    errors: int = 0
    warnings: int = 0

    @property
    def is_clean(self) -> bool:
        return self.errors == 0 and self.warnings == 0


def count_diagnostics(
    file_ids: Iterable[str],
    get_diagnostics: DiagnosticsProvider,
) -> DiagnosticCounts:
    """Sum error and warning entries across the given files.

    Each file is counted once even if the notification names it twice.

    Args:
        file_ids: Files touched by the notification.
        get_diagnostics: Returns a file's current diagnostic list.

    Returns:
        DiagnosticCounts over the current diagnostics of those files.
    """
    errors = warnings = 0
    for file_id in dict.fromkeys(file_ids):
        for diagnostic in get_diagnostics(file_id):
            if diagnostic.severity == DiagnosticSeverity.ERROR:
                errors += 1
            elif diagnostic.severity == DiagnosticSeverity.WARNING:
                warnings += 1
    return DiagnosticCounts(errors=errors, warnings=warnings)


def aggregate_diagnostics(
    file_ids: Iterable[str],
    get_diagnostics: DiagnosticsProvider,
) -> BuildEvent | None:
    """Turn one diagnostics notification into at most one failing BuildEvent.

    Returns:
        BuildEvent(kind=build, result=failure, ...) when any error or warning
        is present, otherwise None.
    """
    counts = count_diagnostics(file_ids, get_diagnostics)
    if counts.is_clean:
        return None

    logger.debug(f"Diagnostics: {counts.errors} error(s), {counts.warnings} warning(s)")
    return BuildEvent(
        kind=TaskKind.BUILD,
        result=TaskResult.FAILURE,
        error_count=counts.errors,
        warning_count=counts.warnings,
    )

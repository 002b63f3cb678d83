"""Task classification for build/test telemetry.

Classification is a pure function of a task's name and group:

1. group is build, or name contains "build"/"compile" -> build
2. group is test, or name contains "test"/"spec"      -> test
3. otherwise                                          -> other

Outcome derivation treats exit code 0 as success and anything else,
including a missing code, as failure.

Test summaries are extracted on a best-effort basis from the output of
common runners (pytest, jest, mocha, go test, cargo test). When nothing
recognizable is found, ``parse_test_summary`` returns None.
"""

import logging
import re

from devflow.models.enums import TaskGroup, TaskKind, TaskResult
from devflow.telemetry.constants import (
    BUILD_NAME_KEYWORDS,
    EXIT_CODE_SUCCESS,
    TEST_NAME_KEYWORDS,
)
from devflow.telemetry.models import TaskDescriptor, TestRunResult

logger = logging.getLogger(__name__)

_BUILD_GROUPS = (TaskGroup.BUILD, TaskGroup.REBUILD)


def classify_task(name: str, group: TaskGroup | str | None = None) -> TaskKind:
    """Classify a task by name and group.

    Args:
        name: Task label; matched case-insensitively.
        group: Host task group, as an enum or raw string.

    Returns:
        TaskKind.BUILD, TaskKind.TEST or TaskKind.OTHER.
    """
    parsed_group = TaskGroup.parse(group)
    lowered = name.lower()

    if parsed_group in _BUILD_GROUPS or any(k in lowered for k in BUILD_NAME_KEYWORDS):
        return TaskKind.BUILD
    if parsed_group == TaskGroup.TEST or any(k in lowered for k in TEST_NAME_KEYWORDS):
        return TaskKind.TEST
    return TaskKind.OTHER


def classify_descriptor(task: TaskDescriptor) -> TaskKind:
    """Classify a host task descriptor."""
    return classify_task(task.name, task.group)


def derive_result(exit_code: int | None) -> TaskResult:
    """Map a process exit code to a build/test result."""
    if exit_code == EXIT_CODE_SUCCESS:
        return TaskResult.SUCCESS
    return TaskResult.FAILURE


# =============================================================================
# Test summary extraction
# =============================================================================

# "Tests:       1 failed, 2 skipped, 5 passed, 8 total" (jest)
_JEST_SUMMARY = re.compile(r"^\s*Tests:\s+(?P<body>.+)$", re.MULTILINE)

# "===== 3 passed, 1 failed, 2 skipped in 0.12s =====" (pytest)
_PYTEST_SUMMARY = re.compile(r"^=+ (?P<body>.+?) in [\d.]+m?s(?: \([^)]*\))? =+\s*$", re.MULTILINE)

# "test result: FAILED. 3 passed; 1 failed; 2 ignored; ..." (cargo)
_CARGO_SUMMARY = re.compile(r"test result: \w+\. (?P<body>.+)$", re.MULTILINE)

# "  5 passing (20ms)", "  1 failing", "  2 pending" (mocha)
_MOCHA_COUNT = re.compile(r"^\s*(?P<count>\d+) (?P<label>passing|failing|pending)\b", re.MULTILINE)

# "--- PASS: TestX", "--- FAIL: TestY", "--- SKIP: TestZ" (go test -v)
_GO_RESULT = re.compile(r"^\s*--- (?P<label>PASS|FAIL|SKIP): ", re.MULTILINE)

# "3 passed", "1 failed", "2 skipped" anywhere in a summary fragment
_COUNT = re.compile(
    r"(?P<count>\d+) (?P<label>passed|failed|skipped|ignored|errors?|xfailed|xpassed|todo|pending)\b"
)

_PASSED_LABELS = ("passed", "xpassed")
_FAILED_LABELS = ("failed", "error", "errors")
_SKIPPED_LABELS = ("skipped", "ignored", "xfailed", "todo", "pending")


def _tally(body: str) -> TestRunResult | None:
    passed = failed = skipped = 0
    matched = False
    for match in _COUNT.finditer(body):
        matched = True
        count = int(match.group("count"))
        label = match.group("label")
        if label in _PASSED_LABELS:
            passed += count
        elif label in _FAILED_LABELS:
            failed += count
        elif label in _SKIPPED_LABELS:
            skipped += count
    if not matched:
        return None
    return TestRunResult(passed=passed, failed=failed, skipped=skipped)


def parse_test_summary(output: str | None) -> TestRunResult | None:
    """Extract passed/failed/skipped counts from test runner output.

    The last summary line of a recognized format wins, so watch-mode
    output that prints several summaries reports the most recent run.

    Args:
        output: Captured task output (may be None or empty).

    Returns:
        TestRunResult, or None if the output holds no recognizable summary.
    """
    if not output:
        return None

    for pattern in (_JEST_SUMMARY, _PYTEST_SUMMARY, _CARGO_SUMMARY):
        bodies = [m.group("body") for m in pattern.finditer(output)]
        for body in reversed(bodies):
            result = _tally(body)
            if result is not None:
                return result

    mocha = {"passing": 0, "failing": 0, "pending": 0}
    mocha_found = False
    for match in _MOCHA_COUNT.finditer(output):
        mocha_found = True
        mocha[match.group("label")] = int(match.group("count"))
    if mocha_found:
        return TestRunResult(
            passed=mocha["passing"], failed=mocha["failing"], skipped=mocha["pending"]
        )

    go_labels = [m.group("label") for m in _GO_RESULT.finditer(output)]
    if go_labels:
        return TestRunResult(
            passed=go_labels.count("PASS"),
            failed=go_labels.count("FAIL"),
            skipped=go_labels.count("SKIP"),
        )

    logger.debug("No recognizable test summary in task output")
    return None

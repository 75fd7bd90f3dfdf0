"""
================================================================================
Allure Report Utilities
================================================================================

Helpers for enriching Allure reports and describing a test run.

Features:
- JSON attachments
- Per-test report records
- Run metadata written at session start
- Summary of Allure result files

================================================================================
"""

import json
import platform
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from loguru import logger


TEST_STATUSES = ("PASSED", "FAILED", "SKIPPED")

# Set by run_tests.py so its per-project pytest runs share one metadata record
RUN_ID_ENV_VAR = "FINN_RUN_ID"


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


# ================================================================================
# Run Records
# ================================================================================

def generate_test_report(
    test_name: str,
    status: str,
    duration_ms: int,
    error: Optional[str] = None,
    screenshots: Optional[List[str]] = None,
    browser_name: Optional[str] = None,
    viewport: Optional[Dict[str, int]] = None,
    url: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a structured record describing one scenario execution.

    Args:
        test_name: Scenario name
        status: One of PASSED, FAILED, SKIPPED
        duration_ms: Execution time in milliseconds
        error: Failure message, if any
        screenshots: Paths of screenshots taken during the scenario
        browser_name: Browser engine name
        viewport: {"width": ..., "height": ...}
        url: Last page URL
        user_agent: Browser user agent

    Returns:
        JSON-serializable report dictionary
    """
    if status not in TEST_STATUSES:
        raise ValueError(f"Unknown status {status!r}, expected one of {TEST_STATUSES}")

    return {
        "testName": test_name,
        "status": status,
        "duration": f"{duration_ms}ms",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "error": error,
        "screenshots": list(screenshots or []),
        "environment": {
            "browser": browser_name or "unknown",
            "viewport": viewport,
            "url": url,
            "userAgent": user_agent,
        },
    }


def write_run_metadata(
    results_dir: Path,
    base_url: str,
    projects: List[str],
    workers: Optional[int] = None,
    ci: bool = False,
    run_id: Optional[str] = None,
) -> Path:
    """
    Write metadata.json describing the environment of this run.

    `run_id` identifies one run across pytest-xdist workers and across the
    per-project pytest invocations of run_tests.py. When the file already
    belongs to `run_id`, `projects` are added to its browser list and the
    original start time is kept; otherwise the file is replaced.

    Returns:
        Path to the written file
    """
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / "metadata.json"

    existing = _read_run_metadata(path) if run_id is not None else None
    if existing is not None and existing.get("runId") == run_id:
        browsers = existing["configuration"].get("browsers") or []
        existing["configuration"]["browsers"] = browsers + [
            p for p in projects if p not in browsers
        ]
        metadata = existing
    else:
        metadata = {
            "runId": run_id,
            "startTime": datetime.now(timezone.utc).isoformat(),
            "environment": {
                "pythonVersion": sys.version.split()[0],
                "platform": sys.platform,
                "arch": platform.machine(),
                "ci": ci,
            },
            "configuration": {
                "baseURL": base_url,
                "browsers": list(projects),
                "workers": workers,
            },
        }

    path.write_text(json.dumps(metadata, indent=2), encoding="utf-8")
    logger.debug(f"Run metadata written: {path}")
    return path


def run_metadata_exists(
    results_dir: Path,
    run_id: Optional[str],
    project: Optional[str] = None,
) -> bool:
    """True when metadata.json already records `run_id` (and `project`, if given)."""
    if run_id is None:
        return False
    metadata = _read_run_metadata(Path(results_dir) / "metadata.json")
    if metadata is None or metadata.get("runId") != run_id:
        return False
    return project is None or project in metadata["configuration"].get("browsers", [])


def _read_run_metadata(path: Path) -> Optional[Dict[str, Any]]:
    try:
        metadata = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    if not isinstance(metadata, dict) or not isinstance(metadata.get("configuration"), dict):
        return None
    return metadata
    path = Path(results_dir) / "metadata.json"
    try:
        return json.loads(path.read_text(encoding="utf-8")).get("runId") == run_id
    except (OSError, ValueError):
        return False


# ================================================================================
# Report Processing
# ================================================================================

@dataclass
class TestResultSummary:
    """Summary of test execution results."""
    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    unknown: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Calculate pass rate percentage."""
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "unknown": self.unknown,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "timestamp": self.timestamp,
        }


def summarize_results(results_dir: Path) -> TestResultSummary:
    """
    Count outcomes across Allure `*-result.json` files.

    Unreadable files are logged and skipped.
    """
    summary = TestResultSummary()

    for result_file in Path(results_dir).glob("*-result.json"):
        try:
            with open(result_file, encoding="utf-8") as f:
                status = json.load(f).get("status", "unknown")
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to parse {result_file}: {e}")
            continue

        summary.total += 1
        if status in ("passed", "failed", "broken", "skipped"):
            setattr(summary, status, getattr(summary, status) + 1)
        else:
            summary.unknown += 1

    return summary


__all__ = [
    "RUN_ID_ENV_VAR",
    "TestResultSummary",
    "attach_json",
    "generate_test_report",
    "run_metadata_exists",
    "summarize_results",
    "write_run_metadata",
]

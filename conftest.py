"""
================================================================================
Root Pytest Configuration
================================================================================

Root pytest configuration for the finn.no suite:
  - Command-line options (project, headed mode, live gate)
  - Project-wide markers
  - Logger initialization from config/config.yaml
  - Live scenarios are skipped unless explicitly enabled, so the unit suite
    runs offline

================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from finn_testsuites.ui_testing.framework.config_loader import ConfigLoader
from suite_tools.common import init_logger


LIVE_ENV_VAR = "FINN_RUN_LIVE"


def pytest_addoption(parser):
    """Register suite command-line options."""
    group = parser.getgroup("finn", "finn.no UI suite")
    group.addoption(
        "--ui-project",
        action="store",
        default=None,
        help="Browser/device project: chromium, firefox, webkit, "
             "mobile-chrome, mobile-safari, tablet (default: ui.browser)",
    )
    group.addoption(
        "--headed",
        action="store_true",
        default=False,
        help="Run the browser with a visible window",
    )
    group.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help=f"Run scenarios against the live site (or set {LIVE_ENV_VAR}=1)",
    )


def pytest_configure(config):
    """Configure logging and project-wide custom markers."""
    log = ConfigLoader().log_settings()
    init_logger(
        level=log.level,
        log_file=log.file,
        rotation=log.rotation,
        retention=log.retention,
    )

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - core search flow"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke_ui: Quick verification of the main flows"
    )
    config.addinivalue_line(
        "markers", "regression_ui: Full UI regression suite"
    )
    config.addinivalue_line(
        "markers", "live: Runs against the live site (needs --run-live)"
    )
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )
    config.addinivalue_line(
        "markers", "unit: Offline unit tests"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "search: Tests related to property search"
    )
    config.addinivalue_line(
        "markers", "details: Tests related to property details"
    )
    config.addinivalue_line(
        "markers", "responsive: Tests related to viewport layouts"
    )
    config.addinivalue_line(
        "markers", "cross_browser: Tests run across browser engines"
    )


def _live_enabled(config) -> bool:
    if config.getoption("--run-live"):
        return True
    return os.environ.get(LIVE_ENV_VAR, "").lower() in ("1", "true", "yes")


def pytest_collection_modifyitems(config, items):
    """
    Tag tests by location and gate live scenarios.

    Everything under ui_testing/tests talks to the real site and gets the
    'ui' and 'live' markers; everything under unit/ gets 'unit'.
    """
    skip_live = pytest.mark.skip(
        reason=f"live scenario: pass --run-live or set {LIVE_ENV_VAR}=1"
    )
    run_live = _live_enabled(config)

    for item in items:
        path = str(item.fspath)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
            item.add_marker(pytest.mark.live)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)

        if not run_live and item.get_closest_marker("live"):
            item.add_marker(skip_live)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    ui = ConfigLoader().ui()
    project = config.getoption("--ui-project") or ui.browser
    return [
        "",
        "=" * 60,
        "finn.no Real-Estate UI Test Suite",
        f"Target: {ui.base_url}  Project: {project}  "
        f"Live: {'on' if _live_enabled(config) else 'off'}",
        "=" * 60,
        "",
    ]


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent

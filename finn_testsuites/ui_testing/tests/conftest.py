"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for browser management, page objects and scenario setup/teardown.

Key Features:
- One browser per session for the selected project
- Fresh context, page and page objects per scenario
- Session setup: output directories, site reachability, run metadata
- Screenshot and diagnostics capture on failure

================================================================================
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any, AsyncGenerator, Dict

import allure
import pytest
from filelock import FileLock
from loguru import logger
from playwright.async_api import BrowserContext, Page
from playwright.async_api import Error as PlaywrightError

from finn_testsuites.ui_testing.framework.browser_manager import BrowserManager
from finn_testsuites.ui_testing.framework.config_loader import ConfigLoader
from finn_testsuites.ui_testing.framework.scenario import ScenarioContext
from suite_tools.common import ensure_directory
from suite_tools.report_tools import (
    RUN_ID_ENV_VAR,
    attach_json,
    generate_test_report,
    run_metadata_exists,
    write_run_metadata,
)


# ================================================================================
# Settings
# ================================================================================

@pytest.fixture(scope="session")
def ui_settings(pytestconfig) -> Dict[str, Any]:
    """Effective UI settings: config file, environment, then command line."""
    config = ConfigLoader()
    ui, reports = config.ui(), config.reports()
    return {
        "project": pytestconfig.getoption("--ui-project") or ui.browser,
        "headless": ui.headless and not pytestconfig.getoption("--headed"),
        "base_url": ui.base_url,
        "action_timeout": ui.action_timeout,
        "navigation_timeout": ui.navigation_timeout,
        "locale": ui.locale,
        "timezone_id": ui.timezone_id,
        "viewport": ui.viewport,
        "screenshots_dir": reports.screenshots_dir,
        "results_dir": reports.results_dir,
    }


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
async def browser_manager(ui_settings: Dict[str, Any]) -> AsyncGenerator[BrowserManager, None]:
    """
    Session-scoped browser manager fixture.

    Launches the selected project's browser once for all scenarios.
    """
    manager = BrowserManager(
        project=ui_settings["project"],
        headless=ui_settings["headless"],
        action_timeout=ui_settings["action_timeout"],
        navigation_timeout=ui_settings["navigation_timeout"],
        desktop_viewport=ui_settings["viewport"],
        context_options={
            "locale": ui_settings["locale"],
            "timezone_id": ui_settings["timezone_id"],
        },
    )
    await manager.start()
    yield manager
    await manager.close()


@pytest.fixture(scope="session", autouse=True)
async def suite_environment(
    browser_manager: BrowserManager,
    ui_settings: Dict[str, Any],
) -> AsyncGenerator[None, None]:
    """
    One-time setup before the first scenario of the run.

    Creates output directories, checks the site answers and records run
    metadata. An unreachable site is logged, not fatal. The work is done once
    per project of a run: the first pytest-xdist worker to take the lock does
    it, and run_tests.py project runs add themselves to the same record.
    """
    ensure_directory(ui_settings["screenshots_dir"])
    results_dir = Path(ensure_directory(ui_settings["results_dir"]))
    project = ui_settings["project"]
    run_id = os.environ.get(RUN_ID_ENV_VAR) or os.environ.get("PYTEST_XDIST_TESTRUNUID")

    with FileLock(str(results_dir / "metadata.lock")):
        # Double-check after acquiring the lock
        if not run_metadata_exists(results_dir, run_id, project):
            logger.info("🚀 Starting global setup for finn.no test suite")
            await browser_manager.check_site_reachable(ui_settings["base_url"])

            workers = os.environ.get("PYTEST_XDIST_WORKER_COUNT")
            write_run_metadata(
                results_dir,
                base_url=ui_settings["base_url"],
                projects=[project],
                workers=int(workers) if workers else None,
                ci=bool(os.environ.get("CI")),
                run_id=run_id,
            )
            logger.info("✅ Global setup completed successfully")
    yield


@pytest.fixture(scope="function")
async def context(browser_manager: BrowserManager) -> AsyncGenerator[BrowserContext, None]:
    """
    Function-scoped browser context fixture.

    Creates a new browser context for each test, providing isolation.
    """
    context = await browser_manager.new_context()
    yield context
    await browser_manager.release(context)


@pytest.fixture(scope="function")
async def page(context: BrowserContext) -> AsyncGenerator[Page, None]:
    """Function-scoped page fixture."""
    page = await context.new_page()
    yield page
    await page.close()


# ================================================================================
# Scenario Fixture
# ================================================================================

@pytest.fixture
async def scenario(
    request,
    page: Page,
    browser_manager: BrowserManager,
    ui_settings: Dict[str, Any],
) -> AsyncGenerator[ScenarioContext, None]:
    """
    Fresh page objects with the search page already open.

    On failure the page state, document responses and locator health are
    attached to the Allure report.
    """
    ctx = ScenarioContext.for_page(
        page,
        base_url=ui_settings["base_url"],
        project=browser_manager.project.name,
        browser_name=browser_manager.browser_name,
        mobile=browser_manager.project.mobile,
    )
    started = time.monotonic()
    await ctx.search_page.open()

    yield ctx

    report = getattr(request.node, "rep_call", None)
    if report is None:
        return

    if report.failed:
        await ctx.search_page.capture_failure(request.node.name)

    status = "FAILED" if report.failed else "SKIPPED" if report.skipped else "PASSED"
    attach_json(
        generate_test_report(
            test_name=request.node.name,
            status=status,
            duration_ms=int((time.monotonic() - started) * 1000),
            error=str(report.longrepr)[:2000] if report.failed else None,
            screenshots=[str(p) for p in ctx.screenshots],
            browser_name=ctx.browser_name,
            viewport=page.viewport_size,
            url=page.url,
            user_agent=await _user_agent(page),
        ),
        name="Scenario Report",
    )


async def _user_agent(page: Page) -> str:
    try:
        return await page.evaluate("() => navigator.userAgent")
    except PlaywrightError:
        return ""


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Keep each phase's report on the item.

    The scenario fixture reads `rep_call` during teardown to decide whether
    to capture failure diagnostics.
    """
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)

    if report.when == "call" and report.failed:
        with allure.step("Scenario failed"):
            logger.error(f"❌ {item.nodeid} failed")

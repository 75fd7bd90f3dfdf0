"""
================================================================================
Suite Tools
================================================================================

Supporting utilities for the finn.no UI test suite.

Modules:
    - common: Logging setup and filesystem helpers
    - report_tools: Allure attachments, run metadata and result summaries

Example:
    from suite_tools.common import init_logger
    from suite_tools.report_tools import generate_test_report

    init_logger(level="DEBUG")
    report = generate_test_report("search", "PASSED", 1532, browser_name="chromium")

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]

"""Allure and run-report helpers."""

from .allure_utils import (
    RUN_ID_ENV_VAR,
    TestResultSummary,
    attach_json,
    generate_test_report,
    run_metadata_exists,
    summarize_results,
    write_run_metadata,
)

__all__ = [
    "RUN_ID_ENV_VAR",
    "TestResultSummary",
    "attach_json",
    "generate_test_report",
    "run_metadata_exists",
    "summarize_results",
    "write_run_metadata",
]

"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation framework for the finn.no real-estate suite.

Components:
    - retry: Retry-with-backoff and condition-polling executors
    - smart_locator: Element location with ordered fallback candidates
    - page_base: Base page object for common operations
    - browser_manager: Browser lifecycle and project matrix
    - config_loader: YAML configuration with environment overrides
    - data_factory: Search, contact and viewport test data
    - helpers: Parsing, waits and page checks

Author: Automation Team
License: MIT
================================================================================
"""

from .retry import (
    PollPolicy,
    RetryPolicy,
    WaitTimeoutError,
    retry_until,
    retry_with_backoff,
    with_retry,
)
from .smart_locator import SmartLocator, ElementNotFoundError
from .page_base import BasePage
from .browser_manager import BrowserManager, PROJECTS, get_project
from .config_loader import ConfigLoader, ConfigurationError

__all__ = [
    "BasePage",
    "BrowserManager",
    "ConfigLoader",
    "ConfigurationError",
    "ElementNotFoundError",
    "PROJECTS",
    "PollPolicy",
    "RetryPolicy",
    "SmartLocator",
    "WaitTimeoutError",
    "get_project",
    "retry_until",
    "retry_with_backoff",
    "with_retry",
]

"""
================================================================================
Scenario Context
================================================================================

Per-scenario bundle of the page and its page objects. Every scenario gets a
fresh context; nothing is shared between scenarios.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from playwright.async_api import Page

from ..pages.property_details_page import PropertyDetailsPage
from ..pages.search_page import SearchPage


@dataclass
class ScenarioContext:
    """
    Attributes:
        page: Page owned by this scenario
        search_page: Search page object bound to `page`
        details_page: Listing page object bound to `page`
        project: Name of the browser/device project running the scenario
        browser_name: Browser engine ('chromium', 'firefox', 'webkit')
        mobile: Whether the project emulates a phone or tablet
        screenshots: Screenshots taken during the scenario
    """
    page: Page
    search_page: SearchPage
    details_page: PropertyDetailsPage
    project: str = "chromium"
    browser_name: str = "chromium"
    mobile: bool = False
    screenshots: List[Path] = field(default_factory=list)

    @classmethod
    def for_page(
        cls,
        page: Page,
        base_url: str = "",
        project: str = "chromium",
        browser_name: str = "chromium",
        mobile: bool = False,
    ) -> "ScenarioContext":
        return cls(
            page=page,
            search_page=SearchPage(page, base_url),
            details_page=PropertyDetailsPage(page, base_url),
            project=project,
            browser_name=browser_name,
            mobile=mobile,
        )

    async def screenshot(self, name: str, full_page: bool = True) -> Path:
        """Take a screenshot and remember it for the failure report."""
        path = await self.search_page.screenshot(f"{self.project}-{name}", full_page=full_page)
        self.screenshots.append(path)
        return path


__all__ = [
    "ScenarioContext",
]

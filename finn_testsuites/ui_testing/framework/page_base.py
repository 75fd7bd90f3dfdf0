"""
================================================================================
Base Page Object
================================================================================

Foundation class for finn.no page objects.

Provides:
    - Navigation relative to the configured base URL
    - Cookie consent handling
    - Smart element location (cascading candidates, absence as "")
    - Screenshot and failure-capture utilities
    - Document response status capture

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Response

from .config_loader import ConfigLoader
from .smart_locator import SmartLocator, Target


# Default output directory for screenshots
SCREENSHOT_DIR = Path("screenshots")


class BasePage:
    """
    Base class for all page objects.

    Usage:
        class SearchPage(BasePage):
            URL_PATH = "/realestate/homes/search.html?filters="

            async def search_by_location(self, location: str):
                await self.fill("search_input", location)
    """

    # Override in subclasses
    URL_PATH: str = "/"

    def __init__(
        self,
        page: Page,
        base_url: str = "",
    ):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            base_url: Site root; defaults to `ui.base_url` from configuration
        """
        self.page = page
        if not base_url:
            base_url = ConfigLoader().ui().base_url
        self.base_url = base_url.rstrip("/")
        self.smart = SmartLocator(page)

        self._document_responses: List[Dict[str, Any]] = []
        self._setup_response_capture()

    def _setup_response_capture(self) -> None:
        """Record status of document (navigation) responses for diagnostics."""

        def capture_response(response: Response) -> None:
            if response.request.resource_type != "document":
                return
            self._document_responses.append({
                "timestamp": datetime.now().isoformat(),
                "url": response.url,
                "status": response.status,
            })
            # Keep only last 20 responses
            if len(self._document_responses) > 20:
                self._document_responses.pop(0)

        self.page.on("response", capture_response)

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    @property
    def last_response_status(self) -> Optional[int]:
        """HTTP status of the most recent document response, if any."""
        if not self._document_responses:
            return None
        return self._document_responses[-1]["status"]

    # =========================================================================
    # Navigation
    # =========================================================================

    async def navigate(
        self,
        path: Optional[str] = None,
        wait_for: str = "domcontentloaded",
    ) -> Optional[Response]:
        """
        Navigate to `path` (defaults to URL_PATH) under the base URL.

        Args:
            path: URL path or absolute URL
            wait_for: Wait condition - 'load', 'domcontentloaded', 'networkidle'
        """
        path = self.URL_PATH if path is None else path
        target = path if path.startswith("http") else f"{self.base_url}{path}"
        with allure.step(f"Navigate to {path}"):
            response = await self.page.goto(target, wait_until=wait_for)
            logger.debug(
                f"Navigated to: {target} "
                f"(status={response.status if response else 'n/a'})"
            )
            return response

    async def wait_for_page_load(
        self,
        state: str = "domcontentloaded",
        timeout: int = 30000,
    ) -> None:
        """Wait for the page to reach a load state."""
        await self.page.wait_for_load_state(state, timeout=timeout)

    async def get_title(self) -> str:
        """Get document title."""
        return await self.page.title()

    async def reload(self) -> None:
        """Reload the current page and re-dismiss the cookie banner."""
        await self.page.reload(wait_until="domcontentloaded")
        await self.accept_cookies()

    async def accept_cookies(self, timeout: int = 3000) -> bool:
        """
        Dismiss the cookie consent banner if present.

        Returns:
            True if a consent button was clicked
        """
        button = await self.smart.resolve("cookie_accept", timeout=timeout)
        if button is None:
            logger.debug("No cookie banner found")
            return False
        try:
            await button.click()
            # Wait for the consent modal to disappear
            await self.page.wait_for_timeout(2000)
            return True
        except PlaywrightError as e:
            logger.warning(f"Cookie banner handling failed: {e}")
            return False

    async def set_viewport(self, width: int, height: int) -> None:
        """Resize the viewport."""
        with allure.step(f"Set viewport {width}x{height}"):
            await self.page.set_viewport_size({"width": width, "height": height})

    # =========================================================================
    # Smart Element Interactions
    # =========================================================================

    async def click(self, target: Target, timeout: int = 5000, **kwargs: Any) -> None:
        """Click element using smart location."""
        with allure.step(f"Click: {target}"):
            await self.smart.click(target, timeout, **kwargs)

    async def fill(self, target: Target, value: str, timeout: int = 5000) -> None:
        """Fill input element using smart location."""
        with allure.step(f"Fill {target}: {value}"):
            await self.smart.fill(target, value, timeout)

    async def text_of(self, target: Target, timeout: int = 5000) -> str:
        """Text of element, or "" when absent."""
        return await self.smart.text_of(target, timeout)

    async def is_visible(self, target: Target, timeout: int = 2000) -> bool:
        """Check if element is visible."""
        return await self.smart.is_visible(target, timeout)

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(
        self,
        name: str,
        full_page: bool = True,
        attach_to_allure: bool = True,
    ) -> Path:
        """
        Take a timestamped screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            full_page: Capture full scrollable page
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        filepath = SCREENSHOT_DIR / f"{name}-{timestamp}.png"

        await self.page.screenshot(path=str(filepath), full_page=full_page, timeout=10000)

        if attach_to_allure:
            allure.attach.file(
                str(filepath),
                name=name,
                attachment_type=allure.attachment_type.PNG,
            )

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    async def capture_failure(self, test_name: str) -> None:
        """
        Capture debugging information on test failure.

        Saves:
            - Screenshot
            - Current URL
            - Recent document responses
            - Locator health report
        """
        with allure.step("Capture failure details"):
            try:
                await self.screenshot(f"failure_{test_name}")
            except PlaywrightError as e:
                logger.warning(f"Failed to capture failure screenshot: {e}")

            allure.attach(
                self.page.url,
                name="Current URL",
                attachment_type=allure.attachment_type.TEXT
            )

            if self._document_responses:
                allure.attach(
                    json.dumps(self._document_responses[-10:], indent=2),
                    name="Recent Document Responses",
                    attachment_type=allure.attachment_type.JSON
                )

            allure.attach(
                self.get_locator_health_report(),
                name="Locator Health",
                attachment_type=allure.attachment_type.TEXT
            )

    def get_locator_health_report(self) -> str:
        """Get smart locator health report."""
        return self.smart.get_health_report()


__all__ = [
    "BasePage",
]

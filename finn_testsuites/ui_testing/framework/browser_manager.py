"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation.

Features:
    - Named projects (browser engine + device emulation)
    - Context isolation per scenario
    - Norwegian locale / timezone defaults
    - Site reachability check for session setup

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
)


@dataclass(frozen=True)
class ProjectConfig:
    """
    One entry of the browser/device matrix.

    Attributes:
        name: Project name used on the command line
        browser_type: 'chromium', 'firefox' or 'webkit'
        device: Playwright device descriptor name (optional)
        viewport: Viewport override applied after the device descriptor
        mobile: Whether the project emulates a phone or tablet
    """
    name: str
    browser_type: str
    device: Optional[str] = None
    viewport: Optional[Dict[str, int]] = None
    mobile: bool = False


PROJECTS: Dict[str, ProjectConfig] = {
    "chromium": ProjectConfig(
        "chromium", "chromium", "Desktop Chrome", {"width": 1280, "height": 720}
    ),
    "firefox": ProjectConfig(
        "firefox", "firefox", "Desktop Firefox", {"width": 1280, "height": 720}
    ),
    "webkit": ProjectConfig(
        "webkit", "webkit", "Desktop Safari", {"width": 1280, "height": 720}
    ),
    "mobile-chrome": ProjectConfig("mobile-chrome", "chromium", "Pixel 5", mobile=True),
    "mobile-safari": ProjectConfig("mobile-safari", "webkit", "iPhone 12", mobile=True),
    "tablet": ProjectConfig(
        "tablet", "webkit", "iPad Pro 11", {"width": 1024, "height": 768}, mobile=True
    ),
}


def get_project(name: str) -> ProjectConfig:
    """Look up a project by name."""
    try:
        return PROJECTS[name]
    except KeyError:
        raise ValueError(
            f"Unknown project {name!r}. Available: {', '.join(PROJECTS)}"
        ) from None


class BrowserManager:
    """
    Manages one browser instance and its contexts for a test session.

    Usage:
        async with BrowserManager(project="firefox") as manager:
            page = await manager.new_page()
            await page.goto("https://www.finn.no")

        # Emulate a device in a fresh context on the same browser
        context = await manager.new_context(device="iPhone 12 Pro")
    """

    # Default browser launch options
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
    }

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "locale": "nb-NO",
        "timezone_id": "Europe/Oslo",
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        project: str = "chromium",
        headless: bool = True,
        action_timeout: int = 15000,
        navigation_timeout: int = 30000,
        desktop_viewport: Optional[Dict[str, int]] = None,
        context_options: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize browser manager.

        Args:
            project: Name of a PROJECTS entry
            headless: Run browser in headless mode
            action_timeout: Default timeout for element actions (ms)
            navigation_timeout: Default timeout for navigations (ms)
            desktop_viewport: Viewport for desktop projects (ui.viewport);
                              mobile and tablet projects keep their own
            context_options: Overrides merged into every new context
        """
        self.project = get_project(project)
        self.headless = headless
        self.action_timeout = action_timeout
        self.navigation_timeout = navigation_timeout
        self.desktop_viewport = desktop_viewport
        self.context_options = context_options or {}

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        """Async context manager entry - start browser."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - close browser."""
        await self.close()

    @property
    def browser_name(self) -> str:
        return self.project.browser_type

    @property
    def project_viewport(self) -> Optional[Dict[str, int]]:
        """Viewport applied to the project's default contexts."""
        if self.desktop_viewport and not self.project.mobile:
            return self.desktop_viewport
        return self.project.viewport

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser

    async def start(self) -> None:
        """Start Playwright and launch the project's browser."""
        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, self.project.browser_type)

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }
        self._browser = await launcher.launch(**launch_options)
        logger.debug(
            f"Browser started: {self.project.name} ({self.project.browser_type}, "
            f"headless={self.headless})"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def device_options(self, device: Optional[str]) -> Dict[str, Any]:
        """Context options for a Playwright device descriptor."""
        if not device:
            return {}
        if not self._playwright:
            raise RuntimeError("Browser not started. Call start() first.")
        options = dict(self._playwright.devices[device])
        options.pop("default_browser_type", None)
        return options

    async def new_context(
        self,
        device: Optional[str] = None,
        **options: Any,
    ) -> BrowserContext:
        """
        Create a new isolated browser context.

        Args:
            device: Device descriptor overriding the project's device
            **options: Additional context options

        Returns:
            New BrowserContext
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options: Dict[str, Any] = {**self.DEFAULT_CONTEXT_OPTIONS}
        if device:
            context_options.update(self.device_options(device))
        else:
            context_options.update(self.device_options(self.project.device))
            viewport = self.project_viewport
            if viewport:
                context_options["viewport"] = viewport
        context_options.update(self.context_options)
        context_options.update(options)

        context = await self._browser.new_context(**context_options)
        context.set_default_timeout(self.action_timeout)
        context.set_default_navigation_timeout(self.navigation_timeout)
        self._contexts.append(context)
        return context

    async def new_page(
        self,
        context: Optional[BrowserContext] = None,
        **context_options: Any,
    ) -> Page:
        """Create new page in a new or existing context."""
        if context is None:
            context = await self.new_context(**context_options)
        return await context.new_page()

    async def release(self, context: BrowserContext) -> None:
        """Close a context created by this manager."""
        if context in self._contexts:
            self._contexts.remove(context)
        await context.close()

    async def check_site_reachable(self, url: str, timeout: int = 30000) -> bool:
        """
        Verify the target site answers with a successful document response.

        Only logs on failure; an unreachable site is reported, not fatal.
        """
        context = await self.new_context()
        try:
            page = await context.new_page()
            response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
            if not response or not response.ok:
                logger.warning(f"⚠️ {url} might not be accessible")
                return False

            title = await page.title()
            if "finn" not in title.lower():
                logger.warning(f"⚠️ Unexpected page title: {title}")
            logger.info(f"✅ {url} is accessible")
            return True
        except PlaywrightError as e:
            logger.warning(f"⚠️ Environment validation failed: {e}")
            return False
        finally:
            await self.release(context)


__all__ = [
    "BrowserManager",
    "PROJECTS",
    "ProjectConfig",
    "get_project",
]

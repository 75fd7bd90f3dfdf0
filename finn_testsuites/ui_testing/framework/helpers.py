"""
================================================================================
Page Helpers
================================================================================

Stateless helpers shared by page objects and scenarios:
    - Price / phone parsing and validation
    - DOM readiness and element stability waits
    - Viewport visibility checks
    - Lightweight accessibility and performance checks

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import random
import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from .retry import PollPolicy, WaitTimeoutError, retry_until


NORWEGIAN_PHONE_RE = re.compile(r"^(\+47)?[49]\d{7}$")
THOUSANDS_RE = re.compile(r"\B(?=(\d{3})+(?!\d))")

SCREENSHOT_DIR = Path("screenshots")


# =============================================================================
# Parsing
# =============================================================================

def get_random_number(minimum: int, maximum: int) -> int:
    """Random integer in [minimum, maximum]."""
    return random.randint(minimum, maximum)


def format_price(price: int) -> str:
    """Format a price with space thousand separators: 2500000 -> '2 500 000'."""
    return THOUSANDS_RE.sub(" ", str(price))


def extract_price_number(price_text: str) -> int:
    """Digits of a price string as an int ('4 250 000 kr' -> 4250000), 0 if none."""
    digits = re.sub(r"\D", "", price_text or "")
    return int(digits) if digits else 0


def is_valid_norwegian_phone(phone: str) -> bool:
    """Eight digits starting with 4 or 9, optionally prefixed with +47."""
    return bool(NORWEGIAN_PHONE_RE.match(re.sub(r"\s", "", phone or "")))


# =============================================================================
# Waits
# =============================================================================

async def wait_for_dom_ready(page: Page, timeout: int = 30000, settle_ms: int = 1000) -> bool:
    """
    Wait for DOMContentLoaded plus a short settle period for dynamic content.

    Returns False (and logs) on timeout instead of raising; the page may
    still be usable.
    """
    try:
        await page.wait_for_load_state("domcontentloaded", timeout=timeout)
        await page.wait_for_timeout(settle_ms)
        return True
    except PlaywrightError as e:
        logger.warning(f"DOM ready timeout after {timeout}ms: {e}")
        return False


async def wait_for_element_stable(
    locator: Locator,
    timeout: int = 10000,
    interval: int = 100,
) -> bool:
    """
    Wait until an element's position stops changing between two polls.

    Args:
        locator: Element to watch
        timeout: Budget in milliseconds
        interval: Poll interval in milliseconds

    Returns:
        True once two consecutive positions differ by less than 1px,
        False if the element never settled within the budget
    """
    previous: Dict[str, Optional[Tuple[float, float]]] = {"position": None}

    async def read_position() -> Optional[Tuple[float, float]]:
        box = await locator.bounding_box()
        return (box["x"], box["y"]) if box else None

    def has_settled(position: Optional[Tuple[float, float]]) -> bool:
        last, previous["position"] = previous["position"], position
        if position is None or last is None:
            return False
        return abs(position[0] - last[0]) < 1 and abs(position[1] - last[1]) < 1

    policy = PollPolicy(
        max_attempts=max(2, timeout // max(interval, 1) + 1),
        timeout=timeout / 1000,
        interval=interval / 1000,
    )
    try:
        await retry_until(read_position, has_settled, policy, description="element stable")
        return True
    except (WaitTimeoutError, PlaywrightError) as e:
        logger.debug(f"Element did not settle: {e}")
        return False


# =============================================================================
# Visibility
# =============================================================================

async def scroll_to_element(page: Page, selector: str) -> None:
    """Scroll an element into view if needed."""
    await page.locator(selector).first.scroll_into_view_if_needed()


async def is_element_in_viewport(locator: Locator, threshold: float = 0.5) -> bool:
    """
    Check that at least `threshold` of the element's area is inside the viewport.
    """
    try:
        box = await locator.bounding_box()
    except PlaywrightError:
        return False
    viewport = locator.page.viewport_size
    if not box or not viewport:
        return False

    total_area = box["width"] * box["height"]
    if total_area <= 0:
        return False

    visible_width = max(
        0, min(box["x"] + box["width"], viewport["width"]) - max(box["x"], 0)
    )
    visible_height = max(
        0, min(box["y"] + box["height"], viewport["height"]) - max(box["y"], 0)
    )
    return (visible_width * visible_height) / total_area >= threshold


async def ensure_element_visible(locator: Locator, timeout: int = 10000) -> None:
    """
    Make an element visible, in view, settled and enabled.

    Raises:
        RuntimeError: If the element is disabled
    """
    await locator.wait_for(state="visible", timeout=timeout)

    if not await is_element_in_viewport(locator):
        await locator.scroll_into_view_if_needed()
        await wait_for_element_stable(locator)

    if not await locator.is_enabled():
        raise RuntimeError("Element is not interactable")


async def take_element_screenshot(locator: Locator, name: str) -> Path:
    """Save a timestamped screenshot of a single element."""
    SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    path = SCREENSHOT_DIR / f"element-{name}-{timestamp}.png"
    await locator.screenshot(path=str(path))
    logger.debug(f"Element screenshot saved: {path}")
    return path


# =============================================================================
# Page Checks
# =============================================================================

async def validate_accessibility(page: Page) -> bool:
    """
    Basic accessibility check: images need alt text, inputs need a label.
    """
    try:
        missing_alt = await page.locator("img:not([alt])").count()
        missing_labels = await page.locator(
            "input:not([aria-label]):not([aria-labelledby]):not([title])"
        ).count()
    except PlaywrightError as e:
        logger.warning(f"Accessibility validation failed: {e}")
        return False

    if missing_alt:
        logger.warning(f"Found {missing_alt} images without alt text")
    if missing_labels:
        logger.warning(f"Found {missing_labels} inputs without labels")

    return missing_alt == 0 and missing_labels == 0


@dataclass
class PerformanceReport:
    load_time_ms: int
    dom_nodes: int
    rating: str


def rate_performance(load_time_ms: int, dom_nodes: int) -> str:
    """Classify page weight: 'good', 'fair' or 'poor'."""
    if load_time_ms > 5000 or dom_nodes > 3000:
        return "poor"
    if load_time_ms > 3000 or dom_nodes > 2000:
        return "fair"
    return "good"


async def validate_page_performance(page: Page) -> PerformanceReport:
    """Measure time to DOMContentLoaded and DOM size of the current page."""
    started = time.monotonic()
    await page.wait_for_load_state("domcontentloaded")
    load_time_ms = int((time.monotonic() - started) * 1000)
    dom_nodes = await page.locator("*").count()
    return PerformanceReport(
        load_time_ms=load_time_ms,
        dom_nodes=dom_nodes,
        rating=rate_performance(load_time_ms, dom_nodes),
    )


__all__ = [
    "PerformanceReport",
    "ensure_element_visible",
    "extract_price_number",
    "format_price",
    "get_random_number",
    "is_element_in_viewport",
    "is_valid_norwegian_phone",
    "rate_performance",
    "scroll_to_element",
    "take_element_screenshot",
    "validate_accessibility",
    "validate_page_performance",
    "wait_for_dom_ready",
    "wait_for_element_stable",
]

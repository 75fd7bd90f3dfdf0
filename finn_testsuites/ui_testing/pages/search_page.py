"""
================================================================================
Search Page Object (Async / Playwright)
================================================================================

finn.no real-estate search: location search, price / size / type filters,
result cards, sorting and map view.

NOTE:
  finn.no markup changes without notice. Every element is declared as an
  ordered candidate list in SmartLocator.LOCATORS; reads degrade to empty
  values instead of failing the scenario.

================================================================================
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import List, Optional

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator

from finn_testsuites.ui_testing.framework.config_loader import ConfigLoader
from finn_testsuites.ui_testing.framework.page_base import BasePage
from finn_testsuites.ui_testing.framework.retry import PollPolicy, retry_until


RESULT_CARDS = (
    "[data-testid='property-card'], [data-testid='search-result-ad'], article, "
    "[class*='result'], [class*='listing'], a[href*='/realestate/']"
)

RESULTS_TOTAL_RE = re.compile(r"(\d+)\s+resultater", re.IGNORECASE)


@dataclass
class SearchFilters:
    location: Optional[str] = None
    price_from: Optional[str] = None
    price_to: Optional[str] = None
    size_from: Optional[str] = None
    size_to: Optional[str] = None
    property_type: Optional[str] = None


@dataclass
class PropertyCardInfo:
    title: str = ""
    price: str = ""
    address: str = ""
    size: str = ""


class SearchPage(BasePage):
    """finn.no property search page object (async)."""

    URL_PATH = "/realestate/homes/search.html?filters="

    def __init__(self, page, base_url: str = ""):
        super().__init__(page, base_url)
        self.URL_PATH = ConfigLoader().ui().search_path

    @property
    def property_cards(self) -> Locator:
        return self.page.locator(RESULT_CARDS)

    @allure.step("Open search page")
    async def open(self) -> "SearchPage":
        """Navigate to the search page and dismiss the cookie banner."""
        await self.navigate()
        await self.accept_cookies()
        return self

    @allure.step("Search by location: {location}")
    async def search_by_location(self, location: str) -> None:
        """Type a location and pick the matching autocomplete option, else press Enter."""
        await self.fill("search_input", location)

        # Autocomplete suggestions appear shortly after typing
        await self.page.wait_for_timeout(500)

        quoted = json.dumps(location, ensure_ascii=False)
        option = await self.smart.resolve(
            (
                f"[role='option']:has-text({quoted})",
                f"[class*='autocomplete'] li:has-text({quoted})",
            ),
            timeout=2000,
        )
        if option is not None:
            await option.click()
        else:
            await self.page.keyboard.press("Enter")

        await self.wait_for_loading_complete()

    @allure.step("Set price range {low} - {high}")
    async def set_price_range(self, low: Optional[str] = None, high: Optional[str] = None) -> None:
        await self._fill_range("price_from", "price_to", low, high)

    @allure.step("Set property size {low} - {high}")
    async def set_property_size(self, low: Optional[str] = None, high: Optional[str] = None) -> None:
        await self._fill_range("size_from", "size_to", low, high)

    async def _fill_range(
        self,
        low_field: str,
        high_field: str,
        low: Optional[str],
        high: Optional[str],
    ) -> None:
        for field_name, value in ((low_field, low), (high_field, high)):
            if value:
                await self.fill(field_name, value)
                # Allow for field validation
                await self.page.wait_for_timeout(300)

        # Leaving the field triggers the search
        await self.page.keyboard.press("Tab")

    @allure.step("Select property type: {property_type}")
    async def select_property_type(self, property_type: str) -> None:
        dropdown = await self.smart.locate("property_type")
        await dropdown.select_option(property_type)
        await self.wait_for_loading_complete()

    @allure.step("Apply search filters")
    async def apply_filters(self, filters: SearchFilters) -> None:
        """Apply filters; location first since it may reset the others."""
        if filters.location:
            await self.search_by_location(filters.location)

        if filters.price_from or filters.price_to:
            await self.set_price_range(filters.price_from, filters.price_to)

        if filters.size_from or filters.size_to:
            await self.set_property_size(filters.size_from, filters.size_to)

        if filters.property_type:
            await self.select_property_type(filters.property_type)

        await self.wait_for_loading_complete()

    async def wait_for_loading_complete(self) -> None:
        """Wait for DOM load, any loading spinner to disappear, then a settle delay."""
        await self.page.wait_for_load_state("domcontentloaded")

        spinner = await self.smart.resolve("loading_indicator", timeout=1000)
        if spinner is not None:
            try:
                await spinner.wait_for(state="hidden", timeout=15000)
            except PlaywrightError as e:
                logger.warning(f"Loading indicator still visible: {e}")

        await self.page.wait_for_timeout(2000)

    async def get_results_count(self) -> int:
        """Number of visible result cards, else the '<n> resultater' total, else 0."""
        try:
            card_count = await self.property_cards.count()
            if card_count > 0:
                return card_count

            total_text = await self.text_of("results_total", timeout=5000)
            match = RESULTS_TOTAL_RE.search(total_text)
            return int(match.group(1)) if match else 0
        except PlaywrightError as e:
            logger.warning(f"Could not get results count: {e}")
            return 0

    async def wait_for_results(self, policy: Optional[PollPolicy] = None) -> int:
        """Poll the result count until at least one result is shown."""
        return await retry_until(
            self.get_results_count,
            lambda count: count > 0,
            policy or PollPolicy(max_attempts=5, timeout=15.0, interval=1.0),
            description="search results",
        )

    async def get_property_cards(self) -> List[Locator]:
        count = await self.property_cards.count()
        return [self.property_cards.nth(i) for i in range(count)]

    async def get_property_card_info(self, index: int = 0) -> PropertyCardInfo:
        """Read title / price / address / size from a result card; missing parts are ""."""
        card = self.property_cards.nth(index)
        await card.wait_for(timeout=10000)

        return PropertyCardInfo(
            title=await self.smart.text_of("card_title", timeout=2000, scope=card),
            price=await self.smart.text_of("card_price", timeout=2000, scope=card),
            address=await self.smart.text_of("card_address", timeout=2000, scope=card),
            size=await self.smart.text_of("card_size", timeout=2000, scope=card),
        )

    @allure.step("Open first property")
    async def click_first_property(self) -> None:
        await self.property_cards.first.click()
        await self.page.wait_for_load_state("domcontentloaded")

    @allure.step("Sort by {sort_option}")
    async def sort_by(self, sort_option: str) -> None:
        dropdown = await self.smart.locate("sort_dropdown")
        await dropdown.select_option(sort_option)
        await self.wait_for_loading_complete()

    @allure.step("Toggle map view")
    async def toggle_map_view(self) -> None:
        await self.click("map_toggle")
        # Map tiles load after the toggle animation
        await self.page.wait_for_timeout(2000)

    async def is_map_visible(self, timeout: int = 5000) -> bool:
        return await self.is_visible("map_view", timeout=timeout)

    async def has_no_results(self, timeout: int = 5000) -> bool:
        return await self.is_visible("no_results", timeout=timeout)


__all__ = [
    "PropertyCardInfo",
    "SearchFilters",
    "SearchPage",
]

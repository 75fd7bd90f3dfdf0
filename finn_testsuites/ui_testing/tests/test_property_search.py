"""
================================================================================
Property Search UI Tests (Async / Playwright)
================================================================================

Search journeys on finn.no:
  - Location + price filters (with retry/backoff around the filter flow)
  - Card vs. details consistency
  - Invalid and malicious input handling
  - Multi-filter validation, sorting, map view
  - Randomized filter combinations, performance and accessibility checks

Note:
  finn.no inventory changes constantly. Scenarios whose precondition is
  "there are results" skip instead of failing when the site has none.

================================================================================
"""

import time

import allure
import pytest
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from finn_testsuites.ui_testing.framework.data_factory import (
    INVALID_SEARCH_DATA,
    VALID_SEARCH_DATA,
    get_random_location,
    get_random_price_range,
    get_random_size_range,
)
from finn_testsuites.ui_testing.framework.helpers import (
    extract_price_number,
    scroll_to_element,
    validate_accessibility,
    validate_page_performance,
    wait_for_dom_ready,
)
from finn_testsuites.ui_testing.framework.retry import RetryPolicy, retry_with_backoff
from finn_testsuites.ui_testing.framework.scenario import ScenarioContext
from finn_testsuites.ui_testing.framework.smart_locator import ElementNotFoundError
from finn_testsuites.ui_testing.pages.search_page import RESULT_CARDS, SearchFilters


def _address_overlap(card_address: str, details_address: str) -> int:
    """Number of card address words that appear (as substrings) in the details address."""
    card_words = card_address.lower().split()
    details_words = details_address.lower().split()
    return sum(
        1 for word in card_words
        if any(word in other or other in word for other in details_words)
    )


@allure.epic("UI Testing")
@allure.feature("Property Search")
class TestPropertySearch:
    """finn.no property search suite (async)."""

    @allure.story("Filters")
    @allure.title("User can search properties by location and price range")
    @allure.severity(allure.severity_level.BLOCKER)
    @pytest.mark.P0
    @pytest.mark.smoke_ui
    @pytest.mark.search
    async def test_search_by_location_and_price(self, scenario: ScenarioContext):
        location = VALID_SEARCH_DATA.locations[0]
        price_range = VALID_SEARCH_DATA.price_ranges[0]
        filters = SearchFilters(
            location=location,
            price_from=price_range.low,
            price_to=price_range.high,
        )

        with allure.step(f"Apply filters: {location} {price_range.low}-{price_range.high}"):
            await retry_with_backoff(
                lambda: scenario.search_page.apply_filters(filters),
                RetryPolicy(max_attempts=3, initial_delay=1.0),
                description="apply search filters",
            )

        with allure.step("Wait for results"):
            results_count = await scenario.search_page.wait_for_results()
        assert results_count > 0

        logger.info(f"Successfully found {results_count} results for search")
        await scenario.screenshot("search-results-oslo")

    @allure.story("Result Cards")
    @allure.title("Search results display accurate property information")
    @allure.severity(allure.severity_level.CRITICAL)
    @pytest.mark.P1
    @pytest.mark.regression_ui
    @pytest.mark.search
    @pytest.mark.details
    async def test_card_matches_details(self, scenario: ScenarioContext):
        location = VALID_SEARCH_DATA.locations[1]
        search_page, details_page = scenario.search_page, scenario.details_page

        await search_page.search_by_location(location)
        if await search_page.has_no_results():
            pytest.skip(f"No search results available for {location}")

        cards = await search_page.get_property_cards()
        assert len(cards) > 0, "Expected at least one property card"

        await scroll_to_element(scenario.page, RESULT_CARDS)
        card_info = await search_page.get_property_card_info(0)
        assert card_info.address, "Card should display address"

        with allure.step("Open first property"):
            await search_page.click_first_property()
            await details_page.wait_for_page_load()

        assert await details_page.is_property_info_complete(), (
            "Property details page should display complete information"
        )

        details = await details_page.get_complete_property_info()
        assert details.address, "Details page should have address"
        assert details.price, "Details page should have price"

        assert _address_overlap(card_info.address, details.address) > 0, (
            "Address information should be consistent between card and details"
        )
        await scenario.screenshot("property-info-comparison")

    @allure.story("Negative Path")
    @allure.title("Invalid search parameters are handled gracefully")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P1
    @pytest.mark.regression_ui
    @pytest.mark.search
    async def test_invalid_search_parameters(self, scenario: ScenarioContext):
        search_page = scenario.search_page

        with allure.step("Invalid price with valid location"):
            await search_page.set_price_range(
                INVALID_SEARCH_DATA.invalid_prices[0],
                VALID_SEARCH_DATA.price_ranges[0].high,
            )
            await search_page.search_by_location(VALID_SEARCH_DATA.locations[0])
            assert await search_page.get_results_count() >= 0

        with allure.step("Malicious location input"):
            await search_page.reload()
            malicious_input = INVALID_SEARCH_DATA.special_characters[0]
            try:
                await search_page.search_by_location(malicious_input)

                title = await search_page.get_title()
                if title:
                    assert "finn" in title.lower(), (
                        "Page title should remain valid after malicious input"
                    )
                assert await search_page.get_results_count() >= 0
            except (PlaywrightError, ElementNotFoundError) as e:
                # Rejecting the input outright is also acceptable
                logger.warning(f"Malicious input rejected: {e}")

        await scenario.screenshot("security-test-completed")

    @allure.story("Filters")
    @allure.title("Multiple filter combinations work correctly")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P2
    @pytest.mark.regression_ui
    @pytest.mark.search
    async def test_multiple_filter_combinations(self, scenario: ScenarioContext):
        page, search_page, details_page = scenario.page, scenario.search_page, scenario.details_page
        location = VALID_SEARCH_DATA.locations[2]
        price_range = VALID_SEARCH_DATA.price_ranges[1]
        size_range = VALID_SEARCH_DATA.property_sizes[1]

        await search_page.apply_filters(SearchFilters(
            location=location,
            price_from=price_range.low,
            price_to=price_range.high,
            size_from=size_range.low,
            size_to=size_range.high,
        ))

        if await search_page.has_no_results() or await search_page.get_results_count() == 0:
            logger.info(f"No results for complex filter combination in {location}")
            await scenario.screenshot("no-results-complex-filters")
            return

        cards = await search_page.get_property_cards()
        low, high = int(price_range.low), int(price_range.high)
        matching = 0

        for i in range(min(3, len(cards))):
            try:
                await cards[i].click()
                await details_page.wait_for_page_load()

                info = await details_page.get_complete_property_info()
                price = extract_price_number(info.price)
                if price > 0:
                    if low <= price <= high:
                        matching += 1
                    else:
                        logger.warning(f"Property {i + 1} price {price} outside range {low}-{high}")

                await page.go_back()
                await wait_for_dom_ready(page, timeout=5000)
            except (PlaywrightError, ElementNotFoundError) as e:
                logger.warning(f"Failed to check property {i + 1}: {e}")
                await page.go_back()

        assert matching > 0, "Some properties should match the filter criteria"
        await scenario.screenshot("complex-filters-validation")

    @allure.story("Sorting")
    @allure.title("Sorting functionality works correctly")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P2
    @pytest.mark.regression_ui
    @pytest.mark.search
    async def test_sort_by_price(self, scenario: ScenarioContext):
        search_page = scenario.search_page
        location = VALID_SEARCH_DATA.locations[0]

        await search_page.search_by_location(location)
        if await search_page.has_no_results():
            pytest.skip(f"No results available for sorting test in {location}")

        samples = min(5, len(await search_page.get_property_cards()))
        assert samples > 1, "Should have properties to test sorting"

        try:
            await search_page.sort_by("PRICE_ASC")
        except (PlaywrightError, ElementNotFoundError) as e:
            pytest.skip(f"Sorting not available: {e}")

        await wait_for_dom_ready(scenario.page, timeout=10000)

        cards = await search_page.get_property_cards()
        prices = []
        for i in range(min(samples, len(cards))):
            info = await search_page.get_property_card_info(i)
            price = extract_price_number(info.price)
            if price > 0:
                prices.append(price)

        if len(prices) < 2:
            logger.warning("Not enough price data to verify sorting")
            return

        assert prices == sorted(prices), f"Prices should be in ascending order: {prices}"
        await scenario.screenshot("sorted-results-price-asc")

    @allure.story("Map")
    @allure.title("Map view toggle works correctly")
    @allure.severity(allure.severity_level.MINOR)
    @pytest.mark.P3
    @pytest.mark.regression_ui
    @pytest.mark.search
    async def test_map_view_toggle(self, scenario: ScenarioContext):
        search_page = scenario.search_page
        location = VALID_SEARCH_DATA.locations[3]

        await search_page.search_by_location(location)
        if await search_page.has_no_results():
            pytest.skip(f"No results available for map view test in {location}")

        try:
            await search_page.toggle_map_view()
        except (PlaywrightError, ElementNotFoundError) as e:
            logger.warning(f"Map view functionality not available: {e}")
            await scenario.screenshot("map-view-error")
            return

        await wait_for_dom_ready(scenario.page, timeout=5000)

        if await search_page.is_map_visible():
            await scenario.screenshot(f"map-view-{location.lower()}")
        else:
            logger.warning("Map element not found - map view might not be available")
            await scenario.screenshot("map-view-not-found")

    @allure.story("Filters")
    @allure.title("Search with random valid combinations")
    @allure.severity(allure.severity_level.NORMAL)
    @pytest.mark.P2
    @pytest.mark.regression_ui
    @pytest.mark.search
    async def test_random_valid_combination(self, scenario: ScenarioContext):
        location = get_random_location()
        price_range = get_random_price_range()
        size_range = get_random_size_range()

        logger.info(
            f"Testing random combination: {location}, "
            f"price: {price_range.low}-{price_range.high}, "
            f"size: {size_range.low}-{size_range.high}"
        )

        await scenario.search_page.apply_filters(SearchFilters(
            location=location,
            price_from=price_range.low,
            price_to=price_range.high,
            size_from=size_range.low,
            size_to=size_range.high,
        ))

        results_count = await scenario.search_page.get_results_count()
        assert results_count >= 0, "Search should complete and return valid count"
        logger.info(f"Found {results_count} results for random search")

        await scenario.screenshot(f"random-search-{location.lower()}")

    @allure.story("Quality")
    @allure.title("Page performance and accessibility")
    @allure.severity(allure.severity_level.MINOR)
    @pytest.mark.P3
    @pytest.mark.regression_ui
    @pytest.mark.search
    async def test_performance_and_accessibility(self, scenario: ScenarioContext):
        started = time.monotonic()
        await scenario.search_page.search_by_location(VALID_SEARCH_DATA.locations[0])
        load_time_ms = int((time.monotonic() - started) * 1000)

        report = await validate_page_performance(scenario.page)
        logger.info(
            f"Page performance: {report.rating}, Load time: {load_time_ms}ms, "
            f"DOM nodes: {report.dom_nodes}"
        )
        assert load_time_ms < 30000, "Page should load within reasonable time"

        if not await validate_accessibility(scenario.page):
            logger.warning("Accessibility issues detected on search page")

        await scenario.screenshot("performance-accessibility-test")

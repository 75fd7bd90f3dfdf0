"""
================================================================================
Property Details Page Object (Async / Playwright)
================================================================================

A single finn.no listing: headline facts, image gallery, agent contact,
favorites and viewing information.

================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from finn_testsuites.ui_testing.framework.data_factory import ContactData
from finn_testsuites.ui_testing.framework.page_base import BasePage
from finn_testsuites.ui_testing.framework.retry import (
    PollPolicy,
    WaitTimeoutError,
    retry_until,
)
from finn_testsuites.ui_testing.framework.smart_locator import ElementNotFoundError


IMAGE_COUNTER_RE = re.compile(r"(\d+)\s*/\s*(\d+)")

GALLERY_DIRECTIONS = ("next", "previous")


@dataclass
class PropertyInfo:
    title: str = ""
    price: str = ""
    address: str = ""
    size: str = ""
    property_type: str = ""
    description: str = ""


@dataclass
class AgentInfo:
    name: str = ""
    phone: str = ""
    email: str = ""
    company: str = ""


class PropertyDetailsPage(BasePage):
    """finn.no listing page object (async)."""

    URL_PATH = "/realestate/homes/ad.html"

    @allure.step("Wait for property details to load")
    async def wait_for_page_load(self, state: str = "domcontentloaded", timeout: int = 30000) -> None:
        """
        Wait until the listing headline is shown.

        The title and address are required; the price may be missing on
        listings under offer.

        Raises:
            ElementNotFoundError: If title or address never appear
        """
        await super().wait_for_page_load(state, timeout)
        await self.smart.locate("detail_title", timeout=15000)
        if not await self.is_visible("detail_price", timeout=10000):
            logger.debug("Listing has no visible price")
        await self.smart.locate("detail_address", timeout=10000)

    # =========================================================================
    # Headline Facts
    # =========================================================================

    async def get_property_title(self) -> str:
        return await self.text_of("detail_title", timeout=10000)

    async def get_property_price(self) -> str:
        return await self.text_of("detail_price")

    async def get_property_address(self) -> str:
        return await self.text_of("detail_address")

    async def get_property_size(self) -> str:
        return await self.text_of("detail_size")

    async def get_property_type(self) -> str:
        return await self.text_of("detail_type")

    async def get_property_description(self) -> str:
        return await self.text_of("detail_description")

    async def get_complete_property_info(self) -> PropertyInfo:
        """Read every headline fact; absent parts are ""."""
        return PropertyInfo(
            title=await self.get_property_title(),
            price=await self.get_property_price(),
            address=await self.get_property_address(),
            size=await self.get_property_size(),
            property_type=await self.get_property_type(),
            description=await self.get_property_description(),
        )

    async def is_property_info_complete(self) -> bool:
        """True when title, price and address are all non-empty."""
        required = (
            ("title", self.get_property_title),
            ("price", self.get_property_price),
            ("address", self.get_property_address),
        )
        for field_name, read in required:
            if not await read():
                logger.warning(f"Missing required field: {field_name}")
                return False
        return True

    # =========================================================================
    # Image Gallery
    # =========================================================================

    @allure.step("Navigate image gallery: {direction}")
    async def navigate_image_gallery(self, direction: str = "next") -> None:
        """
        Step the gallery one image forward or back.

        Raises:
            ValueError: For a direction other than 'next' / 'previous'
            ElementNotFoundError: If the navigation button is not visible
        """
        if direction not in GALLERY_DIRECTIONS:
            raise ValueError(f"direction must be one of {GALLERY_DIRECTIONS}, got {direction!r}")

        button = await self.smart.resolve(f"gallery_{direction}", timeout=2000)
        if button is None:
            raise ElementNotFoundError(f"{direction} button is not visible in image gallery")

        await button.click()
        # Image transition
        await self.page.wait_for_timeout(800)

    async def _read_image_counter(self) -> Optional[Tuple[int, int]]:
        counter = await self.text_of("image_counter", timeout=2000)
        match = IMAGE_COUNTER_RE.search(counter)
        if not match:
            return None
        return int(match.group(1)), int(match.group(2))

    async def get_image_count(self) -> int:
        """Total images from the 'n / total' counter, else images in the gallery."""
        counter = await self._read_image_counter()
        if counter:
            return counter[1]

        gallery = await self.smart.resolve("image_gallery", timeout=2000)
        if gallery is None:
            return 0
        try:
            return await gallery.locator("img").count()
        except PlaywrightError as e:
            logger.warning(f"Could not count gallery images: {e}")
            return 0

    async def get_current_image_index(self) -> int:
        """1-based index of the shown image; 1 when there is no counter."""
        counter = await self._read_image_counter()
        return counter[0] if counter else 1

    async def get_current_image_src(self) -> Optional[str]:
        return await self.smart.attribute_of("gallery_image", "src", timeout=2000)

    # =========================================================================
    # Agent Contact
    # =========================================================================

    @allure.step("Open agent contact")
    async def click_contact_agent(self) -> None:
        await self.click("contact_button")
        await self.page.wait_for_timeout(1000)

    async def is_contact_form_visible(self, timeout: int = 5000) -> bool:
        return await self.is_visible("contact_form", timeout=timeout)

    @allure.step("Fill contact form")
    async def fill_contact_form(self, data: ContactData) -> List[str]:
        """
        Fill whichever contact fields the form shows.

        Returns:
            Names of the fields that were filled
        """
        filled: List[str] = []
        for field_name, value in (
            ("name", data.name),
            ("email", data.email),
            ("phone", data.phone),
            ("message", data.message),
        ):
            field = await self.smart.resolve(f"contact_{field_name}", timeout=2000)
            if field is None:
                logger.debug(f"Contact form has no {field_name} field")
                continue
            await field.fill(value)
            filled.append(field_name)
        return filled

    @allure.step("Submit contact form")
    async def submit_contact_form(self) -> None:
        await self.click("contact_submit")
        await self.page.wait_for_load_state("domcontentloaded")

    # =========================================================================
    # Favorites
    # =========================================================================

    @allure.step("Toggle favorite")
    async def toggle_favorite(self) -> None:
        await self.click("favorite_button")

    async def get_favorite_state(self) -> Optional[str]:
        """aria-pressed of the favorite button, None when it has none."""
        return await self.smart.attribute_of("favorite_button", "aria-pressed", timeout=2000)

    async def wait_for_favorite_change(
        self,
        initial_state: Optional[str],
        policy: Optional[PollPolicy] = None,
    ) -> Optional[str]:
        """
        Poll the favorite state until it differs from `initial_state`.

        Returns:
            The new state, or the unchanged state if it never flipped
        """
        try:
            return await retry_until(
                self.get_favorite_state,
                lambda state: state != initial_state,
                policy or PollPolicy(max_attempts=5, timeout=5.0, interval=0.5),
                description="favorite state change",
            )
        except WaitTimeoutError as e:
            logger.warning(f"⚠️ {e}")
            return initial_state

    # =========================================================================
    # Agent & Viewing
    # =========================================================================

    async def get_agent_name(self) -> str:
        broker = await self.smart.resolve("broker_card", timeout=5000)
        if broker is None:
            return ""
        return await self.smart.text_of("broker_name", timeout=2000, scope=broker)

    async def get_complete_agent_info(self) -> AgentInfo:
        """Agent details from the broker card; all "" when there is no card."""
        broker = await self.smart.resolve("broker_card", timeout=5000)
        if broker is None:
            return AgentInfo()
        return AgentInfo(
            name=await self.smart.text_of("broker_name", timeout=2000, scope=broker),
            phone=await self.smart.text_of("broker_phone", timeout=2000, scope=broker),
            email=await self.smart.text_of("broker_email", timeout=2000, scope=broker),
            company=await self.smart.text_of("broker_company", timeout=2000, scope=broker),
        )

    async def has_viewing_scheduled(self, timeout: int = 2000) -> bool:
        return await self.is_visible("viewing_info", timeout=timeout)

    async def get_viewing_details(self) -> str:
        return await self.text_of("viewing_info", timeout=2000)

    @allure.step("Open mobile menu")
    async def open_mobile_menu(self) -> bool:
        """Open the hamburger menu if the layout has one."""
        menu = await self.smart.resolve("mobile_menu", timeout=2000)
        if menu is None:
            return False
        await menu.click()
        return True


__all__ = [
    "AgentInfo",
    "PropertyDetailsPage",
    "PropertyInfo",
]

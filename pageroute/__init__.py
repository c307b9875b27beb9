"""
================================================================================
pageroute
================================================================================

Route-aware page objects and polling interactions for Playwright UI tests.

Usage:
    from pageroute import RouteTable, Session

    session = Session(page, RouteTable.from_files("**/routes.yaml"))
    await session.visit("login")
    await session.click("submitButton", retries=2)

Author: Automation Team
License: MIT
================================================================================
"""

from pageroute.framework import (
    AmbiguousRouteError,
    BrowserManager,
    ConfigurationError,
    HarnessError,
    InteractionError,
    PageObject,
    PropertyNotFoundError,
    RouteNotDefinedError,
    RouteTable,
    Session,
    WaitTimeoutError,
)

__version__ = "1.0.0"

__all__ = [
    "AmbiguousRouteError",
    "BrowserManager",
    "ConfigurationError",
    "HarnessError",
    "InteractionError",
    "PageObject",
    "PropertyNotFoundError",
    "RouteNotDefinedError",
    "RouteTable",
    "Session",
    "WaitTimeoutError",
]

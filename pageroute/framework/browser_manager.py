"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for route-aware sessions.

Features:
    - Single browser instance for performance
    - Isolated contexts per session
    - Browser settings from configuration

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
)

from pageroute.common import get_config, init_logger

from .route_table import RouteTable
from .session import Session


class BrowserManager:
    """
    Manages the browser and its contexts for UI testing.

    Usage:
        async with BrowserManager() as manager:
            session = await manager.new_session(RouteTable.from_files())
            await session.visit("login")
    """

    # Default browser launch options
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "args": [
            "--ignore-certificate-errors",
        ],
    }

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: Optional[bool] = None,
        browser_type: Optional[str] = None,
    ):
        """
        Initialize browser manager.

        Args:
            headless: Run browser in headless mode (default: ``browser.headless``)
            browser_type: 'chromium', 'firefox' or 'webkit' (default: ``browser.type``)
        """
        init_logger()
        self.headless = get_config("browser.headless", True) if headless is None else headless
        self.browser_type = browser_type or get_config("browser.type", "chromium")

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: list[BrowserContext] = []

    async def __aenter__(self) -> "BrowserManager":
        """Async context manager entry - start browser."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - close browser."""
        await self.close()

    async def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = await async_playwright().start()

        if self.browser_type == "firefox":
            browser_launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            browser_launcher = self._playwright.webkit
        else:
            browser_launcher = self._playwright.chromium

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }

        try:
            self._browser = await browser_launcher.launch(**launch_options)
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless})"
        )

    async def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            await context.close()
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    async def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new browser context.

        Each context is isolated - separate cookies, localStorage, etc.
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context = await self._browser.new_context(**{**self.DEFAULT_CONTEXT_OPTIONS, **options})
        self._contexts.append(context)
        return context

    async def new_page(self, context: Optional[BrowserContext] = None, **context_options: Any) -> Page:
        """Create new page in new or existing context."""
        if context is None:
            context = await self.new_context(**context_options)
        return await context.new_page()

    async def new_session(
        self,
        route_table: Optional[RouteTable] = None,
        **session_options: Any,
    ) -> Session:
        """
        Open a page in a fresh context and wrap it in a Session.

        Args:
            route_table: Routes for the session (default: process-wide table)
            **session_options: Extra ``Session`` arguments (base_url, timeouts, ...)
        """
        page = await self.new_page()
        return Session(page, route_table, **session_options)

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser


__all__ = [
    "BrowserManager",
]

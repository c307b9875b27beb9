"""
================================================================================
Session
================================================================================

Route-aware interaction layer over a Playwright page.

Elements are addressed by compound ids from the current page object's
configuration rather than by raw selectors:

    session = Session(page, RouteTable.from_files())
    await session.visit("login")
    await session.send_keys("usernameField", "demo_user")
    await session.click("submitButton", retries=2)
    await session.when_page_is("dashboard")

Every lookup waits for the id to be configured on the current page and for the
element to exist; actions additionally wait for it to be enabled and visible.
``click`` and ``send_keys`` retry transient failures a bounded number of times,
scrolling the element into view between attempts.

One session drives one page sequentially: await each call before the next.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar, Union

import allure
from bs4 import BeautifulSoup
from loguru import logger
from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError

from pageroute.common import get_config

from .conditions import (
    Condition,
    browser_ready,
    configured_in_page,
    element_is_enabled,
    element_is_not_visible,
    element_is_visible,
    element_text_is,
    found_in_page,
    not_found_in_page,
    page_matches,
    title_is,
    wait_until,
)
from .config_tree import normalize_key
from .errors import (
    ConfigurationError,
    DiagnosticError,
    HarnessError,
    InteractionError,
    RouteNotDefinedError,
    WaitTimeoutError,
)
from .page_object import PageObject, PageObjectResolver
from .route_table import Route, RouteTable, is_absolute, substitute_params
from .selector_resolver import DEFAULT_SELECTOR


T = TypeVar("T")

OUTER_HTML_SCRIPT = "el => el.outerHTML"


class Session:
    """
    State and interaction methods for one logical test session.

    Attributes:
        page: Playwright page being driven
        route_table: Routes used to recognise pages
        current_page: Page object from the most recent resolution
        base_url: Prefix for relative route paths in ``visit``
        default_timeout: Wait deadline (ms) when a call does not give one
        poll_interval: Sleep between condition evaluations (ms)
        retry_delay: Pause before a ``click``/``send_keys`` retry (ms)
        default_path_index: Pattern ``visit`` uses when given no params
    """

    def __init__(
        self,
        page: Page,
        route_table: Optional[RouteTable] = None,
        base_url: Optional[str] = None,
        default_timeout: Optional[int] = None,
        poll_interval: Optional[int] = None,
        retry_delay: Optional[int] = None,
        default_path_index: Optional[int] = None,
        base_page_object: Optional[Dict[str, Any]] = None,
    ):
        self.page = page
        self.route_table = route_table or RouteTable.instance()
        self.resolver = PageObjectResolver(self.route_table, base_page_object)
        self.base_url = (base_url or get_config("ui.base_url", "http://localhost:3000")).rstrip("/")
        self.default_timeout = _setting(default_timeout, "harness.default_timeout", 10000)
        self.poll_interval = _setting(poll_interval, "harness.poll_interval", 100)
        self.retry_delay = _setting(retry_delay, "harness.retry_delay", 150)
        self.default_path_index = _setting(default_path_index, "harness.visit_default_path_index", -1)

        self.current_page: Optional[PageObject] = None
        self._data: Dict[str, Any] = {}

    # =========================================================================
    # Waiting
    # =========================================================================

    async def wait(self, condition: Condition, timeout: Optional[int] = None) -> Any:
        """Poll ``condition`` with this session's timeout and interval."""
        return await wait_until(
            condition,
            self.default_timeout if timeout is None else timeout,
            self.poll_interval,
        )

    async def get_page_object(self) -> PageObject:
        """Resolve (again) the page object for the page on screen."""
        return await self.resolver.get_page_object(self, self.default_timeout)

    async def when_browser_ready(self, timeout: Optional[int] = None) -> str:
        """Wait until something was loaded; returns the current URL."""
        await self.wait(browser_ready(self.page), timeout)
        return self.page.url

    @allure.step("Wait for page: {page_name}")
    async def when_page_is(self, page_name: str, timeout: Optional[int] = None) -> None:
        await self.wait(page_matches(self, page_name), timeout)

    @allure.step("Wait for title: {title}")
    async def when_title_is(self, title: str, timeout: Optional[int] = None) -> None:
        await self.wait(title_is(self.page, title), timeout)

    # =========================================================================
    # Lookup
    # =========================================================================

    async def selector_for(self, element_id: str, timeout: Optional[int] = None) -> str:
        """CSS selector for ``element_id`` once it is configured on the current page."""
        await self.when_browser_ready(timeout)
        resolved = await self.wait(configured_in_page(self, element_id), timeout)
        return resolved.css

    async def find(self, element_id: Optional[str] = None, timeout: Optional[int] = None) -> ElementHandle:
        """
        Wait for the element configured as ``element_id`` and return its handle.

        Args:
            element_id: Compound id; None means the document body
            timeout: Deadline for each wait (ms)

        Raises:
            PropertyNotFoundError: If the id never resolves on the current page
            WaitTimeoutError: If no element matches the selector in time
        """
        selector = DEFAULT_SELECTOR
        if element_id:
            selector = await self.selector_for(element_id, timeout)
        logger.debug(f"Finding {element_id or 'page'} -> {selector}")
        return await self.wait(found_in_page(self.page, selector), timeout)

    async def not_find(self, element_id: str, timeout: Optional[int] = None) -> None:
        """Wait until no element matches the selector configured as ``element_id``."""
        selector = await self.selector_for(element_id, timeout)
        await self.wait(not_found_in_page(self.page, selector), timeout)

    # =========================================================================
    # Element State
    # =========================================================================

    async def _outer_html(self, element: ElementHandle) -> Optional[str]:
        try:
            return await element.evaluate(OUTER_HTML_SCRIPT)
        except PlaywrightError as e:
            logger.debug(f"Outer HTML unavailable: {e}")
            return None

    async def _wait_for_state(
        self,
        element: ElementHandle,
        conditions: Iterable[Condition],
        timeout: Optional[int],
    ) -> ElementHandle:
        try:
            for condition in conditions:
                await self.wait(condition, timeout)
        except WaitTimeoutError as e:
            e.outer_html = await self._outer_html(element)
            raise
        return element

    async def _visible(self, element: ElementHandle, timeout: Optional[int]) -> ElementHandle:
        return await self._wait_for_state(
            element,
            [element_is_enabled(element), element_is_visible(element)],
            timeout,
        )

    @allure.step("Wait until visible: {element_id}")
    async def when_visible(self, element_id: str, timeout: Optional[int] = None) -> ElementHandle:
        element = await self.find(element_id, timeout)
        return await self._visible(element, timeout)

    @allure.step("Wait until hidden: {element_id}")
    async def when_hidden(self, element_id: str, timeout: Optional[int] = None) -> ElementHandle:
        element = await self.find(element_id, timeout)
        return await self._wait_for_state(
            element,
            [element_is_enabled(element), element_is_not_visible(element)],
            timeout,
        )

    @allure.step("Wait for text of {element_id}: {text}")
    async def when_text_matches(self, element_id: str, text: str, timeout: Optional[int] = None) -> ElementHandle:
        element = await self.find(element_id, timeout)
        await self._visible(element, timeout)
        return await self._wait_for_state(element, [element_text_is(element, text)], timeout)

    # =========================================================================
    # Actions
    # =========================================================================

    async def _current_outer_html(self, element_id: str) -> Optional[str]:
        """Outer HTML of the element as it is now, without waiting."""
        if self.current_page is None:
            return None
        try:
            element = await self.page.query_selector(self.current_page.resolve(element_id).css)
        except (HarnessError, PlaywrightError):
            return None
        return await self._outer_html(element) if element else None

    async def _scroll_for_retry(self, element_id: str, timeout: Optional[int]) -> None:
        try:
            await self.scroll_to(element_id, timeout)
        except (DiagnosticError, PlaywrightError) as e:
            logger.warning(f"Could not scroll {element_id} into view: {e}")

    async def _with_retries(
        self,
        element_id: str,
        description: str,
        action: Callable[[], Awaitable[T]],
        retries: int,
        timeout: Optional[int],
    ) -> T:
        """
        Run ``action``, retrying transient failures up to ``retries`` times.

        Configuration errors are raised immediately. Once retries run out the
        failure is raised with the element's current outer HTML attached.
        """
        attempts = max(retries, 0) + 1
        for attempt in range(1, attempts + 1):
            try:
                return await action()
            except ConfigurationError:
                raise
            except (DiagnosticError, PlaywrightError) as e:
                if attempt == attempts:
                    html = await self._current_outer_html(element_id)
                    if isinstance(e, DiagnosticError):
                        if e.outer_html is None:
                            e.outer_html = html
                        logger.error(f"{description} failed after {attempts} attempt(s): {e.message}")
                        raise
                    error = InteractionError(description, attempts, html, cause=e)
                    logger.error(error.message)
                    raise error from e

                logger.warning(
                    f"Attempt {attempt}/{attempts} failed for {description}: {e}. "
                    f"Retrying in {self.retry_delay}ms..."
                )
                await self.sleep(self.retry_delay)
                await self._scroll_for_retry(element_id, timeout)

    @allure.step("Click: {element_id}")
    async def click(self, element_id: str, retries: int = 0, timeout: Optional[int] = None) -> ElementHandle:
        """
        Click the element configured as ``element_id``.

        Args:
            element_id: Compound id
            retries: Extra attempts after the first one fails
            timeout: Deadline for each wait (ms)
        """
        async def attempt() -> ElementHandle:
            element = await self._visible(await self.find(element_id, timeout), timeout)
            await element.click()
            return element

        logger.info(f"Clicking: {element_id}")
        return await self._with_retries(element_id, f'click on "{element_id}"', attempt, retries, timeout)

    @allure.step("Type into {element_id}")
    async def send_keys(
        self,
        element_id: str,
        text: str,
        retries: int = 0,
        timeout: Optional[int] = None,
    ) -> ElementHandle:
        """Fill the element configured as ``element_id`` with ``text``, replacing its value."""
        async def attempt() -> ElementHandle:
            element = await self._visible(await self.find(element_id, timeout), timeout)
            await element.fill(text)
            return element

        shown = "*" * len(text) if "password" in element_id.lower() else text
        logger.info(f"Typing into {element_id}: {shown}")
        return await self._with_retries(element_id, f'send keys to "{element_id}"', attempt, retries, timeout)

    async def scroll_to(self, element_id: str, timeout: Optional[int] = None) -> ElementHandle:
        element = await self.find(element_id, timeout)
        await element.scroll_into_view_if_needed()
        return element

    @allure.step("Hover: {element_id}")
    async def hover(self, element_id: str, delay: int = 0, timeout: Optional[int] = None) -> ElementHandle:
        element = await self._visible(await self.find(element_id, timeout), timeout)
        await element.hover()
        await self.sleep(delay)
        return element

    # =========================================================================
    # Reading
    # =========================================================================

    async def get_html(self, element_id: Optional[str] = None, timeout: Optional[int] = None) -> str:
        element = await self.find(element_id, timeout)
        return await element.evaluate(OUTER_HTML_SCRIPT)

    async def get_text(self, element_id: str, timeout: Optional[int] = None) -> str:
        element = await self._visible(await self.find(element_id, timeout), timeout)
        return await element.inner_text()

    async def get_val(self, element_id: str, timeout: Optional[int] = None) -> str:
        element = await self._visible(await self.find(element_id, timeout), timeout)
        return await element.input_value()

    async def load(self, element_id: Optional[str] = None, timeout: Optional[int] = None) -> BeautifulSoup:
        """Parse the element's outer HTML for offline inspection."""
        return BeautifulSoup(await self.get_html(element_id, timeout), "html.parser")

    async def select(self, element_id: str, query: str = "", timeout: Optional[int] = None) -> List[Any]:
        """CSS-select inside the element's markup, starting from its first child."""
        soup = await self.load(element_id, timeout)
        return soup.select(f":first-child {query}".strip())

    # =========================================================================
    # Navigation and Browser
    # =========================================================================

    def route_path(self, route: Route, params: Union[None, Any, Sequence[Any]] = None) -> str:
        """
        Concrete path for ``route``.

        With params, the first pattern with exactly that many ``:param``
        segments is filled in. Without, the pattern at ``default_path_index``
        is used (the last declared one unless configured otherwise).

        Raises:
            RouteNotDefinedError: If no pattern fits
        """
        if params is None:
            params = []
        elif isinstance(params, (str, bytes)) or not isinstance(params, Sequence):
            params = [params]

        path = None
        if params:
            path = next(
                (p for p in (substitute_params(pattern, params) for pattern in route.paths) if p is not None),
                None,
            )
        elif route.paths:
            try:
                path = route.paths[self.default_path_index]
            except IndexError:
                path = None

        if path is None:
            raise RouteNotDefinedError(
                str(route),
                f'Route is not defined for "{route}" page with {len(params)} param(s)',
            )
        return path

    @allure.step("Visit: {page_name}")
    async def visit(self, page_name: str, params: Union[None, Any, Sequence[Any]] = None) -> str:
        """
        Navigate to the route named ``page_name``.

        Returns:
            The URL navigated to
        """
        route = self.route_table.get_route(page_name)
        if route is None:
            raise RouteNotDefinedError(page_name, f'Route is not defined for "{page_name}" page')

        path = self.route_path(route, params)
        url = path if is_absolute(path) else f"{self.base_url}/{path.lstrip('/')}"
        logger.info(f"Visiting {route}: {url}")
        await self.page.goto(url)
        return url

    async def set_size(self, width: int, height: int) -> None:
        await self.page.set_viewport_size({"width": width, "height": height})

    async def sleep(self, delay: Optional[int] = 0) -> None:
        """Pause for ``delay`` milliseconds."""
        await asyncio.sleep((delay or 0) / 1000)

    async def execute_script(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)

    # =========================================================================
    # Scratch Data
    # =========================================================================

    def get_data(self, key: str) -> Any:
        return self._data.get(_data_key(key))

    def set_data(self, key: str, value: Any) -> Any:
        self._data[normalize_key(key)] = value
        return value

    def has_data(self, key: str) -> bool:
        return _data_key(key) in self._data


def _data_key(key: str) -> Optional[str]:
    """Normalized data key, None for keys with no words (never stored)."""
    try:
        return normalize_key(key)
    except ConfigurationError:
        return None


def _setting(value: Optional[int], key: str, default: int) -> int:
    return get_config(key, default) if value is None else value


__all__ = [
    "Session",
]

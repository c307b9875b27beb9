"""
================================================================================
Wait Conditions
================================================================================

Polling wait primitive and the named conditions built on it.

Every browser interaction is eventually consistent (navigation, animation,
async rendering), so all waits go through ``wait_until``:

    - evaluate the condition's async predicate
    - a truthy result ends the wait and is returned
    - otherwise sleep one poll interval and evaluate again
    - past the deadline, raise ``WaitTimeoutError`` with the description

Usage:
    handle = await wait_until(found_in_page(page, "#submit"), timeout=5000)
    await wait_until(title_is(page, "Dashboard"))

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Tuple, Type

from loguru import logger
from playwright.async_api import ElementHandle, Page
from playwright.async_api import Error as PlaywrightError

from pageroute.common import get_config

from .errors import ConfigurationError, PropertyNotFoundError, RouteNotDefinedError, WaitTimeoutError

if TYPE_CHECKING:
    from .session import Session


# URLs a freshly opened tab reports before anything was loaded
BLANK_URLS = ("about:blank", "data:,")


@dataclass(frozen=True)
class Condition:
    """
    A predicate paired with a human-readable description.

    Attributes:
        description: Completes the sentence "waiting ...", e.g. 'for "x" to be found'
        predicate: Async callable; a truthy result means the condition holds
        ignored: Exceptions treated as "not yet" instead of failing the wait
    """
    description: str
    predicate: Callable[[], Awaitable[Any]]
    ignored: Tuple[Type[BaseException], ...] = ()


async def wait_until(
    condition: Condition,
    timeout: Optional[int] = None,
    poll_interval: Optional[int] = None,
) -> Any:
    """
    Poll a condition until it holds or the timeout elapses.

    Args:
        condition: Condition to poll
        timeout: Deadline in milliseconds (default: ``harness.default_timeout``)
        poll_interval: Sleep between evaluations in milliseconds
                       (default: ``harness.poll_interval``)

    Returns:
        The predicate's first truthy result

    Raises:
        WaitTimeoutError: If the deadline passes first
        ConfigurationError: If the predicate kept failing with an ignored
            configuration error until the deadline
    """
    if timeout is None:
        timeout = get_config("harness.default_timeout", 10000)
    if poll_interval is None:
        poll_interval = get_config("harness.poll_interval", 100)

    loop = asyncio.get_running_loop()
    interval = poll_interval / 1000
    deadline = loop.time() + timeout / 1000
    last_error: Optional[BaseException] = None
    attempt = 0

    while True:
        attempt += 1
        budget = max(deadline - loop.time(), interval)
        try:
            result = await asyncio.wait_for(condition.predicate(), budget)
            last_error = None
        except asyncio.TimeoutError:
            break
        except condition.ignored as e:
            last_error = e
            result = None

        if result:
            if attempt > 1:
                logger.debug(f"Condition met after {attempt} attempts: {condition.description}")
            return result

        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        await asyncio.sleep(min(interval, remaining))

    if isinstance(last_error, ConfigurationError):
        logger.error(f"Gave up after {timeout}ms: {last_error}")
        raise last_error

    error = WaitTimeoutError(condition.description, timeout, last_error=last_error)
    logger.error(error.message)
    raise error


# =============================================================================
# Page Conditions
# =============================================================================

def browser_ready(page: Page) -> Condition:
    """Current URL is no longer the blank new-tab sentinel."""
    async def predicate() -> bool:
        return page.url not in BLANK_URLS

    return Condition(f"for url to not equal {' or '.join(BLANK_URLS)}", predicate)


def page_matches(session: "Session", page_name: str) -> Condition:
    """
    The page currently shown is the route named ``page_name``.

    An undefined route fails the wait at once rather than timing out.
    """
    async def predicate() -> bool:
        route = session.route_table.get_route(page_name)
        if route is None:
            raise RouteNotDefinedError(page_name, f'Route is not defined for "{page_name}" page')
        page_object = await session.get_page_object()
        return page_object.route.paths == route.paths

    return Condition(f'for page to match "{page_name}"', predicate)


def configured_in_page(session: "Session", element_id: str) -> Condition:
    """``element_id`` resolves against the current page object's configuration."""
    async def predicate():
        page_object = await session.get_page_object()
        return page_object.resolve(element_id)

    return Condition(
        f'for "{element_id}" to be configured in page',
        predicate,
        ignored=(PropertyNotFoundError,),
    )


def found_in_page(page: Page, selector: str) -> Condition:
    """An element matches ``selector``; the wait returns its handle."""
    async def predicate() -> Optional[ElementHandle]:
        return await page.query_selector(selector)

    return Condition(
        f'for $("{selector}") to be found in page',
        predicate,
        ignored=(PlaywrightError,),
    )


def not_found_in_page(page: Page, selector: str) -> Condition:
    """No element matches ``selector``."""
    async def predicate() -> bool:
        try:
            return await page.query_selector(selector) is None
        except PlaywrightError:
            return True

    return Condition(f'for $("{selector}") to not be found in page', predicate)


def title_is(page: Page, expected_title: str) -> Condition:
    """Page title equals ``expected_title``."""
    async def predicate() -> bool:
        return await page.title() == expected_title

    return Condition(f'for "{expected_title}" to match page title', predicate)


# =============================================================================
# Element Conditions
# =============================================================================

def element_is_enabled(element: ElementHandle) -> Condition:
    async def predicate() -> bool:
        return await element.is_enabled()

    return Condition("for element to be enabled", predicate)


def element_is_visible(element: ElementHandle) -> Condition:
    async def predicate() -> bool:
        return await element.is_visible()

    return Condition("for element to be visible", predicate)


def element_is_not_visible(element: ElementHandle) -> Condition:
    async def predicate() -> bool:
        return not await element.is_visible()

    return Condition("for element to not be visible", predicate)


def element_text_is(element: ElementHandle, text: str) -> Condition:
    async def predicate() -> bool:
        return await element.inner_text() == text

    return Condition(f'for element text to be "{text}"', predicate)


__all__ = [
    "BLANK_URLS",
    "Condition",
    "wait_until",
    "browser_ready",
    "page_matches",
    "configured_in_page",
    "found_in_page",
    "not_found_in_page",
    "title_is",
    "element_is_enabled",
    "element_is_visible",
    "element_is_not_visible",
    "element_text_is",
]

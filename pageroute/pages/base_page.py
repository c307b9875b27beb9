"""
================================================================================
Base Page Object
================================================================================

Configuration shared by every route. Route page objects are merged over it, so
anything declared here is a default a route can override.

The helpers below are bound to each resolved page object and receive it as
their first argument:

    page = await session.get_page_object()
    await page.expect_page_title("Login")
    await page.expect_page_to_contain("usernameField")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Dict, Optional

import allure
from loguru import logger

from pageroute.framework.errors import WaitTimeoutError

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle

    from pageroute.framework.page_object import PageObject


# Title checks: attempts and pause between them (ms)
TITLE_ATTEMPTS = 3
TITLE_RETRY_DELAY = 300


async def get(page: "PageObject", key: str, timeout: Optional[int] = None) -> "ElementHandle":
    """Find the element configured under ``key`` on this page."""
    return await page.session.find(key, timeout)


async def get_title(page: "PageObject") -> str:
    return await page.session.page.title()


@allure.step("Expect page title: {title}")
async def expect_page_title(page: "PageObject", title: str) -> None:
    """
    Assert the page title, giving slow pages a few chances first.

    Raises:
        AssertionError: If the title still differs after the last attempt
    """
    page_title = None
    for attempt in range(1, TITLE_ATTEMPTS + 1):
        page_title = await get_title(page)
        if page_title == title:
            return
        if attempt < TITLE_ATTEMPTS:
            logger.debug(f"Title is {page_title!r}, expected {title!r} (attempt {attempt}/{TITLE_ATTEMPTS})")
            await asyncio.sleep(TITLE_RETRY_DELAY / 1000)
    assert page_title == title, f"Expected page title {title!r}, got {page_title!r}"


@allure.step("Expect page to contain: {element_id}")
async def expect_page_to_contain(page: "PageObject", element_id: str, timeout: Optional[int] = None) -> None:
    try:
        await page.session.find(element_id, timeout)
    except WaitTimeoutError as e:
        raise AssertionError(f'Element not found: "{element_id}"') from e


@allure.step("Expect page to not contain: {element_id}")
async def expect_page_to_not_contain(page: "PageObject", element_id: str, timeout: Optional[int] = None) -> None:
    try:
        await page.session.not_find(element_id, timeout)
    except WaitTimeoutError as e:
        raise AssertionError(f'Element unexpectedly found: "{element_id}"') from e


BASE_PAGE_OBJECT: Dict[str, Any] = {
    "get": get,
    "get_title": get_title,
    "expect_page_title": expect_page_title,
    "expect_page_to_contain": expect_page_to_contain,
    "expect_page_to_not_contain": expect_page_to_not_contain,
}


__all__ = [
    "BASE_PAGE_OBJECT",
    "TITLE_ATTEMPTS",
    "TITLE_RETRY_DELAY",
    "expect_page_title",
    "expect_page_to_contain",
    "expect_page_to_not_contain",
    "get",
    "get_title",
]

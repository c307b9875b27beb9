"""
================================================================================
Page Object Resolution
================================================================================

Works out which route the browser is showing and builds the page object for it:
the route's configuration merged over the shared base configuration, with the
base and route helpers bound to the new page object.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from loguru import logger

from .conditions import browser_ready, wait_until
from .config_tree import ConfigTree, Helper, build_tree, merge_trees, normalize_key
from .errors import RouteNotDefinedError
from .route_table import Route, RouteTable, strip_query
from .selector_resolver import ResolvedSelector, resolve

if TYPE_CHECKING:
    from .session import Session


class PageObject:
    """
    Configuration and helpers for the page currently on screen.

    Helpers are exposed as attributes and receive this page object as their
    first argument:

        page = await session.get_page_object()
        await page.expect_page_title("Login")
        page.resolve("header:nav:loginButton").css
    """

    def __init__(
        self,
        route: Route,
        config: ConfigTree,
        session: Optional["Session"] = None,
        url: str = "",
    ):
        self.route = route
        self.config = config
        self.session = session
        self.url = url
        self.helpers: Dict[str, Callable[..., Any]] = {
            key: partial(node.func, self)
            for key, node in config.items()
            if isinstance(node, Helper)
        }

    def resolve(self, element_id: str) -> ResolvedSelector:
        """Resolve a compound element id against this page's configuration."""
        return resolve(self.config, element_id, context=f'page "{self.route}"')

    def __getattr__(self, name: str) -> Callable[..., Any]:
        helpers = self.__dict__.get("helpers", {})
        if not name.startswith("_") and normalize_key(name) in helpers:
            return helpers[normalize_key(name)]
        raise AttributeError(f"{type(self).__name__} for {self.__dict__.get('route')} has no helper {name!r}")

    def __repr__(self) -> str:
        return f"<PageObject route={self.route.name!r} url={self.url!r}>"


class PageObjectResolver:
    """
    Builds page objects from the browser URL.

    The result is never cached: the page on screen can change between calls.
    """

    def __init__(
        self,
        route_table: RouteTable,
        base: Optional[Mapping[str, Any]] = None,
    ):
        """
        Args:
            route_table: Routes to resolve URLs against
            base: Raw base configuration merged under every route
                  (default: ``pageroute.pages.base_page.BASE_PAGE_OBJECT``)
        """
        if base is None:
            from pageroute.pages.base_page import BASE_PAGE_OBJECT
            base = BASE_PAGE_OBJECT
        self.route_table = route_table
        self.base: ConfigTree = build_tree(base, allow_helpers=True)

    async def get_page_object(self, session: "Session", timeout: Optional[int] = None) -> PageObject:
        """
        Resolve the page object for the session's current URL.

        Also stores it as ``session.current_page``.

        Raises:
            RouteNotDefinedError: If no route matches the current URL
            AmbiguousRouteError: If several routes match it
        """
        await wait_until(browser_ready(session.page), timeout, session.poll_interval)
        url = strip_query(session.page.url)

        route = self.route_table.get_route(url, "path")
        if route is None:
            error = RouteNotDefinedError(url)
            logger.error(error.message)
            raise error

        page_object = PageObject(
            route=route,
            config=merge_trees(self.base, route.page_object),
            session=session,
            url=url,
        )
        session.current_page = page_object
        return page_object


__all__ = [
    "PageObject",
    "PageObjectResolver",
]

"""
================================================================================
Route-Aware UI Framework
================================================================================

Playwright-based page-object harness driven by declarative routes.

Components:
    - route_table: Route loading and URL pattern matching
    - config_tree: Normalized page-object configuration
    - selector_resolver: Compound element id -> CSS selector
    - page_object: Page object for the page on screen
    - conditions: Polling waits
    - session: Retrying interaction layer
    - browser_manager: Browser lifecycle management

Author: Automation Team
License: MIT
================================================================================
"""

from .errors import (
    AmbiguousRouteError,
    ConfigurationError,
    DiagnosticError,
    HarnessError,
    InteractionError,
    PropertyNotFoundError,
    RouteNotDefinedError,
    WaitTimeoutError,
)
from .config_tree import Branch, Helper, Leaf, LeafWithChildren, normalize_key
from .selector_resolver import ResolvedSelector, resolve
from .route_table import Route, RouteMatch, RouteTable
from .conditions import Condition, wait_until
from .page_object import PageObject, PageObjectResolver
from .session import Session
from .browser_manager import BrowserManager

__all__ = [
    "AmbiguousRouteError",
    "Branch",
    "BrowserManager",
    "Condition",
    "ConfigurationError",
    "DiagnosticError",
    "HarnessError",
    "Helper",
    "InteractionError",
    "Leaf",
    "LeafWithChildren",
    "PageObject",
    "PageObjectResolver",
    "PropertyNotFoundError",
    "ResolvedSelector",
    "Route",
    "RouteMatch",
    "RouteNotDefinedError",
    "RouteTable",
    "Session",
    "WaitTimeoutError",
    "normalize_key",
    "resolve",
    "wait_until",
]

"""
================================================================================
Route Table
================================================================================

Ordered, immutable collection of page routes with name and URL lookup.

Route files are YAML mappings of route name to definition:

    login:
      path: /login
      pageObject:
        usernameField: "#user"
        submitButton: "#go"

    user_profile:
      path:
        - /users/:id
        - /profile/:id
      pageObject:
        header: ["header.profile", {avatar: "img.avatar"}]

Features:
    - Lazy, load-once route discovery with explicit reset/reload
    - ``:param`` URL patterns, several aliases per route
    - Ambiguous URL matches are reported, never silently resolved

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlsplit

import yaml
from loguru import logger

from pageroute.common import get_config

from .config_tree import ConfigTree, build_tree, normalize_key
from .errors import AmbiguousRouteError, ConfigurationError


# Directories never scanned for route files
EXCLUDED_DIRS = {".git", ".tox", ".venv", "venv", "site-packages", "node_modules", "__pycache__"}


# =============================================================================
# Path Patterns
# =============================================================================

def strip_query(url: str) -> str:
    """Drop the query string and fragment of a URL."""
    return url.split("#", 1)[0].split("?", 1)[0]


def is_absolute(pattern: str) -> bool:
    return "://" in pattern


def count_params(pattern: str) -> int:
    """Number of ``:param`` segments in a pattern."""
    return sum(1 for part in pattern.split("/") if part.startswith(":"))


def match_pattern(pattern: str, path: str) -> Optional[Dict[str, str]]:
    """
    Match a concrete path against a ``:param`` pattern.

    Returns:
        Bound parameters (possibly empty) on a match, None otherwise

    Example:
        >>> match_pattern("/users/:id", "/users/42")
        {'id': '42'}
        >>> match_pattern("/users/:id/edit", "/users/42") is None
        True
    """
    pattern_parts = pattern.split("/")
    path_parts = path.split("/")
    if len(pattern_parts) != len(path_parts):
        return None

    params: Dict[str, str] = {}
    for expected, actual in zip(pattern_parts, path_parts):
        if expected.startswith(":"):
            params[expected[1:]] = actual
        elif expected != actual:
            return None
    return params


def substitute_params(pattern: str, params: Sequence[Any]) -> Optional[str]:
    """
    Fill the ``:param`` segments of a pattern positionally.

    Returns None unless the pattern has exactly ``len(params)`` placeholders.
    """
    if count_params(pattern) != len(params):
        return None
    values = iter(params)
    return "/".join(
        str(next(values)) if part.startswith(":") else part
        for part in pattern.split("/")
    )


def _match_target(pattern: str, url: str) -> str:
    """Part of ``url`` a pattern is compared with: full URL or just its path."""
    full = strip_query(url)
    if is_absolute(pattern) or not is_absolute(full):
        return full
    return urlsplit(full).path or "/"


# =============================================================================
# Routes
# =============================================================================

@dataclass(frozen=True)
class Route:
    """
    A logical page.

    Attributes:
        name: Normalized route name
        paths: URL patterns, in declaration order
        page_object: Normalized page-object configuration tree
        display_name: Name as written in the route source
        source: File the route was loaded from, if any
    """
    name: str
    paths: Tuple[str, ...]
    page_object: ConfigTree = field(default_factory=dict, compare=False)
    display_name: str = ""
    source: Optional[str] = field(default=None, compare=False)

    def match(self, url: str) -> Optional[Dict[str, str]]:
        """Bound parameters of the first pattern matching ``url``, or None."""
        for pattern in self.paths:
            params = match_pattern(pattern, _match_target(pattern, url))
            if params is not None:
                return params
        return None

    def __str__(self) -> str:
        return self.display_name or self.name


@dataclass(frozen=True)
class RouteMatch:
    """A route together with the parameters bound by its matching pattern."""
    route: Route
    params: Dict[str, str]


def parse_routes(data: Mapping[str, Any], source: Optional[str] = None) -> List[Route]:
    """
    Build routes from a ``name -> {path, pageObject}`` mapping.

    Raises:
        ConfigurationError: On malformed definitions
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Route source {source or '<mapping>'} must be a mapping of routes")

    routes: List[Route] = []
    for raw_name, definition in data.items():
        if not isinstance(definition, Mapping):
            raise ConfigurationError(f"Route {raw_name!r} in {source or '<mapping>'} must be a mapping")
        entry = {normalize_key(key): value for key, value in definition.items()}

        raw_paths = entry.get("path") or []
        paths = (raw_paths,) if isinstance(raw_paths, str) else tuple(raw_paths)
        if not all(isinstance(path, str) for path in paths):
            raise ConfigurationError(f"Route {raw_name!r} paths must be strings: {raw_paths!r}")

        routes.append(Route(
            name=normalize_key(raw_name),
            paths=paths,
            page_object=build_tree(entry.get("page_object") or {}, allow_helpers=True),
            display_name=str(raw_name),
            source=source,
        ))
    return routes


def load_route_files(pattern: Optional[str] = None, root: Union[str, Path, None] = None) -> List[Route]:
    """
    Discover and parse YAML route files.

    Args:
        pattern: Glob relative to ``root`` (default: ``routes.pattern`` setting)
        root: Directory to search (default: ``routes.root`` setting)
    """
    pattern = pattern or get_config("routes.pattern", "**/routes.yaml")
    root = Path(root or get_config("routes.root", "."))

    routes: List[Route] = []
    for path in sorted(root.glob(pattern)):
        if EXCLUDED_DIRS.intersection(path.parts) or not path.is_file():
            continue
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in route file {path}: {e}") from e
        if not data:
            continue
        routes.extend(parse_routes(data, source=str(path)))
        logger.debug(f"Loaded routes from {path}")

    logger.info(f"Loaded {len(routes)} route(s) from {root}/{pattern}")
    return routes


def _check_unique(routes: Iterable[Route]) -> Tuple[Route, ...]:
    seen: Dict[str, Route] = {}
    for route in routes:
        if route.name in seen:
            raise ConfigurationError(
                f'Duplicate route name "{route.name}" '
                f"({seen[route.name].source or '<mapping>'} and {route.source or '<mapping>'})"
            )
        seen[route.name] = route
    return tuple(seen.values())


# =============================================================================
# Route Table
# =============================================================================

class RouteTable:
    """
    Registry of routes, loaded once and read-only afterwards.

    Usage:
        >>> table = RouteTable.from_mapping({
        ...     "login": {"path": "/login", "pageObject": {"usernameField": "#user"}},
        ... })
        >>> table.get_route("Login").paths
        ('/login',)
        >>> table.get_route("http://localhost:3000/login?next=/", "path").name
        'login'

    A process-wide table backed by route files is available through
    ``RouteTable.instance()``; ``RouteTable.reset()`` drops it.
    """

    _instance: Optional["RouteTable"] = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        routes: Optional[Iterable[Route]] = None,
        loader: Optional[Callable[[], Iterable[Route]]] = None,
    ):
        """
        Initialize route table.

        Args:
            routes: Fixed routes. Takes precedence over ``loader``.
            loader: Callable producing routes on first use
                    (default: ``load_route_files`` with configured settings)
        """
        if routes is not None:
            fixed = _check_unique(routes)
            loader = lambda: fixed
        self._loader = loader or load_route_files
        self._routes: Optional[Tuple[Route, ...]] = None
        self._lock = threading.Lock()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RouteTable":
        """Build a table from an in-memory route mapping."""
        return cls(parse_routes(data))

    @classmethod
    def from_files(cls, pattern: Optional[str] = None, root: Union[str, Path, None] = None) -> "RouteTable":
        """Build a table that scans route files lazily."""
        return cls(loader=lambda: load_route_files(pattern, root))

    @classmethod
    def instance(cls) -> "RouteTable":
        """Process-wide table backed by the configured route files."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the process-wide table so the next ``instance()`` rebuilds it."""
        with cls._instance_lock:
            cls._instance = None

    def load_routes(self) -> Tuple[Route, ...]:
        """Load routes on first call; later calls return the cached routes."""
        if self._routes is None:
            with self._lock:
                if self._routes is None:
                    self._routes = _check_unique(self._loader())
        return self._routes

    def reload(self) -> Tuple[Route, ...]:
        """Discard cached routes and load them again."""
        with self._lock:
            self._routes = None
        return self.load_routes()

    def match_route(self, url: str) -> Optional[RouteMatch]:
        """
        Find the single route whose patterns match ``url``.

        Raises:
            AmbiguousRouteError: When more than one route matches
        """
        matches = []
        for route in self.load_routes():
            params = route.match(url)
            if params is not None:
                matches.append(RouteMatch(route, params))

        if len(matches) > 1:
            error = AmbiguousRouteError(strip_query(url), [str(m.route) for m in matches])
            logger.error(str(error))
            raise error
        return matches[0] if matches else None

    def get_route(self, value: str, match_field: str = "name") -> Optional[Route]:
        """
        Look up a route by name or by URL.

        Args:
            value: Route name, or URL/path when ``match_field == "path"``
            match_field: ``"name"`` or ``"path"``

        Returns:
            The route, or None when nothing matches
        """
        if match_field == "name":
            try:
                name = normalize_key(value)
            except ConfigurationError:
                return None
            return next((route for route in self.load_routes() if route.name == name), None)
        if match_field == "path":
            match = self.match_route(value)
            return match.route if match else None
        raise ValueError(f"Unknown route match field: {match_field!r}")

    def __iter__(self):
        return iter(self.load_routes())

    def __len__(self) -> int:
        return len(self.load_routes())


__all__ = [
    "EXCLUDED_DIRS",
    "Route",
    "RouteMatch",
    "RouteTable",
    "count_params",
    "load_route_files",
    "match_pattern",
    "parse_routes",
    "strip_query",
    "substitute_params",
]

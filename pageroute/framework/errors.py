"""
================================================================================
Harness Exceptions
================================================================================

Error taxonomy for the harness:

    HarnessError
    ├── ConfigurationError          missing/invalid definitions, never retried
    │   ├── PropertyNotFoundError   compound-id segment not in page config
    │   └── RouteNotDefinedError    no route for a page name or URL
    ├── AmbiguousRouteError         several routes match one concrete path
    └── DiagnosticError             carries condition text + element HTML
        ├── WaitTimeoutError        polled condition never held
        └── InteractionError        action still failing after its retries

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence


class HarnessError(Exception):
    """
    Base exception for all harness errors.

    Attributes:
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(HarnessError):
    """Raised when route or page-object definitions are missing or malformed."""
    pass


class PropertyNotFoundError(ConfigurationError):
    """Raised when a compound-id segment does not resolve in the page config."""

    def __init__(self, segment: str, context: str = ""):
        message = f'Cannot find "{segment}" configured as a page object property'
        if context:
            message += f" ({context})"
        super().__init__(message, {"segment": segment, "context": context})
        self.segment = segment
        self.context = context


class RouteNotDefinedError(ConfigurationError):
    """Raised when no route exists for a page name or browser URL."""

    def __init__(self, target: str, message: Optional[str] = None):
        super().__init__(
            message or f'Route is not defined for "{target}"',
            {"target": target},
        )
        self.target = target


class AmbiguousRouteError(HarnessError):
    """Raised when more than one route matches the same concrete path."""

    def __init__(self, path: str, route_names: Sequence[str]):
        super().__init__(
            f"Ambiguous path {path} can match any of the routes "
            + " and ".join(route_names),
            {"path": path, "routes": list(route_names)},
        )
        self.path = path
        self.route_names = list(route_names)


class DiagnosticError(HarnessError):
    """
    Failure that carries a condition description and, when it could be
    captured, the outer HTML of the element involved.
    """

    def __init__(
        self,
        description: str,
        message: Optional[str] = None,
        outer_html: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message or description, details)
        self.description = description
        self.outer_html = outer_html

    def __str__(self) -> str:
        if self.outer_html:
            return f"{self.message}\n{self.outer_html}"
        return self.message


class WaitTimeoutError(DiagnosticError):
    """Raised when a polled condition does not hold before its deadline."""

    def __init__(
        self,
        description: str,
        timeout: Optional[int] = None,
        outer_html: Optional[str] = None,
        last_error: Optional[BaseException] = None,
    ):
        message = f"Waiting {description}"
        if timeout is not None:
            message = f"Timed out after {timeout}ms waiting {description}"
        if last_error is not None:
            message += f". Last error: {last_error}"
        super().__init__(description, message, outer_html, {"timeout": timeout})
        self.timeout = timeout
        self.last_error = last_error


class InteractionError(DiagnosticError):
    """Raised when a driver action keeps failing once its retries are spent."""

    def __init__(
        self,
        description: str,
        attempts: int,
        outer_html: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        message = f"{description} failed after {attempts} attempt(s)"
        if cause is not None:
            message += f": {cause}"
        super().__init__(description, message, outer_html, {"attempts": attempts})
        self.attempts = attempts


__all__ = [
    "HarnessError",
    "ConfigurationError",
    "PropertyNotFoundError",
    "RouteNotDefinedError",
    "AmbiguousRouteError",
    "DiagnosticError",
    "WaitTimeoutError",
    "InteractionError",
]

"""
Fixtures for driver-free unit tests.
"""

from __future__ import annotations

import pytest

from pageroute.framework.route_table import RouteTable
from pageroute.framework.session import Session
from testsuites.unit.fakes import FakePage


BASE_URL = "http://localhost:3000"

ROUTES = {
    "login": {
        "path": "/login",
        "pageObject": {
            "usernameField": "#user",
            "passwordField": "#pass",
            "submitButton": "#go",
        },
    },
    "dashboard": {
        "path": ["/dashboard", "/home"],
        "pageObject": {
            "header": ["header.top", {
                "nav": {
                    "loginButton": "button.login",
                    "profile link": "a.profile",
                },
            }],
            "title text": "h1",
            "layout": {"main": {"content": "main .content"}},
        },
    },
    "user profile": {
        "path": ["/users/:id", "/users/:id/tabs/:tab"],
        "pageObject": {
            "avatar": "img.avatar",
        },
    },
}


@pytest.fixture
def route_table() -> RouteTable:
    return RouteTable.from_mapping(ROUTES)


@pytest.fixture
def page() -> FakePage:
    return FakePage(url=f"{BASE_URL}/login", title="Login")


@pytest.fixture
def session(page: FakePage, route_table: RouteTable) -> Session:
    return Session(
        page,
        route_table,
        base_url=BASE_URL,
        default_timeout=300,
        poll_interval=10,
    )

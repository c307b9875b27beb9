"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for browser-backed tests of the harness.

The demo application is served by intercepting requests to ``APP_URL`` in the
browser itself, so no web server is needed. Tests are skipped when no
Playwright browser is installed.

Key Features:
- Browser lifecycle per test
- Route table loaded from testsuites/ui_testing/routes.yaml
- Screenshot and page source attached to Allure on failure

================================================================================
"""

import re
from pathlib import Path
from typing import AsyncGenerator, Dict, Optional
from urllib.parse import urlsplit

import allure
import pytest
import pytest_asyncio
from loguru import logger
from playwright.async_api import Route

from pageroute.framework.browser_manager import BrowserManager
from pageroute.framework.route_table import RouteTable
from pageroute.framework.session import Session


APP_URL = "http://app.test"

ROUTES_DIR = Path(__file__).parent.parent


# ================================================================================
# Demo Application
# ================================================================================

LOGIN_HTML = """<!doctype html>
<html>
<head><title>Login</title></head>
<body>
  <form class="login" onsubmit="return false">
    <input id="username" name="username">
    <input id="password" name="password" type="password">
    <button id="login" type="button">Sign in</button>
    <div class="error" style="display: none"></div>
  </form>
  <script>
    document.getElementById("login").addEventListener("click", () => {
      const user = document.getElementById("username").value;
      const password = document.getElementById("password").value;
      if (user === "demo" && password === "secret") {
        window.location.href = "/dashboard";
        return;
      }
      const error = document.querySelector(".error");
      error.textContent = "Invalid credentials";
      error.style.display = "block";
    });
  </script>
</body>
</html>
"""

DASHBOARD_HTML = """<!doctype html>
<html>
<head><title>Dashboard</title></head>
<body>
  <header class="top">
    <nav>
      <a class="profile" href="/users/42">Profile</a>
      <a class="logout" href="/login">Log out</a>
    </nav>
  </header>
  <h1 class="welcome">Welcome, demo</h1>
  <ul class="channels">
    <li>News</li>
    <li>Sports</li>
    <li>Music</li>
  </ul>
</body>
</html>
"""

PROFILE_HTML = """<!doctype html>
<html>
<head><title>Profile</title></head>
<body>
  <section class="profile">
    <span class="name">User {user_id}</span>
    <a class="back" href="/home">Back</a>
  </section>
</body>
</html>
"""


def render(path: str) -> Optional[str]:
    """HTML for a path of the demo application, None for unknown paths."""
    if path == "/login":
        return LOGIN_HTML
    if path in ("/dashboard", "/home"):
        return DASHBOARD_HTML
    match = re.fullmatch(r"/users/(\d+)", path)
    if match:
        return PROFILE_HTML.format(user_id=match.group(1))
    return None


async def serve_demo_app(route: Route) -> None:
    body = render(urlsplit(route.request.url).path)
    if body is None:
        await route.fulfill(status=404, content_type="text/html", body="<h1>Not found</h1>")
    else:
        await route.fulfill(status=200, content_type="text/html", body=body)


# ================================================================================
# Fixtures
# ================================================================================

@pytest.fixture
def route_table() -> RouteTable:
    """Routes of the demo application."""
    return RouteTable.from_files("routes.yaml", ROUTES_DIR)


@pytest_asyncio.fixture
async def browser_manager() -> AsyncGenerator[BrowserManager, None]:
    manager = BrowserManager(headless=True)
    try:
        await manager.start()
    except Exception as e:
        pytest.skip(f"Playwright browser unavailable: {e}")
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def session(
    request,
    browser_manager: BrowserManager,
    route_table: RouteTable,
) -> AsyncGenerator[Session, None]:
    """Session on a fresh page with the demo application wired in."""
    session = await browser_manager.new_session(
        route_table,
        base_url=APP_URL,
        default_timeout=5000,
        poll_interval=50,
    )
    await session.page.route(f"{APP_URL}/**", serve_demo_app)
    yield session

    report = getattr(request.node, "rep_call", None)
    if report is not None and report.failed:
        await _attach_failure_artifacts(session)


async def _attach_failure_artifacts(session: Session) -> None:
    try:
        allure.attach(
            await session.page.screenshot(full_page=True),
            name="failure_screenshot",
            attachment_type=allure.attachment_type.PNG,
        )
        allure.attach(
            await session.page.content(),
            name="page_source",
            attachment_type=allure.attachment_type.HTML,
        )
    except Exception as e:
        logger.warning(f"Failed to capture failure artifacts: {e}")


@pytest.fixture
def test_data() -> Dict[str, Dict[str, str]]:
    """
    Provides credentials for the demo application.
    """
    return {
        "valid_user": {
            "username": "demo",
            "password": "secret",
        },
        "invalid_user": {
            "username": "demo",
            "password": "wrong_password",
        },
    }


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep each phase's report on the test item for fixture teardown."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)

"""
Repository-level pytest configuration.

Provides safe defaults for local runs:
  - Harness settings come from config/harness.yaml unless overridden here
  - Process-wide singletons are reset between tests
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from pageroute.common import GlobalConfig
from pageroute.framework.route_table import RouteTable


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _safe_env_defaults() -> Generator[None, None, None]:
    """
    Set local defaults if not already provided by the user/CI.
    """
    defaults = {
        "UI_BASE_URL": "http://localhost:3000",
        "BROWSER_HEADLESS": "true",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield


@pytest.fixture(autouse=True)
def _isolated_singletons() -> Generator[None, None, None]:
    """Drop cached configuration and routes around every test."""
    GlobalConfig.reset()
    RouteTable.reset()
    yield
    GlobalConfig.reset()
    RouteTable.reset()

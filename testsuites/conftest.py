"""
================================================================================
Root Pytest Configuration
================================================================================

This module provides the root pytest configuration for the test suite.
It registers common markers and tags tests by directory.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for release"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "unit: Driver-free tests against fake pages"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests against a real browser"
    )
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "routing: Route table and URL matching"
    )
    config.addinivalue_line(
        "markers", "waits: Polling conditions"
    )
    config.addinivalue_line(
        "markers", "interaction: Session interaction layer"
    )


def pytest_collection_modifyitems(config, items):
    """
    Add directory-based markers to collected tests.
    """
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "ui_testing" in str(item.fspath):
            item.add_marker(pytest.mark.ui)
            item.add_marker(pytest.mark.e2e)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "pageroute - Route-Aware UI Harness",
        "=" * 60,
        "",
    ]

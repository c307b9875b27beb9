"""
Test suites package.

Kept importable so test modules can share fakes and fixtures:
  - testsuites.unit: driver-free tests against fake pages
  - testsuites.ui_testing: end-to-end tests in a real browser
"""

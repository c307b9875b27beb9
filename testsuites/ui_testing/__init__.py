"""Browser-backed tests against the demo application."""

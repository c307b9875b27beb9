"""Driver-free unit tests for the harness."""

"""Save upgrader test suite."""

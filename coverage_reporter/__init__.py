"""Coverage reporter — LCOV / Go coverage deltas against a stored baseline."""

__version__ = "0.1.0"

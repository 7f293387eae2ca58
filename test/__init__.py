"""Tests for ``compact_toeplitz``."""

"""Tests for ``compact_toeplitz.structures``."""

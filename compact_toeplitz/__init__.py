"""Toeplitz matrices stored in compact, diagonal-wise form."""

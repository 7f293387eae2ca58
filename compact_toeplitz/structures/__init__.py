"""Structured matrix containers."""

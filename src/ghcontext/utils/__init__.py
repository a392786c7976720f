"""Helpers for external tools."""

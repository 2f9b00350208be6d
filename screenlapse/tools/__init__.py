"""Wrappers around the external command-line tools."""

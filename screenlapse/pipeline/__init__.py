"""Capture cycle orchestration, scheduling and artifact storage."""

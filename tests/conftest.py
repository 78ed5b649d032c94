"""Pytest configuration and shared fixtures."""

from hypothesis import settings

# Key generation and signing make examples slow; disable the per-example deadline.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")

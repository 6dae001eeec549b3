"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested with a fake clock and mocked collaborators.
Unit tests should be fast, deterministic, and focused.
"""

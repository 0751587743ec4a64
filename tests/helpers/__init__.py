"""Shared builders for depwatch tests."""

"""Test doubles for depwatch tests."""

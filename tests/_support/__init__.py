"""Shared helpers for storm-foundation tests."""

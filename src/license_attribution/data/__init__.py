"""Bundled rule data."""

"""Bundled report templates."""

"""Bundled license texts."""

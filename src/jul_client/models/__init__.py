"""Canonical entities returned by the client."""

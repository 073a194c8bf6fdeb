"""Request payload schemas."""

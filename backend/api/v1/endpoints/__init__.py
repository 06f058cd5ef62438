"""API v1 endpoints."""

__all__ = [
    "elderly",
    "medication",
    "family",
    "user",
    "health",
]

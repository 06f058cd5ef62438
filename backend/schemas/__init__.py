"""Pydantic schemas for API validation."""

__all__ = [
    "base",
    "elderly",
    "family",
    "medication_record",
    "schedule",
    "user_settings",
]

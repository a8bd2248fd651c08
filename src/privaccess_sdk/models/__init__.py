"""Pydantic models for platform resources and request payloads."""

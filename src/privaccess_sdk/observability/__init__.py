"""Observability helpers (structured logging, outbound request context)."""

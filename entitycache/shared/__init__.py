"""Shared cross-cutting helpers (logging and tracing)."""

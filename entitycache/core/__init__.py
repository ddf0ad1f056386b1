"""Core: settings and shared constants."""

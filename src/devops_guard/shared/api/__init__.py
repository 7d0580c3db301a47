"""Shared HTTP concerns: middleware, exception handlers and API key checks."""

"""Shared HTTP primitives: response envelope, error handlers, middleware."""

"""
Core utilities shared across the users API.

This package hosts configuration helpers (env vars, storage path, flags) and
logging setup. Routers and services depend on these primitives instead of
reading the environment themselves.
"""

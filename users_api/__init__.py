"""Users JSON API: CRUD over a single JSON document of user records."""

__version__ = "1.0.0"

"""User registration, token authentication and user CRUD over HTTP."""

__version__ = "0.1.0"

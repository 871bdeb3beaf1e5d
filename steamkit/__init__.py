"""Steam IDs, authenticator codes, social caches and trading helpers."""

__version__ = "0.1.0"
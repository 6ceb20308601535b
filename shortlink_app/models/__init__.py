"""
Database models for the URL shortener.

A short URL owns its click log (one-to-many); clicks are never removed by
the service, only appended.
"""

from .url import ShortUrl
from .click import Click

__all__ = ["ShortUrl", "Click"]

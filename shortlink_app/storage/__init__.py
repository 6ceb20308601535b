"""
Persistence for short URLs and their click logs.

The service layer only talks to ``ShortUrlStore``; the SQLAlchemy
implementation is the one the application wires in.
"""

from .strategies import ShortUrlStore, SQLAlchemyShortUrlStore

__all__ = [
    "ShortUrlStore",
    "SQLAlchemyShortUrlStore",
]

from .connection import Base, Database, utcnow

__all__ = ["Base", "Database", "utcnow"]

from .url import (
    ShortUrlCreate,
    ShortUrlCreated,
    ClickData,
    ClickResponse,
    ShortUrlResponse,
    ShortUrlStats,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    "ShortUrlCreate",
    "ShortUrlCreated",
    "ClickData",
    "ClickResponse",
    "ShortUrlResponse",
    "ShortUrlStats",
    "HealthResponse",
    "ErrorResponse",
]

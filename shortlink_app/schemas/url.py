from datetime import datetime
from typing import List, Optional, Union

from pydantic import (
    AliasChoices,
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
)
from pydantic.alias_generators import to_camel


def _either_case(name: str) -> AliasChoices:
    return AliasChoices(name, to_camel(name))


class CamelModel(BaseModel):
    """
    Python names in code, camelCase keys on the wire.

    Both spellings are accepted on input: FastAPI re-validates the
    camelCase dump of a returned model against the response model.
    """

    model_config = ConfigDict(
        alias_generator=AliasGenerator(
            validation_alias=_either_case,
            serialization_alias=to_camel,
        ),
        from_attributes=True,
    )


class ShortUrlCreate(BaseModel):
    """
    Body of ``POST /shorturls``.

    Only JSON types are checked here; the service owns the semantic
    validation so every entry point reports the same errors.
    """
    url: Optional[StrictStr] = Field(None, description="The original URL to be shortened")
    validity: Optional[Union[StrictInt, StrictFloat]] = Field(
        None, description="Minutes until the link expires (default 30)"
    )
    shortcode: Optional[StrictStr] = Field(
        None, description="Custom 3-20 character alphanumeric shortcode"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "url": "https://example.com/some/very/long/path",
                "validity": 30,
                "shortcode": "abc123",
            }
        }
    )


class ShortUrlCreated(CamelModel):
    short_link: str
    expiry: datetime


class ClickData(BaseModel):
    """Request metadata captured for one redirect."""

    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    ip: Optional[str] = None
    # No geo-IP lookup
    location: str = "Unknown"


class ClickResponse(CamelModel):
    id: str
    short_url_id: str
    timestamp: datetime
    referrer: Optional[str] = None
    user_agent: Optional[str] = None
    ip: Optional[str] = None
    location: Optional[str] = None


class ShortUrlResponse(CamelModel):
    """One entry of ``GET /shorturls``."""
    id: str
    original_url: str
    shortcode: str
    short_link: str
    created_at: datetime
    expires_at: datetime
    validity: int
    is_active: bool
    clicks: List[ClickResponse]

    @classmethod
    def from_record(cls, record, short_link: str) -> "ShortUrlResponse":
        return cls(
            id=record.id,
            original_url=record.original_url,
            shortcode=record.shortcode,
            short_link=short_link,
            created_at=record.created_at,
            expires_at=record.expires_at,
            validity=record.validity,
            is_active=record.is_active,
            clicks=[ClickResponse.model_validate(click) for click in record.clicks],
        )


class ShortUrlStats(CamelModel):
    """Body of ``GET /shorturls/{shortcode}``."""
    shortcode: str
    original_url: str
    short_link: str
    created_at: datetime
    expires_at: datetime
    total_clicks: int
    clicks: List[ClickResponse]


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    service: str
    database: str


class ErrorResponse(BaseModel):
    error: str
    message: str

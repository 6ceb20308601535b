import logging
from typing import List

from fastapi import APIRouter, Depends, status

from shortlink_app.api.v1.errors import error_response, internal_error
from shortlink_app.dependencies import get_base_url, get_logger, get_url_service
from shortlink_app.schemas.url import (
    ErrorResponse,
    ShortUrlCreate,
    ShortUrlCreated,
    ShortUrlResponse,
    ShortUrlStats,
)
from shortlink_app.services.url_service import URLService, build_short_link

router = APIRouter(prefix="/shorturls", tags=["shorturls"])


@router.post(
    "",
    response_model=ShortUrlCreated,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_short_url(
    payload: ShortUrlCreate,
    url_service: URLService = Depends(get_url_service),
    base_url: str = Depends(get_base_url),
    logger: logging.Logger = Depends(get_logger),
):
    """Create a new short URL, optionally with a custom shortcode and validity"""
    try:
        result = await url_service.create(payload.url, payload.validity, payload.shortcode)
    except Exception:
        logger.exception("Error creating short URL")
        return internal_error("Failed to create short URL")

    if result.error:
        return error_response(result.error, "Failed to create short URL")

    record = result.value
    return ShortUrlCreated(
        short_link=build_short_link(base_url, record.shortcode),
        expiry=record.expires_at,
    )


@router.get(
    "/{shortcode}",
    response_model=ShortUrlStats,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_short_url_stats(
    shortcode: str,
    url_service: URLService = Depends(get_url_service),
    base_url: str = Depends(get_base_url),
    logger: logging.Logger = Depends(get_logger),
):
    """Statistics for a short URL, including its click log (newest first)"""
    try:
        result = await url_service.stats(shortcode, base_url)
    except Exception:
        logger.exception("Error retrieving statistics for %s", shortcode)
        return internal_error("Failed to retrieve statistics")

    if result.error:
        return error_response(result.error, "Failed to retrieve statistics")

    logger.info("Statistics retrieved: %s (%d clicks)", shortcode, result.value.total_clicks)
    return result.value


@router.get(
    "",
    response_model=List[ShortUrlResponse],
    responses={500: {"model": ErrorResponse}},
)
async def list_short_urls(
    url_service: URLService = Depends(get_url_service),
    base_url: str = Depends(get_base_url),
    logger: logging.Logger = Depends(get_logger),
):
    """All active, unexpired short URLs (newest first)"""
    try:
        result = await url_service.list_all()
        if result.error:
            return error_response(result.error, "Failed to retrieve short URLs")

        urls = [
            ShortUrlResponse.from_record(record, build_short_link(base_url, record.shortcode))
            for record in result.value
        ]
    except Exception:
        logger.exception("Error retrieving short URLs")
        return internal_error("Failed to retrieve short URLs")

    logger.info("All short URLs retrieved: %d", len(urls))
    return urls

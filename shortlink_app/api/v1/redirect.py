import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from shortlink_app.api.v1.errors import error_response, internal_error
from shortlink_app.dependencies import get_logger, get_url_service
from shortlink_app.schemas.url import ClickData, ErrorResponse
from shortlink_app.services.url_service import URLService

router = APIRouter(tags=["redirect"])


@router.get(
    "/{shortcode}",
    status_code=status.HTTP_302_FOUND,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def redirect_to_original_url(
    shortcode: str,
    request: Request,
    url_service: URLService = Depends(get_url_service),
    logger: logging.Logger = Depends(get_logger),
):
    """
    Redirect to the original URL.
    
    Flow:
    1. Resolve the shortcode (expired records are deactivated here)
    2. Record the click; a failure is logged and never blocks the redirect
    3. 302 to the original URL
    """
    try:
        result = await url_service.resolve(shortcode)
        if result.error:
            logger.warning("Redirect failed for %s: %s", shortcode, result.error.error)
            return error_response(result.error, "Failed to process redirect")

        short_url = result.value
        original_url = short_url.original_url

        click = ClickData(
            referrer=request.headers.get("referer"),
            user_agent=request.headers.get("user-agent"),
            ip=request.client.host if request.client else None,
        )
        try:
            recorded = await url_service.record_click(shortcode, click)
            if recorded.error:
                logger.error("Click not recorded for %s, redirecting anyway", shortcode)
        except Exception:
            logger.exception("Click not recorded for %s, redirecting anyway", shortcode)

        logger.info(
            "Redirect successful: %s -> %s",
            shortcode,
            original_url,
        )
        return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
    except Exception:
        logger.exception("Error during redirect for shortcode %s", shortcode)
        return internal_error("Failed to process redirect")

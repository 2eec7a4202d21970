import html
import re

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from kvshortener.constants import CODE_PATTERN
from kvshortener.dependencies import get_url_service
from kvshortener.services.url_service import URLService

router = APIRouter(tags=["redirect"])

CODE_RE = re.compile(CODE_PATTERN)

STAT_TEMPLATE = """
Shortened URL: {short_url}<br>
Real URL: {long_url}<br>
Overall hits: {total_hits}<br>
Weekly hits: {weekly_hits}<br>
24h hits: {daily_hits}<br>
"""


def url_not_found() -> PlainTextResponse:
    return PlainTextResponse("URL not found", status_code=status.HTTP_404_NOT_FOUND)


@router.get("/{short_code}")
async def redirect_to_long_url(
    short_code: str,
    url_service: URLService = Depends(get_url_service)
):
    """
    Redirect to the original URL.

    Flow:
    1. Look up the mapping (read-only transaction)
    2. Publish hit event to queue (fire and forget)
    3. Redirect immediately with 308

    Hit tracking is processed asynchronously by the worker,
    so it doesn't slow down the redirect.
    """
    if not CODE_RE.fullmatch(short_code):
        return url_not_found()

    long_url = await url_service.get_long_url_for_redirect(short_code)
    if long_url is None:
        return url_not_found()

    return RedirectResponse(url=long_url, status_code=status.HTTP_308_PERMANENT_REDIRECT)


@router.get("/{short_code}/stat", response_class=HTMLResponse)
async def url_stat(
    short_code: str,
    url_service: URLService = Depends(get_url_service)
):
    """Hit counters of a short URL as an HTML fragment"""
    if not CODE_RE.fullmatch(short_code):
        return url_not_found()

    stats = await url_service.get_url_stats(short_code)
    if stats is None:
        return url_not_found()

    return STAT_TEMPLATE.format(
        short_url=html.escape(url_service.short_url(short_code)),
        long_url=html.escape(stats.long_url),
        total_hits=stats.total_hits,
        weekly_hits=stats.weekly_hits,
        daily_hits=stats.daily_hits,
    )

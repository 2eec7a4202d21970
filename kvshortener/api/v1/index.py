from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from kvshortener.config import Settings
from kvshortener.dependencies import get_settings, get_url_service
from kvshortener.services.url_service import URLService

router = APIRouter(tags=["shortener"])

USAGE = """
Usage:
{base}/ -- this page
{base}/set -- POST URL to shorten, answer will be shortened URL
    Payload (plain text):
        http(s)://your.url/you/want/to/shorten
    Answer (plain text):
        {base}/ShtndURL
{base}/<shortened_URL> -- expand the URL
{base}/<shortened_URL>/stat -- get stats for the URL
"""


@router.get("/", response_class=PlainTextResponse)
def index_page(settings: Settings = Depends(get_settings)):
    """Usage text"""
    return USAGE.format(base=settings.base_url.rstrip("/"))


@router.post("/set", response_class=PlainTextResponse)
async def set_url(
    request: Request,
    url_service: URLService = Depends(get_url_service)
):
    """
    Shorten the URL sent as the raw request body.

    The body is stored verbatim (no parsing or validation).
    Generation exhaustion and store errors become 500 via the
    application's exception handler.
    """
    body = await request.body()
    if not body:
        return PlainTextResponse("Empty URL", status_code=status.HTTP_400_BAD_REQUEST)

    short_code = await url_service.create_short_url(body)
    return url_service.short_url(short_code)

from fastapi import APIRouter, Depends, HTTPException, status

from kvshortener.schemas.url import URLCreate, URLResponse, URLStats
from kvshortener.services.url_service import URLService
from kvshortener.dependencies import get_url_service

router = APIRouter(prefix="/urls", tags=["urls"])


@router.post("/", response_model=URLResponse, status_code=status.HTTP_201_CREATED)
async def create_short_url(
    url_data: URLCreate,
    url_service: URLService = Depends(get_url_service)
):
    """Create a new short URL from a validated http(s) URL"""
    long_url = str(url_data.long_url)
    short_code = await url_service.create_short_url(long_url.encode("utf-8"))
    return URLResponse(
        short_code=short_code,
        long_url=long_url,
        short_url=url_service.short_url(short_code)
    )


@router.get("/{short_code}", response_model=URLResponse)
async def get_url_info(
    short_code: str,
    url_service: URLService = Depends(get_url_service)
):
    """Get information about a short URL (does not count as a hit)"""
    long_url = await url_service.get_long_url(short_code)
    if long_url is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short URL not found"
        )
    return URLResponse(
        short_code=short_code,
        long_url=long_url,
        short_url=url_service.short_url(short_code)
    )


@router.get("/{short_code}/stats", response_model=URLStats)
async def get_url_stats(
    short_code: str,
    url_service: URLService = Depends(get_url_service)
):
    """Get statistics for a short URL"""
    stats = await url_service.get_url_stats(short_code)
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Short URL not found"
        )
    return URLStats(
        short_code=stats.short_code,
        long_url=stats.long_url,
        short_url=url_service.short_url(short_code),
        total_hits=stats.total_hits,
        weekly_hits=stats.weekly_hits,
        daily_hits=stats.daily_hits
    )

from pydantic import BaseModel, HttpUrl, Field


class URLCreate(BaseModel):
    long_url: HttpUrl = Field(..., description="The original URL to be shortened")


class URLResponse(BaseModel):
    short_code: str
    long_url: str
    short_url: str


class URLStats(URLResponse):
    total_hits: int
    weekly_hits: int
    daily_hits: int

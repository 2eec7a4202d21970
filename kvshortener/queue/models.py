"""
Data models for queue messages.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class HitEvent(BaseModel):
    """
    Event model for URL hit tracking.

    Published when a short URL is resolved; the hit worker applies it
    to the counters after the redirect response has been sent.
    """

    short_code: str = Field(..., description="The short code that was accessed")
    target: str = Field(..., description="Target the client was redirected to")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the redirect was served"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "short_code": "aB3_",
                "target": "https://example.com/page",
                "timestamp": "2025-10-29T10:30:00Z",
            }
        }
    )

"""
Pydantic model for canonical citizen reports.
Reports are produced by the normalizer from raw Firestore records and
are immutable afterwards.
"""

from pydantic import BaseModel, Field
from typing import Optional


class Report(BaseModel):
    """
    One canonical, normalized citizen incident record.

    latitude/longitude of exactly 0,0 means "no location".
    """
    id: str = Field(..., description="Firestore document ID")
    address: str = Field(..., description="Free-text location")
    date_time: str = Field(..., description="ISO-8601 date/time (best effort)")
    description: str = Field(..., description="What the citizen observed")
    image_base64: str = Field(default="", description="Empty or base64 image, optionally data-URL prefixed")
    latitude: float = 0.0
    longitude: float = 0.0
    timestamp_string: Optional[str] = Field(default=None, description="Human-readable time label")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "abc123",
                "address": "Jalan Reko, Kajang",
                "date_time": "2025-01-15T10:30:00Z",
                "description": "Fallen tree blocking both lanes",
                "image_base64": "",
                "latitude": 3.007,
                "longitude": 101.797,
                "timestamp_string": "January 15, 2025 at 10:30 AM",
            }
        }

    @property
    def has_location(self) -> bool:
        return not (self.latitude == 0 and self.longitude == 0)

    @property
    def time_label(self) -> str:
        """Best available time label for prompts."""
        return self.timestamp_string or self.date_time

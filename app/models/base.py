"""
Pydantic response models shared by the API routes.

DESIGN PRINCIPLE:
- Models should reflect data structure, not business logic
- Keep models simple and focused on validation
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.analysis import AnalysisResult
from app.models.chat import ChatMessage


class BaseResponse(BaseModel):
    """
    Base response model for API responses.
    All API responses can extend this for consistency.
    """
    success: bool = True
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AnalysisStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"  # Model returned nothing; distinct from a failure


class AnalyzeResponse(BaseResponse):
    status: AnalysisStatus
    analysis: Optional[AnalysisResult] = None
    greeting: Optional[str] = Field(None, description="Opening line of the new consultation session")


class ChatResponse(BaseResponse):
    reply: str
    messages: List[ChatMessage] = Field(default_factory=list)

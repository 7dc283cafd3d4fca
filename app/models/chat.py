"""
Pydantic models for consultation chat turns.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ChatRole(str, Enum):
    """Values match the role names the model service expects."""
    USER = "user"
    MODEL = "model"


class ChatMessage(BaseModel):
    role: ChatRole
    text: str
    timestamp: Optional[datetime] = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        frozen = True


class ChatRequest(BaseModel):
    """Operator follow-up question (incoming POST request)."""
    message: str = Field(..., max_length=4000, description="Question about the current analysis")

    class Config:
        json_schema_extra = {
            "example": {"message": "Which team should handle the fallen tree on Jalan Reko?"}
        }

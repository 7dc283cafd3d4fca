"""
AI Plug-in Architecture.

Model providers for triage, image audit and consultation chat.
Providers are constructed explicitly and passed to the services.
"""

from app.services.ai_plugin.base import AIProvider, ChatHandle, InlineImage
from app.services.ai_plugin.gemini_provider import GeminiAIProvider
from app.services.ai_plugin.registry import get_ai_provider

__all__ = [
    "AIProvider",
    "ChatHandle",
    "InlineImage",
    "GeminiAIProvider",
    "get_ai_provider",
]

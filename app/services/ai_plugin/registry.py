"""
AI Provider Registry.

Selects the model provider from configuration. Triage has no rule-based
fallback, so a missing provider is reported instead of substituted.
"""

import logging

from app.core.settings import Settings
from app.services.ai_plugin.base import AIProvider
from app.services.ai_plugin.gemini_provider import GeminiAIProvider
from app.services.errors import AIUnavailableError

logger = logging.getLogger(__name__)


def get_ai_provider(config: Settings) -> AIProvider:
    """
    Build the configured AI provider.

    Raises:
        AIUnavailableError: If AI is disabled or no API key is configured
    """
    if not config.AI_ENABLED:
        logger.info("⚠️ AI is disabled globally (AI_ENABLED=false)")
        raise AIUnavailableError("AI features are disabled (AI_ENABLED=false)")

    api_key = (config.GEMINI_API_KEY or "").strip()
    if not api_key:
        logger.info("⚠️ Gemini AI Provider disabled: No API key configured")
        raise AIUnavailableError("AI features are unavailable: GEMINI_API_KEY is not configured")

    provider = GeminiAIProvider(api_key=api_key, model_name=config.GEMINI_MODEL)
    logger.info(f"✅ AI provider registered: {provider.get_model_info()['name']}")
    return provider

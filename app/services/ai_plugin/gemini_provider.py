"""
Gemini AI Provider - google-generativeai integration.

Structured output is requested with response_mime_type="application/json"
and an explicit response_schema. Multimodal audits send the image as an
inline blob ahead of the text prompt. Chat turns replay the caller-owned
history against a model bound to the system instruction.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai

from app.models.chat import ChatMessage
from app.services.ai_plugin.base import AIProvider, ChatHandle, InlineImage
from app.services.errors import AIServiceError

logger = logging.getLogger(__name__)


def _response_text(response) -> Optional[str]:
    # .text raises ValueError when there are no candidates/parts
    # (e.g. safety block or empty completion).
    try:
        text = response.text
    except ValueError as e:
        logger.warning(f"⚠️ Gemini response carried no text: {e}")
        return None
    return text or None


class GeminiChatHandle(ChatHandle):
    """Chat handle over a GenerativeModel configured with a system instruction."""

    def __init__(self, model: "genai.GenerativeModel"):
        self._model = model

    async def send(self, history: Sequence[ChatMessage]) -> Optional[str]:
        contents = [{"role": message.role.value, "parts": [message.text]} for message in history]
        try:
            response = await self._model.generate_content_async(contents)
        except Exception as e:
            logger.error(f"❌ Gemini chat turn failed: {e}")
            raise AIServiceError(f"Gemini chat error: {e}") from e
        return _response_text(response)


class GeminiAIProvider(AIProvider):
    """
    Google Gemini provider.

    Args:
        api_key: Gemini API key
        model_name: Model id used for triage, audit and chat
    """

    def __init__(self, api_key: str, model_name: str = "gemini-2.0-flash"):
        if not api_key or not api_key.strip():
            raise ValueError("GEMINI_API_KEY not configured")

        genai.configure(api_key=api_key)
        self.model_name = model_name
        logger.info(f"✅ Gemini AI Provider initialized: {self.model_name}")

    def get_model_info(self) -> Dict[str, str]:
        return {"name": self.model_name, "provider": "gemini"}

    async def generate_json(
        self,
        prompt: str,
        schema: Dict[str, Any],
        image: Optional[InlineImage] = None,
    ) -> Optional[str]:
        model = genai.GenerativeModel(self.model_name)

        contents: List[Any] = []
        if image is not None:
            contents.append({"mime_type": image.mime_type, "data": image.data})
        contents.append(prompt)

        generation_config = genai.GenerationConfig(
            response_mime_type="application/json",
            response_schema=schema,
        )

        try:
            response = await model.generate_content_async(
                contents,
                generation_config=generation_config,
            )
        except Exception as e:
            logger.error(f"❌ Gemini structured generation failed: {e}")
            raise AIServiceError(f"Gemini API error: {e}") from e

        return _response_text(response)

    def create_chat(self, system_instruction: str) -> ChatHandle:
        model = genai.GenerativeModel(self.model_name, system_instruction=system_instruction)
        return GeminiChatHandle(model)

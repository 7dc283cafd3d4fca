"""
AI Provider Base Interface.

Defines the contract for generative model providers used by the triage
pipeline. Providers are explicitly constructed and passed to the services
that need them; there is no process-wide client.

Unlike an advisory enrichment step, triage depends on the model: providers
raise AIServiceError on failure and the caller decides what to show.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from app.models.chat import ChatMessage


class InlineImage:
    """Binary image payload sent alongside a multimodal prompt."""

    def __init__(self, mime_type: str, data: bytes):
        self.mime_type = mime_type
        self.data = data

    def __repr__(self) -> str:
        return f"InlineImage(mime_type={self.mime_type!r}, size={len(self.data)})"


class ChatHandle(ABC):
    """
    Conversational handle bound to one system instruction.

    The handle holds no turn history; the caller owns the log and replays it
    on every send.
    """

    @abstractmethod
    async def send(self, history: Sequence[ChatMessage]) -> Optional[str]:
        """
        Send the full ordered conversation and return the model's reply.

        Args:
            history: Every turn so far, ending with the new user turn

        Returns:
            Reply text, or None if the model produced no text

        Raises:
            AIServiceError: If the request fails
        """
        pass


class AIProvider(ABC):
    """
    Abstract base class for AI providers.

    All AI providers must implement this interface.
    """

    @abstractmethod
    def get_model_info(self) -> Dict[str, str]:
        """
        Get model information.

        Returns:
            Dict with 'name' and 'provider' keys
        """
        pass

    @abstractmethod
    async def generate_json(
        self,
        prompt: str,
        schema: Dict[str, Any],
        image: Optional[InlineImage] = None,
    ) -> Optional[str]:
        """
        Generate JSON constrained to a response schema.

        Args:
            prompt: Instruction text
            schema: Response schema (OpenAPI subset) the output must follow
            image: Optional inline image for multimodal requests

        Returns:
            Raw JSON text, or None if the model returned nothing

        Raises:
            AIServiceError: If the request fails
        """
        pass

    @abstractmethod
    def create_chat(self, system_instruction: str) -> ChatHandle:
        """Create a conversational handle grounded in a system instruction."""
        pass

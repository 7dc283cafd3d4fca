"""
Strict decoding of schema-constrained model output.

A present response that does not match the expected model is a hard
failure. Missing required fields are never defaulted.
"""

import logging
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.services.errors import MalformedResponseError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def strip_code_fences(text: str) -> str:
    """LLMs sometimes wrap JSON in markdown code blocks even in JSON mode."""
    text = text.strip()
    if "```json" in text:
        return text.split("```json")[1].split("```")[0].strip()
    if text.startswith("```"):
        return text.split("```")[1].split("```")[0].strip()
    return text


def decode_structured(text: str, model: Type[ModelT]) -> ModelT:
    """
    Parse model output into ``model`` in strict mode.

    Raises:
        MalformedResponseError: If the text is not valid JSON for the schema
    """
    try:
        return model.model_validate_json(strip_code_fences(text), strict=True)
    except ValidationError as e:
        logger.error(f"Failed to parse {model.__name__} response: {e.error_count()} error(s)")
        logger.debug(f"Response text: {text}")
        raise MalformedResponseError(f"Failed to parse {model.__name__} response: {e}") from e

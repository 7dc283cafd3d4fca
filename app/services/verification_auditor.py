"""
Verification Auditor - per-report image/description audit.

Checks that the attached photo shows what the citizen described and
classifies jurisdiction with the same rule used by triage. Each report may
have at most one audit in flight; different reports are independent.
"""

import base64
import binascii
import logging
import re
from typing import Any, Dict, Set, Tuple

from app.models.analysis import VerificationResult
from app.models.report import Report
from app.services.ai_plugin.base import AIProvider, InlineImage
from app.services.errors import MalformedResponseError, OperationInProgressError, PreconditionError
from app.utils.structured_output import decode_structured

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"
MIN_IMAGE_LENGTH = 50
NO_VALID_IMAGE = "No valid image to verify"

BASE64_MARKER = "base64,"
DATA_URL_PATTERN = re.compile(r"data:(.*?);base64,(.*)", re.DOTALL)

VERIFICATION_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "matchesDescription": {"type": "BOOLEAN"},
        "isRelevant": {
            "type": "BOOLEAN",
            "description": "True for Public/Gov issues, False for Private/Civil issues.",
        },
        "findings": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "List of 3 concise observations (max 10 words each).",
        },
    },
    "required": ["matchesDescription", "isRelevant", "findings"],
}


def split_image_payload(value: str) -> Tuple[str, str]:
    """
    Detect the media type and extract the base64 payload.

    - ``data:<mime>;base64,<payload>`` -> (mime, payload)
    - ``...base64,<payload>`` -> (image/jpeg, payload)
    - anything else -> (image/jpeg, value)
    """
    if "data:" in value and BASE64_MARKER in value:
        match = DATA_URL_PATTERN.search(value)
        if match:
            return match.group(1), match.group(2)
    if BASE64_MARKER in value:
        return DEFAULT_MIME_TYPE, value.split(BASE64_MARKER, 1)[1]
    return DEFAULT_MIME_TYPE, value


def build_verification_prompt(description: str) -> str:
    return f"""You are an expert Local Government Consultant and AI Auditor.

Task:
1. Analyze the image and compare it to the description: "{description}".
2. Determine if the reported issue is visually confirmed by the image.
3. Determine if this falls under Local Government Jurisdiction (e.g. Public Roads, Drains,
   Streetlights, Public Trees, Waste) or is a Private/Civil matter (e.g. Private house interior,
   personal appliance, neighbor argument, private condo facility).

Output Requirements:
- findings: A list of 3 extremely concise bullet points (max 10 words each). Simple English.
  State clearly what is seen.

Return valid JSON."""


def prepare_image(report: Report) -> InlineImage:
    """
    Validate and decode the report's image.

    Raises:
        PreconditionError: If the image is missing, too short, or not base64
    """
    if not report.image_base64 or len(report.image_base64) < MIN_IMAGE_LENGTH:
        raise PreconditionError(NO_VALID_IMAGE)

    mime_type, payload = split_image_payload(report.image_base64)
    try:
        data = base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise PreconditionError(NO_VALID_IMAGE) from e
    if not data:
        raise PreconditionError(NO_VALID_IMAGE)
    return InlineImage(mime_type=mime_type, data=data)


class VerificationAuditor:
    """Multimodal audit of one report at a time per report id."""

    def __init__(self, provider: AIProvider):
        self.provider = provider
        self._in_flight: Set[str] = set()

    def is_verifying(self, report_id: str) -> bool:
        return report_id in self._in_flight

    async def verify(self, report: Report) -> VerificationResult:
        """
        Audit the report's image against its description.

        Raises:
            PreconditionError: No usable image (raised before any request)
            OperationInProgressError: An audit for this report is running
            AIServiceError: The model request failed
            MalformedResponseError: Empty or schema-violating response
        """
        image = prepare_image(report)

        if report.id in self._in_flight:
            raise OperationInProgressError(f"Verification already in progress for report {report.id}")

        self._in_flight.add(report.id)
        try:
            logger.info(f"Auditing image for report {report.id} ({image.mime_type}, {len(image.data)} bytes)")
            text = await self.provider.generate_json(
                build_verification_prompt(report.description),
                VERIFICATION_RESPONSE_SCHEMA,
                image=image,
            )
        finally:
            self._in_flight.discard(report.id)

        if not text:
            logger.warning(f"⚠️ Image audit returned an empty response for report {report.id}")
            raise MalformedResponseError("Image audit returned an empty response")

        result = decode_structured(text, VerificationResult)
        logger.info(
            f"✅ Audit complete for report {report.id}: "
            f"matches={result.matches_description} relevant={result.is_relevant}"
        )
        return result

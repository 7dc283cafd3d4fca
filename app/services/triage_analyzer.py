"""
Triage Analyzer - batch severity and jurisdiction classification.

Sends every report in the working set to the model in one request with a
fixed response schema and returns a strategic overview plus a prioritized
verdict per report.

Outcomes:
- empty batch or empty model response -> None (not an error)
- present but malformed response -> MalformedResponseError
- service failure -> AIServiceError (propagated, no retry)
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from app.models.analysis import AnalysisResult, Severity
from app.models.report import Report
from app.services.ai_plugin.base import AIProvider
from app.services.errors import MalformedResponseError, OperationInProgressError
from app.utils.structured_output import decode_structured

logger = logging.getLogger(__name__)

REPORT_SEPARATOR = "\n---\n"

TRIAGE_INSTRUCTIONS = """You are "Lightning AI", an intelligent consultant for local government.
Analyze the following citizen reports and create a prioritized response plan.

CRITICAL INSTRUCTIONS:
1. JURISDICTION CHECK:
   Identify reports that are NOT under the jurisdiction of local government
   (e.g. "My TV is broken", "Neighbor's dog is barking inside their house",
   "Private driveway repair", "Personal disputes").
   Mark these as irrelevant (isRelevant: false). Valid government issues include
   roads, drainage, public safety, streetlights, waste, public trees, etc.

2. PRIORITY CLASSIFICATION RULES:
   - Critical: You MUST classify as 'Critical' if the issue involves:
     a) Life-threatening situations.
     b) Traffic jams, road obstructions, or hazards (like deep potholes or fallen trees)
        that have a high potential to cause accidents.
   - High: Major disruptions or significant safety hazards that are not immediately life-threatening.
   - Medium: Functional issues or nuisances (e.g. clogged drains, garbage piles).
   - Low: Cosmetic or minor maintenance issues.

Return exactly one entry in prioritizedReports per report below, using its exact ID."""

SOLUTION_ITEM_FIELDS = [
    "reportId",
    "severity",
    "displayTitle",
    "actionPlan",
    "recommendedResource",
    "justification",
    "isRelevant",
]

TRIAGE_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "strategicOverview": {
            "type": "STRING",
            "description": "A short, 2-sentence executive summary of the current situation for the mayor.",
        },
        "prioritizedReports": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "reportId": {
                        "type": "STRING",
                        "description": "The exact ID of the report being referenced.",
                    },
                    "severity": {
                        "type": "STRING",
                        "format": "enum",
                        "enum": [severity.value for severity in Severity],
                    },
                    "displayTitle": {
                        "type": "STRING",
                        "description": "A short 3-5 word title for the problem (e.g. 'Fallen Tree Blocking Road').",
                    },
                    "actionPlan": {
                        "type": "STRING",
                        "description": "Specific instruction on what to do. If irrelevant, explain why.",
                    },
                    "recommendedResource": {
                        "type": "STRING",
                        "description": "The specific team to send (e.g. 'Fire Dept', 'Public Works'). If irrelevant, use 'None' or 'Private'.",
                    },
                    "justification": {
                        "type": "STRING",
                        "description": "Why this priority level was chosen.",
                    },
                    "isRelevant": {
                        "type": "BOOLEAN",
                        "description": "False for private matters outside government jurisdiction, true for public issues.",
                    },
                },
                "required": SOLUTION_ITEM_FIELDS,
            },
        },
    },
    "required": ["strategicOverview", "prioritizedReports"],
}


def format_report_block(report: Report) -> str:
    return (
        f"ID: {report.id}\n"
        f"Location: {report.address}\n"
        f"Issue: {report.description}\n"
        f"Time: {report.time_label}"
    )


def build_triage_prompt(reports: Sequence[Report]) -> str:
    summaries = REPORT_SEPARATOR.join(format_report_block(report) for report in reports)
    return f"{TRIAGE_INSTRUCTIONS}\n\nReports:\n{summaries}"


class TriageAnalyzer:
    """
    Batch triage over the model provider.

    Only one analysis may be in flight at a time.
    """

    def __init__(self, provider: AIProvider):
        self.provider = provider
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def analyze(self, reports: Sequence[Report]) -> Optional[AnalysisResult]:
        """
        Classify a batch of reports.

        Args:
            reports: Reports to triage

        Returns:
            AnalysisResult, or None for an empty batch or empty model response

        Raises:
            OperationInProgressError: If another analysis is running
            AIServiceError: If the model request fails
            MalformedResponseError: If the response does not match the schema
        """
        if not reports:
            logger.info("Triage requested with no reports, skipping model call")
            return None

        if self._in_flight:
            raise OperationInProgressError("An analysis is already in progress")

        self._in_flight = True
        try:
            logger.info(f"Requesting triage for {len(reports)} reports ({self.provider.get_model_info()['name']})")
            text = await self.provider.generate_json(build_triage_prompt(reports), TRIAGE_RESPONSE_SCHEMA)
        finally:
            self._in_flight = False

        if not text:
            logger.warning("⚠️ Triage returned an empty response")
            return None

        result = decode_structured(text, AnalysisResult)
        self._check_report_ids(result, reports)

        logger.info(
            f"✅ Triage complete: {len(result.prioritized_reports)} verdicts "
            f"({sum(1 for item in result.prioritized_reports if not item.is_relevant)} out of jurisdiction)"
        )
        return result

    @staticmethod
    def _check_report_ids(result: AnalysisResult, reports: Sequence[Report]) -> None:
        known_ids = {report.id for report in reports}
        unknown: List[str] = [
            item.report_id for item in result.prioritized_reports if item.report_id not in known_ids
        ]
        if unknown:
            logger.error(f"Triage response references unknown report ids: {unknown}")
            raise MalformedResponseError(f"Triage response references unknown report ids: {unknown}")

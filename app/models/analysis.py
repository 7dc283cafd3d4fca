"""
Pydantic models for model-generated triage output.

Field names on the wire are camelCase because the response schema sent to
the model fixes them. Decoding is strict: a missing required field or a
wrong type is a MalformedResponseError upstream, never a silent default.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Severity is only meaningful when the report is relevant."""
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class _CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class SolutionItem(_CamelModel):
    """Per-report verdict from one triage pass."""
    report_id: str = Field(..., description="The exact ID of the report being referenced")
    severity: Severity
    display_title: str
    action_plan: str
    recommended_resource: str
    justification: str
    is_relevant: bool = Field(..., description="False for private/civil matters outside municipal authority")


class AnalysisResult(_CamelModel):
    """
    One triage pass: a narrative plus per-report verdicts.

    Ephemeral. Replaced wholesale by the next analysis, never patched.
    """
    strategic_overview: str
    prioritized_reports: List[SolutionItem]

    def find(self, report_id: str) -> Optional[SolutionItem]:
        for item in self.prioritized_reports:
            if item.report_id == report_id:
                return item
        return None


class VerificationResult(_CamelModel):
    """Image/description audit for one report. Not cached, not persisted."""
    matches_description: bool
    is_relevant: bool
    findings: List[str] = Field(..., description="Concise observations, normally three")

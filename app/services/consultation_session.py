"""
Consultation Session - follow-up dialogue grounded in one analysis.

The session owns an explicit, append-only message log and replays it on
every turn. It is bound at creation to a single AnalysisResult snapshot and
is never rebound; a new analysis means a new session.
"""

import logging
from typing import List, Sequence

from app.models.analysis import AnalysisResult
from app.models.chat import ChatMessage, ChatRole
from app.models.report import Report
from app.services.ai_plugin.base import AIProvider, ChatHandle
from app.services.errors import OperationInProgressError, PreconditionError

logger = logging.getLogger(__name__)

GREETING = (
    "I've analyzed the reports. I can help you with specific details, resource contacts, "
    "or drafting public announcements. What do you need?"
)
EMPTY_REPLY = "I couldn't generate a response."


def format_grounding_line(report: Report, analysis: AnalysisResult) -> str:
    verdict = analysis.find(report.id)
    severity = verdict.severity.value if verdict else "N/A"
    relevant = verdict.is_relevant if verdict else "N/A"
    return (
        f"[ID: {report.id}] Loc: {report.address} | Issue: {report.description} "
        f"| Severity: {severity} | Relevant: {relevant}"
    )


def build_system_instruction(reports: Sequence[Report], analysis: AnalysisResult) -> str:
    report_lines = "\n".join(format_grounding_line(report, analysis) for report in reports)
    return f"""You are Lightning AI, a smart assistant for local government admins.
You have just performed a strategic analysis of citizen reports.

Current Situation Overview: "{analysis.strategic_overview}"

Report Data:
{report_lines}

The admin will ask questions about these reports.
If a report was marked as irrelevant (Relevant: False), explain that it falls outside municipal
jurisdiction (e.g. private property, personal appliances).
Otherwise, answer concisely about resources and action plans."""


class ConsultationSession:
    """
    Chat about one fixed analysis snapshot.

    Args:
        provider: Model provider used to create the conversational handle
        reports: Reports the analysis was run on
        analysis: The snapshot this session is grounded in
    """

    def __init__(self, provider: AIProvider, reports: Sequence[Report], analysis: AnalysisResult):
        self.reports: List[Report] = list(reports)
        self.analysis = analysis
        self.system_instruction = build_system_instruction(self.reports, analysis)
        self.messages: List[ChatMessage] = []
        self._handle: ChatHandle = provider.create_chat(self.system_instruction)
        self._in_flight = False
        logger.info(f"Consultation session created for {len(self.reports)} reports")

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def send(self, text: str) -> str:
        """
        Ask a follow-up question.

        The user turn is recorded before the request. If the request fails,
        no model turn is appended and the error propagates.

        Raises:
            PreconditionError: Blank message
            OperationInProgressError: A previous turn is still in flight
            AIServiceError: The model request failed
        """
        if not text or not text.strip():
            raise PreconditionError("Message must not be empty")
        if self._in_flight:
            raise OperationInProgressError("A chat response is already pending")

        self.messages.append(ChatMessage(role=ChatRole.USER, text=text))
        self._in_flight = True
        try:
            reply = await self._handle.send(list(self.messages))
        finally:
            self._in_flight = False

        reply = reply or EMPTY_REPLY
        self.messages.append(ChatMessage(role=ChatRole.MODEL, text=reply))
        logger.info(f"Consultation turn complete ({len(self.messages)} messages)")
        return reply

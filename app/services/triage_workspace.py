"""
Triage Workspace - the single orchestrator for in-memory triage state.

Owns the working set of reports, the current analysis snapshot together
with its consultation session, the per-report verification auditor and the
deletion workflow. Every mutation of this state goes through here.

Working set vs. deletion race: refresh() replaces the working set wholesale
and a confirmed delete removes the report from whatever set is current at
that moment. The last writer wins.
"""

import logging
from datetime import datetime
from typing import List, Optional

from app.models.analysis import AnalysisResult, VerificationResult
from app.models.report import Report
from app.services.ai_plugin.base import AIProvider
from app.services.consultation_session import ConsultationSession
from app.services.deletion_workflow import (
    DEFAULT_CONFIRM_WINDOW_SECONDS,
    DeletionOutcome,
    DeletionWorkflow,
)
from app.services.errors import (
    AIUnavailableError,
    PreconditionError,
    ReportNotFoundError,
    StoreError,
)
from app.services.report_store import ReportStore
from app.services.triage_analyzer import TriageAnalyzer
from app.services.verification_auditor import VerificationAuditor

logger = logging.getLogger(__name__)


class TriageWorkspace:
    """
    Args:
        store: Report store, or None if Firestore failed to initialize
        provider: AI provider, or None if AI is disabled/unconfigured
        confirm_window: Deletion confirmation window in seconds
        ai_unavailable_reason: Message surfaced when provider is None
    """

    def __init__(
        self,
        store: Optional[ReportStore],
        provider: Optional[AIProvider],
        confirm_window: float = DEFAULT_CONFIRM_WINDOW_SECONDS,
        ai_unavailable_reason: str = "AI features are unavailable",
    ):
        self.store = store
        self.provider = provider
        self.ai_unavailable_reason = ai_unavailable_reason

        self.reports: List[Report] = []
        self.analysis: Optional[AnalysisResult] = None
        self.session: Optional[ConsultationSession] = None

        self.analyzer = TriageAnalyzer(provider) if provider else None
        self.auditor = VerificationAuditor(provider) if provider else None
        self.deletion = DeletionWorkflow(
            delete_fn=self._delete_from_store,
            on_deleted=self._remove_report,
            confirm_window=confirm_window,
        )

    def _require_store(self) -> ReportStore:
        if self.store is None:
            raise StoreError("Database not initialized. Please check Firebase configuration.")
        return self.store

    def _require_provider(self) -> AIProvider:
        if self.provider is None:
            raise AIUnavailableError(self.ai_unavailable_reason)
        return self.provider

    # Reports

    async def refresh(self, now: Optional[datetime] = None) -> List[Report]:
        """Reload the working set from the store."""
        self.reports = await self._require_store().fetch_reports(now=now)
        return list(self.reports)

    def get_report(self, report_id: str) -> Report:
        for report in self.reports:
            if report.id == report_id:
                return report
        raise ReportNotFoundError(f"Report {report_id} not found")

    def _remove_report(self, report_id: str) -> None:
        self.reports = [report for report in self.reports if report.id != report_id]

    async def _delete_from_store(self, report_id: str) -> None:
        await self._require_store().delete_report(report_id)

    async def request_delete(self, report_id: str) -> DeletionOutcome:
        """
        One step of the two-step deletion workflow.

        Only reports in the working set can be deleted.
        """
        self._require_store()
        if not report_id:
            raise PreconditionError("Invalid ID provided")
        self.get_report(report_id)
        return await self.deletion.request_delete(report_id)

    # Triage

    async def generate_plan(self) -> Optional[AnalysisResult]:
        """
        Run triage on the current working set.

        On a result, the analysis and its session are replaced together.
        On an empty outcome or a failure, the previous snapshot is kept.
        """
        self._require_provider()
        reports = list(self.reports)
        result = await self.analyzer.analyze(reports)
        if result is None:
            return None

        self.session = ConsultationSession(self.provider, reports, result)
        self.analysis = result
        return result

    async def ask(self, text: str) -> str:
        """Send a follow-up question to the current consultation session."""
        self._require_provider()
        if self.session is None:
            raise PreconditionError("Generate an analysis before starting a consultation")
        return await self.session.send(text)

    async def verify(self, report_id: str) -> VerificationResult:
        """Audit one report's image against its description."""
        self._require_provider()
        report = self.get_report(report_id)
        return await self.auditor.verify(report)


def build_workspace(config) -> TriageWorkspace:
    """
    Wire the workspace from settings.

    Firestore or AI misconfiguration does not prevent startup; the affected
    endpoints report the problem instead.
    """
    from app.config.firebase import initialize_firestore
    from app.services.ai_plugin.registry import get_ai_provider

    store = None
    try:
        store = ReportStore(initialize_firestore(config), config.REPORTS_COLLECTION)
    except Exception as e:
        logger.warning(f"⚠️ Firestore initialization failed: {e}")
        logger.warning("The app will start but report operations will fail.")

    provider = None
    ai_unavailable_reason = "AI features are unavailable"
    try:
        provider = get_ai_provider(config)
    except (AIUnavailableError, ValueError) as e:
        ai_unavailable_reason = str(e)
        logger.warning(f"⚠️ {ai_unavailable_reason}")

    return TriageWorkspace(
        store=store,
        provider=provider,
        confirm_window=config.DELETE_CONFIRM_WINDOW_SECONDS,
        ai_unavailable_reason=ai_unavailable_reason,
    )

"""
Report endpoints - working set listing, image audit and guarded deletion.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from app.models.analysis import VerificationResult
from app.models.report import Report
from app.routes.dependencies import get_workspace
from app.services.deletion_workflow import DeletionOutcome
from app.services.triage_workspace import TriageWorkspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("", response_model=List[Report])
async def get_reports(workspace: TriageWorkspace = Depends(get_workspace)):
    """
    Reload reports from Firestore and return the working set.

    Failures surface as 502 with a retry affordance.
    """
    reports = await workspace.refresh()
    logger.info(f"📋 GET /reports - {len(reports)} reports in working set")
    return reports


@router.get("/{report_id}", response_model=Report)
async def get_report(report_id: str, workspace: TriageWorkspace = Depends(get_workspace)):
    return workspace.get_report(report_id)


@router.post("/{report_id}/verify", response_model=VerificationResult)
async def verify_report(report_id: str, workspace: TriageWorkspace = Depends(get_workspace)):
    """
    Audit the report's photo against its description.

    Returns whether the image confirms the description, whether the issue
    is under municipal jurisdiction, and three short findings.
    """
    logger.info(f"🔍 POST /reports/{report_id}/verify")
    return await workspace.verify(report_id)


@router.delete("/{report_id}", response_model=DeletionOutcome)
async def delete_report(report_id: str, workspace: TriageWorkspace = Depends(get_workspace)):
    """
    Two-step delete.

    The first call arms a confirmation window and returns state=confirming.
    A second call inside the window deletes the report and returns
    deleted=true. If the window lapses, the next call starts over.
    """
    outcome = await workspace.request_delete(report_id)
    logger.info(f"🗑️ DELETE /reports/{report_id} - state={outcome.state.value} deleted={outcome.deleted}")
    return outcome

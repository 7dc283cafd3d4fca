"""
Triage endpoints - batch analysis and grounded follow-up consultation.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.models.analysis import AnalysisResult
from app.models.base import AnalysisStatus, AnalyzeResponse, ChatResponse
from app.models.chat import ChatMessage, ChatRequest
from app.routes.dependencies import get_workspace
from app.services.consultation_session import GREETING
from app.services.triage_workspace import TriageWorkspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/triage", tags=["Triage"])

EMPTY_ANALYSIS_MESSAGE = "AI returned empty results."
NO_REPORTS_MESSAGE = "No reports to analyze."


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_reports(workspace: TriageWorkspace = Depends(get_workspace)):
    """
    Run triage over the current working set.

    A successful run replaces the previous analysis and starts a new
    consultation session. An empty outcome is reported with status=empty
    and leaves the previous analysis in place.
    """
    logger.info(f"⚡ POST /triage/analyze - {len(workspace.reports)} reports")
    result = await workspace.generate_plan()

    if result is None:
        message = EMPTY_ANALYSIS_MESSAGE if workspace.reports else NO_REPORTS_MESSAGE
        return AnalyzeResponse(success=False, status=AnalysisStatus.EMPTY, message=message)

    return AnalyzeResponse(status=AnalysisStatus.OK, analysis=result, greeting=GREETING)


@router.get("/analysis", response_model=AnalysisResult)
async def get_analysis(workspace: TriageWorkspace = Depends(get_workspace)):
    if workspace.analysis is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No analysis has been generated yet")
    return workspace.analysis


@router.get("/chat", response_model=List[ChatMessage])
async def get_chat(workspace: TriageWorkspace = Depends(get_workspace)):
    if workspace.session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No consultation session is active")
    return workspace.session.messages


@router.post("/chat", response_model=ChatResponse)
async def send_chat(request: ChatRequest, workspace: TriageWorkspace = Depends(get_workspace)):
    """Ask a follow-up question about the current analysis."""
    # A new analysis may replace the session while the turn is in flight
    session = workspace.session
    reply = await workspace.ask(request.message)
    return ChatResponse(reply=reply, messages=session.messages)

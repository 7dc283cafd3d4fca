"""Shared fakes for the store and model collaborators."""

import base64
import json
from typing import Any, Dict, List, Optional, Sequence

import pytest

from app.models.chat import ChatMessage
from app.models.report import Report
from app.services.ai_plugin.base import AIProvider, ChatHandle, InlineImage


# ── Fakes ────────────────────────────────────────────────────────────────


class FakeChatHandle(ChatHandle):
    """Replays scripted replies; an Exception entry is raised instead."""

    def __init__(self, replies: List[Any]):
        self.replies = replies
        self.calls: List[List[ChatMessage]] = []

    async def send(self, history: Sequence[ChatMessage]) -> Optional[str]:
        self.calls.append(list(history))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeProvider(AIProvider):
    """Records requests and returns scripted JSON responses."""

    def __init__(self, responses: Optional[List[Any]] = None, chat_replies: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.chat_replies = list(chat_replies or [])
        self.requests: List[Dict[str, Any]] = []
        self.chats: List[FakeChatHandle] = []
        self.system_instructions: List[str] = []

    def get_model_info(self) -> Dict[str, str]:
        return {"name": "fake-model", "provider": "fake"}

    async def generate_json(self, prompt: str, schema: Dict[str, Any], image: Optional[InlineImage] = None):
        self.requests.append({"prompt": prompt, "schema": schema, "image": image})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def create_chat(self, system_instruction: str) -> ChatHandle:
        handle = FakeChatHandle(self.chat_replies)
        self.chats.append(handle)
        self.system_instructions.append(system_instruction)
        return handle


class FakeStore:
    """In-memory stand-in for ReportStore."""

    def __init__(self, reports: Optional[List[Report]] = None, delete_error: Optional[Exception] = None):
        self.reports = list(reports or [])
        self.delete_error = delete_error
        self.deleted: List[str] = []
        self.collection_name = "reports"

    async def fetch_reports(self, now=None) -> List[Report]:
        return list(self.reports)

    async def delete_report(self, report_id: str) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append(report_id)
        self.reports = [report for report in self.reports if report.id != report_id]


# ── Fixtures ─────────────────────────────────────────────────────────────


@pytest.fixture
def make_report():
    def _make(report_id: str = "r1", **overrides) -> Report:
        fields = {
            "id": report_id,
            "address": "Jalan Reko, Kajang",
            "date_time": "2025-01-15T07:45:00+08:00",
            "description": "Fallen tree blocking both lanes",
            "image_base64": "",
            "latitude": 3.007,
            "longitude": 101.797,
            "timestamp_string": "January 15, 2025",
        }
        fields.update(overrides)
        return Report(**fields)

    return _make


@pytest.fixture
def image_data_url() -> str:
    payload = base64.b64encode(b"\xff\xd8\xff\xe0" + b"fake-jpeg-bytes" * 10).decode("ascii")
    return f"data:image/png;base64,{payload}"


@pytest.fixture
def triage_json():
    def _build(*items: Dict[str, Any], overview: str = "Two hazards need attention today.") -> str:
        return json.dumps({"strategicOverview": overview, "prioritizedReports": list(items)})

    return _build


@pytest.fixture
def verdict():
    def _verdict(report_id: str, severity: str = "Critical", is_relevant: bool = True) -> Dict[str, Any]:
        return {
            "reportId": report_id,
            "severity": severity,
            "displayTitle": "Fallen Tree Blocking Road",
            "actionPlan": "Dispatch tree removal crew and close the lane.",
            "recommendedResource": "Public Works",
            "justification": "Road obstruction with high accident risk.",
            "isRelevant": is_relevant,
        }

    return _verdict


@pytest.fixture
def fake_provider_cls():
    return FakeProvider


@pytest.fixture
def fake_store_cls():
    return FakeStore

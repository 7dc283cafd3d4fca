"""Tests for the Firestore report store adapter."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from app.services.errors import PermissionDeniedError, PreconditionError, StoreError
from app.services.report_store import PERMISSION_DENIED_MESSAGE, ReportStore


def _doc(doc_id: str, data: dict) -> MagicMock:
    doc = MagicMock()
    doc.id = doc_id
    doc.to_dict.return_value = data
    return doc


@pytest.fixture
def db() -> MagicMock:
    return MagicMock()


@pytest.mark.asyncio
async def test_fetch_reports_normalizes_each_document(db):
    db.collection.return_value.stream.return_value = [
        _doc("a", {"address": "Jalan Reko", "latitude": "3.007", "longitude": "101.797"}),
        _doc("b", {"imageBase64": "..."}),
    ]
    store = ReportStore(db, "reports")

    reports = await store.fetch_reports(now=datetime(2025, 1, 1, tzinfo=timezone.utc))

    db.collection.assert_called_with("reports")
    assert [report.id for report in reports] == ["a", "b"]
    assert reports[0].latitude == 3.007
    assert reports[1].image_base64 == ""


@pytest.mark.asyncio
async def test_empty_collection_returns_empty_list(db):
    db.collection.return_value.stream.return_value = []
    assert await ReportStore(db).fetch_reports() == []


@pytest.mark.asyncio
async def test_list_failure_is_wrapped(db):
    db.collection.return_value.stream.side_effect = google_exceptions.ServiceUnavailable("backend down")

    with pytest.raises(StoreError) as exc_info:
        await ReportStore(db).list_records()

    assert "backend down" in exc_info.value.message


@pytest.mark.asyncio
async def test_delete_calls_document_delete(db):
    store = ReportStore(db, "reports")

    await store.delete_report("abc")

    db.collection.return_value.document.assert_called_once_with("abc")
    db.collection.return_value.document.return_value.delete.assert_called_once()


@pytest.mark.asyncio
async def test_delete_without_id_makes_no_call(db):
    with pytest.raises(PreconditionError):
        await ReportStore(db).delete_report("")

    db.collection.assert_not_called()


@pytest.mark.asyncio
async def test_permission_denied_has_specific_message(db):
    db.collection.return_value.document.return_value.delete.side_effect = google_exceptions.PermissionDenied(
        "Missing or insufficient permissions."
    )

    with pytest.raises(PermissionDeniedError) as exc_info:
        await ReportStore(db).delete_report("abc")

    assert exc_info.value.message == PERMISSION_DENIED_MESSAGE


@pytest.mark.asyncio
async def test_other_delete_failure_keeps_underlying_message(db):
    db.collection.return_value.document.return_value.delete.side_effect = RuntimeError("deadline exceeded")

    with pytest.raises(StoreError) as exc_info:
        await ReportStore(db).delete_report("abc")

    assert not isinstance(exc_info.value, PermissionDeniedError)
    assert exc_info.value.message == "deadline exceeded"

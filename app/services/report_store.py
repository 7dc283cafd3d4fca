"""
Report store - Firestore list/delete adapter for citizen reports.

The firebase_admin SDK is blocking; calls run in the event loop's default
executor so other in-flight requests are not held up. Failures are wrapped
in StoreError and propagated; nothing is retried here.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from google.api_core import exceptions as google_exceptions

from app.models.report import Report
from app.services.errors import PermissionDeniedError, PreconditionError, StoreError
from app.services.report_normalizer import normalize_report

logger = logging.getLogger(__name__)

PERMISSION_DENIED_MESSAGE = "Permission denied: You do not have rights to delete this report."

RawRecord = Tuple[str, Dict[str, Any]]


class ReportStore:
    """
    Reports collection in Firestore.

    Args:
        db: firestore.Client (or anything with the same collection API)
        collection_name: Collection holding citizen reports
    """

    def __init__(self, db, collection_name: str = "reports"):
        self.db = db
        self.collection_name = collection_name

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _list_records_sync(self) -> List[RawRecord]:
        records = []
        for doc in self.db.collection(self.collection_name).stream():
            data = doc.to_dict() or {}
            # Field names vary between citizen app versions
            logger.debug(f"Document [{doc.id}] keys: {list(data.keys())}")
            records.append((doc.id, data))
        return records

    async def list_records(self) -> List[RawRecord]:
        """
        Fetch every raw record in the collection.

        Raises:
            StoreError: If Firestore cannot be reached or the query fails
        """
        logger.info(f"Fetching reports from Firestore collection '{self.collection_name}'")
        try:
            records = await self._run(self._list_records_sync)
        except Exception as e:
            logger.error(f"❌ Error fetching reports from '{self.collection_name}': {e}", exc_info=True)
            raise StoreError(str(e) or "Unknown Firestore Error") from e

        if not records:
            logger.warning(f"⚠️ Connection successful, but collection '{self.collection_name}' is empty")
        return records

    async def fetch_reports(self, now: Optional[datetime] = None) -> List[Report]:
        """Fetch and normalize all reports."""
        records = await self.list_records()
        reports = [normalize_report(doc_id, data, now=now) for doc_id, data in records]
        logger.info(f"✅ Parsed {len(reports)} reports")
        return reports

    def _delete_sync(self, report_id: str) -> None:
        self.db.collection(self.collection_name).document(report_id).delete()

    async def delete_report(self, report_id: str) -> None:
        """
        Delete one report document.

        Raises:
            PreconditionError: If report_id is empty (no call is made)
            PermissionDeniedError: If Firestore security rules reject the delete
            StoreError: For any other failure
        """
        if not report_id:
            logger.error("Invalid ID provided for deletion")
            raise PreconditionError("Invalid ID provided")

        logger.info(f"Deleting report {report_id} from collection '{self.collection_name}'")
        try:
            await self._run(self._delete_sync, report_id)
        except google_exceptions.PermissionDenied as e:
            logger.error(f"❌ Permission denied deleting report {report_id}: {e}")
            raise PermissionDeniedError(PERMISSION_DENIED_MESSAGE) from e
        except Exception as e:
            logger.error(f"❌ Error deleting report {report_id}: {e}", exc_info=True)
            raise StoreError(str(e) or "Failed to delete report") from e

        logger.info(f"✅ Report {report_id} deleted from Firestore")

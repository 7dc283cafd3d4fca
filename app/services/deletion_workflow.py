"""
Deletion Workflow - two-step confirmation guarding report deletion.

State machine, tracked per report id:
    IDLE → CONFIRMING → DELETING → IDLE

- First request arms a confirmation timer (default 3 seconds).
- A second request before the timer fires performs the delete.
- If the timer fires first, the report reverts to IDLE with no action.
- The working set is only updated after the store confirms the delete.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from app.services.errors import OperationInProgressError, PreconditionError

logger = logging.getLogger(__name__)

DEFAULT_CONFIRM_WINDOW_SECONDS = 3.0


class DeletionState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    DELETING = "deleting"


class DeletionOutcome(BaseModel):
    """Result of one delete request."""
    report_id: str
    state: DeletionState = Field(..., description="State after this request")
    deleted: bool = False
    message: Optional[str] = None


class DeletionWorkflow:
    """
    Per-report confirm-then-delete state machine.

    Args:
        delete_fn: Coroutine performing the store delete; raises on failure
        on_deleted: Called with the report id after a confirmed delete
        confirm_window: Seconds the confirmation stays armed
    """

    ALLOWED_TRANSITIONS: Dict[DeletionState, List[DeletionState]] = {
        DeletionState.IDLE: [DeletionState.CONFIRMING],
        DeletionState.CONFIRMING: [DeletionState.DELETING, DeletionState.IDLE],
        DeletionState.DELETING: [DeletionState.IDLE],
    }

    def __init__(
        self,
        delete_fn: Callable[[str], Awaitable[None]],
        on_deleted: Optional[Callable[[str], None]] = None,
        confirm_window: float = DEFAULT_CONFIRM_WINDOW_SECONDS,
    ):
        self.delete_fn = delete_fn
        self.on_deleted = on_deleted
        self.confirm_window = confirm_window
        self._states: Dict[str, DeletionState] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    def state_of(self, report_id: str) -> DeletionState:
        return self._states.get(report_id, DeletionState.IDLE)

    def pending(self) -> Dict[str, DeletionState]:
        """Every report id currently outside IDLE."""
        return dict(self._states)

    def _transition(self, report_id: str, to_state: DeletionState) -> None:
        from_state = self.state_of(report_id)
        if to_state not in self.ALLOWED_TRANSITIONS[from_state]:
            raise ValueError(f"Invalid deletion transition for {report_id}: {from_state.value} → {to_state.value}")

        if to_state == DeletionState.IDLE:
            self._states.pop(report_id, None)
        else:
            self._states[report_id] = to_state
        logger.debug(f"Deletion state for {report_id}: {from_state.value} → {to_state.value}")

    def _cancel_timer(self, report_id: str) -> None:
        timer = self._timers.pop(report_id, None)
        if timer is not None:
            timer.cancel()

    def _expire(self, report_id: str) -> None:
        self._timers.pop(report_id, None)
        if self.state_of(report_id) == DeletionState.CONFIRMING:
            self._transition(report_id, DeletionState.IDLE)
            logger.info(f"Delete confirmation for report {report_id} expired")

    async def request_delete(self, report_id: str) -> DeletionOutcome:
        """
        Advance the workflow for one report.

        Returns:
            DeletionOutcome: CONFIRMING after the first request,
            IDLE with deleted=True after a confirmed delete

        Raises:
            PreconditionError: Empty report id
            OperationInProgressError: Delete already running for this report
            StoreError: The store delete failed (state is back to IDLE)
        """
        if not report_id:
            raise PreconditionError("Invalid ID provided")

        state = self.state_of(report_id)

        if state == DeletionState.DELETING:
            raise OperationInProgressError(f"Report {report_id} is already being deleted")

        if state == DeletionState.IDLE:
            self._transition(report_id, DeletionState.CONFIRMING)
            loop = asyncio.get_running_loop()
            self._timers[report_id] = loop.call_later(self.confirm_window, self._expire, report_id)
            logger.info(f"Delete requested for report {report_id}, awaiting confirmation ({self.confirm_window}s)")
            return DeletionOutcome(
                report_id=report_id,
                state=DeletionState.CONFIRMING,
                message="Request delete again to confirm",
            )

        self._cancel_timer(report_id)
        self._transition(report_id, DeletionState.DELETING)
        try:
            await self.delete_fn(report_id)
        finally:
            self._transition(report_id, DeletionState.IDLE)

        if self.on_deleted is not None:
            self.on_deleted(report_id)
        logger.info(f"✅ Report {report_id} deleted")
        return DeletionOutcome(
            report_id=report_id,
            state=DeletionState.IDLE,
            deleted=True,
            message="Report deleted",
        )

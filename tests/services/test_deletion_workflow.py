"""Tests for the two-step deletion state machine.

Tests cover:
- idle → confirming → deleting → idle on store success
- Timer revert with no store call
- Failure handling (no removal, state back to idle)
- Per-id independence and in-progress guard
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.services.deletion_workflow import DeletionState, DeletionWorkflow
from app.services.errors import (
    OperationInProgressError,
    PermissionDeniedError,
    PreconditionError,
    StoreError,
)

SHORT_WINDOW = 0.05


@pytest.fixture
def delete_fn() -> AsyncMock:
    return AsyncMock(return_value=None)


@pytest.fixture
def on_deleted() -> MagicMock:
    return MagicMock()


@pytest.fixture
def workflow(delete_fn, on_deleted) -> DeletionWorkflow:
    return DeletionWorkflow(delete_fn=delete_fn, on_deleted=on_deleted, confirm_window=SHORT_WINDOW)


@pytest.mark.asyncio
async def test_first_request_arms_confirmation(workflow, delete_fn):
    outcome = await workflow.request_delete("r1")

    assert outcome.state == DeletionState.CONFIRMING
    assert outcome.deleted is False
    assert workflow.state_of("r1") == DeletionState.CONFIRMING
    delete_fn.assert_not_awaited()


@pytest.mark.asyncio
async def test_second_request_deletes_and_returns_to_idle(workflow, delete_fn, on_deleted):
    await workflow.request_delete("r1")
    outcome = await workflow.request_delete("r1")

    assert outcome.state == DeletionState.IDLE
    assert outcome.deleted is True
    delete_fn.assert_awaited_once_with("r1")
    on_deleted.assert_called_once_with("r1")
    assert workflow.state_of("r1") == DeletionState.IDLE
    assert workflow.pending() == {}


@pytest.mark.asyncio
async def test_timer_reverts_without_store_call(workflow, delete_fn, on_deleted):
    await workflow.request_delete("r1")

    await asyncio.sleep(SHORT_WINDOW * 3)

    assert workflow.state_of("r1") == DeletionState.IDLE
    delete_fn.assert_not_awaited()
    on_deleted.assert_not_called()


@pytest.mark.asyncio
async def test_request_after_expiry_starts_over(workflow, delete_fn):
    await workflow.request_delete("r1")
    await asyncio.sleep(SHORT_WINDOW * 3)

    outcome = await workflow.request_delete("r1")

    assert outcome.state == DeletionState.CONFIRMING
    delete_fn.assert_not_awaited()


@pytest.mark.asyncio
async def test_confirmed_delete_cancels_timer(workflow, delete_fn):
    await workflow.request_delete("r1")
    await workflow.request_delete("r1")

    await asyncio.sleep(SHORT_WINDOW * 3)

    # A fresh request after the old timer would have fired starts a new confirmation
    outcome = await workflow.request_delete("r1")
    assert outcome.state == DeletionState.CONFIRMING
    assert delete_fn.await_count == 1


@pytest.mark.asyncio
async def test_ids_are_independent(workflow, delete_fn, on_deleted):
    await workflow.request_delete("r1")
    outcome = await workflow.request_delete("r2")

    assert outcome.state == DeletionState.CONFIRMING
    assert workflow.pending() == {"r1": DeletionState.CONFIRMING, "r2": DeletionState.CONFIRMING}

    await workflow.request_delete("r2")
    delete_fn.assert_awaited_once_with("r2")
    assert workflow.state_of("r1") == DeletionState.CONFIRMING


@pytest.mark.asyncio
async def test_failure_returns_to_idle_without_removal(delete_fn, on_deleted):
    delete_fn.side_effect = PermissionDeniedError("Permission denied: You do not have rights to delete this report.")
    workflow = DeletionWorkflow(delete_fn=delete_fn, on_deleted=on_deleted, confirm_window=SHORT_WINDOW)

    await workflow.request_delete("r1")
    with pytest.raises(PermissionDeniedError, match="Permission denied"):
        await workflow.request_delete("r1")

    assert workflow.state_of("r1") == DeletionState.IDLE
    on_deleted.assert_not_called()


@pytest.mark.asyncio
async def test_generic_failure_surfaces_underlying_message(delete_fn, on_deleted):
    delete_fn.side_effect = StoreError("deadline exceeded")
    workflow = DeletionWorkflow(delete_fn=delete_fn, on_deleted=on_deleted, confirm_window=SHORT_WINDOW)

    await workflow.request_delete("r1")
    with pytest.raises(StoreError, match="deadline exceeded"):
        await workflow.request_delete("r1")

    on_deleted.assert_not_called()


@pytest.mark.asyncio
async def test_request_while_deleting_is_rejected(on_deleted):
    release = asyncio.Event()

    async def slow_delete(report_id: str) -> None:
        await release.wait()

    workflow = DeletionWorkflow(delete_fn=slow_delete, on_deleted=on_deleted, confirm_window=SHORT_WINDOW)
    await workflow.request_delete("r1")
    task = asyncio.create_task(workflow.request_delete("r1"))
    await asyncio.sleep(0)

    assert workflow.state_of("r1") == DeletionState.DELETING
    with pytest.raises(OperationInProgressError):
        await workflow.request_delete("r1")

    release.set()
    outcome = await task
    assert outcome.deleted is True


@pytest.mark.asyncio
async def test_empty_id_is_rejected(workflow, delete_fn):
    with pytest.raises(PreconditionError):
        await workflow.request_delete("")

    assert workflow.pending() == {}
    delete_fn.assert_not_awaited()


def test_transition_table_matches_state_machine():
    table = DeletionWorkflow.ALLOWED_TRANSITIONS
    assert table[DeletionState.IDLE] == [DeletionState.CONFIRMING]
    assert set(table[DeletionState.CONFIRMING]) == {DeletionState.DELETING, DeletionState.IDLE}
    assert table[DeletionState.DELETING] == [DeletionState.IDLE]

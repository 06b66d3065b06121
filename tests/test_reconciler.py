"""Summary: Tests for the inbox reconciler.

Importance: Ensures arrival chimes and read transitions follow the snapshot rules.
Alternatives: Verify chime behavior only through the full console.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from contactdesk.errors import StoreError, StoreErrorKind
from contactdesk.models import Message
from contactdesk.reconciler import InboxReconciler, is_new


BASE = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _messages(count: int, read: bool = False) -> tuple[Message, ...]:
    return tuple(
        Message(
            id=f"m{index}",
            name=f"Sender {index}",
            phone="",
            email="",
            service="",
            message="",
            timestamp=BASE - timedelta(minutes=index),
            read=read,
        )
        for index in range(count)
    )


def _reconciler(calls: list[str]) -> InboxReconciler:
    return InboxReconciler(calls.append)


def test_first_snapshot_does_not_chime() -> None:
    """Summary: Verify the initial load never chimes.

    Importance: Logging in to a full inbox is not an arrival.
    Alternatives: Chime for every unread message on load.
    """

    reconciler = _reconciler([])
    assert reconciler.apply_snapshot(_messages(5)) is False
    assert reconciler.previous_count == 5


def test_growth_chimes_once() -> None:
    reconciler = _reconciler([])
    reconciler.apply_snapshot(_messages(3))
    assert reconciler.apply_snapshot(_messages(5)) is True
    assert reconciler.apply_snapshot(_messages(5)) is False


def test_equal_or_shrinking_snapshot_does_not_chime() -> None:
    reconciler = _reconciler([])
    reconciler.apply_snapshot(_messages(5))
    assert reconciler.apply_snapshot(_messages(5)) is False
    assert reconciler.apply_snapshot(_messages(4)) is False
    assert reconciler.messages == _messages(4)


def test_empty_inbox_then_first_message_is_still_initial_load() -> None:
    """Summary: Verify a zero count counts as "no prior snapshot".

    Importance: Documents the count-based detection rule for empty inboxes.
    Alternatives: Track a separate flag for the first snapshot.
    """

    reconciler = _reconciler([])
    reconciler.apply_snapshot(())
    assert reconciler.apply_snapshot(_messages(1)) is False


def test_mark_read_issues_single_update_for_unread_message() -> None:
    calls: list[str] = []
    reconciler = _reconciler(calls)
    reconciler.apply_snapshot(_messages(2))
    assert reconciler.mark_read("m1") is True
    assert reconciler.mark_read("m1") is False
    assert calls == ["m1"]


def test_mark_read_skips_already_read_message() -> None:
    calls: list[str] = []
    reconciler = _reconciler(calls)
    reconciler.apply_snapshot(_messages(2, read=True))
    reconciler.mark_read("m0")
    reconciler.mark_read("m0")
    assert calls == []


def test_mark_read_skips_unknown_message() -> None:
    calls: list[str] = []
    reconciler = _reconciler(calls)
    reconciler.apply_snapshot(_messages(1))
    assert reconciler.mark_read("missing") is False
    assert calls == []


def test_failed_update_is_tolerated_and_can_be_retried() -> None:
    """Summary: Verify set_read failures leave the message unread without raising.

    Importance: A failed flag update is not worth alarming the operator.
    Alternatives: Retry automatically with backoff.
    """

    attempts: list[str] = []

    def failing(message_id: str) -> None:
        attempts.append(message_id)
        raise StoreError(StoreErrorKind.UPDATE_FAILED)

    reconciler = InboxReconciler(failing)
    reconciler.apply_snapshot(_messages(1))
    reconciler.mark_read("m0")
    assert is_new(reconciler.messages[0])
    reconciler.mark_read("m0")
    assert attempts == ["m0", "m0"]


def test_reset_returns_to_initial_load() -> None:
    reconciler = _reconciler([])
    reconciler.apply_snapshot(_messages(3))
    reconciler.reset()
    assert reconciler.previous_count == 0
    assert reconciler.messages == ()
    assert reconciler.apply_snapshot(_messages(4)) is False

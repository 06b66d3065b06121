"""Summary: Inbox reconciler deriving arrival chimes and read transitions from snapshots.

Importance: Holds the only stateful logic between the store stream and the console view.
Alternatives: Diff full message histories by id on every update.
"""

from __future__ import annotations

import logging
from typing import Callable

from contactdesk.errors import StoreError
from contactdesk.models import Message


logger = logging.getLogger(__name__)


class InboxReconciler:
    """Summary: Tracks the latest snapshot and the previous message count.

    Importance: Decides when a new inquiry warrants the arrival chime.
    Alternatives: Compare id sets between snapshots.

    Arrival detection compares counts only. A snapshot that drops one message
    and adds two reads as a single arrival; one that swaps a message for
    another reads as no arrival.
    """

    def __init__(self, set_read: Callable[[str], None]) -> None:
        self._set_read = set_read
        self.previous_count = 0
        self.messages: tuple[Message, ...] = ()
        self._pending_reads: set[str] = set()

    def apply_snapshot(self, snapshot: tuple[Message, ...]) -> bool:
        """Summary: Replace the message list and report whether to chime.

        Importance: One chime per growing snapshot, never on the first load.
        Alternatives: Chime once per new message.
        """

        new_count = len(snapshot)
        chime = self.previous_count > 0 and new_count > self.previous_count
        self.previous_count = new_count
        self.messages = snapshot
        unread = {message.id for message in snapshot if not message.read}
        self._pending_reads &= unread
        if chime:
            logger.info("New message arrived (%s total).", new_count)
        return chime

    def find(self, message_id: str) -> Message | None:
        for message in self.messages:
            if message.id == message_id:
                return message
        return None

    def mark_read(self, message_id: str) -> bool:
        """Summary: Issue a read update for an unread message.

        Importance: Clears the "New" badge once the store echoes the change.
        Alternatives: Track read state locally and sync later.
        """

        message = self.find(message_id)
        if message is None or message.read or message_id in self._pending_reads:
            return False
        self._pending_reads.add(message_id)
        try:
            self._set_read(message_id)
        except StoreError as exc:
            self._pending_reads.discard(message_id)
            logger.warning("Could not mark message %s read: %s", message_id, exc)
        return True

    def reset(self) -> None:
        self.previous_count = 0
        self.messages = ()
        self._pending_reads.clear()


def is_new(message: Message) -> bool:
    return not message.read

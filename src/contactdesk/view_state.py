"""Summary: View state controller for selection and responsive layout.

Importance: Decides which panes render for the current selection and viewport width.
Alternatives: Compute layout in the front end from raw state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from contactdesk.models import LayoutMode, Message


DEFAULT_NARROW_WIDTH = 768


@dataclass(frozen=True)
class VisiblePanes:
    list_pane: bool
    detail_pane: bool


class ViewStateController:
    """Summary: Holds the selected message id and the layout mode.

    Importance: Keeps list/detail switching consistent across resizes.
    Alternatives: Store selection in the URL and derive layout per request.
    """

    def __init__(self, width: int | None = None, narrow_threshold: int = DEFAULT_NARROW_WIDTH) -> None:
        self._narrow_threshold = narrow_threshold
        self.selected_id: str | None = None
        self.width: int | None = None
        self.layout = LayoutMode.WIDE
        if width is not None:
            self.resize(width)

    def select(self, message_id: str) -> None:
        self.selected_id = message_id

    def back(self) -> None:
        if self.layout is LayoutMode.NARROW:
            self.selected_id = None

    def clear(self) -> None:
        self.selected_id = None

    def resize(self, width: int) -> LayoutMode:
        self.width = width
        self.layout = layout_for_width(width, self._narrow_threshold)
        return self.layout

    def visible_panes(self) -> VisiblePanes:
        if self.layout is LayoutMode.WIDE:
            return VisiblePanes(list_pane=True, detail_pane=True)
        if self.selected_id is None:
            return VisiblePanes(list_pane=True, detail_pane=False)
        return VisiblePanes(list_pane=False, detail_pane=True)

    def selected_message(self, messages: Iterable[Message]) -> Message | None:
        """Summary: Resolve the selection against the current snapshot.

        Importance: A selection that no longer matches a message renders the fallback instead of failing.
        Alternatives: Clear the selection whenever its message disappears.
        """

        if self.selected_id is None:
            return None
        for message in messages:
            if message.id == self.selected_id:
                return message
        return None


def layout_for_width(width: int, narrow_threshold: int = DEFAULT_NARROW_WIDTH) -> LayoutMode:
    return LayoutMode.NARROW if width <= narrow_threshold else LayoutMode.WIDE

"""Summary: Tests for the view state controller.

Importance: Ensures pane visibility follows selection and viewport width.
Alternatives: Check layout only through rendered API payloads.
"""

from __future__ import annotations

from contactdesk.models import LayoutMode, Message
from contactdesk.view_state import ViewStateController, layout_for_width


def _message(message_id: str) -> Message:
    return Message(
        id=message_id,
        name="Ann",
        phone="",
        email="",
        service="",
        message="",
        timestamp=None,
    )


def test_wide_layout_shows_both_panes_and_ignores_back() -> None:
    """Summary: Verify wide mode keeps both panes and back() is a no-op.

    Importance: Two-pane layout never hides the list.
    Alternatives: Treat back() as deselect in every mode.
    """

    view = ViewStateController(width=1024)
    view.select("m1")
    view.back()
    panes = view.visible_panes()
    assert view.layout is LayoutMode.WIDE
    assert panes.list_pane and panes.detail_pane
    assert view.selected_id == "m1"


def test_narrow_layout_switches_between_list_and_detail() -> None:
    view = ViewStateController(width=500)
    assert view.layout is LayoutMode.NARROW
    assert view.visible_panes().list_pane is True
    assert view.visible_panes().detail_pane is False
    view.select("m1")
    panes = view.visible_panes()
    assert (panes.list_pane, panes.detail_pane) == (False, True)
    view.back()
    panes = view.visible_panes()
    assert (panes.list_pane, panes.detail_pane) == (True, False)
    assert view.selected_id is None


def test_threshold_is_inclusive() -> None:
    assert layout_for_width(768) is LayoutMode.NARROW
    assert layout_for_width(769) is LayoutMode.WIDE
    assert layout_for_width(600, narrow_threshold=500) is LayoutMode.WIDE


def test_resize_recomputes_layout_synchronously() -> None:
    view = ViewStateController(width=1200)
    view.select("m1")
    assert view.resize(400) is LayoutMode.NARROW
    assert view.visible_panes().list_pane is False
    assert view.resize(900) is LayoutMode.WIDE
    assert view.visible_panes().list_pane is True


def test_dangling_selection_resolves_to_none() -> None:
    view = ViewStateController(width=1024)
    view.select("x")
    assert view.selected_message([_message("a"), _message("b")]) is None
    assert view.selected_message([_message("x")]).id == "x"


def test_clear_drops_selection() -> None:
    view = ViewStateController(width=1024)
    view.select("m1")
    view.clear()
    assert view.selected_id is None

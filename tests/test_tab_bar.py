"""
Tests for TabBarView tabs, gestures, reordering and drag-out.
"""
from PySide6.QtCore import QPoint, QRect, Qt

from GroupTabs.model.sync_state import GestureState
from GroupTabs.tab_bar import LEAVE_GROUP_ACTION
from conftest import make_group, make_window


def drag_tab(view, start, *points):
    """Presses at start, moves through points and releases at the last one."""
    view.handle_press(start, Qt.MouseButton.LeftButton)
    for point in points:
        view.handle_motion(point)
    view.handle_release(points[-1], Qt.MouseButton.LeftButton)


def test_tabs_mirror_group_order(manager, display):
    group, (a, b, c) = make_group(manager, display, "A", "B", "C")
    view = group.tab_bar

    assert view.windows == group.windows
    assert view.labels == ["A", "B", "C"]
    assert view.renderer.active_labels == ["A"]


def test_empty_title_falls_back_to_default_label(manager, display):
    a = make_window(display, "")
    group = manager.create_individual_group(a)

    assert group.tab_bar.labels == ["Window"]

    a.set_title("Editor")
    assert group.tab_bar.renderer.labels == ["Editor"]

    a.set_title("")
    assert group.tab_bar.labels == ["Window"]


def test_tab_rects_split_bar_after_close_button(manager, display):
    """Test that tabs share the bar width left of the close-group button."""
    group, _ = make_group(manager, display, "A", "B", "C")
    view = group.tab_bar
    bar = view.geometry

    assert bar == QRect(100, 60, 800, 40)
    assert view.close_button_rect() == QRect(868, 60, 32, 40)
    assert view.tab_rect(0) == QRect(100, 60, 256, 40)
    assert view.tab_rect(1) == QRect(356, 60, 256, 40)
    assert view.tab_rect(2) == QRect(612, 60, 256, 40)
    assert view.tab_rect(3) == QRect()
    assert view.tab_at(QPoint(400, 70)) == 1
    assert view.tab_at(QPoint(880, 70)) == -1


def test_click_activates_tab(manager, display):
    group, (a, b) = make_group(manager, display, "A", "B")

    group.tab_bar.renderer.click_tab(1)

    assert group.active_window is b
    assert b.has_focus()
    assert group.tab_bar.gesture.state is GestureState.CLICK


def test_gesture_resets_after_click(manager, display, qtbot):
    group, (a, b) = make_group(manager, display, "A", "B")
    view = group.tab_bar

    view.renderer.click_tab(1)

    qtbot.waitUntil(lambda: view.gesture.state is GestureState.NONE, timeout=1000)


def test_renderer_click_leaves_pointer_tracker_idle(manager, display, pointer):
    """Test that a click reported by the renderer does not leave the shared tracker pressed."""
    group, (a, b) = make_group(manager, display, "A", "B")
    tracker = manager.gesture_tracker
    released = []
    tracker.released.connect(lambda point: released.append(QPoint(point)))

    group.tab_bar.renderer.click_tab(1)

    assert not tracker.is_tracking()
    assert tracker.state is GestureState.NONE

    tracker.acquire()
    tracker.sample()
    tracker.release()

    assert released == []


def test_small_motion_stays_a_click(manager, display):
    group, (a, b) = make_group(manager, display, "A", "B")
    view = group.tab_bar
    start = view.tab_rect(1).center()

    drag_tab(view, start, start + QPoint(3, 2))

    assert group.active_window is b
    assert view.renderer.clones == []


def test_drag_reorders_past_midpoint(manager, display):
    """Test that dragging a tab across its neighbour's midpoint swaps them."""
    group, (a, b, c) = make_group(manager, display, "A", "B", "C")
    view = group.tab_bar
    y = view.geometry.center().y()

    view.handle_press(QPoint(227, y))
    view.handle_motion(QPoint(300, y))
    assert view.gesture.state is GestureState.DRAG
    assert len(view.renderer.clones) == 1

    view.handle_motion(QPoint(450, y))
    assert group.windows == [a, b, c]

    view.handle_motion(QPoint(500, y))
    assert group.windows == [b, a, c]
    assert view.renderer.labels == ["B", "A", "C"]

    view.handle_release(QPoint(505, y))
    assert view.gesture.state is GestureState.UP
    assert view.renderer.clones == []
    assert group.active_window is a
    manager.registry.assert_consistent()


def test_reorder_cooldown(manager, display, qtbot):
    """Test that the same target is refused within the cooldown, another is not."""
    group, (a, b, c) = make_group(manager, display, "A", "B", "C")
    gesture = group.tab_bar.gesture

    assert gesture.accept_reorder(b)
    assert not gesture.accept_reorder(b)
    assert gesture.accept_reorder(c)
    assert gesture.accept_reorder(b)

    qtbot.wait(200)
    assert gesture.accept_reorder(b)


def test_drag_out_onto_other_window_regroups(manager, display):
    group, (a, b) = make_group(manager, display, "A", "B")
    d = make_window(display, "D", 1000, 300, 600, 400)
    view = group.tab_bar
    y = view.geometry.center().y()

    drag_tab(view, view.tab_rect(1).center(), QPoint(700, y), QPoint(1200, 500))

    assert group.windows == [a]
    new_group = manager.group_for(b)
    assert new_group is manager.group_for(d)
    assert new_group.windows == [d, b]
    assert not display.drop_indicator_renderer.visible
    manager.registry.assert_consistent()


def test_drag_out_joins_existing_group(manager, display):
    group1, (a, b) = make_group(manager, display, "A", "B")
    group2, (c, d) = make_group(manager, display, "C", "D")
    c.move_resize(QRect(1000, 300, 600, 400))
    view = group1.tab_bar

    drag_tab(view, view.tab_rect(0).center(), QPoint(1200, 500))

    assert group1.windows == [b]
    assert group2.windows == [c, d, a]


def test_drag_out_to_empty_space_separates(manager, display):
    group, (a, b) = make_group(manager, display, "A", "B")
    view = group.tab_bar

    drag_tab(view, view.tab_rect(1).center(), QPoint(1500, 1000))

    assert group.windows == [a]
    assert manager.group_for(b) is None
    assert b.opacity == 1.0


def test_drag_out_preview_shows_indicator(manager, display):
    group, (a, b) = make_group(manager, display, "A", "B")
    d = make_window(display, "D", 1000, 300, 600, 400)
    view = group.tab_bar
    indicator = display.drop_indicator_renderer

    view.handle_press(view.tab_rect(1).center())
    view.handle_motion(QPoint(1200, 500))
    assert indicator.visible
    assert indicator.geometry == QRect(995, 295, 610, 410)

    view.handle_motion(view.tab_rect(1).center())
    assert not indicator.visible
    view.handle_release(view.tab_rect(1).center())


def test_sole_tab_drag_out_to_empty_space_keeps_group(manager, display):
    a = make_window(display, "A")
    group = manager.create_individual_group(a)
    view = group.tab_bar

    drag_tab(view, view.tab_rect(0).center(), QPoint(1500, 1000))

    assert group.windows == [a]
    assert not group.is_dissolved


def test_global_tracker_finishes_drag_outside_bar(manager, display, pointer):
    """Test that a release seen only by the pointer poll completes a drag-out."""
    group, (a, b) = make_group(manager, display, "A", "B")
    view = group.tab_bar
    tracker = manager.gesture_tracker
    start = view.tab_rect(1).center()

    pointer.move_to(start)
    pointer.press()
    view.handle_press(start)
    assert tracker.is_tracking()

    pointer.move_to(QPoint(1500, 1000))
    tracker.sample()
    assert view.gesture.state is GestureState.DRAG

    pointer.release()
    tracker.sample()

    assert view.gesture.state is GestureState.UP
    assert not tracker.is_tracking()
    assert manager.group_for(b) is None


def test_context_menu_leave_group(manager, display):
    group, (a, b) = make_group(manager, display, "A", "B")
    view = group.tab_bar

    view.renderer.click_tab(1, Qt.MouseButton.RightButton)

    window, actions, _ = view.renderer.menu
    assert window is b
    assert actions == [LEAVE_GROUP_ACTION]

    view.handle_context_action(b, LEAVE_GROUP_ACTION)

    assert view.renderer.menu is None
    assert group.windows == [a]
    assert manager.group_for(b) is None


def test_context_menu_needs_two_members(manager, display):
    a = make_window(display, "A")
    group = manager.create_individual_group(a)

    group.tab_bar.renderer.click_tab(0, Qt.MouseButton.RightButton)

    assert group.tab_bar.renderer.menu is None


def test_press_outside_menu_dismisses_it(manager, display, pointer):
    group, (a, b) = make_group(manager, display, "A", "B")
    view = group.tab_bar
    tracker = manager.gesture_tracker
    view.renderer.click_tab(0, Qt.MouseButton.RightButton)
    assert view.context_menu_window is a
    assert tracker.is_tracking()

    pointer.move_to(QPoint(1500, 900))
    pointer.press()
    tracker.sample()

    assert view.context_menu_window is None
    assert view.renderer.menu is None
    assert not tracker.is_tracking()


def test_close_tab_button(manager, display):
    group, (a, b) = make_group(manager, display, "A", "B")

    group.tab_bar.handle_close_clicked(b)
    assert group.windows == [a]

    group.tab_bar.handle_close_clicked(a)
    assert group.windows == [a]
    assert len(display.notices) == 1


def test_close_group_button_dissolves(manager, display):
    group, (a, b) = make_group(manager, display, "A", "B")
    renderer = group.tab_bar.renderer

    group.tab_bar.handle_close_group_clicked()

    assert group.is_dissolved
    assert renderer.destroyed
    assert manager.group_for(a) is None and manager.group_for(b) is None
    assert a.opacity == 1.0 and b.opacity == 1.0


def test_destroy_releases_title_subscriptions(manager, display):
    a = make_window(display, "A")
    group = manager.create_individual_group(a)
    view = group.tab_bar
    group.dissolve()

    a.set_title("Renamed")

    assert view.is_destroyed
    assert view.renderer.labels == ["A"]

"""
Tests for GroupRegistry membership bookkeeping.
"""
import pytest

from conftest import make_window


def test_attach_and_detach_keep_map_consistent(manager, display):
    """Test that membership and the window->group map change together."""
    a = make_window(display, "A")
    b = make_window(display, "B")
    group = manager.create_group()
    registry = manager.registry

    registry.attach(a, group)
    registry.attach(b, group, index=0)

    assert group.windows == [b, a]
    assert registry.group_for(a) is group
    assert registry.is_grouped(b)
    assert registry.validate() == []

    assert registry.detach(a, group)
    assert not registry.is_grouped(a)
    assert group.windows == [b]
    assert not registry.detach(a, group)
    assert registry.validate() == []


def test_attach_to_second_group_raises(manager, display):
    """Test that a window can never belong to two groups."""
    a = make_window(display, "A")
    group1 = manager.create_individual_group(a)
    group2 = manager.create_group()

    with pytest.raises(RuntimeError):
        manager.registry.attach(a, group2)

    assert manager.group_for(a) is group1
    assert a not in group2

    group2.dissolve()
    manager.registry.assert_consistent()


def test_attach_to_unregistered_group_raises(manager, display):
    a = make_window(display, "A")
    group = manager.create_group()
    group.dissolve()

    with pytest.raises(RuntimeError):
        manager.registry.attach(a, group)


def test_attach_twice_is_noop(manager, display):
    a = make_window(display, "A")
    group = manager.create_individual_group(a)

    manager.registry.attach(a, group)

    assert group.windows == [a]


def test_validate_reports_corruption(manager, display):
    """Test that validate() describes a member missing from the map."""
    a = make_window(display, "A")
    b = make_window(display, "B")
    group = manager.create_individual_group(a)

    group._windows.append(b)

    problems = manager.registry.validate()
    assert len(problems) == 1
    assert "maps to None" in problems[0]
    with pytest.raises(RuntimeError):
        manager.registry.assert_consistent()
    group._windows.remove(b)


def test_remove_group_unmaps_stale_windows(manager, display):
    a = make_window(display, "A")
    group = manager.create_individual_group(a)

    manager.registry.remove_group(group)

    assert not manager.registry.is_grouped(a)
    assert not manager.registry.has_group(group)

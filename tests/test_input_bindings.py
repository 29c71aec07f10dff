from __future__ import annotations

import logging

import pytest

from panel_config.input_bindings import BindingManager
from panel_plugin.preferences import KeyBindings


class DummyBinder:
    """Minimal stand-in for the host's global binding calls."""

    def __init__(self, *, fail_unbind: bool = False) -> None:
        self.bound: dict[int, tuple[str, object]] = {}
        self.unbound: list[int] = []
        self.fail_unbind = fail_unbind
        self._next = 0

    def bind(self, sequence, callback):
        self._next += 1
        self.bound[self._next] = (sequence, callback)
        return self._next

    def unbind(self, handle):
        if self.fail_unbind:
            raise RuntimeError("widget destroyed")
        self.unbound.append(handle)
        self.bound.pop(handle, None)

    def fire(self, sequence):
        for bound_sequence, callback in list(self.bound.values()):
            if bound_sequence == sequence:
                callback()


def test_disabled_bindings_bind_nothing():
    binder = DummyBinder()
    manager = BindingManager(binder.bind, binder.unbind, KeyBindings())
    manager.register_action("next", lambda: None)

    assert manager.activate() == 0
    assert binder.bound == {}


def test_activate_binds_only_registered_actions():
    binder = DummyBinder()
    calls = []
    manager = BindingManager(binder.bind, binder.unbind, KeyBindings(enabled=True))
    manager.register_action("next", lambda: calls.append("next"))
    manager.register_action("toggle_widget", lambda: calls.append("toggle"))

    assert manager.activate() == 2
    binder.fire("Ctrl+Alt+N")
    binder.fire("Ctrl+Alt+T")

    assert sorted(manager.bound_sequences) == ["Ctrl+Alt+N", "Ctrl+Alt+T"]
    assert calls == ["next", "toggle"]


def test_reactivating_replaces_previous_bindings():
    binder = DummyBinder()
    manager = BindingManager(binder.bind, binder.unbind, KeyBindings(enabled=True))
    manager.register_action("next", lambda: None)

    manager.activate()
    manager.activate()

    assert len(binder.bound) == 1
    assert len(binder.unbound) == 1


def test_event_style_handlers_receive_none():
    binder = DummyBinder()
    received = []
    manager = BindingManager(binder.bind, binder.unbind, KeyBindings(enabled=True))
    manager.register_action("previous", lambda event: received.append(event))

    manager.activate()
    binder.fire("Ctrl+Alt+B")

    assert received == [None]


def test_default_argument_handlers_are_called_without_event():
    binder = DummyBinder()
    received = []
    manager = BindingManager(binder.bind, binder.unbind, KeyBindings(enabled=True))
    manager.register_action("volume_up", lambda name="volume_up": received.append(name))

    manager.activate()
    binder.fire("Ctrl+Alt+=")

    assert received == ["volume_up"]


def test_activate_skips_empty_sequences(caplog: pytest.LogCaptureFixture) -> None:
    binder = DummyBinder()
    manager = BindingManager(binder.bind, binder.unbind, KeyBindings(enabled=True, next="   ", previous="<Ctrl+P>"))
    manager.register_action("next", lambda: None)
    manager.register_action("previous", lambda: None)

    with caplog.at_level(logging.WARNING, logger="PlayerPanel.Bindings"):
        bound = manager.activate()

    assert bound == 1
    assert manager.bound_sequences == ["Ctrl+P"]
    assert any("Skipping empty key binding for next" in record.getMessage() for record in caplog.records)


def test_deactivate_tolerates_host_failures():
    binder = DummyBinder(fail_unbind=True)
    manager = BindingManager(binder.bind, binder.unbind, KeyBindings(enabled=True))
    manager.register_action("next", lambda: None)
    manager.activate()

    manager.deactivate()

    assert manager.bound_sequences == []

"""Tests for KeyboardStore."""

from ditloop.keyboard import KeyBinding, KeyboardStore, KeyMode


def _bind(key, action, panel_id="", mode=KeyMode.NORMAL):
    return KeyBinding(key=key, mode=mode, action=action, panel_id=panel_id)


class TestBindings:
    """Tests for binding registration and resolution."""

    def test_unregister_leaves_other_panels(self):
        """Test unregistering panel-a keeps panel-b's binding on the same key."""
        store = KeyboardStore()
        store.register_bindings([_bind("j", "down-a", "panel-a"), _bind("j", "down-b", "panel-b")])

        removed = store.unregister_bindings("panel-a")

        assert removed == 1
        assert store.bindings == [_bind("j", "down-b", "panel-b")]

    def test_unregister_unknown_is_noop(self):
        """Test unregistering an unknown panel changes nothing."""
        store = KeyboardStore()
        store.register_bindings([_bind("j", "down", "panel-a")])
        before = list(store.bindings)

        assert store.unregister_bindings("ghost") == 0
        assert store.bindings == before

    def test_remove_bindings_by_identity(self):
        """Test only the given objects are removed, not equal copies."""
        store = KeyboardStore()
        mine, theirs = _bind("j", "down", "panel-a"), _bind("j", "down", "panel-a")
        store.register_bindings([theirs, mine])

        assert store.remove_bindings([mine]) == 1
        assert len(store.bindings) == 1
        assert store.bindings[0] is theirs
        assert store.remove_bindings([mine]) == 0

    def test_resolve_prefers_focused_panel(self):
        """Test a focused panel's binding wins over a global one."""
        store = KeyboardStore(["commits", "tasks"])
        store.register_bindings([_bind("j", "scroll-down"), _bind("j", "next-commit", "commits")])

        assert store.resolve("j").action == "next-commit"
        store.set_focus("tasks")
        assert store.resolve("j").action == "scroll-down"

    def test_resolve_respects_mode(self):
        """Test bindings only match in their own mode."""
        store = KeyboardStore(["a"])
        store.register_bindings([_bind("enter", "submit", mode=KeyMode.SEARCH)])

        assert store.resolve("enter") is None
        store.set_mode(KeyMode.SEARCH)
        assert store.resolve("enter").action == "submit"

    def test_resolve_ignores_unfocused_panels(self):
        """Test another panel's binding never fires."""
        store = KeyboardStore(["a", "b"])
        store.register_bindings([_bind("x", "delete", "b")])
        assert store.resolve("x") is None

    def test_active_bindings(self):
        """Test active bindings are globals plus the focused panel's, in this mode."""
        store = KeyboardStore(["a", "b"])
        store.register_bindings(
            [
                _bind("q", "quit"),
                _bind("x", "delete", "a"),
                _bind("y", "yank", "b"),
                _bind("escape", "leave", mode=KeyMode.SEARCH),
            ]
        )

        assert [b.action for b in store.active_bindings()] == ["quit", "delete"]


class TestFocus:
    """Tests for focus cycling."""

    def test_initial_focus_is_first_panel(self):
        """Test focus starts on the first panel."""
        assert KeyboardStore(["a", "b"]).focused_panel_id == "a"
        assert KeyboardStore().focused_panel_id == ""

    def test_focus_next_and_prev_wrap(self):
        """Test focus wraps in both directions."""
        store = KeyboardStore(["a", "b", "c"])

        assert store.focus_prev() == "c"
        assert store.focus_next() == "a"
        assert store.focus_next() == "b"
        assert store.focus_right() == "c"
        assert store.focus_left() == "b"

    def test_focus_by_number(self):
        """Test 1-based jumps; out of range keeps focus."""
        store = KeyboardStore(["a", "b", "c"])

        assert store.focus_by_number(3) == "c"
        assert store.focus_by_number(7) == "c"
        assert store.focus_by_number(0) == "c"

    def test_set_panel_order_keeps_focus(self):
        """Test reordering keeps a focused panel that is still present."""
        store = KeyboardStore(["a", "b", "c"])
        store.set_focus("b")

        store.set_panel_order(["c", "b"])
        assert store.focused_panel_id == "b"

        store.set_panel_order(["x", "y"])
        assert store.focused_panel_id == "x"

    def test_step_from_unknown_focus(self):
        """Test cycling from a panel outside the order starts at an end."""
        store = KeyboardStore(["a", "b"])
        store.set_focus("elsewhere")
        assert store.focus_next() == "a"
        store.set_focus("elsewhere")
        assert store.focus_prev() == "b"

    def test_empty_order(self):
        """Test cycling an empty order is a no-op."""
        store = KeyboardStore()
        assert store.focus_next() == ""
        assert store.focus_by_number(1) == ""


class TestModeAndHelp:
    """Tests for mode and help state."""

    def test_defaults(self):
        """Test the store starts in normal mode with help hidden."""
        store = KeyboardStore()
        assert store.mode == KeyMode.NORMAL
        assert store.help_visible is False

    def test_toggle_help(self):
        """Test help toggles on and off."""
        store = KeyboardStore()
        assert store.toggle_help() is True
        assert store.toggle_help() is False

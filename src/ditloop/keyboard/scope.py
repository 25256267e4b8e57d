"""Scoped binding registration

A panel's bindings live exactly as long as the panel owns them:

    with panel_keys(store, "commits", bindings):
        ...  # bindings active while the panel is mounted
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace

from .store import KeyBinding, KeyboardStore


@contextmanager
def panel_keys(
    store: KeyboardStore, panel_id: str, bindings: Iterable[KeyBinding]
) -> Iterator[list[KeyBinding]]:
    """Register bindings for a panel and always unregister them on exit.

    Untagged (global) bindings are tagged with panel_id.

    Yields:
        The bindings as registered
    """
    tagged = [b if not b.is_global else replace(b, panel_id=panel_id) for b in bindings]
    store.register_bindings(tagged)
    try:
        yield tagged
    finally:
        store.remove_bindings(tagged)

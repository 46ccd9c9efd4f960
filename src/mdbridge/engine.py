"""The document engine interface the sync controller talks to.

mdbridge does not own the live document; a host editor does.  The
controller needs three things from it, captured by
:class:`DocumentEngine`:

* the current tree,
* a way to replace the whole tree,
* change notifications.

:class:`InMemoryDocumentEngine` is a small reference implementation for
scripts and tests.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from mdbridge.observability import fields, get_logger

log = get_logger("mdbridge.engine")

ChangeListener = Callable[[], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class DocumentEngine(Protocol):
    """Minimal view of a live structured document."""

    def get_tree(self) -> dict:
        """Return the current ``doc`` tree."""
        ...

    def replace_tree(self, tree: dict) -> None:
        """Replace the whole document with *tree*."""
        ...

    def on_change(self, listener: ChangeListener) -> Unsubscribe:
        """Call *listener* after every change; returns an unsubscribe callable."""
        ...


def empty_doc() -> dict:
    return {"type": "doc", "content": [{"type": "paragraph"}]}


class InMemoryDocumentEngine:
    """A document held in memory that notifies listeners synchronously.

    Parameters
    ----------
    tree:
        Initial ``doc`` tree; an empty document when omitted.

    Examples
    --------
    >>> engine = InMemoryDocumentEngine()
    >>> seen = []
    >>> unsubscribe = engine.on_change(lambda: seen.append(True))
    >>> engine.replace_tree({"type": "doc", "content": []})
    >>> seen
    [True]
    """

    def __init__(self, tree: dict | None = None) -> None:
        self._tree: dict = copy.deepcopy(tree) if tree is not None else empty_doc()
        self._listeners: list[ChangeListener] = []

    def get_tree(self) -> dict:
        return copy.deepcopy(self._tree)

    def replace_tree(self, tree: dict) -> None:
        self._tree = copy.deepcopy(tree)
        self._notify()

    def apply(self, edit: Callable[[dict], None]) -> None:
        """Mutate the tree in place with *edit*, then notify listeners."""
        edit(self._tree)
        self._notify()

    def on_change(self, listener: ChangeListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as exc:
                # One broken listener must not starve the others
                log.error("change listener raised", extra=fields(error=str(exc)))

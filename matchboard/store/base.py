"""Contract shared by every remote store client."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from concurrent.futures import Future

ValueCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


def split_path(path: str) -> list[str]:
    """Split a slash-separated store path into its keys."""
    return [part for part in path.strip("/").split("/") if part]


class Subscription(ABC):
    """Handle for a live subscription on one store path."""

    @abstractmethod
    def close(self) -> None:
        """Stop delivery and release the listener."""


class RemoteStore(ABC):
    """A shared, path-addressable JSON-like document tree.

    ``subscribe`` delivers the current value at ``path`` immediately and
    again after every change below it. ``set`` overwrites everything at a
    path. ``update`` applies several path/value overwrites in one atomic
    write; paths that are not listed are left untouched. Writes return a
    future that resolves to ``None`` or raises the underlying failure.
    """

    @abstractmethod
    def subscribe(
        self,
        path: str,
        on_value: ValueCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Open a live subscription on ``path``."""

    @abstractmethod
    def set(self, path: str, value: Any) -> Future:
        """Overwrite the whole subtree at ``path`` with ``value``."""

    @abstractmethod
    def update(self, values: dict[str, Any]) -> Future:
        """Apply each ``path -> value`` pair as one atomic merge."""

    def close(self) -> None:
        """Release any resources held by the client."""


def get_in(tree: Any, keys: list[str]) -> Any:
    """Return the value stored under ``keys``, or ``None`` if absent."""
    node = tree
    for key in keys:
        if isinstance(node, dict):
            node = node.get(key)
        elif isinstance(node, list) and key.isdigit() and int(key) < len(node):
            node = node[int(key)]
        else:
            return None
    return node


def put_in(tree: Any, keys: list[str], value: Any) -> Any:
    """Return a copy of ``tree`` with ``value`` written under ``keys``.

    Writing ``None`` removes the key, and mappings left empty by a removal
    are pruned the way the Realtime Database prunes them.
    """
    if not keys:
        return value

    head, rest = keys[0], keys[1:]
    if isinstance(tree, list) and head.isdigit():
        node = list(tree)
        index = int(head)
        while len(node) <= index:
            node.append(None)
        node[index] = put_in(node[index], rest, value)
        return node

    node = dict(tree) if isinstance(tree, dict) else {}
    child = put_in(node.get(head), rest, value)
    if child is None or child == {}:
        node.pop(head, None)
    else:
        node[head] = child
    return node or None

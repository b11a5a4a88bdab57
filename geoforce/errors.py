"""Exception hierarchy shared by the layout components."""

from __future__ import annotations

from typing import Hashable, List, Sequence, Tuple

LinkRef = Tuple[int, Hashable, Hashable]


class ConfigurationError(ValueError):
    """Raised when a graph, force or option cannot be used as given."""


class DuplicateNodeError(ConfigurationError):
    """Raised when two nodes share the same identifier."""

    def __init__(self, node_id: Hashable):
        super().__init__(f"duplicate node id {node_id!r}")
        self.node_id = node_id


class GraphReferenceError(ConfigurationError, ReferenceError):
    """Raised when link endpoints do not resolve to nodes of the graph."""

    def __init__(self, links: Sequence[LinkRef]):
        self.links: List[LinkRef] = list(links)
        rendered = ", ".join(f"links[{idx}] {src!r} -> {dst!r}" for idx, src, dst in self.links)
        super().__init__(f"unresolved link endpoint(s): {rendered}")


class DocumentError(ConfigurationError):
    """Raised when an input document is malformed."""

    def __init__(self, path: str, message: str):
        super().__init__(f"[{path}] {message}" if path else message)
        self.path = path


__all__ = [
    "ConfigurationError",
    "DocumentError",
    "DuplicateNodeError",
    "GraphReferenceError",
]

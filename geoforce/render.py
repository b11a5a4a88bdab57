"""Read-only tick snapshots and the sinks that consume them."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, List, NamedTuple, Optional, Protocol, TextIO, Tuple, Union

import numpy as np

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class NodeState(NamedTuple):
    id: Hashable
    x: float
    y: float
    vx: float
    vy: float
    radius: float
    anchored: bool


class LinkState(NamedTuple):
    source: Hashable
    target: Hashable
    x1: float
    y1: float
    x2: float
    y2: float
    category: str


class TickFrame(NamedTuple):
    tick: int
    alpha: float
    nodes: Tuple[NodeState, ...]
    links: Tuple[LinkState, ...]

    def positions(self) -> np.ndarray:
        """Return an ``(n, 2)`` array of node coordinates in node order."""

        if not self.nodes:
            return np.zeros((0, 2), dtype=float)
        return np.array([(state.x, state.y) for state in self.nodes], dtype=float)

    def node(self, node_id: Hashable) -> NodeState:
        for state in self.nodes:
            if state.id == node_id:
                return state
        raise KeyError(f"Unknown node {node_id!r} in frame {self.tick}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick,
            "alpha": self.alpha,
            "nodes": [state._asdict() for state in self.nodes],
            "links": [state._asdict() for state in self.links],
        }


class RenderSink(Protocol):
    def on_tick(self, frame: TickFrame) -> None:
        ...


class CallbackSink:
    """Adapt a plain callable to the sink protocol."""

    def __init__(self, callback: Callable[[TickFrame], Any]):
        self.callback = callback

    def on_tick(self, frame: TickFrame) -> None:
        self.callback(frame)


class FrameRecorder:
    """Keep every frame, optionally only the most recent ``limit``."""

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit
        self.frames: List[TickFrame] = []

    def on_tick(self, frame: TickFrame) -> None:
        self.frames.append(frame)
        if self.limit is not None and len(self.frames) > self.limit:
            del self.frames[0]

    @property
    def last(self) -> Optional[TickFrame]:
        return self.frames[-1] if self.frames else None

    def trajectory(self, node_id: Hashable) -> np.ndarray:
        return np.array([(frame.node(node_id).x, frame.node(node_id).y) for frame in self.frames], dtype=float)

    def __len__(self) -> int:
        return len(self.frames)


class JsonLinesSink:
    """Write one JSON object per frame."""

    def __init__(self, target: Union[str, Path, TextIO], *, every: int = 1):
        if every < 1:
            raise ConfigurationError(f"frame interval must be >= 1, got {every}")
        self.every = every
        self._owns = isinstance(target, (str, Path))
        if self._owns:
            path = Path(target)  # type: ignore[arg-type]
            path.parent.mkdir(parents=True, exist_ok=True)
            self._stream: TextIO = path.open("w", encoding="utf-8")
            logger.info("Writing frames to %s", path)
        else:
            self._stream = target  # type: ignore[assignment]
        self.written = 0

    def on_tick(self, frame: TickFrame) -> None:
        if frame.tick % self.every:
            return
        self._stream.write(json.dumps(frame.to_dict(), default=str))
        self._stream.write("\n")
        self.written += 1

    def close(self) -> None:
        if self._owns and not self._stream.closed:
            self._stream.close()

    def __enter__(self) -> "JsonLinesSink":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "CallbackSink",
    "FrameRecorder",
    "JsonLinesSink",
    "LinkState",
    "NodeState",
    "RenderSink",
    "TickFrame",
]

"""Point quadtree used for Barnes-Hut charge aggregation."""

from __future__ import annotations

from typing import Callable, Generic, List, Optional, Protocol, Sequence, TypeVar


class _HasPosition(Protocol):
    x: float
    y: float


T = TypeVar("T", bound=_HasPosition)

MAX_DEPTH = 48


class Quad(Generic[T]):
    """Square cell of the tree. Leaves hold items sharing one position."""

    __slots__ = ("x0", "y0", "x1", "y1", "children", "items", "value", "cx", "cy")

    def __init__(self, x0: float, y0: float, x1: float, y1: float):
        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1
        self.children: Optional[List[Optional["Quad[T]"]]] = None
        self.items: List[T] = []
        self.value = 0.0
        self.cx = 0.0
        self.cy = 0.0

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    @property
    def width(self) -> float:
        return self.x1 - self.x0


class QuadTree(Generic[T]):
    def __init__(self, items: Sequence[T]):
        self.size = 0
        self.root: Optional[Quad[T]] = None
        if not items:
            return
        xs = [item.x for item in items]
        ys = [item.y for item in items]
        x0, y0 = min(xs), min(ys)
        extent = max(max(xs) - x0, max(ys) - y0, 1.0)
        self.root = Quad(x0, y0, x0 + extent, y0 + extent)
        for item in items:
            self._insert(self.root, item, 0)
            self.size += 1

    def _insert(self, quad: Quad[T], item: T, depth: int) -> None:
        if quad.is_leaf:
            if not quad.items or depth >= MAX_DEPTH:
                quad.items.append(item)
                return
            head = quad.items[0]
            if head.x == item.x and head.y == item.y:
                quad.items.append(item)
                return
            existing = quad.items
            quad.items = []
            quad.children = [None, None, None, None]
            for other in existing:
                self._insert_child(quad, other, depth)
        self._insert_child(quad, item, depth)

    def _insert_child(self, quad: Quad[T], item: T, depth: int) -> None:
        xm = (quad.x0 + quad.x1) / 2.0
        ym = (quad.y0 + quad.y1) / 2.0
        right = item.x >= xm
        bottom = item.y >= ym
        slot = (int(bottom) << 1) | int(right)
        assert quad.children is not None
        child = quad.children[slot]
        if child is None:
            child = Quad(
                xm if right else quad.x0,
                ym if bottom else quad.y0,
                quad.x1 if right else xm,
                quad.y1 if bottom else ym,
            )
            quad.children[slot] = child
        self._insert(child, item, depth + 1)

    def visit(self, callback: Callable[[Quad[T]], bool]) -> None:
        """Pre-order walk; ``callback`` returns ``True`` to skip a cell's children."""

        if self.root is None:
            return
        stack = [self.root]
        while stack:
            quad = stack.pop()
            if callback(quad) or quad.children is None:
                continue
            for child in reversed(quad.children):
                if child is not None:
                    stack.append(child)

    def visit_after(self, callback: Callable[[Quad[T]], None]) -> None:
        """Post-order walk, children before their parent."""

        if self.root is None:
            return
        stack = [self.root]
        order: List[Quad[T]] = []
        while stack:
            quad = stack.pop()
            order.append(quad)
            if quad.children is not None:
                stack.extend(child for child in quad.children if child is not None)
        for quad in reversed(order):
            callback(quad)

    def leaves(self) -> List[Quad[T]]:
        found: List[Quad[T]] = []

        def _collect(quad: Quad[T]) -> bool:
            if quad.is_leaf:
                found.append(quad)
            return False

        self.visit(_collect)
        return found


__all__ = ["MAX_DEPTH", "Quad", "QuadTree"]

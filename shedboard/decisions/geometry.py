"""
Screen geometry for the decision map.

Measuring (asking the page where elements are) is kept apart from the
curve maths in connectors.py. A Layout answers measurement queries;
StaticLayout answers them from numbers supplied by the client, or by a test.
All rects are viewport-relative, like getBoundingClientRect().
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Any


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.left + dx, self.top + dy, self.width, self.height)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rect":
        return cls(
            left=float(data["left"]),
            top=float(data["top"]),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
        )


class Layout:
    """Measurement interface. Missing elements are reported as None."""

    def canvas_rect(self) -> Rect:
        raise NotImplementedError

    def scroll(self) -> Point:
        raise NotImplementedError

    def node_rect(self, decision_id: str) -> Optional[Rect]:
        raise NotImplementedError

    def option_rect(self, decision_id: str, option_id: str) -> Optional[Rect]:
        raise NotImplementedError

    def move_node(self, decision_id: str, x: float, y: float) -> None:
        """Place a node at canvas coordinates (x, y)."""
        raise NotImplementedError

    def to_canvas(self, viewport_x: float, viewport_y: float) -> Point:
        """Viewport point → canvas point, accounting for scroll."""
        canvas = self.canvas_rect()
        scroll = self.scroll()
        return Point(viewport_x - canvas.left + scroll.x, viewport_y - canvas.top + scroll.y)


@dataclass
class StaticLayout(Layout):
    """Layout backed by measurements handed in from outside."""

    canvas: Rect = field(default_factory=lambda: Rect(0, 0, 0, 0))
    scroll_offset: Point = field(default_factory=lambda: Point(0, 0))
    nodes: Dict[str, Rect] = field(default_factory=dict)
    options: Dict[str, Dict[str, Rect]] = field(default_factory=dict)

    def canvas_rect(self) -> Rect:
        return self.canvas

    def scroll(self) -> Point:
        return self.scroll_offset

    def node_rect(self, decision_id: str) -> Optional[Rect]:
        return self.nodes.get(decision_id)

    def option_rect(self, decision_id: str, option_id: str) -> Optional[Rect]:
        return self.options.get(decision_id, {}).get(option_id)

    def move_node(self, decision_id: str, x: float, y: float) -> None:
        node = self.nodes.get(decision_id)
        if node is None:
            return
        # canvas (x, y) → viewport
        left = self.canvas.left + x - self.scroll_offset.x
        top = self.canvas.top + y - self.scroll_offset.y
        dx, dy = left - node.left, top - node.top
        self.nodes[decision_id] = node.translated(dx, dy)
        rows = self.options.get(decision_id, {})
        for option_id, rect in rows.items():
            rows[option_id] = rect.translated(dx, dy)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StaticLayout":
        """
        Build from a client measurement payload:
            {canvas: rect, scroll: {x, y}, nodes: {id: rect},
             options: {decision_id: {option_id: rect}}}
        """
        scroll = data.get("scroll") or {}
        return cls(
            canvas=Rect.from_dict(data.get("canvas") or {"left": 0, "top": 0}),
            scroll_offset=Point(float(scroll.get("x", 0)), float(scroll.get("y", 0))),
            nodes={k: Rect.from_dict(v) for k, v in (data.get("nodes") or {}).items()},
            options={
                dec_id: {opt_id: Rect.from_dict(r) for opt_id, r in rows.items()}
                for dec_id, rows in (data.get("options") or {}).items()
            },
        )

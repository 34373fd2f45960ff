"""
Connector curves between a linked option and its target decision.

Connectors are derived, never stored: they are recomputed from the current
layout on every render, drag tick and resize.
"""
from dataclasses import dataclass, asdict
from typing import List, Dict, Any

from .geometry import Layout, Point
from .schema import Decision


def _fmt(value: float) -> str:
    return f"{value:g}"


@dataclass(frozen=True)
class Connector:
    from_id: str
    option_id: str
    to_id: str
    start: Point
    end: Point

    @property
    def mid_x(self) -> float:
        return (self.start.x + self.end.x) / 2

    @property
    def path(self) -> str:
        """SVG path: cubic with both control points on the horizontal midpoint."""
        sx, sy, ex, ey, mx = self.start.x, self.start.y, self.end.x, self.end.y, self.mid_x
        return (f"M {_fmt(sx)} {_fmt(sy)} "
                f"C {_fmt(mx)} {_fmt(sy)}, {_fmt(mx)} {_fmt(ey)}, {_fmt(ex)} {_fmt(ey)}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["path"] = self.path
        return data


def compute_curve(from_id: str, option_id: str, to_id: str, start: Point, end: Point) -> Connector:
    return Connector(from_id=from_id, option_id=option_id, to_id=to_id, start=start, end=end)


def resolve_connectors(decisions: List[Decision], layout: Layout) -> List[Connector]:
    """
    One connector per linked option whose target exists and is laid out.

    Start: source node's right edge, at the option row's vertical centre.
    End:   target node's left edge, at the target's vertical centre.
    """
    by_id = {d.id: d for d in decisions}
    connectors: List[Connector] = []
    for decision in decisions:
        for option in decision.options:
            if not option.links_to or option.links_to not in by_id:
                continue
            from_rect = layout.node_rect(decision.id)
            to_rect = layout.node_rect(option.links_to)
            opt_rect = layout.option_rect(decision.id, option.id)
            if from_rect is None or to_rect is None or opt_rect is None:
                continue
            start = layout.to_canvas(from_rect.right, opt_rect.center_y)
            end = layout.to_canvas(to_rect.left, to_rect.center_y)
            connectors.append(compute_curve(decision.id, option.id, option.links_to, start, end))
    return connectors

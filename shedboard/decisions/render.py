"""Decision map projection and evaluation text formatting."""
import re
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any

from markupsafe import Markup, escape

from .schema import Decision, format_status

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_EM_RE = re.compile(r"\*(.+?)\*")


def render_evaluation(text: str) -> Markup:
    """Escape, then **bold**, *em* and line breaks."""
    if not text:
        return Markup("")
    html = str(escape(text))
    html = _BOLD_RE.sub(r"<strong>\1</strong>", html)
    html = _EM_RE.sub(r"<em>\1</em>", html)
    html = html.replace("\r\n", "\n").replace("\n", "<br>")
    return Markup(html)


@dataclass
class OptionView:
    id: str
    text: str
    selected: bool
    linked: bool
    links_to: str
    link_title: str


@dataclass
class NodeView:
    id: str
    question: str
    context: str
    evaluation_html: str
    status: str
    status_label: str
    css_class: str
    x: int
    y: int
    options: List[OptionView] = field(default_factory=list)


@dataclass
class MapView:
    nodes: List[NodeView]
    empty: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def node_view(decision: Decision) -> NodeView:
    return NodeView(
        id=decision.id,
        question=str(escape(decision.question)),
        context=str(escape(decision.context)) if decision.context else "",
        evaluation_html=str(render_evaluation(decision.evaluation)),
        status=decision.status,
        status_label=format_status(decision.status),
        css_class=f"decision-node status-{decision.status}",
        x=decision.x,
        y=decision.y,
        options=[
            OptionView(
                id=opt.id,
                text=str(escape(opt.text)),
                selected=opt.selected,
                linked=opt.links_to is not None,
                links_to=opt.links_to or "",
                link_title="Edit link" if opt.links_to else "Link to decision",
            )
            for opt in decision.options
        ],
    )


def render_map(decisions: List[Decision]) -> MapView:
    return MapView(nodes=[node_view(d) for d in decisions], empty=not decisions)

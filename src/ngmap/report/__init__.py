"""Report renderers."""

from ngmap.report.graph_format import render_dot, render_mermaid
from ngmap.report.json_format import render_cycles_json, render_json
from ngmap.report.markdown import render_cycles_markdown, render_markdown

__all__ = [
    "render_cycles_json",
    "render_cycles_markdown",
    "render_dot",
    "render_json",
    "render_markdown",
    "render_mermaid",
]

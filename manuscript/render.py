"""manuscript/render.py — Dual-mode markdown rendering (HTML fragments and WordprocessingML).

Both modes share mistune's markdown grammar; only heading and paragraph
emission differ. Every other construct (lists, emphasis, links, code) falls
back to mistune's built-in HTML emission.
"""

from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import escape as xml_escape

import mistune

from manuscript.base import RenderError

HTML = "html"
OOXML = "ooxml"

# GFM-style extensions
PLUGINS = ["strikethrough", "table", "url"]


def wp(*inner: str) -> str:
    return "\n<w:p>\n" + "".join(inner) + "\n</w:p>"


def wppr_heading(level: int) -> str:
    return f'<w:pPr><w:pStyle w:val="Heading{level}"/></w:pPr>\n'


def wr(inner: str) -> str:
    return f"<w:r>{inner}</w:r>"


def wt(inner: str) -> str:
    return f"<w:t>{inner}</w:t>"


class HtmlFragmentRenderer(mistune.HTMLRenderer):
    """HTML with headings demoted two levels: a unit always sits inside a section/article."""

    def heading(self, text: str, level: int, **attrs) -> str:
        tag = f"h{level + 2}"
        return f"<{tag}>{text}</{tag}>\n"


class OoxmlFragmentRenderer(mistune.HTMLRenderer):
    """Headings and paragraphs as <w:p> elements; everything else as mistune's HTML."""

    def heading(self, text: str, level: int, **attrs) -> str:
        return wp(wppr_heading(level), wr(wt(text)))

    def paragraph(self, text: str) -> str:
        return wp(wr(wt(text)))

    # Raw HTML is kept as visible text so document.xml stays well-formed.
    def block_html(self, html: str) -> str:
        return wp(wr(wt(xml_escape(html.strip()))))

    def inline_html(self, html: str) -> str:
        return xml_escape(html)


@dataclass(frozen=True)
class MarkupRenderer:
    mode: str
    markdown: mistune.Markdown

    def render(self, text: str, source: Path | None = None) -> str:
        """Render markdown text to a fragment. Same input, same output."""
        try:
            return self.markdown(text)
        except Exception as e:
            where = f" {source}" if source is not None else ""
            raise RenderError(f"Failed to render{where} as {self.mode}: {e}", source) from e


@dataclass(frozen=True)
class Renderers:
    html: MarkupRenderer
    ooxml: MarkupRenderer


def create_renderer(mode: str) -> MarkupRenderer:
    """Build one independent renderer for the given mode."""
    if mode == HTML:
        # Raw HTML in the manuscript passes through to the page.
        renderer = HtmlFragmentRenderer(escape=False)
    elif mode == OOXML:
        # Entities decode the same way as in HTML mode; raw HTML is escaped by the renderer.
        renderer = OoxmlFragmentRenderer(escape=False)
    else:
        raise ValueError(f"Unknown render mode: '{mode}'. Supported: {HTML}, {OOXML}")
    return MarkupRenderer(mode=mode, markdown=mistune.create_markdown(renderer=renderer, plugins=PLUGINS))


def build_renderers() -> Renderers:
    return Renderers(html=create_renderer(HTML), ooxml=create_renderer(OOXML))

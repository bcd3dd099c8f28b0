from __future__ import annotations

import html as _html
import logging
import re
from dataclasses import dataclass

from markdown_it import MarkdownIt
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .sanitize import sanitize_html

logger = logging.getLogger(__name__)

_FORMATTER = HtmlFormatter(nowrap=True)

# Stylesheet for the token classes emitted by _highlight_code.
PYGMENTS_CSS = HtmlFormatter(style="default").get_style_defs(".hljs")


@dataclass(frozen=True)
class RenderResult:
    html: str
    sanitized_html: str


def _highlight_code(code: str, lang: str, _attrs: str) -> str:
    lang = (lang or "").strip().lower()
    if lang:
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lexer = None
        if lexer is not None:
            try:
                body = highlight(code, lexer, _FORMATTER)
                return f'<pre class="hljs"><code class="language-{_html.escape(lang)}">{body}</code></pre>'
            except Exception:
                logger.exception("Syntax highlighting failed for language %r", lang)
    return f'<pre class="hljs"><code>{_html.escape(code)}</code></pre>'


def _build_parser() -> MarkdownIt:
    md = MarkdownIt(
        "commonmark",
        {"html": True, "linkify": True, "typographer": True, "highlight": _highlight_code},
    )
    md.enable(["table", "strikethrough", "linkify", "replacements", "smartquotes"])
    return md


_md = _build_parser()

_HEADING_RE = re.compile(r"<h([1-6])([^>]*)>(.*?)</h\1>", re.IGNORECASE | re.DOTALL)
_ID_ATTR_RE = re.compile(r"\s+id\s*=\s*([\"']).*?\1", re.IGNORECASE)


def slugify_heading(text: str) -> str:
    # Prefer the visible text, not embedded markup.
    t = re.sub(r"<[^>]+>", "", str(text or ""))
    t = _html.unescape(t)
    t = re.sub(r"^#+\s*", "", t.strip())
    t = re.sub(r"[\s\-_.]+", "-", t)
    t = re.sub(r"[^a-z0-9\-]", "", t.lower())
    t = re.sub(r"-{2,}", "-", t)
    return t.strip("-")


def add_heading_ids(html_text: str) -> str:
    """Give every heading an anchor id.

    H1 uses the plain slug, H2+ use hN-slug, so "#introduction" only ever
    targets a top-level "# Introduction". Repeated anchors get -1, -2, ...
    """
    seen: dict[str, int] = {}

    def repl(m: re.Match) -> str:
        level, attrs, inner = m.group(1), m.group(2), m.group(3)
        base = slugify_heading(inner)
        if not base:
            return m.group(0)

        anchor = base if level == "1" else f"h{level}-{base}"
        count = seen.get(anchor, 0)
        seen[anchor] = count + 1
        if count:
            anchor = f"{anchor}-{count}"

        attrs_no_id = _ID_ATTR_RE.sub("", attrs)
        return f'<h{level}{attrs_no_id} id="{anchor}">{inner}</h{level}>'

    return _HEADING_RE.sub(repl, html_text)


def render_markdown(markdown_text: str) -> RenderResult:
    """Render Markdown to HTML, returning both the raw and the sanitized markup."""
    if not markdown_text:
        return RenderResult(html="", sanitized_html="")

    raw = add_heading_ids(_md.render(markdown_text))
    return RenderResult(html=raw, sanitized_html=sanitize_html(raw))

"""Full-page HTML documents handed to the browser for printing."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from jinja2 import Environment, select_autoescape

from .markdown_render import PYGMENTS_CSS
from .schemas import ConversionOptions


_BASE_CSS = """
body {
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
  line-height: 1.6;
  max-width: 800px;
  margin: 0 auto;
  padding: 20px;
}
h1, h2, h3, h4, h5, h6 { margin-top: 24px; margin-bottom: 16px; font-weight: 600; line-height: 1.25; }
h1 { font-size: 2em; padding-bottom: 0.3em; border-bottom: 1px solid #eaecef; }
h2 { font-size: 1.5em; padding-bottom: 0.3em; border-bottom: 1px solid #eaecef; }
h3 { font-size: 1.25em; }
h4 { font-size: 1em; }
h5 { font-size: 0.875em; }
h6 { font-size: 0.85em; color: #666; }
p { margin-bottom: 16px; }
code {
  padding: 0.2em 0.4em;
  margin: 0;
  font-size: 85%;
  font-family: ui-monospace, SFMono-Regular, Menlo, Consolas, 'Liberation Mono', monospace;
  background-color: rgba(175, 184, 193, 0.2);
  border-radius: 6px;
}
pre {
  padding: 16px;
  overflow: auto;
  font-size: 85%;
  line-height: 1.45;
  background-color: #f6f8fa;
  border-radius: 6px;
  page-break-inside: avoid;
}
pre code { background-color: transparent; padding: 0; }
blockquote { border-left: 4px solid #ddd; padding-left: 16px; margin-left: 0; color: #666; }
table { border-collapse: collapse; width: 100%; margin-bottom: 16px; }
table th, table td { border: 1px solid #ddd; padding: 8px 12px; text-align: left; }
table th { background-color: #f6f8fa; font-weight: 600; }
ul, ol { margin-bottom: 16px; padding-left: 2em; }
li { margin-bottom: 4px; }
a { color: #0366d6; text-decoration: none; }
img { max-width: 100%; height: auto; }
hr { border: none; border-top: 1px solid #eee; margin: 24px 0; }
"""

THEME_CSS = {
    "light": """
body { background: white; color: #24292e; }
""",
    "dark": """
html, body { background: #1a1a1a; color: #e0e0e0; }
code { background-color: rgba(110, 118, 129, 0.4); }
pre, pre.hljs { background-color: #2d2d2d; color: #e0e0e0; }
table th { background-color: #2d2d2d; }
table th, table td { border-color: #444; }
blockquote { border-left-color: #444; color: #aaa; }
a { color: #58a6ff; }
h1, h2 { border-bottom-color: #333; }
""",
    "print": """
body { background: white; color: black; }
a { color: black; text-decoration: underline; }
pre, pre.hljs, code, table th { background-color: #f2f2f2; }
""",
}

TEMPLATE_CSS = {
    "minimal": "",
    "professional": """
body { font-family: Georgia, 'Times New Roman', serif; max-width: none; }
h1, h2, h3, h4, h5, h6 { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; }
.doc-header {
  display: flex;
  justify-content: space-between;
  font-size: 0.8em;
  color: #6b7280;
  border-bottom: 2px solid #2c3e50;
  padding-bottom: 6px;
  margin-bottom: 24px;
}
""",
}

_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{{ title }}</title>
  <style>{{ base_css|safe }}{{ pygments_css|safe }}{{ theme_css|safe }}{{ template_css|safe }}</style>
  <style>
    @page {
      margin: {{ margin }}mm;
      size: {{ page_size }} {{ orientation }};
    }
  </style>
</head>
<body class="theme-{{ theme }} template-{{ template }}">
  {% if template == "professional" %}
  <div class="doc-header"><span class="doc-title">{{ title }}</span><span class="doc-date">{{ date }}</span></div>
  {% endif %}
  <div class="pdf-content">{{ content|safe }}</div>
</body>
</html>
"""

_env = Environment(autoescape=select_autoescape(default_for_string=True, default=True))
_template = _env.from_string(_DOCUMENT_TEMPLATE)


def format_document_date(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{now:%B} {now.day}, {now.year}"


def build_document(
    content_html: str,
    title: str,
    options: Optional[ConversionOptions] = None,
    now: Optional[datetime] = None,
) -> str:
    """Wrap sanitized content HTML in a printable page for the given options.

    content_html is inserted verbatim and must already be sanitized; the title
    is escaped.
    """
    options = options or ConversionOptions()
    return _template.render(
        title=title,
        content=content_html,
        base_css=_BASE_CSS,
        theme_css=THEME_CSS[options.theme],
        template_css=TEMPLATE_CSS[options.template],
        pygments_css=PYGMENTS_CSS,
        page_size=options.page_size,
        orientation=options.orientation,
        margin=options.margin,
        theme=options.theme,
        template=options.template,
        date=format_document_date(now),
    )

"""Allowlist HTML sanitizer applied to rendered Markdown before printing.

Anything not listed here is dropped: script/style/iframe/embed/object/form
controls, every on* event handler and javascript:/data: URLs. Text inside
removed wrapper tags is kept; text inside script and style is not.
"""
from __future__ import annotations

import nh3


ALLOWED_TAGS = {
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "br", "hr",
    "strong", "em", "b", "i", "u", "s", "code", "pre",
    "ul", "ol", "li",
    "blockquote",
    "a",
    "img",
    "table", "thead", "tbody", "tr", "th", "td",
    "div", "span",
    "del", "ins",
    "sup", "sub",
}

ALLOWED_ATTRIBUTES = {
    "*": {"class", "id", "title"},
    "a": {"href"},
    "img": {"src", "alt", "width", "height"},
    "th": {"align", "valign", "colspan", "rowspan"},
    "td": {"align", "valign", "colspan", "rowspan"},
}

ALLOWED_URL_SCHEMES = {"http", "https", "mailto", "tel"}

DROP_CONTENT_TAGS = {"script", "style"}


def sanitize_html(html: str) -> str:
    if not html:
        return ""
    return nh3.clean(
        html,
        tags=ALLOWED_TAGS,
        clean_content_tags=DROP_CONTENT_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        url_schemes=ALLOWED_URL_SCHEMES,
        link_rel=None,
        strip_comments=True,
    )

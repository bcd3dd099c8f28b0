# tests/e2e/test_browser.py
"""Renders real PDFs with Chromium.

Needs `playwright install chromium`; run with MDPDF_BROWSER_TESTS=1.
"""
import os

import pytest

from mdconvert_backend.markdown_render import render_markdown
from mdconvert_backend.pdf_renderer import PdfRenderer
from mdconvert_backend.schemas import ConversionOptions
from mdconvert_backend.templates import build_document

pytestmark = [
    pytest.mark.browser,
    pytest.mark.skipif(os.environ.get("MDPDF_BROWSER_TESTS") != "1", reason="set MDPDF_BROWSER_TESTS=1 to run"),
]


@pytest.mark.asyncio
async def test_markdown_renders_to_pdf():
    renderer = PdfRenderer()
    options = ConversionOptions(page_size="Letter", orientation="landscape", theme="dark", template="professional")
    document = build_document(render_markdown("# Smoke\n\n```python\nprint('hi')\n```").sanitized_html, "smoke", options)
    try:
        pdf_bytes = await renderer.render(document, options)
        assert pdf_bytes.startswith(b"%PDF-")
        assert renderer.is_connected

        # A second render reuses the same browser.
        assert (await renderer.render(document)).startswith(b"%PDF-")
    finally:
        await renderer.close()
    assert not renderer.is_connected

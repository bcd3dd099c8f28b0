# tests/unit/test_templates.py
from datetime import datetime, timezone

import pytest
from bs4 import BeautifulSoup
from pydantic import ValidationError

from mdconvert_backend.schemas import ConversionOptions, ConvertRequest
from mdconvert_backend.templates import build_document, format_document_date


class TestBuildDocument:
    def test_defaults(self):
        html = build_document("<p>Body</p>", "doc")
        soup = BeautifulSoup(html, "html.parser")

        assert soup.title.get_text() == "doc"
        assert soup.find("div", class_="pdf-content").decode_contents() == "<p>Body</p>"
        assert "size: A4 portrait;" in html
        assert "margin: 20mm;" in html
        assert "theme-light" in soup.body["class"]
        assert soup.find("div", class_="doc-header") is None

    def test_page_options_are_applied(self):
        options = ConversionOptions(page_size="Letter", orientation="landscape", margin=15)
        html = build_document("<p>x</p>", "doc", options)
        assert "size: Letter landscape;" in html
        assert "margin: 15mm;" in html

    def test_title_is_escaped_but_content_is_not(self):
        html = build_document("<h1>Heading</h1>", "<script>x</script>")
        assert "<title>&lt;script&gt;x&lt;/script&gt;</title>" in html
        assert "<h1>Heading</h1>" in html

    @pytest.mark.parametrize(
        "theme, marker",
        [("light", "color: #24292e"), ("dark", "background: #1a1a1a"), ("print", "color: black")],
    )
    def test_themes(self, theme, marker):
        html = build_document("<p>x</p>", "doc", ConversionOptions(theme=theme))
        assert marker in html
        assert f"theme-{theme}" in html

    def test_professional_template_has_header_with_date(self):
        now = datetime(2024, 3, 5, tzinfo=timezone.utc)
        html = build_document("<p>x</p>", "Quarterly", ConversionOptions(template="professional"), now=now)
        soup = BeautifulSoup(html, "html.parser")

        header = soup.find("div", class_="doc-header")
        assert header.find(class_="doc-title").get_text() == "Quarterly"
        assert header.find(class_="doc-date").get_text() == "March 5, 2024"
        assert "Georgia" in html

    def test_code_highlighting_styles_are_included(self):
        assert ".hljs" in build_document("", "doc")


def test_format_document_date():
    assert format_document_date(datetime(2025, 12, 31)) == "December 31, 2025"


class TestConversionOptions:
    def test_defaults(self):
        options = ConversionOptions()
        assert (options.page_size, options.orientation, options.margin, options.theme, options.template) == (
            "A4",
            "portrait",
            20,
            "light",
            "minimal",
        )

    def test_camel_case_keys(self):
        options = ConversionOptions.model_validate({"pageSize": "letter", "orientation": "Landscape"})
        assert options.page_size == "Letter"
        assert options.orientation == "landscape"

    def test_snake_case_keys(self):
        assert ConversionOptions.model_validate({"page_size": "A5"}).page_size == "A5"

    @pytest.mark.parametrize("value, expected", [("small", 10), ("medium", 20), ("Large", 30), ("25", 25), (0, 0)])
    def test_margin_presets(self, value, expected):
        assert ConversionOptions(margin=value).margin == expected

    def test_print_friendly_alias(self):
        assert ConversionOptions(theme="print-friendly").theme == "print"

    @pytest.mark.parametrize(
        "field, value",
        [("page_size", "B5"), ("orientation", "diagonal"), ("margin", 101), ("margin", -1), ("theme", "neon"), ("template", "fancy")],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            ConversionOptions(**{field: value})


class TestConvertRequest:
    def test_minimal_request(self):
        request = ConvertRequest.model_validate({"markdown": "# x"})
        assert request.action == "download"
        assert request.filename == "document"
        assert request.resolved_options() == ConversionOptions()

    def test_missing_markdown(self):
        with pytest.raises(ValidationError):
            ConvertRequest.model_validate({"filename": "x"})
        with pytest.raises(ValidationError):
            ConvertRequest.model_validate({"markdown": ""})

    def test_invalid_action(self):
        with pytest.raises(ValidationError):
            ConvertRequest.model_validate({"markdown": "# x", "action": "invalid-action"})

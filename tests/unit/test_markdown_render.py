# tests/unit/test_markdown_render.py
from bs4 import BeautifulSoup

from mdconvert_backend.markdown_render import add_heading_ids, render_markdown, slugify_heading


class TestRenderMarkdown:
    def test_simple_heading(self):
        result = render_markdown("# Hello World")
        assert '<h1 id="hello-world">Hello World</h1>' in result.html
        assert '<h1 id="hello-world">Hello World</h1>' in result.sanitized_html

    def test_empty_markdown(self):
        result = render_markdown("")
        assert result.html == ""
        assert result.sanitized_html == ""

    def test_heading_levels(self):
        result = render_markdown("# H1\n## H2\n### H3")
        assert '<h1 id="h1">H1</h1>' in result.sanitized_html
        assert '<h2 id="h2-h2">H2</h2>' in result.sanitized_html
        assert '<h3 id="h3-h3">H3</h3>' in result.sanitized_html

    def test_inline_formatting(self):
        html = render_markdown("**bold text** *italic text* ~~gone~~ `inline code`").sanitized_html
        assert "<strong>bold text</strong>" in html
        assert "<em>italic text</em>" in html
        assert "<s>gone</s>" in html
        assert "<code>inline code</code>" in html

    def test_links(self):
        html = render_markdown("[OpenAI](https://openai.com)").sanitized_html
        assert '<a href="https://openai.com">OpenAI</a>' in html

    def test_bare_urls_are_linkified(self):
        soup = BeautifulSoup(render_markdown("see https://example.com/docs").sanitized_html, "html.parser")
        assert soup.find("a")["href"] == "https://example.com/docs"

    def test_lists(self):
        html = render_markdown("- Item 1\n- Item 2\n- Item 3\n\n1. First\n2. Second").sanitized_html
        soup = BeautifulSoup(html, "html.parser")
        assert [li.get_text() for li in soup.find("ul").find_all("li")] == ["Item 1", "Item 2", "Item 3"]
        assert [li.get_text() for li in soup.find("ol").find_all("li")] == ["First", "Second"]

    def test_blockquote(self):
        html = render_markdown("> This is a quote").sanitized_html
        assert "<blockquote>" in html
        assert "This is a quote" in html

    def test_tables(self):
        markdown = "| Header 1 | Header 2 |\n|----------|----------|\n| Cell 1   | Cell 2   |"
        soup = BeautifulSoup(render_markdown(markdown).sanitized_html, "html.parser")
        assert soup.find("table") is not None
        assert [th.get_text() for th in soup.find_all("th")] == ["Header 1", "Header 2"]
        assert [td.get_text() for td in soup.find_all("td")] == ["Cell 1", "Cell 2"]

    def test_horizontal_rule(self):
        assert "<hr>" in render_markdown("---").sanitized_html

    def test_code_block_with_known_language_is_highlighted(self):
        result = render_markdown("```javascript\nconst x = 5;\n```")
        assert '<pre class="hljs">' in result.html

        soup = BeautifulSoup(result.sanitized_html, "html.parser")
        code = soup.find("pre", class_="hljs").find("code")
        assert code["class"] == ["language-javascript"]
        assert code.find("span") is not None
        assert code.get_text().strip() == "const x = 5;"

    def test_code_block_without_language_is_escaped(self):
        result = render_markdown("```\n<b>not bold</b>\n```")
        assert '<pre class="hljs"><code>&lt;b&gt;not bold&lt;/b&gt;' in result.html
        assert "<b>" not in result.sanitized_html

    def test_code_block_with_unknown_language(self):
        soup = BeautifulSoup(render_markdown("```notalanguage\nx < y\n```").sanitized_html, "html.parser")
        code = soup.find("pre").find("code")
        assert code.get("class") is None
        assert code.get_text().strip() == "x < y"

    def test_dangerous_html_is_sanitized(self):
        result = render_markdown('<script>alert("XSS")</script>\n\n<img src=x onerror="alert(1)">')
        assert "<script>" in result.html
        assert "<script" not in result.sanitized_html
        assert "alert" not in result.sanitized_html

    def test_special_characters_are_escaped(self):
        html = render_markdown('Text with & < > " characters').sanitized_html
        assert "&amp;" in html
        assert "&lt;" in html

    def test_complex_document(self):
        markdown = (
            "# Title\n\nThis is a paragraph with **bold** and *italic* text.\n\n"
            "## Section\n\n- List item 1\n- List item 2\n\n"
            '```python\ndef hello():\n    print("Hello")\n```\n\n> A blockquote'
        )
        html = render_markdown(markdown).sanitized_html
        assert '<h1 id="title">Title</h1>' in html
        assert '<h2 id="h2-section">Section</h2>' in html
        assert "<strong>bold</strong>" in html
        assert "<ul>" in html
        assert "language-python" in html
        assert "<blockquote>" in html


class TestHeadingIds:
    def test_slugify(self):
        assert slugify_heading("Hello, World!") == "hello-world"
        assert slugify_heading("<em>Intro</em> &amp; setup") == "intro-setup"
        assert slugify_heading("snake_case.and-dots") == "snake-case-and-dots"
        assert slugify_heading("!!!") == ""

    def test_duplicate_headings_get_suffixes(self):
        html = add_heading_ids("<h2>Notes</h2><h2>Notes</h2><h2>Notes</h2>")
        assert '<h2 id="h2-notes">' in html
        assert '<h2 id="h2-notes-1">' in html
        assert '<h2 id="h2-notes-2">' in html

    def test_existing_id_is_replaced(self):
        assert add_heading_ids('<h1 id="old">New</h1>') == '<h1 id="new">New</h1>'

    def test_heading_without_slug_is_untouched(self):
        assert add_heading_ids("<h3>???</h3>") == "<h3>???</h3>"

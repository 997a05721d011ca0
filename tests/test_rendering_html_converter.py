"""Unit tests for src.rendering.html_converter.

These feed HTML straight to the converter, covering raw-HTML shapes that
markdown-it never produces on its own.
"""

from __future__ import annotations

import pytest

from src.diagram.models import DiagramFallback, LaidOutDiagram
from src.links.models import LinkCategory
from src.rendering.html_converter import convert_html
from src.rendering.models import NodeKind


def _texts(nodes):
    return [n.text for n in nodes if n.kind is NodeKind.TEXT]


class TestCodeBlocks:
    def test_language_from_code_class(self, options):
        [node] = convert_html('<pre><code class="language-python">x = 1\n</code></pre>', options)
        assert node.kind is NodeKind.CODE_BLOCK
        assert node.attributes == {"language": "python", "header": "python"}
        assert node.code.display_text == "x = 1 "
        assert _texts(node.children) == ["x = 1 "]

    @pytest.mark.parametrize("cls", ["lang-rust", "highlight-rust"])
    def test_language_prefixes_on_pre(self, options, cls):
        [node] = convert_html(f'<pre class="{cls}"><code>fn main() {{}}</code></pre>', options)
        assert node.code.language == "rust"

    def test_highlighter_spans_contribute_text(self, options):
        html = (
            '<pre><code class="language-python">'
            '<span class="k">def</span> <span class="nf">f</span>(): pass\n'
            "</code></pre>"
        )
        [node] = convert_html(html, options)
        assert node.code.raw_text == "def f(): pass\n"

    def test_pre_without_code(self, options):
        [node] = convert_html("<pre>plain text</pre>", options)
        assert node.kind is NodeKind.CODE_BLOCK
        assert node.attributes["header"] == "code"
        assert node.code.display_text == "plain text"

    def test_theme_and_line_numbers_from_options(self, options):
        opts = options.model_copy(update={"code_theme": "light", "line_numbers_enabled": True})
        [node] = convert_html("<pre><code>a</code></pre>", opts)
        assert node.code.theme == "light"
        assert node.code.show_line_numbers is True

    def test_no_emoji_inside_code(self, options):
        [node] = convert_html("<pre><code>:rocket:</code></pre>", options)
        assert node.code.display_text == ":rocket:"


class TestDiagrams:
    def test_mermaid_is_laid_out(self, options):
        html = '<pre><code class="language-mermaid">graph LR\nA--&gt;B\n</code></pre>'
        [node] = convert_html(html, options)
        assert node.kind is NodeKind.DIAGRAM
        assert isinstance(node.diagram, LaidOutDiagram)
        assert node.attributes["direction"] == "horizontal"
        assert node.attributes["diagram-id"] == node.diagram.diagram_id
        assert list(node.diagram.positions) == ["A", "B"]

    def test_unrecognized_mermaid_falls_back(self, options):
        html = '<pre><code class="language-mermaid">pie title Pets\n</code></pre>'
        [node] = convert_html(html, options)
        assert node.kind is NodeKind.DIAGRAM_FALLBACK
        assert isinstance(node.diagram, DiagramFallback)
        assert node.text == "pie title Pets\n"

    def test_language_match_is_case_insensitive(self, options):
        html = '<pre><code class="language-Mermaid">graph TD\nA--&gt;B</code></pre>'
        [node] = convert_html(html, options)
        assert node.kind is NodeKind.DIAGRAM


class TestLinks:
    def test_missing_href_is_plain(self, options):
        [paragraph] = convert_html("<p><a>nowhere</a></p>", options)
        [link] = paragraph.children
        assert link.kind is NodeKind.LINK
        assert link.link.category is LinkCategory.PLAIN
        assert link.attributes == {"href": "", "target": "new-window"}

    def test_title_kept(self, options):
        [paragraph] = convert_html('<p><a href="https://x.io" title="X">x</a></p>', options)
        [link] = paragraph.children
        assert link.attributes["title"] == "X"
        assert link.attributes["icon"] == "external-link"

    def test_nested_label_markup(self, options):
        [paragraph] = convert_html('<p><a href="#a"><strong>bold</strong> label</a></p>', options)
        [link] = paragraph.children
        assert [child.kind for child in link.children] == [NodeKind.STRONG, NodeKind.TEXT]


class TestStructure:
    def test_comments_dropped(self, options):
        [paragraph] = convert_html("<p>a<!-- hidden -->b</p>", options)
        assert _texts(paragraph.children) == ["a", "b"]

    def test_script_and_style_dropped(self, options):
        nodes = convert_html("<p>x</p><script>bad()</script><style>p{}</style>", options)
        assert [n.kind for n in nodes] == [NodeKind.PARAGRAPH]

    def test_unknown_tag_becomes_element(self, options):
        [node] = convert_html('<div id="box" class="note wide"><p>hi</p></div>', options)
        assert node.kind is NodeKind.ELEMENT
        assert node.attributes == {"tag": "div", "id": "box", "class": "note wide"}
        assert node.children[0].kind is NodeKind.PARAGRAPH

    def test_ordered_list_start(self, options):
        [node] = convert_html('<ol start="3"><li>c</li></ol>', options)
        assert node.attributes == {"ordered": "true", "start": "3"}

    def test_cell_alignment(self, options):
        [table] = convert_html(
            '<table><tr><td style="text-align: Right">1</td></tr></table>', options
        )
        cell = table.find_all(NodeKind.TABLE_CELL)[0]
        assert cell.attributes == {"header": "false", "align": "right"}

    def test_heading_level_and_id(self, options):
        [node] = convert_html('<h3 id="usage">Usage</h3>', options)
        assert node.attributes == {"level": "3", "id": "usage"}

    def test_line_break_and_rule(self, options):
        nodes = convert_html("<p>a<br>b</p><hr>", options)
        assert [c.kind for c in nodes[0].children] == [
            NodeKind.TEXT, NodeKind.LINE_BREAK, NodeKind.TEXT,
        ]
        assert nodes[1].kind is NodeKind.RULE

    def test_image(self, options):
        [paragraph] = convert_html('<p><img src="cat.png" alt="A cat" title="Cat"></p>', options)
        assert paragraph.children[0].attributes == {"src": "cat.png", "alt": "A cat", "title": "Cat"}

    def test_soft_break_text_kept(self, options):
        [paragraph] = convert_html("<p>one\ntwo</p>", options)
        assert _texts(paragraph.children) == ["one\ntwo"]

    def test_emoji_shortcodes(self, options):
        [paragraph] = convert_html("<p>ship it :rocket:</p>", options)
        assert _texts(paragraph.children) == ["ship it \U0001F680"]

    def test_emoji_disabled(self, options):
        opts = options.model_copy(update={"emoji_enabled": False})
        [paragraph] = convert_html("<p>ship it :rocket:</p>", opts)
        assert _texts(paragraph.children) == ["ship it :rocket:"]

    def test_empty_html(self, options):
        assert convert_html("", options) == []

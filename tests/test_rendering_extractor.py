"""Unit tests for src.rendering.extractor."""

from __future__ import annotations

from types import SimpleNamespace

from bs4 import BeautifulSoup

from src.rendering.extractor import extract_text
from src.rendering.models import NodeKind, RenderNode


def _text(value: str) -> RenderNode:
    return RenderNode(kind=NodeKind.TEXT, text=value)


class TestLeavesAndSequences:
    def test_plain_string(self):
        assert extract_text("hello") == "hello"

    def test_flat_list(self):
        assert extract_text(["a", "b", "c"]) == "abc"

    def test_nested_sequences_keep_order(self):
        assert extract_text(["a", ("b", ["c", "d"]), "e"]) == "abcde"

    def test_no_separators_inserted(self):
        assert extract_text(["line one\n", "line two"]) == "line one\nline two"

    def test_empty_list(self):
        assert extract_text([]) == ""


class TestUnrecognizedShapes:
    def test_none(self):
        assert extract_text(None) == ""

    def test_number(self):
        assert extract_text(42) == ""

    def test_mixed_with_unknown_leaves(self):
        assert extract_text([None, "a", 3.5, "b", object()]) == "ab"

    def test_bytes_are_not_text(self):
        assert extract_text(b"raw") == ""

    def test_children_attribute_that_raises(self):
        class Broken:
            @property
            def children(self):
                raise RuntimeError("detached")

        assert extract_text(["a", Broken(), "b"]) == "ab"


class TestComposites:
    def test_render_node_text_then_children(self):
        node = RenderNode(
            kind=NodeKind.PARAGRAPH,
            children=[_text("Hello "), RenderNode(kind=NodeKind.STRONG, children=[_text("world")])],
        )
        assert extract_text(node) == "Hello world"

    def test_object_with_children_attribute(self):
        fragment = SimpleNamespace(children=["a", SimpleNamespace(children=["b", "c"])])
        assert extract_text(fragment) == "abc"

    def test_children_attribute_holding_a_string(self):
        assert extract_text(SimpleNamespace(children="inner")) == "inner"

    def test_children_attribute_not_iterable(self):
        assert extract_text(SimpleNamespace(children=7)) == ""

    def test_beautifulsoup_tag(self):
        soup = BeautifulSoup("<p>a<b>b<i>c</i></b>d</p>", "html.parser")
        assert extract_text(soup.p) == "abcd"


class TestDepthAndLength:
    def test_very_deep_sequence(self):
        fragment: object = "x"
        for _ in range(5000):
            fragment = [fragment, "y"]
        result = extract_text(fragment)
        assert len(result) == 5001
        assert result == "x" + "y" * 5000

    def test_very_deep_render_nodes(self):
        node = _text("leaf")
        for _ in range(3000):
            node = RenderNode(kind=NodeKind.ELEMENT, children=[node])
        assert extract_text(node) == "leaf"

    def test_length_is_sum_of_leaf_lengths(self):
        leaves = ["alpha", "", "βeta", "γ\n", "delta"]
        fragment = [leaves[0], [leaves[1], [leaves[2]]], SimpleNamespace(children=leaves[3:])]
        assert len(extract_text(fragment)) == sum(len(leaf) for leaf in leaves)

"""Tests for markdown tokenization."""

from unittest.mock import patch

import pytest

from md_pdf.errors import MalformedDocumentError
from md_pdf.inline import split_inline
from md_pdf.tokens import Token, TokenKind, tokenize


class TestBlocks:
    def test_heading_and_paragraph(self):
        assert tokenize("# Title\n\nHello **world**") == [
            Token.heading(1, "Title"),
            Token.paragraph("Hello **world**"),
        ]

    def test_heading_depths(self):
        tokens = tokenize("# a\n\n## b\n\n### c\n\n#### d\n\n##### e\n\n###### f")
        assert [t.depth for t in tokens] == [1, 2, 3, 4, 5, 6]
        assert all(t.kind is TokenKind.HEADING for t in tokens)

    def test_rule(self):
        assert tokenize("---") == [Token.rule()]

    def test_empty_input(self):
        assert tokenize("") == []
        assert tokenize("   \n\n  ") == []

    def test_code_block_is_verbatim(self):
        tokens = tokenize("```\nconst code = 'test';\n  indented **not bold**\n```")
        assert tokens == [Token.code("const code = 'test';\n  indented **not bold**")]

    def test_indented_code_block(self):
        tokens = tokenize("Intro\n\n    x = 1\n    y = 2\n")
        assert tokens[-1] == Token.code("x = 1\ny = 2")


class TestLists:
    def test_bullet_items(self):
        tokens = tokenize("* List item 1\n* List item **2**\n")
        assert tokens == [Token.bullet_list(["List item 1", "List item **2**"])]

    def test_nested_items_flattened_in_order(self):
        tokens = tokenize("* one\n    * nested\n* two\n")
        assert tokens[0].kind is TokenKind.LIST
        assert tokens[0].items == ("one", "nested", "two")

    def test_ordered_list(self):
        tokens = tokenize("1. first\n2. second\n")
        assert tokens == [Token.bullet_list(["first", "second"])]


class TestInlineFormatting:
    def test_italic_markers_dropped(self):
        tokens = tokenize("**Bold text** and *italic text*")
        assert tokens == [Token.paragraph("**Bold text** and italic text")]

    def test_special_characters_survive(self):
        tokens = tokenize("Text: áéíóú ñ & < > © 你好")
        assert tokens[0].text == "Text: áéíóú ñ & < > © 你好"

    def test_blockquote_paragraphs(self):
        tokens = tokenize("> quoted **text**")
        assert tokens == [Token.paragraph("quoted **text**")]

    def test_table_rows_become_paragraphs(self):
        tokens = tokenize("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert [t.text for t in tokens] == ["a | b", "1 | 2"]


class TestLiteralAsterisks:
    def test_code_spans_are_escaped(self):
        tokens = tokenize("Pass `**kwargs` and `**opts` through")
        assert tokens[0].text == r"Pass \*\*kwargs and \*\*opts through"

    def test_backslash_escaped_asterisks(self):
        tokens = tokenize(r"2 \*\* 3 equals 8, and 3 \*\* 2 equals 9")
        assert tokens[0].text == r"2 \*\* 3 equals 8, and 3 \*\* 2 equals 9"

    def test_bold_markers_stay_unescaped(self):
        tokens = tokenize("**see `**kw`**")
        assert tokens[0].text == r"**see \*\*kw**"

    def test_backslash_in_code_span(self):
        tokens = tokenize(r"Use `C:\temp` here")
        assert tokens[0].text == r"Use C:\\temp here"


class TestLineBreaks:
    def test_soft_break_becomes_space(self):
        tokens = tokenize("first line\nsecond line")
        assert tokens == [Token.paragraph("first line second line")]

    def test_hard_break_kept(self):
        tokens = tokenize("first line  \nsecond line")
        assert tokens == [Token.paragraph("first line\nsecond line")]

    def test_soft_break_in_list_item(self):
        tokens = tokenize("- one\n  continued\n- two\n")
        assert tokens == [Token.bullet_list(["one continued", "two"])]


class TestVisibleText:
    @pytest.mark.parametrize("source, visible", [
        ("Plain words only", "Plain words only"),
        ("first line\nsecond line", "first line second line"),
        ("Hello **world**", "Hello world"),
        ("Pass `**kwargs` and `**opts` through", "Pass **kwargs and **opts through"),
        (r"2 \*\* 3 equals 8", "2 ** 3 equals 8"),
        ("a ***b*** c", "a b c"),
        (r"Use `C:\temp` here", r"Use C:\temp here"),
        ("Text: áéíóú ñ & < > ©", "Text: áéíóú ñ & < > ©"),
    ])
    def test_visible_text_matches_source(self, source, visible):
        text = tokenize(source)[0].text
        assert "".join(s.content for s in split_inline(text)) == visible


class TestErrors:
    def test_non_text_input(self):
        with pytest.raises(MalformedDocumentError):
            tokenize(b"# bytes")

    def test_parser_failure_is_wrapped(self):
        with patch("md_pdf.tokens.markdown.markdown", side_effect=ValueError("boom")):
            with pytest.raises(MalformedDocumentError, match="boom"):
                tokenize("# Title")

"""Tests for the DSL scanner."""

import logging

import pytest

from entigen.core.lexer import Token, TokenKind, classify, tokenize


def values(text: str) -> list[str]:
    return [token.value for token in tokenize(text)]


class TestClassify:
    @pytest.mark.parametrize(
        "text,kind",
        [
            ("42", TokenKind.NUMBER),
            ("0", TokenKind.NUMBER),
            ("18446744073709551615", TokenKind.NUMBER),
            ("18446744073709551616", TokenKind.DECIMAL),
            ("4.2", TokenKind.DECIMAL),
            ("1e5", TokenKind.DECIMAL),
            ("true", TokenKind.BOOL),
            ("false", TokenKind.BOOL),
            (".", TokenKind.SELECTOR),
            (":=", TokenKind.OPERATOR),
            ("and", TokenKind.OPERATOR),
            ("<=", TokenKind.OPERATOR),
            (";", TokenKind.SEPARATOR),
            ('"text"', TokenKind.STRING),
            ("User", TokenKind.IDENTIFIER),
            ("nan", TokenKind.IDENTIFIER),
            ("inf", TokenKind.IDENTIFIER),
        ],
    )
    def test_kinds(self, text, kind):
        assert classify(text) is kind

    def test_token_of_classifies(self):
        token = Token.of("12", 3, 7)
        assert token.kind is TokenKind.NUMBER
        assert (token.line, token.column) == (3, 7)


class TestTokenize:
    def test_entity_declaration(self):
        tokens = tokenize("entity User { name: String [Editable]; }")
        assert [t.value for t in tokens] == [
            "entity", "User", "{", "name", ":", "String", "[", "Editable", "]", ";", "}",
        ]
        assert tokens[0].kind is TokenKind.IDENTIFIER
        assert tokens[2].kind is TokenKind.SEPARATOR
        assert tokens[4].kind is TokenKind.OPERATOR

    def test_separators_are_single_tokens(self):
        assert values("{}();,") == ["{", "}", "(", ")", ";", ","]

    def test_operator_runs_form_one_token(self):
        assert values("a:=b") == ["a", ":=", "b"]
        assert values("x <= y") == ["x", "<=", "y"]

    def test_dot_is_separator_outside_numbers(self):
        tokens = tokenize("user.name")
        assert [t.value for t in tokens] == ["user", ".", "name"]
        assert tokens[1].kind is TokenKind.SELECTOR

    def test_dot_inside_number_is_decimal(self):
        tokens = tokenize("price = 3.14;")
        assert tokens[2].value == "3.14"
        assert tokens[2].kind is TokenKind.DECIMAL

    def test_number_then_selector(self):
        assert values("x.5") == ["x", ".", "5"]

    def test_line_comment_stripped(self):
        assert values("a // comment ; {\nb") == ["a", "b"]

    def test_block_comment_stripped(self):
        assert values("a /* x ; y */ b") == ["a", "b"]

    def test_comment_terminates_word(self):
        assert values("a//c\nb") == ["a", "b"]


class TestStrings:
    def test_whitespace_preserved(self):
        tokens = tokenize('label = "hello   world";')
        assert tokens[2].value == '"hello   world"'
        assert tokens[2].kind is TokenKind.STRING
        assert tokens[2].string_value == "hello   world"

    def test_symbols_inside_string(self):
        assert values('"a;b{c}//d"') == ['"a;b{c}//d"']

    def test_escaped_quote_does_not_terminate(self):
        tokens = tokenize(r'"say \"hi\"" x')
        assert tokens[0].value == r'"say \"hi\""'
        assert tokens[1].value == "x"

    def test_unterminated_string_is_total(self, caplog):
        with caplog.at_level(logging.WARNING, logger="entigen.core.lexer"):
            tokens = tokenize('a "never closed')
        assert tokens[-1].kind is TokenKind.STRING
        assert tokens[-1].value == '"never closed'
        assert "unterminated string" in caplog.text


class TestPositions:
    def test_line_and_column(self):
        tokens = tokenize("entity A {\n  x: String;\n}")
        x = tokens[3]
        assert x.value == "x"
        assert (x.line, x.column) == (2, 3)
        assert (tokens[-1].line, tokens[-1].column) == (3, 1)

    def test_column_resets_after_line_comment(self):
        tokens = tokenize("// header\n  b")
        assert (tokens[0].line, tokens[0].column) == (2, 3)

    def test_block_comment_counts_lines(self):
        tokens = tokenize("/* one\ntwo\nthree */ a")
        assert tokens[0].line == 3

    def test_empty_source(self):
        assert tokenize("") == []
        assert tokenize("  // only a comment\n") == []

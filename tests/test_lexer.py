import re

import pytest

from atomc.lexer import Token, TokenCode, format_tokens, show_tokens, tokenize
from atomc.utils import AtomCError

KEYWORDS_SRC = (
    "struct Point { int x; double y; char z; };\n"
    "void foo() { return; }\n"
    "int bar(int n) { if (n > 0) return n; else { while (n < 0) n = n + 1; return n; } }\n"
)

NUMBERS_SRC = "0 123 999 1.5 3.14 1e10 2.5e3 1.0e-5 49e-1 0.49E1"

OPERATORS_SRC = "a.x + - * / == != < <= > >= && || ! ="

STRINGS_CHARS_SRC = "'a' 'Z' '9' '#' \"hello\" \"world\" \"AtomC test\" \"\""

STRUCT_SRC = "p.x = 10;\narr[0] = p.x + p.y;"

MIXED_SRC = (
    "// a comment line\n"
    "if(4.9==49e-1&&0.49E1==2.45*2.0)puts(\"yes\");\n"
    "putc('#'); main"
)


def codes(tokens):
    return [tk.code for tk in tokens]


def values(tokens, code):
    return [tk.value for tk in tokens if tk.code == code]


@pytest.mark.parametrize(
    "source",
    [KEYWORDS_SRC, NUMBERS_SRC, OPERATORS_SRC, STRINGS_CHARS_SRC, STRUCT_SRC, MIXED_SRC],
)
def test_valid_sources_end_with_end_token(source):
    tokens = tokenize(source)
    assert tokens[-1].code == TokenCode.END
    assert codes(tokens).count(TokenCode.END) == 1


def test_keywords():
    tokens = tokenize(KEYWORDS_SRC)
    found = set(codes(tokens))
    for code in (
        TokenCode.STRUCT,
        TokenCode.TYPE_INT,
        TokenCode.TYPE_DOUBLE,
        TokenCode.TYPE_CHAR,
        TokenCode.VOID,
        TokenCode.RETURN,
        TokenCode.IF,
        TokenCode.ELSE,
        TokenCode.WHILE,
    ):
        assert code in found
    assert codes(tokens)[:3] == [TokenCode.STRUCT, TokenCode.ID, TokenCode.LACC]
    assert tokens[1].value == "Point"
    assert values(tokens, TokenCode.ID)[:4] == ["Point", "x", "y", "z"]
    assert tokens[-1].line == 4


def test_numbers():
    tokens = tokenize(NUMBERS_SRC)
    assert values(tokens, TokenCode.INT) == [0, 123, 999]
    assert values(tokens, TokenCode.DOUBLE) == pytest.approx(
        [1.5, 3.14, 1e10, 2.5e3, 1.0e-5, 4.9, 4.9]
    )


def test_operators():
    assert codes(tokenize(OPERATORS_SRC)) == [
        TokenCode.ID,
        TokenCode.DOT,
        TokenCode.ID,
        TokenCode.ADD,
        TokenCode.SUB,
        TokenCode.MUL,
        TokenCode.DIV,
        TokenCode.EQUAL,
        TokenCode.NOTEQ,
        TokenCode.LESS,
        TokenCode.LESSEQ,
        TokenCode.GREATER,
        TokenCode.GREATEREQ,
        TokenCode.AND,
        TokenCode.OR,
        TokenCode.NOT,
        TokenCode.ASSIGN,
        TokenCode.END,
    ]


def test_strings_and_chars():
    tokens = tokenize(STRINGS_CHARS_SRC)
    assert values(tokens, TokenCode.CHAR) == ["a", "Z", "9", "#"]
    assert values(tokens, TokenCode.STRING) == ["hello", "world", "AtomC test", ""]


def test_struct_member_access():
    tokens = tokenize(STRUCT_SRC)
    first_line = [tk for tk in tokens if tk.line == 1]
    assert codes(first_line) == [
        TokenCode.ID,
        TokenCode.DOT,
        TokenCode.ID,
        TokenCode.ASSIGN,
        TokenCode.INT,
        TokenCode.SEMICOLON,
    ]
    assert [tk.value for tk in first_line] == ["p", None, "x", None, 10, None]
    second_line = [tk for tk in tokens if tk.line == 2]
    assert codes(second_line)[:4] == [
        TokenCode.ID,
        TokenCode.LBRACKET,
        TokenCode.INT,
        TokenCode.RBRACKET,
    ]


def test_mixed_source():
    tokens = tokenize(MIXED_SRC)
    assert tokens[0] == Token(TokenCode.IF, 2)
    assert tokens[-2] == Token(TokenCode.ID, 3, "main")
    assert values(tokens, TokenCode.DOUBLE) == pytest.approx([4.9, 4.9, 4.9, 2.45, 2.0])
    assert values(tokens, TokenCode.CHAR) == ["#"]
    assert values(tokens, TokenCode.STRING) == ["yes"]
    assert tokens[-1].line == 3


@pytest.mark.parametrize(
    "source, message",
    [
        ("a = 1 @ 2;", "caracter invalid: @ (64)"),
        ("c = '\\x';", "secventa de escape invalida: \\x"),
        ("d = 1.5e;", "cifre lipsa dupa exponent"),
        ("a = 1 & 2;", "caracter invalid: &"),
        ("a = 1 | 2;", "caracter invalid: |"),
        ("c = 'ab';", "lipseste apostroful de inchidere"),
        ('puts("hello world);', "lipseste ghilimeaua de inchidere"),
    ],
)
def test_wrong_sources(source, message):
    with pytest.raises(AtomCError, match=re.escape(message)):
        tokenize(source)


def test_unescaped_apostrophe_in_char():
    with pytest.raises(AtomCError, match="apostrof fara escape"):
        tokenize("''")


def test_escapes_in_string_and_char():
    tokens = tokenize(r'"a\tb\n" ' + r"'\0'")
    assert tokens[0].value == "a\tb\n"
    assert tokens[1].value == "\0"


def test_comment_and_crlf_lines():
    tokens = tokenize("int x; // note\r\nchar\ry")
    assert codes(tokens) == [
        TokenCode.TYPE_INT,
        TokenCode.ID,
        TokenCode.SEMICOLON,
        TokenCode.TYPE_CHAR,
        TokenCode.ID,
        TokenCode.END,
    ]
    assert [tk.line for tk in tokens] == [1, 1, 1, 2, 3, 3]


def test_dot_not_followed_by_digit_stays_int():
    tokens = tokenize("1.x")
    assert codes(tokens) == [TokenCode.INT, TokenCode.DOT, TokenCode.ID, TokenCode.END]


def test_format_tokens_single_line():
    assert format_tokens(tokenize("int x;")) == "Line 1  : TYPE_INT ID:x SEMICOLON END \n"


def test_format_tokens_values_and_lines():
    text = format_tokens(tokenize("1.5 'a'\n\"s\" 7"))
    assert text == "Line 1  : DOUBLE:1.50 CHAR:a \nLine 2  : STRING:s INT:7 END \n"


def test_show_tokens_prints(capsys):
    tokens = tokenize("x")
    show_tokens(tokens)
    assert capsys.readouterr().out == format_tokens(tokens)
import pytest

from lexer import (
    LBRACKET,
    NUMBER,
    OPERATOR,
    RBRACKET,
    CalcError,
    InvalidToken,
    Lexer,
    Token,
    parse_number,
    tokenize,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0x1A", 26),
        ("0x1a", 26),
        ("0b101", 5),
        ("7", 7),
        ("-7", -7),
        ("+7", 7),
        ("0", 0),
        ("0x-1A", -26),
        ("0b-11", -3),
        ("9223372036854775807", 9223372036854775807),
        ("-9223372036854775808", -9223372036854775808),
        ("0x7FFFFFFFFFFFFFFF", 9223372036854775807),
    ],
)
def test_parse_number_accepts_literals(raw, expected):
    assert parse_number(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "+",
        "-",
        "0x",
        "0b",
        "0b102",
        "0xG",
        "1_000",
        " 7",
        "7 ",
        "-0x1A",
        "0x0x1",
        "1.5",
        "9223372036854775808",
        "0x8000000000000000",
        "٣",
    ],
)
def test_parse_number_rejects_non_literals(raw):
    assert parse_number(raw) is None


def test_tokenize_numbers():
    assert tokenize("0x1A") == Token(NUMBER, 26, 0)
    assert tokenize("0b101") == Token(NUMBER, 5, 0)
    assert tokenize("7", 3) == Token(NUMBER, 7, 3)


@pytest.mark.parametrize("raw", ["+", "x", "/"])
def test_tokenize_operators(raw):
    token = tokenize(raw)
    assert token.kind == OPERATOR
    assert token.value == raw


def test_tokenize_brackets():
    assert tokenize("[").kind == LBRACKET
    assert tokenize("]").kind == RBRACKET


@pytest.mark.parametrize("raw", ["-", "*", "X", "xx", "++", "(", "[[", "abc", "0x"])
def test_tokenize_invalid(raw):
    with pytest.raises(InvalidToken) as excinfo:
        tokenize(raw, 4)
    assert excinfo.value.raw == raw
    assert excinfo.value.position == 4
    assert raw in excinfo.value.message


def test_invalid_token_is_calc_error():
    with pytest.raises(CalcError):
        tokenize("?")


def test_token_is_immutable():
    token = tokenize("1")
    with pytest.raises(Exception):
        token.value = 2


def test_lexer_keeps_argument_order_and_positions():
    tokens = Lexer(["[", "3", "+", "0x4", "]", "x", "0b10"]).tokenize()
    assert [t.kind for t in tokens] == [LBRACKET, NUMBER, OPERATOR, NUMBER, RBRACKET, OPERATOR, NUMBER]
    assert [t.value for t in tokens] == ["[", 3, "+", 4, "]", "x", 2]
    assert [t.position for t in tokens] == list(range(7))


def test_lexer_fails_on_first_invalid_argument():
    with pytest.raises(InvalidToken) as excinfo:
        Lexer(["1", "+", "foo", "bar"]).tokenize()
    assert excinfo.value.raw == "foo"
    assert excinfo.value.position == 2


def test_lexer_empty_input():
    assert Lexer([]).tokenize() == []

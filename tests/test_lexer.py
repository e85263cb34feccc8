import notation_compiler as nc
from notation_compiler import Lexer, Token


def types(text):
    return [t.type for t in Lexer(text).tokens]


def values(text):
    return [t.value for t in Lexer(text).tokens]


def test_canonical_expression():
    assert types("sqrt(a*8-8)") == ["FUNC", "LPAREN", "ID", "OP", "NUMBER", "OP", "NUMBER", "RPAREN"]
    assert values("sqrt(a*8-8)") == ["sqrt", "(", "a", "*", "8", "-", "8", ")"]


def test_positions_skip_whitespace():
    assert Lexer("ab + 12").tokens == [
        Token("ID", "ab", 0),
        Token("OP", "+", 3),
        Token("NUMBER", "12", 5),
    ]


def test_reserved_words_split_greedily():
    assert values("sqrtx") == ["sqrt", "x"]
    assert types("sqrtx") == ["FUNC", "ID"]
    assert values("logarithm") == ["log", "arithm"]
    assert types("xlog") == ["ID"]


def test_pow_and_comma():
    assert types("pow(2,3)") == ["FUNC", "LPAREN", "NUMBER", "COMMA", "NUMBER", "RPAREN"]
    assert types("pow (2,3)")[0] == "FUNC"


def test_pow_is_only_a_function_before_its_arguments():
    assert Lexer("power*2").tokens[0] == Token("ID", "power", 0)
    assert types("pow*2") == ["ID", "OP", "NUMBER"]
    assert types("powx(2)") == ["ID", "LPAREN", "NUMBER", "RPAREN"]
    assert types("pow") == ["ID"]


def test_letters_and_digits_split():
    assert values("2x") == ["2", "x"]
    assert values("x2") == ["x", "2"]


def test_decimal_numbers():
    lexer = Lexer("3.14+.5")
    assert [t.value for t in lexer.tokens] == ["3.14", "+", ".5"]
    assert lexer.diagnostics == []


def test_second_decimal_point_is_reported_once():
    lexer = Lexer("1.2.3+4")
    assert values("1.2.3+4") == ["1.2.3", "+", "4"]
    assert len(lexer.diagnostics) == 1
    assert lexer.diagnostics[0].kind == nc.MALFORMED_NUMBER
    assert str(lexer.diagnostics[0]) == "MalformedNumber: Invalid number format: 1.2.3"


def test_lone_decimal_point_is_dropped():
    lexer = Lexer("3 + .")
    assert [t.value for t in lexer.tokens] == ["3", "+"]
    assert lexer.diagnostics == []


def test_placeholder_reference():
    assert Lexer("&12*2").tokens[0] == Token("PLACEHOLDER", "&12", 0)


def test_non_ascii_digits_are_unexpected():
    lexer = Lexer("2\u00b2+1")
    assert types("2\u00b2+1") == ["NUMBER", "UNKNOWN", "OP", "NUMBER"]
    assert lexer.tokens[0].value == "2"
    assert lexer.diagnostics == [nc.Diagnostic(nc.UNEXPECTED_CHARACTER, "Unexpected character '\u00b2'", 1)]


def test_unexpected_character():
    lexer = Lexer("3$4")
    assert types("3$4") == ["NUMBER", "UNKNOWN", "NUMBER"]
    assert lexer.diagnostics[0].kind == nc.UNEXPECTED_CHARACTER
    assert lexer.diagnostics[0].pos == 1


def test_bare_ampersand_is_unexpected():
    lexer = Lexer("&+1")
    assert lexer.tokens[0].type == "UNKNOWN"


def test_whitespace_only():
    assert Lexer(" \t ").tokens == []


def test_peek_all_returns_a_copy():
    lexer = Lexer("1+2")
    tokens = lexer.peek_all()
    tokens.clear()
    assert len(lexer.tokens) == 3

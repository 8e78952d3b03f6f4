import pytest
from hypothesis import given
from hypothesis import strategies as st

from pseudolang.pseudo_constants import TokenType, keyword_map
from pseudolang.pseudo_errors import UnterminatedCommentError, UnterminatedStringError
from pseudolang.pseudo_lexer import CharacterStream, Lexer, Token, tokenize


def types(source: str) -> list[TokenType]:
    return [tok.type for tok in tokenize(source)[:-1]]


def test_declaration_tokens_and_positions() -> None:
    tokens = tokenize("declare x <- 5;")
    assert tokens == [
        Token(TokenType.DECLARE, "declare", 1, 1),
        Token(TokenType.IDENT, "x", 1, 9),
        Token(TokenType.ASSIGN, "<-", 1, 11),
        Token(TokenType.NUMBER, "5", 1, 14),
        Token(TokenType.SEMICOLON, ";", 1, 15),
        Token(TokenType.EOF, "", 1, 16),
    ]


def test_empty_source_is_only_eof() -> None:
    assert tokenize("") == [Token(TokenType.EOF, "", 1, 1)]


def test_eof_is_always_last() -> None:
    tokens = tokenize("put(1);\n\n")
    assert tokens[-1].type == TokenType.EOF
    assert sum(1 for t in tokens if t.type == TokenType.EOF) == 1


def test_all_single_word_keywords() -> None:
    for word, token_type in keyword_map.items():
        assert types(word) == [token_type]


def test_keywords_are_case_sensitive() -> None:
    assert types("IF Declare PUT") == [TokenType.IDENT] * 3


def test_operators() -> None:
    code = "+ - * / = != < <= > >= <- ( ) { } , ;"
    assert types(code) == [
        TokenType.PLUS,
        TokenType.MINUS,
        TokenType.STAR,
        TokenType.SLASH,
        TokenType.EQUAL,
        TokenType.NOT_EQUAL,
        TokenType.LESS,
        TokenType.LESS_EQUAL,
        TokenType.GREATER,
        TokenType.GREATER_EQUAL,
        TokenType.ASSIGN,
        TokenType.LPAREN,
        TokenType.RPAREN,
        TokenType.LBRACE,
        TokenType.RBRACE,
        TokenType.COMMA,
        TokenType.SEMICOLON,
    ]


def test_assign_wins_over_less_without_spaces() -> None:
    assert types("a<-b") == [TokenType.IDENT, TokenType.ASSIGN, TokenType.IDENT]


def test_less_then_minus_with_space() -> None:
    assert types("a < -b") == [
        TokenType.IDENT,
        TokenType.LESS,
        TokenType.MINUS,
        TokenType.IDENT,
    ]


def test_bang_alone_is_unknown() -> None:
    tokens = tokenize("! x")
    assert tokens[0] == Token(TokenType.UNKNOWN, "!", 1, 1)
    assert tokens[1].type == TokenType.IDENT


def test_unknown_characters() -> None:
    assert types("@ # $") == [TokenType.UNKNOWN] * 3


@pytest.mark.parametrize(
    "source, expected",
    [
        ("end if", TokenType.END_IF),
        ("end loop", TokenType.END_LOOP),
        ("end procedure", TokenType.END_PROCEDURE),
    ],
)  # type: ignore[misc]
def test_fused_keywords(source: str, expected: TokenType) -> None:
    tokens = tokenize(source)
    assert tokens[0] == Token(expected, source, 1, 1)
    assert tokens[1].type == TokenType.EOF


def test_fused_keyword_across_newline() -> None:
    tokens = tokenize("end\n   loop;")
    assert tokens[0] == Token(TokenType.END_LOOP, "end loop", 1, 1)
    assert tokens[1] == Token(TokenType.SEMICOLON, ";", 2, 8)


def test_unfused_end_is_restored() -> None:
    tokens = tokenize("end x")
    assert tokens[0] == Token(TokenType.END, "end", 1, 1)
    assert tokens[1] == Token(TokenType.IDENT, "x", 1, 5)


def test_end_before_prefix_of_keyword_is_not_fused() -> None:
    # `iffy` only starts with `if`
    assert types("end iffy") == [TokenType.END, TokenType.IDENT]


def test_end_at_eof() -> None:
    assert types("end") == [TokenType.END]


def test_endif_is_plain_identifier() -> None:
    assert types("endif") == [TokenType.IDENT]


def test_line_comment_skipped() -> None:
    tokens = tokenize("// a comment\nput")
    assert tokens[0] == Token(TokenType.PUT, "put", 2, 1)


def test_block_comment_skipped_with_positions() -> None:
    tokens = tokenize("/* a\n b */ x")
    assert tokens[0] == Token(TokenType.IDENT, "x", 2, 7)


def test_slash_is_division_when_not_comment() -> None:
    assert types("a / b") == [TokenType.IDENT, TokenType.SLASH, TokenType.IDENT]


def test_unterminated_block_comment_raises() -> None:
    with pytest.raises(UnterminatedCommentError) as excinfo:
        tokenize("x /* never closed", filename="prog.pseudo")
    location = excinfo.value.location
    assert location is not None  # for mypy
    assert (location.line, location.column) == (1, 3)
    assert str(excinfo.value) == "prog.pseudo:1:3: error: unterminated comment"


def test_string_literal() -> None:
    tokens = tokenize('put("hi there");')
    assert tokens[2] == Token(TokenType.STRING, "hi there", 1, 5)


def test_unterminated_string_at_newline_raises() -> None:
    with pytest.raises(UnterminatedStringError, match="unterminated string"):
        tokenize('put("abc\n);')


def test_unterminated_string_lenient_mode() -> None:
    tokens = tokenize('"abc', strict=False)
    assert tokens[0] == Token(TokenType.UNTERMINATED_STRING, "abc", 1, 1)
    assert tokens[1].type == TokenType.EOF


def test_numbers_are_kept_verbatim() -> None:
    tokens = tokenize("007 42")
    assert [t.value for t in tokens[:-1]] == ["007", "42"]


def test_non_ascii_digits_are_not_numbers() -> None:
    assert types("٣") == [TokenType.UNKNOWN]


def test_character_stream_tracks_lines() -> None:
    stream = CharacterStream("a\nb")
    assert stream.next() == "a"
    assert stream.next() == "\n"
    assert (stream.line, stream.column) == (2, 1)
    assert stream.peek() == "b"
    assert stream.peek(5) == ""


def test_character_stream_past_end_raises() -> None:
    stream = CharacterStream("")
    with pytest.raises(EOFError):
        stream.next()


def test_character_stream_mark_and_reset() -> None:
    stream = CharacterStream("abc")
    state = stream.mark()
    stream.next()
    stream.next()
    stream.reset(state)
    assert stream.peek() == "a"
    assert stream.column == 1


def test_lexer_class_matches_function() -> None:
    source = "while i < 3 loop i <- i + 1; end loop;"
    assert Lexer(CharacterStream(source)).tokenize() == tokenize(source)


def test_token_repr() -> None:
    assert repr(Token(TokenType.IDENT, "x", 2, 4)) == "Token(IDENT, 'x', 2:4)"


@given(st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,12}", fullmatch=True))  # type: ignore[misc]
def test_identifiers_roundtrip(name: str) -> None:
    tokens = tokenize(name)
    expected = keyword_map.get(name, TokenType.IDENT)
    assert tokens[0] == Token(expected, name, 1, 1)
    assert len(tokens) == 2


@given(st.integers(min_value=0, max_value=10**30))  # type: ignore[misc]
def test_integer_literals(n: int) -> None:
    tokens = tokenize(str(n))
    assert tokens[0] == Token(TokenType.NUMBER, str(n), 1, 1)


@given(st.text(alphabet=st.characters(exclude_characters='"\n\r'), max_size=20))  # type: ignore[misc]
def test_string_contents_preserved(text: str) -> None:
    tokens = tokenize(f'"{text}"')
    assert tokens[0].type == TokenType.STRING
    assert tokens[0].value == text

"""
Lexical and syntactic tables shared by the PseudoLang lexer, parser and emitters.

Contents:
    TokenType: Closed enumeration of every lexical category the lexer can produce.
    keyword_map: Single-word keywords mapped to their token type.
    multi_word_keyword_map: Fused two-word keywords (`end if`, ...) mapped to their token type.
    symbol_map: Operator and punctuation spellings mapped to their token type.
    binary_operators: Token types accepted between two primaries in an expression.
    NODE_KINDS: The closed set of AST node kinds.

Keywords are case-sensitive: `if` is a keyword, `IF` is a plain identifier.
"""

from enum import Enum


class TokenType(str, Enum):
    """Lexical categories of PseudoLang tokens."""

    # keywords
    IF = "IF"
    ELSE = "ELSE"
    ELSEIF = "ELSEIF"
    WHILE = "WHILE"
    DECLARE = "DECLARE"
    PUT = "PUT"
    THEN = "THEN"
    LOOP = "LOOP"
    PROCEDURE = "PROCEDURE"
    BEGIN = "BEGIN"
    END = "END"
    RETURN = "RETURN"

    # fused two-word keywords
    END_IF = "END_IF"
    END_LOOP = "END_LOOP"
    END_PROCEDURE = "END_PROCEDURE"

    # operators
    PLUS = "PLUS"
    MINUS = "MINUS"
    STAR = "STAR"
    SLASH = "SLASH"
    EQUAL = "EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    LESS = "LESS"
    LESS_EQUAL = "LESS_EQUAL"
    GREATER = "GREATER"
    GREATER_EQUAL = "GREATER_EQUAL"
    ASSIGN = "ASSIGN"

    # punctuation
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    COMMA = "COMMA"
    SEMICOLON = "SEMICOLON"

    # literals and names
    NUMBER = "NUMBER"
    STRING = "STRING"
    IDENT = "IDENT"

    # special
    EOF = "EOF"
    UNKNOWN = "UNKNOWN"
    UNTERMINATED_STRING = "UNTERMINATED_STRING"

    def __str__(self) -> str:
        return self.value


keyword_map: dict[str, TokenType] = {
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "elseif": TokenType.ELSEIF,
    "while": TokenType.WHILE,
    "declare": TokenType.DECLARE,
    "put": TokenType.PUT,
    "then": TokenType.THEN,
    "loop": TokenType.LOOP,
    "procedure": TokenType.PROCEDURE,
    "begin": TokenType.BEGIN,
    "end": TokenType.END,
    "return": TokenType.RETURN,
}

multi_word_keyword_map: dict[str, TokenType] = {
    "end if": TokenType.END_IF,
    "end loop": TokenType.END_LOOP,
    "end procedure": TokenType.END_PROCEDURE,
}

# First words that may open a fused keyword, e.g. {"end"}
multi_word_openers: frozenset[str] = frozenset(
    phrase.split(" ", 1)[0] for phrase in multi_word_keyword_map
)

# Longest spelling first so that `<-` and `<=` win over `<`
symbol_map: dict[str, TokenType] = {
    "<-": TokenType.ASSIGN,
    "<=": TokenType.LESS_EQUAL,
    ">=": TokenType.GREATER_EQUAL,
    "!=": TokenType.NOT_EQUAL,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "=": TokenType.EQUAL,
    "<": TokenType.LESS,
    ">": TokenType.GREATER,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
}

binary_operators: frozenset[TokenType] = frozenset(
    {
        TokenType.PLUS,
        TokenType.MINUS,
        TokenType.STAR,
        TokenType.SLASH,
        TokenType.EQUAL,
        TokenType.NOT_EQUAL,
        TokenType.LESS,
        TokenType.GREATER,
        TokenType.LESS_EQUAL,
        TokenType.GREATER_EQUAL,
    }
)

# Operators producing a truth value, printed as 1 or 0
relational_operators: frozenset[TokenType] = frozenset(
    {
        TokenType.EQUAL,
        TokenType.NOT_EQUAL,
        TokenType.LESS,
        TokenType.GREATER,
        TokenType.LESS_EQUAL,
        TokenType.GREATER_EQUAL,
    }
)

# Target-side spelling of each binary operator; emitters may override entries
operator_symbols: dict[TokenType, str] = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.EQUAL: "==",
    TokenType.NOT_EQUAL: "!=",
    TokenType.LESS: "<",
    TokenType.GREATER: ">",
    TokenType.LESS_EQUAL: "<=",
    TokenType.GREATER_EQUAL: ">=",
}

# Tokens that close a block body
block_terminators: frozenset[TokenType] = frozenset(
    {
        TokenType.END_IF,
        TokenType.END_LOOP,
        TokenType.END_PROCEDURE,
        TokenType.ELSE,
        TokenType.ELSEIF,
        TokenType.EOF,
    }
)

NODE_KINDS: frozenset[str] = frozenset(
    {
        "program",
        "declaration",
        "assignment",
        "binary_op",
        "identifier",
        "number",
        "string",
        "if",
        "elseif",
        "else",
        "while",
        "block",
        "put",
        "procedure",
        "procedure_call",
        "parameter",
        "return",
        "unknown",
    }
)

# Type tag for every declared variable; the tag set is open for extension
INTEGER = "int"

__all__ = [
    "INTEGER",
    "NODE_KINDS",
    "TokenType",
    "binary_operators",
    "block_terminators",
    "keyword_map",
    "multi_word_keyword_map",
    "multi_word_openers",
    "operator_symbols",
    "relational_operators",
    "symbol_map",
]

"""
PseudoLang Parser

Parses PseudoLang tokens into an abstract syntax tree rooted at a `program` node.

The parser is a single left-to-right recursive-descent pass with one token of
lookahead. It is split into a statement driver (`Parser`) and an expression
sub-parser (`ExpressionParser`); the two call into each other and share one
token cursor and one symbol table, both owned by the `Parser` instance for the
duration of a single `parse()` call.

Supported Constructs
--------------------
- Declarations:  `declare x;`  `declare x <- expr;`
- Assignments:   `x <- expr;`
- Output:        `put(expr);`
- Control flow:  `if c then ... elseif c then ... else ... end if;`
                 `while c loop ... end loop;`
- Procedures:    `procedure f(a, b) begin ... end procedure;` (top level only)
- Calls:         `f(1, x);` as a statement or inside an expression
- Return:        `return expr;` (inside blocks)

Expressions
-----------
There is no operator precedence. Every binary operator, arithmetic and
relational alike, chains strictly left to right over a flat list of
primaries: `a - b + c * d` parses as `((a - b) + c) * d`. Parentheses group.

Parser Behavior
---------------
- Diagnostic-first: syntax and name errors are recorded in a `DiagnosticLog`
  with line and column and parsing continues.
- A construct missing a required token yields None; the statement driver
  drops it and resynchronizes at the next statement boundary.
- Every block runs in its own scope of the `SymbolTable`. Procedure
  parameters are declared into a scope wrapping the procedure body.
- References to undeclared variables are reported but kept in the tree;
  assignments to undeclared variables are reported and dropped.

Entry Points
------------
- `Parser(tokens).parse()` / `parse(tokens)`: parse a full program.
"""

from __future__ import annotations

import logging

from pseudolang.pseudo_ast import ASTNode
from pseudolang.pseudo_constants import TokenType, binary_operators, block_terminators
from pseudolang.pseudo_errors import DiagnosticLog
from pseudolang.pseudo_lexer import Token
from pseudolang.pseudo_symbols import SymbolTable

logger = logging.getLogger(__name__)

# Keywords that always open a statement; used when resynchronizing
STATEMENT_KEYWORDS = frozenset(
    {
        TokenType.DECLARE,
        TokenType.PROCEDURE,
        TokenType.IF,
        TokenType.WHILE,
        TokenType.PUT,
        TokenType.RETURN,
    }
)

PRIMARY_STARTS = frozenset(
    {
        TokenType.NUMBER,
        TokenType.STRING,
        TokenType.IDENT,
        TokenType.LPAREN,
        TokenType.UNTERMINATED_STRING,
    }
)


def describe(tok: Token) -> str:
    """Human-readable name of a token for diagnostics."""
    if tok.type == TokenType.EOF:
        return "end of input"
    return f"'{tok.value}'"


class ExpressionParser:
    """Parses flat, left-associative expressions for a `Parser`.

    Attributes:
        parser (Parser): The statement driver owning the token cursor and scopes.
    """

    def __init__(self, parser: Parser) -> None:
        self.parser = parser

    def parse_expression(self) -> ASTNode | None:
        """Parse `Primary { BinOp Primary }*` into a left-leaning binary_op chain.

        Returns an `unknown` node when no operand starts the expression and
        None when an operator is left without a right operand.
        """
        p = self.parser
        start = p.peek()
        left = self.parse_primary()
        if left is None:
            if start.type in PRIMARY_STARTS:
                return None
            p.error(f"Expected expression, found {describe(start)}", start)
            return ASTNode("unknown", start)

        while p.peek().type in binary_operators:
            op_tok = p.advance()
            if p.peek().type not in PRIMARY_STARTS:
                p.error(f"Expected operand after {describe(op_tok)}", op_tok)
                return None
            right = self.parse_primary()
            if right is None:
                return None
            left = ASTNode("binary_op", op_tok, [left, right])
        return left

    def parse_primary(self) -> ASTNode | None:
        p = self.parser
        tok = p.peek()

        if tok.type == TokenType.NUMBER:
            return ASTNode("number", p.advance())
        if tok.type == TokenType.STRING:
            return ASTNode("string", p.advance())
        if tok.type == TokenType.UNTERMINATED_STRING:
            p.error("Unterminated string literal", p.advance())
            return ASTNode("unknown", tok)
        if tok.type == TokenType.IDENT:
            if p.peek(1).type == TokenType.LPAREN:
                return p.parse_procedure_call()
            return self.parse_identifier()
        if tok.type == TokenType.LPAREN:
            p.advance()
            expr = self.parse_expression()
            if expr is None:
                return None
            if not p.expect(TokenType.RPAREN, "')' to close expression"):
                return None
            return expr
        return None

    def parse_identifier(self) -> ASTNode:
        p = self.parser
        tok = p.advance()
        symbol = p.symbols.lookup(tok.value)
        if symbol is None:
            p.error(f"Undeclared variable '{tok.value}'", tok)
            return ASTNode("identifier", tok, binding=tok.value)
        return ASTNode(
            "identifier", tok, binding=symbol.binding, is_global=symbol.is_global
        )


class Parser:
    """
    PseudoLang statement parser.

    Transforms a token list (ending in EOF) into a `program` AST while
    validating declarations and uses against a scoped `SymbolTable`.

    Attributes
    ----------
    tokens : list[Token]
        The token stream to be parsed.
    position : int
        Index of the next unconsumed token.
    symbols : SymbolTable
        Scope stack for this parse only.
    diagnostics : DiagnosticLog
        Receives every error and warning, in source order.
    expressions : ExpressionParser
        The expression sub-parser sharing this cursor.
    procedures : dict[str, Token]
        Names of procedures defined so far, mapped to their name token.
    """

    def __init__(
        self, tokens: list[Token], diagnostics: DiagnosticLog | None = None
    ) -> None:
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.symbols = SymbolTable()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self.expressions = ExpressionParser(self)
        self.procedures: dict[str, Token] = {}
        self.calls: list[Token] = []

    # ------------------------------------------------------------------
    # cursor
    # ------------------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        index = min(self.position + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def previous(self) -> Token:
        return self.tokens[self.position - 1]

    def is_at_end(self) -> bool:
        return self.peek().type == TokenType.EOF

    def advance(self) -> Token:
        tok = self.peek()
        if not self.is_at_end():
            self.position += 1
        return tok

    def check(self, *types: TokenType) -> bool:
        return self.peek().type in types

    def match(self, *types: TokenType) -> Token | None:
        if self.check(*types):
            return self.advance()
        return None

    def expect(self, token_type: TokenType, what: str) -> Token | None:
        """Consume a token of `token_type` or report `Expected <what>`."""
        tok = self.match(token_type)
        if tok is None:
            found = self.peek()
            self.error(f"Expected {what}, found {describe(found)}", found)
        return tok

    def checkpoint(self) -> int:
        return self.position

    def restore(self, mark: int) -> None:
        """Rewind to a checkpoint taken earlier in the same statement."""
        if not 0 <= mark <= self.position:
            raise ValueError(f"Invalid parser checkpoint {mark} (at {self.position})")
        self.position = mark

    # ------------------------------------------------------------------
    # diagnostics
    # ------------------------------------------------------------------

    def error(self, message: str, tok: Token | None = None) -> None:
        tok = tok or self.peek()
        self.diagnostics.error(message, tok.line, tok.col)

    def warning(self, message: str, tok: Token | None = None) -> None:
        tok = tok or self.peek()
        self.diagnostics.warning(message, tok.line, tok.col)

    def starts_statement(self) -> bool:
        tok = self.peek()
        if tok.type in STATEMENT_KEYWORDS or tok.type in block_terminators:
            return True
        return tok.type == TokenType.IDENT and self.peek(1).type in (
            TokenType.ASSIGN,
            TokenType.LPAREN,
        )

    def synchronize(self) -> None:
        """Skip to the next statement boundary after a failed statement."""
        skipped = 0
        while not self.starts_statement():
            tok = self.advance()
            skipped += 1
            if tok.type == TokenType.SEMICOLON:
                break
        if skipped:
            logger.debug("skipped %d token(s) to resynchronize", skipped)

    # ------------------------------------------------------------------
    # program and blocks
    # ------------------------------------------------------------------

    def parse(self) -> ASTNode | None:
        """Parse a full PseudoLang program and return its `program` node.

        Returns None only when the token list is not a lexer product (empty
        or not terminated by EOF).
        """
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            logger.error("token stream must end with an EOF token")
            return None

        # Procedures and variables share one namespace in both targets
        for tok, name in zip(self.tokens, self.tokens[1:]):
            if tok.type == TokenType.PROCEDURE and name.type == TokenType.IDENT:
                self.symbols.reserve(name.value)

        program = ASTNode("program")
        while not self.is_at_end():
            if self.skip_empty_statement():
                continue
            node = self.parse_statement(top_level=True)
            if node is not None:
                program.children.append(node)
            else:
                self.synchronize()

        self.check_calls()
        logger.debug(
            "parsed %d top-level statement(s), %d diagnostic(s)",
            len(program.children),
            len(self.diagnostics),
        )
        return program

    def parse_block(self) -> ASTNode:
        """Parse statements up to a block terminator inside a fresh scope."""
        block = ASTNode("block", self.peek())
        self.symbols.enter_scope()
        try:
            while not self.check(*block_terminators):
                if self.skip_empty_statement():
                    continue
                node = self.parse_statement(top_level=False)
                if node is not None:
                    block.children.append(node)
                else:
                    self.synchronize()
        finally:
            self.symbols.exit_scope()
        return block

    def skip_empty_statement(self) -> bool:
        """Consume a stray `;` with a warning; True when one was skipped."""
        tok = self.match(TokenType.SEMICOLON)
        if tok is None:
            return False
        self.warning("Extra semicolon", tok)
        return True

    def parse_statement(self, top_level: bool) -> ASTNode | None:
        """Parse one statement; None means nothing usable was produced."""
        tok = self.peek()

        if tok.type == TokenType.DECLARE:
            return self.parse_declaration()
        if tok.type == TokenType.IDENT:
            return self.parse_identifier_statement()
        if tok.type == TokenType.IF:
            return self.parse_if()
        if tok.type == TokenType.WHILE:
            return self.parse_while()
        if tok.type == TokenType.PUT:
            return self.parse_put()
        if tok.type == TokenType.PROCEDURE and top_level:
            return self.parse_procedure()
        if tok.type == TokenType.RETURN and not top_level:
            return self.parse_return()

        self.advance()
        if tok.type == TokenType.PROCEDURE:
            self.error("Procedures may only be defined at top level", tok)
        elif tok.type == TokenType.RETURN:
            self.error("'return' outside of a block", tok)
        elif tok.type == TokenType.UNTERMINATED_STRING:
            self.error("Unterminated string literal", tok)
        else:
            self.error(f"Unexpected token {describe(tok)}", tok)
        return None

    def parse_identifier_statement(self) -> ASTNode | None:
        """Disambiguate `IDENT (` (call) from `IDENT <-` (assignment)."""
        mark = self.checkpoint()
        ident = self.advance()
        follow = self.peek().type
        if follow == TokenType.LPAREN:
            self.restore(mark)
            return self.parse_procedure_call_statement()
        if follow == TokenType.ASSIGN:
            self.restore(mark)
            return self.parse_assignment()
        self.error(
            f"Expected '<-' or '(' after identifier '{ident.value}', "
            f"found {describe(self.peek())}",
            ident,
        )
        return None

    # ------------------------------------------------------------------
    # statements
    # ------------------------------------------------------------------

    def parse_declaration(self) -> ASTNode | None:
        declare_tok = self.advance()
        ident = self.expect(TokenType.IDENT, "variable name after 'declare'")
        if ident is None:
            return None

        init = None
        if self.match(TokenType.ASSIGN):
            init = self.expressions.parse_expression()
            if init is None:
                return None

        if not self.expect(TokenType.SEMICOLON, "';' after declaration"):
            return None

        # Registered after the initializer: `declare x <- x;` reads the outer x
        symbol = self.symbols.declare(ident.value)
        target = ASTNode(
            "identifier", ident, binding=symbol.binding, is_global=symbol.is_global
        )
        children = [target] if init is None else [target, init]
        return ASTNode("declaration", declare_tok, children)

    def parse_assignment(self) -> ASTNode | None:
        ident = self.advance()
        if not self.expect(TokenType.ASSIGN, "'<-' after identifier"):
            return None
        value = self.expressions.parse_expression()
        if value is None:
            return None
        if not self.expect(TokenType.SEMICOLON, "';' after assignment"):
            return None

        symbol = self.symbols.lookup(ident.value)
        if symbol is None:
            self.error(f"Assignment to undeclared variable '{ident.value}'", ident)
            return None
        target = ASTNode(
            "identifier", ident, binding=symbol.binding, is_global=symbol.is_global
        )
        return ASTNode("assignment", ident, [target, value])

    def parse_if(self) -> ASTNode | None:
        if_tok = self.advance()
        cond = self.expressions.parse_expression()
        if cond is None:
            return None
        if not self.expect(TokenType.THEN, "'then' after if condition"):
            return None
        node = ASTNode("if", if_tok, [cond, self.parse_block()])

        while self.check(TokenType.ELSEIF):
            elseif_tok = self.advance()
            elseif_cond = self.expressions.parse_expression()
            if elseif_cond is None:
                return None
            if not self.expect(TokenType.THEN, "'then' after elseif condition"):
                return None
            node.children.append(
                ASTNode("elseif", elseif_tok, [elseif_cond, self.parse_block()])
            )

        if self.check(TokenType.ELSE):
            else_tok = self.advance()
            node.children.append(ASTNode("else", else_tok, [self.parse_block()]))

        if not self.expect(TokenType.END_IF, "'end if'"):
            return None
        if not self.expect(TokenType.SEMICOLON, "';' after 'end if'"):
            return None
        return node

    def parse_while(self) -> ASTNode | None:
        while_tok = self.advance()
        cond = self.expressions.parse_expression()
        if cond is None:
            return None
        if not self.expect(TokenType.LOOP, "'loop' after while condition"):
            return None
        body = self.parse_block()
        if not self.expect(TokenType.END_LOOP, "'end loop'"):
            return None
        if not self.expect(TokenType.SEMICOLON, "';' after 'end loop'"):
            return None
        return ASTNode("while", while_tok, [cond, body])

    def parse_put(self) -> ASTNode | None:
        put_tok = self.advance()
        if not self.expect(TokenType.LPAREN, "'(' after 'put'"):
            return None
        expr = self.expressions.parse_expression()
        if expr is None:
            return None
        if not self.expect(TokenType.RPAREN, "')' after put expression"):
            return None
        if not self.expect(TokenType.SEMICOLON, "';' after put statement"):
            return None
        return ASTNode("put", put_tok, [expr])

    def parse_return(self) -> ASTNode | None:
        return_tok = self.advance()
        expr = self.expressions.parse_expression()
        if expr is None:
            return None
        if not self.expect(TokenType.SEMICOLON, "';' after return statement"):
            return None
        return ASTNode("return", return_tok, [expr])

    def parse_procedure(self) -> ASTNode | None:
        proc_tok = self.advance()
        name = self.expect(TokenType.IDENT, "procedure name")
        if name is None:
            return None
        if not self.expect(TokenType.LPAREN, "'(' after procedure name"):
            return None

        params: list[Token] = []
        while not self.check(TokenType.RPAREN):
            param = self.expect(TokenType.IDENT, "parameter name")
            if param is None:
                return None
            if any(p.value == param.value for p in params):
                self.error(f"Duplicate parameter '{param.value}'", param)
                return None
            params.append(param)
            if not self.check(TokenType.RPAREN):
                if not self.expect(TokenType.COMMA, "',' between parameters"):
                    return None

        if not self.expect(TokenType.RPAREN, "')' after parameters"):
            return None
        if not self.expect(TokenType.BEGIN, "'begin' after procedure header"):
            return None

        redefined = name.value in self.procedures
        if not redefined:
            self.procedures[name.value] = name

        # Parameters live in a scope of their own around the body block
        self.symbols.enter_scope()
        try:
            param_nodes = []
            for param in params:
                symbol = self.symbols.declare(param.value)
                param_nodes.append(ASTNode("parameter", param, binding=symbol.binding))
            body = self.parse_block()
        finally:
            self.symbols.exit_scope()

        if not self.expect(TokenType.END_PROCEDURE, "'end procedure'"):
            return None
        if not self.expect(TokenType.SEMICOLON, "';' after 'end procedure'"):
            return None
        if redefined:
            first = self.procedures[name.value]
            self.error(
                f"Procedure '{name.value}' already defined at line {first.line}", name
            )
            return None

        return ASTNode(
            "procedure",
            proc_tok,
            [ASTNode("identifier", name, binding=name.value), *param_nodes, body],
        )

    def parse_procedure_call(self) -> ASTNode | None:
        name = self.expect(TokenType.IDENT, "procedure name")
        if name is None:
            return None
        if not self.expect(TokenType.LPAREN, "'(' after procedure name"):
            return None
        self.calls.append(name)

        args: list[ASTNode] = []
        while not self.check(TokenType.RPAREN):
            arg = self.expressions.parse_expression()
            if arg is None:
                return None
            args.append(arg)
            if not self.check(TokenType.RPAREN):
                if not self.expect(TokenType.COMMA, "',' between arguments"):
                    return None

        if not self.expect(TokenType.RPAREN, "')' after arguments"):
            return None
        return ASTNode("procedure_call", name, args, binding=name.value)

    def parse_procedure_call_statement(self) -> ASTNode | None:
        call = self.parse_procedure_call()
        if call is None:
            return None
        if not self.expect(TokenType.SEMICOLON, "';' after procedure call"):
            return None
        return call

    def check_calls(self) -> None:
        """Warn about calls to procedures never defined anywhere in the program."""
        for call in self.calls:
            if call.value not in self.procedures:
                self.warning(f"Call to undefined procedure '{call.value}'", call)


def parse(tokens: list[Token], diagnostics: DiagnosticLog | None = None) -> ASTNode | None:
    """Parse `tokens` into a program node using a fresh `Parser`."""
    return Parser(tokens, diagnostics).parse()


__all__ = ["ExpressionParser", "Parser", "parse"]

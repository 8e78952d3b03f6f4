"""
Shared machinery for PseudoLang target emitters.

`BaseEmitter` owns the output buffer and the indentation depth and dispatches
AST nodes by kind: statements to `emit_<kind>` methods that append lines,
expressions to `emit_expr_<kind>` methods that return strings. Subclasses
provide the target-specific spellings.

Integer literals are emitted in plain decimal (`007` becomes `7`); the
token keeps the source spelling.

Binary operations are always emitted fully parenthesized, so the strict
left-to-right grouping of the source survives any target precedence rules.
"""

from pseudolang.pseudo_ast import ASTNode
from pseudolang.pseudo_constants import TokenType, operator_symbols


class BaseEmitter:
    """Walks a `program` AST and accumulates target source lines.

    Attributes:
        lines (list[str]): Emitted lines, without trailing newlines.
        indent (int): Current block depth; each level is four spaces.
    """

    reserved: frozenset[str] = frozenset()
    operators: dict[TokenType, str] = operator_symbols

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.indent = 0

    def reset(self) -> None:
        self.lines = []
        self.indent = 0

    def indent_str(self) -> str:
        return "    " * self.indent

    def line(self, text: str) -> None:
        self.lines.append(f"{self.indent_str()}{text}")

    def blank(self, count: int = 1) -> None:
        self.lines.extend([""] * count)

    def get_output(self) -> str:
        return "\n".join(self.lines) + "\n"

    def generate(self, program: ASTNode) -> str:
        """Translate a `program` node; the emitter may be reused afterwards."""
        if program.kind != "program":
            raise TypeError(f"Expected a program node, got {program.kind!r}")
        self.reset()
        self.emit_program(program)
        return self.get_output()

    def emit_program(self, node: ASTNode) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------

    def _visit(self, node: ASTNode) -> None:
        method = getattr(self, f"emit_{node.kind}", None)
        if method is None:
            raise NotImplementedError(
                f"{type(self).__name__}: no emitter for {node.kind} "
                f"(line {node.line}, col {node.col})"
            )
        method(node)

    def emit_expr(self, node: ASTNode) -> str:
        method = getattr(self, f"emit_expr_{node.kind}", None)
        if method is None:
            raise NotImplementedError(
                f"{type(self).__name__}: no expression emitter for {node.kind}"
            )
        return str(method(node))

    def emit_nested(self, block: ASTNode) -> None:
        self.indent += 1
        self.emit_block(block)
        self.indent -= 1

    def emit_block(self, node: ASTNode) -> None:
        if not node.children:
            self.emit_empty_block()
        for stmt in node.children:
            self._visit(stmt)

    def emit_empty_block(self) -> None:
        pass

    # ------------------------------------------------------------------
    # names and expressions
    # ------------------------------------------------------------------

    def safe_name(self, name: str) -> str:
        """Append `_` to names that collide with target reserved words."""
        return f"{name}_" if name in self.reserved else name

    def emit_expr_identifier(self, node: ASTNode) -> str:
        return self.safe_name(node.name)

    def emit_expr_number(self, node: ASTNode) -> str:
        return str(int(str(node.value)))

    def emit_expr_unknown(self, node: ASTNode) -> str:
        return "0"

    def emit_expr_binary_op(self, node: ASTNode) -> str:
        left = self.emit_expr(node.children[0])
        right = self.emit_expr(node.children[1])
        assert node.token is not None  # for mypy
        return f"({left} {self.operators[node.token.type]} {right})"

    def emit_expr_procedure_call(self, node: ASTNode) -> str:
        args = ", ".join(self.emit_expr(arg) for arg in node.children)
        return f"{self.safe_name(node.name)}({args})"

    # ------------------------------------------------------------------
    # program structure helpers
    # ------------------------------------------------------------------

    @staticmethod
    def split_program(node: ASTNode) -> tuple[list[ASTNode], list[ASTNode]]:
        """Separate top-level procedures from the entry-point statements."""
        procedures = [c for c in node.children if c.kind == "procedure"]
        statements = [c for c in node.children if c.kind != "procedure"]
        return procedures, statements

    def global_bindings(self, statements: list[ASTNode]) -> list[str]:
        names: list[str] = []
        for stmt in statements:
            if stmt.kind == "declaration":
                name = self.safe_name(stmt.children[0].name)
                if name not in names:
                    names.append(name)
        return names

    def assigned_globals(self, body: ASTNode) -> list[str]:
        names: list[str] = []
        for node in body.walk():
            if node.kind == "assignment" and node.children[0].is_global:
                name = self.safe_name(node.children[0].name)
                if name not in names:
                    names.append(name)
        return names

    @staticmethod
    def ends_with_return(block: ASTNode) -> bool:
        return bool(block.children) and block.children[-1].kind == "return"


__all__ = ["BaseEmitter"]

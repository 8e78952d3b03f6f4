"""
Translates PseudoLang AST nodes into executable Python code.

This module defines the `PythonEmitter` class, the default backend of the
`Transpiler`.

Output layout:
    - A header comment
    - Module-level globals for every top-level `declare`, initialized to 0
    - One `def` per procedure, parameters named by their bindings
    - `def main() -> None:` holding every other top-level statement in order
    - A `__main__` guard calling `main()`

Behavior:
    - Top-level variables are module globals; `main()` and any procedure that
      assigns one of them declare it `global`.
    - `/` calls a truncating division helper, emitted only when used, so
      negative quotients round toward zero as in C++.
    - Comparisons are wrapped in `int(...)` and print as 1 or 0; conditions
      keep the bare comparison.
    - Procedures without a trailing `return` return 0.
    - Python keywords and dunder names get a trailing `_`, as do `main` and
      the builtins the output itself calls.
"""

import keyword

from pseudolang.emitters.base_emitter import BaseEmitter
from pseudolang.pseudo_ast import ASTNode
from pseudolang.pseudo_constants import TokenType, relational_operators

DIV_HELPER = "_trunc_div"

DIV_HELPER_LINES = [
    f"def {DIV_HELPER}(a, b):",
    "    q = abs(a) // abs(b)",
    "    return q if (a < 0) == (b < 0) else -q",
]


class PythonEmitter(BaseEmitter):
    """Emits Python code from a PseudoLang program AST.

    Methods:
        generate(program): Returns the complete Python module as a string.
        emit_expr(node): Emits a Python expression from an AST node.
        _visit(node): Dispatches a statement node to its emit_* method.
    """

    reserved = frozenset(keyword.kwlist) | {"main", "print", "int", "abs", DIV_HELPER}

    def emit_program(self, node: ASTNode) -> None:
        procedures, statements = self.split_program(node)
        globals_ = self.global_bindings(statements)

        self.lines.append("# Generated by pseudolang. Do not edit.")
        if globals_:
            self.blank()
            for name in globals_:
                self.line(f"{name} = 0")

        if self.uses_division(node):
            self.blank(2)
            self.lines.extend(DIV_HELPER_LINES)

        for proc in procedures:
            self.blank(2)
            self._visit(proc)

        self.blank(2)
        self.line("def main() -> None:")
        self.indent += 1
        if globals_:
            self.line(f"global {', '.join(globals_)}")
        if not statements:
            self.line("pass")
        for stmt in statements:
            self._visit(stmt)
        self.indent -= 1

        self.blank(2)
        self.line('if __name__ == "__main__":')
        self.line("    main()")

    @staticmethod
    def uses_division(node: ASTNode) -> bool:
        return any(
            n.token is not None and n.token.type == TokenType.SLASH
            for n in node.walk()
            if n.kind == "binary_op"
        )

    def safe_name(self, name: str) -> str:
        # dunder names would clobber module attributes such as `__name__`
        if name.startswith("__"):
            return f"{name}_"
        return super().safe_name(name)

    def emit_expr_binary_op(self, node: ASTNode) -> str:
        assert node.token is not None  # for mypy
        if node.token.type == TokenType.SLASH:
            left = self.emit_expr(node.children[0])
            right = self.emit_expr(node.children[1])
            return f"{DIV_HELPER}({left}, {right})"
        code = super().emit_expr_binary_op(node)
        if node.token.type in relational_operators:
            return f"int{code}"
        return code

    def condition(self, node: ASTNode) -> str:
        """A test expression; a top-level comparison stays a bare bool."""
        if (
            node.kind == "binary_op"
            and node.token is not None
            and node.token.type in relational_operators
        ):
            return super().emit_expr_binary_op(node)
        return self.emit_expr(node)

    def emit_empty_block(self) -> None:
        self.line("pass")

    def emit_expr_string(self, node: ASTNode) -> str:
        return repr(str(node.value))

    def emit_declaration(self, node: ASTNode) -> None:
        target = self.emit_expr(node.children[0])
        value = self.emit_expr(node.children[1]) if len(node.children) > 1 else "0"
        self.line(f"{target} = {value}")

    def emit_assignment(self, node: ASTNode) -> None:
        target = self.emit_expr(node.children[0])
        self.line(f"{target} = {self.emit_expr(node.children[1])}")

    def emit_if(self, node: ASTNode) -> None:
        """
        Emits an `if` with its `elif`/`else` clauses in parsed order.

        Parameters
        ----------
        node : ASTNode
            children: condition, block, then any elseif/else clause nodes.
        """
        self.line(f"if {self.condition(node.children[0])}:")
        self.emit_nested(node.children[1])
        for clause in node.children[2:]:
            if clause.kind == "elseif":
                self.line(f"elif {self.condition(clause.children[0])}:")
                self.emit_nested(clause.children[1])
            else:
                self.line("else:")
                self.emit_nested(clause.children[0])

    def emit_while(self, node: ASTNode) -> None:
        self.line(f"while {self.condition(node.children[0])}:")
        self.emit_nested(node.children[1])

    def emit_put(self, node: ASTNode) -> None:
        self.line(f"print({self.emit_expr(node.children[0])})")

    def emit_return(self, node: ASTNode) -> None:
        self.line(f"return {self.emit_expr(node.children[0])}")

    def emit_procedure_call(self, node: ASTNode) -> None:
        self.line(self.emit_expr(node))

    def emit_procedure(self, node: ASTNode) -> None:
        """
        Emits a procedure as a Python function.

        Parameters
        ----------
        node : ASTNode
            children: name identifier, parameter nodes, body block.
        """
        name, *params, body = node.children
        args = ", ".join(self.safe_name(p.name) for p in params)
        self.line(f"def {self.safe_name(name.name)}({args}):")
        self.indent += 1
        assigned = self.assigned_globals(body)
        if assigned:
            self.line(f"global {', '.join(assigned)}")
        for stmt in body.children:
            self._visit(stmt)
        if not self.ends_with_return(body):
            self.line("return 0")
        self.indent -= 1


__all__ = ["PythonEmitter"]

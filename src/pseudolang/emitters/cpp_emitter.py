"""
Translates PseudoLang AST nodes into C++ source for an external compiler.

Output layout:
    - `#include <iostream>`
    - A global `int` for every top-level `declare`
    - A prototype for every procedure, so calls may precede definitions
    - One `int` function per procedure with `int` parameters
    - `int main()` holding every other top-level statement in order

Behavior:
    - Top-level declarations become assignments to their global inside main.
    - A same-scope redeclaration inside a function becomes an assignment.
    - Functions without a trailing `return` end with `return 0;`.
    - `put(e)` is `std::cout << e << std::endl;`.
    - Names that are C++ keywords (or `main`/`std`) get a trailing `_`.
"""

from pseudolang.emitters.base_emitter import BaseEmitter
from pseudolang.pseudo_ast import ASTNode

CPP_KEYWORDS = frozenset(
    """
    alignas alignof and and_eq asm auto bitand bitor bool break case catch char
    char8_t char16_t char32_t class compl concept const consteval constexpr
    constinit const_cast continue co_await co_return co_yield decltype default
    delete do double dynamic_cast else enum explicit export extern false float
    for friend goto if inline int long mutable namespace new noexcept not not_eq
    nullptr operator or or_eq private protected public register
    reinterpret_cast requires return short signed sizeof static static_assert
    static_cast struct switch template this thread_local throw true try typedef
    typeid typename union unsigned using virtual void volatile wchar_t while xor
    xor_eq
    """.split()
)


class CppEmitter(BaseEmitter):
    """Emits C++ code from a PseudoLang program AST.

    Attributes:
        declared (set[str]): Bindings already declared in the function being
            emitted; reset at the start of every function.
    """

    reserved = CPP_KEYWORDS | {"main", "std"}

    def __init__(self) -> None:
        super().__init__()
        self.declared: set[str] = set()

    def reset(self) -> None:
        super().reset()
        self.declared = set()

    def emit_program(self, node: ASTNode) -> None:
        procedures, statements = self.split_program(node)
        globals_ = self.global_bindings(statements)

        self.line("#include <iostream>")
        if globals_:
            self.blank()
            for name in globals_:
                self.line(f"int {name} = 0;")
        if procedures:
            self.blank()
            for proc in procedures:
                self.line(f"{self.signature(proc)};")

        for proc in procedures:
            self.blank()
            self._visit(proc)

        self.blank()
        self.line("int main() {")
        self.indent += 1
        self.declared = set()
        for stmt in statements:
            self._visit(stmt)
        self.line("return 0;")
        self.indent -= 1
        self.line("}")

    def signature(self, node: ASTNode) -> str:
        name, *params, _body = node.children
        args = ", ".join(f"int {self.safe_name(p.name)}" for p in params)
        return f"int {self.safe_name(name.name)}({args})"

    @staticmethod
    def condition(code: str, node: ASTNode) -> str:
        # binary_op output is already wrapped in parentheses
        return code if node.kind == "binary_op" else f"({code})"

    def emit_expr_string(self, node: ASTNode) -> str:
        text = str(node.value).replace("\\", "\\\\").replace('"', '\\"')
        return f'"{text}"'

    def emit_declaration(self, node: ASTNode) -> None:
        target_node = node.children[0]
        target = self.emit_expr(target_node)
        value = self.emit_expr(node.children[1]) if len(node.children) > 1 else "0"
        if target_node.is_global or target in self.declared:
            self.line(f"{target} = {value};")
        else:
            self.declared.add(target)
            self.line(f"int {target} = {value};")

    def emit_assignment(self, node: ASTNode) -> None:
        target = self.emit_expr(node.children[0])
        self.line(f"{target} = {self.emit_expr(node.children[1])};")

    def emit_if(self, node: ASTNode) -> None:
        cond = node.children[0]
        self.line(f"if {self.condition(self.emit_expr(cond), cond)} {{")
        self.emit_nested(node.children[1])
        for clause in node.children[2:]:
            if clause.kind == "elseif":
                cond = clause.children[0]
                self.line(f"}} else if {self.condition(self.emit_expr(cond), cond)} {{")
                self.emit_nested(clause.children[1])
            else:
                self.line("} else {")
                self.emit_nested(clause.children[0])
        self.line("}")

    def emit_while(self, node: ASTNode) -> None:
        cond = node.children[0]
        self.line(f"while {self.condition(self.emit_expr(cond), cond)} {{")
        self.emit_nested(node.children[1])
        self.line("}")

    def emit_put(self, node: ASTNode) -> None:
        self.line(f"std::cout << {self.emit_expr(node.children[0])} << std::endl;")

    def emit_return(self, node: ASTNode) -> None:
        self.line(f"return {self.emit_expr(node.children[0])};")

    def emit_procedure_call(self, node: ASTNode) -> None:
        self.line(f"{self.emit_expr(node)};")

    def emit_procedure(self, node: ASTNode) -> None:
        body = node.children[-1]
        self.declared = set()
        self.line(f"{self.signature(node)} {{")
        self.indent += 1
        for stmt in body.children:
            self._visit(stmt)
        if not self.ends_with_return(body):
            self.line("return 0;")
        self.indent -= 1
        self.line("}")


__all__ = ["CppEmitter"]

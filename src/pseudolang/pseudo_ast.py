"""
Defines the abstract syntax tree (AST) node structure for PseudoLang.

Classes:
    ASTNode:
        A node in the syntax tree, built by the parser and read by the emitters.
    ASTDict:
        TypedDict form of an ASTNode for JSON output or debugging.

Each ASTNode tracks:
    kind (str): The construct, one of `NODE_KINDS` (e.g. "declaration", "binary_op").
    token (Token, optional): The anchor token that best represents the node.
    children (list[ASTNode]): Owned child nodes, in source order.
    value (str, optional): The anchor text (identifier name, literal, operator).
    binding (str, optional): Resolved target name for identifiers and parameters.
    is_global (bool): Whether an identifier resolved to a global-scope declaration.
    line, col (int): Source position for diagnostics.

Nodes are never shared between parents and are not modified after parsing.

Example:
    node = ASTNode("number", Token(TokenType.NUMBER, "5", 1, 14))
"""

from collections.abc import Iterator
from typing import Any, TypedDict

from pseudolang.pseudo_constants import NODE_KINDS
from pseudolang.pseudo_lexer import Token


class ASTDict(TypedDict, total=False):
    kind: str
    value: str | None
    token_type: str | None
    binding: str | None
    line: int
    col: int
    children: list["ASTDict"]


class ASTNode:
    """
    Represents a node in the abstract syntax tree for PseudoLang.

    Args:
        kind (str): The node kind (e.g. "if", "put", "procedure_call").
        token (Token | None): Anchor token; supplies `value`, `line` and `col`.
        children (list[ASTNode] | None): Child nodes, owned by this node.
        binding (str | None): Target-side name for identifiers and parameters.
        is_global (bool): True when the name resolved to the global scope.

    Raises:
        ValueError: If `kind` is not a known node kind.
    """

    def __init__(
        self,
        kind: str,
        token: Token | None = None,
        children: list["ASTNode"] | None = None,
        binding: str | None = None,
        is_global: bool = False,
    ):
        if kind not in NODE_KINDS:
            raise ValueError(f"Unknown AST node kind: {kind!r}")
        self.kind = kind
        self.token = token
        self.children: list["ASTNode"] = children or []
        self.binding = binding
        self.is_global = is_global

    @property
    def value(self) -> str | None:
        return self.token.value if self.token is not None else None

    @property
    def line(self) -> int:
        return self.token.line if self.token is not None else 0

    @property
    def col(self) -> int:
        return self.token.col if self.token is not None else 0

    @property
    def name(self) -> str:
        """The name to emit: the resolved binding, else the source text."""
        return self.binding or self.value or ""

    def walk(self) -> Iterator["ASTNode"]:
        """Yields this node and every descendant, depth first, in source order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def __repr__(self) -> str:
        parts = [self.kind]
        if self.value is not None:
            parts.append(f"value={self.value!r}")
        if self.binding is not None and self.binding != self.value:
            parts.append(f"binding={self.binding!r}")
        if self.children:
            preview = ", ".join(repr(c) for c in self.children[:3])
            if len(self.children) > 3:
                preview += ", ..."
            parts.append(f"children=[{preview}]")
        return f"ASTNode({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode):
            return False
        return (
            self.kind == other.kind
            and self.value == other.value
            and self.binding == other.binding
            and self.line == other.line
            and self.col == other.col
            and self.children == other.children
        )

    def to_dict(self) -> ASTDict:
        return {
            "kind": self.kind,
            "value": self.value,
            "token_type": str(self.token.type) if self.token is not None else None,
            "binding": self.binding,
            "line": self.line,
            "col": self.col,
            "children": [c.to_dict() for c in self.children],
        }


__all__ = ["ASTDict", "ASTNode"]

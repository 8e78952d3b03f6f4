"""
Lexical-scope symbol table used by the PseudoLang parser.

The table is a stack of scopes. The global scope is pushed on construction and
can never be popped, so `depth` is always at least 1. Lookups walk from the
innermost scope outwards and the first hit wins, which is how an inner
`declare x` shadows an outer one.

Each declaration is also given a *binding*: the name the emitters write for
it. Shadowing declarations receive a fresh binding (`x_1`, `x_2`, ...) so that
targets with function-level scoping still see two distinct variables.
Procedure names are reserved up front so no variable binding reuses them.
"""

import logging
from dataclasses import dataclass

from pseudolang.pseudo_constants import INTEGER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Symbol:
    """A declared variable.

    Attributes:
        name: The source-level name.
        type: The declared type tag (currently always "int").
        binding: The target-level name emitters should use.
        depth: Scope depth of the declaration, 1 for the global scope.
    """

    name: str
    type: str
    binding: str
    depth: int

    @property
    def is_global(self) -> bool:
        return self.depth == 1


class SymbolTable:
    """Stack of scopes mapping variable names to `Symbol` records."""

    def __init__(self) -> None:
        self.scopes: list[dict[str, Symbol]] = [{}]
        self._used_bindings: set[str] = set()

    @property
    def depth(self) -> int:
        return len(self.scopes)

    def enter_scope(self) -> None:
        self.scopes.append({})

    def exit_scope(self) -> None:
        """Pops the innermost scope. The global scope is never removed."""
        if len(self.scopes) > 1:
            self.scopes.pop()
        else:
            logger.debug("exit_scope ignored at global scope")

    def declare(self, name: str, type_: str = INTEGER) -> Symbol:
        """Declares `name` in the innermost scope, replacing any same-scope entry."""
        scope = self.scopes[-1]
        existing = scope.get(name)
        binding = existing.binding if existing is not None else self._fresh_binding(name)
        symbol = Symbol(name, type_, binding, self.depth)
        scope[name] = symbol
        return symbol

    def reserve(self, binding: str) -> None:
        """Keeps `binding` out of reach of variable declarations."""
        self._used_bindings.add(binding)

    def _fresh_binding(self, name: str) -> str:
        binding = name
        suffix = 0
        while binding in self._used_bindings:
            suffix += 1
            binding = f"{name}_{suffix}"
        self._used_bindings.add(binding)
        return binding

    def lookup(self, name: str) -> Symbol | None:
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        return None

    def is_declared(self, name: str) -> bool:
        return self.lookup(name) is not None

    def type_of(self, name: str) -> str | None:
        """Returns the declared type tag, or None when `name` is unknown."""
        symbol = self.lookup(name)
        return symbol.type if symbol is not None else None

    def all_names(self) -> set[str]:
        return {name for scope in self.scopes for name in scope}


__all__ = ["Symbol", "SymbolTable"]

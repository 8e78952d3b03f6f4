"""
Provides the `Transpiler` class and the end-to-end `compile_source` pipeline.

Classes and Features:
    - Emitter (Protocol): Interface for all backend emitters.
    - Transpiler: Selects an emitter by target name ("py", "cpp", ...) and
      translates a `program` AST with it.
    - TranslationResult: Output text, AST and diagnostics of one run.
    - compile_source(): lex -> parse -> emit in one call.

Usage:
    >>> result = compile_source("declare x <- 5; put(x);")
    >>> print(result.code)

Raises:
    ValueError: If the target language is not supported.
    TypeError: If the AST root is not a program node.
    PseudoSyntaxError: If tokenizing aborts (unterminated comment or string).
    TranslationError: If the parse produced no program, or in strict mode when
        any diagnostic was recorded.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from pseudolang.emitters.cpp_emitter import CppEmitter
from pseudolang.emitters.py_emitter import PythonEmitter
from pseudolang.pseudo_ast import ASTNode
from pseudolang.pseudo_errors import DiagnosticLog, TranslationError
from pseudolang.pseudo_lexer import tokenize
from pseudolang.pseudo_parser import Parser

logger = logging.getLogger(__name__)


class Emitter(Protocol):  # pragma: no cover
    """Protocol for all PseudoLang emitters.

    Methods:
        generate(program): Translate a program node into target source text.
    """

    def generate(self, program: ASTNode) -> str: ...  # pragma: no cover


EmitterType = type[Emitter]
"""Alias for a concrete Emitter class type."""

EMITTERS: dict[str, EmitterType] = {
    "py": PythonEmitter,
    "python": PythonEmitter,
    "cpp": CppEmitter,
    "c++": CppEmitter,
}

# File suffix of the generated source for each canonical target
TARGET_SUFFIXES: dict[str, str] = {"py": ".py", "cpp": ".cpp"}


def canonical_target(target: str) -> str:
    """Maps target aliases to "py" or "cpp"."""
    target = target.lower()
    if target not in EMITTERS:
        raise ValueError(f"Unknown transpilation target: {target!r}")
    return "py" if EMITTERS[target] is PythonEmitter else "cpp"


class Transpiler:
    """Dispatches a PseudoLang AST to the emitter of the selected target.

    Attributes:
        target (str): Canonical target name.
        emitter (Emitter): The emitter instance for the output target.
    """

    def __init__(self, target: str = "py") -> None:
        """
        Args:
            target: The desired output language ("py", "python", "cpp", "c++").

        Raises:
            ValueError: If the target language is not supported.
        """
        self.target = canonical_target(target)
        self.emitter: Emitter = EMITTERS[target.lower()]()

    def transpile(self, program: ASTNode) -> str:
        """Translates a `program` node into source code for the selected target.

        Raises:
            TypeError: If `program` is not a program ASTNode.
        """
        if not isinstance(program, ASTNode) or program.kind != "program":
            raise TypeError("Transpiler expects a program ASTNode.")
        code = self.emitter.generate(program)
        logger.debug("emitted %d line(s) of %s", code.count("\n"), self.target)
        return code


@dataclass
class TranslationResult:
    code: str
    program: ASTNode
    diagnostics: DiagnosticLog
    target: str = "py"

    @property
    def ok(self) -> bool:
        return not self.diagnostics.has_errors


def compile_source(
    source: str,
    target: str = "py",
    filename: str = "<input>",
    strict: bool = False,
) -> TranslationResult:
    """Run the full pipeline: tokenize, parse, and emit `source`.

    Soft errors (undeclared names, malformed statements) are recorded in the
    returned diagnostics and translation still completes, unless `strict`
    is set, in which case any diagnostic fails the run.

    Raises:
        PseudoSyntaxError: On an unterminated comment or string.
        TranslationError: If no program could be parsed, or in strict mode.
    """
    transpiler = Transpiler(target)
    diagnostics = DiagnosticLog(filename)

    tokens = tokenize(source, filename=filename)
    program = Parser(tokens, diagnostics).parse()
    if program is None:
        raise TranslationError(diagnostics)
    if strict and len(diagnostics):
        raise TranslationError(diagnostics)

    code = transpiler.transpile(program)
    return TranslationResult(code, program, diagnostics, transpiler.target)


__all__ = [
    "EMITTERS",
    "Emitter",
    "TARGET_SUFFIXES",
    "TranslationResult",
    "Transpiler",
    "canonical_target",
    "compile_source",
]

"""
Error hierarchy and diagnostic collection for the PseudoLang translator.

Exception Hierarchy
-------------------
PseudoError (base)
├── PseudoSyntaxError - fatal lexical errors, carries a SourceLocation
│   ├── UnterminatedCommentError - `/*` with no closing `*/`
│   └── UnterminatedStringError - string reaching a newline or end of input
├── TranslationError - translation finished with error diagnostics
└── BuildError - the downstream compiler or produced program failed

Diagnostics
-----------
Parse and semantic problems are not raised. They are recorded as `Diagnostic`
entries in a `DiagnosticLog`, logged as they occur, and the parser carries on.
Every diagnostic renders as:

    filename:line:column: severity: message
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceLocation:
    """
    A 1-based position in PseudoLang source.

    Attributes:
        line: Line number (1-based).
        column: Column number (1-based).
        filename: Source name, "<input>" for inline text.
    """

    line: int
    column: int
    filename: str = "<input>"

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


class PseudoError(Exception):
    """Base exception for every error raised by the translator."""


class PseudoSyntaxError(PseudoError):
    """A fatal lexical error. Tokenizing stops at the first one."""

    def __init__(self, message: str, location: SourceLocation | None = None):
        self.message = message
        self.location = location
        if location is not None:
            super().__init__(f"{location}: error: {message}")
        else:
            super().__init__(f"error: {message}")


class UnterminatedCommentError(PseudoSyntaxError):
    def __init__(self, location: SourceLocation | None = None):
        super().__init__("unterminated comment", location)


class UnterminatedStringError(PseudoSyntaxError):
    def __init__(self, location: SourceLocation | None = None):
        super().__init__("unterminated string literal", location)


class TranslationError(PseudoError):
    """
    Raised by `compile_source` when the parse produced error diagnostics.

    Attributes:
        diagnostics: The log holding every diagnostic of the failed run.
    """

    def __init__(self, diagnostics: "DiagnosticLog"):
        self.diagnostics = diagnostics
        count = len(diagnostics)
        noun = "diagnostic" if count == 1 else "diagnostics"
        super().__init__(f"translation failed with {count} {noun}")


class BuildError(PseudoError):
    """The downstream build or run step failed."""


@dataclass(frozen=True)
class Diagnostic:
    severity: str
    message: str
    location: SourceLocation

    def __str__(self) -> str:
        return f"{self.location}: {self.severity}: {self.message}"


@dataclass
class DiagnosticLog:
    """
    Ordered collection of diagnostics produced during one translation.

    Each entry is logged through `logging` the moment it is recorded so that
    the user sees problems in source order even when a later stage aborts.
    """

    filename: str = "<input>"
    entries: list[Diagnostic] = field(default_factory=list)

    def report(self, severity: str, message: str, line: int, column: int) -> Diagnostic:
        diag = Diagnostic(severity, message, SourceLocation(line, column, self.filename))
        self.entries.append(diag)
        level = logging.ERROR if severity == "error" else logging.WARNING
        logger.log(level, "%s", diag)
        return diag

    def error(self, message: str, line: int, column: int) -> Diagnostic:
        return self.report("error", message, line, column)

    def warning(self, message: str, line: int, column: int) -> Diagnostic:
        return self.report("warning", message, line, column)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.entries if d.severity == "error"]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.entries if d.severity == "warning"]

    @property
    def has_errors(self) -> bool:
        return any(d.severity == "error" for d in self.entries)

    def format(self) -> str:
        return "\n".join(str(d) for d in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)


__all__ = [
    "BuildError",
    "Diagnostic",
    "DiagnosticLog",
    "PseudoError",
    "PseudoSyntaxError",
    "SourceLocation",
    "TranslationError",
    "UnterminatedCommentError",
    "UnterminatedStringError",
]

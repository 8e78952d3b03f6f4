"""
Translator configuration.

Settings come from, in increasing priority:
    - Default values (defined here)
    - A `[tool.pseudolang]` table in `pyproject.toml`
    - The `PSEUDOLANG_CXX` environment variable (C++ compiler)
    - Command-line flags (applied by the CLI through `merged`)

Example `pyproject.toml`:

    [tool.pseudolang]
    target = "cpp"
    compiler = "clang++"
    compiler_flags = ["-O2"]
    strict = true
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from pseudolang.pseudo_errors import PseudoError
from pseudolang.pseudo_transpile import canonical_target

logger = logging.getLogger(__name__)


class ConfigError(PseudoError):
    """Invalid `[tool.pseudolang]` settings."""


@dataclass(frozen=True)
class TranslatorConfig:
    """
    Options for one translator run.

    Attributes:
        target: Output language, "py" or "cpp".
        output: Where to write generated source; None prints to stdout.
        build: Compile (cpp) or byte-compile (py) the generated source.
        run: Run the produced program and print its output.
        compiler: C++ compiler executable used by `build`.
        compiler_flags: Extra arguments passed to the compiler.
        strict: Treat any diagnostic, warnings included, as a failure.
    """

    target: str = "py"
    output: Path | None = None
    build: bool = False
    run: bool = False
    compiler: str = "g++"
    compiler_flags: tuple[str, ...] = field(default_factory=tuple)
    strict: bool = False

    def merged(self, **overrides: Any) -> "TranslatorConfig":
        """Returns a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _from_table(table: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(TranslatorConfig)}
    values: dict[str, Any] = {}
    for key, value in table.items():
        name = key.replace("-", "_")
        if name not in known:
            raise ConfigError(f"Unknown [tool.pseudolang] setting: {key!r}")
        if name == "target":
            try:
                value = canonical_target(str(value))
            except ValueError as e:
                raise ConfigError(str(e)) from e
        elif name == "output":
            value = Path(value)
        elif name == "compiler_flags":
            if not isinstance(value, list):
                raise ConfigError("compiler_flags must be a list of strings")
            value = tuple(str(v) for v in value)
        values[name] = value
    return values


def load_config(start: Path | None = None) -> TranslatorConfig:
    """Builds the configuration from `pyproject.toml` in `start` and the environment."""
    config = TranslatorConfig()
    pyproject = (start or Path.cwd()) / "pyproject.toml"
    if pyproject.is_file():
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
        table = data.get("tool", {}).get("pseudolang", {})
        if table:
            logger.debug("loaded [tool.pseudolang] from %s", pyproject)
            config = replace(config, **_from_table(table))

    compiler = os.environ.get("PSEUDOLANG_CXX")
    if compiler:
        config = replace(config, compiler=compiler)
    return config


__all__ = ["ConfigError", "TranslatorConfig", "load_config"]

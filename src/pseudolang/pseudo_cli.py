"""
PseudoLang CLI Entrypoint.

This module provides the command-line interface around the translator core.

Features:
    - Read source from a file or an inline string.
    - Lex, parse, and translate into Python or C++.
    - Output to console or file, or dump the AST as JSON.
    - Optionally build the result (C++ compiler or Python byte-compile).
    - Optionally run the produced program and show its output.

Example usage:
    pseudolang hello.pseudo
    pseudolang -s "declare x <- 5; put(x);" --run
    pseudolang prog.pseudo -t cpp -o prog.cpp --build
    pseudolang prog.pseudo --ast

Exit status is 0 on success and 1 when loading, tokenizing, parsing (in
strict mode) or the build/run step fails.
"""

import argparse
import io
import json
import logging
import subprocess
import sys
from contextlib import redirect_stdout
from pathlib import Path

from pseudolang.pseudo_config import ConfigError, TranslatorConfig, load_config
from pseudolang.pseudo_errors import BuildError, PseudoError
from pseudolang.pseudo_transpile import (
    TARGET_SUFFIXES,
    TranslationResult,
    canonical_target,
    compile_source,
)

logger = logging.getLogger(__name__)


def default_output(source_name: str, target: str) -> Path:
    """`prog.pseudo` -> `prog.cpp`; inline source -> `output.cpp`."""
    suffix = TARGET_SUFFIXES[target]
    if source_name.startswith("<"):
        return Path(f"output{suffix}")
    return Path(source_name).with_suffix(suffix)


def build_output(path: Path, code: str, config: TranslatorConfig) -> Path:
    """
    Build the written translation.

    For C++ the configured compiler produces an executable next to `path`.
    For Python the module is byte-compiled in memory to catch syntax errors.

    Returns:
        Path: The runnable artifact.

    Raises:
        BuildError: If the compiler is missing or reports a failure.
    """
    if config.target == "py":
        try:
            compile(code, str(path), "exec")
        except SyntaxError as e:
            raise BuildError(f"generated Python does not compile: {e}") from e
        return path

    exe = path.with_suffix("")
    cmd = [config.compiler, *config.compiler_flags, str(path), "-o", str(exe)]
    logger.debug("running %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError as e:
        raise BuildError(f"compiler not found: {config.compiler}") from e
    if proc.returncode != 0:
        raise BuildError(
            f"could not compile {path} (exit {proc.returncode}):\n{proc.stderr.strip()}"
        )
    return exe


def run_output(artifact: Path | None, code: str, target: str) -> str:
    """
    Run the produced program and return what it printed.

    Raises:
        BuildError: If the program raises (py) or exits non-zero (cpp).
    """
    if target == "py":
        buf = io.StringIO()
        try:
            with redirect_stdout(buf):
                program = compile(code, "<pseudolang>", "exec")
                exec(program, {"__name__": "__main__"})  # nosec B102
        except Exception as e:
            raise BuildError(f"program failed: {type(e).__name__}: {e}") from e
        return buf.getvalue()

    if artifact is None:
        raise BuildError("a C++ translation must be built before it can be run")
    proc = subprocess.run(
        [str(artifact.resolve())], capture_output=True, text=True, check=False
    )
    if proc.returncode != 0:
        raise BuildError(f"{artifact} exited with status {proc.returncode}")
    return proc.stdout


def run_pseudo(
    source: str,
    is_string: bool = False,
    config: TranslatorConfig | None = None,
    show_ast: bool = False,
) -> TranslationResult:
    """
    Run the PseudoLang toolchain: translate, then write, build and run as configured.

    Args:
        source (str): A path to a source file, or raw code when `is_string` is set.
        is_string (bool): Treat `source` as raw code instead of a file path.
        config (TranslatorConfig | None): Run options; defaults are used when None.
        show_ast (bool): Print the AST as JSON instead of the translation.

    Raises:
        OSError: If the source file cannot be read.
        PseudoError: If tokenizing, translating, building or running fails.
    """
    config = config or TranslatorConfig()

    # 1. Read source
    if is_string:
        filename = "<string>"
    else:
        filename = source
        source = Path(source).read_text(encoding="utf-8")

    # 2. Translate
    result = compile_source(
        source, target=config.target, filename=filename, strict=config.strict
    )

    if show_ast:
        print(json.dumps(result.program.to_dict(), indent=2))
        return result

    # 3. Output result
    out = config.output
    if out is None and config.build:
        out = default_output(filename, config.target)
    if out is None:
        print(result.code, end="")
    else:
        out.write_text(result.code, encoding="utf-8")
        logger.info("wrote %s", out)

    # 4. Optional build and run
    artifact = None
    if config.build:
        assert out is not None  # for mypy
        artifact = build_output(out, result.code, config)
        if config.target == "py":
            print(f"Build successful! Run the program with 'python {artifact}'")
        else:
            print(f"Build successful! Run the program with './{artifact}'")

    if config.run:
        print(run_output(artifact, result.code, config.target).rstrip())
    return result


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pseudolang", description="Translate PseudoLang to Python or C++."
    )
    parser.add_argument("source", help="Source file, or raw source with -s")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal code"
    )
    parser.add_argument(
        "-t",
        "--target",
        choices=("py", "python", "cpp", "c++"),
        help="Translation target (default: py)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Write output to a file")
    parser.add_argument(
        "--build",
        action="store_true",
        default=None,
        help="Compile the translation (g++ for cpp, byte-compile for py)",
    )
    parser.add_argument(
        "--run",
        action="store_true",
        default=None,
        help="Run the translated program and print its output",
    )
    parser.add_argument(
        "--ast", action="store_true", help="Print the parsed AST as JSON and stop"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on any diagnostic, warnings included",
    )
    parser.add_argument("--compiler", help="C++ compiler executable (default: g++)")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument(
        "-q", "--quiet", action="store_true", help="Only report errors"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the PseudoLang CLI.

    Returns:
        int: Process exit status.
    """
    args = build_arg_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)

    try:
        config = load_config().merged(
            target=canonical_target(args.target) if args.target else None,
            output=Path(args.out) if args.out else None,
            build=args.build,
            run=args.run,
            strict=args.strict,
            compiler=args.compiler,
        )
        # C++ output can only run once compiled
        if config.run and config.target == "cpp":
            config = config.merged(build=True)
        result = run_pseudo(
            args.source, is_string=args.string, config=config, show_ast=args.ast
        )
    except (ConfigError, BuildError, OSError) as e:
        logger.error("error: %s", e)
        return 1
    except PseudoError as e:
        # syntax errors carry their own "file:line:col: error:" prefix
        logger.error("%s", e)
        return 1

    if len(result.diagnostics):
        errors = len(result.diagnostics.errors)
        warnings = len(result.diagnostics.warnings)
        logger.warning(
            "translation finished with %d error(s) and %d warning(s)", errors, warnings
        )
    return 0


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    sys.exit(main())

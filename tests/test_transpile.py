import io
from contextlib import redirect_stdout
from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

import pseudolang.pseudo_transpile as transpile_module
from pseudolang.emitters.cpp_emitter import CppEmitter
from pseudolang.emitters.py_emitter import PythonEmitter
from pseudolang.pseudo_ast import ASTNode
from pseudolang.pseudo_errors import TranslationError, UnterminatedCommentError
from pseudolang.pseudo_transpile import (
    Emitter,
    Transpiler,
    canonical_target,
    compile_source,
)


def run(source: str) -> list[str]:
    """Translate to Python, execute it and return the printed lines."""
    result = compile_source(source)
    assert result.ok, result.diagnostics.format()
    buf = io.StringIO()
    with redirect_stdout(buf):
        exec(result.code, {"__name__": "__main__"})  # nosec B102
    return buf.getvalue().splitlines()


def test_force_protocol_reference() -> None:
    assert hasattr(Emitter, "generate")


@pytest.mark.parametrize(
    "target, emitter",
    [
        ("py", PythonEmitter),
        ("PYTHON", PythonEmitter),
        ("cpp", CppEmitter),
        ("C++", CppEmitter),
    ],
)  # type: ignore[misc]
def test_transpiler_selects_emitter(target: str, emitter: type) -> None:
    assert isinstance(Transpiler(target).emitter, emitter)


def test_canonical_target() -> None:
    assert canonical_target("python") == "py"
    assert canonical_target("c++") == "cpp"


def test_transpiler_invalid_target_raises() -> None:
    with pytest.raises(ValueError, match="Unknown transpilation target"):
        Transpiler("brainfuck")


def test_transpiler_rejects_non_program() -> None:
    with pytest.raises(TypeError, match="program ASTNode"):
        Transpiler("py").transpile(ASTNode("block"))
    with pytest.raises(TypeError, match="program ASTNode"):
        Transpiler("py").transpile(["not-an-ast"])  # type: ignore


def test_transpiler_uses_emitter(monkeypatch: Any) -> None:
    class DummyEmitter:
        def generate(self, program: ASTNode) -> str:
            return f"{program.kind}!"

    monkeypatch.setitem(transpile_module.EMITTERS, "cpp", DummyEmitter)
    assert Transpiler("cpp").transpile(ASTNode("program")) == "program!"


def test_compile_source_result() -> None:
    result = compile_source("declare x <- 5; put(x);", target="cpp")
    assert result.ok
    assert result.target == "cpp"
    assert result.program.kind == "program"
    assert "std::cout << x << std::endl;" in result.code


def test_compile_source_keeps_going_on_soft_errors() -> None:
    result = compile_source("y <- 1; put(2);")
    assert not result.ok
    assert len(result.diagnostics.errors) == 1
    assert "print(2)" in result.code


def test_strict_mode_fails_on_warning() -> None:
    with pytest.raises(TranslationError, match="1 diagnostic$") as excinfo:
        compile_source("put(1);;", strict=True)
    assert excinfo.value.diagnostics.warnings[0].message == "Extra semicolon"


def test_lexical_errors_propagate() -> None:
    with pytest.raises(UnterminatedCommentError):
        compile_source("/* open")


def test_diagnostics_carry_filename() -> None:
    result = compile_source("put(q);", filename="demo.pseudo")
    assert result.diagnostics.format() == (
        "demo.pseudo:1:5: error: Undeclared variable 'q'"
    )


# ----------------------------------------------------------------------
# end-to-end: execute the generated Python
# ----------------------------------------------------------------------


def test_run_total() -> None:
    assert run("declare total <- 0; total <- total + 5; put(total);") == ["5"]


def test_run_shadowing() -> None:
    assert run(
        "declare x <- 1; if 1 then declare x <- 2; put(x); end if; put(x);"
    ) == ["2", "1"]


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("10 - 3 + 2", "9"),
        ("2 + 3 * 4", "20"),
        ("2 + (3 * 4)", "14"),
        ("20 / 3", "6"),
        ("100 - 10 - 10", "80"),
    ],
)  # type: ignore[misc]
def test_run_left_to_right_arithmetic(expr: str, expected: str) -> None:
    assert run(f"put({expr});") == [expected]


def test_run_while_loop() -> None:
    assert run(
        "declare i <- 0; while i < 3 loop put(i); i <- i + 1; end loop;"
    ) == ["0", "1", "2"]


def test_run_if_chain() -> None:
    source = (
        "procedure grade(n) begin"
        "  if n >= 90 then return 1;"
        "  elseif n >= 80 then return 2;"
        "  else return 3;"
        "  end if;"
        "end procedure;"
        "put(grade(95)); put(grade(85)); put(grade(10));"
    )
    assert run(source) == ["1", "2", "3"]


def test_run_recursion() -> None:
    source = (
        "procedure fact(n) begin"
        "  if n < 2 then return 1; end if;"
        "  return n * fact(n - 1);"
        "end procedure;"
        "put(fact(5));"
    )
    assert run(source) == ["120"]


def test_run_procedure_updates_global() -> None:
    source = (
        "declare count <- 0;"
        "procedure bump(by) begin count <- count + by; end procedure;"
        "bump(2); bump(3); put(count);"
    )
    assert run(source) == ["5"]


def test_run_procedure_without_return_yields_zero() -> None:
    assert run("procedure p() begin put(7); end procedure; put(p());") == ["7", "0"]


def test_run_strings_and_reserved_names() -> None:
    assert run('declare class <- 3; put("class is"); put(class);') == [
        "class is",
        "3",
    ]


def test_run_loop_local_variables_do_not_leak() -> None:
    source = (
        "declare i <- 0; declare sum <- 0;"
        "while i < 4 loop declare sq <- i * i; sum <- sum + sq; i <- i + 1; end loop;"
        "put(sum);"
    )
    assert run(source) == ["14"]


@pytest.mark.parametrize(
    "expr, expected",
    [
        ("(0 - 7) / 2", "-3"),
        ("7 / (0 - 2)", "-3"),
        ("(0 - 7) / (0 - 2)", "3"),
        ("(0 - 6) / 3", "-2"),
    ],
)  # type: ignore[misc]
def test_run_division_truncates_toward_zero(expr: str, expected: str) -> None:
    assert run(f"put({expr});") == [expected]


@given(st.integers(0, 10**6), st.integers(1, 1000))  # type: ignore[misc]
def test_run_negative_division_matches_cpp(a: int, b: int) -> None:
    assert run(f"put((0 - {a}) / {b});") == [str(-(a // b))]


def test_run_leading_zero_literals() -> None:
    assert run("declare x <- 007; put(x); put(010 + 0);") == ["7", "10"]


def test_run_variable_named_like_procedure() -> None:
    source = (
        "procedure f() begin return 1; end procedure;"
        "declare f <- 2; put(f()); put(f);"
    )
    assert run(source) == ["1", "2"]


def test_run_comparisons_print_one_or_zero() -> None:
    assert run("put(1 = 1); put(2 < 1); put(3 >= 3);") == ["1", "0", "1"]


def test_run_comparison_value_in_arithmetic() -> None:
    assert run("declare t <- 1 < 2; put(t + 1);") == ["2"]


def test_run_dunder_variable_keeps_main_guard() -> None:
    assert run("declare __name__ <- 1; put(5); put(__name__);") == ["5", "1"]


def test_run_variable_named_int() -> None:
    assert run("declare int <- 3; put(int = 3);") == ["1"]

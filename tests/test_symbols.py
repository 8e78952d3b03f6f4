from hypothesis import given
from hypothesis import strategies as st

from pseudolang.pseudo_symbols import Symbol, SymbolTable


def test_starts_with_global_scope() -> None:
    table = SymbolTable()
    assert table.depth == 1
    assert table.lookup("x") is None


def test_global_declaration() -> None:
    table = SymbolTable()
    symbol = table.declare("x")
    assert symbol == Symbol("x", "int", "x", 1)
    assert symbol.is_global
    assert table.is_declared("x")
    assert table.type_of("x") == "int"


def test_type_of_unknown_is_none() -> None:
    assert SymbolTable().type_of("nope") is None


def test_exit_scope_never_pops_global() -> None:
    table = SymbolTable()
    table.declare("x")
    table.exit_scope()
    table.exit_scope()
    assert table.depth == 1
    assert table.is_declared("x")


def test_inner_declaration_shadows_outer() -> None:
    table = SymbolTable()
    table.declare("x")
    table.enter_scope()
    inner = table.declare("x")
    assert inner.binding == "x_1"
    assert not inner.is_global
    assert table.lookup("x") == inner

    table.exit_scope()
    outer = table.lookup("x")
    assert outer is not None  # for mypy
    assert outer.binding == "x"
    assert outer.is_global


def test_lookup_walks_outwards() -> None:
    table = SymbolTable()
    table.declare("g")
    table.enter_scope()
    table.enter_scope()
    symbol = table.lookup("g")
    assert symbol is not None  # for mypy
    assert symbol.depth == 1


def test_inner_names_vanish_on_exit() -> None:
    table = SymbolTable()
    table.enter_scope()
    table.declare("tmp")
    table.exit_scope()
    assert not table.is_declared("tmp")


def test_same_scope_redeclaration_keeps_binding() -> None:
    table = SymbolTable()
    table.enter_scope()
    first = table.declare("y")
    second = table.declare("y")
    assert first.binding == second.binding == "y"
    assert len(table.scopes[-1]) == 1


def test_sibling_scopes_get_distinct_bindings() -> None:
    table = SymbolTable()
    table.enter_scope()
    first = table.declare("i")
    table.exit_scope()
    table.enter_scope()
    second = table.declare("i")
    assert first.binding == "i"
    assert second.binding == "i_1"


def test_fresh_binding_skips_taken_suffix() -> None:
    table = SymbolTable()
    table.declare("x_1")
    table.declare("x")
    table.enter_scope()
    assert table.declare("x").binding == "x_2"


def test_all_names() -> None:
    table = SymbolTable()
    table.declare("a")
    table.enter_scope()
    table.declare("b")
    assert table.all_names() == {"a", "b"}


@given(st.integers(min_value=1, max_value=20))  # type: ignore[misc]
def test_nested_shadowing_bindings_are_unique(levels: int) -> None:
    table = SymbolTable()
    bindings = []
    for _ in range(levels):
        bindings.append(table.declare("v").binding)
        table.enter_scope()
    assert len(set(bindings)) == levels
    assert table.depth == levels + 1


def test_reserved_binding_is_skipped() -> None:
    table = SymbolTable()
    table.reserve("f")
    symbol = table.declare("f")
    assert symbol.binding == "f_1"
    assert table.lookup("f") == symbol

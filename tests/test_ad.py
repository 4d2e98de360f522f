import pytest

from atomc.ad import (
    POINTER_SIZE,
    Domain,
    Symbol,
    SymbolTable,
    SymKind,
    Type,
    TypeBase,
    format_domain,
    show_domain,
)
from atomc.utils import AtomCError


def make_struct(name, *members):
    s = Symbol(name, SymKind.STRUCT)
    s.type = Type(TypeBase.STRUCT, s)
    for member_name, member_type in members:
        s.members.append(Symbol(member_name, SymKind.VAR, type=member_type, owner=s))
    return s


def test_scalar_sizes():
    assert Type(TypeBase.CHAR).size() == 1
    assert Type(TypeBase.VOID).size() == 0
    assert Type(TypeBase.DOUBLE).size() >= Type(TypeBase.INT).size()


def test_array_sizes():
    base = Type(TypeBase.DOUBLE).size()
    assert Type(TypeBase.DOUBLE, n=100).size() == 100 * base
    assert Type(TypeBase.INT, n=0).size() == POINTER_SIZE
    assert Type(TypeBase.INT, n=5).base_size() == Type(TypeBase.INT).size()


def test_struct_size_is_sum_of_members():
    s = make_struct(
        "S1",
        ("i", Type(TypeBase.INT)),
        ("d", Type(TypeBase.DOUBLE, n=2)),
        ("x", Type(TypeBase.CHAR)),
    )
    expected = sum(m.type.size() for m in s.members)
    assert s.type.size() == expected
    assert Type(TypeBase.STRUCT, s, n=10).size() == 10 * expected


def test_type_describe():
    assert Type(TypeBase.INT, n=10).describe("v") == "int v[10]"
    assert Type(TypeBase.CHAR, n=0).describe("s") == "char s[]"
    s = make_struct("S1")
    assert Type(TypeBase.STRUCT, s).describe("p1").startswith("struct S1 p1")
    assert Type(TypeBase.VOID).describe() == "void"


def test_add_param_indices():
    fn = Symbol("sum", SymKind.FN, type=Type(TypeBase.DOUBLE))
    first = fn.add_param("x", Type(TypeBase.DOUBLE, n=0))
    second = fn.add_param("n", Type(TypeBase.INT))
    assert (first.index, second.index) == (0, 1)
    assert [p.name for p in fn.params] == ["x", "n"]
    assert all(p.kind is SymKind.PARAM for p in fn.params)


def test_describe_function():
    fn = Symbol("f", SymKind.FN, type=Type(TypeBase.VOID))
    fn.add_param("i", Type(TypeBase.INT))
    fn.locals.append(Symbol("r", SymKind.VAR, type=Type(TypeBase.INT), owner=fn, index=0))
    text = fn.describe()
    assert text.startswith("void f(int i /*size=")
    assert "idx=0*/){\n\tint r;\t// size=" in text
    assert text.endswith("\t}\n")


def test_describe_struct_and_vars():
    s = make_struct("Point", ("x", Type(TypeBase.INT)), ("y", Type(TypeBase.INT)))
    text = s.describe()
    assert text.startswith("struct Point{\n\tint x;")
    assert text.endswith(f"\t}};\t// size={s.type.size()}\n")
    global_var = Symbol("p", SymKind.VAR, type=Type(TypeBase.STRUCT, s), memory=bytearray(s.type.size()))
    assert "mem=0x" in global_var.describe()


def test_domain_find_and_add():
    domain = Domain()
    sym = domain.add(Symbol("x", SymKind.VAR, type=Type(TypeBase.INT)))
    assert domain.find("x") is sym
    assert domain.find("y") is None
    assert list(domain) == [sym]


def test_symbol_table_scoping():
    table = SymbolTable()
    glob = table.push_domain()
    outer = table.add_symbol(Symbol("x", SymKind.VAR, type=Type(TypeBase.INT)))
    table.push_domain()
    inner = table.add_symbol(Symbol("x", SymKind.VAR, type=Type(TypeBase.CHAR)))
    assert table.find_symbol("x") is inner
    table.drop_domain()
    assert table.current is glob
    assert table.find_symbol("x") is outer
    table.drop_domain()
    assert table.find_symbol("x") is None


def test_symbol_table_errors_without_domain():
    table = SymbolTable()
    with pytest.raises(AtomCError):
        table.drop_domain()
    with pytest.raises(AtomCError):
        table.add_symbol(Symbol("x", SymKind.VAR))


def test_add_ext_fn():
    table = SymbolTable()
    table.push_domain()
    calls = []
    fn = table.add_ext_fn("put_i", calls.append, Type(TypeBase.VOID))
    fn.add_param("i", Type(TypeBase.INT))
    found = table.find_symbol("put_i")
    assert found is fn
    assert found.kind is SymKind.FN
    found.ext_fn(3)
    assert calls == [3]


def test_format_and_show_domain(capsys):
    table = SymbolTable()
    domain = table.push_domain()
    table.add_symbol(Symbol("x", SymKind.VAR, type=Type(TypeBase.INT), memory=bytearray(4)))
    text = format_domain(domain, "global")
    assert text.startswith("// domain: global\nint x;")
    assert text.endswith("\n\n")
    show_domain(domain, "global")
    assert capsys.readouterr().out == text
"""Domain analysis: types, symbols and the scoped symbol table."""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from .utils import AtomCError

POINTER_SIZE = struct.calcsize("P")


class TypeBase(Enum):
    """Base type of a value."""

    INT = auto()
    DOUBLE = auto()
    CHAR = auto()
    VOID = auto()
    STRUCT = auto()


_BASE_SIZES = {
    TypeBase.INT: struct.calcsize("i"),
    TypeBase.DOUBLE: struct.calcsize("d"),
    TypeBase.CHAR: struct.calcsize("c"),
    TypeBase.VOID: 0,
}

_BASE_NAMES = {
    TypeBase.INT: "int",
    TypeBase.DOUBLE: "double",
    TypeBase.CHAR: "char",
    TypeBase.VOID: "void",
}


@dataclass
class Type:
    """The type of a symbol.

    ``n`` is the array dimension: negative for no array, 0 for an array
    without a given dimension, positive for a sized array.
    """

    tb: TypeBase
    s: Symbol | None = field(default=None, repr=False)
    n: int = -1

    def base_size(self) -> int:
        """Size in bytes of one element of this type."""
        if self.tb is TypeBase.STRUCT:
            if self.s is None:
                raise AtomCError("tip struct fara simbol")
            return sum(member.type.size() for member in self.s.members)
        return _BASE_SIZES[self.tb]

    def size(self) -> int:
        """Size in bytes of a value of this type."""
        if self.n < 0:
            return self.base_size()
        if self.n == 0:
            return POINTER_SIZE
        return self.n * self.base_size()

    def describe(self, name: str | None = None) -> str:
        """Render the type as a declaration, optionally naming it."""
        if self.tb is TypeBase.STRUCT:
            base = f"struct {self.s.name if self.s else '?'}"
        else:
            base = _BASE_NAMES[self.tb]
        text = base if name is None else f"{base} {name}"
        if self.n == 0:
            text += "[]"
        elif self.n > 0:
            text += f"[{self.n}]"
        return text


class SymKind(Enum):
    """Kind of a symbol."""

    VAR = auto()
    PARAM = auto()
    FN = auto()
    STRUCT = auto()


@dataclass(eq=False)
class Symbol:
    """A named entity: variable, parameter, function or struct.

    ``owner`` is None for globals, the struct for its members and the
    function for its parameters and locals. ``index`` is the local index,
    member offset or parameter index; ``memory`` holds a global variable.
    """

    name: str
    kind: SymKind
    type: Type = field(default_factory=lambda: Type(TypeBase.VOID))
    owner: Symbol | None = field(default=None, repr=False)
    index: int = 0
    memory: bytearray | None = field(default=None, repr=False)
    members: list[Symbol] = field(default_factory=list, repr=False)
    params: list[Symbol] = field(default_factory=list, repr=False)
    locals: list[Symbol] = field(default_factory=list, repr=False)
    ext_fn: Callable[..., Any] | None = field(default=None, repr=False)
    instr: Any = field(default=None, repr=False)

    def describe(self) -> str:
        """Render the symbol as a declaration with size information."""
        if self.kind is SymKind.VAR:
            text = self.type.describe(self.name)
            size = self.type.size()
            if self.owner is not None:
                return f"{text};\t// size={size}, idx={self.index}\n"
            address = "(nil)" if self.memory is None else f"0x{id(self.memory):x}"
            return f"{text};\t// size={size}, mem={address}\n"
        if self.kind is SymKind.PARAM:
            return (
                f"{self.type.describe(self.name)}"
                f" /*size={self.type.size()}, idx={self.index}*/"
            )
        if self.kind is SymKind.FN:
            params = ", ".join(param.describe() for param in self.params)
            local_lines = "".join(f"\t{local.describe()}" for local in self.locals)
            return f"{self.type.describe(self.name)}({params}){{\n{local_lines}\t}}\n"
        member_lines = "".join(f"\t{member.describe()}" for member in self.members)
        return (
            f"struct {self.name}{{\n{member_lines}"
            f"\t}};\t// size={self.type.size()}\n"
        )

    def add_param(self, name: str, type: Type) -> Symbol:
        """Append a parameter to this function, without redefinition checks."""
        param = Symbol(name, SymKind.PARAM, type=type, index=len(self.params))
        self.params.append(
            Symbol(name, SymKind.PARAM, type=type, index=param.index)
        )
        return param


@dataclass(eq=False)
class Domain:
    """One scope level holding symbols in definition order."""

    parent: Domain | None = field(default=None, repr=False)
    symbols: list[Symbol] = field(default_factory=list)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.symbols)

    def find(self, name: str) -> Symbol | None:
        """Return the symbol with this name defined in this domain only."""
        return next((s for s in self.symbols if s.name == name), None)

    def add(self, symbol: Symbol) -> Symbol:
        """Append a symbol and return it."""
        self.symbols.append(symbol)
        return symbol


class SymbolTable:
    """A stack of domains; ``current`` is the innermost one."""

    def __init__(self) -> None:
        self.current: Domain | None = None

    def push_domain(self) -> Domain:
        """Open a new innermost domain."""
        domain = Domain(parent=self.current)
        self.current = domain
        return domain

    def drop_domain(self) -> Domain:
        """Close the innermost domain and return it."""
        if self.current is None:
            raise AtomCError("nu exista niciun domeniu de inchis")
        domain = self.current
        self.current = domain.parent
        return domain

    def _domains(self) -> Iterator[Domain]:
        domain = self.current
        while domain is not None:
            yield domain
            domain = domain.parent

    def find_symbol(self, name: str) -> Symbol | None:
        """Search all domains, innermost first."""
        for domain in self._domains():
            symbol = domain.find(name)
            if symbol is not None:
                return symbol
        return None

    def add_symbol(self, symbol: Symbol) -> Symbol:
        """Add a symbol to the innermost domain."""
        if self.current is None:
            raise AtomCError("nu exista niciun domeniu deschis")
        return self.current.add(symbol)

    def add_ext_fn(self, name: str, ext_fn: Callable[..., Any], ret: Type) -> Symbol:
        """Register an external (host) function with the given return type."""
        return self.add_symbol(Symbol(name, SymKind.FN, type=ret, ext_fn=ext_fn))


def format_domain(domain: Domain, name: str) -> str:
    """Render all symbols of a domain."""
    body = "".join(symbol.describe() for symbol in domain.symbols)
    return f"// domain: {name}\n{body}\n\n"


def show_domain(domain: Domain, name: str) -> None:
    """Print all symbols of a domain."""
    print(format_domain(domain, name), end="")
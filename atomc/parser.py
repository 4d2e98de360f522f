"""Syntactic and domain analysis of an AtomC token list."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace

from .ad import Symbol, SymbolTable, SymKind, Type, TypeBase
from .lexer import Token, TokenCode
from .utils import AtomCError

T = TokenCode


class ParseError(AtomCError):
    """A syntax or domain error at a given source line."""

    def __init__(self, reason: str, line: int) -> None:
        super().__init__(f"eroare la linia {line}: {reason}")
        self.reason = reason
        self.line = line


class Parser:
    """Recursive-descent parser that fills a symbol table."""

    def __init__(self, tokens: Sequence[Token], table: SymbolTable) -> None:
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].code != T.END:
            raise AtomCError("lista de atomi trebuie sa se termine cu END")
        self.table = table
        self.pos = 0
        self.consumed: Token | None = None
        self.owner: Symbol | None = None

    # --- helpers -------------------------------------------------------

    def _error(self, reason: str) -> None:
        raise ParseError(reason, self.tokens[self.pos].line)

    def _consume(self, code: TokenCode) -> bool:
        token = self.tokens[self.pos]
        if token.code == code:
            self.consumed = token
            self.pos += 1
            return True
        return False

    def _check_redefinition(self, name: str) -> None:
        if self.table.current is not None and self.table.current.find(name):
            self._error(f"redefinirea simbolului: {name}")

    # --- declarations --------------------------------------------------

    def _type_base(self) -> Type | None:
        for code, base in (
            (T.TYPE_INT, TypeBase.INT),
            (T.TYPE_DOUBLE, TypeBase.DOUBLE),
            (T.TYPE_CHAR, TypeBase.CHAR),
        ):
            if self._consume(code):
                return Type(base)
        if self._consume(T.STRUCT):
            if self._consume(T.ID):
                name = self.consumed.value
                symbol = self.table.find_symbol(name)
                if symbol is None:
                    self._error(f"structura nedefinita: {name}")
                return Type(TypeBase.STRUCT, s=symbol)
            self._error("lipseste numele structurii dupa struct")
        return None

    def _array_decl(self) -> int | None:
        """Return the declared dimension (0 when omitted), or None."""
        start = self.pos
        if self._consume(T.LBRACKET):
            size = self.consumed_value(T.INT)
            if self._consume(T.RBRACKET):
                return size
            self._error("lipseste ] in declaratia de array")
        self.pos = start
        return None

    def consumed_value(self, code: TokenCode) -> int:
        return self.consumed.value if self._consume(code) else 0

    def _var_def(self) -> bool:
        start = self.pos
        var_type = self._type_base()
        if var_type is not None and self._consume(T.ID):
            name = self.consumed.value
            dim = self._array_decl()
            if dim is not None:
                var_type.n = dim
                if dim == 0:
                    self._error(
                        "o variabila vector trebuie sa aiba o dimensiune specificata"
                    )
            if self._consume(T.SEMICOLON):
                self._define_var(name, var_type)
                return True
            self._error("lipseste ; dupa declaratia de variabila")
        self.pos = start
        return False

    def _define_var(self, name: str, var_type: Type) -> None:
        self._check_redefinition(name)
        var = Symbol(name, SymKind.VAR, type=var_type, owner=self.owner)
        self.table.add_symbol(var)
        owner = self.owner
        if owner is None:
            var.memory = bytearray(var_type.size())
        elif owner.kind is SymKind.FN:
            var.index = len(owner.locals)
            owner.locals.append(replace(var))
        elif owner.kind is SymKind.STRUCT:
            var.index = owner.type.size()
            owner.members.append(replace(var))

    def _struct_def(self) -> bool:
        start = self.pos
        if self._consume(T.STRUCT):
            if self._consume(T.ID):
                name = self.consumed.value
                if self._consume(T.LACC):
                    self._check_redefinition(name)
                    struct_symbol = Symbol(name, SymKind.STRUCT)
                    struct_symbol.type = Type(TypeBase.STRUCT, s=struct_symbol)
                    self.table.add_symbol(struct_symbol)
                    self.table.push_domain()
                    self.owner = struct_symbol
                    while self._var_def():
                        pass
                    if self._consume(T.RACC):
                        if self._consume(T.SEMICOLON):
                            self.owner = None
                            self.table.drop_domain()
                            return True
                        self._error("lipseste ; dupa }")
                    self._error("lipseste } la sfarsitul structurii")
                self.pos = start
                return False
            self._error("lipseste numele structurii dupa struct")
        self.pos = start
        return False

    def _fn_param(self) -> bool:
        start = self.pos
        param_type = self._type_base()
        if param_type is not None:
            if self._consume(T.ID):
                name = self.consumed.value
                if self._array_decl() is not None:
                    param_type.n = 0  # array params lose their dimension
                self._check_redefinition(name)
                param = Symbol(
                    name,
                    SymKind.PARAM,
                    type=param_type,
                    owner=self.owner,
                    index=len(self.owner.params),
                )
                self.table.add_symbol(param)
                self.owner.params.append(replace(param))
                return True
            self._error("lipseste numele parametrului")
        self.pos = start
        return False

    def _fn_def(self) -> bool:
        start = self.pos
        ret_type = self._type_base()
        if ret_type is None and self._consume(T.VOID):
            ret_type = Type(TypeBase.VOID)
        if ret_type is not None and self._consume(T.ID):
            name = self.consumed.value
            if self._consume(T.LPAR):
                self._check_redefinition(name)
                fn = Symbol(name, SymKind.FN, type=ret_type)
                self.table.add_symbol(fn)
                self.owner = fn
                self.table.push_domain()
                if self._fn_param():
                    while self._consume(T.COMMA):
                        if not self._fn_param():
                            self._error("parametru invalid sau lipseste dupa ,")
                if self._consume(T.RPAR):
                    if self._stm_compound(new_domain=False):
                        self.table.drop_domain()
                        self.owner = None
                        return True
                    self._error("lipseste corpul functiei")
                self._error("lipseste ) dupa parametrii functiei")
        self.pos = start
        return False

    def _unit(self) -> bool:
        while self._struct_def() or self._fn_def() or self._var_def():
            pass
        if self._consume(T.END):
            return True
        self._error(
            "token neasteptat: se astepta un tip, struct, void sau sfarsit de fisier"
        )
        return False

    # --- statements ----------------------------------------------------

    def _stm_compound(self, new_domain: bool) -> bool:
        start = self.pos
        if self._consume(T.LACC):
            if new_domain:
                self.table.push_domain()
            while self._var_def() or self._stm():
                pass
            if self._consume(T.RACC):
                if new_domain:
                    self.table.drop_domain()
                return True
            self._error("lipseste } la sfarsitul blocului")
        self.pos = start
        return False

    def _stm(self) -> bool:
        start = self.pos
        if self._stm_compound(new_domain=True):
            return True
        if self._consume(T.IF):
            self._condition("if")
            if not self._stm():
                self._error("instructiune invalida dupa if")
            if self._consume(T.ELSE) and not self._stm():
                self._error("instructiune invalida dupa else")
            return True
        if self._consume(T.WHILE):
            self._condition("while")
            if not self._stm():
                self._error("instructiune invalida dupa while")
            return True
        if self._consume(T.RETURN):
            self._expr()
            if not self._consume(T.SEMICOLON):
                self._error("lipseste ; dupa return")
            return True
        if self._expr():
            if not self._consume(T.SEMICOLON):
                self._error("lipseste ; dupa expresie")
            return True
        if self._consume(T.SEMICOLON):
            return True
        self.pos = start
        return False

    def _condition(self, keyword: str) -> None:
        if not self._consume(T.LPAR):
            self._error(f"lipseste ( dupa {keyword}")
        if not self._expr():
            self._error(f"conditie invalida in {keyword}")
        if not self._consume(T.RPAR):
            self._error(f"lipseste ) dupa conditia {keyword}")

    # --- expressions ---------------------------------------------------

    def _expr(self) -> bool:
        return self._expr_assign()

    def _expr_assign(self) -> bool:
        start = self.pos
        if self._expr_unary() and self._consume(T.ASSIGN):
            if self._expr_assign():
                return True
            self._error("expresie invalida dupa =")
        self.pos = start
        return self._expr_or()

    def _binary(
        self,
        operand: Callable[[], bool],
        operators: tuple[tuple[TokenCode, str], ...],
    ) -> bool:
        start = self.pos
        if not operand():
            self.pos = start
            return False
        while True:
            message = next(
                (msg for code, msg in operators if self._consume(code)), None
            )
            if message is None:
                return True
            if not operand():
                self._error(message)

    def _expr_or(self) -> bool:
        return self._binary(self._expr_and, ((T.OR, "expresie invalida dupa ||"),))

    def _expr_and(self) -> bool:
        return self._binary(self._expr_eq, ((T.AND, "expresie invalida dupa &&"),))

    def _expr_eq(self) -> bool:
        return self._binary(
            self._expr_rel,
            (
                (T.EQUAL, "expresie invalida dupa operatorul '=='"),
                (T.NOTEQ, "expresie invalida dupa operatorul '!='"),
            ),
        )

    def _expr_rel(self) -> bool:
        return self._binary(
            self._expr_add,
            tuple(
                (code, f"expresie invalida dupa operatorul relational '{symbol}'")
                for code, symbol in (
                    (T.LESS, "<"),
                    (T.LESSEQ, "<="),
                    (T.GREATER, ">"),
                    (T.GREATEREQ, ">="),
                )
            ),
        )

    def _expr_add(self) -> bool:
        return self._binary(
            self._expr_mul,
            (
                (T.ADD, "expresie invalida dupa operatorul '+'"),
                (T.SUB, "expresie invalida dupa operatorul '-'"),
            ),
        )

    def _expr_mul(self) -> bool:
        return self._binary(
            self._expr_cast,
            (
                (T.MUL, "expresie invalida dupa operatorul '*'"),
                (T.DIV, "expresie invalida dupa operatorul '/'"),
            ),
        )

    def _expr_cast(self) -> bool:
        start = self.pos
        if self._consume(T.LPAR) and self._type_base() is not None:
            self._array_decl()
            if self._consume(T.RPAR):
                if self._expr_cast():
                    return True
                self._error("expresie invalida dupa cast")
            self._error("lipseste ) dupa tipul conversiei")
        self.pos = start
        return self._expr_unary()

    def _expr_unary(self) -> bool:
        start = self.pos
        for code, symbol in ((T.SUB, "-"), (T.NOT, "!")):
            if self._consume(code):
                if self._expr_unary():
                    return True
                self._error(f"expresie invalida dupa operatorul unar '{symbol}'")
        if self._expr_postfix():
            return True
        self.pos = start
        return False

    def _expr_postfix(self) -> bool:
        start = self.pos
        if not self._expr_primary():
            self.pos = start
            return False
        while True:
            if self._consume(T.LBRACKET):
                if not self._expr():
                    self._error("expresie invalida in indexul array-ului")
                if not self._consume(T.RBRACKET):
                    self._error("lipseste ] dupa indexul array-ului")
            elif self._consume(T.DOT):
                if not self._consume(T.ID):
                    self._error("lipseste numele campului dupa .")
            else:
                return True

    def _expr_primary(self) -> bool:
        start = self.pos
        if self._consume(T.ID):
            if self._consume(T.LPAR):
                if self._expr():
                    while self._consume(T.COMMA):
                        if not self._expr():
                            self._error("expresie invalida dupa ,")
                if not self._consume(T.RPAR):
                    self._error("lipseste ) dupa argumentele functiei")
            return True
        if any(self._consume(code) for code in (T.INT, T.DOUBLE, T.CHAR, T.STRING)):
            return True
        if self._consume(T.LPAR) and self._expr():
            if self._consume(T.RPAR):
                return True
            self._error("lipseste ) dupa expresie")
        self.pos = start
        return False

    # --- entry point ---------------------------------------------------

    def parse(self) -> None:
        """Parse the whole token list, adding definitions to the table."""
        self.pos = 0
        self.owner = None
        if not self._unit():
            self._error("eroare de sintaxa")


def parse(tokens: Sequence[Token], table: SymbolTable) -> None:
    """Parse tokens into the current domain of table."""
    Parser(tokens, table).parse()
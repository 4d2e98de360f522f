"""A small stack-based virtual machine."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Any, TextIO

from .ad import Symbol, SymbolTable, Type, TypeBase
from .utils import AtomCError

STACK_SIZE = 10000


class Opcode(IntEnum):
    """Instructions of the virtual machine."""

    HALT = 0  # ends the code execution
    PUSH_I = auto()  # [ct.i] puts the constant on stack
    CALL = auto()  # [instr] calls a VM function starting at instr
    CALL_EXT = auto()  # [host function] calls a host function
    ENTER = auto()  # [nb_locals] creates a function frame
    RET = auto()  # [nb_params] returns a value from a function
    RET_VOID = auto()  # [nb_params] returns from a function without a value
    CONV_I_F = auto()  # converts the value on stack from int to double
    JMP = auto()  # [instr] unconditional jump
    JF = auto()  # [instr] jumps if the value on stack is false
    JT = auto()  # [instr] jumps if the value on stack is true
    FPLOAD = auto()  # [idx] puts FP[idx] on stack
    FPSTORE = auto()  # [idx] stores the value on stack into FP[idx]
    ADD_I = auto()  # adds two ints from stack
    LESS_I = auto()  # compares two ints from stack


@dataclass(eq=False)
class Instr:
    """One instruction; jump and call arguments are other instructions."""

    op: Opcode
    arg: Any = None


def add_instr(code: list[Instr], op: Opcode, arg: Any = None) -> Instr:
    """Append a new instruction to code and return it."""
    instr = Instr(op, arg)
    code.append(instr)
    return instr


class VirtualMachine:
    """Executes instruction lists, writing a trace of each step."""

    def __init__(self, out: TextIO | None = None, stack_size: int = STACK_SIZE) -> None:
        self._out = out
        self.stack_size = stack_size
        self.stack: list[Any] = []
        self.fp: int | None = None

    def write(self, text: str) -> None:
        """Write trace or program output."""
        (self._out or sys.stdout).write(text)

    def push(self, value: Any) -> None:
        """Push a value, failing when the stack is full."""
        if len(self.stack) >= self.stack_size:
            raise AtomCError("incercare de a adauga in stiva plina")
        self.stack.append(value)

    def pop(self) -> Any:
        """Pop and return the top value, failing when the stack is empty."""
        if not self.stack:
            raise AtomCError("incercare de a extrage din stiva goala")
        return self.stack.pop()

    def _frame_index(self, offset: int) -> int:
        if self.fp is None:
            raise AtomCError("acces la cadru fara functie activa")
        index = self.fp + offset
        if not 0 <= index < len(self.stack):
            raise AtomCError(f"acces in afara stivei: FP[{offset}]")
        return index

    def run(self, code: list[Instr]) -> None:
        """Execute code from its first instruction until HALT."""
        positions = {id(instr): index for index, instr in enumerate(code)}

        def target(instr: Instr) -> int:
            try:
                return positions[id(instr.arg)]
            except KeyError:
                raise AtomCError("run: destinatie invalida") from None

        ip = 0
        while True:
            if not 0 <= ip < len(code):
                raise AtomCError(f"run: adresa de instructiune invalida: {ip}")
            instr = code[ip]
            op = instr.op
            self.write(f"{ip}/{len(self.stack)}\t")
            if op is Opcode.HALT:
                self.write("HALT\n")
                return
            if op is Opcode.PUSH_I:
                self.write(f"PUSH.i\t{instr.arg}")
                self.push(instr.arg)
                ip += 1
            elif op is Opcode.CALL:
                dest = target(instr)
                self.push(ip + 1)
                self.write(f"CALL\t{dest}")
                ip = dest
            elif op is Opcode.CALL_EXT:
                fn = instr.arg
                self.write(f"CALL_EXT\t{getattr(fn, '__name__', fn)}\n")
                fn(self)
                ip += 1
            elif op is Opcode.ENTER:
                self.push(self.fp)
                self.fp = len(self.stack) - 1
                for _ in range(instr.arg):
                    self.push(0)
                self.write(f"ENTER\t{instr.arg}")
                ip += 1
            elif op is Opcode.RET_VOID:
                n_params = instr.arg
                self.write(f"RET_VOID\t{n_params}")
                fp = self._frame_index(0)
                ip = self.stack[self._frame_index(-1)]
                old_fp = self.stack[fp]
                del self.stack[max(fp - n_params - 1, 0):]
                self.fp = old_fp
            elif op is Opcode.JMP:
                dest = target(instr)
                self.write(f"JMP\t{dest}")
                ip = dest
            elif op is Opcode.JF:
                top = self.pop()
                dest = target(instr)
                self.write(f"JF\t{dest}\t// {top}")
                ip = ip + 1 if top else dest
            elif op is Opcode.FPLOAD:
                value = self.stack[self._frame_index(instr.arg)]
                self.push(value)
                self.write(f"FPLOAD\t{instr.arg}\t// {value}")
                ip += 1
            elif op is Opcode.FPSTORE:
                value = self.pop()
                self.stack[self._frame_index(instr.arg)] = value
                self.write(f"FPSTORE\t{instr.arg}\t// {value}")
                ip += 1
            elif op is Opcode.ADD_I:
                top = self.pop()
                before = self.pop()
                self.push(before + top)
                self.write(f"ADD.i\t// {before}+{top} -> {before + top}")
                ip += 1
            elif op is Opcode.LESS_I:
                top = self.pop()
                before = self.pop()
                result = int(before < top)
                self.push(result)
                self.write(f"LESS.i\t// {before}<{top} -> {result}")
                ip += 1
            else:
                raise AtomCError(f"run: instructiune neimplementata: {int(op)}")
            self.write("\n")


def put_i(vm: VirtualMachine) -> None:
    """Host function: print the int on top of the stack."""
    vm.write(f"=> {vm.pop()}")


def vm_init(table: SymbolTable) -> Symbol:
    """Register the host functions in the current domain of table."""
    fn = table.add_ext_fn("put_i", put_i, Type(TypeBase.VOID))
    fn.add_param("i", Type(TypeBase.INT))
    return fn


def gen_test_program(table: SymbolTable) -> list[Instr]:
    """Build a program that calls f(2), where f prints 0..n-1 with put_i."""
    code: list[Instr] = []
    add_instr(code, Opcode.PUSH_I, 2)
    call_pos = add_instr(code, Opcode.CALL)
    add_instr(code, Opcode.HALT)
    call_pos.arg = add_instr(code, Opcode.ENTER, 1)
    # int i=0;
    add_instr(code, Opcode.PUSH_I, 0)
    add_instr(code, Opcode.FPSTORE, 1)
    # while(i<n){
    while_pos = add_instr(code, Opcode.FPLOAD, 1)
    add_instr(code, Opcode.FPLOAD, -2)
    add_instr(code, Opcode.LESS_I)
    jf_after = add_instr(code, Opcode.JF)
    # put_i(i);
    add_instr(code, Opcode.FPLOAD, 1)
    symbol = table.find_symbol("put_i")
    if symbol is None:
        raise AtomCError("nedefinit: put_i")
    add_instr(code, Opcode.CALL_EXT, symbol.ext_fn)
    # i=i+1;
    add_instr(code, Opcode.FPLOAD, 1)
    add_instr(code, Opcode.PUSH_I, 1)
    add_instr(code, Opcode.ADD_I)
    add_instr(code, Opcode.FPSTORE, 1)
    # } next iteration
    add_instr(code, Opcode.JMP, while_pos)
    jf_after.arg = add_instr(code, Opcode.RET_VOID, 1)
    return code
# atomc

A front end for AtomC, a small subset of C. It has three parts:

- a **lexer** (`atomc.lexer`) that turns source text into tokens.
- a **recursive-descent parser** (`atomc.parser`) that checks the syntax and
  runs domain analysis. The analysis fills a symbol table (`atomc.ad`) and
  catches redefined symbols, undefined structs, and global or local array
  variables declared without a size.
- a small **stack virtual machine** (`atomc.vm`) with a hand-built test
  program.

## Installation

```
pip install .
```

## Command line

```
atomc program.c
```

The command prints the tokens grouped by source line. It then parses the
program and prints the global symbol table: variables, structs and functions
with their sizes and indexes. When the input is valid the output ends with
`Parsare OK` and the exit status is 0.

On an error the command prints a message to standard error and exits with
status 1. Syntax and domain errors name the line of the offending token
(`eroare la linia N: ...`). Lexical errors, file errors and a wrong number of
arguments are printed as `eroare: ...`.

## Library use

```python
from atomc.lexer import tokenize, format_tokens
from atomc.ad import SymbolTable, format_domain
from atomc.parser import parse

source = """
struct Point{ int x; int y; };
struct Point p;
int len(char s[]){ int i; i=0; while(s[i])i=i+1; return i; }
"""

tokens = tokenize(source)
print(format_tokens(tokens))

table = SymbolTable()
table.push_domain()          # the global domain
parse(tokens, table)
print(format_domain(table.current, "global"))
```

`tokenize` returns a list of `Token` objects (`code`, `line`, `value`) that
always ends with a `TokenCode.END` token. `show_tokens` and `show_domain`
print the same text that `format_tokens` and `format_domain` return.

Errors are raised as exceptions:

- `atomc.utils.AtomCError` for lexical errors and for files that cannot be
  read (`load_file`).
- `atomc.parser.ParseError`, a subclass of `AtomCError`, for syntax and domain
  errors. Its `line` attribute holds the line of the offending token and its
  `reason` attribute holds the message without the line prefix.

### Virtual machine

```python
from atomc.ad import SymbolTable
from atomc.vm import VirtualMachine, vm_init, gen_test_program

table = SymbolTable()
table.push_domain()
vm_init(table)                      # registers the host function put_i
code = gen_test_program(table)      # f(2): prints 0 and 1 through put_i
VirtualMachine().run(code)
```

`VirtualMachine.run` writes a trace line for each instruction: the index of
the instruction, the number of values on the stack, and the instruction with
its argument. Pass a text stream as `VirtualMachine(out=...)` to capture the
trace. The stack holds at most 10000 values by default; pushing onto a full
stack or popping from an empty one raises `AtomCError`.

## Limitations

- The parser only checks programs and builds the symbol table. It does not
  check the types of expressions and does not generate code.
- The virtual machine runs instruction lists built by hand with `add_instr`,
  such as the one from `gen_test_program`. It implements `HALT`, `PUSH_I`,
  `CALL`, `CALL_EXT`, `ENTER`, `RET_VOID`, `JMP`, `JF`, `FPLOAD`, `FPSTORE`,
  `ADD_I` and `LESS_I`; any other opcode raises `AtomCError`.
- The command line does not run programs; it only shows tokens and symbols.

## Running the tests

```
pip install .[test]
pytest
```
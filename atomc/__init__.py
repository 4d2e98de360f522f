"""Lexer, parser with domain analysis, and stack virtual machine for AtomC."""

__version__ = "0.1.0"

__all__ = ["utils", "lexer", "ad", "vm", "parser", "cli"]
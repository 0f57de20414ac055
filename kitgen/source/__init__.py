"""Go source handling: tokenizer, parser, file model and formatting."""

from .body import Binding, ConstructorBody, Statement, StatementKind
from .formatter import GoFormatter
from .gofile import Decl, FuncDecl, GoFile, ImportDecl, TypeDecl, TypeSpec, ValueDecl
from .parser import GoParser

__all__ = [
    "Binding",
    "ConstructorBody",
    "Decl",
    "FuncDecl",
    "GoFile",
    "GoFormatter",
    "GoParser",
    "ImportDecl",
    "Statement",
    "StatementKind",
    "TypeDecl",
    "TypeSpec",
    "ValueDecl",
]

"""Go front-end: parsing, positions, scopes and type-resolution tables."""

from .positions import Position, PositionIndex, TokenFile
from .syntax import GO_GRAMMAR, SourceFile, parse_go
from .objects import Object, PkgName, Scope
from .checker import TypeInfo, check_packages
from .packages import CompilationUnit, LoadConfig, load_packages

__all__ = [
    "Position",
    "PositionIndex",
    "TokenFile",
    "GO_GRAMMAR",
    "SourceFile",
    "parse_go",
    "Object",
    "PkgName",
    "Scope",
    "TypeInfo",
    "check_packages",
    "CompilationUnit",
    "LoadConfig",
    "load_packages",
]

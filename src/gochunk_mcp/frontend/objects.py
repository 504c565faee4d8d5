"""Declared objects and lexical scopes."""

from typing import Optional


class Object:
    """A named language entity: variable, constant, type, function, ..."""

    def __init__(
        self,
        name: str,
        kind: str,
        pkg_path: str = "",
        node=None,
        scope: Optional["Scope"] = None,
        index: int = 0,
    ):
        self.name = name
        self.kind = kind            # "var" | "const" | "type" | "func" | "builtin" | "nil" | "typeparam"
        self.pkg_path = pkg_path    # Declaring package ("" for universe objects)
        self.node = node            # Spec or declaration supplying type and initializers
        self.scope = scope          # Scope the declaration's expressions resolve in
        self.index = index          # Position among the names of a multi-name spec

    @property
    def is_package_level(self) -> bool:
        return self.scope is not None and self.scope.kind == "file"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.kind!r})"


class PkgName(Object):
    """The local name of an imported package."""

    def __init__(self, name: str, imported_path: str, node=None):
        super().__init__(name, "pkgname", node=node)
        self.imported_path = imported_path


class Scope:
    """One lexical scope; lookups walk outward through ``parent``."""

    def __init__(self, parent: Optional["Scope"] = None, kind: str = "block", pkg_path: str = ""):
        self.parent = parent
        self.kind = kind            # "universe" | "package" | "file" | "function" | "block"
        self.pkg_path = pkg_path or (parent.pkg_path if parent else "")
        self.names: dict[str, Object] = {}

    def insert(self, obj: Object) -> None:
        if obj.name and obj.name != "_":
            self.names[obj.name] = obj

    def lookup(self, name: str) -> Optional[Object]:
        scope = self
        while scope is not None:
            obj = scope.names.get(name)
            if obj is not None:
                return obj
            scope = scope.parent
        return None

    def child(self, kind: str = "block") -> "Scope":
        return Scope(self, kind)

    def file_scope(self) -> Optional["Scope"]:
        scope = self
        while scope is not None and scope.kind != "file":
            scope = scope.parent
        return scope


PREDECLARED_TYPES = (
    "any", "bool", "byte", "comparable", "complex64", "complex128", "error",
    "float32", "float64", "int", "int8", "int16", "int32", "int64", "rune",
    "string", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
)

BUILTIN_FUNCS = (
    "append", "cap", "clear", "close", "complex", "copy", "delete", "imag",
    "len", "make", "max", "min", "new", "panic", "print", "println", "real",
    "recover",
)


def _build_universe() -> Scope:
    universe = Scope(kind="universe")
    for name in PREDECLARED_TYPES:
        universe.insert(Object(name, "type"))
    for name in BUILTIN_FUNCS:
        universe.insert(Object(name, "builtin"))
    universe.insert(Object("true", "const"))
    universe.insert(Object("false", "const"))
    universe.insert(Object("iota", "const"))
    universe.insert(Object("nil", "nil"))
    return universe


UNIVERSE = _build_universe()

"""Type-resolution tables for loaded compilation units.

``check_packages`` gives every unit a ``TypeInfo`` answering two questions
about its syntax trees:

* ``type_of(node)``: the canonical type string of a type expression or a
  ``var``/``const`` initializer, e.g. ``*example.com/app.Foo``, ``map[string][]byte``,
  ``github.com/x/y.Client``, ``(int, error)``.
* ``object_of(ident)``: the object an identifier resolves to through the
  lexical scope chain; imported package names resolve to ``PkgName``.

Anything that cannot be worked out is simply left out of the tables.
"""

import logging
import re
from typing import Optional

from .objects import UNIVERSE, Object, PkgName, Scope
from .syntax import field_child, iter_import_specs, iter_specs, node_key, node_text, spec_names, walk

logger = logging.getLogger(__name__)


IDENTIFIER_TYPES = ("identifier", "type_identifier", "package_identifier")

TYPE_NODE_TYPES = (
    "type_identifier", "qualified_type", "pointer_type", "slice_type", "array_type",
    "map_type", "channel_type", "function_type", "struct_type", "interface_type",
    "generic_type", "parenthesized_type",
)

COMPARISON_OPERATORS = ("==", "!=", "<", "<=", ">", ">=")

# Untyped constant kinds in promotion order
UNTYPED_RANK = {
    "untyped int": 1,
    "untyped rune": 2,
    "untyped float": 3,
    "untyped complex": 4,
}

DEFAULT_TYPES = {
    "untyped int": "int",
    "untyped rune": "rune",
    "untyped float": "float64",
    "untyped complex": "complex128",
    "untyped string": "string",
    "untyped bool": "bool",
}

LITERAL_TYPES = {
    "int_literal": "untyped int",
    "float_literal": "untyped float",
    "imaginary_literal": "untyped complex",
    "rune_literal": "untyped rune",
    "interpreted_string_literal": "untyped string",
    "raw_string_literal": "untyped string",
    "true": "untyped bool",
    "false": "untyped bool",
    "iota": "untyped int",
    "nil": "untyped nil",
}

_VERSION_ELEMENT = re.compile(r"^v[0-9]+$")
_IDENTIFIER_PREFIX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*")


class TypeInfo:
    """Type and use tables for one compilation unit."""

    def __init__(self, pkg_path: str):
        self.pkg_path = pkg_path
        self.types: dict[tuple, str] = {}
        self.uses: dict[tuple, Object] = {}
        self.defs: dict[tuple, Object] = {}

    def type_of(self, node) -> Optional[str]:
        if node is None:
            return None
        return self.types.get(node_key(node))

    def object_of(self, ident) -> Optional[Object]:
        if ident is None:
            return None
        key = node_key(ident)
        return self.uses.get(key) or self.defs.get(key)

    def imported_path(self, ident) -> Optional[str]:
        """Import path if ``ident`` names an imported package."""
        obj = self.uses.get(node_key(ident)) if ident is not None else None
        if isinstance(obj, PkgName):
            return obj.imported_path
        return None


def assumed_package_name(import_path: str) -> str:
    """Package name Go tooling assumes for an import path it cannot load.

    ``gopkg.in/yaml.v3`` -> ``yaml``, ``github.com/x/go-redis/v9`` -> ``redis``.
    """
    elements = [e for e in import_path.split("/") if e]
    while len(elements) > 1 and _VERSION_ELEMENT.match(elements[-1]):
        elements.pop()
    last = elements[-1] if elements else import_path
    if last.startswith("go-"):
        last = last[3:]
    match = _IDENTIFIER_PREFIX.match(last)
    return match.group(0) if match else last


def _named(node) -> list:
    """Named children, without comments."""
    return [c for c in node.named_children if c.type != "comment"]


def _has_token(node, token: str) -> bool:
    return any(not c.is_named and c.type == token for c in node.children)


def check_packages(units: list, diagnostics) -> None:
    """Attach a ``TypeInfo`` to every unit that can be checked.

    A declaration whose resolution or typing raises is reported and only
    loses its own table entries. A unit whose check raises otherwise is
    reported and left with ``type_info = None``; the remaining units are
    unaffected.
    """
    run = _CheckRun(units, diagnostics)
    phases = (run.declare, run.bind_imports, run.resolve, run.record_types)
    for phase in phases:
        for unit in list(run.active):
            try:
                phase(unit)
            except Exception as e:
                run.active.remove(unit)
                unit.type_info = None
                diagnostics.error(
                    f"Type checking failed for package {unit.id}: {e}",
                    logger=logger,
                    package=unit.id,
                )
    for unit in run.active:
        unit.type_info = run.infos[unit.id]


class _CheckRun:
    """State shared by the units of one load pass."""

    def __init__(self, units: list, diagnostics):
        self.diagnostics = diagnostics
        self.active = list(units)
        self.by_path = {u.pkg_path: u for u in units}
        self.infos: dict[str, TypeInfo] = {}
        self.package_scopes: dict[str, Scope] = {}
        self.file_scopes: dict[str, Scope] = {}
        # Run-wide tables so types can be followed across packages
        self.uses: dict[tuple, Object] = {}
        self.defs: dict[tuple, Object] = {}
        self.object_types: dict[tuple, Optional[str]] = {}

    # Phase 1: package-level objects

    def declare(self, unit) -> None:
        info = TypeInfo(unit.pkg_path)
        self.infos[unit.id] = info
        package_scope = Scope(UNIVERSE, "package", unit.pkg_path)
        self.package_scopes[unit.pkg_path] = package_scope

        for source_file in unit.files:
            file_scope = Scope(package_scope, "file")
            self.file_scopes[source_file.path] = file_scope
            for decl in source_file.declarations():
                self._declare_top_level(decl, unit, info, package_scope, file_scope)

    def _declare_top_level(self, decl, unit, info, package_scope, file_scope) -> None:
        def define(name_node, kind, node, index=0, visible=True):
            if name_node is None:
                return
            obj = Object(node_text(name_node), kind, unit.pkg_path, node=node, scope=file_scope, index=index)
            info.defs[node_key(name_node)] = obj
            self.defs[node_key(name_node)] = obj
            if visible:
                package_scope.insert(obj)

        if decl.type == "function_declaration":
            name_node = field_child(decl, "name")
            define(name_node, "func", decl, visible=node_text(name_node) != "init")
        elif decl.type == "method_declaration":
            define(field_child(decl, "name"), "func", decl, visible=False)
        elif decl.type == "type_declaration":
            for spec in iter_specs(decl):
                define(field_child(spec, "name"), "type", spec)
        elif decl.type in ("const_declaration", "var_declaration"):
            kind = "const" if decl.type == "const_declaration" else "var"
            inherited = None
            for spec in iter_specs(decl):
                source = spec
                if kind == "const":
                    # Implicit repetition of the previous type and values
                    if field_child(spec, "value") is not None or field_child(spec, "type") is not None:
                        inherited = spec
                    source = inherited or spec
                for index, name_node in enumerate(spec_names(spec)):
                    define(name_node, kind, source, index=index)

    # Phase 2: file scopes

    def bind_imports(self, unit) -> None:
        info = self.infos[unit.id]
        for source_file in unit.files:
            file_scope = self.file_scopes[source_file.path]
            for spec in iter_import_specs(source_file.root):
                if spec.alias_kind in ("dot", "blank"):
                    continue
                if spec.alias_kind == "named":
                    name = spec.alias
                else:
                    dependency = self.by_path.get(spec.path)
                    name = dependency.name if dependency is not None and dependency.name else assumed_package_name(spec.path)
                obj = PkgName(name, spec.path, node=spec.node)
                file_scope.insert(obj)
                name_node = field_child(spec.node, "name")
                if name_node is not None:
                    info.defs[node_key(name_node)] = obj

    # Phase 3: identifier uses

    def resolve(self, unit) -> None:
        resolver = _UseResolver(self, unit, self.infos[unit.id])
        for source_file in unit.files:
            file_scope = self.file_scopes[source_file.path]
            for decl in source_file.declarations():
                self._guarded(unit, source_file, decl, "resolution", resolver.top_level, decl, file_scope)

    # Phase 4: types

    def record_types(self, unit) -> None:
        info = self.infos[unit.id]
        typer = _Typer(self, unit.pkg_path, info.types)
        for source_file in unit.files:
            for decl in source_file.declarations():
                self._guarded(unit, source_file, decl, "typing", self._record_declaration, typer, decl)

    def _record_declaration(self, typer: "_Typer", decl) -> None:
        for node in walk(decl):
            if node.type in TYPE_NODE_TYPES:
                typer.type_string(node)
            elif node.type in ("var_spec", "const_spec"):
                typer.record_initializers(node)

    def _guarded(self, unit, source_file, decl, phase: str, fn, *args) -> None:
        """Run one declaration's share of a phase; a failure skips only that declaration."""
        try:
            fn(*args)
        except Exception as e:
            line = decl.start_point[0] + 1
            self.diagnostics.warning(
                f"Type {phase} failed for declaration in {source_file.path} (line {line}): "
                f"{type(e).__name__}: {e}. Its type information is incomplete.",
                logger=logger,
                package=unit.id,
                file=source_file.path,
                line=line,
                start=decl.start_byte,
                end=decl.end_byte,
            )

    def lookup_object(self, node) -> Optional[Object]:
        key = node_key(node)
        return self.uses.get(key) or self.defs.get(key)

    def package_member(self, pkg_path: str, name: str) -> Optional[Object]:
        scope = self.package_scopes.get(pkg_path)
        if scope is None:
            return None
        return scope.names.get(name)


class _UseResolver:
    """Scope-aware walk recording every identifier use of one unit."""

    def __init__(self, run: _CheckRun, unit, info: TypeInfo):
        self.run = run
        self.pkg_path = unit.pkg_path
        self.info = info
        self._handlers = {
            "selector_expression": self._selector,
            "qualified_type": self._qualified_type,
            "keyed_element": self._keyed_element,
            "func_literal": self._function,
            "block": self._block,
            "short_var_declaration": self._short_var,
            "var_declaration": self._value_declaration,
            "const_declaration": self._value_declaration,
            "type_declaration": self._type_declaration,
            "parameter_declaration": self._parameter_type,
            "variadic_parameter_declaration": self._parameter_type,
            "if_statement": self._scoped,
            "for_statement": self._for,
            "expression_switch_statement": self._switch,
            "type_switch_statement": self._type_switch,
            "select_statement": self._select,
        }

    def top_level(self, decl, file_scope: Scope) -> None:
        if decl.type in ("function_declaration", "method_declaration"):
            self._function(decl, file_scope)
        elif decl.type == "type_declaration":
            for spec in iter_specs(decl):
                self._type_spec(spec, file_scope)
        elif decl.type in ("var_declaration", "const_declaration"):
            for spec in iter_specs(decl):
                self.walk(field_child(spec, "type"), file_scope)
                self.walk(field_child(spec, "value"), file_scope)

    def walk(self, node, scope: Scope) -> None:
        # Iterative; generated expression chains nest past the recursion limit
        stack = [node]
        while stack:
            current = stack.pop()
            if current is None:
                continue
            handler = self._handlers.get(current.type)
            if handler is not None:
                handler(current, scope)
            elif current.type in IDENTIFIER_TYPES:
                self.use(current, scope)
            else:
                stack.extend(reversed(_named(current)))

    def use(self, ident, scope: Scope) -> None:
        obj = scope.lookup(node_text(ident))
        if obj is not None:
            key = node_key(ident)
            self.info.uses[key] = obj
            self.run.uses[key] = obj

    def define(self, ident, scope: Scope, kind: str, node=None, index: int = 0) -> Object:
        obj = Object(node_text(ident), kind, self.pkg_path, node=node, scope=scope, index=index)
        key = node_key(ident)
        self.info.defs[key] = obj
        self.run.defs[key] = obj
        scope.insert(obj)
        return obj

    # Expressions

    def _selector(self, node, scope: Scope) -> None:
        self.walk(field_child(node, "operand"), scope)

    def _qualified_type(self, node, scope: Scope) -> None:
        package = field_child(node, "package")
        if package is not None:
            self.use(package, scope)

    def _keyed_element(self, node, scope: Scope) -> None:
        children = _named(node)
        key = field_child(node, "key") or (children[0] if children else None)
        value = field_child(node, "value") or (children[-1] if len(children) > 1 else None)
        # Bare identifier keys name struct fields
        bare = key
        if bare is not None and bare.type == "literal_element" and len(_named(bare)) == 1:
            bare = _named(bare)[0]
        if bare is not None and bare.type != "identifier":
            self.walk(key, scope)
        self.walk(value, scope)

    # Functions

    def _function(self, node, scope: Scope) -> None:
        function_scope = scope.child("function")
        type_params = field_child(node, "type_parameters")
        if type_params is not None:
            self._type_parameters(type_params, function_scope)
        receiver = field_child(node, "receiver")
        if receiver is not None:
            self._receiver_type_parameters(receiver, function_scope)
            self._parameters(receiver, function_scope)
        self._parameters(field_child(node, "parameters"), function_scope)
        result = field_child(node, "result")
        if result is not None and result.type == "parameter_list":
            self._parameters(result, function_scope)
        else:
            self.walk(result, function_scope)
        body = field_child(node, "body")
        if body is not None:
            for child in _named(body):
                self.walk(child, function_scope)

    def _parameters(self, parameter_list, scope: Scope) -> None:
        if parameter_list is None:
            return
        declarations = [
            c for c in _named(parameter_list)
            if c.type in ("parameter_declaration", "variadic_parameter_declaration")
        ]
        for decl in declarations:
            self.walk(field_child(decl, "type"), scope)
        for decl in declarations:
            for name_node in decl.children_by_field_name("name"):
                self.define(name_node, scope, "var", node=decl)

    def _parameter_type(self, node, scope: Scope) -> None:
        self.walk(field_child(node, "type"), scope)

    def _type_parameters(self, type_params, scope: Scope) -> None:
        declarations = [
            c for c in _named(type_params)
            if c.type in ("type_parameter_declaration", "parameter_declaration")
        ]
        for decl in declarations:
            for name_node in decl.children_by_field_name("name"):
                self.define(name_node, scope, "typeparam", node=decl)
        for decl in declarations:
            self.walk(field_child(decl, "type") or field_child(decl, "constraint"), scope)

    def _receiver_type_parameters(self, receiver, scope: Scope) -> None:
        """Type parameters introduced by a receiver such as ``(l *List[T])``."""
        for decl in _named(receiver):
            recv_type = field_child(decl, "type")
            if recv_type is not None and recv_type.type == "pointer_type":
                inner = _named(recv_type)
                recv_type = inner[0] if inner else None
            if recv_type is None or recv_type.type != "generic_type":
                continue
            arguments = field_child(recv_type, "type_arguments")
            for arg in _named(arguments) if arguments is not None else []:
                if arg.type == "type_elem" and len(_named(arg)) == 1:
                    arg = _named(arg)[0]
                if arg.type in ("type_identifier", "identifier"):
                    self.define(arg, scope, "typeparam", node=decl)

    # Declarations

    def _short_var(self, node, scope: Scope) -> None:
        self.walk(field_child(node, "right"), scope)
        left = field_child(node, "left")
        for index, ident in enumerate(_named(left) if left is not None else []):
            if ident.type != "identifier":
                self.walk(ident, scope)
            elif node_text(ident) in scope.names:
                self.use(ident, scope)
            else:
                self.define(ident, scope, "var", node=node, index=index)

    def _value_declaration(self, node, scope: Scope) -> None:
        kind = "const" if node.type == "const_declaration" else "var"
        inherited = None
        for spec in iter_specs(node):
            self.walk(field_child(spec, "type"), scope)
            self.walk(field_child(spec, "value"), scope)
            source = spec
            if kind == "const":
                if field_child(spec, "value") is not None or field_child(spec, "type") is not None:
                    inherited = spec
                source = inherited or spec
            for index, name_node in enumerate(spec_names(spec)):
                self.define(name_node, scope, kind, node=source, index=index)

    def _type_declaration(self, node, scope: Scope) -> None:
        for spec in iter_specs(node):
            name_node = field_child(spec, "name")
            if name_node is not None:
                self.define(name_node, scope, "type", node=spec)
            self._type_spec(spec, scope)

    def _type_spec(self, spec, scope: Scope) -> None:
        type_scope = scope.child()
        type_params = field_child(spec, "type_parameters")
        if type_params is not None:
            self._type_parameters(type_params, type_scope)
        self.walk(field_child(spec, "type"), type_scope)

    # Statements

    def _block(self, node, scope: Scope) -> None:
        inner = scope.child()
        for child in _named(node):
            self.walk(child, inner)

    def _scoped(self, node, scope: Scope) -> None:
        inner = scope.child()
        for child in _named(node):
            self.walk(child, inner)

    def _for(self, node, scope: Scope) -> None:
        inner = scope.child()
        for child in _named(node):
            if child.type == "range_clause":
                self.walk(field_child(child, "right"), inner)
                left = field_child(child, "left")
                if left is None:
                    continue
                if _has_token(child, ":="):
                    for index, ident in enumerate(_named(left)):
                        if ident.type == "identifier":
                            self.define(ident, inner, "var", node=child, index=index)
                else:
                    self.walk(left, inner)
            else:
                self.walk(child, inner)

    def _switch(self, node, scope: Scope) -> None:
        inner = scope.child()
        for child in _named(node):
            if child.type in ("expression_case", "default_case"):
                self._scoped(child, inner)
            else:
                self.walk(child, inner)

    def _type_switch(self, node, scope: Scope) -> None:
        inner = scope.child()
        alias = field_child(node, "alias")
        alias_key = node_key(alias) if alias is not None else None
        for child in _named(node):
            if alias_key is not None and node_key(child) == alias_key:
                continue
            if child.type in ("type_case", "default_case"):
                case_scope = inner.child()
                for ident in _named(alias) if alias is not None else []:
                    if ident.type == "identifier":
                        self.define(ident, case_scope, "var", node=child)
                for sub in _named(child):
                    self.walk(sub, case_scope)
            else:
                self.walk(child, inner)

    def _select(self, node, scope: Scope) -> None:
        for case in _named(node):
            if case.type not in ("communication_case", "default_case"):
                self.walk(case, scope)
                continue
            case_scope = scope.child()
            communication = field_child(case, "communication")
            comm_key = node_key(communication) if communication is not None else None
            if communication is not None:
                if communication.type == "receive_statement" and _has_token(communication, ":="):
                    self.walk(field_child(communication, "right"), case_scope)
                    left = field_child(communication, "left")
                    for index, ident in enumerate(_named(left) if left is not None else []):
                        if ident.type == "identifier":
                            self.define(ident, case_scope, "var", node=communication, index=index)
                else:
                    self.walk(communication, case_scope)
            for sub in _named(case):
                if comm_key is None or node_key(sub) != comm_key:
                    self.walk(sub, case_scope)


class _Typer:
    """Computes fully-qualified type strings for the nodes of one package."""

    def __init__(self, run: _CheckRun, home_path: str, record: Optional[dict] = None):
        self.run = run
        self.home_path = home_path
        self.record = record

    def qualify(self, obj: Object) -> str:
        # Only predeclared objects print bare
        if not obj.pkg_path:
            return obj.name
        return f"{obj.pkg_path}.{obj.name}"

    def _imported_path(self, ident) -> Optional[str]:
        if ident is None or ident.type not in ("identifier", "package_identifier"):
            return None
        obj = self.run.lookup_object(ident)
        return obj.imported_path if isinstance(obj, PkgName) else None

    # Type expressions

    def type_string(self, node) -> Optional[str]:
        if node is None:
            return None
        key = node_key(node)
        if self.record is not None and key in self.record:
            return self.record[key]
        text = self._compute_type(node)
        if text is not None and self.record is not None:
            self.record[key] = text
        return text

    def _compute_type(self, node) -> Optional[str]:
        kind = node.type
        children = _named(node)

        if kind in ("type_identifier", "identifier"):
            obj = self.run.lookup_object(node)
            if obj is None:
                return None
            if obj.kind == "type":
                return self.qualify(obj)
            if obj.kind == "typeparam":
                return obj.name
            return None
        if kind == "qualified_type":
            path = self._imported_path(field_child(node, "package"))
            name = field_child(node, "name")
            if path is None or name is None:
                return None
            return f"{path}.{node_text(name)}"
        if kind == "selector_expression":
            path = self._imported_path(field_child(node, "operand"))
            member = field_child(node, "field")
            if path is None or member is None:
                return None
            return f"{path}.{node_text(member)}"
        if kind == "pointer_type":
            inner = self.type_string(children[0]) if children else None
            return "*" + inner if inner is not None else None
        if kind == "slice_type":
            element = self.type_string(field_child(node, "element"))
            return "[]" + element if element is not None else None
        if kind == "array_type":
            length = field_child(node, "length")
            element = self.type_string(field_child(node, "element"))
            if length is None or element is None:
                return None
            return f"[{node_text(length)}]{element}"
        if kind == "map_type":
            key = self.type_string(field_child(node, "key"))
            value = self.type_string(field_child(node, "value"))
            if key is None or value is None:
                return None
            return f"map[{key}]{value}"
        if kind == "channel_type":
            value = self.type_string(field_child(node, "value"))
            if value is None:
                return None
            tokens = [c.type for c in node.children if not c.is_named]
            if tokens[:2] == ["<-", "chan"]:
                return "<-chan " + value
            if "<-" in tokens:
                return "chan<- " + value
            return "chan " + value
        if kind in ("function_type", "func_literal"):
            signature = self.signature(field_child(node, "parameters"), field_child(node, "result"))
            return "func" + signature if signature is not None else None
        if kind == "struct_type":
            return self._struct(node)
        if kind == "interface_type":
            return self._interface(node)
        if kind == "generic_type":
            base = self.type_string(field_child(node, "type"))
            arguments = field_child(node, "type_arguments")
            if base is None or arguments is None:
                return None
            args = [self.type_string(a) for a in _named(arguments)]
            if any(a is None for a in args):
                return None
            return f"{base}[{', '.join(args)}]"
        if kind in ("type_elem", "constraint_elem"):
            parts = [self.type_string(c) for c in children]
            if not parts or any(p is None for p in parts):
                return None
            return " | ".join(parts)
        if kind == "parenthesized_type":
            return self.type_string(children[0]) if children else None
        if kind == "negated_type":
            inner = self.type_string(children[0]) if children else None
            return "~" + inner if inner is not None else None
        return None

    def _struct(self, node) -> Optional[str]:
        fields = []
        for field_list in _named(node):
            for decl in _named(field_list):
                if decl.type != "field_declaration":
                    continue
                type_text = self.type_string(field_child(decl, "type"))
                if type_text is None:
                    return None
                names = decl.children_by_field_name("name")
                if names:
                    entries = [f"{node_text(n)} {type_text}" for n in names]
                else:
                    entries = [("*" if _has_token(decl, "*") else "") + type_text]
                tag = field_child(decl, "tag")
                if tag is not None:
                    entries = [f"{e} {node_text(tag)}" for e in entries]
                fields.extend(entries)
        if not fields:
            return "struct{}"
        return "struct{" + "; ".join(fields) + "}"

    def _interface(self, node) -> Optional[str]:
        elements = []
        for elem in _named(node):
            if elem.type in ("method_elem", "method_spec"):
                signature = self.signature(field_child(elem, "parameters"), field_child(elem, "result"))
                if signature is None:
                    return None
                elements.append(node_text(field_child(elem, "name")) + signature)
            else:
                text = self.type_string(elem)
                if text is None:
                    return None
                elements.append(text)
        if not elements:
            return "interface{}"
        return "interface{" + "; ".join(elements) + "}"

    def _field_types(self, parameter_list) -> Optional[list]:
        """``(name, type, named)`` entries of a parameter or result list."""
        entries = []
        for decl in _named(parameter_list):
            if decl.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            type_text = self.type_string(field_child(decl, "type"))
            if type_text is None:
                return None
            if decl.type == "variadic_parameter_declaration":
                type_text = "..." + type_text
            names = decl.children_by_field_name("name")
            if names:
                entries.extend((node_text(n), type_text, True) for n in names)
            else:
                entries.append(("", type_text, False))
        return entries

    def signature(self, parameters, result) -> Optional[str]:
        params = self._field_types(parameters) if parameters is not None else []
        if params is None:
            return None
        text = "(" + ", ".join(f"{n} {t}" if named else t for n, t, named in params) + ")"
        if result is None:
            return text
        if result.type != "parameter_list":
            result_text = self.type_string(result)
            return text + " " + result_text if result_text is not None else None
        results = self._field_types(result)
        if results is None:
            return None
        if not results:
            return text
        if len(results) == 1 and not results[0][2]:
            return text + " " + results[0][1]
        return text + " (" + ", ".join(f"{n} {t}" if named else t for n, t, named in results) + ")"

    def results(self, function_node) -> Optional[list]:
        """Result types of a declared function or function literal."""
        result = field_child(function_node, "result")
        if result is None:
            return []
        if result.type != "parameter_list":
            text = self.type_string(result)
            return [text] if text is not None else None
        entries = self._field_types(result)
        return [t for _, t, _ in entries] if entries is not None else None

    # Value expressions

    def record_initializers(self, spec) -> None:
        values = field_child(spec, "value")
        if values is None or self.record is None:
            return
        declared = field_child(spec, "type")
        for expr in _named(values):
            text = self.expr_type(expr)
            if text is None:
                continue
            if text.startswith("untyped ") and declared is not None:
                text = self.type_string(declared) or text
            elif spec.type == "var_spec":
                text = DEFAULT_TYPES.get(text, text)
            self.record[node_key(expr)] = text

    def expr_type(self, node) -> Optional[str]:
        if node is None:
            return None
        kind = node.type
        if kind in LITERAL_TYPES:
            return LITERAL_TYPES[kind]
        if kind == "parenthesized_expression":
            children = _named(node)
            return self.expr_type(children[0]) if children else None
        if kind == "composite_literal":
            return self.type_string(field_child(node, "type"))
        if kind == "func_literal":
            return self.type_string(node)
        if kind in ("type_conversion_expression", "type_assertion_expression"):
            return self.type_string(field_child(node, "type"))
        if kind == "unary_expression":
            return self._unary(node)
        if kind == "binary_expression":
            return self._binary(node)
        if kind == "identifier":
            obj = self.run.lookup_object(node)
            return self.object_type(obj) if obj is not None else None
        if kind == "selector_expression":
            obj = self._package_member(node)
            return self.object_type(obj) if obj is not None else None
        if kind == "call_expression":
            results = self.call_results(node)
            if results is None or not results:
                return None
            if len(results) == 1:
                return results[0]
            return "(" + ", ".join(results) + ")"
        if kind == "slice_expression":
            operand = self.expr_type(field_child(node, "operand"))
            if operand is not None and (operand.startswith("[]") or operand in ("string", "untyped string")):
                return DEFAULT_TYPES.get(operand, operand)
            return None
        return None

    def _unary(self, node) -> Optional[str]:
        operator = node_text(field_child(node, "operator"))
        operand = field_child(node, "operand")
        if operator == "&":
            inner = self.expr_type(operand)
            return "*" + inner if inner is not None else None
        inner = self.expr_type(operand)
        if inner is None:
            return None
        if operator == "*":
            return inner[1:] if inner.startswith("*") else None
        if operator == "<-":
            for prefix in ("chan ", "<-chan "):
                if inner.startswith(prefix):
                    return inner[len(prefix):]
            return None
        return inner

    def _binary(self, node) -> Optional[str]:
        # Chains nest on the left; fold them without recursing
        chain = []
        while node is not None and node.type == "binary_expression":
            chain.append(node)
            node = field_child(node, "left")
        text = self.expr_type(node)
        for current in reversed(chain):
            operator = node_text(field_child(current, "operator"))
            text = _apply_operator(operator, text, self.expr_type(field_child(current, "right")))
        return text

    def _package_member(self, selector) -> Optional[Object]:
        path = self._imported_path(field_child(selector, "operand"))
        member = field_child(selector, "field")
        if path is None or member is None:
            return None
        return self.run.package_member(path, node_text(member))

    def call_results(self, node) -> Optional[list]:
        function = field_child(node, "function")
        arguments = field_child(node, "arguments")
        args = _named(arguments) if arguments is not None else []
        if function is None:
            return None

        if function.type in TYPE_NODE_TYPES and function.type != "type_identifier":
            text = self.type_string(function)
            return [text] if text is not None else None
        if function.type == "parenthesized_expression":
            inner = _named(function)
            if inner and inner[0].type in TYPE_NODE_TYPES:
                text = self.type_string(inner[0])
                return [text] if text is not None else None
            return None

        if function.type in ("identifier", "type_identifier"):
            obj = self.run.lookup_object(function)
        elif function.type == "selector_expression":
            obj = self._package_member(function)
        else:
            return None
        if obj is None:
            return None

        if obj.kind == "builtin":
            return self._builtin_results(obj.name, args)
        if obj.kind == "type":
            return [self.qualify(obj)]
        if obj.kind == "func" and obj.node is not None:
            typer = self._typer_for(obj)
            return typer.results(obj.node)
        return None

    def _builtin_results(self, name: str, args: list) -> Optional[list]:
        first = args[0] if args else None
        if name == "new":
            inner = self.type_string(first)
            return ["*" + inner] if inner is not None else None
        if name == "make":
            text = self.type_string(first)
            return [text] if text is not None else None
        if name in ("len", "cap", "copy"):
            return ["int"]
        if name == "append":
            text = self.expr_type(first)
            return [text] if text is not None else None
        if name in ("min", "max") and args:
            text = None
            for arg in args:
                text = _combine(text, self.expr_type(arg)) if text is not None else self.expr_type(arg)
            return [text] if text is not None else None
        return None

    def _typer_for(self, obj: Object) -> "_Typer":
        """Typer for nodes of ``obj``'s package; records only into this package's table."""
        if obj.pkg_path == self.home_path:
            return self
        return _Typer(self.run, self.home_path)

    def object_type(self, obj: Object) -> Optional[str]:
        memo_key = (id(obj), self.home_path)
        if memo_key in self.run.object_types:
            return self.run.object_types[memo_key]
        # Cycle guard
        self.run.object_types[memo_key] = None
        text = self._compute_object_type(obj)
        self.run.object_types[memo_key] = text
        return text

    def _compute_object_type(self, obj: Object) -> Optional[str]:
        node = obj.node
        typer = self._typer_for(obj)
        if obj.kind == "nil":
            return "untyped nil"
        if node is None:
            return None
        if obj.kind == "func":
            return typer.type_string_of_function(node)
        if obj.kind not in ("var", "const"):
            return None

        if node.type in ("var_spec", "const_spec"):
            declared = field_child(node, "type")
            if declared is not None:
                return typer.type_string(declared)
            values = field_child(node, "value")
            text = typer._value_at(_named(values) if values is not None else [], obj.index, len(node.children_by_field_name("name")))
            return DEFAULT_TYPES.get(text, text) if obj.kind == "var" and text else text
        if node.type == "short_var_declaration":
            right = field_child(node, "right")
            left = field_child(node, "left")
            text = typer._value_at(
                _named(right) if right is not None else [],
                obj.index,
                len(_named(left)) if left is not None else 0,
            )
            return DEFAULT_TYPES.get(text, text) if text else text
        if node.type == "parameter_declaration":
            return typer.type_string(field_child(node, "type"))
        if node.type == "variadic_parameter_declaration":
            inner = typer.type_string(field_child(node, "type"))
            return "[]" + inner if inner is not None else None
        return None

    def _value_at(self, values: list, index: int, name_count: int) -> Optional[str]:
        if not values:
            return None
        if len(values) == name_count and index < len(values):
            return self.expr_type(values[index])
        if len(values) == 1 and values[0].type == "call_expression":
            results = self.call_results(values[0])
            if results and index < len(results):
                return results[index]
        return None

    def type_string_of_function(self, decl) -> Optional[str]:
        signature = self.signature(field_child(decl, "parameters"), field_child(decl, "result"))
        return "func" + signature if signature is not None else None


def _combine(left: Optional[str], right: Optional[str]) -> Optional[str]:
    """Result type of an arithmetic operation on two operand types."""
    if left is None or right is None:
        return None
    left_untyped = left.startswith("untyped ")
    right_untyped = right.startswith("untyped ")
    if left_untyped and not right_untyped:
        return right
    if right_untyped and not left_untyped:
        return left
    if left_untyped and right_untyped:
        if UNTYPED_RANK.get(right, 0) > UNTYPED_RANK.get(left, 0):
            return right
    return left


def _apply_operator(operator: str, left: Optional[str], right: Optional[str]) -> Optional[str]:
    if operator in COMPARISON_OPERATORS:
        if left is not None and right is not None and left.startswith("untyped ") and right.startswith("untyped "):
            return "untyped bool"
        return "bool"
    if operator in ("<<", ">>", "&&", "||"):
        return left
    return _combine(left, right)

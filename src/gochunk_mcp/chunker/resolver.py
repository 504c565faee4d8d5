"""Type text and accessed-symbol resolution over a unit's type tables.

Both operations only need three capabilities from the type information:
``type_of(node)``, ``object_of(ident)`` and the classification of an
object as an imported package name (``PkgName``). A missing table or a
missing entry never raises; it just means less precise output.
"""

from typing import Iterator, Optional

from ..frontend.objects import PkgName
from ..frontend.syntax import field_child, node_text, selector_parts, walk

EMPTY_INTERFACE = "interface{}"


def imported_package(base, type_info) -> Optional[PkgName]:
    """The ``PkgName`` a selector base identifier resolves to, if any."""
    if type_info is None:
        return None
    obj = type_info.object_of(base)
    return obj if isinstance(obj, PkgName) else None


def iter_package_selectors(node, type_info) -> Iterator[tuple]:
    """Yield ``(base, member, pkg_name)`` for every ``pkg.Member`` in the subtree."""
    if node is None or type_info is None:
        return
    for current in walk(node):
        parts = selector_parts(current)
        if parts is None:
            continue
        base, member = parts
        pkg_name = imported_package(base, type_info)
        if pkg_name is not None:
            yield base, member, pkg_name


def accessed_symbols(node, type_info) -> list[str]:
    """Sorted, de-duplicated ``<import-path>.<member>`` references in a subtree."""
    found = set()
    for _, member, pkg_name in iter_package_selectors(node, type_info):
        found.add(f"{pkg_name.imported_path}.{node_text(member)}")
    return sorted(found)


def _named(node) -> list:
    return [c for c in node.named_children if c.type != "comment"]


def type_text(expr, type_info) -> str:
    """Textual type of a type expression.

    The type table's string wins when present; otherwise the expression is
    rebuilt structurally, and shapes with no rule are reprinted verbatim.
    """
    if expr is None:
        return ""
    if type_info is not None:
        recorded = type_info.type_of(expr)
        if recorded:
            return recorded

    kind = expr.type
    children = _named(expr)

    if kind in ("identifier", "type_identifier"):
        return node_text(expr)
    if kind == "pointer_type" and children:
        return "*" + type_text(children[0], type_info)
    if kind == "slice_type":
        return "[]" + type_text(field_child(expr, "element"), type_info)
    if kind == "map_type":
        key = type_text(field_child(expr, "key"), type_info)
        value = type_text(field_child(expr, "value"), type_info)
        return f"map[{key}]{value}"
    if kind in ("qualified_type", "selector_expression"):
        return _selector_text(expr, type_info)
    if kind == "interface_type" and not children:
        return EMPTY_INTERFACE
    if kind == "channel_type":
        tokens = [c.type for c in expr.children if not c.is_named]
        if tokens[:2] == ["<-", "chan"]:
            prefix = "<-chan "
        elif "<-" in tokens:
            prefix = "chan<- "
        else:
            prefix = "chan "
        return prefix + type_text(field_child(expr, "value"), type_info)
    if kind == "variadic_parameter_declaration":
        return "..." + type_text(field_child(expr, "type"), type_info)
    if kind == "function_type":
        return "func" + signature_text(
            field_child(expr, "parameters"), field_child(expr, "result"), type_info
        )
    return node_text(expr)


def _selector_text(expr, type_info) -> str:
    if expr.type == "qualified_type":
        base, member = field_child(expr, "package"), field_child(expr, "name")
    else:
        base, member = field_child(expr, "operand"), field_child(expr, "field")
    if base is None or member is None:
        return node_text(expr)
    if base.type in ("identifier", "package_identifier"):
        pkg_name = imported_package(base, type_info)
        if pkg_name is not None:
            return f"{pkg_name.imported_path}.{node_text(member)}"
    return f"{type_text(base, type_info)}.{node_text(member)}"


def _field_list(parameter_list, type_info) -> tuple[list[str], bool]:
    """Rendered entries of a parameter list, and whether any name was present."""
    entries = []
    named = False
    for decl in _named(parameter_list):
        if decl.type == "variadic_parameter_declaration":
            rendered = type_text(decl, type_info)
        elif decl.type == "parameter_declaration":
            rendered = type_text(field_child(decl, "type"), type_info)
        else:
            continue
        names = decl.children_by_field_name("name")
        if names:
            named = True
            entries.extend(f"{node_text(n)} {rendered}" for n in names)
        else:
            entries.append(rendered)
    return entries, named


def signature_text(parameters, result, type_info) -> str:
    """``(params) results`` part of a function type."""
    params, _ = _field_list(parameters, type_info) if parameters is not None else ([], False)
    text = "(" + ", ".join(params) + ")"
    if result is None:
        return text
    if result.type != "parameter_list":
        return text + " " + type_text(result, type_info)
    results, named = _field_list(result, type_info)
    if not results:
        return text
    if len(results) == 1 and not named:
        return text + " " + results[0]
    return text + " (" + ", ".join(results) + ")"

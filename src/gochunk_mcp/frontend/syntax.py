"""Go syntax trees via tree-sitter, plus the node-type tables the pipeline keys on."""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterator, Optional

from tree_sitter_language_pack import get_parser

from .positions import TokenFile


@dataclass
class GoGrammar:
    """Node types of the tree-sitter Go grammar that the pipeline relies on."""
    # tree-sitter language name (for tree-sitter-language-pack)
    ts_language: str

    # Top-level declaration node type -> declaration kind
    declaration_node_types: dict[str, str]

    # Binding node type inside a declaration group -> binding kind
    spec_node_types: dict[str, str]

    # Wrapper nodes that hold specs of a parenthesised group
    spec_list_node_types: list[str]

    # Member-selection shapes: node type -> (base field, member field)
    selector_fields: dict[str, tuple[str, str]]

    # Identifier node types recorded in the use table
    identifier_node_types: list[str] = field(default_factory=list)


GO_GRAMMAR = GoGrammar(
    ts_language="go",
    declaration_node_types={
        "function_declaration": "function",
        "method_declaration": "method",
        "import_declaration": "import",
        "type_declaration": "type",
        "const_declaration": "const",
        "var_declaration": "var",
    },
    spec_node_types={
        "type_spec": "type",
        "type_alias": "type",
        "const_spec": "const",
        "var_spec": "var",
    },
    spec_list_node_types=["var_spec_list", "const_spec_list", "type_spec_list"],
    selector_fields={
        "selector_expression": ("operand", "field"),
        "qualified_type": ("package", "name"),
    },
    identifier_node_types=["identifier", "package_identifier", "type_identifier"],
)


@lru_cache(maxsize=None)
def _go_parser():
    return get_parser(GO_GRAMMAR.ts_language)


def parse_go(content: bytes):
    """Parse Go source bytes into a tree-sitter tree."""
    return _go_parser().parse(content)


def node_text(node) -> str:
    """Source text of a node."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def is_anonymous_child(node, token: str) -> bool:
    """True if ``node`` has a direct unnamed child with the given token."""
    return any(not c.is_named and c.type == token for c in node.children)


@dataclass
class SourceFile:
    """A parsed Go file registered in the shared position index."""
    path: str                       # Absolute file path
    tree: object                    # tree-sitter Tree
    token_file: TokenFile
    package_name: str = ""

    @property
    def root(self):
        return self.tree.root_node

    def pos(self, node) -> int:
        """Shared position of the start of ``node``."""
        return self.token_file.pos(node.start_byte)

    def end(self, node) -> int:
        """Shared position just past the end of ``node``."""
        return self.token_file.pos(node.end_byte)

    def declarations(self) -> Iterator:
        """Top-level declaration nodes in file order."""
        for child in self.root.named_children:
            if child.type in GO_GRAMMAR.declaration_node_types:
                yield child


def package_clause_name(root) -> str:
    for child in root.named_children:
        if child.type == "package_clause":
            for sub in child.named_children:
                if sub.type in ("package_identifier", "identifier"):
                    return node_text(sub)
    return ""


@dataclass
class ImportSpec:
    """One import spec of a file."""
    path: str
    alias_kind: str                 # "named" | "default" | "dot" | "blank"
    alias: str = ""
    node: object = None


def unquote_import_path(literal: str) -> str:
    literal = literal.strip()
    if len(literal) >= 2 and literal[0] in "\"`" and literal[-1] == literal[0]:
        return literal[1:-1]
    return literal


def iter_import_specs(root) -> Iterator[ImportSpec]:
    """Import specs of a file, in source order."""
    for decl in root.named_children:
        if decl.type != "import_declaration":
            continue
        specs = []
        for child in decl.named_children:
            if child.type == "import_spec":
                specs.append(child)
            elif child.type == "import_spec_list":
                specs.extend(c for c in child.named_children if c.type == "import_spec")
        for spec in specs:
            path_node = spec.child_by_field_name("path")
            if path_node is None:
                continue
            path = unquote_import_path(node_text(path_node))
            name_node = spec.child_by_field_name("name")
            if name_node is None:
                yield ImportSpec(path=path, alias_kind="default", node=spec)
            elif name_node.type == "dot":
                yield ImportSpec(path=path, alias_kind="dot", alias=".", node=spec)
            elif name_node.type == "blank_identifier":
                yield ImportSpec(path=path, alias_kind="blank", alias="_", node=spec)
            else:
                yield ImportSpec(path=path, alias_kind="named", alias=node_text(name_node), node=spec)


def iter_specs(decl) -> Iterator:
    """Individual bindings of a const/var/type declaration, in source order."""
    for child in decl.named_children:
        if child.type in GO_GRAMMAR.spec_node_types:
            yield child
        elif child.type in GO_GRAMMAR.spec_list_node_types:
            for sub in child.named_children:
                if sub.type in GO_GRAMMAR.spec_node_types:
                    yield sub


def spec_names(spec) -> list:
    """Name nodes bound by a spec."""
    return list(spec.children_by_field_name("name"))


def selector_parts(node) -> Optional[tuple]:
    """``(base, member)`` nodes for a member selection whose base is a plain identifier."""
    fields = GO_GRAMMAR.selector_fields.get(node.type)
    if fields is None:
        return None
    base = node.child_by_field_name(fields[0])
    member = node.child_by_field_name(fields[1])
    if base is None or member is None:
        return None
    if base.type not in ("identifier", "package_identifier"):
        return None
    return base, member


def node_key(node) -> tuple:
    """Hashable identity of a node, stable for the lifetime of its tree."""
    return (node.id, node.start_byte, node.end_byte, node.type)


def field_child(node, name: str):
    """``child_by_field_name`` that tolerates a missing node."""
    if node is None:
        return None
    return node.child_by_field_name(name)


def walk(node) -> Iterator:
    """Depth-first pre-order traversal of ``node``'s subtree."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))

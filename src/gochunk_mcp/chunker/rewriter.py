"""Rewrite local import aliases in chunk text to full import paths.

The rewrite is textual so the chunk keeps its original formatting and
comments byte for byte. The price is that an alias followed by ``.`` inside
a string literal or comment is rewritten too; that is accepted.
"""

from ..frontend.syntax import node_text
from .resolver import iter_package_selectors

# Go source may not contain NUL, so these tokens cannot occur in chunk text.
PLACEHOLDER_TEMPLATE = "\x00GO_QUALIFIER_{index}\x00"


def discover_qualifiers(node, type_info) -> dict[str, str]:
    """Map each import alias used as a selector base in ``node`` to its import path."""
    replacements = {}
    for base, _, pkg_name in iter_package_selectors(node, type_info):
        alias = node_text(base)
        if alias != pkg_name.imported_path:
            replacements[alias] = pkg_name.imported_path
    return replacements


def _by_length(keys) -> list[str]:
    return sorted(keys, key=lambda k: (-len(k), k))


def apply_qualifier_replacements(text: str, replacements: dict[str, str]) -> str:
    """Replace every ``<alias>.`` with ``<path>.`` in two phases.

    Aliases first become unique placeholders, then placeholders become
    paths, so a path that contains another alias is never expanded twice.
    Both phases go longest-first so a shorter alias that prefixes a longer
    one cannot claim the longer one's occurrences.
    """
    if not replacements:
        return text

    to_placeholder = {}
    to_path = {}
    for index, alias in enumerate(_by_length(replacements)):
        placeholder = PLACEHOLDER_TEMPLATE.format(index=index)
        to_placeholder[alias] = placeholder
        to_path[placeholder] = replacements[alias]

    for alias in _by_length(to_placeholder):
        text = text.replace(alias + ".", to_placeholder[alias] + ".")
    for placeholder in _by_length(to_path):
        text = text.replace(placeholder + ".", to_path[placeholder] + ".")
    return text


def rewrite_qualifiers(text: str, node, type_info) -> str:
    """Rewrite ``text`` (the source of ``node``) to use full import paths."""
    if node is None or type_info is None:
        return text
    replacements = discover_qualifiers(node, type_info)
    if not replacements:
        return text
    return apply_qualifier_replacements(text, replacements)

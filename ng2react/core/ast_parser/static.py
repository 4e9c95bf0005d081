"""Static evaluation of literal expressions.

Used for decorator arguments such as ``@Component({selector: 'x-y'})``.
Only object, array and string literals are understood; any other value
evaluates to ``None``.
"""

import re
from typing import Any

import tree_sitter

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


def parse_static(node: tree_sitter.Node, source: bytes) -> Any:
    if node.type == "object":
        obj = {}
        for pair in node.named_children:
            if pair.type != "pair":
                continue
            key = pair.child_by_field_name("key")
            value = pair.child_by_field_name("value")
            if key is None or value is None:
                continue
            if key.type == "property_identifier":
                obj[_text(key, source)] = parse_static(value, source)
            elif key.type == "string":
                obj[string_value(key, source)] = parse_static(value, source)
        return obj
    if node.type == "array":
        return [
            parse_static(child, source)
            for child in node.named_children
            if child.type in ("string", "template_string")
        ]
    if node.type == "string":
        return string_value(node, source)
    if node.type == "template_string":
        if any(c.type == "template_substitution" for c in node.named_children):
            return None
        # raw text, like the source form of a no-substitution template
        return _text(node, source)[1:-1]
    if node.type == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        return parse_static(inner[0], source) if inner else None
    return None


def string_value(node: tree_sitter.Node, source: bytes) -> str:
    """Cooked value of a quoted string literal."""
    raw = _text(node, source)[1:-1]
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), raw)


def _text(node: tree_sitter.Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

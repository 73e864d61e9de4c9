"""Convert an XML document into nested dictionaries suitable for comparison."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from xml.parsers import expat

_XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"


@dataclass
class _Node:
    name: str
    attrs: dict[str, str]
    content: list[str] = field(default_factory=list)
    children: list[_Node] = field(default_factory=list)


def _qualify(raw: str, scope: dict[str, str], element: bool) -> str:
    prefix, sep, local = raw.partition(":")
    if not sep or not prefix or not local:
        prefix, local = "", raw
    if prefix == "xmlns" or (not prefix and (not element or local == "xmlns")):
        pass
    elif prefix == "xml":
        prefix = _XML_NAMESPACE
    else:
        prefix = scope.get(prefix, prefix)
    return f"{prefix}:{local}" if prefix else local


def parse(raw_xml: str) -> dict[str, Any]:
    """Parse an XML document into a dict keyed by element names.

    Repeated sibling elements become lists, attributes are stored under
    ``-attrs`` and text of elements with attributes under ``content``.
    Raises ValueError for malformed documents.
    """
    roots: list[_Node] = []
    stack: list[tuple[_Node, dict[str, str]]] = []

    def start(tag: str, attributes: list[str]) -> None:
        pairs = list(zip(attributes[::2], attributes[1::2]))
        scope = dict(stack[-1][1]) if stack else {}
        for name, value in pairs:
            if name == "xmlns":
                scope[""] = value
            elif name.startswith("xmlns:"):
                scope[name[6:]] = value
        node = _Node(
            _qualify(tag, scope, True),
            {_qualify(name, scope, False): value for name, value in pairs},
        )
        (stack[-1][0].children if stack else roots).append(node)
        stack.append((node, scope))

    def data(text: str) -> None:
        if stack:
            stack[-1][0].content.append(text)

    parser = expat.ParserCreate()
    parser.ordered_attributes = True
    parser.buffer_text = True
    parser.StartElementHandler = start
    parser.EndElementHandler = lambda _tag: stack.pop()
    parser.CharacterDataHandler = data
    try:
        parser.Parse(raw_xml.lstrip(), True)
    except expat.ExpatError as exc:
        raise ValueError(f"invalid XML: {exc}") from exc
    if not roots:
        raise ValueError("invalid XML: no root element")
    return _build_map(roots[:1])


def _build_map(nodes: list[_Node]) -> dict[str, Any]:
    grouped: dict[str, list[_Node]] = {}
    for node in nodes:
        grouped.setdefault(node.name, []).append(node)
    return {
        name: _build_node(group[0]) if len(group) == 1 else [_build_node(n) for n in group]
        for name, group in grouped.items()
    }


def _build_node(node: _Node) -> Any:
    if node.children:
        result = _build_map(node.children)
        if node.attrs:
            result["-attrs"] = dict(node.attrs)
        return result
    text = "".join(node.content)
    if node.attrs:
        return {"-attrs": dict(node.attrs), "content": text}
    return text
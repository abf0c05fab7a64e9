# Copyright (C) 2018-'25  Frank Sachsenheim
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.


"""
This loader converts trees that were parsed with lxml_ into sprig's node model. The
names of tags and attributes lose their namespace, only the local names are kept.

.. _lxml: https://lxml.de/
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from lxml import etree

from _sprig.nodes import CommentNode, ProcessingInstructionNode, TagNode, TextNode
from _sprig.plugins import plugin_manager
from _sprig.plugins.core_loaders import text_loader

if TYPE_CHECKING:
    from types import SimpleNamespace

    from _sprig.parser import ParserOptions
    from _sprig.typing import LoaderResult, XMLNodeType


def _local_name(name: str) -> str:
    return etree.QName(name).localname


def _convert_node(
    node: etree._Element, options: ParserOptions
) -> Optional[XMLNodeType]:
    match node:
        case etree._Comment():
            if options.remove_comments:
                return None
            return CommentNode(node.text or "")
        case etree._ProcessingInstruction():
            if options.remove_processing_instructions:
                return None
            return ProcessingInstructionNode(node.target, node.text or "")
        case etree._Entity():
            return TextNode(node.text)
        case etree._Element():
            return TagNode(
                _local_name(node.tag),
                {_local_name(k): v for k, v in node.attrib.items()},
            )
    raise TypeError(f"Unexpected node type: {type(node)}")


def _convert_tree(element: etree._Element, options: ParserOptions) -> TagNode:
    def text_node(text: Optional[str]) -> Optional[TextNode]:
        if not text:
            return None
        if not options.preserve_whitespace and not text.strip():
            return None
        return TextNode(text)

    result = _convert_node(element, options)
    assert isinstance(result, TagNode)
    stack: list[tuple[etree._Element, TagNode]] = [(element, result)]

    while stack:
        source, target = stack.pop()
        if (text := text_node(source.text)) is not None:
            target.append_children(text)
        for child in source:
            if (node := _convert_node(child, options)) is not None:
                target.append_children(node)
                if isinstance(node, TagNode):
                    stack.append((child, node))
            if (tail := text_node(child.tail)) is not None:
                target.append_children(tail)

    return result


@plugin_manager.register_loader(before=text_loader)
def lxml_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader converts an :class:`lxml.etree._ElementTree` or an
    :class:`lxml.etree._Element` and its descendants. For the former the comments and
    processing instructions that precede the root element are converted as well.
    The input objects aren't altered.
    """
    options = config.parser_options

    if isinstance(data, etree._ElementTree):
        root = data.getroot()
        docinfo = data.docinfo
        config.xml_declaration = None
        config.version = docinfo.xml_version or "1.0"
        config.encoding = docinfo.encoding or "UTF-8"
        prologue = (
            _convert_node(n, options)
            for n in reversed(tuple(root.itersiblings(preceding=True)))
        )
        return (
            *(n for n in prologue if n is not None),
            _convert_tree(root, options),
        )

    if isinstance(data, etree._Element) and not isinstance(
        data, (etree._Comment, etree._Entity, etree._ProcessingInstruction)
    ):
        return (_convert_tree(data, options),)

    return "The input value is neither an lxml element nor an element tree."


__all__ = (lxml_loader.__name__,)

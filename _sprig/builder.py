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

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, overload, Optional

from _sprig.nodes import _TagDefinition, TagNode
from _sprig.parser import ParserOptions, parse_document
from _sprig.typing import XMLNodeType


if TYPE_CHECKING:
    from collections.abc import Iterator

    from _sprig.typing import InputStream, NodeSource


# defining tag node templates


@overload
def tag(name: str): ...


@overload
def tag(name: str, attributes: Mapping[str, str]): ...


@overload
def tag(name: str, child: NodeSource): ...


@overload
def tag(name: str, children: Sequence[NodeSource]): ...


@overload
def tag(name: str, attributes: Mapping[str, str], child: NodeSource): ...


@overload
def tag(
    name: str,
    attributes: Mapping[str, str],
    children: Sequence[NodeSource],
): ...


def tag(*args):  # noqa: C901
    """
    This function can be used for in-place creation (or call it templating if you
    want to) of :class:`sprig.nodes.TagNode` instances as:

    - ``node`` argument to methods that add nodes to a tree
    - items in the ``children`` argument of :class:`sprig.nodes.TagNode`

    The first argument to the function is always the name of the tag node.
    Optionally, the second argument can be a :term:`mapping` that specifies attributes
    for that node.
    The optional last argument is either a single object that will be appended as child
    node or a sequence of such, these objects can be node instances of any type, strings
    (for derived :class:`sprig.nodes.TextNode` instances) or other definitions from this
    function (for derived :class:`sprig.nodes.TagNode` instances).

    >>> root = TagNode('root', children=[
    ...     tag("head", {"lvl": "1"}, "Hello!"),
    ...     tag("items", (
    ...         tag("item1"),
    ...         tag("item2"),
    ...         )
    ...     )
    ... ])
    >>> str(root)
    '<root><head lvl="1">Hello!</head><items><item1/><item2/></items></root>'
    >>> root.append_children(tag("addendum"))  # doctest: +ELLIPSIS
    (<TagNode("addendum", {}, /addendum[1]) [0x...]>,)
    >>> str(root)[-26:]
    '</items><addendum/></root>'
    """

    def prepare_attributes(attributes: Mapping[str, str]) -> dict[str, str]:
        result: dict[str, str] = {}

        for key, value in attributes.items():
            if not isinstance(value, str):
                raise TypeError("Attribute values must be strings.")
            result[key] = value

        return result

    def prepare_children(children: Sequence) -> tuple[NodeSource, ...]:
        if not all(isinstance(x, (str, XMLNodeType, _TagDefinition)) for x in children):
            raise TypeError(
                "Either node instances, strings or objects from :func:`sprig.tag` "
                "must be provided as children argument."
            )
        return tuple(children)

    if len(args) == 1:
        return _TagDefinition(name=args[0])

    if len(args) == 2:
        second_arg = args[1]
        if isinstance(second_arg, Mapping):
            return _TagDefinition(
                name=args[0], attributes=prepare_attributes(second_arg)
            )
        if isinstance(second_arg, (str, XMLNodeType, _TagDefinition)):
            return _TagDefinition(name=args[0], children=(second_arg,))
        if isinstance(second_arg, Sequence):
            return _TagDefinition(name=args[0], children=prepare_children(second_arg))

    if len(args) == 3:
        third_arg = args[2]
        if isinstance(third_arg, (str, XMLNodeType, _TagDefinition)):
            return _TagDefinition(
                name=args[0],
                attributes=prepare_attributes(args[1]),
                children=(third_arg,),
            )
        if isinstance(third_arg, Sequence):
            return _TagDefinition(
                name=args[0],
                attributes=prepare_attributes(args[1]),
                children=prepare_children(third_arg),
            )

    raise ValueError("Unrecognized arguments.")


# deserializing data


def parse_nodes(
    data: InputStream,
    options: Optional[ParserOptions] = None,
) -> Iterator[XMLNodeType]:
    """
    Parses the provided input data to a sequence of nodes. These are the comments and
    processing instructions before the root node and eventually the latter.
    """
    yield from parse_document(data, options).nodes


def parse_tree(
    data: InputStream,
    options: Optional[ParserOptions] = None,
) -> TagNode:
    """
    Parses the provided input to a tag node that has no relation to a document.

    >>> parse_tree("<root><child/></root>").first_child.name
    'child'
    """
    result = parse_document(data, options).nodes[-1]
    assert isinstance(result, TagNode)
    return result


__all__ = (parse_nodes.__name__, parse_tree.__name__, tag.__name__)

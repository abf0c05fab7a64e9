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
Node filters are callables that take a node as only argument and return a boolean
whether the node matches. They can be passed to all methods that take a ``filter``
argument, e.g. :meth:`sprig.nodes.TagNode.iterate_children`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from _sprig.typing import (
    CDataNodeType,
    CommentNodeType,
    _DocumentNodeType,
    Filter,
    ProcessingInstructionNodeType,
    TagNodeType,
    TextNodeType,
)

if TYPE_CHECKING:
    from _sprig.typing import XMLNodeType


def any_of(*filter: Filter) -> Filter:
    """
    A node filter wrapper that matches when any of the given filters is matching, like a
    boolean ``or``.

    >>> root = parse_tree("<root><a/>b<!--c--><![CDATA[d]]></root>")
    >>> len(tuple(root.iterate_children(any_of(is_comment_node, is_cdata_node))))
    2
    """

    def any_of_wrapper(node: XMLNodeType) -> bool:
        return any(x(node) for x in filter)

    return any_of_wrapper


def is_cdata_node(node: XMLNodeType) -> bool:
    """
    A node filter that matches :class:`sprig.typing.CDataNodeType` instances.
    """
    return isinstance(node, CDataNodeType)


def is_comment_node(node: XMLNodeType) -> bool:
    """
    A node filter that matches :class:`sprig.typing.CommentNodeType` instances.
    """
    return isinstance(node, CommentNodeType)


def is_processing_instruction_node(node: XMLNodeType) -> bool:
    """
    A node filter that matches :class:`sprig.typing.ProcessingInstructionNodeType`
    instances.
    """
    return isinstance(node, ProcessingInstructionNodeType)


def is_root_node(node: XMLNodeType) -> bool:
    """
    A node filter that matches tag nodes without a parent tag node.
    """
    return isinstance(node, TagNodeType) and (
        node._parent is None or isinstance(node._parent, _DocumentNodeType)
    )


def is_tag_node(node: XMLNodeType) -> bool:
    """
    A node filter that matches :class:`sprig.typing.TagNodeType` instances.
    """
    return isinstance(node, TagNodeType)


def is_text_node(node: XMLNodeType) -> bool:
    """
    A node filter that matches :class:`sprig.typing.TextNodeType` instances.
    """
    return isinstance(node, TextNodeType)


def not_(*filter: Filter) -> Filter:
    """
    A node filter wrapper that matches when the given filter is not matching,
    like a boolean ``not``.
    """

    def not_wrapper(node: XMLNodeType) -> bool:
        return not all(f(node) for f in filter)

    return not_wrapper


#


__all__ = (
    any_of.__name__,
    is_cdata_node.__name__,
    is_comment_node.__name__,
    is_processing_instruction_node.__name__,
    is_root_node.__name__,
    is_tag_node.__name__,
    is_text_node.__name__,
    not_.__name__,
)

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

import enum
from itertools import zip_longest
from typing import TYPE_CHECKING, Optional

from _sprig.exceptions import InvalidCodePath
from _sprig.nodes import TagNode
from _sprig.utils import *  # noqa
from _sprig.utils import __all__

if TYPE_CHECKING:
    from _sprig.typing import XMLNodeType


class TreeDifferenceKind(enum.Enum):
    None_ = enum.auto()
    NodeContent = enum.auto()
    NodeType = enum.auto()
    TagAttributes = enum.auto()
    TagChildrenSize = enum.auto()
    TagName = enum.auto()


class TreesComparisonResult:
    """
    Instances of this class describe one or no difference between two trees.
    Casting an instance to :class:`bool` will yield :obj:`True` when it describes no
    difference, thus the compared trees were equal.
    Casted to strings they're intended to support debugging.
    """

    def __init__(
        self,
        difference_kind: TreeDifferenceKind,
        lhn: Optional[XMLNodeType],
        rhn: Optional[XMLNodeType],
    ):
        self.difference_kind = difference_kind
        self.lhn = lhn
        self.rhn = rhn

    def __bool__(self):
        return self.difference_kind is TreeDifferenceKind.None_

    def __str__(self):
        if self.difference_kind is TreeDifferenceKind.None_:
            return "Trees are equal."
        elif self.difference_kind in (
            TreeDifferenceKind.NodeContent,
            TreeDifferenceKind.NodeType,
        ):
            return self.__str_child()
        else:
            return self.__str_tag()

    def __str_child(self) -> str:
        assert self.lhn is not None
        parent = self.lhn.parent
        if parent is None:
            parent_msg_tail = ":"
        else:
            parent_msg_tail = f", parent node has location_path {parent.location_path}:"

        if self.difference_kind is TreeDifferenceKind.NodeContent:
            return f"Nodes' content differ{parent_msg_tail}\n{self.lhn!r}\n{self.rhn!r}"
        else:  # difference_kind is TreeDifferenceKind.NodeType
            return (
                f"Nodes are of different type{parent_msg_tail} "
                f"{self.lhn.__class__} != {self.rhn.__class__}"
            )

    def __str_tag(self) -> str:
        assert isinstance(self.lhn, TagNode)
        assert isinstance(self.rhn, TagNode)

        if self.difference_kind is TreeDifferenceKind.TagAttributes:
            return (
                f"Attributes of tag nodes at {self.lhn.location_path} differ:\n"
                f"{self.lhn.attributes}\n{self.rhn.attributes}"
            )
        elif self.difference_kind is TreeDifferenceKind.TagChildrenSize:
            result = f"Child nodes of tag nodes at {self.lhn.location_path} differ:"
            for a, b in zip_longest(
                self.lhn.iterate_children(),
                self.rhn.iterate_children(),
                fillvalue=None,
            ):
                result += f"\n\n{a!r}\n{b!r}"
            return result
        elif self.difference_kind is TreeDifferenceKind.TagName:
            return (
                f"Names of tag nodes at {self.lhn.location_path} differ: "
                f"{self.lhn.name} != {self.rhn.name}"
            )

        raise InvalidCodePath()


def compare_trees(lhr: XMLNodeType, rhr: XMLNodeType) -> TreesComparisonResult:
    """
    Compares two node trees for equality. Upon the first detection of a difference of
    nodes that are located at the same position within the compared (sub-)trees a
    mismatch is reported.

    :param lhr: The node that is considered as root of the left hand operand.
    :param rhr: The node that is considered as root of the right hand operand.
    :return: An object that contains information about the first or no difference.

    While node types that can't have descendants are comparable with a comparison
    expression, the :class:`TagNode` type deliberately doesn't implement the ``==``
    operator, because it isn't clear whether a comparison should also consider the
    node's descendants as this function does.

    >>> from _sprig.builder import parse_tree
    >>> bool(compare_trees(parse_tree("<a><b/></a>"), parse_tree("<a> <b/> </a>")))
    True
    """
    pairs: list[tuple[XMLNodeType, XMLNodeType]] = [(lhr, rhr)]

    while pairs:
        lhn, rhn = pairs.pop()

        if not isinstance(rhn, lhn.__class__):
            return TreesComparisonResult(TreeDifferenceKind.NodeType, lhn, rhn)

        if isinstance(lhn, TagNode):
            assert isinstance(rhn, TagNode)
            if lhn.name != rhn.name:
                return TreesComparisonResult(TreeDifferenceKind.TagName, lhn, rhn)
            if lhn.attributes != rhn.attributes:
                return TreesComparisonResult(TreeDifferenceKind.TagAttributes, lhn, rhn)
            if len(lhn) != len(rhn):
                return TreesComparisonResult(
                    TreeDifferenceKind.TagChildrenSize, lhn, rhn
                )
            pairs.extend(
                reversed(tuple(zip(lhn.iterate_children(), rhn.iterate_children())))
            )

        elif lhn != rhn:
            return TreesComparisonResult(TreeDifferenceKind.NodeContent, lhn, rhn)

    return TreesComparisonResult(TreeDifferenceKind.None_, None, None)


__all__ = __all__ + (
    compare_trees.__name__,
    TreeDifferenceKind.__name__,
    TreesComparisonResult.__name__,
)

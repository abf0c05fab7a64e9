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
*sprig* allows querying of tag nodes with simple path expressions and CSS selectors.

Path expressions are a small subset of what XPath offers. A path is split into steps on
each slash, every step is evaluated against the nodes that the previous step yielded.
An expression that starts with a slash is evaluated from the tree's root node, a sole
slash yields the root node itself. These steps are available:

- ``*`` yields the child tag nodes of all current nodes.
- ``..`` yields the parents of all current nodes.
- ``.`` yields the current nodes.
- ``name`` yields the child tag nodes with the given name.
- ``name[predicate]`` and ``*[predicate]`` narrow down the candidates that the name
  test produced with one of these predicates:
    - ``2`` selects the candidate at the given position, counted from one
    - ``@name`` selects candidates that have an attribute of that name
    - ``@name='value'`` selects candidates whose attribute has the given value
    - ``text()='value'`` selects candidates whose joined child text nodes equal the
      value

Each step can carry only one predicate. There is no descendant axis and no functions
besides ``text()``. Expressions that can't be understood yield no results, evaluating
them never fails.

The results are ordered by the nodes they derive from, there's no deduplication.

    >>> root = parse_tree(
    ...     '<lib><b id="1">X</b><b id="2">Y</b></lib>'
    ... )
    >>> root.query("b[2]").first.text_content
    'Y'
    >>> root.query("b[@id='1']/..").first.name
    'lib'

CSS selectors are parsed with :mod:`cssselect` and support type, universal, id and
class selectors, attribute tests for existence as well as the ``=`` and ``~=``
operators and the descendant and child combinators.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Optional

from _sprig.query.css import _css_to_filter
from _sprig.query.parser import parse


if TYPE_CHECKING:
    from _sprig.typing import Filter, TagNodeType


class QueryResults(Sequence["TagNodeType"]):
    """
    A container with the the results of a path query or CSS selector with some helpers
    for better readable Python expressions. The contained nodes are references into
    their tree, not copies.
    """

    def __init__(self, results: Iterable[TagNodeType]):
        self.__items = tuple(results)

    def __eq__(self, other):
        if not isinstance(other, Sequence):
            return NotImplemented

        return len(self.__items) == len(other) and all(
            x is y for x, y in zip(self.__items, other)
        )

    def __getitem__(self, item):
        return self.__items[item]

    def __len__(self) -> int:
        return len(self.__items)

    def __repr__(self):
        return str([repr(x) for x in self.__items])

    def as_list(self) -> list[TagNodeType]:
        """The contained nodes as a new :class:`list`."""
        return list(self.__items)

    @property
    def as_tuple(self) -> tuple[TagNodeType, ...]:
        """The contained nodes in a :class:`tuple`."""
        return self.__items

    def filtered_by(self, *filters: Filter) -> QueryResults:
        """
        Returns another :class:`QueryResults` instance that contains all nodes filtered
        by the provided :term:`filter` s.
        """
        items: Sequence[TagNodeType] = self.__items
        for filter in filters:
            items = [x for x in items if filter(x)]
        return self.__class__(items)

    @property
    def first(self) -> Optional[TagNodeType]:
        """The first node from the results or :obj:`None` if there are none."""
        if len(self.__items):
            return self.__items[0]
        else:
            return None

    @property
    def last(self) -> Optional[TagNodeType]:
        """The last node from the results or :obj:`None` if there are none."""
        if len(self.__items):
            return self.__items[-1]
        else:
            return None

    @property
    def size(self) -> int:
        """The amount of contained nodes."""
        return len(self.__items)


def evaluate(node: TagNodeType, expression: str) -> QueryResults:
    """
    Evaluates a path expression with the given tag node as context and returns the
    resulting nodes.
    """
    return QueryResults(parse(expression).evaluate(node))


__all__ = (
    _css_to_filter.__name__,  # type: ignore
    evaluate.__name__,
    parse.__name__,  # type: ignore
    QueryResults.__name__,
)

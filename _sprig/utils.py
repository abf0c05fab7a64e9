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

from collections import deque
from collections.abc import Iterable, Iterator, Sequence
from itertools import chain
from typing import TYPE_CHECKING, Any, Final, Optional

from _sprig.typing import ParentNodeType


if TYPE_CHECKING:
    from _sprig.typing import Filter, XMLNodeType


def first(iterable: Iterable) -> Optional[Any]:
    """
    Returns the first item of the given :term:`iterable` or :obj:`None` if it's empty.
    Note that the first item is consumed when the iterable is an :term:`iterator`.
    """
    match iterable:
        case Iterator():
            try:
                return next(iterable)
            except StopIteration:
                return None
        case Sequence():
            return iterable[0] if len(iterable) else None
        case _:
            raise TypeError


def get_traverser(*, depth_first=True, from_top=True):
    """
    Returns a function that can be used to traverse a (sub)tree with the given node as
    root. Sibling nodes are always yielded from left to right.

    :param depth_first: The child nodes resp. the parent node are yielded before the
                        siblings of a node by a traverser if :obj:`True`. Siblings are
                        favored if :obj:`False`.
    :param from_top: The traverser starts yielding nodes with the lowest depth if
                     :obj:`True`. When :obj:`False`, again, the opposite is in effect.

    While traversing the given root node is yielded at some point if it also passes the
    filters.

    The returned functions have this signature:

    .. code-block:: python

        def traverser(root: XMLNodeType, *filters: Filter) -> Iterator[XMLNodeType]:
            ...
    """
    if (result := TRAVERSERS.get((depth_first, from_top))) is None:
        raise NotImplementedError
    return result


def last(iterable: Iterable) -> Optional[Any]:
    """
    Returns the last item of the given :term:`iterable` or :obj:`None` if it's empty.
    Note that the whole :term:`iterator` is consumed when such is given.
    """
    match iterable:
        case Iterator():
            result = None
            for result in iterable:
                pass
            return result
        case Sequence():
            return iterable[-1] if len(iterable) else None
        case _:
            raise TypeError


# tree traversers


def _child_nodes(node: XMLNodeType) -> Sequence[XMLNodeType]:
    if isinstance(node, ParentNodeType):
        return node._child_nodes
    return ()


def traverse_bf_ttb(root: XMLNodeType, *filters: Filter) -> Iterator[XMLNodeType]:
    queue = deque((root,))
    while queue:
        node = queue.popleft()
        queue.extend(_child_nodes(node))
        if all(f(node) for f in filters):
            yield node


def traverse_df_btt(root: XMLNodeType, *filters: Filter) -> Iterator[XMLNodeType]:
    stack = [(root, deque(_child_nodes(root)))]

    while stack:
        node, remaining_children = stack.pop()

        while remaining_children:
            child = remaining_children.popleft()
            if children := _child_nodes(child):
                stack.extend(((node, remaining_children), (child, deque(children))))
                break
            else:
                if all(f(child) for f in filters):
                    yield child

        else:
            if all(f(node) for f in filters):
                yield node


def traverse_df_ttb(root: XMLNodeType, *filters: Filter) -> Iterator[XMLNodeType]:
    for node in chain((root,), root.iterate_descendants()):
        if all(f(node) for f in filters):
            yield node


TRAVERSERS: Final = {
    (False, True): traverse_bf_ttb,
    (True, True): traverse_df_ttb,
    (True, False): traverse_df_btt,
}


__all__: tuple[str, ...] = (
    first.__name__,
    get_traverser.__name__,
    last.__name__,
)

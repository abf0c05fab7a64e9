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
The nodes of a parsed path expression. Each one evaluates against an ordered node set
and yields the resulting nodes without deduplication.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from textwrap import indent
from typing import TYPE_CHECKING, Any, Final


from _sprig.typing import TagNodeType


if TYPE_CHECKING:
    from _sprig.typing import XMLNodeType


# helper


def nested_repr(obj: Any) -> str:  # pragma: no cover
    result = f"{obj.__class__.__name__}(\n"
    for name in (x for x in obj.__slots__ if not x.startswith("_")):
        value = getattr(obj, name)
        result += f"  {name}="
        if isinstance(value, (list, tuple)):
            result += "[\n"
            for item in value:
                result += indent(nested_repr(item), "    ") + ",\n"
            result += "  ]\n"
        elif isinstance(value, Node):
            result += indent(nested_repr(value), "  ").lstrip() + "\n"
        else:
            result += f"{value!r}\n"
    result += ")"
    return result


def _child_elements(node: XMLNodeType) -> Iterator[TagNodeType]:
    for child in node._child_nodes:
        if isinstance(child, TagNodeType):
            yield child


# base classes for nodes


class Node(ABC):
    __slots__: tuple[str, ...] = ()

    def __eq__(self, other):
        return type(self) is type(other) and all(
            getattr(self, x) == getattr(other, x) for x in self.__slots__
        )

    def __repr__(self):
        return (
            f"{self.__class__.__qualname__}("
            f"{', '.join(f'{x}={getattr(self, x)!r}' for x in self.__slots__)})"
        )


class PredicateNode(Node):
    @abstractmethod
    def evaluate(self, candidates: Sequence[TagNodeType]) -> Iterator[TagNodeType]:
        pass


class StepNode(Node):
    @abstractmethod
    def evaluate(self, node_set: Iterable[TagNodeType]) -> Iterator[TagNodeType]:
        pass


# aggregators


class PathExpression(Node):
    __slots__ = ("absolute", "steps")

    def __init__(self, steps: Iterable[StepNode], absolute: bool = False):
        self.steps: Final = tuple(steps)
        self.absolute: Final = absolute

    def __repr__(self):
        return nested_repr(self)

    def evaluate(self, node: TagNodeType) -> Sequence[TagNodeType]:
        if not self.steps:
            return ()

        if self.absolute:
            while (parent := node.parent) is not None:
                node = parent

        node_set: Sequence[TagNodeType] = (node,)
        for step in self.steps:
            node_set = tuple(step.evaluate(node_set))
            if not node_set:
                return ()
        return node_set


# location steps


class ChildrenStep(StepNode):
    """Yields all child elements of the nodes in a set."""

    def evaluate(self, node_set: Iterable[TagNodeType]) -> Iterator[TagNodeType]:
        for node in node_set:
            yield from _child_elements(node)


class FilteredStep(StepNode):
    __slots__ = ("name_step", "predicate")

    def __init__(self, name_step: StepNode, predicate: PredicateNode):
        self.name_step: Final = name_step
        self.predicate: Final = predicate

    def evaluate(self, node_set: Iterable[TagNodeType]) -> Iterator[TagNodeType]:
        yield from self.predicate.evaluate(tuple(self.name_step.evaluate(node_set)))


class NameStep(StepNode):
    """Yields the child elements with a given name of the nodes in a set."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name: Final = name

    def evaluate(self, node_set: Iterable[TagNodeType]) -> Iterator[TagNodeType]:
        name = self.name
        for node in node_set:
            for child in _child_elements(node):
                if child.name == name:
                    yield child


class NoneStep(StepNode):
    """A step that is malformed and therefore can't match anything."""

    def evaluate(self, node_set: Iterable[TagNodeType]) -> Iterator[TagNodeType]:
        return
        yield


class ParentStep(StepNode):
    def evaluate(self, node_set: Iterable[TagNodeType]) -> Iterator[TagNodeType]:
        for node in node_set:
            if (parent := node.parent) is not None:
                yield parent


class SelfStep(StepNode):
    def evaluate(self, node_set: Iterable[TagNodeType]) -> Iterator[TagNodeType]:
        yield from node_set


# predicates


class AttributeEquals(PredicateNode):
    __slots__ = ("name", "value")

    def __init__(self, name: str, value: str):
        self.name: Final = name
        self.value: Final = value

    def evaluate(self, candidates: Sequence[TagNodeType]) -> Iterator[TagNodeType]:
        for node in candidates:
            if node.attributes.get(self.name) == self.value:
                yield node


class HasAttribute(PredicateNode):
    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name: Final = name

    def evaluate(self, candidates: Sequence[TagNodeType]) -> Iterator[TagNodeType]:
        for node in candidates:
            if self.name in node.attributes:
                yield node


class IndexPredicate(PredicateNode):
    """Selects the candidate at a 1-based position."""

    __slots__ = ("position",)

    def __init__(self, position: int):
        self.position: Final = position

    def evaluate(self, candidates: Sequence[TagNodeType]) -> Iterator[TagNodeType]:
        if 0 < self.position <= len(candidates):
            yield candidates[self.position - 1]


class TextEquals(PredicateNode):
    __slots__ = ("value",)

    def __init__(self, value: str):
        self.value: Final = value

    def evaluate(self, candidates: Sequence[TagNodeType]) -> Iterator[TagNodeType]:
        for node in candidates:
            if node.text_content == self.value:
                yield node


class UnsupportedPredicate(PredicateNode):
    __slots__ = ("expression",)

    def __init__(self, expression: str):
        self.expression: Final = expression

    def evaluate(self, candidates: Sequence[TagNodeType]) -> Iterator[TagNodeType]:
        return
        yield


__all__ = (
    AttributeEquals.__name__,
    ChildrenStep.__name__,
    FilteredStep.__name__,
    HasAttribute.__name__,
    IndexPredicate.__name__,
    NameStep.__name__,
    NoneStep.__name__,
    ParentStep.__name__,
    PathExpression.__name__,
    SelfStep.__name__,
    TextEquals.__name__,
    UnsupportedPredicate.__name__,
)

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

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from typing import (
    TYPE_CHECKING,
    overload,
    Any,
    AnyStr,
    BinaryIO,
    Optional,
    Protocol,
    TypeAlias,
    TypeVar,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from types import SimpleNamespace

    from _sprig.nodes import Siblings, TagAttributes, _TagDefinition
    from _sprig.query import QueryResults
    from _sprig.serializer import FormatOptions
    from sprig import Document


# node types


class XMLNodeType(ABC):
    """
    Defines the interfaces that all node type representations share. All node type
    implementations are a subclass of this one.
    """

    _parent: None | ParentNodeType

    @abstractmethod
    def __copy__(self): ...

    @abstractmethod
    def __deepcopy__(self, memo): ...

    @abstractmethod
    def __str__(self) -> str: ...

    @abstractmethod
    def clone(self, deep: bool = False) -> XMLNodeType:
        """
        Creates a new node of the same type with duplicated contents.

        :param deep: Clones the whole subtree if :obj:`True`.
        :return: A copy of the node that isn't attached to any tree.
        """

    @property
    @abstractmethod
    def depth(self) -> int:
        """
        The amount of parent hops to the tree's root. A root node has the depth 0.

        :meta category: Node properties
        """

    @abstractmethod
    def detach(self) -> XMLNodeType:
        """
        Removes the node from its tree.

        :return: The removed node.
        :meta category: Methods to remove a node
        """

    @property
    @abstractmethod
    def document(self) -> Optional[Document]:
        """
        The :class:`sprig.Document` instance that the node is associated with or
        :obj:`None`.

        :meta category: Related document and nodes properties
        """

    @property
    @abstractmethod
    def full_text(self) -> str:
        """
        The concatenated contents of all text node descendants in document order.

        :meta category: Node content properties
        """

    @abstractmethod
    def iterate_children(self, *filter: Filter) -> Iterator[XMLNodeType]:
        """
        A :term:`generator iterator` that yields the child nodes of the node that
        match all given filters.

        :param filter: Any number of :term:`filter` s that a node must match to be
                       yielded.
        :meta category: Methods to iterate over related node
        """

    @abstractmethod
    def iterate_descendants(self, *filter: Filter) -> Iterator[XMLNodeType]:
        """
        A :term:`generator iterator` that yields the descendants of the node in
        document order that match all given filters.

        :param filter: Any number of :term:`filter` s that a node must match to be
                       yielded.
        :meta category: Methods to iterate over related node
        """

    @property
    @abstractmethod
    def parent(self) -> Optional[TagNodeType]:
        """
        The node's parent or :obj:`None`. A document's root node has no parent.

        :meta category: Related document and nodes properties
        """

    @abstractmethod
    def serialize(self, *, format_options: Optional[FormatOptions] = None) -> str:
        """
        Returns a string that contains the serialization of the node.

        :param format_options: An instance of :class:`sprig.FormatOptions` can be
                               provided to configure formatting.
        :return: The serialized XML markup of the node and its descendants.
        """


class ParentNodeType(XMLNodeType):
    _child_nodes: Siblings

    @abstractmethod
    def __len__(self) -> int: ...

    @abstractmethod
    def append_children(
        self, *node: NodeSource, clone: bool = False
    ) -> tuple[XMLNodeType, ...]:
        """
        Adds one or more nodes as child nodes after any existing to the child nodes of
        the node this method is called on.

        :param node: The node(s) to be added.
        :param clone: Clones the concrete nodes before adding if :obj:`True`.
        :return: The concrete nodes that were added.
        :meta category: Methods to add nodes to a tree

        The nodes can be concrete instances of any node type or rather abstract
        descriptions in the form of strings or objects returned from the
        :func:`sprig.tag` function that are used to derive
        :class:`sprig.nodes.TextNode` respectively :class:`sprig.nodes.TagNode`
        instances from.
        """

    @property
    @abstractmethod
    def first_child(self) -> Optional[XMLNodeType]:
        """
        The node's first child node.

        :meta category: Related document and nodes properties
        """

    @abstractmethod
    def insert_children(
        self, index: int, *node: NodeSource, clone: bool = False
    ) -> tuple[XMLNodeType, ...]:
        """
        Inserts one or more child nodes.

        :param index: The index at which the first of the given nodes will be inserted,
                      the remaining nodes are added afterwards in the given order.
        :param node: The node(s) to be added.
        :param clone: Clones the concrete nodes before adding if :obj:`True`.
        :return: The concrete nodes that were inserted.
        :meta category: Methods to add nodes to a tree
        """

    @property
    @abstractmethod
    def last_child(self) -> Optional[XMLNodeType]:
        """
        The node's last child node.

        :meta category: Related document and nodes properties
        """

    @abstractmethod
    def prepend_children(
        self, *node: NodeSource, clone: bool = False
    ) -> tuple[XMLNodeType, ...]:
        """
        Adds one or more nodes as child nodes before any existing to the child nodes
        of the node this method is called on.

        :param node: The node(s) to be added.
        :param clone: Clones the concrete nodes before adding if :obj:`True`.
        :return: The concrete nodes that were prepended.
        :meta category: Methods to add nodes to a tree
        """


class _LeafNodeType(XMLNodeType):
    @property
    @abstractmethod
    def content(self) -> str:
        """
        The node's text content.

        :meta category: Node content properties
        """

    @content.setter
    @abstractmethod
    def content(self, value: str): ...


class CDataNodeType(_LeafNodeType):
    @abstractmethod
    def __eq__(self, other: Any) -> bool: ...


class CommentNodeType(_LeafNodeType):
    @abstractmethod
    def __eq__(self, other: Any) -> bool: ...


class _DocumentNodeType(ParentNodeType): ...  # noqa: E701


class ProcessingInstructionNodeType(_LeafNodeType):
    @abstractmethod
    def __eq__(self, other: Any) -> bool: ...

    @property
    @abstractmethod
    def target(self) -> str:
        """
        The processing instruction's target.

        :meta category: Node content properties
        """

    @target.setter
    @abstractmethod
    def target(self, value: str): ...


class TagNodeType(ParentNodeType):
    @abstractmethod
    def __contains__(self, item: str | XMLNodeType) -> bool: ...

    @overload
    @abstractmethod
    def __getitem__(self, item: int) -> XMLNodeType: ...

    @overload
    @abstractmethod
    def __getitem__(self, item: str) -> str: ...

    @abstractmethod
    def __getitem__(self, item): ...

    @property
    @abstractmethod
    def attributes(self) -> TagAttributes:
        """
        A :term:`mapping` that can be used to access the node's attributes.

        :meta category: Node content properties
        """

    @property
    @abstractmethod
    def child_elements(self) -> tuple[TagNodeType, ...]:
        """
        The node's children that are tag nodes.

        :meta category: Related document and nodes properties
        """

    @abstractmethod
    def css_select(self, expression: str) -> QueryResults:
        """
        Queries the node's descendants with a CSS selector expression.

        :param expression: A CSS selector expression.
        :return: All tag nodes that match the selector in document order.
        :meta category: Methods to query the tree
        """

    @property
    @abstractmethod
    def location_path(self) -> str:
        """
        An absolute path expression that selects this node when evaluated with
        :meth:`TagNodeType.query` on any node of the same tree.

        :meta category: Node properties
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """
        The node's name.

        :meta category: Node properties
        """

    @name.setter
    @abstractmethod
    def name(self, value: str): ...

    @abstractmethod
    def query(self, expression: str) -> QueryResults:
        """
        Queries the tree with a path expression with this node as initial context
        node.

        :param expression: A path expression, see :mod:`_sprig.query` for its grammar.
        :return: All tag nodes that match the expression. This is never an error, an
                 expression that can't be interpreted simply yields no results.
        :meta category: Methods to query the tree
        """

    @property
    @abstractmethod
    def text_content(self) -> str:
        """
        The concatenated contents of the node's text node children. Setting a value
        replaces all text node children with one text node at the first position.

        :meta category: Node content properties
        """

    @text_content.setter
    @abstractmethod
    def text_content(self, value: str): ...


class TextNodeType(_LeafNodeType):
    @abstractmethod
    def __eq__(self, other: Any) -> bool: ...


# protocols


class BinaryReader(Protocol):
    def read(self, n: int = -1) -> bytes: ...


# aliases


Filter: TypeAlias = "Callable[[XMLNodeType], bool]"
NodeSource: TypeAlias = "str | XMLNodeType | _TagDefinition"

GenericDecorated = TypeVar("GenericDecorated", bound=Callable[..., Any])
SecondOrderDecorator: TypeAlias = "Callable[[GenericDecorated], GenericDecorated]"

InputStream: TypeAlias = AnyStr | BinaryIO
LoaderResult: TypeAlias = "Sequence[XMLNodeType] | str"
Loader: TypeAlias = "Callable[[Any, SimpleNamespace], LoaderResult]"
LoaderConstraint: TypeAlias = "Loader | Iterable[Loader] | None"

AttributesData: TypeAlias = "Mapping[str, str]"


#


__all__ = (
    "AttributesData",
    "BinaryReader",
    CDataNodeType.__name__,
    CommentNodeType.__name__,
    _DocumentNodeType.__name__,
    "Filter",
    "GenericDecorated",
    "InputStream",
    "Loader",
    "LoaderConstraint",
    "LoaderResult",
    "NodeSource",
    ParentNodeType.__name__,
    ProcessingInstructionNodeType.__name__,
    "SecondOrderDecorator",
    TagNodeType.__name__,
    TextNodeType.__name__,
    XMLNodeType.__name__,
)

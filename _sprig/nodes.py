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

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any, Final, NamedTuple, Optional, overload

from _sprig.exceptions import InvalidOperation
from _sprig.grammar import _is_xml_name
from _sprig.query import QueryResults, _css_to_filter, evaluate
from _sprig.serializer import DefaultStringOptions, _get_serializer, _StringWriter
from _sprig.typing import (
    CDataNodeType,
    CommentNodeType,
    _DocumentNodeType,
    ParentNodeType,
    ProcessingInstructionNodeType,
    TagNodeType,
    TextNodeType,
    XMLNodeType,
)

if TYPE_CHECKING:
    from _sprig.serializer import FormatOptions
    from _sprig.typing import AttributesData, Filter, NodeSource
    from sprig import Document


# abstract tag definitions


class _TagDefinition(NamedTuple):
    """
    Instances of this class describe tag nodes that are constructed from the context
    they are used in (commonly additions to a tree) and the properties that this
    description holds. For the sake of slick code they are not instantiated directly,
    but with the :func:`sprig.tag` function.
    """

    name: str
    attributes: Optional[dict[str, str]] = None
    children: tuple[NodeSource, ...] = ()


# attributes


class TagAttributes(MutableMapping):
    """
    A data type to access a tag node's attributes. Names must be valid XML names and
    values must be strings. The insertion order is kept, serializations are sorted by
    name though.
    """

    __slots__ = ("__data",)

    def __init__(self, data: AttributesData):
        if not isinstance(data, Mapping):
            raise TypeError("Attributes must be provided as mapping.")

        self.__data: Final[dict[str, str]] = {}
        self.update(data)

    def __delitem__(self, name: str):
        del self.__data[name]

    def __getitem__(self, name: str) -> str:
        return self.__data[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.__data)

    def __len__(self) -> int:
        return len(self.__data)

    def __repr__(self):
        return repr(self.__data)

    def __setitem__(self, name: str, value: str):
        if not isinstance(name, str) or not _is_xml_name(name):
            raise ValueError(f"`{name}` is not a valid attribute name.")
        if not isinstance(value, str):
            raise TypeError("Attribute values must be strings.")
        self.__data[name] = value

    def __str__(self):
        return str(self.__data)

    def as_dict(self) -> dict[str, str]:
        """Returns the attributes as new :class:`dict`."""
        return dict(self.__data)


# container for child nodes


class Siblings:
    """
    The ordered child nodes of a parent node. This is the only place where nodes'
    parent references are assigned and cleared.
    """

    __slots__ = (
        "__belongs_to",
        "__data",
    )

    def __init__(
        self,
        belongs_to: _ParentNode,
        nodes: Optional[Iterable[NodeSource]],
    ):
        self.__data: Final[list[XMLNodeType]] = []
        self.__belongs_to: Final = belongs_to
        if nodes is not None:
            for node in nodes:
                self.__data.append(self._handle_new_sibling(node))

    def __contains__(self, node: Any) -> bool:
        return any(n is node for n in self.__data)

    @overload
    def __getitem__(self, index: int) -> XMLNodeType:
        pass

    @overload
    def __getitem__(self, index: slice) -> list[XMLNodeType]:
        pass

    def __getitem__(self, index: int | slice) -> XMLNodeType | list[XMLNodeType]:
        if not isinstance(index, (int, slice)):
            raise TypeError

        return self.__data[index]

    def __iter__(self) -> Iterator[XMLNodeType]:
        return iter(self.__data)

    def __len__(self) -> int:
        return len(self.__data)

    def append(self, node: NodeSource) -> XMLNodeType:
        result = self._handle_new_sibling(node)
        self.__data.append(result)
        return result

    def clear(self):
        for node in self.__data:
            node._parent = None
        self.__data.clear()

    def index(self, node: XMLNodeType) -> int:
        for result, n in enumerate(self.__data):
            if n is node:
                return result
        else:
            raise ValueError("The node is not a member of these siblings.")

    def insert(self, index: int, node: NodeSource) -> XMLNodeType:
        result = self._handle_new_sibling(node)
        self.__data.insert(index, result)
        return result

    def remove(self, node: XMLNodeType):
        del self.__data[self.index(node)]
        node._parent = None

    def _handle_new_sibling(self, node: NodeSource) -> XMLNodeType:
        match node:
            case str():
                node = TextNode(node)
            case _TagDefinition():
                node = TagNode._from_definition(node)
            case XMLNodeType():
                if node._parent is not None:
                    raise InvalidOperation(
                        "Only a detached node can be added to the tree. Use "
                        ":meth:`XMLNodeType.clone` or :meth:`XMLNodeType.detach` to "
                        "get one."
                    )
                if isinstance(node, TagNode):
                    pointer: Optional[XMLNodeType] = self.__belongs_to
                    while pointer is not None:
                        if pointer is node:
                            raise InvalidOperation(
                                "A node can't be added to itself or to one of its "
                                "descendants."
                            )
                        pointer = pointer._parent
            case _:
                raise TypeError(
                    "Either node instances, strings or objects from :func:`sprig.tag` "
                    "must be provided as child node."
                )

        node._parent = self.__belongs_to
        return node


# nodes


class _NodeCommons(XMLNodeType):

    __slots__ = ("_parent",)

    def __init__(self):
        self._parent = None

    def __copy__(self):
        return self.clone(deep=False)

    def __deepcopy__(self, memo):
        return self.clone(deep=True)

    def __str__(self) -> str:
        serializer = DefaultStringOptions._get_serializer()
        serializer.serialize_node(self)
        return serializer.writer.result

    @property
    def depth(self) -> int:
        result = 0
        pointer = self._parent
        while pointer is not None and not isinstance(pointer, _DocumentNode):
            result += 1
            pointer = pointer._parent
        return result

    def detach(self) -> XMLNodeType:
        if (parent := self._parent) is not None:
            parent._child_nodes.remove(self)
        return self

    @property
    def document(self) -> Optional[Document]:
        node: XMLNodeType = self
        while node._parent is not None:
            node = node._parent
        if isinstance(node, _DocumentNode):
            return node.document
        return None

    @property
    def index(self) -> Optional[int]:
        """
        The node's index among its parent's child nodes or :obj:`None` if it has no
        parent.

        :meta category: Node properties
        """
        if (parent := self.parent) is None:
            return None
        return parent._child_nodes.index(self)

    def iterate_ancestors(self, *filter: Filter) -> Iterator[TagNodeType]:
        """
        A :term:`generator iterator` that yields the ancestor nodes from the parent to
        the root that match all given filters.

        :meta category: Methods to iterate over related node
        """
        for node in self._iterate_ancestors():
            if all(f(node) for f in filter):
                yield node

    def _iterate_ancestors(self) -> Iterator[TagNodeType]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    @property
    def parent(self) -> Optional[TagNodeType]:
        if isinstance(parent := self._parent, _DocumentNode):
            return None
        return parent

    def serialize(self, *, format_options: Optional[FormatOptions] = None) -> str:
        serializer = _get_serializer(_StringWriter(), format_options=format_options)
        serializer.serialize_node(self)
        return serializer.writer.result


class _LeafNode(_NodeCommons):
    """Node types using this mixin can't have child nodes."""

    __slots__ = ("_content",)

    first_child = None
    last_child = None

    def __init__(self, content: str):
        super().__init__()
        self.content = content

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}("{self._content}") [{hex(id(self))}]>'

    @property
    def content(self) -> str:
        return self._content

    @content.setter
    def content(self, value: str):
        if not isinstance(value, str):
            raise TypeError("Content must be a string.")
        self._validate_content(value)
        self._content = value

    @property
    def full_text(self) -> str:
        return ""

    # the following yield statements are there to trick mypy

    def iterate_children(self, *filter: Filter) -> Iterator[XMLNodeType]:
        """
        A :term:`generator iterator` that yields nothing.

        :meta category: Methods to iterate over related node
        """
        return
        yield from ()

    def iterate_descendants(self, *filter: Filter) -> Iterator[XMLNodeType]:
        """
        A :term:`generator iterator` that yields nothing.

        :meta category: Methods to iterate over related node
        """
        return
        yield from ()

    def _validate_content(self, value: str):
        pass


class _ParentNode(_NodeCommons, ParentNodeType):

    __slots__ = ("_child_nodes",)

    def __init__(
        self,
        children: Iterable[NodeSource] = (),
    ):
        super().__init__()
        self._child_nodes = Siblings(nodes=children, belongs_to=self)

    def __len__(self) -> int:
        return len(self._child_nodes)

    def append_children(
        self, *node: NodeSource, clone: bool = False
    ) -> tuple[XMLNodeType, ...]:
        if not node:
            return ()

        result: list[XMLNodeType] = []

        for _node in node:
            if clone and isinstance(_node, _NodeCommons):
                _node = _node.clone(deep=True)
            result.append(self._child_nodes.append(_node))

        return tuple(result)

    @property
    def first_child(self) -> Optional[XMLNodeType]:
        if self._child_nodes:
            return self._child_nodes[0]
        return None

    @property
    def full_text(self) -> str:
        return "".join(
            n.content for n in self._iterate_descendants() if isinstance(n, TextNode)
        )

    def insert_children(
        self, index: int, *node: NodeSource, clone: bool = False
    ) -> tuple[XMLNodeType, ...]:
        children_size = len(self._child_nodes)
        if not (children_size * -1 <= index <= children_size):
            raise IndexError
        if index < 0:
            index += children_size

        result = []
        for _node in reversed(node):
            if clone and isinstance(_node, _NodeCommons):
                _node = _node.clone(deep=True)
            result.append(self._child_nodes.insert(index, _node))
        result.reverse()
        return tuple(result)

    def iterate_children(self, *filter: Filter) -> Iterator[XMLNodeType]:
        for node in self._child_nodes:
            if all(f(node) for f in filter):
                yield node

    def iterate_descendants(self, *filter: Filter) -> Iterator[XMLNodeType]:
        for node in self._iterate_descendants():
            if all(f(node) for f in filter):
                yield node

    def _iterate_descendants(self) -> Iterator[XMLNodeType]:
        stack = [(self._child_nodes, 0)]

        while stack:
            siblings, pointer = stack.pop()

            for node in siblings[pointer:]:
                pointer += 1
                yield node

                if isinstance(node, TagNode) and node._child_nodes:
                    stack.extend(((siblings, pointer), (node._child_nodes, 0)))
                    break

    @property
    def last_child(self) -> Optional[XMLNodeType]:
        if self._child_nodes:
            return self._child_nodes[-1]
        return None

    def prepend_children(
        self, *node: NodeSource, clone: bool = False
    ) -> tuple[XMLNodeType, ...]:
        return self.insert_children(0, *node, clone=clone)


class CDataNode(_LeafNode, CDataNodeType):
    """
    The instances of this class represent CDATA sections. Their content is serialized
    without any escaping.

    :param content: The section's text.
    """

    __slots__ = ()

    def __eq__(self, other) -> bool:
        return isinstance(other, CDataNode) and self.content == other.content

    def clone(self, deep: bool = False) -> CDataNode:
        return CDataNode(self._content)

    def _validate_content(self, value: str):
        if "]]>" in value:
            raise ValueError("A CDATA section can't contain `]]>`.")


class CommentNode(_LeafNode, CommentNodeType):
    """
    The instances of this class represent comment nodes of a tree.

    :param content: The comment's content a.k.a. text.
    """

    __slots__ = ()

    def __eq__(self, other) -> bool:
        return isinstance(other, CommentNode) and self.content == other.content

    def clone(self, deep: bool = False) -> CommentNode:
        return CommentNode(self._content)

    def _validate_content(self, value: str):
        if "-->" in value:
            raise ValueError("A comment can't contain `-->`.")


class _DocumentNode(_ParentNode, _DocumentNodeType):
    """
    This node type anchors a document's prologue and root node. It's never exposed
    to client code, a root node's :attr:`TagNode.parent` is :obj:`None`.
    """

    __slots__ = ("__document",)

    def __init__(self, document: Document, children: Iterable[XMLNodeType]):
        self.__document = document
        super().__init__(children)

    def clone(self, deep: bool = False) -> XMLNodeType:  # pragma: no cover
        raise InvalidOperation("Clone the document instead.")

    @property
    def document(self) -> Document:
        return self.__document

    def detach(self) -> XMLNodeType:  # pragma: no cover
        raise InvalidOperation("A document node can't be detached.")

    def serialize(self, *, format_options=None) -> str:  # pragma: no cover
        raise InvalidOperation("Serialize the document instead.")


class ProcessingInstructionNode(_LeafNode, ProcessingInstructionNodeType):
    """
    The instances of this class represent processing instructions.

    :param target: The processing instruction's target.
    :param content: The processing instruction's content, often referred to as data.
    """

    __slots__ = ("__target",)

    def __init__(self, target: str, content: str):
        self.target = target
        super().__init__(content)

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, ProcessingInstructionNode)
            and self.target == other.target
            and self.content == other.content
        )

    def __repr__(self) -> str:
        return (
            f'<{self.__class__.__name__}("{self.__target}", "{self._content}") '
            f"[{hex(id(self))}]>"
        )

    def clone(self, deep: bool = False) -> ProcessingInstructionNode:
        return ProcessingInstructionNode(self.__target, self._content)

    @property
    def target(self) -> str:
        return self.__target

    @target.setter
    def target(self, value: str):
        if not _is_xml_name(value):
            raise ValueError(f"`{value}` is not a valid processing instruction target.")
        self.__target = value

    def _validate_content(self, value: str):
        if "?>" in value:
            raise ValueError("A processing instruction's content can't contain `?>`.")


class TagNode(_ParentNode, TagNodeType):
    """
    The instances of this class represent tag nodes of a tree, the equivalent of DOM's
    elements.

    :param name: The tag name.
    :param attributes: Optional attributes that are assigned to the new node.
    :param children: An optional iterable of objects that will be appended as child
                     nodes. This can be existing nodes, strings that will be inserted
                     as text nodes and in-place definitions of :class:`TagNode`
                     instances from :func:`sprig.tag`.
    :param content: An optional text that is inserted as first child node.

    Some syntactic sugar is baked in:

    Attributes and nodes can be tested for membership in a node.

    >>> root = parse_tree('<root ham="spam"><child/></root>')
    >>> "ham" in root
    True
    >>> root.first_child in root
    True

    Attribute values and child nodes can be obtained and deleted with the subscript
    notation.

    >>> root = parse_tree('<root x="y"><child_1/>child_2<child_3/></root>')
    >>> print(root["x"])
    y
    >>> print(root[0])
    <child_1/>
    >>> print(root[-1])
    <child_3/>

    Tag nodes are only equal to themselves, use :func:`sprig.utils.compare_trees` to
    compare trees.
    """

    __slots__ = (
        "__attributes",
        "__name",
    )

    def __init__(
        self,
        name: str,
        attributes: Optional[AttributesData] = None,
        children: Iterable[NodeSource] = (),
        content: Optional[str] = None,
    ):
        self.name = name
        self.__attributes = TagAttributes(attributes or {})
        super().__init__(children)
        if content is not None:
            self.text_content = content

    def __contains__(self, item: str | XMLNodeType) -> bool:
        match item:
            case str():
                return item in self.__attributes
            case XMLNodeType():
                return item in self._child_nodes
            case _:
                raise TypeError(
                    "Argument must be a node instance or an attribute name."
                )

    def __delitem__(self, item: str | int):
        match item:
            case str():
                del self.__attributes[item]
            case int():
                self._child_nodes[item].detach()
            case _:
                raise TypeError("Argument must be an integer or an attribute name.")

    @overload
    def __getitem__(self, item: int) -> XMLNodeType: ...

    @overload
    def __getitem__(self, item: str) -> str: ...

    def __getitem__(self, item):
        match item:
            case str():
                return self.__attributes[item]
            case int() | slice():
                return self._child_nodes[item]

        raise TypeError(
            "Argument must be an integer as index for a child node, a :term:`slice` "
            "to grab an indexed range of nodes or an attribute name."
        )

    def __repr__(self) -> str:
        return (
            f'<{self.__class__.__name__}("{self.__name}", '
            f"{self.__attributes}, {self.location_path}) [{hex(id(self))}]>"
        )

    def __setitem__(self, item: str, value: str):
        if not isinstance(item, str):
            raise TypeError("Only attributes can be set with the subscript notation.")
        self.__attributes[item] = value

    @property
    def attributes(self) -> TagAttributes:
        return self.__attributes

    @property
    def child_elements(self) -> tuple[TagNodeType, ...]:
        return tuple(n for n in self._child_nodes if isinstance(n, TagNode))

    def clear_children(self):
        """
        Removes all child nodes.

        :meta category: Methods to remove a node
        """
        self._child_nodes.clear()

    def clone(self, deep: bool = False) -> TagNodeType:
        result = TagNode(name=self.__name, attributes=self.__attributes)
        if deep:
            result.append_children(*(n.clone(deep=True) for n in self._child_nodes))
        return result

    def css_select(self, expression: str) -> QueryResults:
        return QueryResults(
            self.iterate_descendants(is_tag_node, _css_to_filter(expression))
        )

    def detach(self) -> TagNodeType:
        if isinstance(self._parent, _DocumentNode):
            raise InvalidOperation("The root node of a document cannot be detached.")
        super().detach()
        return self

    def fetch_child(self, *filter: Filter) -> Optional[XMLNodeType]:
        """
        Returns the first child node that matches all given filters or :obj:`None`.

        :meta category: Methods to fetch a relative node
        """
        for node in self.iterate_children(*filter):
            return node
        return None

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Returns an attribute's value or the ``default`` if the node has no attribute
        with the given name.

        :meta category: Node content properties
        """
        return self.__attributes.get(name, default)

    @property
    def location_path(self) -> str:
        if self.parent is None:
            return "/"

        steps = []
        node: TagNodeType = self
        while (parent := node.parent) is not None:
            position = 1
            for sibling in parent._child_nodes:
                if sibling is node:
                    break
                if isinstance(sibling, TagNode) and sibling.name == node.name:
                    position += 1
            steps.append(f"{node.name}[{position}]")
            node = parent
        steps.reverse()
        return "/" + "/".join(steps)

    @property
    def name(self) -> str:
        return self.__name

    @name.setter
    def name(self, value: str):
        if not isinstance(value, str) or not _is_xml_name(value):
            raise ValueError(f"`{value}` is not a valid XML name.")
        self.__name = value

    @classmethod
    def _from_definition(cls, definition: _TagDefinition) -> TagNode:
        return cls(
            name=definition.name,
            attributes=definition.attributes,
            children=definition.children,
        )

    def query(self, expression: str) -> QueryResults:
        return evaluate(self, expression)

    def query_first(self, expression: str) -> Optional[TagNodeType]:
        """
        Returns the first result of :meth:`TagNode.query` or :obj:`None`.

        :meta category: Methods to query the tree
        """
        return self.query(expression).first

    def remove_attribute(self, name: str):
        """
        Removes an attribute, it's no error if the node has no such attribute.

        :meta category: Node content properties
        """
        self.__attributes.pop(name, None)

    def remove_child(self, child: int | XMLNodeType) -> Optional[XMLNodeType]:
        """
        Removes a child node that is either identified by its index or the node
        itself.

        :param child: An index or a child node.
        :return: The removed node or :obj:`None` if there was no such child node.
        :meta category: Methods to remove a node
        """
        match child:
            case int():
                if not (-len(self._child_nodes) <= child < len(self._child_nodes)):
                    return None
                node = self._child_nodes[child]
            case XMLNodeType():
                if child._parent is not self:
                    return None
                node = child
            case _:
                raise TypeError("Argument must be an integer or a node instance.")

        self._child_nodes.remove(node)
        return node

    def rename(self, name: str) -> TagNodeType:
        """
        Sets a new name and returns the node.

        :meta category: Node properties
        """
        self.name = name
        return self

    def set_attribute(self, name: str, value: str):
        """
        Sets an attribute's value.

        :meta category: Node content properties
        """
        self.__attributes[name] = value

    def set_attributes(self, attributes: AttributesData):
        """
        Merges the given attributes into the node's ones. Existing values are
        replaced.

        :meta category: Node content properties
        """
        self.__attributes.update(attributes)

    @property
    def text_content(self) -> str:
        return "".join(
            n.content for n in self._child_nodes if isinstance(n, TextNode)
        )

    @text_content.setter
    def text_content(self, value: Optional[str]):
        if value is not None and not isinstance(value, str):
            raise TypeError("Text content must be a string or None.")
        for node in self.text_nodes:
            self._child_nodes.remove(node)
        if value is not None:
            self._child_nodes.insert(0, TextNode(value))

    @property
    def text_nodes(self) -> tuple[TextNodeType, ...]:
        """
        The node's children that are text nodes.

        :meta category: Related document and nodes properties
        """
        return tuple(n for n in self._child_nodes if isinstance(n, TextNode))


class TextNode(_LeafNode, TextNodeType):
    """
    TextNodes contain the textual data of a document. The class shall not be
    necessarily initialized by client code, strings can be added to trees.

    Instances can be tested for equality with other text nodes and strings:

    >>> TextNode("ham") == TextNode("spam")
    False
    >>> TextNode("Patsy") == "Patsy"
    True
    """

    __slots__ = ()

    def __eq__(self, other):
        match other:
            case TextNode():
                return self._content == other._content
            case str():
                return self._content == other
        return NotImplemented

    def __repr__(self):
        return f'<{self.__class__.__name__}(text="{self._content}") [{hex(id(self))}]>'

    def clone(self, deep: bool = False) -> TextNodeType:
        return TextNode(self._content)

    @property
    def full_text(self) -> str:
        return self._content


# this is here to avoid circular imports

from _sprig.filters import is_tag_node  # noqa: E402


#


__all__ = (
    CDataNode.__name__,
    CommentNode.__name__,
    ProcessingInstructionNode.__name__,
    Siblings.__name__,
    TagAttributes.__name__,
    TagNode.__name__,
    TextNode.__name__,
)

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

from copy import deepcopy
from io import TextIOWrapper
from types import SimpleNamespace
from typing import TYPE_CHECKING, overload, Any, BinaryIO, Callable, Final, Optional

from _sprig.builder import parse_nodes, parse_tree, tag
from _sprig.exceptions import (
    FailedDocumentLoading,
    InvalidOperation,
)
from _sprig.nodes import (
    CommentNode,
    _DocumentNode,
    ProcessingInstructionNode,
    TagNode,
    TextNode,
    CDataNode,
)
from _sprig.parser import ParserOptions
from _sprig.plugins import (
    core_loaders,
    plugin_manager as _plugin_manager,
)
from _sprig.serializer import (
    DefaultStringOptions,
    FormatOptions,
    Serializer,
    _TextBufferWriter,
    _get_serializer,
    _serialize_leaf,
    _StringWriter,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence
    from pathlib import Path
    from types import TracebackType

    from _sprig.query import QueryResults
    from _sprig.typing import (
        CommentNodeType,
        Loader,
        ProcessingInstructionNodeType,
        TagNodeType,
        XMLNodeType,
    )


# plugin loading


_plugin_manager.load_plugins()


# api


class Prologue:
    """
    A list-like accessor to the comments and processing instructions that precede a
    document's root node.
    """

    __slots__ = ("_siblings",)

    def __init__(self, document_node: _DocumentNode):
        self._siblings: Final = document_node._child_nodes

    @overload
    def __getitem__(self, index: int) -> XMLNodeType:
        pass

    @overload
    def __getitem__(self, index: slice) -> list[XMLNodeType]:
        pass

    def __getitem__(self, index: int | slice) -> XMLNodeType | list[XMLNodeType]:
        return self._siblings_slice[index]

    def __iter__(self) -> Iterator[XMLNodeType]:
        return iter(self._siblings_slice)

    def __len__(self) -> int:
        return len(self._siblings_slice)

    def __repr__(self) -> str:
        return f"<Prologue {self._siblings_slice!r}>"

    def append(
        self, node: CommentNodeType | ProcessingInstructionNodeType
    ) -> CommentNodeType | ProcessingInstructionNodeType:
        self._validate_new_node(node)
        self._siblings.insert(self._root_index, node)
        return node

    def clear(self):
        for node in self._siblings_slice:
            self._siblings.remove(node)

    def index(self, node: XMLNodeType) -> int:
        if node not in self._siblings_slice:
            raise ValueError("The node is not part of the prologue.")
        return self._siblings.index(node)

    def insert(self, index: int, node: CommentNodeType | ProcessingInstructionNodeType):
        self._validate_new_node(node)
        if index > self._root_index:
            raise IndexError
        self._siblings.insert(index, node)

    def prepend(
        self, node: CommentNodeType | ProcessingInstructionNodeType
    ) -> CommentNodeType | ProcessingInstructionNodeType:
        self.insert(0, node)
        return node

    def remove(self, node: CommentNodeType | ProcessingInstructionNodeType):
        self.index(node)
        self._siblings.remove(node)

    @property
    def _root_index(self) -> int:
        return self._siblings.index(
            next(n for n in self._siblings if isinstance(n, TagNode))
        )

    @property
    def _siblings_slice(self) -> list[XMLNodeType]:
        return self._siblings[: self._root_index]

    def _validate_new_node(self, node: XMLNodeType):
        if not isinstance(node, (CommentNode, ProcessingInstructionNode)):
            raise TypeError(
                "Only comments and processing instructions can precede the root node."
            )
        if isinstance(node, ProcessingInstructionNode) and node.target == "xml":
            raise ValueError("Use the document's declaration attribute instead.")
        if node._parent is not None:
            raise InvalidOperation(
                "Only a detached node can be added to the tree. Use "
                ":meth:`XMLNodeType.clone` or :meth:`XMLNodeType.detach` to get one."
            )


class Document:
    """
    This class is the entrypoint to obtain a representation of an XML encoded text
    document.

    :param source: Anything that the configured loaders can make sense of to return a
                   parsed document tree.
    :param parser_options: A :class:`sprig.ParserOptions` instance to configure the
                           used parser.
    :param source_url: An optional source URL for situations where a loader can't
                       determine one.

    For instantiation any object can be passed. A suitable loader must be available for
    the given source. Plugins are capable to alter the available loaders, see
    :meth:`_sprig.plugins.PluginManager.register_loader`.

    Nodes can be tested for membership in a document:

    >>> document = Document("<root>text</root>")
    >>> text_node = document.root[0]
    >>> text_node in document
    True
    >>> text_node.clone() in document
    False

    The string coercion of a document yields the XML encoded document:

    >>> document = Document("<root/>")
    >>> str(document)
    '<?xml version="1.0" encoding="UTF-8"?>\\n<root/>'
    """

    __slots__ = (
        "config",
        "__declaration",
        "__encoding",
        "__node",
        "prologue",
        "source_url",
        "__version",
    )

    def __init__(
        self,
        source: Any,
        /,
        parser_options: Optional[ParserOptions] = None,
        source_url: Optional[str] = None,
    ):
        config = SimpleNamespace()
        if source_url is not None:
            config.source_url = source_url
        config.parser_options = parser_options or ParserOptions()
        loader_result = self.__load_source(source, config)

        if not any(isinstance(n, TagNode) for n in loader_result):
            raise InvalidOperation("A document must have a root node.")

        self.config: SimpleNamespace = config
        """
        Beside the ``parser_options``, this property contains the data that loaders may
        have stored.
        """
        self.source_url: Optional[str] = vars(config).pop("source_url", None)
        """
        The source URL where a loader obtained the document's contents or
        :obj:`None`.
        """
        self.__version: str = vars(config).pop("version", "1.0")
        self.__encoding: str = vars(config).pop("encoding", "UTF-8")
        self.__declaration: Optional[ProcessingInstructionNodeType] = vars(config).pop(
            "xml_declaration", None
        )
        if self.__declaration is None:
            self.__declaration = self.__make_declaration()
        self.__node: Final = _DocumentNode(self, loader_result)
        self.prologue: Final = Prologue(self.__node)
        """
        A list-like accessor to the nodes that precede the document's root node.
        """

    @staticmethod
    def __load_source(source: Any, config: SimpleNamespace) -> Sequence[XMLNodeType]:
        loader_excuses: dict[Loader, str | Exception] = {}

        for loader in (core_loaders.tag_node_loader, *_plugin_manager.loaders):
            try:
                loader_result = loader(source, config)
            except Exception as e:
                loader_excuses[loader] = e
            else:
                if isinstance(loader_result, str):
                    loader_excuses[loader] = loader_result
                else:
                    break
        else:
            vars(config).pop("source_url", None)
            raise FailedDocumentLoading(source, loader_excuses)

        assert not isinstance(loader_result, str)
        return loader_result

    def __contains__(self, node: XMLNodeType) -> bool:
        return node.document is self

    def __copy__(self) -> Document:
        return self.clone()

    def __deepcopy__(self, memo) -> Document:
        return self.clone()

    def __str__(self) -> str:
        serializer = DefaultStringOptions._get_serializer()
        self.__serialize(serializer)
        return serializer.writer.result

    def clone(self) -> Document:
        """
        Clones the document with its contents.

        :return: A new document instance.
        """
        result = Document(self.__node)
        result.config = deepcopy(self.config)
        result.source_url = self.source_url
        result.__version = self.__version
        result.__encoding = self.__encoding
        if self.__declaration is None:
            result.__declaration = None
        else:
            result.__declaration = self.__declaration.clone()
        return result

    @property
    def comments(self) -> tuple[CommentNodeType, ...]:
        """The comments in the document's prologue."""
        return tuple(n for n in self.prologue if isinstance(n, CommentNode))

    def css_select(self, expression: str) -> QueryResults:
        """
        This method proxies to the :meth:`sprig.nodes.TagNode.css_select` method of the
        document's :attr:`root <Document.root>` node.
        """
        return self.root.css_select(expression)

    @property
    def declaration(self) -> Optional[ProcessingInstructionNodeType]:
        """
        The XML declaration as processing instruction with the target ``xml``. A parsed
        one is kept as it was, otherwise it's derived from :attr:`version` and
        :attr:`encoding`. When it's set to :obj:`None`, no declaration is serialized.
        """
        return self.__declaration

    @declaration.setter
    def declaration(self, node: Optional[ProcessingInstructionNodeType]):
        if node is not None and not (
            isinstance(node, ProcessingInstructionNode) and node.target == "xml"
        ):
            raise TypeError(
                "The declaration must be a processing instruction with the target "
                "`xml`."
            )
        self.__declaration = node

    @property
    def encoding(self) -> str:
        """The encoding that is noted in the declaration."""
        return self.__encoding

    @encoding.setter
    def encoding(self, value: str):
        self.__encoding = value
        if self.__declaration is not None:
            self.__declaration = self.__make_declaration()

    def __make_declaration(self) -> ProcessingInstructionNode:
        return ProcessingInstructionNode(
            "xml", f'version="{self.__version}" encoding="{self.__encoding}"'
        )

    @property
    def processing_instructions(self) -> tuple[ProcessingInstructionNodeType, ...]:
        """The processing instructions in the document's prologue."""
        return tuple(
            n for n in self.prologue if isinstance(n, ProcessingInstructionNode)
        )

    def query(self, expression: str) -> QueryResults:
        """
        This method proxies to the :meth:`sprig.nodes.TagNode.query` method of the
        document's :attr:`root <Document.root>` node.
        """
        return self.root.query(expression)

    def query_first(self, expression: str) -> Optional[TagNodeType]:
        """
        This method proxies to the :meth:`sprig.nodes.TagNode.query_first` method of
        the document's :attr:`root <Document.root>` node.
        """
        return self.root.query_first(expression)

    @property
    def root(self) -> TagNodeType:
        """The root node of a document's *content* tree."""
        return next(n for n in self.__node._child_nodes if isinstance(n, TagNode))

    @root.setter
    def root(self, node: TagNodeType):
        if not isinstance(node, TagNode):
            raise TypeError(
                "The document root node must be a :class:`sprig.nodes.TagNode` "
                "instance."
            )

        if node._parent is not None:
            raise InvalidOperation(
                "Only a detached node can be set as root. Use "
                ":meth:`sprig.nodes.TagNode.clone` or "
                ":meth:`sprig.nodes.TagNode.detach` on the designated root node."
            )

        current_root = self.root
        node_index = self.__node._child_nodes.index(current_root)
        self.__node._child_nodes.remove(current_root)
        self.__node.insert_children(node_index, node)

    def save(self, path: Path, *, format_options: Optional[FormatOptions] = None):
        """
        Saves the serialized document contents to a file.

        :param path: The filesystem path to the target file.
        :param format_options: An instance of :class:`FormatOptions` can be
                               provided to configure formatting.
        """
        with path.open("bw") as file:
            self.write(buffer=file, format_options=format_options)

    def serialize(self, *, format_options: Optional[FormatOptions] = None) -> str:
        """
        Returns the serialized document. The declaration and each node of the prologue
        are followed by a line break.

        :param format_options: An instance of :class:`FormatOptions` can be
                               provided to configure formatting.
        """
        serializer = _get_serializer(_StringWriter(), format_options=format_options)
        self.__serialize(serializer)
        return serializer.writer.result

    def __serialize(self, serializer: Serializer):
        if self.__declaration is not None:
            serializer.writer(_serialize_leaf(self.__declaration) + "\n")
        for node in self.prologue:
            serializer.writer(_serialize_leaf(node) + "\n")
        serializer.serialize_node(self.root)
        serializer.writer.buffer.flush()

    @property
    def version(self) -> str:
        """The XML version that is noted in the declaration."""
        return self.__version

    @version.setter
    def version(self, value: str):
        self.__version = value
        if self.__declaration is not None:
            self.__declaration = self.__make_declaration()

    def write(
        self,
        buffer: BinaryIO,
        *,
        format_options: Optional[FormatOptions] = None,
        newline: None | str = None,
    ):
        """
        Writes the UTF-8 encoded document contents to a :term:`file-like object`.

        :param buffer: A :term:`file-like object` that the document is written to.
        :param format_options: An instance of :class:`FormatOptions` can be provided to
                               configure formatting.
        :param newline: See :class:`io.TextIOWrapper` for a detailed explanation of the
                        parameter with the same name.
        """
        text_buffer = TextIOWrapper(buffer)
        self.__serialize(
            serializer=_get_serializer(
                _TextBufferWriter(text_buffer, encoding="utf-8", newline=newline),
                format_options=format_options,
            )
        )
        text_buffer.detach()


class DocumentBuilder:
    """
    Builds a document by appending nodes to the tag node that is currently on top of
    its stack. All methods that add something return the builder, hence calls can be
    chained:

    >>> builder = DocumentBuilder("library")
    >>> _ = (
    ...     builder.element("book", {"id": "1"}).text("Dune").parent()
    ...     .element("book", {"id": "2"}, content="Emma")
    ... )
    >>> str(builder.document.root)
    '<library><book id="1">Dune</book><book id="2">Emma</book></library>'

    When used as :term:`context manager`, leaving the block returns to the parent:

    >>> builder = DocumentBuilder("r")
    >>> with builder.element("a"):
    ...     _ = builder.element("b").parent()
    >>> builder.current.name
    'r'
    """

    __slots__ = ("document", "_stack")

    def __init__(
        self,
        root_name: str,
        attributes: Optional[Mapping[str, str]] = None,
        *,
        version: str = "1.0",
        encoding: str = "UTF-8",
    ):
        self.document = Document(TagNode(root_name, attributes))
        self.document.version = version
        self.document.encoding = encoding
        self._stack: list[TagNodeType] = [self.document.root]

    def __enter__(self) -> DocumentBuilder:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ):
        self.parent()

    @classmethod
    def from_document(cls, document: Document) -> DocumentBuilder:
        """Returns a builder that continues to build on the given document's root."""
        result = cls.__new__(cls)
        result.document = document
        result._stack = [document.root]
        return result

    def attribute(self, name: str, value: str) -> DocumentBuilder:
        self.current.set_attribute(name, value)
        return self

    def attributes(self, attributes: Mapping[str, str]) -> DocumentBuilder:
        self.current.set_attributes(attributes)
        return self

    def cdata(self, content: str) -> DocumentBuilder:
        self.current.append_children(CDataNode(content))
        return self

    def comment(self, content: str) -> DocumentBuilder:
        self.current.append_children(CommentNode(content))
        return self

    @property
    def current(self) -> TagNodeType:
        """The tag node that nodes are currently appended to."""
        return self._stack[-1]

    def document_comment(self, content: str) -> DocumentBuilder:
        """Appends a comment to the document's prologue."""
        self.document.prologue.append(CommentNode(content))
        return self

    def element(
        self,
        name: str,
        attributes: Optional[Mapping[str, str]] = None,
        content: Optional[str] = None,
    ) -> DocumentBuilder:
        """
        Appends a tag node to the current one and makes it the current node.

        :param name: The tag node's name.
        :param attributes: Its attributes.
        :param content: Text that is added as only child node.
        """
        node = TagNode(name, attributes, content=content)
        self.current.append_children(node)
        self._stack.append(node)
        return self

    def instruction(self, target: str, content: str) -> DocumentBuilder:
        self.current.append_children(ProcessingInstructionNode(target, content))
        return self

    def parent(self) -> DocumentBuilder:
        """Returns to the parent of the current node, but never beyond the root."""
        if len(self._stack) > 1:
            self._stack.pop()
        return self

    def processing_instruction(self, target: str, content: str) -> DocumentBuilder:
        """Appends a processing instruction to the document's prologue."""
        self.document.prologue.append(ProcessingInstructionNode(target, content))
        return self

    def text(self, content: str) -> DocumentBuilder:
        self.current.append_children(TextNode(content))
        return self

    def with_element(
        self, actions: Callable[[DocumentBuilder], Any]
    ) -> DocumentBuilder:
        """
        Calls ``actions`` with the builder as argument and returns to the parent of the
        current node afterwards.
        """
        actions(self)
        return self.parent()


__all__ = (
    DefaultStringOptions.__name__,
    Document.__name__,
    DocumentBuilder.__name__,
    FormatOptions.__name__,
    ParserOptions.__name__,
    parse_nodes.__name__,
    parse_tree.__name__,
    tag.__name__,
)

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

from abc import ABC
from io import StringIO, TextIOWrapper

from typing import (
    TYPE_CHECKING,
    ClassVar as ClassWar,
    Final,
    NamedTuple,
    Optional,
    TextIO,
)

from _sprig.typing import (
    CDataNodeType,
    CommentNodeType,
    ProcessingInstructionNodeType,
    TagNodeType,
    TextNodeType,
)

if TYPE_CHECKING:
    from _sprig.typing import XMLNodeType


# constants


CTRL_CHAR_ENTITY_NAME_MAPPING: Final = (
    ("&", "amp"),
    (">", "gt"),
    ("<", "lt"),
)
CCE_TABLE_FOR_ATTRIBUTES: Final = str.maketrans({ord('"'): "&quot;"})
CCE_TABLE_FOR_TEXT: Final = str.maketrans(
    {ord(k): f"&{v};" for k, v in CTRL_CHAR_ENTITY_NAME_MAPPING}
)


# configuration


class FormatOptions(NamedTuple):
    """
    Instances of this class can be used to define serialization formatting that is
    not so hard to interpret for instances of Homo sapiens s., but more costly to
    compute.

    When it's employed, tag nodes with other than text child nodes get their children
    on separate, indented lines. Comments, CDATA sections and processing instructions
    are placed on own lines. Tag nodes that contain text other than whitespace are
    written on one line in their canonical notation, so that their text isn't
    altered.
    """

    indentation: str = "    "
    """ This string prefixes descending nodes' contents one time per depth level. """


class DefaultStringOptions:
    """
    This object's class variables are used to configure the serialization parameters
    that are applied when nodes are coerced to :class:`str` objects. Hence it also
    applies when node objects are fed to the :func:`print` function and in other cases
    where objects are implicitly cast to strings.

    .. attention::

        Use this once to define behaviour on *application level*. For thread-safe
        serializations of nodes with diverging parameters use
        :meth:`XMLNodeType.serialize`! Think thrice whether you want to use this
        facility in a library.
    """

    newline: ClassWar[None | str] = None
    """
    See :class:`io.TextIOWrapper` for a detailed explanation of the parameter with the
    same name.
    """
    format_options: ClassWar[None | FormatOptions] = None
    """
    An instance of :class:`sprig.FormatOptions` can be provided to configure formatting.
    """

    @classmethod
    def _get_serializer(cls) -> Serializer:
        return _get_serializer(
            _StringWriter(newline=cls.newline),
            format_options=cls.format_options,
        )

    @classmethod
    def reset_defaults(cls):
        """Restores the factory settings."""
        cls.format_options = None
        cls.newline = None


# serializer


def _get_serializer(
    writer: _SerializationWriter,
    format_options: Optional[FormatOptions],
) -> Serializer:
    if format_options is None:
        return Serializer(writer=writer)

    if format_options.indentation and not format_options.indentation.isspace():
        raise ValueError("Invalid indentation characters.")

    return PrettySerializer(writer=writer, format_options=format_options)


class Serializer:
    """
    Writes nodes in their canonical notation. Attributes are sorted by their names.
    """

    __slots__ = ("writer",)

    def __init__(self, writer: _SerializationWriter):
        self.writer = writer

    def _serialize_attributes(self, node: TagNodeType):
        attributes = node.attributes
        for name in sorted(attributes):
            self.writer(
                f' {name}="{attributes[name].translate(CCE_TABLE_FOR_ATTRIBUTES)}"'
            )

    def _serialize_child_nodes(self, node: TagNodeType):
        for child_node in node._child_nodes:
            self.serialize_node(child_node)

    def serialize_node(self, node: XMLNodeType):
        match node:
            case TagNodeType():
                self._serialize_tag(node)
            case TextNodeType():
                if node.content:
                    self.writer(node.content.translate(CCE_TABLE_FOR_TEXT))
            case _:
                self.writer(_serialize_leaf(node))

    def _serialize_tag(self, node: TagNodeType):
        self.writer(f"<{node.name}")
        self._serialize_attributes(node)

        if node._child_nodes:
            self.writer(">")
            self._serialize_child_nodes(node)
            self.writer(f"</{node.name}>")
        else:
            self.writer("/>")


class PrettySerializer(Serializer):
    """
    Writes nodes with indentations and line breaks as defined in
    :class:`FormatOptions`.
    """

    __slots__ = (
        "indentation",
        "_level",
    )

    def __init__(self, writer: _SerializationWriter, format_options: FormatOptions):
        super().__init__(writer)
        self.indentation: Final = format_options.indentation
        self._level = 0

    def _serialize_child_nodes(self, node: TagNodeType):
        self._level += 1
        super()._serialize_child_nodes(node)
        self._level -= 1

    def serialize_node(self, node: XMLNodeType):
        match node:
            case TagNodeType():
                self._serialize_tag(node)
            case TextNodeType():
                super().serialize_node(node)
            case _:
                self.writer(
                    f"{self._level * self.indentation}{_serialize_leaf(node)}\n"
                )

    def _serialize_tag(self, node: TagNodeType):
        indentation = self._level * self.indentation
        self.writer(indentation)

        if _contains_character_data(node):
            # added whitespace would alter the text
            Serializer(self.writer)._serialize_tag(node)
            self.writer("\n")
            return

        self.writer(f"<{node.name}")
        self._serialize_attributes(node)
        self.writer(">\n")
        self._serialize_child_nodes(node)
        self.writer(f"{indentation}</{node.name}>\n")


def _contains_character_data(node: TagNodeType) -> bool:
    child_nodes = node._child_nodes
    return all(isinstance(n, TextNodeType) for n in child_nodes) or any(
        isinstance(n, TextNodeType) and not n.content.isspace() for n in child_nodes
    )


def _serialize_leaf(node: XMLNodeType) -> str:
    match node:
        case CommentNodeType():
            return f"<!-- {node.content} -->"
        case CDataNodeType():
            return f"<![CDATA[{node.content}]]>"
        case ProcessingInstructionNodeType():
            if node.content:
                return f"<?{node.target} {node.content}?>"
            return f"<?{node.target}?>"

    raise TypeError(f"Unsupported node type: {node.__class__}")


# writers


class _SerializationWriter(ABC):
    __slots__ = ("buffer",)

    def __init__(self, buffer: TextIO):
        self.buffer: Final = buffer

    def __call__(self, data: str):
        self.buffer.write(data)

    @property
    def result(self):
        if isinstance(self.buffer, StringIO):
            return self.buffer.getvalue()
        raise TypeError(  # pragma: no cover
            "Underlying buffer must be an instance of `io.StingIO`"
        )


class _StringWriter(_SerializationWriter):
    def __init__(self, newline: Optional[str] = None):
        super().__init__(StringIO(newline=newline))


class _TextBufferWriter(_SerializationWriter):
    def __init__(
        self,
        buffer: TextIOWrapper,
        encoding: str = "utf-8",
        newline: Optional[str] = None,
    ):
        buffer.reconfigure(encoding=encoding, newline=newline)
        super().__init__(buffer)


#


__all__ = (
    DefaultStringOptions.__name__,
    FormatOptions.__name__,
)

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

import re
from typing import TYPE_CHECKING, Final, NamedTuple, Optional

from _sprig.exceptions import (
    MalformedDocument,
    OtherParsingError,
    UnexpectedEnd,
    XMLSyntaxError,
)
from _sprig.grammar import decode_entities
from _sprig.nodes import (
    CDataNode,
    CommentNode,
    ProcessingInstructionNode,
    TagNode,
    TextNode,
)
from _sprig.parser.scanner import Scanner

if TYPE_CHECKING:
    from _sprig.parser import ParserOptions
    from _sprig.typing import XMLNodeType


search_version: Final = re.compile(r"""version\s*=\s*["']([^"']+)["']""").search
search_encoding: Final = re.compile(r"""encoding\s*=\s*["']([^"']+)["']""").search


class ParsedDocument(NamedTuple):
    """The components of a parsed document."""

    declaration: Optional[ProcessingInstructionNode]
    """ The XML declaration as it was found in the input. """
    version: str
    encoding: str
    nodes: tuple[XMLNodeType, ...]
    """ The comments and processing instructions before the root, followed by it. """


class DocumentParser:
    """
    A recursive descent parser for XML documents. Nested tag nodes are tracked on an
    explicit stack, hence the nesting depth isn't limited by Python's recursion limit.
    Parsing stops with the first error that is encountered.
    """

    __slots__ = (
        "children",
        "options",
        "scanner",
        "started_tags",
        "text_parts",
    )

    def __init__(self, text: str, options: ParserOptions):
        self.children: Final[list[list[XMLNodeType]]] = []
        self.options: Final = options
        self.scanner: Final = Scanner(text)
        self.started_tags: Final[list[TagNode]] = []
        self.text_parts: Final[list[str]] = []

    def parse(self) -> ParsedDocument:
        scanner = self.scanner
        declaration: Optional[ProcessingInstructionNode] = None
        version, encoding = "1.0", "UTF-8"
        prologue: list[XMLNodeType] = []

        scanner.skip_whitespace()

        if scanner.startswith("<?"):
            instruction = self.parse_processing_instruction()
            if instruction.target == "xml":
                declaration = instruction
                if (match := search_version(instruction.content)) is not None:
                    version = match.group(1)
                if (match := search_encoding(instruction.content)) is not None:
                    encoding = match.group(1)
            elif not self.options.remove_processing_instructions:
                prologue.append(instruction)
            scanner.skip_whitespace()

        while True:
            if scanner.startswith("<?"):
                instruction = self.parse_processing_instruction()
                if not self.options.remove_processing_instructions:
                    prologue.append(instruction)
            elif scanner.startswith("<!--"):
                comment = self.parse_comment()
                if not self.options.remove_comments:
                    prologue.append(comment)
            else:
                break
            scanner.skip_whitespace()

        if scanner.startswith("<!DOCTYPE"):
            raise OtherParsingError(
                "Document type declarations are not supported", scanner.location
            )

        root = self.parse_element()

        scanner.skip_whitespace()
        if not scanner.at_end:
            raise MalformedDocument(
                "Unexpected content after root element", scanner.location
            )

        return ParsedDocument(
            declaration=declaration,
            version=version,
            encoding=encoding,
            nodes=(*prologue, root),
        )

    def parse_cdata_section(self) -> CDataNode:
        self.scanner.expect("<![CDATA[")
        return CDataNode(self.scanner.read_until("]]>", "CDATA section"))

    def parse_comment(self) -> CommentNode:
        self.scanner.expect("<!--")
        return CommentNode(self.scanner.read_until("-->", "comment"))

    def parse_element(self) -> TagNode:
        scanner = self.scanner
        options = self.options
        started_tags = self.started_tags

        if (result := self.handle_tag_start()) is not None:
            return result

        while started_tags:
            if scanner.at_end:
                raise UnexpectedEnd(
                    f"Unterminated element <{started_tags[-1].name}>", scanner.location
                )

            if scanner.current != "<":
                self.text_parts.append(scanner.read_text())
            elif scanner.startswith("</"):
                self.flush_text()
                result = self.handle_tag_end()
            elif scanner.startswith("<!--"):
                comment = self.parse_comment()
                if not options.remove_comments:
                    self.flush_text()
                    self.children[-1].append(comment)
            elif scanner.startswith("<![CDATA["):
                self.flush_text()
                self.children[-1].append(self.parse_cdata_section())
            elif scanner.startswith("<?"):
                instruction = self.parse_processing_instruction()
                if not options.remove_processing_instructions:
                    self.flush_text()
                    self.children[-1].append(instruction)
            else:
                self.flush_text()
                if (node := self.handle_tag_start()) is not None:
                    self.children[-1].append(node)

        assert result is not None
        return result

    def parse_processing_instruction(self) -> ProcessingInstructionNode:
        scanner = self.scanner
        scanner.expect("<?")
        target = scanner.read_name()
        scanner.skip_whitespace()
        return ProcessingInstructionNode(
            target, scanner.read_until("?>", "processing instruction")
        )

    def flush_text(self):
        if not self.text_parts:
            return

        text = decode_entities("".join(self.text_parts))
        self.text_parts.clear()
        if text and (self.options.preserve_whitespace or not text.isspace()):
            self.children[-1].append(TextNode(text))

    def handle_tag_end(self) -> TagNode:
        scanner = self.scanner
        scanner.expect("</")
        name = scanner.read_name()
        scanner.skip_whitespace()
        scanner.expect(">")

        result = self.started_tags.pop()
        if name != result.name:
            raise MalformedDocument(
                f"Mismatched tags: <{result.name}> and </{name}>", scanner.location
            )

        for node in self.children.pop():
            result._child_nodes.append(node)
        if self.children:
            self.children[-1].append(result)
        return result

    def handle_tag_start(self) -> Optional[TagNode]:
        """
        Parses a start tag. Empty tag nodes are returned, others are pushed onto the
        stack of started tags and :obj:`None` is returned.
        """
        scanner = self.scanner
        scanner.expect("<")
        name = scanner.read_name()
        attributes: dict[str, str] = {}

        scanner.skip_whitespace()
        while not scanner.at_end and scanner.current not in (">", "/"):
            attribute_name = scanner.read_name()
            scanner.skip_whitespace()
            scanner.expect("=")
            scanner.skip_whitespace()

            quote = scanner.current
            if quote not in ('"', "'"):
                raise XMLSyntaxError(
                    "Expected attribute value to start with quote", scanner.location
                )
            scanner.advance()
            attributes[attribute_name] = decode_entities(
                scanner.read_until(quote, "attribute value")
            )
            scanner.skip_whitespace()

        if scanner.startswith("/>"):
            scanner.advance(2)
            return TagNode(name, attributes)

        scanner.expect(">")
        self.started_tags.append(TagNode(name, attributes))
        self.children.append([])
        return None


__all__ = (DocumentParser.__name__, ParsedDocument.__name__)

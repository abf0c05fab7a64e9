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

import warnings
from typing import TYPE_CHECKING, NamedTuple, Optional

from _sprig.exceptions import InvalidData
from _sprig.parser.descent import DocumentParser, ParsedDocument
from _sprig.parser.utils import detect_encoding

if TYPE_CHECKING:
    from _sprig.typing import InputStream


class ParserOptions(NamedTuple):
    """
    The configuration options that define the parser's behaviour.

    :param encoding: An optional encoding that is expected.  This should be used for
                     streams where the encoding is not noted in an XML document
                     declaration or indicated by a BOM for Unicode encodings.
                     It doesn't affect parsing of data that is passed as :class:`str`.
    :param preserve_whitespace: Keep text nodes that only contain whitespace.
    :param remove_comments: Ignore comments.
    :param remove_processing_instructions: Don't include processing instructions in the
                                           parsed tree.
    """

    encoding: Optional[str] = None
    preserve_whitespace: bool = False
    remove_comments: bool = False
    remove_processing_instructions: bool = False


def decode_input(input_: InputStream, options: ParserOptions) -> str:
    """
    Returns the given data as string. Bytes are decoded with the encoding from the
    options, the one that is indicated by the data itself or UTF-8 as fallback.
    """
    if isinstance(input_, str):
        return input_

    if isinstance(input_, bytes):
        data = input_
    else:
        chunks = []
        while chunk := input_.read():
            chunks.append(chunk)
        data = b"".join(chunks)

    encoding = options.encoding or detect_encoding(data) or "utf-8"
    try:
        text = data.decode(encoding)
    except (LookupError, UnicodeDecodeError) as e:
        raise InvalidData(f"Could not decode data as {encoding}") from e
    return text.removeprefix("\ufeff")


def parse_document(
    input_: InputStream, options: Optional[ParserOptions] = None
) -> ParsedDocument:
    """Parses the provided input data to the components of a document."""
    if options is None:
        options = ParserOptions()

    result = DocumentParser(decode_input(input_, options), options).parse()

    if (
        isinstance(input_, str)
        and result.declaration is not None
        and result.encoding.lower() not in ("utf-8", "utf8")
    ):
        warnings.warn(
            f"The data was passed as string, the declared encoding {result.encoding} "
            "is ignored.",
            category=UserWarning,
        )

    return result


__all__ = (
    decode_input.__name__,
    parse_document.__name__,
    ParsedDocument.__name__,
    ParserOptions.__name__,
)

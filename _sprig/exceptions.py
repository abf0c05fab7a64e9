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

"""These are the specific sprig exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, NamedTuple, Optional

if TYPE_CHECKING:
    from _sprig.typing import Loader


class Position(NamedTuple):
    """A location in a parsed text, both values count from 1."""

    line: int
    column: int

    def __str__(self):
        return f"line {self.line}, column {self.column}"


class SprigBaseException(Exception):
    pass


class FailedDocumentLoading(SprigBaseException):
    def __init__(self, source: Any, excuses: dict[Loader, str | Exception]):
        self.source = source
        self.excuses = excuses

    def __str__(self):
        return f"Couldn't load {self.source!r} with these loaders: {self.excuses}"


class InvalidCodePath(SprigBaseException, RuntimeError):
    """Raised when a code path that is not expected to be executed is reached."""

    def __init__(self):  # pragma: no cover
        super().__init__(
            "An unintended path was taken through the code. Please report this bug."
        )


class InvalidOperation(SprigBaseException):
    """Raised when an invalid operation is attempted by the client code."""

    pass


class ParsingError(SprigBaseException):
    """
    The base class of all errors that abort the parsing of a document.

    :param message: A description of the problem.
    :param position: The line and column in the input where the problem was
                     encountered, if it relates to one.
    """

    label: ClassVar[str] = "XML error"

    def __init__(self, message: str, position: Optional[Position] = None):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self):
        if self.position is None:
            return f"{self.label}: {self.message}"
        return f"{self.label}: {self.message} at {self.position}"


class MalformedDocument(ParsingError):
    """Raised for structural violations like mismatching tag names."""

    label = "Malformed XML"


class InvalidStructure(ParsingError):
    label = "Invalid structure"


class InvalidData(ParsingError):
    """Raised when input data can't be decoded."""

    label = "Invalid data"


class XMLSyntaxError(ParsingError):
    """Raised when the input violates the grammar."""

    label = "Syntax error"


class UnexpectedEnd(ParsingError):
    """Raised when the input ends before a required delimiter was found."""

    label = "Unexpected end"


class OtherParsingError(ParsingError):
    pass


class UnsupportedSelector(SprigBaseException):
    """Raised when a CSS selector uses a feature that isn't supported."""

    def __init__(self, expression: str, feature_description: str):
        self.expression = expression
        super().__init__(
            f"{feature_description} is not supported, found in: `{expression}`"
        )


__all__ = (
    FailedDocumentLoading.__name__,
    InvalidCodePath.__name__,
    InvalidData.__name__,
    InvalidOperation.__name__,
    InvalidStructure.__name__,
    MalformedDocument.__name__,
    OtherParsingError.__name__,
    ParsingError.__name__,
    Position.__name__,
    SprigBaseException.__name__,
    UnexpectedEnd.__name__,
    UnsupportedSelector.__name__,
    XMLSyntaxError.__name__,
)

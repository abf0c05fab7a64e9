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

from typing import Final

from _sprig.exceptions import Position, UnexpectedEnd, XMLSyntaxError
from _sprig.grammar import _match_xml_name


class Scanner:
    """
    A cursor over a text that keeps track of the line and the column of its position.
    Both are counted from 1, a line feed increments the line and resets the column.
    """

    __slots__ = ("column", "line", "position", "text")

    def __init__(self, text: str):
        self.text: Final = text
        self.position = 0
        self.line = 1
        self.column = 1

    def __repr__(self):
        return f"<{self.__class__.__name__} at {self.location}>"

    def advance(self, count: int = 1):
        """Moves the cursor forward, it never moves beyond the text's end."""
        segment = self.text[self.position : self.position + count]
        if (newlines := segment.count("\n")) > 0:
            self.line += newlines
            self.column = len(segment) - segment.rfind("\n")
        else:
            self.column += len(segment)
        self.position += len(segment)

    @property
    def at_end(self) -> bool:
        return self.position >= len(self.text)

    @property
    def current(self) -> str:
        """The character at the cursor or an empty string at the text's end."""
        return self.text[self.position : self.position + 1]

    def expect(self, literal: str):
        """Consumes the given literal or fails."""
        if not self.text.startswith(literal, self.position):
            raise XMLSyntaxError(f"Expected '{literal}'", self.location)
        self.advance(len(literal))

    @property
    def location(self) -> Position:
        return Position(self.line, self.column)

    def read_name(self) -> str:
        if (match := _match_xml_name(self.text, self.position)) is None:
            raise XMLSyntaxError("Expected XML name", self.location)
        result = match.group()
        self.advance(len(result))
        return result

    def read_text(self) -> str:
        """Consumes and returns all characters up to the next ``<`` or the end."""
        end = self.text.find("<", self.position)
        if end == -1:
            end = len(self.text)
        result = self.text[self.position : end]
        self.advance(len(result))
        return result

    def read_until(self, delimiter: str, description: str) -> str:
        """
        Consumes all characters up to and including the delimiter and returns them
        without the latter.

        :param description: Names the unterminated construct when the delimiter isn't
                            found.
        """
        end = self.text.find(delimiter, self.position)
        if end == -1:
            self.advance(len(self.text) - self.position)
            raise UnexpectedEnd(f"Unterminated {description}", self.location)
        result = self.text[self.position : end]
        self.advance(len(result) + len(delimiter))
        return result

    def skip_whitespace(self):
        text = self.text
        start = position = self.position
        while position < len(text) and text[position].isspace():
            position += 1
        if position > start:
            self.advance(position - start)

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.position)


__all__ = (Scanner.__name__,)

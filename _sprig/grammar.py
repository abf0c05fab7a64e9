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
from typing import Final


# constants

# a deliberately reduced subset of https://www.w3.org/TR/REC-xml/#NT-Name
# without the non-ASCII ranges
name_start_characters: Final = ":A-Z_a-z"
name_characters: Final = name_start_characters + r"\-\.0-9"
name_pattern: Final = f"[{name_start_characters}][{name_characters}]*"

ENTITY_TO_CHARACTER: Final = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
}

entity_pattern: Final = re.compile("&(" + "|".join(ENTITY_TO_CHARACTER) + ");")


# functions

_is_xml_name: Final = re.compile(name_pattern).fullmatch
_match_xml_name: Final = re.compile(name_pattern).match


def decode_entities(text: str) -> str:
    """
    Replaces the five predefined entity references in one pass. Character references
    and other entities are left as they are.

    >>> decode_entities("&amp;lt; &lt;3 &copy;")
    '&lt; <3 &copy;'
    """
    if "&" not in text:
        return text
    return entity_pattern.sub(lambda m: ENTITY_TO_CHARACTER[m.group(1)], text)


__all__ = (
    decode_entities.__name__,
    "name_pattern",
)

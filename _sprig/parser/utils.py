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

import codecs
import re
from typing import Final


BOM_TO_ENCODING_NAME: Final = (
    (4, codecs.BOM_UTF32_LE, "utf-32-le"),
    (4, codecs.BOM_UTF32_BE, "utf-32-be"),
    (3, codecs.BOM_UTF8, "utf-8"),
    (2, codecs.BOM_UTF16_LE, "utf-16-le"),
    (2, codecs.BOM_UTF16_BE, "utf-16-be"),
)


match_encoding: Final = re.compile(
    rb"""\s*<\?xml\s[^>]*?encoding\s*=\s*["']([A-Za-z0-9._-]+)["'][^>]*\?>"""
).match


def detect_encoding(data: bytes) -> str | None:
    """
    Detects the encoding of XML data from a byte order mark or the encoding that is
    noted in an XML declaration. Returns :obj:`None` if neither is present.

    >>> detect_encoding(b'<?xml version="1.0" encoding="latin-1"?><root/>')
    'latin-1'
    """
    for bom_size, bom, name in BOM_TO_ENCODING_NAME:
        if data[:bom_size] == bom:
            return name

    if (match := match_encoding(data[:256])) is not None:
        return match.group(1).decode("ascii")

    return None


__all__ = (detect_encoding.__name__,)

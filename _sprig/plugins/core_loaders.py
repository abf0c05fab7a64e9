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

"""
The ``core_loaders`` module provides the loaders that retrieve documents from objects
of the Python runtime: tag nodes, filesystem paths, binary buffers and strings.
"""

from __future__ import annotations

from contextlib import suppress
from io import IOBase, UnsupportedOperation
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from _sprig.parser import parse_document
from _sprig.plugins import plugin_manager
from _sprig.typing import _DocumentNodeType, TagNodeType

if TYPE_CHECKING:
    from types import SimpleNamespace

    from _sprig.parser import ParserOptions
    from _sprig.typing import InputStream, LoaderResult


def _file_uri(name: Any) -> Optional[str]:
    match name:
        case bytes():
            path = Path(name.decode())
        case str():
            path = Path(name)
        case _:
            return None
    path = path.absolute()
    return path.as_uri() if path.is_file() else None


def _parse(
    data: InputStream,
    config: SimpleNamespace,
    options: Optional[ParserOptions] = None,
) -> LoaderResult:
    """
    Parses a document and binds its declaration, version and encoding to the ``config``
    namespace. The options default to the document's ``parser_options``.
    """
    parsed = parse_document(data, options or config.parser_options)
    config.xml_declaration = parsed.declaration
    config.version = parsed.version
    config.encoding = parsed.encoding
    return parsed.nodes


def tag_node_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader uses a root node (of type :class:`sprig.typing.TagNodeType`) that has
    no :class:`sprig.Document` context. One that belongs to a document is cloned.
    """
    match data:
        case _DocumentNodeType():
            return tuple(n.clone(deep=True) for n in data._child_nodes)
        case TagNodeType(_parent=None):
            return (data,)
        case TagNodeType(_parent=_DocumentNodeType()):
            return (data.clone(deep=True),)
        case TagNodeType():
            return "Node has a parent node."
    return "The input value is not a TagNode instance."


@plugin_manager.register_loader()
def path_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader reads a file that is pointed at with a :class:`pathlib.Path` instance.
    Unless a ``source_url`` was passed to the document, the file's URI is bound to that
    name.
    """
    if not isinstance(data, Path):
        return "The input value is not a pathlib.Path instance."
    if not hasattr(config, "source_url"):
        config.source_url = data.absolute().as_uri()
    return _parse(data.read_bytes(), config)


@plugin_manager.register_loader(after=path_loader)
def buffer_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    This loader loads a document from a :term:`file-like object` that reads binary data.
    It's read from its start, if it can seek.
    """
    if not isinstance(data, IOBase):
        return "The input value is no buffer object."
    if not hasattr(config, "source_url") and (
        url := _file_uri(getattr(data, "name", None))
    ):
        config.source_url = url
    with suppress(UnsupportedOperation):
        data.seek(0)
    return _parse(data, config)


@plugin_manager.register_loader()
def text_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    """
    Parses a string or a byte sequence containing a full document.
    """
    if isinstance(data, (bytes, str)):
        return _parse(data, config)
    return "The input value is not a byte sequence or a string."


__all__ = (
    buffer_loader.__name__,
    path_loader.__name__,
    tag_node_loader.__name__,
    text_loader.__name__,
)

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

from collections.abc import Iterable
from importlib.metadata import entry_points
from importlib.util import find_spec
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from _sprig.typing import Loader, LoaderConstraint, SecondOrderDecorator


class PluginManager:
    __slots__ = ("loaders",)

    def __init__(self):
        self.loaders: list[Loader] = []

    @staticmethod
    def load_plugins():
        """
        Loads all modules that are registered as entrypoint in the ``sprig`` group and
        imports contributed loaders whose dependencies are available.
        """
        if find_spec("httpx"):
            import _sprig.plugins.web_loader  # noqa: F401
        if find_spec("lxml"):
            import _sprig.plugins.lxml_loader  # noqa: F401

        for entrypoint in entry_points().select(group="sprig"):
            entrypoint.load()

    def register_loader(
        self, before: LoaderConstraint = None, after: LoaderConstraint = None
    ) -> SecondOrderDecorator:
        """
        Registers a document loader.

        An example module that is specified as ``sprig`` plugin for an IPFS loader might
        look like this:

        .. testcode::

            from os import getenv
            from types import SimpleNamespace
            from typing import Any

            from _sprig.plugins import plugin_manager
            from _sprig.plugins.web_loader import web_loader
            from _sprig.typing import LoaderResult


            IPFS_GATEWAY = getenv("IPFS_GATEWAY_PREFIX", "https://ipfs.io/ipfs/")


            @plugin_manager.register_loader()
            def ipfs_loader(source: Any, config: SimpleNamespace) -> LoaderResult:
                if isinstance(source, str) and source.startswith("ipfs://"):

                    config.source_url = source
                    config.ipfs_gateway_source_url = IPFS_GATEWAY + source[7:]

                    return web_loader(config.ipfs_gateway_source_url, config)

                # return an indication why this loader didn't attempt to load in order
                # to support debugging
                return "The input value is not an URL with the ipfs scheme."


        The ``source`` argument is what a :class:`Document` instance is initialized with
        as input data. The ``config`` argument is the document's
        :attr:`sprig.Document.config` namespace, ``parser_options`` are available on
        it.

        A loader returns the nodes of a document, that is the comments and processing
        instructions before the root node and eventually the latter. A loader that
        parses data should bind the parsed XML declaration as ``xml_declaration`` to
        the ``config`` object. Loaders that retrieve a document from an URL should add
        the origin as string to the ``config`` object as ``source_url``.

        You might want to specify a loader to be considered before or after another
        one. A loader for strings that contain something else than XML would need to be
        considered before the one that parses strings:

        .. testcode::

            from _sprig.plugins import plugin_manager
            from _sprig.plugins.core_loaders import text_loader


            @plugin_manager.register_loader(before=text_loader)
            def yaml_loader(source, config) -> LoaderResult:
                # loading logic here
                pass
        """

        if before is not None and after is not None:
            raise NotImplementedError(
                "Loaders may only define one constraint atm. Please open an issue with "
                "a use-case description if you need to define both."
            )

        registered_loaders = self.loaders

        if before is not None:
            if not isinstance(before, Iterable):
                before = (before,)
            index = min(registered_loaders.index(x) for x in before)

        elif after is not None:
            if not isinstance(after, Iterable):
                after = (after,)
            index = max(registered_loaders.index(x) for x in after) + 1

        else:
            index = len(registered_loaders)

        def registrar(loader: Loader) -> Loader:
            assert callable(loader)
            registered_loaders.insert(index, loader)
            return loader

        return registrar


plugin_manager = PluginManager()


__all__ = ("plugin_manager",)

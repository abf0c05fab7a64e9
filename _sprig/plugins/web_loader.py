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
Documents with ``http`` and ``https`` URLs are fetched with httpx_. If ``sprig`` is
installed with ``web-loader`` as extra, that dependency is installed as well.

.. _httpx: https://www.python-httpx.org/
"""

from __future__ import annotations

from importlib.util import find_spec
from typing import TYPE_CHECKING, Any, Final

import httpx

from _sprig.plugins import plugin_manager
from _sprig.plugins.core_loaders import _parse, text_loader

if TYPE_CHECKING:
    from types import SimpleNamespace

    from _sprig.parser import ParserOptions
    from _sprig.typing import LoaderResult


DEFAULT_CLIENT: Final = httpx.Client(
    follow_redirects=True, http2=find_spec("h2") is not None
)
SCHEMES: Final = ("http://", "https://")


def _effective_options(
    response: httpx.Response, options: ParserOptions
) -> ParserOptions:
    # a charset from the Content-Type header takes precedence over what the document
    # declares, unless an encoding is explicitly configured
    if options.encoding is None and (charset := response.charset_encoding):
        return options._replace(encoding=charset)
    return options


@plugin_manager.register_loader(before=text_loader)
def web_loader(
    data: Any, config: SimpleNamespace, client: httpx.Client = DEFAULT_CLIENT
) -> LoaderResult:
    """
    This loader fetches a document from a URL with the ``http`` or ``https`` scheme.
    The default client follows redirects and can partially be configured with
    `environment variables`_. The URL is bound to the name ``source_url`` and the
    response's media type to ``content_type`` on the document's
    :attr:`sprig.Document.config` attribute.

    The body is decoded with the charset that the response declares, then the
    encoding that the document itself indicates applies. Responses with an error
    status are excuses to the loading.

    A loader with a differently configured client can build on this one:

    .. testcode::

        import httpx
        from _sprig.plugins import plugin_manager
        from _sprig.plugins.web_loader import web_loader


        client = httpx.Client(follow_redirects=False, trust_env=False)

        @plugin_manager.register_loader(before=web_loader)
        def custom_web_loader(data, config):
            return web_loader(data, config, client=client)

    .. _environment variables: https://www.python-httpx.org/environment_variables/
    """
    if not (isinstance(data, str) and data.lower().startswith(SCHEMES)):
        return "The input value is not an URL with the http or https scheme."

    response = client.get(data)
    response.raise_for_status()

    config.source_url = data
    config.content_type = response.headers.get("content-type")
    return _parse(
        response.content,
        config,
        _effective_options(response, config.parser_options),
    )


__all__ = (web_loader.__name__,)

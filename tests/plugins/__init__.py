from __future__ import annotations

from typing import TYPE_CHECKING, Any

from _sprig.plugins import plugin_manager
from _sprig.plugins.core_loaders import text_loader

if TYPE_CHECKING:
    from types import SimpleNamespace

    from _sprig.typing import LoaderResult


SAMPLES = {
    "library": '<library><book id="1">Dune</book><book id="2">Emma</book></library>',
}


@plugin_manager.register_loader(before=text_loader)
def sample_loader(data: Any, config: SimpleNamespace) -> LoaderResult:
    if isinstance(data, str) and data.startswith("sample://"):
        config.source_url = data
        return text_loader(SAMPLES[data[9:]], config)
    return "The input value is not a sample URL."

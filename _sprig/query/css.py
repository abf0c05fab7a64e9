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
Evaluation of a subset of CSS selectors. The selectors are parsed with :mod:`cssselect`
and the resulting trees are compiled into node filters.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from cssselect import parse as parse_selectors
from cssselect.parser import Attrib, Class, CombinedSelector, Element, Hash

from _sprig.exceptions import UnsupportedSelector
from _sprig.typing import TagNodeType

if TYPE_CHECKING:
    from _sprig.typing import Filter, XMLNodeType


def _attribute_value(value) -> str:
    # cssselect wraps values in tokens since version 1.0
    return getattr(value, "value", value)


def _compile(selector, expression: str) -> Filter:  # noqa: C901
    match selector:
        case Element():
            if selector.namespace is not None:
                raise UnsupportedSelector(expression, "Namespace prefixes")
            name = selector.element
            if name is None or name == "*":
                return _is_tag_node
            return lambda n: n.name == name

        case Hash():
            base = _compile(selector.selector, expression)
            id_ = selector.id
            return lambda n: base(n) and n.attributes.get("id") == id_

        case Class():
            base = _compile(selector.selector, expression)
            class_name = selector.class_name
            return lambda n: base(n) and class_name in n.attributes.get(
                "class", ""
            ).split()

        case Attrib():
            if selector.namespace is not None:
                raise UnsupportedSelector(expression, "Namespace prefixes")
            base = _compile(selector.selector, expression)
            name = selector.attrib
            match selector.operator:
                case "exists":
                    return lambda n: base(n) and name in n.attributes
                case "=":
                    value = _attribute_value(selector.value)
                    return lambda n: base(n) and n.attributes.get(name) == value
                case "~=":
                    value = _attribute_value(selector.value)
                    return lambda n: base(n) and value in n.attributes.get(
                        name, ""
                    ).split()
                case operator:
                    raise UnsupportedSelector(
                        expression, f"The attribute operator `{operator}`"
                    )

        case CombinedSelector():
            left = _compile(selector.selector, expression)
            right = _compile(selector.subselector, expression)
            match selector.combinator:
                case " ":
                    return lambda n: right(n) and any(
                        left(a) for a in n.iterate_ancestors()
                    )
                case ">":
                    return lambda n: right(n) and (
                        (p := n.parent) is not None and left(p)
                    )
                case combinator:
                    raise UnsupportedSelector(
                        expression, f"The combinator `{combinator}`"
                    )

    raise UnsupportedSelector(expression, f"The construct `{selector!r}`")


def _is_tag_node(node: XMLNodeType) -> bool:
    return isinstance(node, TagNodeType)


@lru_cache(maxsize=64)
def _css_to_filter(expression: str) -> Filter:
    """
    Compiles a group of CSS selectors into a filter that matches tag nodes that
    are matched by any of the selectors.
    """
    filters = []
    for selector in parse_selectors(expression):
        if selector.pseudo_element is not None:
            raise UnsupportedSelector(expression, "Pseudo-elements")
        filters.append(_compile(selector.parsed_tree, expression))

    def css_filter(node: XMLNodeType) -> bool:
        return isinstance(node, TagNodeType) and any(f(node) for f in filters)

    return css_filter


__all__ = (_css_to_filter.__name__,)

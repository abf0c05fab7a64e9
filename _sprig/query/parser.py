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
from functools import lru_cache
from typing import Final

from _sprig.query.ast import (
    AttributeEquals,
    ChildrenStep,
    FilteredStep,
    HasAttribute,
    IndexPredicate,
    NameStep,
    NoneStep,
    ParentStep,
    PathExpression,
    PredicateNode,
    SelfStep,
    StepNode,
    TextEquals,
    UnsupportedPredicate,
)


index_pattern: Final = re.compile(r"[+-]?[0-9]+")


def strip_quotes(value: str) -> str:
    """
    Removes one pair of matching single or double quotes that enclose a value.

    >>> strip_quotes("'fiction'")
    'fiction'
    """
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


def parse_predicate(expression: str) -> PredicateNode:
    if index_pattern.fullmatch(expression):
        return IndexPredicate(int(expression))

    if expression.startswith("@"):
        expression = expression[1:]
        if "=" not in expression:
            return HasAttribute(expression)
        name, _, value = expression.partition("=")
        if not (name and value):
            return UnsupportedPredicate(expression)
        return AttributeEquals(name, strip_quotes(value))

    if expression.startswith("text()") and "=" in expression:
        _, _, value = expression.partition("=")
        if not value:
            return UnsupportedPredicate(expression)
        return TextEquals(strip_quotes(value))

    return UnsupportedPredicate(expression)


def parse_step(segment: str) -> StepNode:
    match segment:
        case "*":
            return ChildrenStep()
        case "..":
            return ParentStep()
        case ".":
            return SelfStep()

    if "[" in segment and "]" in segment:
        opening, closing = segment.index("["), segment.rindex("]")
        if opening > closing:
            return NoneStep()

        name = segment[:opening]
        return FilteredStep(
            name_step=ChildrenStep() if name == "*" else NameStep(name),
            predicate=parse_predicate(segment[opening + 1 : closing]),
        )

    return NameStep(segment)


@lru_cache(64)
def parse(expression: str) -> PathExpression:
    """
    Parses a path expression into an evaluable object. Parsing never fails, steps and
    predicates that aren't understood are represented by nodes that match nothing.
    """
    expression = expression.strip()
    if expression == "/":
        return PathExpression(steps=(SelfStep(),), absolute=True)

    absolute = expression.startswith("/")
    return PathExpression(
        steps=(parse_step(s) for s in expression.split("/") if s),
        absolute=absolute,
    )


__all__ = ("parse",)

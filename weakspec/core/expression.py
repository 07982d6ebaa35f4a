# Copyright Rand Arete @ Weakspec 2025
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Expressions classifying a single invocation slot of an axiom.

An expression says which invocations an axiom coordinate still constrains:

    *        WILDCARD   every invocation (the unweakened axiom)
    A        ATOMIC     only invocations flagged atomic
    <name>   Named      only invocations of the named method
    !        BOTTOM     no invocation at all

Per coordinate the order is WILDCARD ⊐ {ATOMIC, Named(m)} ⊐ BOTTOM, where
ATOMIC and every Named(m) are pairwise incomparable.

Weakening an expression tuple relaxes one WILDCARD coordinate at a time to
ATOMIC. A coordinate that is already below WILDCARD cannot be relaxed
further and yields an all-BOTTOM candidate instead.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence, Tuple

from .comparison import Comparison

if TYPE_CHECKING:
    from .program import Invocation

logger = logging.getLogger(__name__)

ExpressionTuple = Tuple["Expression", ...]


class Expression(ABC):
    """Abstract base class for the four expression variants.

    The variants are a closed set: WildcardExpression, AtomicExpression,
    BottomExpression and NamedExpression. Functions in this module dispatch
    on them with isinstance checks.
    """

    __slots__ = ()

    @abstractmethod
    def __eq__(self, other: object) -> bool:
        raise NotImplementedError

    @abstractmethod
    def __hash__(self) -> int:
        raise NotImplementedError


class WildcardExpression(Expression):
    """Matches every invocation. Top of the per-coordinate order.

    This is a singleton class - use WILDCARD instead of instantiating directly.
    """

    __slots__ = ()

    _instance: WildcardExpression | None = None

    def __new__(cls) -> WildcardExpression:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: object) -> bool:
        return isinstance(other, WildcardExpression)

    def __hash__(self) -> int:
        return hash("*")

    def __repr__(self) -> str:
        return "*"


class AtomicExpression(Expression):
    """Matches atomic invocations only.

    This is a singleton class - use ATOMIC instead of instantiating directly.
    """

    __slots__ = ()

    _instance: AtomicExpression | None = None

    def __new__(cls) -> AtomicExpression:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: object) -> bool:
        return isinstance(other, AtomicExpression)

    def __hash__(self) -> int:
        return hash("A")

    def __repr__(self) -> str:
        return "A"


class BottomExpression(Expression):
    """Matches nothing. Bottom of the per-coordinate order.

    This is a singleton class - use BOTTOM instead of instantiating directly.
    """

    __slots__ = ()

    _instance: BottomExpression | None = None

    def __new__(cls) -> BottomExpression:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other: object) -> bool:
        return isinstance(other, BottomExpression)

    def __hash__(self) -> int:
        return hash("!")

    def __repr__(self) -> str:
        return "!"


@dataclass(frozen=True, slots=True)
class NamedExpression(Expression):
    """Matches invocations of a single method.

    Attributes:
        method: The method name
    """

    method: str

    def __repr__(self) -> str:
        return self.method


WILDCARD: WildcardExpression = WildcardExpression()
ATOMIC: AtomicExpression = AtomicExpression()
BOTTOM: BottomExpression = BottomExpression()


def expression_of(text: str) -> Expression:
    """Parse the text form of an expression ("*", "A", "!" or a method name)."""
    if text == "*":
        return WILDCARD
    if text == "A":
        return ATOMIC
    if text == "!":
        return BOTTOM
    return NamedExpression(text)


def is_top(*exprs: Expression) -> bool:
    """True when every expression is WILDCARD."""
    return all(isinstance(e, WildcardExpression) for e in exprs)


def is_bottom(*exprs: Expression) -> bool:
    """True when some expression is BOTTOM."""
    return any(isinstance(e, BottomExpression) for e in exprs)


def compare(e1: Expression, e2: Expression) -> Comparison:
    """Compare two expressions in the per-coordinate order."""
    if e1 == e2:
        return Comparison.EQUAL

    if isinstance(e1, WildcardExpression) or isinstance(e2, BottomExpression):
        return Comparison.GREATER

    if isinstance(e1, BottomExpression) or isinstance(e2, WildcardExpression):
        return Comparison.LESSER

    return Comparison.INCOMPARABLE


def match(invocation: Invocation, expr: Expression) -> bool:
    """Check whether an invocation falls under an expression."""
    if isinstance(expr, WildcardExpression):
        result = True
    elif isinstance(expr, BottomExpression):
        result = False
    elif isinstance(expr, AtomicExpression):
        result = bool(invocation.atomic)
    elif isinstance(expr, NamedExpression):
        result = expr.method == invocation.method.name
    else:
        raise TypeError(f"unknown expression variant: {expr!r}")

    logger.debug("match(%s, %r) = %s", invocation, expr, result)
    return result


def classify(invocation: Invocation) -> Expression:
    """The expression an observed invocation is classified as."""
    return ATOMIC if invocation.atomic else WILDCARD


def weaken(exprs: Sequence[Expression]) -> List[ExpressionTuple]:
    """Compute the immediate weakenings of an expression tuple.

    Each WILDCARD coordinate yields the tuple with that coordinate set to
    ATOMIC; every other coordinate yields an all-BOTTOM tuple. Candidates
    containing BOTTOM are dropped unless that would leave nothing, in which
    case the unfiltered candidates are returned so the caller sees BOTTOM.

    Args:
        exprs: The tuple to weaken

    Returns:
        One candidate per coordinate, filtered as described
    """
    weakenings: List[ExpressionTuple] = []
    for idx, expr in enumerate(exprs):
        if not isinstance(expr, WildcardExpression):
            weakenings.append(tuple(BOTTOM for _ in exprs))
            continue
        candidate = list(exprs)
        candidate[idx] = ATOMIC
        weakenings.append(tuple(candidate))

    filtered = [ws for ws in weakenings if not is_bottom(*ws)]
    result = filtered if filtered else weakenings

    logger.debug(
        "weaken(%s) = %s",
        ",".join(repr(e) for e in exprs),
        " | ".join(",".join(repr(e) for e in ws) for ws in result),
    )
    return result


def meet(*exprs: Expression) -> Expression:
    """Greatest lower bound of expressions, BOTTOM when two are incomparable."""
    if not exprs:
        raise ValueError("meet of no expressions")

    result = exprs[0]
    for expr in exprs:
        cmp = compare(result, expr)
        if cmp == Comparison.GREATER:
            result = expr
        elif cmp == Comparison.INCOMPARABLE:
            result = BOTTOM
    return result

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
"""Consistency levels: the lattice value of a single attribute.

A level of dimension d is an antichain of d-tuples of expressions (its
maximal elements). The level admits an observed case exactly when none of
its maximals still dominates that case's classification.

Order:
    L₁ ⊒ L₂  iff  every maximal of L₂ is dominated by some maximal of L₁

Distinguished levels:
    top(d)     {(*, …, *)}   the axiom holds unconditionally
    atomic(d)  {(A, …, A)}   the axiom holds among atomic invocations only
    bottom(d)  {(!, …, !)}   no attribute value satisfies the observations

Weakening only ever moves a level downward, and every operation returns a
fresh level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Tuple

from . import expression as expr
from .comparison import Comparison, compare_tuples
from .expression import ATOMIC, BOTTOM, WILDCARD, ExpressionTuple

if TYPE_CHECKING:
    from .program import Invocation

logger = logging.getLogger(__name__)


def _compare_exprs(t1: ExpressionTuple, t2: ExpressionTuple) -> Comparison:
    return compare_tuples(t1, t2, expr.compare)


def _antichain(tuples: Iterable[ExpressionTuple]) -> Tuple[ExpressionTuple, ...]:
    """Insert tuples one by one, keeping only maximal elements."""
    maximals: List[ExpressionTuple] = []
    for elem in tuples:
        redundant = any(
            _compare_exprs(elem, maximal).is_lesser_or_equal for maximal in maximals
        )
        if redundant:
            continue
        maximals = [
            maximal
            for maximal in maximals
            if _compare_exprs(elem, maximal) != Comparison.GREATER
        ]
        maximals.append(elem)
    return tuple(maximals)


@dataclass(frozen=True, slots=True, init=False)
class ConsistencyLevel:
    """An antichain of expression tuples of a fixed dimension.

    Attributes:
        maximals: The maximal expression tuples, pairwise incomparable
    """

    maximals: Tuple[ExpressionTuple, ...]

    def __init__(self, maximals: Iterable[Iterable[expr.Expression]]) -> None:
        tuples = [tuple(m) for m in maximals]
        if not tuples:
            raise ValueError("a consistency level needs at least one maximal")

        dimension = len(tuples[0])
        if dimension == 0:
            raise ValueError("a consistency level needs a positive dimension")
        if any(len(t) != dimension for t in tuples):
            raise ValueError(
                f"jagged maximals for a level of dimension {dimension}: {tuples}"
            )

        object.__setattr__(self, "maximals", _antichain(tuples))

    @classmethod
    def top(cls, dimension: int) -> ConsistencyLevel:
        return cls([tuple(WILDCARD for _ in range(dimension))])

    @classmethod
    def atomic(cls, dimension: int) -> ConsistencyLevel:
        return cls([tuple(ATOMIC for _ in range(dimension))])

    @classmethod
    def bottom(cls, dimension: int) -> ConsistencyLevel:
        return cls([tuple(BOTTOM for _ in range(dimension))])

    @property
    def dimension(self) -> int:
        return len(self.maximals[0])

    def is_weak(self) -> bool:
        """True when some maximal is not all-WILDCARD."""
        return any(not expr.is_top(*m) for m in self.maximals)

    def is_bottom(self) -> bool:
        """True when some maximal contains BOTTOM."""
        return any(expr.is_bottom(*m) for m in self.maximals)

    def compare(self, other: ConsistencyLevel) -> Comparison:
        """Compare two levels of the same dimension.

        Raises:
            ValueError: If the dimensions differ
        """
        if self.dimension != other.dimension:
            raise ValueError(
                f"cannot compare levels of dimension {self.dimension} "
                f"and {other.dimension}"
            )

        gte = all(
            any(_compare_exprs(m1, m2).is_greater_or_equal for m1 in self.maximals)
            for m2 in other.maximals
        )
        lte = all(
            any(_compare_exprs(m1, m2).is_lesser_or_equal for m2 in other.maximals)
            for m1 in self.maximals
        )
        neq = set(self.maximals) != set(other.maximals)

        if gte and neq:
            return Comparison.GREATER
        if lte and neq:
            return Comparison.LESSER
        if gte and lte:
            return Comparison.EQUAL
        return Comparison.INCOMPARABLE

    def weaken(self, *invocations: Invocation) -> ConsistencyLevel:
        """Relax the level until it admits the observed invocations.

        Each maximal that still dominates the classification of the
        invocations is replaced by its weakenings, repeatedly, until every
        surviving tuple falls below or beside the classification. Reaching an
        all-BOTTOM tuple collapses the whole level to bottom.

        Args:
            invocations: One observed invocation per coordinate

        Returns:
            The weakened level (this level itself when nothing changed)

        Raises:
            ValueError: If the number of invocations differs from the dimension
        """
        if len(invocations) != self.dimension:
            raise ValueError(
                f"expected {self.dimension} invocations, got {len(invocations)}"
            )

        if self.is_bottom():
            return self

        excluded = tuple(expr.classify(i) for i in invocations)
        worklist: List[ExpressionTuple] = list(self.maximals)
        maximals: List[ExpressionTuple] = []

        while worklist:
            elem = worklist.pop(0)

            if expr.is_bottom(*elem):
                logger.debug("weaken-level(%s) reached bottom", excluded)
                return ConsistencyLevel.bottom(self.dimension)

            if _compare_exprs(elem, excluded).is_greater_or_equal:
                worklist[0:0] = expr.weaken(elem)
                continue

            redundant = any(
                _compare_exprs(elem, maximal).is_lesser_or_equal
                for maximal in maximals
            )
            if not redundant:
                maximals = [
                    maximal
                    for maximal in maximals
                    if _compare_exprs(elem, maximal) != Comparison.GREATER
                ]
                maximals.append(elem)

        result = ConsistencyLevel(maximals)
        logger.debug("weaken-level(%s) = %s", excluded, result)
        return self if result == self else result

    def satisfies(self, *invocations: Invocation) -> bool:
        """Check whether the invocations match this level's single tuple.

        Raises:
            ValueError: If the level has several maximals or the number of
                invocations differs from the dimension
        """
        if len(self.maximals) != 1:
            raise ValueError("satisfies is only defined for single-tuple levels")
        if len(invocations) != self.dimension:
            raise ValueError(
                f"expected {self.dimension} invocations, got {len(invocations)}"
            )
        (exprs,) = self.maximals
        return all(expr.match(i, e) for i, e in zip(invocations, exprs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConsistencyLevel):
            return NotImplemented
        return set(self.maximals) == set(other.maximals)

    def __hash__(self) -> int:
        return hash(frozenset(self.maximals))

    def __str__(self) -> str:
        return "|".join(",".join(repr(e) for e in m) for m in self.maximals)

    def __repr__(self) -> str:
        return f"ConsistencyLevel({self})"

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
"""Partial-order comparison results and the relaxed product order.

Every value in the consistency lattice (expressions, expression tuples,
levels, whole consistency points) is compared through the same four-valued
result. Tuples of comparable values are ordered by a relaxed product order:

    (x₁, …, xₙ) ⊑ (y₁, …, yₙ)  iff  every non-equal coordinate agrees
                                     on one direction

The fold short-circuits as soon as two coordinates disagree.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")


class Comparison(Enum):
    """Outcome of comparing two lattice values.

    EQUAL: Both values denote the same point
    LESSER: The left value is strictly weaker (lower)
    GREATER: The left value is strictly stronger (higher)
    INCOMPARABLE: Neither dominates the other
    """

    EQUAL = "="
    LESSER = "<"
    GREATER = ">"
    INCOMPARABLE = "<>"

    @property
    def is_greater_or_equal(self) -> bool:
        return self in (Comparison.GREATER, Comparison.EQUAL)

    @property
    def is_lesser_or_equal(self) -> bool:
        return self in (Comparison.LESSER, Comparison.EQUAL)

    def flip(self) -> Comparison:
        """Return the comparison seen from the other operand."""
        if self == Comparison.LESSER:
            return Comparison.GREATER
        if self == Comparison.GREATER:
            return Comparison.LESSER
        return self

    def __str__(self) -> str:
        return self.value


def compare_tuples(
    left: Sequence[T],
    right: Sequence[T],
    compare: Callable[[T, T], Comparison],
) -> Comparison:
    """Compare two equal-length sequences coordinate-wise.

    Equal coordinates are neutral. The first non-equal coordinate fixes the
    direction; any later coordinate pointing the other way (or incomparable)
    makes the whole result INCOMPARABLE.

    Args:
        left: Left operand
        right: Right operand
        compare: Per-coordinate comparator

    Returns:
        The folded comparison

    Raises:
        ValueError: If the sequences are empty or of different lengths
    """
    if not left:
        raise ValueError("cannot compare empty sequences")
    if len(left) != len(right):
        raise ValueError(
            f"cannot compare sequences of length {len(left)} and {len(right)}"
        )

    result = Comparison.EQUAL
    for x, y in zip(left, right):
        cmp = compare(x, y)
        if cmp == Comparison.EQUAL:
            continue
        if result == Comparison.EQUAL:
            result = cmp
        elif result != cmp:
            result = Comparison.INCOMPARABLE

        if result == Comparison.INCOMPARABLE:
            break

    return result

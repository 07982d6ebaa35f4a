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
"""Order relations over the invocations of one candidate execution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Dict,
    FrozenSet,
    Iterable,
    List,
    Protocol,
    Tuple,
    runtime_checkable,
)

from .program import Invocation, Program


@runtime_checkable
class Relation(Protocol):
    """One axis (po, lin or vis) of a candidate execution."""

    def values(self) -> List[Invocation]:
        """All invocations the relation ranges over."""
        ...

    def before(self, invocation: Invocation) -> List[Invocation]:
        """Invocations ordered before the given one."""
        ...

    def is_before(self, i1: Invocation, i2: Invocation) -> bool:
        ...


@dataclass(frozen=True)
class OrderRelation:
    """An explicit relation given by its ordered pairs.

    The relation is taken as given; it is not closed transitively unless
    built with one of the constructors that say so.

    Attributes:
        invocations: The carrier, in a stable order
        pairs: (before, after) pairs
    """

    invocations: Tuple[Invocation, ...]
    pairs: FrozenSet[Tuple[Invocation, Invocation]]

    @classmethod
    def of(
        cls,
        invocations: Iterable[Invocation],
        pairs: Iterable[Tuple[Invocation, Invocation]],
    ) -> OrderRelation:
        return cls(tuple(invocations), frozenset(pairs))

    @classmethod
    def total(cls, invocations: Iterable[Invocation]) -> OrderRelation:
        """A total order following the given sequence (e.g. a linearization)."""
        ordered = tuple(invocations)
        pairs = {
            (ordered[i], ordered[j])
            for i in range(len(ordered))
            for j in range(i + 1, len(ordered))
        }
        return cls(ordered, frozenset(pairs))

    @classmethod
    def program_order(cls, program: Program) -> OrderRelation:
        """Per-session order of a program, transitively closed.

        Extra ordering pairs in program.order (by invocation id) are added
        as given.
        """
        carrier = tuple(program.invocations())
        pairs = set()
        for sequence in program.sequences:
            invocations = sequence.invocations
            for i in range(len(invocations)):
                for j in range(i + 1, len(invocations)):
                    pairs.add((invocations[i], invocations[j]))

        by_id: Dict[int, Invocation] = {
            i.id: i for i in carrier if i.id is not None
        }
        for before_id, after_id in program.order:
            pairs.add((by_id[before_id], by_id[after_id]))

        return cls(carrier, frozenset(pairs))

    def values(self) -> List[Invocation]:
        return list(self.invocations)

    def before(self, invocation: Invocation) -> List[Invocation]:
        return [i for i in self.invocations if (i, invocation) in self.pairs]

    def is_before(self, i1: Invocation, i2: Invocation) -> bool:
        return (i1, i2) in self.pairs

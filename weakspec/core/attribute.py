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
"""Consistency attributes: the axioms whose strength is mined.

Two shapes of attribute exist:

- SimpleAttribute: an opaque one-slot property flag such as "consistent
  returns". It has no structural check of its own.
- RelationalAttribute: a two-slot containment axiom ``rel ⊇ comp(base)``
  between the relations of one candidate execution, where comp is one of

      .  Simple   base itself
      L  Left     rel ; base  (i1 rel-before i, i base-before i2)
      R  Right    base ; rel  (i1 base-before i, i rel-before i2)

The ATTRIBUTES registry lists the nine axioms every Consistency carries, in
a fixed order.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterator, List, Tuple, Union

if TYPE_CHECKING:
    from .program import Invocation
    from .relation import Relation

logger = logging.getLogger(__name__)


# Relation and property names
PROGRAM_ORDER = "po"
LINEARIZATION = "lin"
VISIBILITY = "vis"
CONSISTENT_RETURNS = "ret"


class Composition(Enum):
    """How the base relation is composed before containment is required."""

    SIMPLE = "."
    LEFT = "L"
    RIGHT = "R"

    def __str__(self) -> str:
        return self.value


class Attribute(ABC):
    """Common surface of the two attribute shapes."""

    __slots__ = ()

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Number of invocation slots in this attribute's levels."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class SimpleAttribute(Attribute):
    """A one-slot property attribute.

    Attributes:
        name: Property name
    """

    name: str

    @property
    def dimension(self) -> int:
        return 1

    def __str__(self) -> str:
        return f"W({self.name})"


@dataclass(frozen=True, slots=True)
class RelationalAttribute(Attribute):
    """A two-slot containment axiom between execution relations.

    Attributes:
        rel_name: Name of the containing relation
        base_name: Name of the relation being composed and contained
        composition: Composition applied to the base relation
    """

    rel_name: str
    base_name: str
    composition: Composition = Composition.SIMPLE

    @property
    def dimension(self) -> int:
        return 2

    def same_kind(self, rel_name: str, base_name: str) -> bool:
        return self.rel_name == rel_name and self.base_name == base_name

    def satisfies_base(
        self, rel: Relation, base: Relation, i1: Invocation, i2: Invocation
    ) -> bool:
        """Whether (i1, i2) belongs to the composed base relation."""
        if self.composition == Composition.SIMPLE:
            return base.is_before(i1, i2)
        if self.composition == Composition.LEFT:
            return any(rel.is_before(i1, i) for i in base.before(i2))
        return any(base.is_before(i1, i) for i in rel.before(i2))

    def satisfies_body(
        self,
        rel_name: str,
        base_name: str,
        rel: Relation,
        base: Relation,
        i1: Invocation,
        i2: Invocation,
    ) -> bool:
        """Whether the axiom applies to (i1, i2) at all."""
        result = self.same_kind(rel_name, base_name) and self.satisfies_base(
            rel, base, i1, i2
        )
        logger.debug(
            "%s.satisfies_body(%s, %s, _, _, %s, %s) = %s",
            self, rel_name, base_name, i1, i2, result,
        )
        return result

    def satisfies_head(self, rel: Relation, i1: Invocation, i2: Invocation) -> bool:
        return rel.is_before(i1, i2)

    def satisfies(
        self,
        rel_name: str,
        base_name: str,
        rel: Relation,
        base: Relation,
        i1: Invocation,
        i2: Invocation,
    ) -> bool:
        """The axiom's implication: body ⇒ head."""
        return not self.satisfies_body(
            rel_name, base_name, rel, base, i1, i2
        ) or self.satisfies_head(rel, i1, i2)

    def candidates(
        self, rel: Relation, base: Relation, i2: Invocation
    ) -> List[Invocation]:
        """Invocations i1 that may be ordered before i2 by the composed base."""
        if self.composition == Composition.SIMPLE:
            gathered = list(base.before(i2))
        elif self.composition == Composition.LEFT:
            gathered = [i1 for i in base.before(i2) for i1 in rel.before(i)]
        else:
            gathered = [i1 for i in rel.before(i2) for i1 in base.before(i)]
        return list(dict.fromkeys(gathered))

    def _pairs(
        self, rel: Relation, base: Relation
    ) -> Iterator[Tuple[Invocation, Invocation]]:
        for i2 in base.values():
            for i1 in self.candidates(rel, base, i2):
                yield i1, i2

    def satisfies_all(
        self, rel_name: str, base_name: str, rel: Relation, base: Relation
    ) -> bool:
        """Whether every candidate pair of the execution satisfies the axiom."""
        result = all(
            self.satisfies(rel_name, base_name, rel, base, i1, i2)
            for i1, i2 in self._pairs(rel, base)
        )
        logger.debug(
            "%s.satisfies_all(%s, %s, _, _) = %s", self, rel_name, base_name, result
        )
        return result

    def unsat_pairs(
        self, rel_name: str, base_name: str, rel: Relation, base: Relation
    ) -> List[Tuple[Invocation, Invocation]]:
        """All candidate pairs of the execution violating the axiom."""
        pairs = [
            (i1, i2)
            for i1, i2 in self._pairs(rel, base)
            if not self.satisfies(rel_name, base_name, rel, base, i1, i2)
        ]
        logger.debug(
            "%s.unsat_pairs(%s, %s, _, _) = %d pairs",
            self, rel_name, base_name, len(pairs),
        )
        return pairs

    def __str__(self) -> str:
        return f"W({self.rel_name},{self.base_name})[{self.composition}]"


AnyAttribute = Union[SimpleAttribute, RelationalAttribute]


ATTRIBUTES: Dict[str, AnyAttribute] = {
    "lin_contains_po": RelationalAttribute(LINEARIZATION, PROGRAM_ORDER),
    "vis_contains_po": RelationalAttribute(VISIBILITY, PROGRAM_ORDER),
    "vis_contains_vis_X_po": RelationalAttribute(
        VISIBILITY, PROGRAM_ORDER, Composition.LEFT
    ),
    "vis_contains_po_X_vis": RelationalAttribute(
        VISIBILITY, PROGRAM_ORDER, Composition.RIGHT
    ),
    "vis_contains_lin": RelationalAttribute(VISIBILITY, LINEARIZATION),
    "vis_contains_vis_X_lin": RelationalAttribute(
        VISIBILITY, LINEARIZATION, Composition.LEFT
    ),
    "vis_contains_lin_X_vis": RelationalAttribute(
        VISIBILITY, LINEARIZATION, Composition.RIGHT
    ),
    "vis_is_transitive": RelationalAttribute(
        VISIBILITY, VISIBILITY, Composition.LEFT
    ),
    "consistent_returns": SimpleAttribute(CONSISTENT_RETURNS),
}


def attribute_named(key: str) -> AnyAttribute:
    """Look up a registered attribute by key.

    Raises:
        KeyError: If no attribute is registered under the key
    """
    try:
        return ATTRIBUTES[key]
    except KeyError:
        raise KeyError(f"unknown consistency attribute: {key!r}") from None

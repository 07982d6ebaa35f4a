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
"""Consistency points in the product lattice of attribute levels.

A Consistency assigns one ConsistencyLevel to each registered attribute:

    C = (L_lin⊇po, L_vis⊇po, …, L_ret)

Points are compared with the relaxed product order over their levels, taken
in registry order. They start at top() and only move down as counter-examples
are observed: each weakening entry point returns a new point that differs
only in the changed levels, or the same point when nothing changed.

Several incomparable points are collected with join() into a
ConsistencyDisjunction, an antichain under Consistency.compare.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    TYPE_CHECKING,
    Dict,
    ItemsView,
    Iterator,
    List,
    Mapping,
    Tuple,
)

from .attribute import ATTRIBUTES, RelationalAttribute, SimpleAttribute, attribute_named
from .comparison import Comparison, compare_tuples
from .expression import classify
from .level import ConsistencyLevel

if TYPE_CHECKING:
    from .program import Invocation
    from .relation import Relation

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, init=False)
class Consistency:
    """One level per registered attribute.

    Attributes:
        levels: Read-only mapping from attribute key to level, in registry order
    """

    levels: Mapping[str, ConsistencyLevel]

    def __init__(self, levels: Mapping[str, ConsistencyLevel]) -> None:
        missing = [key for key in ATTRIBUTES if key not in levels]
        unknown = [key for key in levels if key not in ATTRIBUTES]
        if missing or unknown:
            raise ValueError(
                f"consistency levels must cover the registered attributes "
                f"(missing={missing}, unknown={unknown})"
            )

        ordered: Dict[str, ConsistencyLevel] = {}
        for key, attribute in ATTRIBUTES.items():
            level = levels[key]
            if level.dimension != attribute.dimension:
                raise ValueError(
                    f"level {level} has dimension {level.dimension}, "
                    f"attribute {attribute} needs {attribute.dimension}"
                )
            ordered[key] = level

        object.__setattr__(self, "levels", MappingProxyType(ordered))

    @classmethod
    def top(cls) -> Consistency:
        """The strongest point: every attribute unweakened."""
        return cls(
            {
                key: ConsistencyLevel.top(attribute.dimension)
                for key, attribute in ATTRIBUTES.items()
            }
        )

    @staticmethod
    def join(*points: Consistency) -> ConsistencyDisjunction:
        """Reduce points to the antichain of their maximal elements."""
        results: List[Consistency] = []
        for point in points:
            if any(kept.compare(point).is_greater_or_equal for kept in results):
                continue
            results = [
                kept for kept in results if point.compare(kept) != Comparison.GREATER
            ]
            results.append(point)
        return ConsistencyDisjunction(tuple(results))

    def level(self, key: str) -> ConsistencyLevel:
        return self.levels[key]

    def items(self) -> ItemsView[str, ConsistencyLevel]:
        return self.levels.items()

    def includes(self, key: str, level: ConsistencyLevel) -> bool:
        """Whether this point's level for key is at least as strong as level."""
        return self.levels[key].compare(level).is_greater_or_equal

    def is_weak(self) -> bool:
        return any(level.is_weak() for level in self.levels.values())

    def has_bottom(self) -> bool:
        """Whether some attribute admits no value consistent with observations."""
        return any(level.is_bottom() for level in self.levels.values())

    def compare(self, other: Consistency) -> Comparison:
        """Compare two points level by level in registry order.

        Raises:
            ValueError: If the points carry different attribute sets
        """
        if set(self.levels) != set(other.levels):
            raise ValueError("cannot compare consistencies over different attributes")
        keys = list(self.levels)
        return compare_tuples(
            [self.levels[key] for key in keys],
            [other.levels[key] for key in keys],
            lambda l1, l2: l1.compare(l2),
        )

    def _replace(self, updates: Mapping[str, ConsistencyLevel]) -> Consistency:
        if not updates:
            return self
        levels = dict(self.levels)
        levels.update(updates)
        return Consistency(levels)

    def weaken_simple_level(self, key: str, invocation: Invocation) -> Consistency:
        """Weaken a simple attribute by one observed invocation.

        Raises:
            TypeError: If key does not name a simple attribute
        """
        attribute = attribute_named(key)
        if not isinstance(attribute, SimpleAttribute):
            raise TypeError(f"{attribute} is not a simple attribute")

        old_level = self.levels[key]
        new_level = old_level.weaken(invocation)
        if new_level == old_level:
            return self

        logger.debug(
            "weakening attribute %s with %r invocation from %s to %s",
            attribute, classify(invocation), old_level, new_level,
        )
        return self._replace({key: new_level})

    def weaken_relational_level(
        self,
        rel_name: str,
        base_name: str,
        rel: Relation,
        base: Relation,
        i1: Invocation,
        i2: Invocation,
    ) -> Consistency:
        """Weaken every relational attribute violated by the pair (i1, i2)."""
        updates: Dict[str, ConsistencyLevel] = {}
        for key, level in self.levels.items():
            attribute = ATTRIBUTES[key]
            if not isinstance(attribute, RelationalAttribute):
                continue
            if attribute.satisfies(rel_name, base_name, rel, base, i1, i2):
                continue

            new_level = level.weaken(i1, i2)
            logger.debug(
                "weakening attribute %s for [%s/%r,%s/%r] from %s to %s",
                attribute, i1, classify(i1), i2, classify(i2), level, new_level,
            )
            if new_level != level:
                updates[key] = new_level

        return self._replace(updates)

    def weaken_relational_level_all(
        self, rel_name: str, base_name: str, rel: Relation, base: Relation
    ) -> Consistency:
        """Weaken every relational attribute by all pairs it fails on."""
        updates: Dict[str, ConsistencyLevel] = {}
        for key, level in self.levels.items():
            attribute = ATTRIBUTES[key]
            if not isinstance(attribute, RelationalAttribute):
                continue

            new_level = level
            for i1, i2 in attribute.unsat_pairs(rel_name, base_name, rel, base):
                new_level = new_level.weaken(i1, i2)

            if new_level != level:
                logger.debug(
                    "weakening attribute %s from %s to %s", attribute, level, new_level
                )
                updates[key] = new_level

        return self._replace(updates)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Consistency):
            return NotImplemented
        return dict(self.levels) == dict(other.levels)

    def __hash__(self) -> int:
        return hash(tuple(self.levels.items()))

    def __str__(self) -> str:
        weaknesses = [
            f"{ATTRIBUTES[key]}[{level}]"
            for key, level in self.levels.items()
            if level.is_weak()
        ]
        return ":".join(weaknesses) if weaknesses else "atomic"

    def __repr__(self) -> str:
        return f"Consistency({self})"


@dataclass(frozen=True, slots=True)
class ConsistencyDisjunction:
    """An antichain of consistency points, produced by Consistency.join.

    Attributes:
        consistencies: Pairwise incomparable points
    """

    consistencies: Tuple[Consistency, ...]

    @property
    def size(self) -> int:
        return len(self.consistencies)

    def is_weak(self) -> bool:
        return any(c.is_weak() for c in self.consistencies)

    def has_bottom(self) -> bool:
        return any(c.has_bottom() for c in self.consistencies)

    def __len__(self) -> int:
        return len(self.consistencies)

    def __iter__(self) -> Iterator[Consistency]:
        return iter(self.consistencies)

    def __str__(self) -> str:
        return " |||| ".join(str(c) for c in self.consistencies)

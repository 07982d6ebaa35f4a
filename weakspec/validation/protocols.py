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
"""Contracts of the collaborators the validators drive.

The validators never look inside these collaborators. The tester decides
what counts as a violation, the generator decides how programs are drawn,
and the strengthener decides which stronger specs are worth trying.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterator,
    Callable,
    Dict,
    Iterable,
    Iterator,
    Protocol,
    Sequence,
    runtime_checkable,
)

from ..core.program import Method, Program

# A tester-shaped counter-example; opaque to the validators
Violation = Any

ProgramFilter = Callable[[Program], bool]


@runtime_checkable
class ExecutionTester(Protocol):
    """Runs programs against the implementation under test."""

    def get_violations(self, programs: Sequence[Program]) -> AsyncIterator[Violation]:
        """Yield the violations found among a batch of programs.

        The tester may execute the batch in parallel internally; violations
        are yielded in whatever order it reports them.
        """
        ...


@runtime_checkable
class ProgramGenerator(Protocol):
    """Draws random test programs for a spec."""

    def get_programs(self, spec: Any, limits: Dict[str, int]) -> Iterator[Program]:
        """Yield programs honoring max_size, max_length and max_sessions.

        The iterator may be infinite; consumers stop it by closing it.
        """
        ...


@dataclass(frozen=True)
class Strengthening:
    """A stronger spec proposed for one attribute.

    Attributes:
        new_spec: The strengthened spec
        attribute: Key of the attribute that was strengthened
    """

    new_spec: Any
    attribute: str


@runtime_checkable
class SpecStrengthener(Protocol):
    """Proposes stronger specs for one method of a spec."""

    def get_strengthenings(
        self, spec: Any, method: Method
    ) -> Iterable[Strengthening]:
        ...


@dataclass(frozen=True)
class MaximalityViolation:
    """Evidence that the mined spec is not the strongest one for a method.

    The implementation met a stronger spec for this method and attribute
    on every program tried.

    Attributes:
        method: The method whose spec could be strengthened
        attribute: Key of the attribute that could be strengthened
    """

    method: Method
    attribute: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {"method": self.method.name, "attribute": self.attribute}

    def __str__(self) -> str:
        return f"maximality violation: {self.method.name} admits {self.attribute}"

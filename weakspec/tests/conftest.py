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
"""Shared fixtures for weakspec tests.

Provides invocation and program builders plus in-memory stand-ins for the
three collaborators the validators drive (tester, generator, strengthener).
The stand-ins record how they were used so tests can assert on pulls,
batches and cleanup.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import pytest

from weakspec.core.program import Invocation, Method, Program, Sequence as Session
from weakspec.validation.config import ValidationLimits
from weakspec.validation.protocols import Strengthening


class FakeTester:
    """Flags every program the predicate accepts as a violation.

    Attributes:
        batches: The program batches received, in order
        closed: Number of violation streams that were closed
    """

    def __init__(
        self,
        is_violation: Callable[[Program], bool] = lambda program: False,
        error: Optional[Exception] = None,
    ) -> None:
        self.is_violation = is_violation
        self.error = error
        self.batches: List[List[Program]] = []
        self.closed = 0

    @property
    def programs_tested(self) -> int:
        return sum(len(b) for b in self.batches)

    async def get_violations(self, programs: Sequence[Program]):
        self.batches.append(list(programs))
        try:
            if self.error is not None:
                raise self.error
            for program in programs:
                if self.is_violation(program):
                    yield program
        finally:
            self.closed += 1


class FakeGenerator:
    """Cycles forever (or once) through the programs drawn for a spec.

    Attributes:
        calls: Number of get_programs calls
        drawn: Programs handed out across all calls
        closed: Number of program iterators that were closed
    """

    def __init__(
        self,
        programs_for: Callable[[Any], List[Program]],
        infinite: bool = True,
    ) -> None:
        self.programs_for = programs_for
        self.infinite = infinite
        self.calls = 0
        self.drawn = 0
        self.closed = 0
        self.limits: List[Dict[str, int]] = []

    def get_programs(self, spec: Any, limits: Dict[str, int]) -> Iterator[Program]:
        self.calls += 1
        self.limits.append(limits)
        return self._programs(spec)

    def _programs(self, spec: Any) -> Iterator[Program]:
        programs = self.programs_for(spec)
        source = itertools.cycle(programs) if self.infinite else iter(programs)
        try:
            for program in source:
                self.drawn += 1
                yield program
        finally:
            self.closed += 1


class FakeStrengthener:
    """Proposes fixed strengthenings per method name.

    Attributes:
        requested: Method names strengthenings were requested for, in order
        closed: Number of strengthening iterators that were closed
    """

    def __init__(self, proposals: Optional[Dict[str, List[Strengthening]]] = None):
        self.proposals = proposals or {}
        self.requested: List[str] = []
        self.closed = 0

    def get_strengthenings(self, spec: Any, method: Method) -> Iterator[Strengthening]:
        self.requested.append(method.name)
        return self._strengthenings(method)

    def _strengthenings(self, method: Method) -> Iterator[Strengthening]:
        try:
            yield from self.proposals.get(method.name, [])
        finally:
            self.closed += 1


def make_program(*sessions: Sequence[str]) -> Program:
    """Build a program from sessions of method names, numbering invocations."""
    ids = itertools.count()
    return Program(
        sequences=tuple(
            Session(tuple(Invocation(Method(name), id=next(ids)) for name in session))
            for session in sessions
        )
    )


@pytest.fixture
def put() -> Method:
    return Method("put")


@pytest.fixture
def get() -> Method:
    return Method("get", read_only=True)


@pytest.fixture
def plain(put: Method) -> Invocation:
    """A non-atomic invocation."""
    return Invocation(put, (1,), id=0)


@pytest.fixture
def other(get: Method) -> Invocation:
    """A second non-atomic invocation."""
    return Invocation(get, id=1)


@pytest.fixture
def atomic(put: Method) -> Invocation:
    """An atomic invocation."""
    return Invocation(put, (2,), atomic=True, id=2)


@pytest.fixture
def program_of() -> Callable[..., Program]:
    return make_program


@pytest.fixture
def small_limits() -> ValidationLimits:
    """Limits small enough that unbounded sources finish quickly."""
    return ValidationLimits(max_programs=6, batch_size=2, max_attempts=20)


@pytest.fixture
def tester_factory() -> Callable[..., FakeTester]:
    return FakeTester


@pytest.fixture
def generator_factory() -> Callable[..., FakeGenerator]:
    return FakeGenerator


@pytest.fixture
def strengthener_factory() -> Callable[..., FakeStrengthener]:
    return FakeStrengthener

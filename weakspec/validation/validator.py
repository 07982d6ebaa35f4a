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
"""Testing-based validation of a spec against an implementation.

A validator turns a spec into a lazy stream of violations:

    program source ──▶ batch(size, max) ──▶ tester ──▶ violations

Everything is pulled by the consumer. Nothing is generated beyond the batch
currently being tested, and no more than ``max_programs`` programs are ever
drawn per call. When the consumer stops early the program source is released
explicitly: a CancellationToken created for the call is cancelled and the
source is closed in a finally block, never drained.

Variants differ only in where programs come from:

- RandomTestValidator: a random program generator, lazily filtered
- ProgramValidator: a fixed list of programs (regression and reproduction)
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from contextlib import aclosing
from typing import Any, AsyncIterator, Iterator, List, Optional

from ..core.program import Program
from ..observability.collector import MetricsCollector
from .batch import batch
from .cancellation import CancellationToken
from .config import DEFAULT_LIMITS, ValidationLimits
from .protocols import ExecutionTester, ProgramFilter, ProgramGenerator, Violation

logger = logging.getLogger(__name__)


def _accept_all(program: Program) -> bool:
    return True


def _closer(source: object):
    def close() -> None:
        close_source = getattr(source, "close", None)
        if close_source is not None:
            close_source()

    return close


class SpecValidator(ABC):
    """Contract shared by every validator.

    get_violations yields a lazy, possibly unbounded stream. Consumers that
    stop early must close it (``contextlib.aclosing``) so the program source
    is released; get_first_violation does exactly that.
    """

    @abstractmethod
    def get_violations(self, spec: Any) -> AsyncIterator[Violation]:
        """Yield violations of spec, in discovery order."""
        raise NotImplementedError

    async def get_first_violation(self, spec: Any) -> Optional[Violation]:
        """Return the first violation of spec, or None when there is none.

        The violation stream, and with it the program source, is closed
        before this returns, whether a violation was found or not.
        """
        async with aclosing(self.get_violations(spec)) as violations:
            async for violation in violations:
                return violation
        return None


class TestingBasedValidator(SpecValidator):
    """Validator that tests batches of programs with an execution tester.

    Attributes:
        tester: Collaborator executing programs and reporting violations
        limits: Bounds on batch size and total programs per call
        metrics: Optional collector for batch and violation metrics
    """

    # Keep pytest from collecting this class by its name
    __test__ = False

    def __init__(
        self,
        tester: ExecutionTester,
        limits: ValidationLimits = DEFAULT_LIMITS,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.tester = tester
        self.limits = limits
        self.metrics = metrics

    @property
    def batch_size(self) -> int:
        return self.limits.batch_size

    @property
    def max_programs(self) -> int:
        return self.limits.max_programs

    @abstractmethod
    def get_programs(self, spec: Any, token: CancellationToken) -> Iterator[Program]:
        """Yield the programs to test spec with.

        Implementations stop producing once token is cancelled.
        """
        raise NotImplementedError

    async def get_violations(self, spec: Any) -> AsyncIterator[Violation]:
        token = CancellationToken()
        programs = self.get_programs(spec, token)
        token.add_callback(_closer(programs))

        try:
            async with aclosing(
                batch(programs, size=self.batch_size, max=self.max_programs)
            ) as batches:
                async for programs_batch in batches:
                    async with aclosing(self._test_batch(programs_batch)) as found:
                        async for violation in found:
                            yield violation
        finally:
            token.cancel()

    async def _test_batch(self, programs: List[Program]) -> AsyncIterator[Violation]:
        logger.debug("testing %d programs", len(programs))
        started = time.perf_counter()
        violations = self.tester.get_violations(programs)
        try:
            async for violation in violations:
                if self.metrics is not None:
                    self.metrics.record_violation()
                yield violation
        finally:
            aclose = getattr(violations, "aclose", None)
            if aclose is not None:
                await aclose()
            if self.metrics is not None:
                latency_ms = (time.perf_counter() - started) * 1000
                self.metrics.record_batch(len(programs), latency_ms)


class RandomTestValidator(TestingBasedValidator):
    """Tests a spec on randomly generated programs.

    Programs the filter rejects are skipped and generation continues; the
    generator is never restarted. At most ``limits.max_attempts`` programs
    are drawn per call, rejected ones included.

    Example:
        >>> validator = RandomTestValidator(
        ...     tester, generator, program_filter=lambda p: p.has_method("put")
        ... )
        >>> violation = asyncio.run(validator.get_first_violation(spec))
    """

    def __init__(
        self,
        tester: ExecutionTester,
        generator: ProgramGenerator,
        program_filter: Optional[ProgramFilter] = None,
        limits: ValidationLimits = DEFAULT_LIMITS,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        super().__init__(tester, limits, metrics)
        self.generator = generator
        self.program_filter = program_filter or _accept_all

    def get_programs(self, spec: Any, token: CancellationToken) -> Iterator[Program]:
        limits = self.limits.generator_limits()
        source = iter(self.generator.get_programs(spec, limits))
        token.add_callback(_closer(source))

        rejected = 0
        try:
            for attempts, program in enumerate(source, start=1):
                if token.cancelled:
                    return
                if self.program_filter(program):
                    yield program
                else:
                    rejected += 1
                if attempts >= self.limits.max_attempts:
                    logger.debug(
                        "stopping after %d attempts (%d rejected)", attempts, rejected
                    )
                    return
        finally:
            _closer(source)()


class ProgramValidator(TestingBasedValidator):
    """Tests a spec on a fixed list of programs, in order."""

    def __init__(
        self,
        tester: ExecutionTester,
        programs: List[Program],
        limits: ValidationLimits = DEFAULT_LIMITS,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        super().__init__(tester, limits, metrics)
        self.programs = list(programs)

    def get_programs(self, spec: Any, token: CancellationToken) -> Iterator[Program]:
        for program in self.programs:
            if token.cancelled:
                return
            yield program

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
"""Unit tests for the testing-based validators."""

import asyncio
from contextlib import aclosing

import pytest

from weakspec.core.program import Spec
from weakspec.observability.collector import MetricsCollector
from weakspec.validation.config import ValidationLimits
from weakspec.validation.validator import ProgramValidator, RandomTestValidator

SPEC = Spec(name="register")


async def _all_violations(validator, spec=SPEC):
    async with aclosing(validator.get_violations(spec)) as violations:
        return [v async for v in violations]


class TestProgramValidator:
    """Tests for ProgramValidator."""

    def test_reports_violations_in_order(self, tester_factory, program_of):
        programs = [program_of(["put"]), program_of(["bad"]), program_of(["bad", "get"])]
        tester = tester_factory(lambda p: p.has_method("bad"))
        validator = ProgramValidator(
            tester, programs, limits=ValidationLimits(batch_size=2)
        )

        assert asyncio.run(_all_violations(validator)) == programs[1:]
        assert [len(b) for b in tester.batches] == [2, 1]

    def test_no_violations(self, tester_factory, program_of):
        validator = ProgramValidator(tester_factory(), [program_of(["put"])])
        assert asyncio.run(_all_violations(validator)) == []
        assert asyncio.run(validator.get_first_violation(SPEC)) is None

    def test_max_programs_bounds_testing(self, tester_factory, program_of):
        tester = tester_factory()
        programs = [program_of(["put"]) for _ in range(10)]
        limits = ValidationLimits(max_programs=3, batch_size=2)
        asyncio.run(_all_violations(ProgramValidator(tester, programs, limits=limits)))
        assert tester.programs_tested == 3

    def test_first_violation_stops_testing(self, tester_factory, program_of):
        tester = tester_factory(lambda p: p.has_method("bad"))
        programs = [program_of(["bad"]) for _ in range(5)]
        validator = ProgramValidator(
            tester, programs, limits=ValidationLimits(batch_size=1)
        )

        assert asyncio.run(validator.get_first_violation(SPEC)) == programs[0]
        assert len(tester.batches) == 1
        assert tester.closed == 1

    def test_tester_error_propagates(self, tester_factory, program_of):
        tester = tester_factory(error=RuntimeError("executor crashed"))
        validator = ProgramValidator(tester, [program_of(["put"])])
        with pytest.raises(RuntimeError, match="executor crashed"):
            asyncio.run(_all_violations(validator))


class TestRandomTestValidator:
    """Tests for RandomTestValidator."""

    def test_first_violation_closes_generator(
        self, tester_factory, generator_factory, program_of, small_limits
    ):
        generator = generator_factory(lambda spec: [program_of(["put"]), program_of(["bad"])])
        tester = tester_factory(lambda p: p.has_method("bad"))
        validator = RandomTestValidator(tester, generator, limits=small_limits)

        violation = asyncio.run(validator.get_first_violation(SPEC))

        assert violation == program_of(["bad"])
        assert generator.calls == 1
        assert generator.closed == 1
        assert generator.drawn == 2

    def test_filter_rejecting_everything(
        self, tester_factory, generator_factory, program_of, small_limits
    ):
        generator = generator_factory(lambda spec: [program_of(["bad"])])
        tester = tester_factory(lambda p: True)
        validator = RandomTestValidator(
            tester, generator, program_filter=lambda p: False, limits=small_limits
        )

        assert asyncio.run(_all_violations(validator)) == []
        assert asyncio.run(validator.get_first_violation(SPEC)) is None
        assert tester.programs_tested == 0
        assert generator.drawn == 2 * small_limits.max_attempts
        assert generator.closed == 2

    def test_filter_skips_without_restarting(
        self, tester_factory, generator_factory, program_of, small_limits
    ):
        generator = generator_factory(
            lambda spec: [program_of(["get"]), program_of(["put"])]
        )
        tester = tester_factory()
        validator = RandomTestValidator(
            tester,
            generator,
            program_filter=lambda p: p.has_method("put"),
            limits=small_limits,
        )

        asyncio.run(_all_violations(validator))

        tested = [p for b in tester.batches for p in b]
        assert len(tested) == small_limits.max_programs
        assert all(p.has_method("put") for p in tested)
        assert generator.calls == 1

    def test_unbounded_generator_stops_at_max_programs(
        self, tester_factory, generator_factory, program_of, small_limits
    ):
        generator = generator_factory(lambda spec: [program_of(["put"])])
        tester = tester_factory()
        validator = RandomTestValidator(tester, generator, limits=small_limits)

        assert asyncio.run(validator.get_first_violation(SPEC)) is None
        assert tester.programs_tested == small_limits.max_programs
        assert [len(b) for b in tester.batches] == [2, 2, 2]
        assert generator.closed == 1

    def test_finite_generator(self, tester_factory, generator_factory, program_of):
        generator = generator_factory(
            lambda spec: [program_of(["bad"]), program_of(["put"])], infinite=False
        )
        tester = tester_factory(lambda p: p.has_method("bad"))
        validator = RandomTestValidator(tester, generator)

        assert asyncio.run(_all_violations(validator)) == [program_of(["bad"])]
        assert generator.closed == 1

    def test_limits_reach_generator(
        self, tester_factory, generator_factory, program_of, small_limits
    ):
        generator = generator_factory(lambda spec: [program_of(["put"])])
        validator = RandomTestValidator(tester_factory(), generator, limits=small_limits)
        asyncio.run(validator.get_first_violation(SPEC))
        assert generator.limits == [
            {"max_size": 5, "max_length": 3, "max_sessions": 2}
        ]

    def test_tester_error_still_closes_generator(
        self, tester_factory, generator_factory, program_of
    ):
        generator = generator_factory(lambda spec: [program_of(["put"])])
        tester = tester_factory(error=RuntimeError("executor crashed"))
        validator = RandomTestValidator(tester, generator)

        with pytest.raises(RuntimeError, match="executor crashed"):
            asyncio.run(validator.get_first_violation(SPEC))
        assert generator.closed == 1

    def test_records_metrics(
        self, tester_factory, generator_factory, program_of, small_limits
    ):
        collector = MetricsCollector()
        generator = generator_factory(lambda spec: [program_of(["bad"])])
        tester = tester_factory(lambda p: True)
        validator = RandomTestValidator(
            tester, generator, limits=small_limits, metrics=collector
        )

        asyncio.run(_all_violations(validator))

        batches = collector.get_summary()["batches"]
        assert batches["count"] == 3
        assert batches["programs"] == small_limits.max_programs
        assert batches["violations"] == small_limits.max_programs

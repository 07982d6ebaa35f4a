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
"""Maximality search: is the mined spec the strongest one that holds?

For every method of the spec, in order, the strengthener proposes stronger
specs one attribute at a time. Each proposal is tested on random programs
that exercise the method:

    violation found  ──▶ the implementation refutes the stronger spec; next
    none found       ──▶ the stronger spec also holds; report a
                         MaximalityViolation(method, attribute)

Proposals are tried strictly one after another, and each attempt is fully
resolved (first violation found, or the program source exhausted or bounded)
before the next begins. Only the existence of a violation matters, so each
attempt stops at the first one.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Optional

from ..observability.collector import MetricsCollector
from .config import DEFAULT_LIMITS, ValidationLimits
from .protocols import (
    ExecutionTester,
    MaximalityViolation,
    ProgramFilter,
    ProgramGenerator,
    SpecStrengthener,
)
from .validator import RandomTestValidator, SpecValidator

logger = logging.getLogger(__name__)


def exercises(method_name: str) -> ProgramFilter:
    """Filter accepting programs with at least one call of the named method."""
    return lambda program: program.has_method(method_name)


class SpecStrengthValidator(SpecValidator):
    """Searches for maximality violations of a spec.

    Attributes:
        tester: Collaborator executing programs and reporting violations
        generator: Random program generator used for every attempt
        strengthener: Collaborator proposing stronger specs per method
        limits: Bounds applied to every attempt
        metrics: Optional collector for attempt outcomes
    """

    def __init__(
        self,
        tester: ExecutionTester,
        generator: ProgramGenerator,
        strengthener: SpecStrengthener,
        limits: ValidationLimits = DEFAULT_LIMITS,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.tester = tester
        self.generator = generator
        self.strengthener = strengthener
        self.limits = limits
        self.metrics = metrics

    async def get_violations(self, spec: Any) -> AsyncIterator[MaximalityViolation]:
        for method in spec.methods:
            validator = RandomTestValidator(
                self.tester,
                self.generator,
                program_filter=exercises(method.name),
                limits=self.limits,
                metrics=self.metrics,
            )

            strengthenings = iter(self.strengthener.get_strengthenings(spec, method))
            try:
                for strengthening in strengthenings:
                    logger.debug("trying %s: %s", method.name, strengthening.attribute)

                    violation = await validator.get_first_violation(
                        strengthening.new_spec
                    )
                    rejected = violation is not None
                    if self.metrics is not None:
                        self.metrics.record_strengthening(
                            method.name, strengthening.attribute, rejected
                        )

                    if rejected:
                        logger.debug("found violation to stronger spec:\n%s", violation)
                        continue

                    logger.info(
                        "found stronger spec for %s (%s); reporting maximality violation",
                        method.name,
                        strengthening.attribute,
                    )
                    yield MaximalityViolation(method, strengthening.attribute)
            finally:
                close = getattr(strengthenings, "close", None)
                if close is not None:
                    close()

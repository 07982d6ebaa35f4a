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
"""Weakspec: weak-consistency specifications for concurrent objects.

A spec assigns every method of a concurrent object a point in a lattice of
consistency levels, from fully atomic down to arbitrarily weak. Weakspec
provides the lattice algebra used to mine such specs and a testing-based
engine that checks a spec against an implementation and searches for
stronger specs the implementation still satisfies.

Key Components:
    - core: Expressions, consistency levels, attributes, consistency points
    - validation: Batched testing validators and the maximality search
    - observability: Metrics collection and exporters for validation runs

Usage:
    Plug an ExecutionTester, a ProgramGenerator and a SpecStrengthener into
    SpecStrengthValidator and iterate get_violations(spec).
"""

# Lazy imports keep `import weakspec` cheap; submodules load on first access.


def __getattr__(name: str):
    """Lazy import of module attributes."""
    # Lattice algebra
    if name in (
        "ATOMIC",
        "BOTTOM",
        "WILDCARD",
        "Comparison",
        "Expression",
        "NamedExpression",
        "expression_of",
    ):
        from .core.comparison import Comparison
        from .core.expression import (
            ATOMIC,
            BOTTOM,
            WILDCARD,
            Expression,
            NamedExpression,
            expression_of,
        )

        return locals()[name]

    if name == "ConsistencyLevel":
        from .core.level import ConsistencyLevel

        return ConsistencyLevel

    if name in ("ATTRIBUTES", "RelationalAttribute", "SimpleAttribute", "attribute_named"):
        from .core.attribute import (
            ATTRIBUTES,
            RelationalAttribute,
            SimpleAttribute,
            attribute_named,
        )

        return locals()[name]

    if name in ("Consistency", "ConsistencyDisjunction"):
        from .core.consistency import Consistency, ConsistencyDisjunction

        return locals()[name]

    # Programs
    if name in ("Invocation", "Method", "Program", "Sequence", "Spec", "OrderRelation"):
        from .core.program import Invocation, Method, Program, Sequence, Spec
        from .core.relation import OrderRelation

        return locals()[name]

    # Validation
    if name in (
        "DEFAULT_LIMITS",
        "MaximalityViolation",
        "ProgramValidator",
        "RandomTestValidator",
        "SpecStrengthValidator",
        "SpecValidator",
        "Strengthening",
        "ValidationLimits",
    ):
        from .validation import (
            DEFAULT_LIMITS,
            MaximalityViolation,
            ProgramValidator,
            RandomTestValidator,
            SpecStrengthValidator,
            SpecValidator,
            Strengthening,
            ValidationLimits,
        )

        return locals()[name]

    # Observability
    if name == "MetricsCollector":
        from .observability.collector import MetricsCollector

        return MetricsCollector

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Lattice algebra
    "Comparison",
    "Expression",
    "NamedExpression",
    "WILDCARD",
    "ATOMIC",
    "BOTTOM",
    "expression_of",
    "ConsistencyLevel",
    "SimpleAttribute",
    "RelationalAttribute",
    "ATTRIBUTES",
    "attribute_named",
    "Consistency",
    "ConsistencyDisjunction",
    # Programs
    "Method",
    "Invocation",
    "Sequence",
    "Program",
    "Spec",
    "OrderRelation",
    # Validation
    "ValidationLimits",
    "DEFAULT_LIMITS",
    "Strengthening",
    "MaximalityViolation",
    "SpecValidator",
    "RandomTestValidator",
    "ProgramValidator",
    "SpecStrengthValidator",
    # Observability
    "MetricsCollector",
]

__version__ = "0.1.0"

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
"""Consistency lattice algebra: expressions, levels, attributes, points."""

from .comparison import Comparison, compare_tuples
from .expression import (
    ATOMIC,
    BOTTOM,
    WILDCARD,
    AtomicExpression,
    BottomExpression,
    Expression,
    NamedExpression,
    WildcardExpression,
    expression_of,
)
from .level import ConsistencyLevel
from .attribute import (
    ATTRIBUTES,
    CONSISTENT_RETURNS,
    LINEARIZATION,
    PROGRAM_ORDER,
    VISIBILITY,
    Attribute,
    Composition,
    RelationalAttribute,
    SimpleAttribute,
    attribute_named,
)
from .consistency import Consistency, ConsistencyDisjunction
from .program import Invocation, Method, Program, Sequence, Spec
from .relation import OrderRelation, Relation

__all__ = [
    # Comparison
    "Comparison",
    "compare_tuples",
    # Expressions
    "Expression",
    "WildcardExpression",
    "AtomicExpression",
    "BottomExpression",
    "NamedExpression",
    "WILDCARD",
    "ATOMIC",
    "BOTTOM",
    "expression_of",
    # Levels
    "ConsistencyLevel",
    # Attributes
    "Attribute",
    "SimpleAttribute",
    "RelationalAttribute",
    "Composition",
    "ATTRIBUTES",
    "attribute_named",
    "PROGRAM_ORDER",
    "LINEARIZATION",
    "VISIBILITY",
    "CONSISTENT_RETURNS",
    # Consistency points
    "Consistency",
    "ConsistencyDisjunction",
    # Programs and relations
    "Method",
    "Invocation",
    "Sequence",
    "Program",
    "Spec",
    "Relation",
    "OrderRelation",
]

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
"""Testing-based spec validation and maximality search."""

from .batch import batch
from .cancellation import CancellationToken
from .config import DEFAULT_LIMITS, ValidationLimits
from .protocols import (
    ExecutionTester,
    MaximalityViolation,
    ProgramFilter,
    ProgramGenerator,
    SpecStrengthener,
    Strengthening,
    Violation,
)
from .validator import (
    ProgramValidator,
    RandomTestValidator,
    SpecValidator,
    TestingBasedValidator,
)
from .strength import SpecStrengthValidator, exercises

__all__ = [
    # Streaming
    "batch",
    "CancellationToken",
    # Configuration
    "ValidationLimits",
    "DEFAULT_LIMITS",
    # Collaborators
    "ExecutionTester",
    "ProgramGenerator",
    "SpecStrengthener",
    "ProgramFilter",
    "Strengthening",
    "Violation",
    "MaximalityViolation",
    # Validators
    "SpecValidator",
    "TestingBasedValidator",
    "RandomTestValidator",
    "ProgramValidator",
    "SpecStrengthValidator",
    "exercises",
]

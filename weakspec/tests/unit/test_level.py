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
"""Unit tests for ConsistencyLevel."""

import pytest

from weakspec.core.comparison import Comparison
from weakspec.core.expression import ATOMIC, BOTTOM, WILDCARD, NamedExpression
from weakspec.core.level import ConsistencyLevel

W, A, B = WILDCARD, ATOMIC, BOTTOM


class TestConstruction:
    """Tests for building levels."""

    def test_distinguished_levels(self):
        assert ConsistencyLevel.top(2).maximals == ((W, W),)
        assert ConsistencyLevel.atomic(2).maximals == ((A, A),)
        assert ConsistencyLevel.bottom(1).maximals == ((B,),)
        assert ConsistencyLevel.top(2).dimension == 2

    def test_dominated_tuples_are_pruned(self):
        level = ConsistencyLevel([(A, A), (W, A), (A, A)])
        assert level.maximals == ((W, A),)

    def test_incomparable_tuples_are_kept(self):
        level = ConsistencyLevel([(A, W), (W, A)])
        assert set(level.maximals) == {(A, W), (W, A)}

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="at least one"):
            ConsistencyLevel([])

    def test_zero_dimension_raises(self):
        with pytest.raises(ValueError, match="positive dimension"):
            ConsistencyLevel([()])

    def test_jagged_raises(self):
        with pytest.raises(ValueError, match="jagged"):
            ConsistencyLevel([(W,), (W, A)])

    def test_frozen(self):
        level = ConsistencyLevel.top(1)
        with pytest.raises(AttributeError):
            level.maximals = ((A,),)


class TestPredicates:
    """Tests for is_weak and is_bottom."""

    def test_top(self):
        assert not ConsistencyLevel.top(2).is_weak()
        assert not ConsistencyLevel.top(2).is_bottom()

    def test_bottom(self):
        assert ConsistencyLevel.bottom(2).is_bottom()
        assert ConsistencyLevel.bottom(2).is_weak()

    def test_atomic(self):
        assert ConsistencyLevel.atomic(1).is_weak()
        assert not ConsistencyLevel.atomic(1).is_bottom()


class TestCompare:
    """Tests for the level order."""

    def test_atomic_strictly_between_top_and_bottom(self):
        top, atomic, bottom = (
            ConsistencyLevel.top(2),
            ConsistencyLevel.atomic(2),
            ConsistencyLevel.bottom(2),
        )
        assert top.compare(atomic) == Comparison.GREATER
        assert atomic.compare(bottom) == Comparison.GREATER
        assert bottom.compare(top) == Comparison.LESSER
        assert atomic.compare(top) == Comparison.LESSER

    def test_reflexive(self):
        level = ConsistencyLevel([(A, W), (W, A)])
        assert level.compare(ConsistencyLevel([(W, A), (A, W)])) == Comparison.EQUAL

    def test_incomparable(self):
        left = ConsistencyLevel([(A, W)])
        right = ConsistencyLevel([(W, A)])
        assert left.compare(right) == Comparison.INCOMPARABLE

    def test_subset_of_antichain_is_lower(self):
        both = ConsistencyLevel([(A, W), (W, A)])
        one = ConsistencyLevel([(W, A)])
        assert both.compare(one) == Comparison.GREATER
        assert one.compare(both) == Comparison.LESSER

    def test_named_levels(self):
        foo = ConsistencyLevel([(NamedExpression("foo"),)])
        atomic = ConsistencyLevel.atomic(1)
        assert foo.compare(atomic) == Comparison.INCOMPARABLE
        assert ConsistencyLevel.top(1).compare(foo) == Comparison.GREATER

    def test_dimension_mismatch_raises(self):
        with pytest.raises(ValueError, match="dimension"):
            ConsistencyLevel.top(1).compare(ConsistencyLevel.top(2))


class TestWeaken:
    """Tests for weakening a level by observed invocations."""

    def test_two_plain_invocations(self, plain, other):
        weakened = ConsistencyLevel.top(2).weaken(plain, other)
        assert set(weakened.maximals) == {(A, W), (W, A)}

    def test_atomic_then_plain(self, atomic, plain):
        weakened = ConsistencyLevel.top(2).weaken(atomic, plain)
        assert weakened == ConsistencyLevel([(W, A)])

    def test_all_atomic_collapses_to_bottom(self, atomic):
        weakened = ConsistencyLevel.top(2).weaken(atomic, atomic)
        assert weakened == ConsistencyLevel.bottom(2)
        assert weakened.is_bottom()

    def test_single_slot(self, plain, atomic):
        assert ConsistencyLevel.top(1).weaken(plain) == ConsistencyLevel.atomic(1)
        assert ConsistencyLevel.top(1).weaken(atomic).is_bottom()

    def test_unchanged_returns_same_level(self, plain, other):
        level = ConsistencyLevel.top(2).weaken(plain, other)
        assert level.weaken(plain, other) is level

    def test_bottom_is_absorbing(self, plain):
        bottom = ConsistencyLevel.bottom(1)
        assert bottom.weaken(plain) is bottom

    def test_returns_fresh_level(self, plain):
        top = ConsistencyLevel.top(1)
        weakened = top.weaken(plain)
        assert weakened is not top
        assert top == ConsistencyLevel.top(1)

    def test_weakening_moves_down(self, atomic, plain):
        level = ConsistencyLevel([(A, W), (W, A)])
        weakened = level.weaken(atomic, plain)
        assert weakened.compare(level) == Comparison.LESSER

    def test_wrong_invocation_count_raises(self, plain):
        with pytest.raises(ValueError, match="expected 2"):
            ConsistencyLevel.top(2).weaken(plain)


class TestSatisfies:
    """Tests for matching invocations against a single-tuple level."""

    def test_top_admits_everything(self, plain, atomic):
        assert ConsistencyLevel.top(2).satisfies(plain, atomic)

    def test_atomic_requires_atomic(self, plain, atomic):
        assert ConsistencyLevel.atomic(1).satisfies(atomic)
        assert not ConsistencyLevel.atomic(1).satisfies(plain)

    def test_multiple_maximals_raise(self, plain):
        level = ConsistencyLevel([(A, W), (W, A)])
        with pytest.raises(ValueError, match="single-tuple"):
            level.satisfies(plain, plain)


class TestEquality:
    """Tests for equality, hashing and text form."""

    def test_order_insensitive(self):
        first = ConsistencyLevel([(A, W), (W, A)])
        second = ConsistencyLevel([(W, A), (A, W)])
        assert first == second
        assert hash(first) == hash(second)

    def test_text_form(self):
        assert str(ConsistencyLevel.top(2)) == "*,*"
        assert str(ConsistencyLevel([(A, W), (W, A)])) == "A,*|*,A"
        assert repr(ConsistencyLevel.bottom(1)) == "ConsistencyLevel(!)"

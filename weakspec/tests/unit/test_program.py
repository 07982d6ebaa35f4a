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
"""Unit tests for program value objects and order relations."""

import json

import pytest

from weakspec.core.program import Invocation, Method, Program, Sequence, Spec
from weakspec.core.relation import OrderRelation, Relation


@pytest.fixture
def program() -> Program:
    return Program.from_dict(
        {
            "sequences": [
                {
                    "invocations": [
                        {"method": {"name": "put"}, "arguments": [1]},
                        {"method": {"name": "get", "read_only": True}},
                    ]
                },
                {"invocations": [{"method": {"name": "get", "read_only": True}}]},
            ],
            "order": [[0, 2]],
        }
    )


class TestProgram:
    """Tests for Program and its parts."""

    def test_from_dict_numbers_invocations(self, program):
        assert [i.id for i in program.invocations()] == [0, 1, 2]

    def test_from_dict_keeps_given_ids(self):
        loaded = Program.from_dict(
            {
                "sequences": [
                    {
                        "invocations": [
                            {"method": {"name": "put"}, "id": 7},
                            {"method": {"name": "put"}},
                        ]
                    }
                ]
            }
        )
        assert [i.id for i in loaded.invocations()] == [7, 8]

    def test_equal_calls_are_distinct(self, program):
        first, second = program.sequences[0].invocations[1], program.sequences[1].invocations[0]
        assert first.method == second.method
        assert first != second

    def test_text_form(self, program):
        assert str(program) == "{ put(1); get() } || { get() }"

    def test_size_and_methods(self, program):
        assert program.size == 3
        assert program.has_method("get")
        assert not program.has_method("remove")

    def test_json_round_trip(self, program):
        assert Program.from_json(json.dumps(program.to_dict())) == program

    def test_invocation_to_dict(self):
        invocation = Invocation(Method("put"), (1, 2), atomic=True, id=3)
        assert invocation.to_dict() == {
            "method": {"name": "put", "read_only": False},
            "arguments": [1, 2],
            "atomic": True,
            "id": 3,
        }

    def test_collection_arguments_are_hashable(self):
        loaded = Program.from_dict(
            {
                "sequences": [
                    {
                        "invocations": [
                            {"method": {"name": "putAll"}, "arguments": [[1, 2]]},
                            {"method": {"name": "get"}, "arguments": []},
                        ]
                    }
                ]
            }
        )
        put_all, get = loaded.invocations()
        po = OrderRelation.program_order(loaded)

        assert po.is_before(put_all, get)
        assert put_all.arguments == ((1, 2),)
        assert len({put_all, get}) == 2
        assert str(loaded) == "{ putAll(1,2); get() }"

    def test_object_arguments_freeze_by_key(self):
        first = Invocation.from_dict(
            {"method": {"name": "merge"}, "arguments": [{"b": [2], "a": 1}]}
        )
        second = Invocation.from_dict(
            {"method": {"name": "merge"}, "arguments": [{"a": 1, "b": [2]}]}
        )
        assert first == second
        assert hash(first) == hash(second)
        assert Invocation.from_dict(first.to_dict()) == first

    def test_collection_arguments_json_round_trip(self):
        loaded = Program.from_dict(
            {
                "sequences": [
                    {
                        "invocations": [
                            {"method": {"name": "putAll"}, "arguments": [[1, [2, 3]]]}
                        ]
                    }
                ]
            }
        )
        assert loaded.to_dict()["sequences"][0]["invocations"][0]["arguments"] == [
            [1, [2, 3]]
        ]
        assert Program.from_json(json.dumps(loaded.to_dict())) == loaded

    def test_empty_sequence(self):
        assert len(Sequence()) == 0
        assert str(Sequence()) == "{  }"


class TestSpec:
    """Tests for Spec."""

    def test_from_dict(self):
        spec = Spec.from_dict(
            {"name": "register", "methods": [{"name": "write"}, {"name": "read"}]}
        )
        assert [m.name for m in spec.methods] == ["write", "read"]
        assert spec.name == "register"

    def test_metadata_ignored_in_equality(self):
        methods = (Method("write"),)
        assert Spec(methods, metadata={"a": 1}) == Spec(methods, metadata={"b": 2})


class TestOrderRelation:
    """Tests for OrderRelation."""

    def test_program_order(self, program):
        put, get, remote_get = program.invocations()
        po = OrderRelation.program_order(program)

        assert po.is_before(put, get)
        assert not po.is_before(get, put)
        assert po.is_before(put, remote_get)
        assert not po.is_before(get, remote_get)
        assert po.before(get) == [put]
        assert po.values() == [put, get, remote_get]

    def test_total(self, plain, other, atomic):
        lin = OrderRelation.total([atomic, plain, other])
        assert lin.before(other) == [atomic, plain]
        assert lin.before(atomic) == []

    def test_satisfies_protocol(self, plain):
        assert isinstance(OrderRelation.of([plain], []), Relation)

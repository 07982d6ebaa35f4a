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
"""Immutable value objects for test programs.

A Program is one candidate concurrent execution: a sequence of sessions, each
an ordered sequence of invocations. These are the read-only shapes the
lattice and the validators consume; program generation and execution live
with external collaborators.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple


def _freeze(value: Any) -> Any:
    """Make a decoded JSON argument hashable.

    Lists become tuples and objects become sorted tuples of (key, value)
    pairs, recursively.
    """
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, dict):
        return tuple(sorted((k, _freeze(v)) for k, v in value.items()))
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


def _render(value: Any) -> str:
    # Nested collections are flattened into the comma-separated argument list
    if isinstance(value, tuple):
        return ",".join(_render(v) for v in value)
    return str(value)


@dataclass(frozen=True, slots=True)
class Method:
    """A method of the object under test.

    Attributes:
        name: Method name
        read_only: Whether the method never changes the object's state
    """

    name: str
    read_only: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "read_only": self.read_only}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Method:
        return cls(name=d["name"], read_only=d.get("read_only", False))


@dataclass(frozen=True, slots=True)
class Invocation:
    """One call of a method within a program.

    Attributes:
        method: The invoked method
        arguments: Call arguments
        atomic: Whether the call executes atomically
        id: Position of the invocation in its program; distinguishes equal calls
    """

    method: Method
    arguments: Tuple[Any, ...] = ()
    atomic: bool = False
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method.to_dict(),
            "arguments": [_thaw(a) for a in self.arguments],
            "atomic": self.atomic,
            "id": self.id,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Invocation:
        return cls(
            method=Method.from_dict(d["method"]),
            arguments=_freeze(d.get("arguments", ())),
            atomic=d.get("atomic", False),
            id=d.get("id"),
        )

    def __str__(self) -> str:
        return f"{self.method.name}({_render(self.arguments)})"


@dataclass(frozen=True, slots=True)
class Sequence:
    """The invocations of one session, in program order."""

    invocations: Tuple[Invocation, ...] = ()

    def __iter__(self) -> Iterator[Invocation]:
        return iter(self.invocations)

    def __len__(self) -> int:
        return len(self.invocations)

    def __str__(self) -> str:
        return f"{{ {'; '.join(str(i) for i in self.invocations)} }}"


@dataclass(frozen=True, slots=True)
class Program:
    """A test program: concurrent sessions plus extra ordering constraints.

    Attributes:
        sequences: One sequence per session
        order: Additional (before, after) pairs of invocation ids across sessions
    """

    sequences: Tuple[Sequence, ...] = ()
    order: Tuple[Tuple[int, int], ...] = ()

    def invocations(self) -> Iterator[Invocation]:
        for sequence in self.sequences:
            yield from sequence

    def has_method(self, name: str) -> bool:
        """Whether some invocation of the program calls the named method."""
        return any(i.method.name == name for i in self.invocations())

    @property
    def size(self) -> int:
        return sum(len(s) for s in self.sequences)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequences": [
                {"invocations": [i.to_dict() for i in s]} for s in self.sequences
            ],
            "order": [list(pair) for pair in self.order],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Program:
        """Load a program, numbering invocations that carry no id."""
        next_id = 0
        sequences = []
        for seq in d.get("sequences", []):
            invocations = []
            for raw in seq.get("invocations", []):
                invocation = Invocation.from_dict(raw)
                if invocation.id is None:
                    invocation = Invocation(
                        invocation.method,
                        invocation.arguments,
                        invocation.atomic,
                        next_id,
                    )
                next_id = max(next_id, invocation.id) + 1
                invocations.append(invocation)
            sequences.append(Sequence(tuple(invocations)))
        order = tuple(tuple(pair) for pair in d.get("order", []))
        return cls(sequences=tuple(sequences), order=order)

    @classmethod
    def from_json(cls, text: str) -> Program:
        return cls.from_dict(json.loads(text))

    def __str__(self) -> str:
        return " || ".join(str(s) for s in self.sequences)


@dataclass(frozen=True, slots=True)
class Spec:
    """The methods of the object whose consistency is being mined.

    Attributes:
        methods: Methods in the order they are validated
        name: Optional name of the object under test
        metadata: Free-form extra information carried for collaborators
    """

    methods: Tuple[Method, ...] = ()
    name: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Spec:
        return cls(
            methods=tuple(Method.from_dict(m) for m in d.get("methods", [])),
            name=d.get("name", ""),
            metadata=dict(d.get("metadata", {})),
        )

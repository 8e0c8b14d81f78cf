"""
Process: an ordered, named sequence of Steps.

Steps are built from step definitions during construction and never
reordered. Only a tweakable step's duration may change afterwards.
"""

import time
from collections import abc
from typing import Callable, Iterable, Iterator, NamedTuple, Sequence, Tuple, Union

from .countdown import Clock
from .errors import EmptyProcess, IndexOutOfRange, InvalidArgument
from .step import LightMode, Step


class StepDefinition(NamedTuple):
    """Field tuple consumed from a step-definition source."""
    long_name: str
    short_name: str
    duration_seconds: Union[int, str]
    tweakable: Union[bool, str]
    light_mode: Union[LightMode, str]


class Process:
    """A named process built from ordered step definitions."""

    def __init__(
        self,
        name: str,
        step_definitions: Iterable[Sequence],
        *,
        clock: Clock = time.monotonic,
    ):
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgument("process name is required")
        self._name = name

        definitions = list(step_definitions)
        if not definitions:
            raise EmptyProcess(f"process {name!r} has no steps")

        steps = []
        for position, definition in enumerate(definitions):
            if isinstance(definition, (str, bytes)) or not isinstance(definition, abc.Sequence):
                raise InvalidArgument(f"step {position} of {name!r} must be a field sequence")
            if len(definition) != len(StepDefinition._fields):
                raise InvalidArgument(
                    f"step {position} of {name!r} needs {len(StepDefinition._fields)} fields, "
                    f"got {len(definition)}"
                )
            d = StepDefinition(*definition)
            steps.append(
                Step(
                    self,
                    d.short_name,
                    d.long_name,
                    d.duration_seconds,
                    d.tweakable,
                    d.light_mode,
                    clock=clock,
                )
            )
        self._steps: Tuple[Step, ...] = tuple(steps)

    @classmethod
    def create(cls, name: str, step_definitions: Iterable[Sequence], **kwargs) -> "Process":
        return cls(name, step_definitions, **kwargs)

    def __repr__(self) -> str:
        return f"Process(name={self._name!r}, steps={len(self._steps)})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    @property
    def total_seconds(self) -> int:
        return sum(step.duration_seconds for step in self._steps)

    def step_at(self, index: int) -> Step:
        if isinstance(index, bool) or not isinstance(index, int):
            raise IndexOutOfRange(f"step index must be an integer, got {index!r}")
        if not 0 <= index < len(self._steps):
            raise IndexOutOfRange(
                f"step index {index} out of range for {len(self._steps)} steps"
            )
        return self._steps[index]

    def __getitem__(self, index: int) -> Step:
        return self.step_at(index)

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def for_each_step(self, visitor: Callable[[Step], None]) -> None:
        """Call ``visitor`` once per step, in order."""
        for step in self._steps:
            visitor(step)

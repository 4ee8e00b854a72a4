"""Immutable ordered storage for the steps of the loaded puzzle."""

from __future__ import annotations

from typing import Iterable, Iterator, Tuple

from contracts.errors import IndexOutOfRange

from .step import Step


class StepStore:
    """Holds the step sequence of the current puzzle.

    The sequence is published as a single tuple, so readers never observe a
    half-replaced store.
    """

    __slots__ = ("_steps",)

    def __init__(self, steps: Iterable[Step] = ()) -> None:
        self._steps: Tuple[Step, ...] = tuple(steps)

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    def replace(self, steps: Iterable[Step]) -> None:
        """Swap in a new sequence."""

        self._steps = tuple(steps)

    def clear(self) -> None:
        self._steps = ()

    def step_at(self, index: int) -> Step:
        if not 0 <= index < len(self._steps):
            raise IndexOutOfRange(f"index {index} not in [0, {len(self._steps) - 1}]")
        return self._steps[index]

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __bool__(self) -> bool:
        return bool(self._steps)


__all__ = ["StepStore"]

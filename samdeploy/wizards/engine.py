"""Multi-step wizard engine.

A wizard is a finite set of named steps (an :class:`~enum.Enum`) plus one
handler per step.  Each handler reads and writes the wizard's response
object and returns a :class:`StepOutcome` telling the engine what to do
next:

- ``StepOutcome.advance(step)`` — run *step* next (forward or back)
- ``StepOutcome.cancel()``      — stop; the wizard produces no result
- ``StepOutcome.complete()``    — stop; assemble and return the result

Steps run strictly one at a time.  Prompts inside a handler block the run
until the user answers, so the response object only ever has one writer.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WizardIncompleteError(RuntimeError):
    """A wizard reached ``Complete`` without every required answer.

    This is a defect in the step graph, never a user error.
    """


class OutcomeKind(str, Enum):
    """Possible results of executing one step."""

    ADVANCE = "advance"
    CANCEL = "cancel"
    COMPLETE = "complete"


@dataclass(frozen=True)
class StepOutcome:
    """Tagged result of a single step: advance, cancel, or complete."""

    kind: OutcomeKind
    next_step: Enum | None = None

    def __post_init__(self):
        if self.kind is OutcomeKind.ADVANCE and self.next_step is None:
            raise ValueError("An advance outcome needs a next step")
        if self.kind is not OutcomeKind.ADVANCE and self.next_step is not None:
            raise ValueError(f"A {self.kind.value} outcome cannot name a next step")

    @classmethod
    def advance(cls, step: Enum) -> StepOutcome:
        return cls(OutcomeKind.ADVANCE, step)

    @classmethod
    def cancel(cls) -> StepOutcome:
        return cls(OutcomeKind.CANCEL)

    @classmethod
    def complete(cls) -> StepOutcome:
        return cls(OutcomeKind.COMPLETE)


StepHandler = Callable[[], StepOutcome]


class MultiStepWizard(ABC, Generic[T]):
    """Base class for backtrackable, prompt-driven wizards.

    Subclasses declare their steps as an enum, map each member to a
    handler in :meth:`get_steps`, and build the final result in
    :meth:`get_result`.  Going "back" is just advancing to an earlier
    step; there is no implicit history stack.
    """

    def __init__(self):
        self._history: list[Enum] = []

    @property
    @abstractmethod
    def start_step(self) -> Enum:
        """The step the run begins at."""

    @abstractmethod
    def get_steps(self) -> dict[Enum, StepHandler]:
        """Return the handler for every step in the wizard."""

    @abstractmethod
    def get_result(self) -> T | None:
        """Assemble the final result, or None if any answer is missing."""

    @property
    def history(self) -> list[Enum]:
        """Steps executed by the last run, in order."""
        return list(self._history)

    def run(self) -> T | None:
        """Execute steps until one cancels or completes.

        Returns:
            The assembled result on completion, or None if the user
            cancelled.  Exceptions raised by step handlers propagate.

        Raises:
            WizardIncompleteError: if the wizard completes without a
                full result.
        """
        steps = self.get_steps()
        current = self.start_step
        self._history = []

        while True:
            handler = steps.get(current)
            if handler is None:
                raise KeyError(f"No handler registered for step {current!r}")

            self._history.append(current)
            outcome = handler()
            logger.debug("Wizard step %s -> %s", current.name, outcome.kind.value)

            if outcome.kind is OutcomeKind.ADVANCE:
                current = outcome.next_step
                continue

            if outcome.kind is OutcomeKind.CANCEL:
                logger.info("Wizard cancelled at step %s", current.name)
                return None

            result = self.get_result()
            if result is None:
                raise WizardIncompleteError(
                    f"Wizard completed at step {current.name} without all required values"
                )
            return result

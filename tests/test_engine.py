"""Tests for samdeploy.wizards.engine — StepOutcome and MultiStepWizard.run()."""

from enum import Enum

import pytest

from samdeploy.wizards.engine import MultiStepWizard, OutcomeKind, StepOutcome, WizardIncompleteError


class Step(Enum):
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"


class ToyWizard(MultiStepWizard):
    """Three steps driven by a scripted list of outcomes per step."""

    def __init__(self, script, result="done"):
        super().__init__()
        self.script = {step: list(outcomes) for step, outcomes in script.items()}
        self.result = result

    @property
    def start_step(self):
        return Step.FIRST

    def get_steps(self):
        return {step: self._handler(step) for step in Step}

    def _handler(self, step):
        return lambda: self.script[step].pop(0)

    def get_result(self):
        return self.result


# ======================================================================
# StepOutcome
# ======================================================================


class TestStepOutcome:
    """Tagged outcome constructors and invariants."""

    def test_advance_carries_step(self):
        outcome = StepOutcome.advance(Step.SECOND)
        assert outcome.kind is OutcomeKind.ADVANCE
        assert outcome.next_step is Step.SECOND

    def test_cancel_and_complete_have_no_step(self):
        assert StepOutcome.cancel().next_step is None
        assert StepOutcome.complete().next_step is None

    def test_advance_without_step_rejected(self):
        with pytest.raises(ValueError, match="needs a next step"):
            StepOutcome(OutcomeKind.ADVANCE)

    def test_cancel_with_step_rejected(self):
        with pytest.raises(ValueError, match="cannot name a next step"):
            StepOutcome(OutcomeKind.CANCEL, Step.FIRST)


# ======================================================================
# MultiStepWizard.run
# ======================================================================


class TestMultiStepWizardRun:
    """Loop semantics: advance, back, cancel, complete, fail fast."""

    def test_linear_completion(self):
        wizard = ToyWizard({
            Step.FIRST: [StepOutcome.advance(Step.SECOND)],
            Step.SECOND: [StepOutcome.advance(Step.THIRD)],
            Step.THIRD: [StepOutcome.complete()],
        })
        assert wizard.run() == "done"
        assert wizard.history == [Step.FIRST, Step.SECOND, Step.THIRD]

    def test_cancel_at_entry_returns_none(self):
        wizard = ToyWizard({Step.FIRST: [StepOutcome.cancel()]})
        assert wizard.run() is None
        assert wizard.history == [Step.FIRST]

    def test_cancel_discards_result(self):
        wizard = ToyWizard({
            Step.FIRST: [StepOutcome.advance(Step.SECOND)],
            Step.SECOND: [StepOutcome.cancel()],
        })
        assert wizard.run() is None

    def test_backtracking_revisits_steps(self):
        wizard = ToyWizard({
            Step.FIRST: [StepOutcome.advance(Step.SECOND), StepOutcome.advance(Step.SECOND)],
            Step.SECOND: [StepOutcome.advance(Step.FIRST), StepOutcome.advance(Step.THIRD)],
            Step.THIRD: [StepOutcome.complete()],
        })
        assert wizard.run() == "done"
        assert wizard.history == [Step.FIRST, Step.SECOND, Step.FIRST, Step.SECOND, Step.THIRD]

    def test_complete_without_result_fails_fast(self):
        wizard = ToyWizard({Step.FIRST: [StepOutcome.complete()]}, result=None)
        with pytest.raises(WizardIncompleteError, match="FIRST"):
            wizard.run()

    def test_handler_exception_propagates(self):
        def boom():
            raise RuntimeError("prompt crashed")

        wizard = ToyWizard({})
        wizard.get_steps = lambda: {Step.FIRST: boom}
        with pytest.raises(RuntimeError, match="prompt crashed"):
            wizard.run()

    def test_missing_handler_raises_key_error(self):
        wizard = ToyWizard({Step.FIRST: [StepOutcome.advance(Step.SECOND)]})
        wizard.get_steps = lambda: {Step.FIRST: lambda: StepOutcome.advance(Step.SECOND)}
        with pytest.raises(KeyError, match="SECOND"):
            wizard.run()

    def test_history_reset_between_runs(self):
        wizard = ToyWizard({
            Step.FIRST: [StepOutcome.cancel(), StepOutcome.cancel()],
        })
        wizard.run()
        wizard.run()
        assert wizard.history == [Step.FIRST]

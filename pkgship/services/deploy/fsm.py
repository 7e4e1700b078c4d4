from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TypeVar

from pkgship.core.result import Err, Ok, Result
from pkgship.services.deploy.errors import DeployError

S = TypeVar("S")
R = TypeVar("R")


@dataclass(frozen=True, slots=True)
class StepAdvance[S]:
    session: S


@dataclass(frozen=True, slots=True)
class StepFinish[R]:
    result: R


StepOutcome = StepAdvance[S] | StepFinish[R]
StepHandler = Callable[[S], Result[StepOutcome[S, R], DeployError]]


def advance[S](session: S) -> StepAdvance[S]:
    return StepAdvance(session=session)


def finish[R](result: R) -> StepFinish[R]:
    return StepFinish(result=result)


def run_steps[S, R, K](
    *,
    initial_state: S,
    get_step: Callable[[S], K],
    handlers: Mapping[K, StepHandler[S, R]],
) -> Result[R, DeployError]:
    """Drive handlers until one finishes or fails.

    Each handler either advances to a new state (which names the next step)
    or finishes the run. The first Err stops the run.
    """
    current = initial_state

    while True:
        step = get_step(current)
        handler = handlers.get(step)
        if handler is None:
            raise AssertionError(f"no handler for deploy step: {step}")

        outcome = handler(current)
        if isinstance(outcome, Err):
            return outcome

        if isinstance(outcome.value, StepFinish):
            return Ok(outcome.value.result)

        current = outcome.value.session

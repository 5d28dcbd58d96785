from typing import Generic, List, Sequence, TypeVar
import logging

logger = logging.getLogger(__name__)

StepT = TypeVar("StepT")


class StepSequencer(Generic[StepT]):
    """
    Forward/backward navigation over a fixed, ordered list of steps.

    Jumping is restricted to already visited (earlier) steps unless
    unrestricted_jump is set, as it is when editing an existing listing.
    Invalid moves are ignored rather than raised.
    """

    def __init__(self, steps: Sequence[StepT], unrestricted_jump: bool = False):
        if not steps:
            raise ValueError("A step sequence needs at least one step")
        if len(set(steps)) != len(steps):
            raise ValueError("Step identifiers must be unique")

        self._steps: List[StepT] = list(steps)
        self.unrestricted_jump = unrestricted_jump
        self._index = 0

    @property
    def steps(self) -> List[StepT]:
        return list(self._steps)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_step(self) -> StepT:
        return self._steps[self._index]

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index == len(self._steps) - 1

    def next(self) -> StepT:
        if not self.is_last:
            self._index += 1
        return self.current_step

    # Steps are all optional, so skipping is just moving on
    skip = next

    def previous(self) -> StepT:
        if not self.is_first:
            self._index -= 1
        return self.current_step

    def can_jump_to(self, step: StepT) -> bool:
        if step not in self._steps:
            return False
        if self.unrestricted_jump:
            return True
        return self._steps.index(step) < self._index

    def jump_to(self, step: StepT) -> StepT:
        if self.can_jump_to(step):
            self._index = self._steps.index(step)
        else:
            logger.debug(f"Ignoring jump to {step} from {self.current_step}")
        return self.current_step

    def reset(self) -> StepT:
        self._index = 0
        return self.current_step

"""
Termination conditions for a GA run.
"""

from collections import deque
from typing import Dict, Type

from .population import Population


class Terminator:
    """Decides, once per generation, whether the run is over."""

    name = "terminator"

    def should_terminate(self, population: Population) -> bool:
        raise NotImplementedError


class NumGenerationsTerminator(Terminator):
    """Stop once the population has gone through a fixed number of generations."""

    name = "generations"

    def __init__(self, num_generations: int, low_good: bool = True):
        self.num_generations = num_generations

    def should_terminate(self, population: Population) -> bool:
        return population.generation >= self.num_generations


class ConvergenceTerminator(Terminator):
    """
    Stop when the average fitness stops improving.

    The average fitness of the first `window` generations is recorded.
    From then on, the run ends as soon as the current average is no better
    than the mean of the last `window` recorded averages.

    Args:
        window: Number of past generations to compare against
        low_good: True if lower fitness values are better
    """

    name = "convergence"

    def __init__(self, window: int, low_good: bool = True):
        self.window = window
        self.low_good = low_good
        self.past_averages = deque()

    def should_terminate(self, population: Population) -> bool:
        current = population.average_fitness
        if population.generation < self.window or not self.past_averages:
            self.past_averages.append(current)
            return False

        past = sum(self.past_averages) / len(self.past_averages)
        improved = current < past if self.low_good else current > past
        if not improved:
            return True

        self.past_averages.append(current)
        while len(self.past_averages) > self.window:
            self.past_averages.popleft()
        return False


TERMINATORS: Dict[str, Type[Terminator]] = {
    NumGenerationsTerminator.name: NumGenerationsTerminator,
    ConvergenceTerminator.name: ConvergenceTerminator,
}


def create_terminator(name: str, generations: int, low_good: bool) -> Terminator:
    """
    Build a terminator from its configuration name.

    Raises:
        KeyError: If name is not registered
    """
    try:
        terminator_cls = TERMINATORS[name]
    except KeyError:
        raise KeyError(
            f"Unknown terminator: '{name}'. "
            f"Available: {', '.join(sorted(TERMINATORS))}"
        ) from None
    return terminator_cls(generations, low_good)

"""
Progress reporters.

A printer has three hooks, called before the run, after every generation
and after the run. Each returns the text to display; the environment never
acts on what a printer returns.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Type


class EnvironmentPrinter:
    """Base printer: prints nothing."""

    name = "quiet"

    def print_start(self, environment) -> str:
        return ""

    def print_generation(self, environment) -> str:
        return ""

    def print_end(self, environment) -> str:
        return ""


class QuietPrinter(EnvironmentPrinter):
    pass


class VerbosePrinter(EnvironmentPrinter):
    """Dumps the whole population after every generation."""

    name = "verbose"

    def print_generation(self, environment) -> str:
        return str(environment.population) + "\n"

    def print_end(self, environment) -> str:
        best = environment.population.best_individual()
        return f"Most fit individual:\n{best}\n"


class MaxFitnessPrinter(EnvironmentPrinter):
    """One line per generation with the best fitness found so far in the population."""

    name = "max_fitness"

    def print_start(self, environment) -> str:
        return "Best fitnesses:\n"

    def print_generation(self, environment) -> str:
        population = environment.population
        return f"Generation {population.generation}: {population.best_fitness}\n"

    def print_end(self, environment) -> str:
        best = environment.population.best_individual()
        return f"Most fit individual:\n{best}\n"


@dataclass
class FitnessHistory:
    """
    Per-generation fitness statistics collected during a run.

    Attributes:
        generations: Generation numbers
        best: Best fitness per generation
        average: Average fitness per generation
        worst: Worst fitness per generation
    """
    generations: List[int] = field(default_factory=list)
    best: List[float] = field(default_factory=list)
    average: List[float] = field(default_factory=list)
    worst: List[float] = field(default_factory=list)

    def record(self, population) -> None:
        self.generations.append(population.generation)
        self.best.append(population.best_fitness)
        self.average.append(population.average_fitness)
        self.worst.append(population.worst_fitness)

    def __len__(self) -> int:
        return len(self.generations)


PRINTERS: Dict[str, Type[EnvironmentPrinter]] = {
    QuietPrinter.name: QuietPrinter,
    VerbosePrinter.name: VerbosePrinter,
    MaxFitnessPrinter.name: MaxFitnessPrinter,
}


def create_printer(name: str) -> EnvironmentPrinter:
    """
    Build a printer from its configuration name.

    Raises:
        KeyError: If name is not registered
    """
    try:
        return PRINTERS[name]()
    except KeyError:
        raise KeyError(
            f"Unknown reporter: '{name}'. "
            f"Available: {', '.join(sorted(PRINTERS))}"
        ) from None

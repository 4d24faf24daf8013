"""
Run driver.

The environment owns a population, a terminator and a printer, and steps
the population through generations until the terminator says stop.
"""

import sys
from typing import Optional, TextIO

from .individual import Individual
from .population import Population
from .printers import EnvironmentPrinter, FitnessHistory, VerbosePrinter
from .terminators import Terminator


class Environment:
    """
    Args:
        population: Seeded population to evolve
        terminator: Termination condition
        printer: Progress printer (defaults to VerbosePrinter)
        stream: Where printer output goes (defaults to stdout)
        history: Optional recorder of per-generation statistics
    """

    def __init__(self,
                 population: Population,
                 terminator: Terminator,
                 printer: Optional[EnvironmentPrinter] = None,
                 stream: Optional[TextIO] = None,
                 history: Optional[FitnessHistory] = None):
        self.population = population
        self.terminator = terminator
        self.printer = printer if printer is not None else VerbosePrinter()
        self.stream = stream if stream is not None else sys.stdout
        self.history = history

    def _emit(self, text: str) -> None:
        if text:
            self.stream.write(text)
            self.stream.flush()

    def _generation_done(self) -> None:
        if self.history is not None:
            self.history.record(self.population)
        self._emit(self.printer.print_generation(self))

    def run(self) -> Individual:
        """
        Evolve until the terminator fires.

        Returns:
            Best individual of the final generation
        """
        self._emit(self.printer.print_start(self))
        self._generation_done()

        while not self.terminator.should_terminate(self.population):
            self.population.undergo_generation()
            self._generation_done()

        self._emit(self.printer.print_end(self))
        return self.population.best_individual()

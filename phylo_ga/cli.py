"""
CLI module for the phylogenetic GA.

Handles run configuration loading, validation, strategy construction and
the run itself.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import yaml

from .data_models import Taxon
from .environment import Environment
from .individual import INDIVIDUALS, get_individual_type
from .msa_io import READERS, AlignmentFormatError, read_alignment
from .population import Population
from .printers import PRINTERS, FitnessHistory, create_printer
from .scheduler import RunContext
from .selection import SELECTIONS, create_selection
from .terminators import TERMINATORS, create_terminator

MIN_TAXA = 3

DEFAULTS = {
    'low_good': True,
    'workers': None,
    'population': {
        'individual': 'phylogenetic_tree',
        'crossover_rate': 0.8,
        'mutation_rate': 0.05,
        'elitism': 0.1,
        'max_size': 40,
    },
    'selection': {
        'parent': 'tournament',
        'survivor': 'truncation',
    },
    'termination': {
        'type': 'generations',
        'generations': 50,
    },
    'reporter': 'max_fitness',
    'output': {},
}


class ConfigValidationError(Exception):
    """Raised when run configuration is invalid."""
    pass


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")
    if not isinstance(config, dict):
        raise ConfigValidationError("Configuration file must contain a mapping")

    return config


def apply_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in missing optional settings without touching the input dict."""
    merged = dict(config)
    for key, default in DEFAULTS.items():
        if isinstance(default, dict):
            section = merged.get(key) or {}
            if not isinstance(section, dict):
                raise ConfigValidationError(f"'{key}' must be a dictionary")
            merged[key] = {**default, **section}
        else:
            merged.setdefault(key, default)
    return merged


def _check_fraction(section: Dict[str, Any], field: str, prefix: str) -> None:
    value = section[field]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
        raise ConfigValidationError(
            f"'{prefix}.{field}' must be a number between 0 and 1, got: {value}"
        )


def _check_name(value: Any, registry: Dict[str, Any], field: str) -> None:
    if value not in registry:
        raise ConfigValidationError(
            f"Invalid {field}: '{value}'. Must be one of: {', '.join(sorted(registry))}"
        )


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration structure.

    Expects a config that already went through apply_defaults().

    Args:
        config: Run configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    # Alignment section
    if 'alignment' not in config:
        raise ConfigValidationError("Missing required field: 'alignment'")

    alignment = config['alignment']
    if not isinstance(alignment, dict):
        raise ConfigValidationError("'alignment' must be a dictionary")
    if 'path' not in alignment:
        raise ConfigValidationError("Missing required field: 'alignment.path'")
    if alignment.get('format') is not None:
        _check_name(alignment['format'], READERS, "'alignment.format'")

    if not isinstance(config['low_good'], bool):
        raise ConfigValidationError(f"'low_good' must be true or false, got: {config['low_good']}")

    workers = config['workers']
    if workers is not None and (not isinstance(workers, int) or workers <= 0):
        raise ConfigValidationError(f"'workers' must be a positive integer or null, got: {workers}")

    seed = config.get('random_seed')
    if seed is not None and (not isinstance(seed, int) or seed < 0):
        raise ConfigValidationError(f"'random_seed' must be a non-negative integer, got: {seed}")

    # Population section
    population = config['population']
    _check_name(population['individual'], INDIVIDUALS, "'population.individual'")
    for field in ('crossover_rate', 'mutation_rate', 'elitism'):
        _check_fraction(population, field, 'population')

    max_size = population['max_size']
    if not isinstance(max_size, int) or isinstance(max_size, bool) or max_size < 1:
        raise ConfigValidationError(
            f"'population.max_size' must be a positive integer, got: {max_size}"
        )

    # Selection section
    selection = config['selection']
    _check_name(selection['parent'], SELECTIONS, "'selection.parent'")
    _check_name(selection['survivor'], SELECTIONS, "'selection.survivor'")

    # Termination section
    termination = config['termination']
    _check_name(termination['type'], TERMINATORS, "'termination.type'")
    generations = termination['generations']
    if not isinstance(generations, int) or isinstance(generations, bool) or generations < 0:
        raise ConfigValidationError(
            f"'termination.generations' must be a non-negative integer, got: {generations}"
        )

    _check_name(config['reporter'], PRINTERS, "'reporter'")

    if not isinstance(config['output'], dict):
        raise ConfigValidationError("'output' must be a dictionary")


def load_taxa(config: Dict[str, Any]) -> List[Taxon]:
    """
    Read and check the run's taxa.

    Raises:
        FileNotFoundError: If the alignment file doesn't exist
        AlignmentFormatError: If the alignment can't support a run
    """
    alignment = config['alignment']
    taxa = read_alignment(alignment['path'], alignment.get('format'))

    if len(taxa) < MIN_TAXA:
        raise AlignmentFormatError(
            f"{alignment['path']}: need at least {MIN_TAXA} taxa, found {len(taxa)}"
        )
    if len(taxa[0]) == 0:
        raise AlignmentFormatError(
            f"{alignment['path']}: alignment has no parsimony-informative sites"
        )
    return taxa


def build_environment(config: Dict[str, Any], taxa: List[Taxon], context: RunContext,
                      rng: np.random.Generator,
                      history: Optional[FitnessHistory] = None) -> Environment:
    """
    Construct and seed the population, terminator and printer for a run.

    Args:
        config: Validated run configuration
        taxa: Taxa to build trees from
        context: Run context owning the fitness scheduler
        rng: Random number generator shared by the run
        history: Optional fitness history recorder

    Returns:
        Environment ready to run
    """
    low_good = config['low_good']
    pop_config = config['population']

    population = Population(
        crossover_rate=pop_config['crossover_rate'],
        mutation_rate=pop_config['mutation_rate'],
        elitism=pop_config['elitism'],
        max_size=pop_config['max_size'],
        parent_selection=create_selection(config['selection']['parent'], low_good, rng),
        survivor_selection=create_selection(config['selection']['survivor'], low_good, rng),
        low_good=low_good,
        rng=rng,
    )
    population.seed_random(context, get_individual_type(pop_config['individual']), taxa)

    terminator = create_terminator(
        config['termination']['type'],
        config['termination']['generations'],
        low_good,
    )

    return Environment(
        population,
        terminator,
        printer=create_printer(config['reporter']),
        history=history,
    )


def run_from_config(config_path: str, overrides: Optional[Dict[str, Any]] = None):
    """
    Load run configuration and execute the GA.

    Args:
        config_path: Path to run configuration YAML file
        overrides: Values replacing config entries: 'random_seed',
            'generations', 'history_plot'

    Returns:
        Best individual of the final generation

    Raises:
        FileNotFoundError: If config or alignment file doesn't exist
        ConfigValidationError: If config is invalid
        AlignmentFormatError: If the alignment is unusable
    """
    overrides = overrides or {}

    print(f"Loading configuration from: {config_path}")
    config = apply_defaults(load_run_config(config_path))

    if overrides.get('random_seed') is not None:
        config['random_seed'] = overrides['random_seed']
    if overrides.get('generations') is not None:
        config['termination'] = {**config['termination'], 'generations': overrides['generations']}
    if overrides.get('history_plot') is not None:
        config['output'] = {**config['output'], 'history_plot': overrides['history_plot']}

    print("Validating configuration...")
    validate_run_config(config)

    print(f"Loading alignment from: {config['alignment']['path']}")
    taxa = load_taxa(config)
    print(f"Taxa: {len(taxa)}, informative sites: {len(taxa[0])}")

    seed = config.get('random_seed')
    if seed is None:
        seed = int(np.random.randint(0, 2**31))
    print(f"Random seed: {seed}\n")
    rng = np.random.default_rng(seed)

    history = FitnessHistory()
    start_time = time.time()

    with RunContext(config['workers']) as context:
        environment = build_environment(config, taxa, context, rng, history)
        best = environment.run()
        best_fitness = best.fitness
        best_tree = best.genotype.tree.to_newick()

    elapsed_time = time.time() - start_time

    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Generations: {environment.population.generation}")
    print(f"Best parsimony cost: {best_fitness}")
    print(f"Best tree: {best_tree}")
    print(f"Elapsed: {elapsed_time:.3f} seconds")

    plot_path = config['output'].get('history_plot')
    if plot_path:
        from .visualization import plot_fitness_history
        saved = plot_fitness_history(history, plot_path)
        print(f"Fitness history plot: {saved}")

    return best


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point with command-line argument parsing"""
    parser = argparse.ArgumentParser(
        description="Evolve maximum-parsimony phylogenetic trees with a genetic algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 phylo_cli.py examples/run_config.yaml
  python3 phylo_cli.py examples/run_config.yaml --seed 7 --generations 20
  python3 phylo_cli.py examples/run_config.yaml --plot output/history.png
        """
    )

    parser.add_argument('config', help='Run configuration YAML file')
    parser.add_argument('--seed', '-s', type=int, metavar='N',
                        help='Random seed (overrides random_seed)')
    parser.add_argument('--generations', '-g', type=int, metavar='N',
                        help='Overrides termination.generations')
    parser.add_argument('--plot', '-p', metavar='PATH',
                        help='Write a fitness history plot to PATH')

    args = parser.parse_args(argv)

    try:
        run_from_config(args.config, {
            'random_seed': args.seed,
            'generations': args.generations,
            'history_plot': args.plot,
        })
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()

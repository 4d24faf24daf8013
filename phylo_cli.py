#!/usr/bin/env python3
"""
Phylogenetic GA CLI - Minimal entry point.

Evolves maximum-parsimony trees for the alignment named in a YAML run
configuration.

Usage:
    python3 phylo_cli.py run_config.yaml
    python3 phylo_cli.py run_config.yaml --seed 7 --generations 20
    python3 phylo_cli.py run_config.yaml --plot output/history.png
    python3 phylo_cli.py --help

Example:
    python3 phylo_cli.py examples/run_config.yaml
"""

import sys
from pathlib import Path

# Add project root to path if needed
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from phylo_ga.cli import main


if __name__ == '__main__':
    main()

"""
Multiple sequence alignment readers.

Reads ClustalW and FASTA alignments into Taxon lists, validates them and
trims every sequence down to its parsimony-informative columns.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from .data_models import Taxon
from .sankoff import trim_to_informative

CLUSTAL_HEADER = "CLUSTAL"


class AlignmentFormatError(ValueError):
    """Raised when an alignment file cannot be turned into a taxon list."""
    pass


def _add_block(name: str, block: str, sequences: Dict[str, str]) -> None:
    """Append a sequence block to a taxon, creating the taxon on first sight."""
    sequences[name] = sequences.get(name, "") + block


def read_clustalw(path: Union[str, Path]) -> Dict[str, str]:
    """
    Read a ClustalW alignment.

    Format:
        CLUSTAL W (1.83) multiple sequence alignment

        taxon_a     ACGT-ACGTA 10
        taxon_b     ACGTTACGTA 10
                    **** *****

    Blank lines, the CLUSTAL header and lines starting with whitespace
    (conservation markers) are skipped. The first token of a line is the
    taxon name and the second its sequence block; an optional trailing
    residue count is ignored. Blocks are concatenated per taxon.

    Args:
        path: Alignment file

    Returns:
        Mapping of taxon name to aligned sequence, in first-seen order

    Raises:
        FileNotFoundError: If the file doesn't exist
        AlignmentFormatError: If a line cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Alignment file not found: {path}")

    sequences: Dict[str, str] = {}
    with open(path, 'r') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.rstrip("\n")
            if not line.strip() or line[0].isspace() or line.startswith(CLUSTAL_HEADER):
                continue

            fields = line.split()
            if len(fields) < 2:
                raise AlignmentFormatError(
                    f"{path}:{line_number}: expected '<name> <sequence>', got {line!r}"
                )
            _add_block(fields[0], fields[1], sequences)

    return sequences


def read_fasta(path: Union[str, Path]) -> Dict[str, str]:
    """
    Read an aligned FASTA file.

    Args:
        path: Alignment file

    Returns:
        Mapping of taxon name (first word of the header) to sequence

    Raises:
        FileNotFoundError: If the file doesn't exist
        AlignmentFormatError: If sequence data appears before any header
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Alignment file not found: {path}")

    sequences: Dict[str, str] = {}
    name = None
    with open(path, 'r') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            if line.startswith(">"):
                header = line[1:].split()
                if not header:
                    raise AlignmentFormatError(f"{path}:{line_number}: empty FASTA header")
                name = header[0]
                sequences.setdefault(name, "")
            elif name is None:
                raise AlignmentFormatError(
                    f"{path}:{line_number}: sequence data before the first '>' header"
                )
            else:
                _add_block(name, line, sequences)

    return sequences


READERS = {
    "clustalw": read_clustalw,
    "fasta": read_fasta,
}

EXTENSIONS = {
    ".aln": "clustalw",
    ".clustal": "clustalw",
    ".clustalw": "clustalw",
    ".fa": "fasta",
    ".fas": "fasta",
    ".fasta": "fasta",
}


def detect_format(path: Union[str, Path]) -> str:
    """Guess the alignment format from the file extension (ClustalW by default)."""
    return EXTENSIONS.get(Path(path).suffix.lower(), "clustalw")


def validate_sequences(sequences: Dict[str, str], source: str = "alignment") -> None:
    """
    Check that an alignment has taxa with equal-length sequences.

    Raises:
        AlignmentFormatError: If the alignment is empty or ragged
    """
    if not sequences:
        raise AlignmentFormatError(f"{source}: no taxa found")

    lengths = {name: len(seq) for name, seq in sequences.items()}
    expected = next(iter(lengths.values()))
    ragged = [name for name, length in lengths.items() if length != expected]
    if ragged:
        raise AlignmentFormatError(
            f"{source}: sequences differ in length; expected {expected}, "
            f"mismatched taxa: {', '.join(ragged)}"
        )


def read_alignment(path: Union[str, Path], fmt: Optional[str] = None,
                   informative_only: bool = True) -> List[Taxon]:
    """
    Read an alignment into taxa ready for tree building.

    Args:
        path: Alignment file
        fmt: 'clustalw' or 'fasta' (detected from the extension if None)
        informative_only: Drop non-informative columns (default True)

    Returns:
        List of Taxon objects with uppercase sequences

    Raises:
        FileNotFoundError: If the file doesn't exist
        AlignmentFormatError: If the format is unknown or the content invalid
    """
    if fmt is None:
        fmt = detect_format(path)
    if fmt not in READERS:
        raise AlignmentFormatError(
            f"Unknown alignment format: '{fmt}'. Available: {', '.join(sorted(READERS))}"
        )

    sequences = READERS[fmt](path)
    validate_sequences(sequences, source=str(path))

    taxa = [Taxon(name, sequence.upper()) for name, sequence in sequences.items()]
    if informative_only:
        taxa = trim_to_informative(taxa)
    return taxa

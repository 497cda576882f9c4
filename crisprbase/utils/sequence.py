"""
Sequence manipulation utilities.

Provides the IUPAC nucleotide ambiguity table and the reverse complement
used throughout crisprbase.
"""

from itertools import product
from typing import Dict, List


# IUPAC nucleotide ambiguity codes
IUPAC_CODE_MAP: Dict[str, str] = {
    'A': 'A',
    'C': 'C',
    'G': 'G',
    'T': 'T',
    'M': 'AC',
    'R': 'AG',
    'W': 'AT',
    'S': 'CG',
    'Y': 'CT',
    'K': 'GT',
    'V': 'ACG',
    'H': 'ACT',
    'D': 'AGT',
    'B': 'CGT',
    'N': 'ACGT',
}

_COMPLEMENT = {
    'A': 'T', 'T': 'A', 'G': 'C', 'C': 'G', 'N': 'N',
    'M': 'K', 'K': 'M', 'R': 'Y', 'Y': 'R', 'W': 'W', 'S': 'S',
    'V': 'B', 'B': 'V', 'H': 'D', 'D': 'H',
}
_COMPLEMENT.update({k.lower(): v.lower() for k, v in _COMPLEMENT.items()})


def reverse_complement(seq: str) -> str:
    """Return reverse complement of a DNA sequence (IUPAC-aware)."""
    return ''.join(_COMPLEMENT.get(base, 'N') for base in reversed(seq))


# Alias for backward compatibility
rev_comp = reverse_complement


def invalid_nucleotides(seq: str) -> List[str]:
    """Return the characters of seq that are not IUPAC nucleotide codes."""
    return sorted(set(seq) - set(IUPAC_CODE_MAP))


def expand_motif(motif: str) -> List[str]:
    """Expand an ambiguous motif into all matching ACGT sequences.

    Examples:
        >>> expand_motif("NGG")
        ['AGG', 'CGG', 'GGG', 'TGG']
    """
    choices = [IUPAC_CODE_MAP[base] for base in motif.upper()]
    return [''.join(bases) for bases in product(*choices)]

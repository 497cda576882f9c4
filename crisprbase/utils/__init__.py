"""
Utility modules for crisprbase.
"""

from .sequence import (
    IUPAC_CODE_MAP,
    expand_motif,
    invalid_nucleotides,
    rev_comp,
    reverse_complement,
)

__all__ = [
    'IUPAC_CODE_MAP',
    'reverse_complement',
    'rev_comp',
    'invalid_nucleotides',
    'expand_motif',
]

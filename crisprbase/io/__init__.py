"""
I/O modules for crisprbase.
"""

from .anchors import (
    load_anchors,
    validate_anchors,
)
from .output import (
    cut_sites_to_frame,
    ranges_to_frame,
    write_ranges_tsv,
)

__all__ = [
    'load_anchors',
    'validate_anchors',
    'ranges_to_frame',
    'cut_sites_to_frame',
    'write_ranges_tsv',
]

"""
crisprbase - nuclease models and CRISPR target coordinate arithmetic.
"""

__version__ = "0.1.0"

from .core.cutting import cut_offset_in_protospacer, cut_sites, get_cut_sites
from .core.extraction import (
    extract_pam_from_target,
    extract_protospacer_from_target,
    extract_spacer_from_target,
)
from .core.models import (
    EditingWeights,
    Nuclease,
    NucleaseKind,
    PamSide,
    Strandedness,
    TargetType,
    build_base_editor,
    build_crispr_nickase,
    build_crispr_nuclease,
    build_nuclease,
)
from .core.notation import MotifRecord, parse_motif_notation
from .core.ranges import (
    BatchResult,
    GenomicRange,
    get_pam_ranges,
    get_protospacer_ranges,
    get_spacer_ranges,
    get_target_ranges,
)
from .nucleases import NUCLEASES, RESTRICTION_ENZYMES, get_nuclease

__all__ = [
    "MotifRecord",
    "parse_motif_notation",
    "Nuclease",
    "NucleaseKind",
    "TargetType",
    "PamSide",
    "Strandedness",
    "EditingWeights",
    "build_nuclease",
    "build_crispr_nuclease",
    "build_crispr_nickase",
    "build_base_editor",
    "GenomicRange",
    "BatchResult",
    "get_pam_ranges",
    "get_protospacer_ranges",
    "get_spacer_ranges",
    "get_target_ranges",
    "cut_sites",
    "get_cut_sites",
    "cut_offset_in_protospacer",
    "extract_pam_from_target",
    "extract_protospacer_from_target",
    "extract_spacer_from_target",
    "NUCLEASES",
    "RESTRICTION_ENZYMES",
    "get_nuclease",
    "__version__",
]

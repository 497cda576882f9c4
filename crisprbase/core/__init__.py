"""
Core modules for crisprbase: motif notation, nuclease models, coordinate
arithmetic and sequence extraction.
"""

from .cutting import (
    cut_offset_in_protospacer,
    cut_sites,
    get_cut_sites,
    motif_cut_offset,
    primary_cut_offset,
)
from .extraction import (
    extract_pam_from_target,
    extract_protospacer_from_target,
    extract_spacer_from_target,
)
from .models import (
    BaseEditorProfile,
    EditingWeights,
    Nuclease,
    NucleaseKind,
    PamSide,
    SpacerGeometry,
    Strandedness,
    TargetType,
    build_base_editor,
    build_crispr_nickase,
    build_crispr_nuclease,
    build_nuclease,
)
from .notation import (
    CutSpecification,
    MotifRecord,
    parse_motif_notation,
    parse_motif_notations,
)
from .ranges import (
    REGIONS,
    BatchResult,
    GenomicRange,
    get_pam_ranges,
    get_protospacer_ranges,
    get_ranges,
    get_spacer_ranges,
    get_target_ranges,
)

__all__ = [
    # Notation
    'CutSpecification',
    'MotifRecord',
    'parse_motif_notation',
    'parse_motif_notations',
    # Models
    'TargetType',
    'PamSide',
    'Strandedness',
    'NucleaseKind',
    'SpacerGeometry',
    'EditingWeights',
    'BaseEditorProfile',
    'Nuclease',
    'build_nuclease',
    'build_crispr_nuclease',
    'build_crispr_nickase',
    'build_base_editor',
    # Ranges
    'REGIONS',
    'GenomicRange',
    'BatchResult',
    'get_pam_ranges',
    'get_protospacer_ranges',
    'get_spacer_ranges',
    'get_target_ranges',
    'get_ranges',
    # Cut sites
    'cut_sites',
    'get_cut_sites',
    'motif_cut_offset',
    'primary_cut_offset',
    'cut_offset_in_protospacer',
    # Extraction
    'extract_pam_from_target',
    'extract_protospacer_from_target',
    'extract_spacer_from_target',
]

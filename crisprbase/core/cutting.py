"""
Cut sites of nucleases.

Motif cut offsets point to the nucleotide immediately downstream of the
cut and are counted from the first motif nucleotide. For CRISPR nucleases
the motif is the PAM/PFS, so offsets are relative to the PAM site:
SpCas9 '(3/3)NGG' cuts 3 nt upstream of the PAM (offset -3), AsCas12a
'TTTV(18/23)' cuts 18 and 23 nt after the PAM (offsets 22 and 27).
"""

import logging
from typing import Optional, Union

import pandas as pd

from ..errors import InvalidNucleaseDefinition, UndefinedCutSite
from .models import Nuclease, PamSide, Strandedness, coerce_enum
from .notation import MotifRecord
from .ranges import (
    DEFAULT_PARALLEL_THRESHOLD,
    BatchResult,
    normalize_anchors,
    project_offsets,
)

logger = logging.getLogger(__name__)


def _check_defined(nuclease: Nuclease, motif: MotifRecord):
    if not motif.has_cut_sites:
        raise UndefinedCutSite(
            f"{nuclease.name}: motif {motif.sequence} carries no cleavage position"
        )


def motif_cut_offset(
    motif: MotifRecord,
    cut_strand: Union[str, Strandedness] = Strandedness.ORIGINAL,
    midpoint: bool = False,
) -> int:
    """
    Cut offset of a single motif.

    Args:
        motif: Motif with cut offsets
        cut_strand: 'original' for the motif strand, 'opposite' for the
            complementary strand
        midpoint: Use floor((fwd + rev) / 2) for staggered cuts
    """
    if not motif.has_cut_sites:
        raise UndefinedCutSite(f"Motif {motif.sequence} carries no cleavage position")
    if midpoint:
        return (motif.cut_forward + motif.cut_reverse) // 2
    if coerce_enum(Strandedness, cut_strand, "cut_strand") == Strandedness.OPPOSITE:
        return motif.cut_reverse
    return motif.cut_forward


def cut_sites(
    nuclease: Nuclease,
    strand: str = '+',
    combine: bool = True,
    midpoint: bool = False,
) -> Union[int, pd.Series]:
    """
    Cut offsets of every motif of a nuclease.

    Args:
        nuclease: Nuclease with cut offsets on all motifs
        strand: '+' for forward-strand offsets, '-' for reverse-strand
        combine: Collapse to a single int when all motifs agree
        midpoint: Midpoint of staggered cuts, floor((fwd + rev) / 2)

    Returns:
        int if combined, otherwise a Series of offsets indexed by motif

    Raises:
        UndefinedCutSite: A motif has no cleavage information

    Examples:
        >>> cut_sites(build_nuclease("EcoRI", ["G^AATTC"]))
        1
        >>> cut_sites(build_nuclease("EcoRI", ["G^AATTC"]), strand='-')
        5
    """
    if strand not in ('+', '-'):
        raise ValueError(f"strand must be '+' or '-', got {strand!r}")
    cut_strand = Strandedness.ORIGINAL if strand == '+' else Strandedness.OPPOSITE
    offsets = []
    for motif in nuclease.motifs:
        _check_defined(nuclease, motif)
        offsets.append(motif_cut_offset(motif, cut_strand, midpoint))

    sites = pd.Series(
        offsets, index=[m.sequence for m in nuclease.motifs], name='cut_site', dtype='int64'
    )
    if combine:
        choices = sites.unique()
        if len(choices) == 1:
            return int(choices[0])
    return sites


def _resolve_cut_strand(
    nuclease: Nuclease,
    cut_strand: Optional[Union[str, Strandedness]],
    midpoint: bool,
) -> Strandedness:
    """Nickases cut only their nicking strand; other nucleases default to 'original'."""
    requested = None
    if cut_strand is not None:
        requested = coerce_enum(Strandedness, cut_strand, "cut_strand")
    if nuclease.is_nickase:
        if midpoint:
            raise InvalidNucleaseDefinition(
                'nicking_strand', f"{nuclease.name} is a nickase; a cut midpoint is undefined"
            )
        if requested is not None and requested != nuclease.nicking_strand:
            raise InvalidNucleaseDefinition(
                'nicking_strand',
                f"{nuclease.name} only nicks the {nuclease.nicking_strand.value} strand"
            )
        return nuclease.nicking_strand
    return requested if requested is not None else Strandedness.ORIGINAL


def primary_cut_offset(
    nuclease: Nuclease,
    cut_strand: Optional[Union[str, Strandedness]] = None,
    midpoint: bool = False,
) -> int:
    """Cut offset of the primary motif relative to its first nucleotide."""
    strand = _resolve_cut_strand(nuclease, cut_strand, midpoint)
    motif = nuclease.primary_motif
    _check_defined(nuclease, motif)
    return motif_cut_offset(motif, strand, midpoint)


def cut_offset_in_protospacer(
    nuclease: Nuclease,
    cut_strand: Optional[Union[str, Strandedness]] = None,
    midpoint: bool = False,
) -> int:
    """
    Cut offset expressed in protospacer coordinates.

    Returns the 0-based index, within the protospacer read 5' to 3', of the
    nucleotide immediately downstream of the cut. SpCas9 gives 17 (cut
    between protospacer positions 17 and 18), AsCas12a gives 18.
    """
    if not nuclease.is_crispr:
        raise InvalidNucleaseDefinition('spacer', f"{nuclease.name} is not a CRISPR nuclease")
    offset = primary_cut_offset(nuclease, cut_strand, midpoint)
    geometry = nuclease.spacer
    if geometry.pam_side == PamSide.THREE_PRIME:
        return geometry.spacer_length + geometry.spacer_gap + offset
    return offset - nuclease.motif_length - geometry.spacer_gap


def get_cut_sites(
    chroms,
    pam_sites,
    strands,
    nuclease: Nuclease,
    cut_strand: Optional[Union[str, Strandedness]] = None,
    midpoint: bool = False,
    collect_errors: bool = False,
    n_workers: int = 1,
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
):
    """
    Genomic cut-site coordinates for a batch of anchors.

    The anchor is the PAM site for CRISPR nucleases and the first motif
    nucleotide otherwise. The primary motif's offset is projected as
    pam_site + offset on '+' and pam_site - offset on '-'.

    Args:
        chroms: Chromosome names (a single name is recycled)
        pam_sites: Anchor coordinates
        strands: '+' or '-'
        nuclease: Nuclease whose primary motif carries cut offsets
        cut_strand: 'original' or 'opposite'; nickases use their nicking
            strand
        midpoint: Use the midpoint of staggered cuts
        collect_errors: Return a BatchResult instead of raising

    Returns:
        List of int in input order, or a BatchResult
    """
    offset = primary_cut_offset(nuclease, cut_strand, midpoint)
    anchors = normalize_anchors(chroms, pam_sites, strands, collect_errors=collect_errors)
    (sites, _), = project_offsets(
        anchors.pam_sites[anchors.valid],
        anchors.signs[anchors.valid],
        [(offset, offset)],
        n_workers,
        parallel_threshold,
    )
    values = [None] * len(anchors)
    for i, site in zip(anchors.valid.nonzero()[0].tolist(), sites.tolist()):
        values[i] = site
    if collect_errors:
        return BatchResult(values=values, errors=dict(anchors.invalid))
    return values

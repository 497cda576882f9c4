"""
Genomic coordinates of PAM/PFS, protospacer, spacer and target regions.

Every region is derived from a single anchor per target: the chromosome,
the PAM site (genomic coordinate of the first PAM/PFS nucleotide, in the
orientation of the protospacer strand) and the strand. Positions are
described as strand-oriented offsets from the PAM site and projected onto
the genome as ``pam_site + sign * offset``, with sign = +1 on '+' and -1
on '-'. All coordinates are 1-based and closed.

For SpCas9 (3' PAM NGG, 20 nt spacer) anchored at chr7:200:+

    protospacer  chr7:180-199:+
    PAM          chr7:200-202:+
    target       chr7:180-202:+

and anchored at chr7:200:-

    PAM          chr7:198-200:-
    protospacer  chr7:201-220:-
    target       chr7:198-220:-
"""

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from numbers import Integral
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import CrisprBaseError, InvalidAnchor, InvalidNucleaseDefinition, InvariantViolation
from .models import Nuclease, PamSide

logger = logging.getLogger(__name__)

# Batches at least this large are split across worker processes when
# n_workers > 1
DEFAULT_PARALLEL_THRESHOLD = 100_000

STRAND_SIGNS = {'+': 1, '-': -1}

REGIONS = ('pam', 'protospacer', 'spacer', 'target')


@dataclass(frozen=True)
class GenomicRange:
    """Closed, 1-based genomic interval."""
    chrom: str
    start: int
    end: int
    strand: str

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        return f"{self.chrom}:{self.start}-{self.end}:{self.strand}"


@dataclass
class BatchResult:
    """
    Per-anchor results with per-element error collection.

    Attributes:
        values: One result per anchor, None where the anchor failed
        errors: Anchor index -> exception raised for that anchor
    """
    values: List = field(default_factory=list)
    errors: Dict[int, CrisprBaseError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_first(self):
        """Raise the error of the lowest failing index, if any."""
        if self.errors:
            raise self.errors[min(self.errors)]

    def __len__(self) -> int:
        return len(self.values)


@dataclass
class Anchors:
    """Validated anchors; positions listed in `invalid` are excluded from arrays."""
    chroms: List[str]
    pam_sites: np.ndarray
    signs: np.ndarray
    strands: List[str]
    valid: np.ndarray
    invalid: Dict[int, InvalidAnchor]

    def __len__(self) -> int:
        return len(self.chroms)


def _as_list(values, n: Optional[int] = None) -> list:
    if isinstance(values, (str, Integral)):
        return [values] * (n if n is not None else 1)
    return list(values)


def normalize_anchors(
    chroms: Union[str, Sequence[str]],
    pam_sites: Union[int, Sequence[int]],
    strands: Union[str, Sequence[str]],
    collect_errors: bool = False,
) -> Anchors:
    """
    Validate and broadcast anchor vectors.

    A single chromosome or strand is recycled across all PAM sites.

    Raises:
        InvalidAnchor: Vectors of different lengths, or (unless
            collect_errors) the first malformed anchor
    """
    sites = _as_list(pam_sites)
    n = len(sites)
    chrom_list = _as_list(chroms, n)
    strand_list = _as_list(strands, n)
    if len(chrom_list) != n or len(strand_list) != n:
        raise InvalidAnchor(
            f"chromosome, PAM site and strand vectors must have the same length "
            f"(got {len(chrom_list)}, {n}, {len(strand_list)})"
        )

    invalid = {}
    for i, (chrom, site, strand) in enumerate(zip(chrom_list, sites, strand_list)):
        error = None
        if not isinstance(chrom, str) or not chrom:
            error = InvalidAnchor(f"chromosome must be a non-empty string, got {chrom!r}", i)
        elif isinstance(site, bool) or not isinstance(site, Integral):
            error = InvalidAnchor(f"PAM site must be an integer, got {site!r}", i)
        elif strand not in STRAND_SIGNS:
            error = InvalidAnchor(f"strand must be '+' or '-', got {strand!r}", i)
        if error is not None:
            if not collect_errors:
                raise error
            invalid[i] = error

    valid = np.array([i not in invalid for i in range(n)], dtype=bool)
    pam_array = np.array(
        [int(s) if v else 0 for s, v in zip(sites, valid)], dtype=np.int64
    )
    signs = np.array(
        [STRAND_SIGNS[st] if v else 1 for st, v in zip(strand_list, valid)], dtype=np.int64
    )
    return Anchors(chrom_list, pam_array, signs, strand_list, valid, invalid)


def _project_worker(batch_data):
    """
    Project strand-oriented offset pairs onto genomic coordinates.

    Defined at module level so it can be pickled for ProcessPoolExecutor.

    Args:
        batch_data: Tuple of (pam_sites, signs, offset_pairs)

    Returns:
        List of (starts, ends) arrays, one per offset pair
    """
    pam_sites, signs, offset_pairs = batch_data
    out = []
    for lo, hi in offset_pairs:
        a = pam_sites + signs * lo
        b = pam_sites + signs * hi
        out.append((np.minimum(a, b), np.maximum(a, b)))
    return out


def project_offsets(
    pam_sites: np.ndarray,
    signs: np.ndarray,
    offset_pairs: Sequence[Tuple[int, int]],
    n_workers: int = 1,
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
) -> List[Tuple[np.ndarray, np.ndarray]]:
    """Vectorised projection; large batches are split across processes."""
    n = len(pam_sites)
    if n_workers <= 1 or n < parallel_threshold:
        return _project_worker((pam_sites, signs, offset_pairs))

    chunks = list(zip(
        np.array_split(pam_sites, n_workers),
        np.array_split(signs, n_workers),
    ))
    logger.info(f"Projecting {n} anchors in {len(chunks)} chunks on {n_workers} workers")
    with ProcessPoolExecutor(max_workers=n_workers) as executor:
        # map() preserves chunk order
        results = list(executor.map(
            _project_worker,
            [(p, s, offset_pairs) for p, s in chunks],
        ))
    merged = []
    for k in range(len(offset_pairs)):
        merged.append((
            np.concatenate([r[k][0] for r in results]),
            np.concatenate([r[k][1] for r in results]),
        ))
    return merged


def _spacer_geometry(nuclease: Nuclease):
    if not isinstance(nuclease, Nuclease):
        raise InvalidNucleaseDefinition('nuclease', f"expected a Nuclease, got {type(nuclease).__name__}")
    if nuclease.spacer is None:
        raise InvalidNucleaseDefinition('spacer', f"{nuclease.name} is not a CRISPR nuclease")
    return nuclease.spacer


def pam_offsets(nuclease: Nuclease) -> Tuple[int, int]:
    """Strand-oriented offsets of the PAM/PFS relative to the PAM site."""
    _spacer_geometry(nuclease)
    return 0, nuclease.motif_length - 1


def protospacer_offsets(nuclease: Nuclease) -> Tuple[int, int]:
    """Strand-oriented offsets of the protospacer relative to the PAM site."""
    geometry = _spacer_geometry(nuclease)
    gap, length = geometry.spacer_gap, geometry.spacer_length
    if geometry.pam_side == PamSide.THREE_PRIME:
        return -(gap + length), -(gap + 1)
    pam_length = nuclease.motif_length
    return pam_length + gap, pam_length + gap + length - 1


def _assemble(
    anchors: Anchors,
    starts: np.ndarray,
    ends: np.ndarray,
    collect_errors: bool,
    extra_errors: Optional[Dict[int, CrisprBaseError]] = None,
):
    """Rebuild per-anchor GenomicRanges in input order."""
    errors = dict(anchors.invalid)
    errors.update(extra_errors or {})
    values = []
    valid_positions = np.flatnonzero(anchors.valid)
    by_index = dict(zip(valid_positions.tolist(), zip(starts.tolist(), ends.tolist())))
    for i in range(len(anchors)):
        if i in errors:
            values.append(None)
            continue
        start, end = by_index[i]
        values.append(GenomicRange(anchors.chroms[i], start, end, anchors.strands[i]))
    if collect_errors:
        return BatchResult(values=values, errors=errors)
    if errors:
        raise errors[min(errors)]
    return values


def _get_ranges(
    region: str,
    chroms,
    pam_sites,
    strands,
    nuclease: Nuclease,
    collect_errors: bool = False,
    n_workers: int = 1,
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
):
    if region not in REGIONS:
        raise ValueError(f"Unknown region {region!r}; expected one of {', '.join(REGIONS)}")
    geometry = _spacer_geometry(nuclease)
    anchors = normalize_anchors(chroms, pam_sites, strands, collect_errors=collect_errors)
    p = anchors.pam_sites[anchors.valid]
    s = anchors.signs[anchors.valid]

    if region == 'pam':
        (starts, ends), = project_offsets(
            p, s, [pam_offsets(nuclease)], n_workers, parallel_threshold
        )
        return _assemble(anchors, starts, ends, collect_errors)
    if region in ('protospacer', 'spacer'):
        # Spacer and protospacer share coordinates; for RNA targets they
        # differ only by reverse complementation of the content.
        (starts, ends), = project_offsets(
            p, s, [protospacer_offsets(nuclease)], n_workers, parallel_threshold
        )
        return _assemble(anchors, starts, ends, collect_errors)

    (pam_starts, pam_ends), (ps_starts, ps_ends) = project_offsets(
        p, s, [pam_offsets(nuclease), protospacer_offsets(nuclease)],
        n_workers, parallel_threshold,
    )
    starts = np.minimum(pam_starts, ps_starts)
    ends = np.maximum(pam_ends, ps_ends)

    # PAM and protospacer must be separated by exactly spacer_gap bases
    separation = np.maximum(pam_starts, ps_starts) - np.minimum(pam_ends, ps_ends) - 1
    violations = {}
    valid_positions = np.flatnonzero(anchors.valid)
    for k in np.flatnonzero(separation != geometry.spacer_gap).tolist():
        i = int(valid_positions[k])
        violations[i] = InvariantViolation(
            f"Anchor {i}: PAM [{pam_starts[k]}, {pam_ends[k]}] and protospacer "
            f"[{ps_starts[k]}, {ps_ends[k]}] are {separation[k]} nt apart, "
            f"expected {geometry.spacer_gap}"
        )
    return _assemble(anchors, starts, ends, collect_errors, violations)


def get_pam_ranges(
    chroms,
    pam_sites,
    strands,
    nuclease: Nuclease,
    collect_errors: bool = False,
    n_workers: int = 1,
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
):
    """
    Genomic ranges of the PAM (DNA) or PFS (RNA) sequences.

    Args:
        chroms: Chromosome names (a single name is recycled)
        pam_sites: Coordinates of the first PAM/PFS nucleotide
        strands: '+' or '-' (a single strand is recycled)
        nuclease: CRISPR nuclease; the primary PAM sets the PAM length
        collect_errors: Return a BatchResult instead of raising on the
            first invalid anchor
        n_workers: Worker processes for large batches

    Returns:
        List of GenomicRange in input order, or a BatchResult
    """
    return _get_ranges('pam', chroms, pam_sites, strands, nuclease,
                       collect_errors, n_workers, parallel_threshold)


def get_protospacer_ranges(
    chroms,
    pam_sites,
    strands,
    nuclease: Nuclease,
    collect_errors: bool = False,
    n_workers: int = 1,
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
):
    """Genomic ranges of the protospacers. See get_pam_ranges."""
    return _get_ranges('protospacer', chroms, pam_sites, strands, nuclease,
                       collect_errors, n_workers, parallel_threshold)


def get_spacer_ranges(
    chroms,
    pam_sites,
    strands,
    nuclease: Nuclease,
    collect_errors: bool = False,
    n_workers: int = 1,
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
):
    """Genomic ranges of the spacers (identical to the protospacer ranges)."""
    return _get_ranges('spacer', chroms, pam_sites, strands, nuclease,
                       collect_errors, n_workers, parallel_threshold)


def get_target_ranges(
    chroms,
    pam_sites,
    strands,
    nuclease: Nuclease,
    collect_errors: bool = False,
    n_workers: int = 1,
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
):
    """
    Genomic ranges covering PAM/PFS, spacer gap and protospacer.

    Raises:
        InvariantViolation: PAM and protospacer are not exactly spacer_gap
            nucleotides apart
    """
    return _get_ranges('target', chroms, pam_sites, strands, nuclease,
                       collect_errors, n_workers, parallel_threshold)


def get_ranges(region: str, chroms, pam_sites, strands, nuclease: Nuclease, **kwargs):
    """Dispatch to get_<region>_ranges by region name."""
    return _get_ranges(region, chroms, pam_sites, strands, nuclease, **kwargs)

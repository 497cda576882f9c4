"""
Extract PAM/PFS, protospacer and spacer sequences from target sequences.

A target sequence is read 5' to 3' on the protospacer strand and starts
at the 5' end of the target region:

    3' PAM (Cas9):    [protospacer][gap][PAM]
    5' PAM (Cas12a):  [PAM][gap][protospacer]

Extra trailing nucleotides are ignored.
"""

from typing import List, Sequence, Tuple, Union

from ..errors import InvalidNucleaseDefinition, SequenceTooShort
from ..utils.sequence import reverse_complement
from .models import Nuclease, PamSide, TargetType


def _slices(nuclease: Nuclease) -> Tuple[slice, slice, int]:
    """String slices of the PAM and protospacer, and the minimum target length."""
    geometry = nuclease.spacer
    if geometry is None:
        raise InvalidNucleaseDefinition('spacer', f"{nuclease.name} is not a CRISPR nuclease")
    pam_len = nuclease.motif_length
    gap, spacer_len = geometry.spacer_gap, geometry.spacer_length
    required = pam_len + gap + spacer_len
    if geometry.pam_side == PamSide.THREE_PRIME:
        protospacer = slice(0, spacer_len)
        pam = slice(spacer_len + gap, required)
    else:
        pam = slice(0, pam_len)
        protospacer = slice(pam_len + gap, required)
    return pam, protospacer, required


def _extract(sequences, nuclease: Nuclease, region: str):
    single = isinstance(sequences, str)
    seqs = [sequences] if single else list(sequences)
    pam, protospacer, required = _slices(nuclease)
    out = []
    for i, seq in enumerate(seqs):
        if len(seq) < required:
            raise SequenceTooShort(
                f"Target sequence {i} has {len(seq)} nt; {nuclease.name} needs "
                f"at least {required} nt (PAM + spacer gap + spacer)"
            )
        if region == 'pam':
            out.append(seq[pam])
        elif region == 'protospacer':
            out.append(seq[protospacer])
        elif nuclease.target_type == TargetType.RNA:
            out.append(reverse_complement(seq[protospacer]))
        else:
            out.append(seq[protospacer])
    return out[0] if single else out


def extract_pam_from_target(
    sequences: Union[str, Sequence[str]],
    nuclease: Nuclease,
) -> Union[str, List[str]]:
    """
    Extract PAM (or PFS) sequences from target sequences.

    Args:
        sequences: Target sequence or list of target sequences
        nuclease: CRISPR nuclease

    Returns:
        PAM sequence, or list of PAM sequences

    Raises:
        SequenceTooShort: A target is shorter than PAM + gap + spacer
    """
    return _extract(sequences, nuclease, 'pam')


def extract_protospacer_from_target(
    sequences: Union[str, Sequence[str]],
    nuclease: Nuclease,
) -> Union[str, List[str]]:
    """Extract protospacer sequences from target sequences."""
    return _extract(sequences, nuclease, 'protospacer')


def extract_spacer_from_target(
    sequences: Union[str, Sequence[str]],
    nuclease: Nuclease,
) -> Union[str, List[str]]:
    """Extract spacer sequences; reverse complement of the protospacer for RNA targets."""
    return _extract(sequences, nuclease, 'spacer')

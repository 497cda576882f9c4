"""
Parser for REBASE-style recognition motif notation.

A motif is written 5' to 3' using IUPAC letters. The cleavage position is
given in one of three ways:

    G^AATTC       cut inside the recognition site, marked with ^
    (5/10)GACGC   cut upstream: 5 nt on the forward strand, 10 nt on the
                  reverse strand before the first base
    GACGC(5/10)   cut downstream: 5 and 10 nt after the last base
    NGG           no cut specified

Cut offsets are counted from the first base of the motif on the forward
strand. The offset points to the base immediately downstream of the cut,
so G^AATTC gives forward=1 and reverse=5.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from ..errors import (
    ConflictingCutSpecification,
    InvalidAlphabet,
    InvalidMotifGrammar,
    InvalidNucleaseDefinition,
)
from ..utils.sequence import IUPAC_CODE_MAP, invalid_nucleotides


ALLOWED_SYMBOLS = frozenset(IUPAC_CODE_MAP) | frozenset('^()0123456789-/')

MOTIF_GRAMMAR = re.compile(r'(\(\d+/\d+\))?([A-Z]*\^?[A-Z]*)(\(\d+/\d+\))?')
OFFSET_PAIR = re.compile(r'\((\d+)/(\d+)\)')


class CutSpecification(Enum):
    """How the cleavage position of a motif was specified."""
    WITHIN = "within"
    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"
    UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class MotifRecord:
    """
    A recognition motif with strand-specific cleavage offsets.

    Attributes:
        sequence: Motif nucleotides (IUPAC), 5' to 3'
        cut_forward: Offset of the cut on the motif strand, or None
        cut_reverse: Offset of the cut on the complementary strand, or None
    """
    sequence: str
    cut_forward: Optional[int] = None
    cut_reverse: Optional[int] = None

    def __post_init__(self):
        if (self.cut_forward is None) != (self.cut_reverse is None):
            raise InvalidNucleaseDefinition(
                'cut_sites',
                f"motif {self.sequence}: forward and reverse offsets must "
                f"both be given or both be unspecified"
            )

    @classmethod
    def from_notation(cls, text: str) -> 'MotifRecord':
        """Parse a motif written in REBASE notation."""
        return parse_motif_notation(text)

    @classmethod
    def from_cut_sites(
        cls,
        sequence: str,
        cut_sites: Optional[Tuple[Optional[int], Optional[int]]] = None,
    ) -> 'MotifRecord':
        """Build a motif from a plain sequence and explicit (fwd, rev) offsets."""
        if not isinstance(sequence, str) or not sequence:
            raise InvalidNucleaseDefinition('motifs', f"not a sequence: {sequence!r}")
        offenders = invalid_nucleotides(sequence)
        if offenders:
            raise InvalidAlphabet(
                f"The following characters are not allowed: {','.join(offenders)}"
            )
        fwd, rev = cut_sites if cut_sites is not None else (None, None)
        for value in (fwd, rev):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise InvalidNucleaseDefinition(
                    'cut_sites', f"offsets must be integers, got {value!r}"
                )
        return cls(sequence=sequence, cut_forward=fwd, cut_reverse=rev)

    @property
    def length(self) -> int:
        return len(self.sequence)

    @property
    def has_cut_sites(self) -> bool:
        return self.cut_forward is not None

    @property
    def is_staggered(self) -> bool:
        """True when the two strands are cut at different positions."""
        return self.has_cut_sites and self.cut_forward != self.cut_reverse

    @property
    def cut_specification(self) -> CutSpecification:
        """Classify the offsets the same way the notation parser does."""
        if not self.has_cut_sites:
            return CutSpecification.UNSPECIFIED
        fwd, rev, n = self.cut_forward, self.cut_reverse, self.length
        if fwd <= 0 and rev <= 0:
            return CutSpecification.UPSTREAM
        if fwd >= n and rev >= n:
            return CutSpecification.DOWNSTREAM
        if 0 <= fwd <= n and rev == n - fwd:
            return CutSpecification.WITHIN
        raise InvalidMotifGrammar(
            f"Offsets ({fwd}, {rev}) of motif {self.sequence} cannot be "
            f"written in recognition-site notation"
        )

    def to_notation(self) -> str:
        """Render the motif back into canonical REBASE notation."""
        spec = self.cut_specification
        if spec == CutSpecification.UNSPECIFIED:
            return self.sequence
        if spec == CutSpecification.UPSTREAM:
            return f"({-self.cut_forward}/{-self.cut_reverse}){self.sequence}"
        if spec == CutSpecification.DOWNSTREAM:
            n = self.length
            return f"{self.sequence}({self.cut_forward - n}/{self.cut_reverse - n})"
        return self.sequence[:self.cut_forward] + '^' + self.sequence[self.cut_forward:]

    def __str__(self) -> str:
        return self.to_notation()


def _check_alphabet(text: str):
    offenders = sorted(set(text) - ALLOWED_SYMBOLS)
    if offenders:
        raise InvalidAlphabet(
            f"The following characters are not allowed in motif {text!r}: "
            f"{','.join(offenders)}"
        )


def _offset_pair(group: str) -> Tuple[int, int]:
    match = OFFSET_PAIR.fullmatch(group)
    return int(match.group(1)), int(match.group(2))


def parse_motif_notation(text: str) -> MotifRecord:
    """
    Parse a recognition motif written in REBASE notation.

    Args:
        text: Motif such as 'G^AATTC', '(5/10)GACGC', 'GACGC(5/10)' or 'NGG'

    Returns:
        MotifRecord with the nucleotide sequence and cut offsets

    Raises:
        InvalidAlphabet: Characters outside IUPAC letters, digits and ^()-/
        InvalidMotifGrammar: Text does not follow the motif grammar
        ConflictingCutSpecification: Two offset pairs, or an offset pair
            combined with ^

    Examples:
        >>> parse_motif_notation("G^AATTC")
        MotifRecord(sequence='GAATTC', cut_forward=1, cut_reverse=5)
        >>> parse_motif_notation("(5/10)GACGC")
        MotifRecord(sequence='GACGC', cut_forward=-5, cut_reverse=-10)
    """
    if not isinstance(text, str):
        raise InvalidMotifGrammar(f"Motif must be a string, got {type(text).__name__}")
    _check_alphabet(text)

    match = MOTIF_GRAMMAR.fullmatch(text)
    if match is None:
        raise InvalidMotifGrammar(
            f"Motif {text!r} does not follow the notation needed for a "
            f"recognition site, e.g. G^AATTC, (9/10)ACCTG or ACCTG(9/10)"
        )
    upstream, letters, downstream = match.groups()

    if upstream and downstream:
        raise ConflictingCutSpecification(
            f"Motif {text!r}: only one set of parentheses may be given. "
            f"(9/10)ACCTG or ACCTG(9/10) are valid, (9/10)ACCTG(9/10) is not."
        )
    has_marker = '^' in letters
    if has_marker and (upstream or downstream):
        raise ConflictingCutSpecification(
            f"Motif {text!r}: cleavage outside and within the recognition "
            f"site cannot be combined. (9/10)ACCTG is valid, (9/10)AC^CTG is not."
        )

    sequence = letters.replace('^', '')
    if not sequence:
        raise InvalidMotifGrammar(f"Motif {text!r} contains no nucleotides")
    length = len(sequence)

    if has_marker:
        fwd = letters.index('^')
        return MotifRecord(sequence, fwd, length - fwd)
    if upstream:
        x, y = _offset_pair(upstream)
        return MotifRecord(sequence, -x, -y)
    if downstream:
        x, y = _offset_pair(downstream)
        return MotifRecord(sequence, x + length, y + length)
    return MotifRecord(sequence)


def parse_motif_notations(texts: Iterable[str]) -> List[MotifRecord]:
    """Parse several motifs; the first invalid motif raises."""
    return [parse_motif_notation(text) for text in texts]

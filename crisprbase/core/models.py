"""
Data models for nucleases, CRISPR nucleases, nickases and base editors.

A Nuclease is a single immutable record. CRISPR-specific capabilities are
attached as optional extension records rather than through subclassing:

    spacer          SpacerGeometry   -> CRISPR nuclease
    nicking_strand  Strandedness     -> CRISPR nickase
    editor          BaseEditorProfile -> base editor

Use the build_* functions to construct validated instances.
"""

import math
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from numbers import Real
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from ..errors import InvalidNucleaseDefinition
from ..utils.sequence import expand_motif, reverse_complement
from .notation import MotifRecord, parse_motif_notation


SUBSTITUTION_PATTERN = re.compile(r'^[ACGT]2[ACGT]$')


class TargetType(Enum):
    """Nucleic acid cleaved by the nuclease."""
    DNA = "DNA"
    RNA = "RNA"


class PamSide(Enum):
    """Side of the protospacer on which the PAM/PFS lies."""
    FIVE_PRIME = "5prime"
    THREE_PRIME = "3prime"


class Strandedness(Enum):
    """Strand relative to the protospacer."""
    ORIGINAL = "original"
    OPPOSITE = "opposite"


class NucleaseKind(Enum):
    NUCLEASE = "nuclease"
    CRISPR_NUCLEASE = "crispr_nuclease"
    CRISPR_NICKASE = "crispr_nickase"
    BASE_EDITOR = "base_editor"


def coerce_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if isinstance(value, str) and value.lower() == member.value.lower():
            return member
    choices = ', '.join(m.value for m in enum_cls)
    raise InvalidNucleaseDefinition(field_name, f"{value!r} is not one of: {choices}")


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class SpacerGeometry:
    """Spacer layout of a CRISPR nuclease.

    Attributes:
        pam_side: Whether the PAM/PFS is 5' or 3' of the protospacer
        spacer_length: Default spacer length (nt)
        spacer_gap: Nucleotides between PAM/PFS and protospacer
    """
    pam_side: PamSide
    spacer_length: int
    spacer_gap: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'pam_side', coerce_enum(PamSide, self.pam_side, 'pam_side'))
        if not _is_int(self.spacer_length) or self.spacer_length <= 0:
            raise InvalidNucleaseDefinition(
                'spacer_length', f"must be a positive integer, got {self.spacer_length!r}"
            )
        if not _is_int(self.spacer_gap) or self.spacer_gap < 0:
            raise InvalidNucleaseDefinition(
                'spacer_gap', f"must be a non-negative integer, got {self.spacer_gap!r}"
            )


class EditingWeights:
    """
    Editing probabilities of a base editor.

    Weights are indexed by (substitution, position), where substitution is
    written like 'C2T' and position is relative to the PAM site. Pairs that
    were not supplied have weight DEFAULT_WEIGHT.
    """

    DEFAULT_WEIGHT = 0.0

    def __init__(self, weights: Mapping[Tuple[str, int], float]):
        table = {}
        for (substitution, position), weight in weights.items():
            if not isinstance(substitution, str) or not SUBSTITUTION_PATTERN.match(substitution):
                raise InvalidNucleaseDefinition(
                    'editing_weights', f"substitution must look like 'C2T', got {substitution!r}"
                )
            if not _is_int(position):
                raise InvalidNucleaseDefinition(
                    'editing_weights', f"position must be an integer, got {position!r}"
                )
            if not isinstance(weight, Real) or math.isnan(weight) or weight < 0:
                raise InvalidNucleaseDefinition(
                    'editing_weights', f"weight must be a non-negative number, got {weight!r}"
                )
            table[(substitution, int(position))] = float(weight)
        self._table = table

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> 'EditingWeights':
        """Build from a DataFrame with substitutions as rows and positions as columns."""
        weights = {}
        for substitution, row in df.iterrows():
            for position, weight in row.items():
                try:
                    position = int(position)
                except (TypeError, ValueError):
                    raise InvalidNucleaseDefinition(
                        'editing_weights', f"column {position!r} is not an integer position"
                    ) from None
                if pd.isna(weight):
                    continue
                weights[(substitution, position)] = float(weight)
        return cls(weights)

    @classmethod
    def from_dict(cls, nested: Mapping[str, Mapping[Any, float]]) -> 'EditingWeights':
        """Build from {'C2T': {-20: 0.1, ...}, ...}."""
        weights = {}
        for substitution, by_position in nested.items():
            for position, weight in by_position.items():
                if isinstance(position, str) and re.fullmatch(r'-?\d+', position):
                    position = int(position)
                weights[(substitution, position)] = weight
        return cls(weights)

    def get(self, substitution: str, position: int) -> float:
        """Weight of a substitution at a position; DEFAULT_WEIGHT if absent."""
        return self._table.get((substitution, position), self.DEFAULT_WEIGHT)

    @property
    def substitutions(self) -> List[str]:
        return sorted({s for s, _ in self._table})

    @property
    def positions(self) -> List[int]:
        return sorted({p for _, p in self._table})

    def to_frame(self) -> pd.DataFrame:
        """Dense substitution x position table, absent pairs filled with 0."""
        subs, positions = self.substitutions, self.positions
        data = [[self.get(s, p) for p in positions] for s in subs]
        return pd.DataFrame(data, index=subs, columns=positions)

    def __len__(self) -> int:
        return len(self._table)

    def __eq__(self, other) -> bool:
        if not isinstance(other, EditingWeights):
            return NotImplemented
        return self._table == other._table

    def __hash__(self):
        return hash(frozenset(self._table.items()))

    def __repr__(self) -> str:
        return f"EditingWeights(substitutions={self.substitutions}, positions={len(self.positions)})"


@dataclass(frozen=True)
class BaseEditorProfile:
    """Editing strand and editing weights of a base editor."""
    editing_strand: Strandedness
    editing_weights: EditingWeights

    def __post_init__(self):
        object.__setattr__(
            self, 'editing_strand',
            coerce_enum(Strandedness, self.editing_strand, 'editing_strand'),
        )


@dataclass(frozen=True)
class Nuclease:
    """
    Immutable description of a nuclease.

    Attributes:
        name: Name of the nuclease
        motifs: Recognition motifs (PAM/PFS for CRISPR nucleases), in order
        weights: Relative cleavage weights; empty means uniform weight 1,
            a single value applies to all motifs
        target_type: DNA or RNA
        info: Optional description
        metadata: Opaque key-value annotations (read-only)
        spacer: Spacer geometry (CRISPR nucleases only)
        nicking_strand: Strand cut by a nickase
        editor: Base editor profile
    """
    name: str
    motifs: Tuple[MotifRecord, ...]
    weights: Tuple[float, ...] = ()
    target_type: TargetType = TargetType.DNA
    info: Optional[str] = None
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)
    spacer: Optional[SpacerGeometry] = None
    nicking_strand: Optional[Strandedness] = None
    editor: Optional[BaseEditorProfile] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise InvalidNucleaseDefinition('name', "must be a single non-empty string")
        if self.info is not None and not isinstance(self.info, str):
            raise InvalidNucleaseDefinition('info', "must be a single string")
        if not isinstance(self.metadata, Mapping):
            raise InvalidNucleaseDefinition('metadata', "must be a mapping")
        object.__setattr__(self, 'metadata', MappingProxyType(dict(self.metadata)))
        object.__setattr__(self, 'motifs', tuple(self.motifs))
        if not self.motifs:
            raise InvalidNucleaseDefinition('motifs', "at least one motif is required")
        if not all(isinstance(m, MotifRecord) for m in self.motifs):
            raise InvalidNucleaseDefinition('motifs', "all motifs must be MotifRecord instances")
        object.__setattr__(self, 'weights', _validate_weights(self.weights, len(self.motifs)))
        object.__setattr__(
            self, 'target_type', coerce_enum(TargetType, self.target_type, 'target_type')
        )
        if self.nicking_strand is not None:
            object.__setattr__(
                self, 'nicking_strand',
                coerce_enum(Strandedness, self.nicking_strand, 'nicking_strand'),
            )
        if (self.nicking_strand is not None or self.editor is not None) and self.spacer is None:
            raise InvalidNucleaseDefinition(
                'spacer', "nickases and base editors require CRISPR spacer geometry"
            )

    # -- Capabilities -----------------------------------------------------

    @property
    def kind(self) -> NucleaseKind:
        if self.editor is not None:
            return NucleaseKind.BASE_EDITOR
        if self.nicking_strand is not None:
            return NucleaseKind.CRISPR_NICKASE
        if self.spacer is not None:
            return NucleaseKind.CRISPR_NUCLEASE
        return NucleaseKind.NUCLEASE

    @property
    def is_crispr(self) -> bool:
        return self.spacer is not None

    @property
    def is_nickase(self) -> bool:
        return self.nicking_strand is not None

    @property
    def is_base_editor(self) -> bool:
        return self.editor is not None

    @property
    def is_rnase(self) -> bool:
        return self.target_type == TargetType.RNA

    # -- Motifs and weights -----------------------------------------------

    @property
    def motif_weights(self) -> List[float]:
        """One weight per motif, with defaults and broadcasting applied."""
        if not self.weights:
            return [1.0] * len(self.motifs)
        if len(self.weights) == 1:
            return [self.weights[0]] * len(self.motifs)
        return list(self.weights)

    @property
    def primary_index(self) -> int:
        """Index of the motif with maximal weight; ties go to the first one."""
        weights = self.motif_weights
        return weights.index(max(weights))

    @property
    def primary_motif(self) -> MotifRecord:
        return self.motifs[self.primary_index]

    @property
    def motif_length(self) -> int:
        """Length of the primary motif."""
        return self.primary_motif.length

    def motif_sequences(
        self,
        primary: bool = False,
        strand: str = '+',
        expand: bool = False,
    ) -> List[str]:
        """
        Motif sequences of the nuclease.

        Args:
            primary: Only return motifs that share the highest weight
            strand: '-' returns reverse complements
            expand: Expand IUPAC codes into ACGT sequences
        """
        if strand not in ('+', '-'):
            raise ValueError(f"strand must be '+' or '-', got {strand!r}")
        if primary:
            weights = self.motif_weights
            top = max(weights)
            seqs = [m.sequence for m, w in zip(self.motifs, weights) if w == top]
        else:
            seqs = [m.sequence for m in self.motifs]
        if strand == '-':
            seqs = [reverse_complement(s) for s in seqs]
        if expand:
            seqs = [e for s in seqs for e in expand_motif(s)]
        return seqs

    def weights_by_motif(self, expand: bool = False) -> pd.Series:
        """Weights as a Series indexed by motif (or expanded ACGT sequences)."""
        index, values = [], []
        for motif, weight in zip(self.motifs, self.motif_weights):
            seqs = expand_motif(motif.sequence) if expand else [motif.sequence]
            index.extend(seqs)
            values.extend([weight] * len(seqs))
        return pd.Series(values, index=index, name='weight', dtype=float)

    # -- CRISPR geometry --------------------------------------------------

    def _require_spacer(self) -> SpacerGeometry:
        if self.spacer is None:
            raise InvalidNucleaseDefinition(
                'spacer', f"{self.name} is not a CRISPR nuclease"
            )
        return self.spacer

    @property
    def pam_length(self) -> int:
        self._require_spacer()
        return self.motif_length

    @property
    def pam_side(self) -> PamSide:
        return self._require_spacer().pam_side

    @property
    def spacer_length(self) -> int:
        return self._require_spacer().spacer_length

    @property
    def spacer_gap(self) -> int:
        return self._require_spacer().spacer_gap

    def prototype_sequence(self, primary: bool = True) -> str:
        """Schematic of spacer and PAM, e.g. 5'--SSSSSSSSSSSSSSSSSSSS[NGG]--3'."""
        geometry = self._require_spacer()
        if primary:
            pam = self.primary_motif.sequence
        else:
            pam = '/'.join(self.motif_sequences())
        spacer = 'S' * geometry.spacer_length
        gap = 'N' * geometry.spacer_gap
        if geometry.pam_side == PamSide.THREE_PRIME:
            body = f"{spacer}{gap}[{pam}]"
        else:
            body = f"[{pam}]{gap}{spacer}"
        return f"5'--{body}--3'"

    # -- Copy with replacement --------------------------------------------

    def with_name(self, name: str) -> 'Nuclease':
        return replace(self, name=name)

    def with_info(self, info: Optional[str]) -> 'Nuclease':
        return replace(self, info=info)

    def with_weights(self, weights: Optional[Sequence[float]]) -> 'Nuclease':
        return replace(self, weights=tuple(weights) if weights is not None else ())

    def with_spacer_length(self, spacer_length: int) -> 'Nuclease':
        geometry = self._require_spacer()
        return replace(self, spacer=replace(geometry, spacer_length=spacer_length))

    def __repr__(self) -> str:
        motifs = ', '.join(m.to_notation() for m in self.motifs)
        return f"Nuclease(name={self.name}, kind={self.kind.value}, motifs=[{motifs}])"


def _validate_weights(weights, n_motifs: int) -> Tuple[float, ...]:
    if weights is None:
        return ()
    if isinstance(weights, Real) and not isinstance(weights, bool):
        weights = (weights,)
    weights = tuple(weights)
    for w in weights:
        if isinstance(w, bool) or not isinstance(w, Real) or math.isnan(w) or w < 0:
            raise InvalidNucleaseDefinition('weights', f"must be non-negative numbers, got {w!r}")
    if len(weights) not in (0, 1, n_motifs):
        raise InvalidNucleaseDefinition(
            'weights',
            f"{len(weights)} weights given for {n_motifs} motifs; "
            f"weights and motifs must be of the same length"
        )
    return tuple(float(w) for w in weights)


MotifSpec = Union[str, MotifRecord]


def _build_motifs(
    motifs: Union[MotifSpec, Iterable[MotifSpec]],
    cut_sites: Optional[Sequence[Tuple[Optional[int], Optional[int]]]] = None,
) -> Tuple[MotifRecord, ...]:
    """Turn notation strings, records, or sequences + cut sites into records."""
    if motifs is None:
        raise InvalidNucleaseDefinition('motifs', "at least one motif is required")
    if isinstance(motifs, (str, MotifRecord)):
        motifs = [motifs]
    motifs = list(motifs)
    if not motifs:
        raise InvalidNucleaseDefinition('motifs', "at least one motif is required")

    n_records = sum(isinstance(m, MotifRecord) for m in motifs)
    if n_records == len(motifs):
        if cut_sites is not None:
            raise InvalidNucleaseDefinition(
                'cut_sites', "cut sites cannot be combined with already-parsed motifs"
            )
        return tuple(motifs)
    if n_records:
        raise InvalidNucleaseDefinition(
            'motifs', "notation strings and parsed motifs cannot be mixed"
        )
    if not all(isinstance(m, str) for m in motifs):
        raise InvalidNucleaseDefinition('motifs', "motifs must be strings")

    if cut_sites is None:
        return tuple(parse_motif_notation(m) for m in motifs)

    cut_sites = list(cut_sites)
    if len(cut_sites) != len(motifs):
        raise InvalidNucleaseDefinition(
            'cut_sites', f"{len(cut_sites)} cut site pairs given for {len(motifs)} motifs"
        )
    records = []
    for motif, pair in zip(motifs, cut_sites):
        if pair is not None and len(pair) != 2:
            raise InvalidNucleaseDefinition('cut_sites', f"expected (fwd, rev), got {pair!r}")
        records.append(MotifRecord.from_cut_sites(motif, pair))
    return tuple(records)


def build_nuclease(
    name: str,
    motifs: Union[MotifSpec, Iterable[MotifSpec]],
    cut_sites: Optional[Sequence[Tuple[Optional[int], Optional[int]]]] = None,
    weights: Optional[Sequence[float]] = None,
    info: Optional[str] = None,
    target_type: Union[str, TargetType] = TargetType.DNA,
    metadata: Optional[Dict[str, Any]] = None,
) -> Nuclease:
    """
    Create a Nuclease.

    Args:
        name: Name of the nuclease
        motifs: Motifs in REBASE notation (e.g. 'G^AATTC'), parsed
            MotifRecords, or plain sequences when cut_sites is given
        cut_sites: One (fwd, rev) pair per plain-sequence motif
        weights: Relative cleavage weights (one value, or one per motif)
        info: Optional description
        target_type: 'DNA' or 'RNA'
        metadata: Optional key-value annotations

    Examples:
        >>> EcoRI = build_nuclease("EcoRI", motifs=["G^AATTC"])
        >>> EcoRI.primary_motif.cut_forward
        1
    """
    return Nuclease(
        name=name,
        motifs=_build_motifs(motifs, cut_sites),
        weights=weights if weights is not None else (),
        target_type=target_type,
        info=info,
        metadata=dict(metadata or {}),
    )


def build_crispr_nuclease(
    name: str,
    pams: Union[MotifSpec, Iterable[MotifSpec]],
    pam_side: Union[str, PamSide],
    spacer_length: int,
    spacer_gap: int = 0,
    cut_sites: Optional[Sequence[Tuple[Optional[int], Optional[int]]]] = None,
    weights: Optional[Sequence[float]] = None,
    target_type: Union[str, TargetType] = TargetType.DNA,
    info: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Nuclease:
    """
    Create a CRISPR nuclease.

    PAM/PFS cut offsets are relative to the first nucleotide of the PAM/PFS,
    e.g. '(3/3)NGG' for SpCas9 and 'TTTV(18/23)' for AsCas12a.

    Args:
        pams: PAM (DNA) or PFS (RNA) motifs
        pam_side: '3prime' if the PAM is downstream of the protospacer
            (Cas9), '5prime' if upstream (Cas12a)
        spacer_length: Default spacer length
        spacer_gap: Distance between PAM/PFS and protospacer
    """
    return Nuclease(
        name=name,
        motifs=_build_motifs(pams, cut_sites),
        weights=weights if weights is not None else (),
        target_type=target_type,
        info=info,
        metadata=dict(metadata or {}),
        spacer=SpacerGeometry(
            pam_side=pam_side,
            spacer_length=spacer_length,
            spacer_gap=spacer_gap,
        ),
    )


def build_crispr_nickase(
    name: str,
    pams: Union[MotifSpec, Iterable[MotifSpec]],
    pam_side: Union[str, PamSide],
    spacer_length: int,
    nicking_strand: Union[str, Strandedness],
    spacer_gap: int = 0,
    cut_sites: Optional[Sequence[Tuple[Optional[int], Optional[int]]]] = None,
    weights: Optional[Sequence[float]] = None,
    target_type: Union[str, TargetType] = TargetType.DNA,
    info: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Nuclease:
    """Create a CRISPR nickase cutting only the 'original' or 'opposite' strand."""
    nuclease = build_crispr_nuclease(
        name=name,
        pams=pams,
        pam_side=pam_side,
        spacer_length=spacer_length,
        spacer_gap=spacer_gap,
        cut_sites=cut_sites,
        weights=weights,
        target_type=target_type,
        info=info,
        metadata=metadata,
    )
    return replace(nuclease, nicking_strand=nicking_strand)


def build_base_editor(
    crispr_nuclease: Nuclease,
    editing_strand: Union[str, Strandedness],
    editing_weights: Union[pd.DataFrame, Mapping, EditingWeights],
    name: Optional[str] = None,
    info: Optional[str] = None,
) -> Nuclease:
    """
    Wrap a CRISPR nuclease into a base editor.

    Args:
        crispr_nuclease: CRISPR nuclease (or nickase) carrying the editor
        editing_strand: 'original' or 'opposite'
        editing_weights: DataFrame (substitutions x positions relative to
            the PAM site), nested dict, or EditingWeights
        name: Name of the base editor (defaults to the nuclease name)
        info: Optional description
    """
    if not isinstance(crispr_nuclease, Nuclease) or not crispr_nuclease.is_crispr:
        raise InvalidNucleaseDefinition(
            'crispr_nuclease', "base editors must wrap a CRISPR nuclease"
        )
    if isinstance(editing_weights, pd.DataFrame):
        weights = EditingWeights.from_frame(editing_weights)
    elif isinstance(editing_weights, EditingWeights):
        weights = editing_weights
    elif isinstance(editing_weights, Mapping):
        weights = EditingWeights.from_dict(editing_weights)
    else:
        raise InvalidNucleaseDefinition(
            'editing_weights', "must be a DataFrame, a nested dict or EditingWeights"
        )
    return replace(
        crispr_nuclease,
        name=name if name is not None else crispr_nuclease.name,
        info=info if info is not None else crispr_nuclease.info,
        editor=BaseEditorProfile(editing_strand=editing_strand, editing_weights=weights),
    )

"""
Configuration for crisprbase: YAML nuclease definitions and engine settings.

Example nuclease file:

    nucleases:
      - name: SpCas9-VQR
        kind: crispr_nuclease
        pams: ["(3/3)NGA"]
        pam_side: 3prime
        spacer_length: 20
      - name: BE-VQR
        kind: base_editor
        base: SpCas9-VQR
        editing_strand: original
        editing_weights:
          C2T: {-15: 0.4, -14: 0.8, -13: 0.6}
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .core.models import (
    Nuclease,
    build_base_editor,
    build_crispr_nickase,
    build_crispr_nuclease,
    build_nuclease,
)
from .core.ranges import DEFAULT_PARALLEL_THRESHOLD
from .errors import InvalidNucleaseDefinition
from .nucleases import get_nuclease

logger = logging.getLogger(__name__)

NUCLEASE_KINDS = ('nuclease', 'crispr_nuclease', 'crispr_nickase', 'base_editor')

_COMMON_KEYS = {'name', 'kind', 'info', 'weights', 'cut_sites', 'target_type', 'metadata'}
_CRISPR_KEYS = _COMMON_KEYS | {'pams', 'pam_side', 'spacer_length', 'spacer_gap'}
_ALLOWED_KEYS = {
    'nuclease': _COMMON_KEYS | {'motifs'},
    'crispr_nuclease': _CRISPR_KEYS,
    'crispr_nickase': _CRISPR_KEYS | {'nicking_strand'},
    'base_editor': {'name', 'kind', 'info', 'base', 'editing_strand', 'editing_weights'},
}


def _require(d: Mapping, key: str, name: str):
    if key not in d:
        raise InvalidNucleaseDefinition(key, f"missing from definition of {name}")
    return d[key]


def nuclease_from_dict(
    d: Mapping[str, Any],
    known: Optional[Mapping[str, Nuclease]] = None,
) -> Nuclease:
    """
    Build a nuclease from a mapping (e.g. one entry of a YAML file).

    Args:
        d: Definition with a 'kind' key (default 'nuclease')
        known: Nucleases that base editors may reference by name, in
            addition to the built-in ones

    Returns:
        The validated Nuclease
    """
    if not isinstance(d, Mapping):
        raise InvalidNucleaseDefinition('definition', f"expected a mapping, got {type(d).__name__}")
    name = _require(d, 'name', '<unnamed>')
    kind = d.get('kind', 'nuclease')
    if kind not in NUCLEASE_KINDS:
        raise InvalidNucleaseDefinition('kind', f"{kind!r} is not one of: {', '.join(NUCLEASE_KINDS)}")

    unknown = set(d) - _ALLOWED_KEYS[kind]
    if unknown:
        raise InvalidNucleaseDefinition(
            sorted(unknown)[0], f"not a valid key for a {kind} ({name})"
        )

    if kind == 'base_editor':
        base = get_nuclease(_require(d, 'base', name), extra=known)
        return build_base_editor(
            base,
            editing_strand=_require(d, 'editing_strand', name),
            editing_weights=_require(d, 'editing_weights', name),
            name=name,
            info=d.get('info'),
        )

    cut_sites = d.get('cut_sites')
    if cut_sites is not None:
        cut_sites = [tuple(pair) if pair is not None else None for pair in cut_sites]
    common = dict(
        cut_sites=cut_sites,
        weights=d.get('weights'),
        target_type=d.get('target_type', 'DNA'),
        info=d.get('info'),
        metadata=d.get('metadata'),
    )
    if kind == 'nuclease':
        return build_nuclease(name, motifs=_require(d, 'motifs', name), **common)

    crispr = dict(
        pams=_require(d, 'pams', name),
        pam_side=_require(d, 'pam_side', name),
        spacer_length=_require(d, 'spacer_length', name),
        spacer_gap=d.get('spacer_gap', 0),
    )
    if kind == 'crispr_nuclease':
        return build_crispr_nuclease(name, **crispr, **common)
    return build_crispr_nickase(
        name, nicking_strand=_require(d, 'nicking_strand', name), **crispr, **common
    )


def load_nucleases(path: Path) -> Dict[str, Nuclease]:
    """
    Load nuclease definitions from a YAML file.

    Definitions are built in file order, so a base editor may reference a
    nuclease defined above it.

    Returns:
        Dict mapping nuclease name to Nuclease, in file order
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    entries = data.get('nucleases', []) if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise InvalidNucleaseDefinition('nucleases', f"{path} must contain a 'nucleases' list")

    loaded: Dict[str, Nuclease] = {}
    for entry in entries:
        nuclease = nuclease_from_dict(entry, known=loaded)
        if nuclease.name in loaded:
            raise InvalidNucleaseDefinition('name', f"{nuclease.name} is defined twice in {path}")
        loaded[nuclease.name] = nuclease
        logger.debug(f"Loaded {nuclease.kind.value} {nuclease.name} from {path}")

    logger.info(f"Loaded {len(loaded)} nucleases from {path}")
    return loaded


@dataclass
class EngineConfig:
    """Settings for batch coordinate computations."""
    n_workers: int = 1
    parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD
    collect_errors: bool = False

    @classmethod
    def from_yaml(cls, path: Path) -> 'EngineConfig':
        """Load settings from the 'engine' section of a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        engine = data.get('engine', {}) or {}
        return cls(
            n_workers=int(engine.get('n_workers', 1)),
            parallel_threshold=int(engine.get('parallel_threshold', DEFAULT_PARALLEL_THRESHOLD)),
            collect_errors=bool(engine.get('collect_errors', False)),
        )

    def batch_options(self) -> Dict[str, Any]:
        """Keyword arguments accepted by the get_*_ranges functions."""
        return {
            'collect_errors': self.collect_errors,
            'n_workers': self.n_workers,
            'parallel_threshold': self.parallel_threshold,
        }

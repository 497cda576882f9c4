"""
Built-in nucleases.

NUCLEASES and RESTRICTION_ENZYMES are read-only mappings built once at
import time.
"""

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from .core.models import (
    Nuclease,
    build_crispr_nickase,
    build_crispr_nuclease,
    build_nuclease,
)
from .errors import UnknownNuclease


def _crispr_nucleases() -> Dict[str, Nuclease]:
    sp_pams = ["(3/3)NGG", "(3/3)NAG", "(3/3)NGA"]
    sp_weights = [1, 0.2593, 0.0694]
    nucleases = [
        build_crispr_nuclease(
            "SpCas9",
            pams=sp_pams,
            weights=sp_weights,
            pam_side="3prime",
            spacer_length=20,
            info="Wildtype Streptococcus pyogenes Cas9 (SpCas9) nuclease",
        ),
        build_crispr_nuclease(
            "SpGCas9",
            pams=["(3/3)NGN"],
            pam_side="3prime",
            spacer_length=20,
            info="Engineered SpCas9 variant SpG recognizing NGN PAMs",
        ),
        build_crispr_nuclease(
            "SaCas9",
            pams=["(3/3)NNGRRT"],
            pam_side="3prime",
            spacer_length=21,
            info="Wildtype Staphylococcus aureus Cas9 (SaCas9) nuclease",
        ),
        build_crispr_nuclease(
            "AsCas12a",
            pams=["TTTV(18/23)"],
            pam_side="5prime",
            spacer_length=23,
            info="Wildtype Acidaminococcus Cas12a (AsCas12a) nuclease",
        ),
        build_crispr_nuclease(
            "MAD7",
            pams=["YTTV(18/23)"],
            pam_side="5prime",
            spacer_length=21,
            info="MAD7 nuclease (Cas12a-like)",
        ),
        build_crispr_nuclease(
            "CasRx",
            pams=["N"],
            pam_side="3prime",
            spacer_length=23,
            target_type="RNA",
            info="Cas13d from Ruminococcus flavefaciens XPD3002 (RNase)",
        ),
        build_crispr_nuclease(
            "Csm",
            pams=["N"],
            pam_side="3prime",
            spacer_length=32,
            target_type="RNA",
            info="RNA-targeting Csm complex from Streptococcus thermophilus",
        ),
        # RuvC-dead D10A keeps HNH, which cuts the strand paired with the guide
        build_crispr_nickase(
            "SpCas9-D10A",
            pams=sp_pams,
            weights=sp_weights,
            pam_side="3prime",
            spacer_length=20,
            nicking_strand="opposite",
            info="SpCas9 D10A nickase",
        ),
        build_crispr_nickase(
            "SpCas9-H840A",
            pams=sp_pams,
            weights=sp_weights,
            pam_side="3prime",
            spacer_length=20,
            nicking_strand="original",
            info="SpCas9 H840A nickase",
        ),
    ]
    return {n.name: n for n in nucleases}


def _restriction_enzymes() -> Dict[str, Nuclease]:
    motifs = {
        "EcoRI": "G^AATTC",
        "BamHI": "G^GATCC",
        "HindIII": "A^AGCTT",
        "KpnI": "GGTAC^C",
        "NotI": "GC^GGCCGC",
        "XbaI": "T^CTAGA",
        "XhoI": "C^TCGAG",
        "SpeI": "A^CTAGT",
        "EcoRV": "GAT^ATC",
        "PstI": "CTGCA^G",
        "SmaI": "CCC^GGG",
        "BsaI": "GGTCTC(1/5)",
        "BbsI": "GAAGAC(2/6)",
        "BsmBI": "CGTCTC(1/5)",
        "SapI": "GCTCTTC(1/4)",
    }
    return {
        name: build_nuclease(name, motifs=[motif], info=f"{name} restriction enzyme")
        for name, motif in motifs.items()
    }


NUCLEASES: Mapping[str, Nuclease] = MappingProxyType(_crispr_nucleases())
RESTRICTION_ENZYMES: Mapping[str, Nuclease] = MappingProxyType(_restriction_enzymes())


def available_nucleases() -> Iterable[str]:
    """Names of all built-in nucleases and restriction enzymes."""
    return list(NUCLEASES) + list(RESTRICTION_ENZYMES)


def get_nuclease(
    name: str,
    extra: Optional[Mapping[str, Nuclease]] = None,
) -> Nuclease:
    """
    Look up a nuclease by name (case-insensitive).

    Args:
        name: Nuclease name, e.g. 'SpCas9' or 'ecori'
        extra: Additional nucleases (e.g. loaded from YAML) searched first

    Raises:
        UnknownNuclease: No nuclease with that name
    """
    if not isinstance(name, str):
        raise UnknownNuclease(f"Nuclease name must be a string, got {name!r}")
    for registry in (extra or {}, NUCLEASES, RESTRICTION_ENZYMES):
        for key, nuclease in registry.items():
            if key.lower() == name.lower():
                return nuclease
    raise UnknownNuclease(
        f"Unknown nuclease {name!r}. Available: {', '.join(available_nucleases())}"
    )

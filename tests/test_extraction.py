"""Tests for crisprbase.core.extraction module."""

import pytest
from crisprbase.core.extraction import (
    extract_pam_from_target,
    extract_protospacer_from_target,
    extract_spacer_from_target,
)
from crisprbase.core.models import build_crispr_nuclease, build_nuclease
from crisprbase.errors import InvalidNucleaseDefinition, SequenceTooShort
from crisprbase.utils.sequence import reverse_complement

PROTOSPACER = "GCTGAAGCACTGCACGCCGT"
CAS12A_PROTOSPACER = "GCTGAAGCACTGCACGCCGTAAC"


@pytest.fixture
def spcas9():
    return build_crispr_nuclease(
        "SpCas9", pams=["(3/3)NGG"], pam_side="3prime", spacer_length=20,
    )


@pytest.fixture
def ascas12a():
    return build_crispr_nuclease(
        "AsCas12a", pams=["TTTV(18/23)"], pam_side="5prime", spacer_length=23,
    )


@pytest.fixture
def casrx():
    return build_crispr_nuclease(
        "CasRx", pams=["N"], pam_side="3prime", spacer_length=23, target_type="RNA",
    )


class TestThreePrimeExtraction:
    """Test extraction for 3' PAM nucleases."""

    def test_single_target(self, spcas9):
        """Test a single target returns strings."""
        target = PROTOSPACER + "AGG"
        assert extract_pam_from_target(target, spcas9) == "AGG"
        assert extract_protospacer_from_target(target, spcas9) == PROTOSPACER
        assert extract_spacer_from_target(target, spcas9) == PROTOSPACER

    def test_multiple_targets(self, spcas9):
        """Test a list of targets returns a list in order."""
        targets = [PROTOSPACER + "AGG", "A" * 20 + "TGG"]
        assert extract_pam_from_target(targets, spcas9) == ["AGG", "TGG"]
        assert extract_protospacer_from_target(targets, spcas9) == [PROTOSPACER, "A" * 20]

    def test_gap(self):
        """Test the spacer gap is skipped."""
        nuc = build_crispr_nuclease(
            "X", pams=["NGG"], pam_side="3prime", spacer_length=20, spacer_gap=2
        )
        target = PROTOSPACER + "CC" + "TGG"
        assert extract_pam_from_target(target, nuc) == "TGG"
        assert extract_protospacer_from_target(target, nuc) == PROTOSPACER

    def test_trailing_bases_ignored(self, spcas9):
        """Test extra nucleotides after the target region."""
        target = PROTOSPACER + "AGG" + "TTTT"
        assert extract_pam_from_target(target, spcas9) == "AGG"


class TestFivePrimeExtraction:
    """Test extraction for 5' PAM nucleases."""

    def test_single_target(self, ascas12a):
        """Test Cas12a PAM precedes the protospacer."""
        target = "TTTA" + CAS12A_PROTOSPACER
        assert extract_pam_from_target(target, ascas12a) == "TTTA"
        assert extract_protospacer_from_target(target, ascas12a) == CAS12A_PROTOSPACER
        assert extract_spacer_from_target(target, ascas12a) == CAS12A_PROTOSPACER


class TestRnaTargets:
    """Test extraction for RNA-targeting nucleases."""

    def test_spacer_is_reverse_complement(self, casrx):
        """Test the spacer is complementary to the protospacer."""
        target = CAS12A_PROTOSPACER + "A"
        assert extract_pam_from_target(target, casrx) == "A"
        assert extract_protospacer_from_target(target, casrx) == CAS12A_PROTOSPACER
        assert extract_spacer_from_target(target, casrx) == reverse_complement(CAS12A_PROTOSPACER)


class TestExtractionErrors:
    """Test extraction errors."""

    def test_too_short(self, spcas9):
        """Test a target shorter than PAM + spacer."""
        with pytest.raises(SequenceTooShort, match="needs at least 23 nt"):
            extract_pam_from_target(PROTOSPACER, spcas9)

    def test_too_short_in_batch(self, spcas9):
        """Test the offending target is named."""
        with pytest.raises(SequenceTooShort, match="Target sequence 1"):
            extract_protospacer_from_target([PROTOSPACER + "AGG", "ACGT"], spcas9)

    def test_not_crispr(self):
        """Test extraction needs a CRISPR nuclease."""
        ecori = build_nuclease("EcoRI", motifs=["G^AATTC"])
        with pytest.raises(InvalidNucleaseDefinition):
            extract_pam_from_target("GAATTC", ecori)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

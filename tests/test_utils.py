"""Tests for crisprbase.utils module."""

import pytest
from crisprbase.utils.sequence import (
    IUPAC_CODE_MAP,
    expand_motif,
    invalid_nucleotides,
    rev_comp,
    reverse_complement,
)


class TestReverseComplement:
    """Test reverse complement function."""

    def test_simple_sequence(self):
        """Test simple sequence reverse complement."""
        assert reverse_complement("ATCG") == "CGAT"

    def test_longer_sequence(self):
        """Test longer sequence reverse complement."""
        seq = "GCTGAAGCACTGCACGCCGT"
        rc = reverse_complement(seq)
        assert rc == "ACGGCGTGCAGTGCTTCAGC"

    def test_reverse_complement_is_involutive(self):
        """Test that reverse complement of reverse complement is original."""
        seq = "ATCGATCGATCG"
        assert reverse_complement(reverse_complement(seq)) == seq

    def test_lowercase_handling(self):
        """Test that lowercase is handled correctly."""
        assert reverse_complement("atcg") == "cgat"

    def test_mixed_case(self):
        """Test mixed case sequences."""
        assert reverse_complement("AtCg") == "cGaT"

    def test_iupac_codes(self):
        """Test ambiguity codes are complemented."""
        assert reverse_complement("NGG") == "CCN"
        assert reverse_complement("TTTV") == "BAAA"
        assert reverse_complement("NNGRRT") == "AYYCNN"

    def test_iupac_involutive(self):
        """Test every IUPAC code complements back to itself."""
        codes = ''.join(IUPAC_CODE_MAP)
        assert reverse_complement(reverse_complement(codes)) == codes

    def test_unknown_character(self):
        """Test unknown characters become N."""
        assert reverse_complement("A-T") == "ANT"

    def test_alias(self):
        """Test rev_comp alias."""
        assert rev_comp("GAATTC") == "GAATTC"


class TestIupac:
    """Test IUPAC helpers."""

    def test_invalid_nucleotides(self):
        """Test detection of non-IUPAC characters."""
        assert invalid_nucleotides("NGG") == []
        assert invalid_nucleotides("NGXZ") == ["X", "Z"]

    def test_lowercase_is_invalid(self):
        """Test that lowercase letters are not IUPAC codes."""
        assert invalid_nucleotides("acgt") == ["a", "c", "g", "t"]

    def test_expand_motif(self):
        """Test expansion of an ambiguous motif."""
        assert expand_motif("NGG") == ["AGG", "CGG", "GGG", "TGG"]

    def test_expand_unambiguous(self):
        """Test an unambiguous motif expands to itself."""
        assert expand_motif("GAATTC") == ["GAATTC"]

    def test_expand_count(self):
        """Test the number of expansions is the product of choices."""
        assert len(expand_motif("NNGRRT")) == 4 * 4 * 2 * 2
        assert len(expand_motif("TTTV")) == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

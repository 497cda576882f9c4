"""Tests for crisprbase.nucleases module."""

import pytest
from crisprbase.core.cutting import cut_offset_in_protospacer, cut_sites
from crisprbase.core.models import NucleaseKind, PamSide, Strandedness, TargetType
from crisprbase.errors import UnknownNuclease
from crisprbase.nucleases import (
    NUCLEASES,
    RESTRICTION_ENZYMES,
    available_nucleases,
    get_nuclease,
)


class TestRegistry:
    """Test the built-in registries."""

    def test_spcas9(self):
        """Test SpCas9 definition."""
        spcas9 = NUCLEASES['SpCas9']
        assert spcas9.motif_sequences() == ['NGG', 'NAG', 'NGA']
        assert spcas9.primary_motif.sequence == 'NGG'
        assert spcas9.pam_side == PamSide.THREE_PRIME
        assert spcas9.spacer_length == 20
        assert cut_offset_in_protospacer(spcas9) == 17

    def test_ascas12a(self):
        """Test AsCas12a definition."""
        ascas12a = NUCLEASES['AsCas12a']
        assert ascas12a.pam_side == PamSide.FIVE_PRIME
        assert ascas12a.spacer_length == 23
        assert cut_offset_in_protospacer(ascas12a) == 18

    def test_rna_nucleases(self):
        """Test RNA-targeting nucleases."""
        assert NUCLEASES['CasRx'].target_type == TargetType.RNA
        assert NUCLEASES['Csm'].spacer_length == 32

    def test_nickases(self):
        """Test SpCas9 nickases nick complementary strands."""
        assert NUCLEASES['SpCas9-D10A'].kind == NucleaseKind.CRISPR_NICKASE
        assert NUCLEASES['SpCas9-D10A'].nicking_strand == Strandedness.OPPOSITE
        assert NUCLEASES['SpCas9-H840A'].nicking_strand == Strandedness.ORIGINAL

    def test_restriction_enzymes(self):
        """Test restriction enzyme cut offsets."""
        assert cut_sites(RESTRICTION_ENZYMES['EcoRI']) == 1
        assert cut_sites(RESTRICTION_ENZYMES['KpnI']) == 5
        assert cut_sites(RESTRICTION_ENZYMES['BsaI']) == 7
        assert cut_sites(RESTRICTION_ENZYMES['BsaI'], strand='-') == 11

    def test_crispr_registry_names(self):
        """Test the registered CRISPR nucleases."""
        assert sorted(NUCLEASES) == sorted([
            'SpCas9', 'SpGCas9', 'SaCas9', 'AsCas12a', 'MAD7',
            'CasRx', 'Csm', 'SpCas9-D10A', 'SpCas9-H840A',
        ])

    def test_registry_is_read_only(self):
        """Test registries cannot be modified."""
        with pytest.raises(TypeError):
            NUCLEASES['Custom'] = NUCLEASES['SpCas9']

    def test_registry_metadata_unaffected_by_copies(self):
        """Test a renamed copy cannot change a registered nuclease."""
        renamed = NUCLEASES['SpCas9'].with_name('Other')
        with pytest.raises(TypeError):
            renamed.metadata['owner'] = 'me'
        assert dict(NUCLEASES['SpCas9'].metadata) == {}

    def test_available(self):
        """Test every registered name is listed."""
        names = available_nucleases()
        assert 'SpCas9' in names
        assert 'EcoRI' in names
        assert len(names) == len(NUCLEASES) + len(RESTRICTION_ENZYMES)


class TestGetNuclease:
    """Test nuclease lookup."""

    def test_case_insensitive(self):
        """Test lookup ignores case."""
        assert get_nuclease('spcas9') is NUCLEASES['SpCas9']
        assert get_nuclease('ECORI') is RESTRICTION_ENZYMES['EcoRI']

    def test_extra_searched_first(self):
        """Test extra nucleases shadow built-in ones."""
        custom = NUCLEASES['SpCas9'].with_spacer_length(22)
        assert get_nuclease('SpCas9', extra={'SpCas9': custom}) is custom

    def test_unknown(self):
        """Test unknown names raise."""
        with pytest.raises(UnknownNuclease, match="NoSuchCas"):
            get_nuclease('NoSuchCas')

    def test_non_string_name(self):
        """Test a non-string name raises UnknownNuclease."""
        with pytest.raises(UnknownNuclease, match="must be a string"):
            get_nuclease(None)
        with pytest.raises(UnknownNuclease):
            get_nuclease(9)

    def test_unknown_is_key_error(self):
        """Test UnknownNuclease can be caught as KeyError and ValueError."""
        with pytest.raises(KeyError):
            get_nuclease('NoSuchCas')
        with pytest.raises(ValueError):
            get_nuclease('NoSuchCas')


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

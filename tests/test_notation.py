"""Tests for crisprbase.core.notation module."""

import pytest
from crisprbase.core.notation import (
    CutSpecification,
    MotifRecord,
    parse_motif_notation,
    parse_motif_notations,
)
from crisprbase.errors import (
    ConflictingCutSpecification,
    InvalidAlphabet,
    InvalidMotifGrammar,
    InvalidNucleaseDefinition,
)


class TestParseMotifNotation:
    """Test REBASE motif parsing."""

    def test_cut_within_site(self):
        """Test ^ marker inside the recognition site."""
        motif = parse_motif_notation("G^AATTC")
        assert motif.sequence == "GAATTC"
        assert motif.cut_forward == 1
        assert motif.cut_reverse == 5

    def test_cut_downstream(self):
        """Test trailing offset pair adds the motif length."""
        motif = parse_motif_notation("GACGC(5/10)")
        assert motif.sequence == "GACGC"
        assert motif.cut_forward == 10
        assert motif.cut_reverse == 15

    def test_cut_upstream(self):
        """Test leading offset pair gives negative offsets."""
        motif = parse_motif_notation("(5/10)GACGC")
        assert motif.sequence == "GACGC"
        assert motif.cut_forward == -5
        assert motif.cut_reverse == -10

    def test_cut_unspecified(self):
        """Test motif without cut information."""
        motif = parse_motif_notation("NGG")
        assert motif.sequence == "NGG"
        assert motif.cut_forward is None
        assert motif.cut_reverse is None
        assert not motif.has_cut_sites

    def test_marker_at_start_and_end(self):
        """Test ^ at either end of the motif."""
        assert parse_motif_notation("^GATC").cut_forward == 0
        assert parse_motif_notation("^GATC").cut_reverse == 4
        assert parse_motif_notation("GATC^").cut_forward == 4
        assert parse_motif_notation("GATC^").cut_reverse == 0

    def test_cas9_pam(self):
        """Test SpCas9 PAM notation."""
        motif = parse_motif_notation("(3/3)NGG")
        assert motif.sequence == "NGG"
        assert (motif.cut_forward, motif.cut_reverse) == (-3, -3)
        assert not motif.is_staggered

    def test_cas12a_pam(self):
        """Test AsCas12a PAM notation gives a staggered cut."""
        motif = parse_motif_notation("TTTV(18/23)")
        assert (motif.cut_forward, motif.cut_reverse) == (22, 27)
        assert motif.is_staggered

    def test_multi_digit_offsets(self):
        """Test offsets with several digits."""
        motif = parse_motif_notation("(120/118)ACGT")
        assert (motif.cut_forward, motif.cut_reverse) == (-120, -118)

    def test_sequence_length_equals_letter_count(self):
        """Test that markers and offsets never count towards the length."""
        for text in ["G^AATTC", "GACGC(5/10)", "(5/10)GACGC", "NNGRRT"]:
            letters = sum(c.isalpha() for c in text)
            assert parse_motif_notation(text).length == letters

    def test_parse_several(self):
        """Test parsing a list of motifs."""
        motifs = parse_motif_notations(["G^AATTC", "NGG"])
        assert [m.sequence for m in motifs] == ["GAATTC", "NGG"]


class TestNotationErrors:
    """Test invalid motif notations."""

    def test_conflicting_offset_and_marker(self):
        """Test offset pair combined with ^."""
        with pytest.raises(ConflictingCutSpecification):
            parse_motif_notation("(9/10)AC^CTG")

    def test_conflicting_marker_and_trailing_offset(self):
        """Test ^ combined with a trailing offset pair."""
        with pytest.raises(ConflictingCutSpecification):
            parse_motif_notation("AC^CTG(9/10)")

    def test_two_offset_pairs(self):
        """Test leading and trailing offset pairs together."""
        with pytest.raises(ConflictingCutSpecification):
            parse_motif_notation("(9/10)ACCTG(9/10)")

    def test_lowercase_rejected(self):
        """Test lowercase letters are outside the alphabet."""
        with pytest.raises(InvalidAlphabet, match="g"):
            parse_motif_notation("gaattc")

    def test_non_iupac_letter_rejected(self):
        """Test letters that are not IUPAC codes."""
        with pytest.raises(InvalidAlphabet, match="E"):
            parse_motif_notation("GAETTC")

    def test_two_markers(self):
        """Test two ^ markers."""
        with pytest.raises(InvalidMotifGrammar):
            parse_motif_notation("G^AA^TTC")

    def test_unclosed_parenthesis(self):
        """Test malformed offset pair."""
        with pytest.raises(InvalidMotifGrammar):
            parse_motif_notation("(5/10GACGC")

    def test_dash_not_allowed_in_letters(self):
        """Test that '-' passes the alphabet check but not the grammar."""
        with pytest.raises(InvalidMotifGrammar):
            parse_motif_notation("GAA-TTC")

    def test_offsets_without_letters(self):
        """Test motif without nucleotides."""
        with pytest.raises(InvalidMotifGrammar):
            parse_motif_notation("(5/10)")

    def test_empty_string(self):
        """Test empty motif."""
        with pytest.raises(InvalidMotifGrammar):
            parse_motif_notation("")

    def test_errors_are_value_errors(self):
        """Test that parser errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_motif_notation("(9/10)AC^CTG")


class TestMotifRecord:
    """Test MotifRecord construction and rendering."""

    @pytest.mark.parametrize("text", [
        "G^AATTC", "GACGC(5/10)", "(5/10)GACGC", "NGG", "^GATC", "GATC^", "(0/0)ACGT",
    ])
    def test_notation_round_trip(self, text):
        """Test that rendering and re-parsing preserves offsets."""
        motif = parse_motif_notation(text)
        again = parse_motif_notation(motif.to_notation())
        assert again == motif

    def test_canonical_rendering(self):
        """Test canonical notation strings."""
        assert parse_motif_notation("G^AATTC").to_notation() == "G^AATTC"
        assert parse_motif_notation("GACGC(5/10)").to_notation() == "GACGC(5/10)"
        assert parse_motif_notation("(3/3)NGG").to_notation() == "(3/3)NGG"

    def test_cut_specification(self):
        """Test classification of offsets."""
        assert parse_motif_notation("G^AATTC").cut_specification == CutSpecification.WITHIN
        assert parse_motif_notation("(1/1)A").cut_specification == CutSpecification.UPSTREAM
        assert parse_motif_notation("A(1/1)").cut_specification == CutSpecification.DOWNSTREAM
        assert parse_motif_notation("A").cut_specification == CutSpecification.UNSPECIFIED

    def test_from_cut_sites(self):
        """Test explicit sequence and offsets."""
        motif = MotifRecord.from_cut_sites("GAATTC", (1, 5))
        assert motif == parse_motif_notation("G^AATTC")

    def test_from_cut_sites_checks_alphabet(self):
        """Test alphabet validation of explicit sequences."""
        with pytest.raises(InvalidAlphabet):
            MotifRecord.from_cut_sites("GAXTTC", (1, 5))

    def test_half_specified_offsets_rejected(self):
        """Test that offsets must be both given or both missing."""
        with pytest.raises(InvalidNucleaseDefinition):
            MotifRecord("GAATTC", 1, None)

    def test_unrenderable_offsets(self):
        """Test offsets that no notation can express."""
        motif = MotifRecord.from_cut_sites("GAATTC", (2, 2))
        with pytest.raises(InvalidMotifGrammar):
            motif.to_notation()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

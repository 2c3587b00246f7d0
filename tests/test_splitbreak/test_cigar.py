import pytest
from splitbreak.bam.cigar import (
    alignment_matches,
    convert_cigar_to_string,
    convert_string_to_cigar,
    end_clip_length,
    is_anchored,
    query_length,
    reference_length,
    start_clip_length,
)
from splitbreak.constants import CIGAR
from splitbreak.error import FormatError


class TestConvertCigar:
    def test_string_to_cigar(self):
        assert convert_string_to_cigar('8M2I1D9X') == [(CIGAR.M, 8), (CIGAR.I, 2), (CIGAR.D, 1), (CIGAR.X, 9)]
        assert convert_string_to_cigar('3H10=') == [(CIGAR.H, 3), (CIGAR.EQ, 10)]

    def test_cigar_to_string(self):
        assert convert_cigar_to_string([(CIGAR.S, 3), (CIGAR.M, 2), (CIGAR.EQ, 5)]) == '3S2M5='

    @pytest.mark.parametrize('cigar', ['', 'M', '3Q', '3M2', '0M', '2M0S', '*'])
    def test_invalid(self, cigar):
        with pytest.raises(FormatError):
            convert_string_to_cigar(cigar)


class TestCigarLengths:
    def test_query_length_includes_hard_clipping(self):
        assert query_length(convert_string_to_cigar('3H2M1I5S')) == 11

    def test_query_length_ignores_deletions(self):
        assert query_length(convert_string_to_cigar('1X2N1X3S')) == 5

    def test_reference_length(self):
        assert reference_length(convert_string_to_cigar('1X2N1X3S')) == 4
        assert reference_length(convert_string_to_cigar('2S3M2I3D1M')) == 7

    def test_clip_lengths(self):
        cigar = convert_string_to_cigar('2H3S5M1S')
        assert start_clip_length(cigar) == 5
        assert end_clip_length(cigar) == 1
        assert start_clip_length(convert_string_to_cigar('5M')) == 0

    def test_alignment_matches(self):
        assert alignment_matches(convert_string_to_cigar('2S3M2I3=1X')) == 7


class TestIsAnchored:
    def test_match(self):
        assert is_anchored(convert_string_to_cigar('3S2M'))
        assert is_anchored(convert_string_to_cigar('5=1X4='))

    def test_placeholder_interval(self):
        assert not is_anchored(convert_string_to_cigar('1X2N1X3S'))
        assert not is_anchored(convert_string_to_cigar('2S1X'))

import pytest
from splitbreak.error import InvalidInputError
from splitbreak.sequence import BASES_PER_WORD, PackedSequence, encode_kmer

LONG_SEQ = 'ACGTTGCA' * 10 + 'GATTACA'


class TestPackedSequence:
    def test_decode(self):
        seq = PackedSequence(LONG_SEQ)
        assert len(seq) == len(LONG_SEQ)
        assert seq.get_bases(0, len(LONG_SEQ)) == LONG_SEQ
        assert str(seq) == LONG_SEQ

    def test_decode_subrange(self):
        seq = PackedSequence(LONG_SEQ)
        for start, length in [(0, 1), (5, 27), (30, 4), (31, 33), (64, 23)]:
            assert seq.get_bases(start, length) == LONG_SEQ[start:start + length]

    def test_empty(self):
        seq = PackedSequence('')
        assert seq.length() == 0
        assert seq.get_bases(0, 0) == ''
        assert PackedSequence.overlap_matches(seq, PackedSequence('ACGT'), 0) == 0

    def test_lowercase(self):
        assert str(PackedSequence('acgT')) == 'ACGT'

    def test_reverse(self):
        assert str(PackedSequence('AACGT', reverse=True)) == 'TGCAA'

    def test_complement(self):
        assert str(PackedSequence('AACGT', complement=True)) == 'TTGCA'

    def test_reverse_complement(self):
        seq = PackedSequence('AACGT', reverse=True, complement=True)
        assert str(seq) == 'ACGTT'
        assert seq.reverse
        assert seq.complement

    def test_get(self):
        seq = PackedSequence('ACGT')
        assert [seq.get(i) for i in range(4)] == ['A', 'C', 'G', 'T']
        with pytest.raises(IndexError):
            seq.get(4)
        with pytest.raises(IndexError):
            seq.get(-1)

    def test_get_bases_out_of_range(self):
        seq = PackedSequence('ACGT')
        with pytest.raises(IndexError):
            seq.get_bases(2, 3)
        with pytest.raises(IndexError):
            seq.get_bases(-1, 2)

    def test_eq(self):
        assert PackedSequence('ACGT') == PackedSequence('acgt')
        assert PackedSequence('ACGT') != PackedSequence('ACGA')
        assert PackedSequence('ACGT') != 'ACGT'


class TestAmbiguousBases:
    def test_decodes_as_n(self):
        seq = PackedSequence('ANRT')
        assert str(seq) == 'ANNT'
        assert seq.is_ambiguous(1)
        assert seq.is_ambiguous(2)
        assert not seq.is_ambiguous(0)

    def test_decode_across_word_boundary(self):
        bases = 'A' * 30 + 'CNGT' + 'RACGT' * 8
        seq = PackedSequence(bases)
        expected = bases.replace('R', 'N')
        assert seq.get_bases(29, 40) == expected[29:69]
        assert str(seq) == expected

    def test_never_matches(self):
        seq = PackedSequence('ANNT')
        assert PackedSequence.overlap_matches(seq, seq, 0) == 2
        assert PackedSequence.overlap_matches(seq, PackedSequence('AAAT'), 0) == 2

    def test_kmer_uses_code_for_a(self):
        assert PackedSequence('CNG').get_kmer(0, 3) == encode_kmer('CAG')

    def test_complement_keeps_ambiguity(self):
        assert str(PackedSequence('ANC', reverse=True, complement=True)) == 'GNT'


class TestGetKmer:
    def test_matches_reference_packing(self):
        seq = PackedSequence(LONG_SEQ)
        for k in [1, 2, 16, 31, 32]:
            assert seq.get_kmer(3, k) == encode_kmer(LONG_SEQ[3:3 + k])

    def test_full_sequence(self):
        assert PackedSequence('ACGT').get_kmer(0, 4) == 0b00011011

    def test_across_word_boundary(self):
        seq = PackedSequence(LONG_SEQ)
        assert seq.get_kmer(20, BASES_PER_WORD) == encode_kmer(LONG_SEQ[20:52])
        assert seq.get_kmer(63, 5) == encode_kmer(LONG_SEQ[63:68])

    def test_invalid_size(self):
        seq = PackedSequence(LONG_SEQ)
        with pytest.raises(InvalidInputError):
            seq.get_kmer(0, 0)
        with pytest.raises(InvalidInputError):
            seq.get_kmer(0, 33)

    def test_out_of_bounds(self):
        seq = PackedSequence('ACGT')
        with pytest.raises(InvalidInputError):
            seq.get_kmer(2, 3)
        with pytest.raises(InvalidInputError):
            seq.get_kmer(-1, 2)


class TestOverlapMatches:
    def test_self(self):
        seq = PackedSequence(LONG_SEQ)
        assert PackedSequence.overlap_matches(seq, seq, 0) == len(LONG_SEQ)

    def test_self_offset_without_repeat(self):
        seq = PackedSequence('AC' * 40)
        assert PackedSequence.overlap_matches(seq, seq, 1) == 0
        assert PackedSequence.overlap_matches(seq, seq, -1) == 0
        assert PackedSequence.overlap_matches(seq, seq, 2) == 78

    def test_no_overlap(self):
        seq = PackedSequence('ACGT')
        assert PackedSequence.overlap_matches(seq, seq, 4) == 0
        assert PackedSequence.overlap_matches(seq, seq, -10) == 0

    def test_spans_multiple_words(self):
        first = PackedSequence('A' * 100)
        second = PackedSequence('A' * 50 + 'C' + 'A' * 49)
        assert PackedSequence.overlap_matches(first, second, 0) == 99
        assert PackedSequence.overlap_matches(first, second, 10) == 89
        assert PackedSequence.overlap_matches(second, first, -10) == 89

    def test_negative_offset(self):
        first = PackedSequence('TTACG')
        second = PackedSequence('GGTTACG')
        assert PackedSequence.overlap_matches(first, second, -2) == 5

    def test_match_flags(self):
        first = PackedSequence('ACGTACGT')
        assert first.match_flags(PackedSequence('GTTC'), 2) == [True, True, False, True]

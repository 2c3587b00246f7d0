import pytest
from splitbreak.breakpoint import BreakendSummary
from splitbreak.constants import DIRECTION, EVIDENCE_TYPE
from splitbreak.context import EvidenceContext
from splitbreak.error import InvalidStateError
from splitbreak.evidence import single_read_evidence, soft_clip_evidence

from .mock import MockRead, mock_read

CONTEXT = EvidenceContext()


class TestSoftClipEvidence:
    def test_both_ends(self):
        read = mock_read('chr1', 100, '5S10M3S', query_name='R')
        result = soft_clip_evidence(CONTEXT, read)
        assert len(result) == 2
        assert result[0].breakend == BreakendSummary('chr1', DIRECTION.BWD, 100)
        assert result[1].breakend == BreakendSummary('chr1', DIRECTION.FWD, 109)
        assert result[0].evidence_type == EVIDENCE_TYPE.SOFT_CLIP
        assert not result[0].is_breakpoint
        assert not result[0].is_split_read
        assert result[0].evidence_id == 'sc:R:chr1:100+5S10M3Sb'
        assert result[1].evidence_id == 'sc:R:chr1:100+5S10M3Sf'
        assert result[0].remote_evidence_id is None

    def test_sequences_and_qualities(self):
        read = mock_read(
            'chr1', 100, '5S10M3S',
            query_sequence='AAAAACCCCCGGGGGTTT',
            query_qualities=list(range(18)),
        )
        start, end = soft_clip_evidence(CONTEXT, read)
        assert start.breakend_seq == 'AAAAA'
        assert start.untemplated_seq == 'AAAAA'
        assert start.breakend_qual_values == (0, 1, 2, 3, 4)
        assert start.anchor_seq == 'CCCCCGGGGG'
        assert start.anchor_qual == tuple(range(5, 15))
        assert end.breakend_seq == 'TTT'
        assert end.anchor_seq == 'CCCCCGGGGG'
        # bases 0-9 flank the start of the alignment
        assert start.breakend_qual == pytest.approx(4.5)
        assert start.breakpoint_qual == 0

    def test_default_base_quality(self):
        read = mock_read('chr1', 100, '5S10M3S', mapping_quality=60)
        result = soft_clip_evidence(CONTEXT, read)
        assert result[0].breakend_qual == pytest.approx(20)
        assert result[0].is_exact
        assert result[0].involves_primary

    def test_min_mapq(self):
        read = mock_read('chr1', 100, '5S10M3S', mapping_quality=20)
        result = soft_clip_evidence(EvidenceContext(min_mapq=30), read)
        assert [e.breakend_qual for e in result] == [0, 0]

    def test_min_clip_length(self):
        read = mock_read('chr1', 100, '5S10M3S')
        result = soft_clip_evidence(EvidenceContext(min_clip_length=4), read)
        assert len(result) == 1
        assert result[0].breakend.direction == DIRECTION.BWD

    def test_no_clipping(self):
        assert soft_clip_evidence(CONTEXT, mock_read('chr1', 100, '10M')) == []

    def test_clip_explained_by_chimeric_alignment(self):
        read = mock_read('chr1', 100, '5S10M3S', tags={'SA': 'chr2,50,+,15S3M,0,0'})
        result = soft_clip_evidence(CONTEXT, read)
        assert len(result) == 1
        assert result[0].breakend.direction == DIRECTION.BWD

    def test_reverse_strand_explained(self):
        # the stored end of a reverse strand record is the start of the read
        read = mock_read('chr1', 100, '5S10M3S', is_reverse=True, tags={'SA': 'chr2,50,+,3M15S,0,0'})
        result = soft_clip_evidence(CONTEXT, read)
        assert len(result) == 1
        assert result[0].breakend == BreakendSummary('chr1', DIRECTION.BWD, 100)

    def test_unanchored(self):
        read = mock_read('chr1', 10, '1X2N1X3S', query_sequence='NNATG')
        result = soft_clip_evidence(CONTEXT, read)
        assert len(result) == 1
        e = result[0]
        assert e.breakend == BreakendSummary('chr1', DIRECTION.FWD, 12, 10, 13)
        assert not e.is_exact
        assert e.anchor_seq == ''
        assert e.breakend_seq == 'ATG'

    def test_hard_clipped(self):
        read = mock_read('chr1', 100, '5H10M3S', query_sequence='CCCCCGGGGGTTT')
        result = soft_clip_evidence(CONTEXT, read)
        assert len(result) == 1
        assert result[0].breakend == BreakendSummary('chr1', DIRECTION.FWD, 109)
        assert result[0].breakend_seq == 'TTT'
        assert result[0].anchor_seq == 'CCCCCGGGGG'

    def test_soft_clip_within_hard_clip(self):
        read = mock_read('chr1', 100, '5H2S10M', query_sequence='AACCCCCGGGGG', query_qualities=[10] * 12)
        result = soft_clip_evidence(CONTEXT, read)
        assert len(result) == 1
        assert result[0].breakend == BreakendSummary('chr1', DIRECTION.BWD, 100)
        assert result[0].breakend_seq == 'AA'
        assert result[0].breakend_qual_values == (10, 10)

    def test_paired_identifier(self):
        read = mock_read('chr1', 100, '10M3S', query_name='R', is_paired=True, is_read1=False)
        assert soft_clip_evidence(CONTEXT, read)[0].evidence_id == 'sc:R/2:chr1:100+10M3Sf'


class TestSingleReadEvidence:
    def test_split_reads_before_soft_clips(self):
        read = mock_read('chr1', 100, '5S10M3S', tags={'SA': 'chr2,50,+,15S3M,0,0'})
        result = single_read_evidence(CONTEXT, read)
        assert [e.evidence_type for e in result] == [EVIDENCE_TYPE.SPLIT_READ, EVIDENCE_TYPE.SOFT_CLIP]
        assert result[0].breakend.local == BreakendSummary('chr1', DIRECTION.FWD, 109)
        assert result[1].breakend == BreakendSummary('chr1', DIRECTION.BWD, 100)

    def test_unmapped(self):
        with pytest.raises(InvalidStateError):
            single_read_evidence(CONTEXT, MockRead('', -1, is_unmapped=True))

import os

import pysam
import pytest
from splitbreak.breakpoint import BreakendSummary, BreakpointSummary
from splitbreak.collect import evidence_from_bam, iter_evidence
from splitbreak.constants import DIRECTION, EVIDENCE_TYPE
from splitbreak.context import EvidenceContext

from .mock import MockRead, mock_read

CONTEXT = EvidenceContext()


class TestIterEvidence:
    def test_skips_unmapped(self):
        reads = [MockRead('', -1, is_unmapped=True, query_name='unmapped'), mock_read('chr1', 1, '5M5S')]
        result = list(iter_evidence(CONTEXT, reads))
        assert len(result) == 1
        assert result[0].breakend == BreakendSummary('chr1', DIRECTION.FWD, 5)

    def test_skips_secondary(self):
        reads = [mock_read('chr1', 1, '5M5S', is_secondary=True)]
        assert list(iter_evidence(CONTEXT, reads)) == []

    def test_skips_malformed_chimeric_alignments(self):
        reads = [
            mock_read('chr1', 1, '5M5S', query_name='bad', tags={'SA': 'chr2,10,+,5S5M'}),
            mock_read('chr1', 1, '5M5S', query_name='good', tags={'SA': 'chr2,10,+,5S5M,0,0'}),
        ]
        result = list(iter_evidence(CONTEXT, reads))
        assert len(result) == 1
        assert result[0].evidence_id == 'sr:good:chr1:1+5M5S>chr2:10+5S5M'

    def test_skips_mapped_record_without_alignment(self):
        class NoCigarRead(MockRead):
            @property
            def cigartuples(self):
                return None

        reads = [
            NoCigarRead('5M5S', 0, reference_name='chr1', query_name='bad', query_sequence='ACGTACGTAC'),
            mock_read('chr1', 1, '5M5S', query_name='good'),
        ]
        result = list(iter_evidence(CONTEXT, reads))
        assert len(result) == 1
        assert result[0].evidence_id == 'sc:good:chr1:1+5M5Sf'

    def test_empty(self):
        assert list(iter_evidence(CONTEXT, [])) == []


@pytest.fixture
def bam_file(tmp_path):
    filename = os.path.join(str(tmp_path), 'reads.bam')
    header = {'HD': {'VN': '1.0'}, 'SQ': [{'LN': 1000, 'SN': 'chr1'}, {'LN': 500, 'SN': 'chr2'}]}
    with pysam.AlignmentFile(filename, 'wb', header=header) as fh:
        split = pysam.AlignedSegment(fh.header)
        split.query_name = 'split'
        split.query_sequence = 'ACGTACGTAC' + 'GGGGGCCCCC'
        split.flag = 0
        split.reference_id = 0
        split.reference_start = 99
        split.mapping_quality = 60
        split.cigarstring = '10M10S'
        split.query_qualities = pysam.qualitystring_to_array('<' * 20)
        split.set_tag('SA', 'chr2,50,+,10S10M,60,0')
        fh.write(split)

        clipped = pysam.AlignedSegment(fh.header)
        clipped.query_name = 'clipped'
        clipped.query_sequence = 'TTTTTACGTA'
        clipped.flag = 0
        clipped.reference_id = 1
        clipped.reference_start = 497
        clipped.mapping_quality = 60
        clipped.cigarstring = '5S3M2S'
        fh.write(clipped)

        unmapped = pysam.AlignedSegment(fh.header)
        unmapped.query_name = 'unmapped'
        unmapped.query_sequence = 'ACGT'
        unmapped.flag = 4
        fh.write(unmapped)
    return filename


class TestEvidenceFromBam:
    def test_split_read(self, bam_file):
        result = evidence_from_bam(CONTEXT, bam_file)
        split = [e for e in result if e.evidence_type == EVIDENCE_TYPE.SPLIT_READ]
        assert len(split) == 1
        e = split[0]
        assert e.evidence_id == 'sr:split:chr1:100+10M10S>chr2:50+10S10M'
        assert e.breakend == BreakpointSummary(
            BreakendSummary('chr1', DIRECTION.FWD, 109), BreakendSummary('chr2', DIRECTION.BWD, 50)
        )
        assert e.anchor_seq == 'ACGTACGTAC'
        assert e.breakend_seq == 'GGGGGCCCCC'
        assert e.breakend_qual == pytest.approx(27)

    def test_soft_clips(self, bam_file):
        result = evidence_from_bam(CONTEXT, bam_file)
        clipped = [e for e in result if e.evidence_type == EVIDENCE_TYPE.SOFT_CLIP]
        assert [e.breakend for e in clipped] == [
            BreakendSummary('chr2', DIRECTION.BWD, 498),
            BreakendSummary('chr2', DIRECTION.FWD, 500),
        ]
        assert all([e.breakend_qual == pytest.approx(20) for e in clipped])

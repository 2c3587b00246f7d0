"""
helper functions for alignment records (pysam.AlignedSegment or objects mimicking them)
"""
from typing import List, Optional, Tuple

from ..constants import AMBIGUOUS_BASE, CIGAR, SA_TAG
from ..error import InvalidStateError
from ..sequence import PackedSequence
from .chimeric import ChimericAlignment, parse_sa_tag


def check_mapped(read):
    """
    Raises:
        InvalidStateError: the read is unmapped so its orientation is unknown
    """
    if read.is_unmapped or read.cigartuples is None:
        raise InvalidStateError('orientation of unmapped read is unknown', read.query_name)


def hard_clipping(read) -> Tuple[int, int]:
    """
    number of hard clipped bases at the start and end of the record (wrt the reference).
    For example (5, 0) for a record with the cigar 5H10M3S
    """
    cigar = read.cigartuples
    return (
        cigar[0][1] if cigar[0][0] == CIGAR.H else 0,
        cigar[-1][1] if cigar[-1][0] == CIGAR.H else 0,
    )


def is_primary(read) -> bool:
    return not read.is_supplementary and not read.is_secondary


def chimeric_alignments(read) -> List[ChimericAlignment]:
    """
    parse the chimeric alignments listed in the SA tag of the read

    Raises:
        FormatError: the tag is malformed
    """
    if not read.has_tag(SA_TAG):
        return []
    return parse_sa_tag(read.get_tag(SA_TAG))


def segment_suffix(read) -> str:
    """
    distinguishes the two reads of a pair which share a query name
    """
    if not read.is_paired:
        return ''
    return '/1' if read.is_read1 else '/2'


def stored_sequence(read) -> str:
    """
    the full read in the order the record stores it. Hard clipped bases are not stored by the
    record and are given as N
    """
    start, end = hard_clipping(read)
    return AMBIGUOUS_BASE * start + read.query_sequence + AMBIGUOUS_BASE * end


def stored_qualities(read) -> Optional[List[Optional[int]]]:
    """
    the base qualities of the full read in the order the record stores them, None for hard clipped
    bases. None if the read has no qualities
    """
    if read.query_qualities is None:
        return None
    start, end = hard_clipping(read)
    return [None] * start + list(read.query_qualities) + [None] * end


def read_orientation_sequence(read) -> PackedSequence:
    """
    the read bases in the order they were sequenced. Reverse strand alignments store the
    reverse complement of the read
    """
    return PackedSequence(stored_sequence(read), reverse=read.is_reverse, complement=read.is_reverse)


def read_orientation_qualities(read) -> Optional[List[Optional[int]]]:
    """
    the base qualities in the order they were sequenced, None if the read has no qualities
    """
    qualities = stored_qualities(read)
    if qualities is None:
        return None
    return qualities[::-1] if read.is_reverse else qualities

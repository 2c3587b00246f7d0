"""
read coordinate geometry of the alignments which make up a split read

Read coordinates are 0-based offsets into the read in the orientation it was sequenced. The
cigar of an alignment is always given wrt the reference so the read coordinate span of a
reverse strand alignment is mirrored relative to its cigar
"""
from typing import Iterable, List, Optional, Set, Tuple

from .bam import cigar as _cigar
from .bam.chimeric import ChimericAlignment
from .bam.read import check_mapped, is_primary
from .constants import CIGAR, STRAND
from .types import CigarTuples


class ReadAlignment:
    """
    a single (primary, supplementary or secondary) alignment of a read

    Attributes:
        reference_name (str): the contig the alignment is placed on
        reference_start (int): 0-based position of the first aligned reference base
        reference_end (int): 0-based position one past the last aligned reference base
        is_reverse (bool): alignment is to the reverse strand
        cigar (CigarTuples): the cigar wrt the reference
        mapping_quality (int): mapping quality of the alignment
        is_primary (bool): this is the primary alignment of the read
        read_length (int): length of the full read including hard clipped bases
        read_start (int): read coordinate of the first aligned base
        read_end (int): read coordinate one past the last aligned base
    """

    def __init__(
        self,
        reference_name: str,
        reference_start: int,
        is_reverse: bool,
        cigar: CigarTuples,
        mapping_quality: int = 0,
        is_primary: bool = False,
    ):
        self.reference_name = reference_name
        self.reference_start = reference_start
        self.is_reverse = is_reverse
        self.cigar = list(cigar)
        self.mapping_quality = mapping_quality
        self.is_primary = is_primary
        self.reference_end = reference_start + _cigar.reference_length(self.cigar)
        self.read_length = _cigar.query_length(self.cigar)
        read_cigar = self.read_cigar
        self.read_start = _cigar.start_clip_length(read_cigar)
        self.read_end = self.read_length - _cigar.end_clip_length(read_cigar)

    @classmethod
    def from_read(cls, read) -> 'ReadAlignment':
        """
        Args:
            read (pysam.AlignedSegment): the mapped alignment record

        Raises:
            InvalidStateError: the read is not mapped
        """
        check_mapped(read)
        return cls(
            read.reference_name,
            read.reference_start,
            read.is_reverse,
            read.cigartuples,
            read.mapping_quality,
            is_primary(read),
        )

    @classmethod
    def from_chimeric(cls, alignment: ChimericAlignment, is_primary: bool = False) -> 'ReadAlignment':
        return cls(
            alignment.reference_name,
            alignment.reference_start,
            alignment.is_reverse,
            alignment.cigar,
            alignment.mapping_quality,
            is_primary,
        )

    @property
    def strand(self) -> str:
        return STRAND.NEG if self.is_reverse else STRAND.POS

    @property
    def strand_sign(self) -> int:
        """+1 if read coordinates increase with reference coordinates, -1 otherwise"""
        return -1 if self.is_reverse else 1

    @property
    def pos(self) -> int:
        """1-based position of the first aligned reference base"""
        return self.reference_start + 1

    @property
    def cigarstring(self) -> str:
        return _cigar.convert_cigar_to_string(self.cigar)

    @property
    def read_cigar(self) -> CigarTuples:
        """the cigar in read orientation"""
        return self.cigar[::-1] if self.is_reverse else self.cigar

    @property
    def is_anchored(self) -> bool:
        return _cigar.is_anchored(self.cigar)

    @property
    def is_linear(self) -> bool:
        """True when every aligned read base is placed on consecutive reference bases"""
        return all([v not in {CIGAR.I, CIGAR.D, CIGAR.N, CIGAR.P} for v, f in self.cigar])

    @property
    def reference_span_width(self) -> int:
        """distance between the first and last aligned reference bases"""
        return self.reference_end - self.reference_start - 1

    @property
    def read_start_position(self) -> int:
        """1-based reference position of the first aligned base in read order"""
        return self.reference_end if self.is_reverse else self.reference_start + 1

    @property
    def read_end_position(self) -> int:
        """1-based reference position of the last aligned base in read order"""
        return self.reference_start + 1 if self.is_reverse else self.reference_end

    @property
    def key(self) -> str:
        return '{}:{}{}{}'.format(self.reference_name, self.pos, self.strand, self.cigarstring)

    @property
    def sort_key(self) -> Tuple:
        return (
            self.read_start,
            self.read_end,
            self.reference_name,
            self.reference_start,
            self.strand,
            self.cigarstring,
        )

    def placeholder_offsets(self) -> Set[int]:
        """
        read coordinates of bases which mark a breakend interval rather than an aligned base.
        Only unanchored (XNX) alignments have placeholder bases, they are the bases aligned with X

        Example:
            >>> ReadAlignment('1', 9, False, convert_string_to_cigar('1X2N1X3S')).placeholder_offsets()
            {0, 1}
        """
        if self.is_anchored:
            return set()
        result = set()
        offset = 0
        for state, freq in self.read_cigar:
            if state == CIGAR.X:
                result.update(range(offset, offset + freq))
            if state in _cigar.QUERY_ALIGNED_STATES | {CIGAR.H}:
                offset += freq
        return result

    def hard_clipped_offsets(self) -> Set[int]:
        """
        read coordinates of bases which are hard clipped and so not stored by the record

        Example:
            >>> ReadAlignment('1', 9, True, convert_string_to_cigar('2M3H')).hard_clipped_offsets()
            {0, 1, 2}
        """
        result = set()
        if self.read_cigar[0][0] == CIGAR.H:
            result.update(range(0, self.read_cigar[0][1]))
        if self.read_cigar[-1][0] == CIGAR.H:
            result.update(range(self.read_length - self.read_cigar[-1][1], self.read_length))
        return result

    def reference_position(self, offset: int, toward_start: bool = True) -> int:
        """
        map a read coordinate to the 0-based reference position it is aligned to

        Args:
            offset: the read coordinate
            toward_start: for inserted bases, resolve to the nearest aligned base before the
                insertion in read order. Otherwise the nearest aligned base after it

        Raises:
            IndexError: the offset is not within the aligned span of the read
        """
        if offset < self.read_start or offset >= self.read_end:
            raise IndexError('read offset is not aligned', offset, self.read_start, self.read_end)
        query_offset = self.read_length - 1 - offset if self.is_reverse else offset
        # insertions are resolved in reference order
        before = toward_start != self.is_reverse
        qpos = 0
        rpos = self.reference_start
        for state, freq in self.cigar:
            if state in _cigar.ALIGNED_STATES:
                if query_offset < qpos + freq:
                    return rpos + query_offset - qpos
                qpos += freq
                rpos += freq
            elif state in {CIGAR.I, CIGAR.S, CIGAR.H}:
                if query_offset < qpos + freq:
                    return rpos - 1 if before else rpos
                qpos += freq
            elif state in _cigar.REFERENCE_ALIGNED_STATES:
                rpos += freq
        raise IndexError('read offset is not aligned', offset, self.read_start, self.read_end)

    def __eq__(self, other):
        if not isinstance(other, ReadAlignment):
            return False
        return self.sort_key == other.sort_key and self.mapping_quality == other.mapping_quality

    def __hash__(self):
        return hash(self.sort_key)

    def __repr__(self):
        return '{}({}, read=[{}, {}))'.format(self.__class__.__name__, self.key, self.read_start, self.read_end)


def sort_alignments(alignments: Iterable[ReadAlignment]) -> List[ReadAlignment]:
    """
    order alignments of the same read along the read

    Example:
        >>> [a.key for a in sort_alignments([ReadAlignment('1', 99, False, [(CIGAR.S, 2), (CIGAR.M, 2)]),
        ...     ReadAlignment('1', 0, False, [(CIGAR.M, 2), (CIGAR.S, 2)])])]
        ['1:1+2M2S', '1:100+2S2M']
    """
    return sorted(alignments, key=lambda a: a.sort_key)


def adjacent_alignments(
    alignments: Iterable[ReadAlignment], target: ReadAlignment
) -> Tuple[Optional[ReadAlignment], Optional[ReadAlignment]]:
    """
    find the alignments directly before and after the target alignment in read order

    Returns:
        Tuple[Optional[ReadAlignment], Optional[ReadAlignment]]: the preceding and following alignments

    Raises:
        ValueError: the target is not one of the alignments
    """
    ordered = sort_alignments(alignments)
    index = [a.sort_key for a in ordered].index(target.sort_key)
    preceding = ordered[index - 1] if index > 0 else None
    following = ordered[index + 1] if index + 1 < len(ordered) else None
    return preceding, following

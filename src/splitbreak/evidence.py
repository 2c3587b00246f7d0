"""
derivation of breakpoint (split read) and breakend (soft clip) evidence from a single alignment record

Each pair of alignments which are adjacent along the read is resolved once in read order, the
earlier alignment of the read being the *first* and the later the *second*. The evidence for
either record of the pair is then a view of that single resolution from the local side, which
makes the breakpoint, identifiers and scores of the two records mirror images of each other.

The breakend confidence interval is expressed as a shift of the junction along the read: a
shift of d bases moves d bases out of the first alignment and into the second. Overlapping
alignments which agree with the reference either way (microhomology) can be shifted by up to
the overlap size. Unanchored (XNX) alignments can be shifted across their whole reference span.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from .alignment import ReadAlignment, adjacent_alignments, sort_alignments
from .bam import cigar as _cigar
from .bam import read as _read
from .breakpoint import BreakendSummary, BreakpointSummary
from .constants import DIRECTION, EVIDENCE_TYPE
from .context import EvidenceContext
from .error import FormatError
from .interval import Interval
from .reference import fetch_reference_bases
from .sequence import PackedSequence
from .util import logger

SPLIT_READ_ID_PREFIX = 'sr'
SOFT_CLIP_ID_PREFIX = 'sc'


@dataclass(frozen=True)
class ReadEvidence:
    """
    evidence of a structural variant junction supported by a single alignment record.
    Sequences and qualities are given in the orientation the record stores them in
    (wrt the positive strand of the reference)

    Attributes:
        evidence_type: the kind of evidence (split read or soft clip)
        evidence_id: deterministic identifier of this evidence
        remote_evidence_id: identifier of the mirror evidence derived from the remote alignment record
        breakend: the breakpoint (split read) or breakend (soft clip) called
        anchor_seq: bases aligned to the reference adjacent to the breakend
        anchor_qual: base qualities of the anchor bases
        breakend_seq: bases past the breakend
        breakend_qual_values: base qualities of the breakend bases
        untemplated_seq: bases at the junction explained by neither side of the breakpoint
        homology_seq: bases which could be aligned to either side of the breakpoint
        homology_anchored_base_count: number of homologous bases
        local_mapq: mapping quality of the local alignment
        remote_mapq: mapping quality of the remote alignment
        is_exact: the breakend position is known (or bounded by microhomology)
        is_reference: the read can be explained by a single unbroken alignment to the reference
        involves_primary: the primary alignment of the read is one of the alignments involved
        breakend_qual: evidence score of the breakend
        breakpoint_qual: evidence score of the breakpoint
    """

    evidence_type: str
    evidence_id: str
    remote_evidence_id: Optional[str]
    breakend: Union[BreakendSummary, BreakpointSummary]
    anchor_seq: str
    anchor_qual: Optional[Tuple[int, ...]]
    breakend_seq: str
    breakend_qual_values: Optional[Tuple[int, ...]]
    untemplated_seq: str
    homology_seq: str
    homology_anchored_base_count: int
    local_mapq: int
    remote_mapq: Optional[int]
    is_exact: bool
    is_reference: bool
    involves_primary: bool
    breakend_qual: float
    breakpoint_qual: float

    @property
    def is_split_read(self) -> bool:
        return self.evidence_type == EVIDENCE_TYPE.SPLIT_READ

    @property
    def is_breakpoint(self) -> bool:
        return isinstance(self.breakend, BreakpointSummary)


class JunctionResolution:
    """
    the junction between two adjacent alignments of a read, resolved in read order

    Attributes:
        first (ReadAlignment): the alignment earlier in the read
        second (ReadAlignment): the alignment later in the read
        first_end (int): read coordinate one past the last base placed by the first alignment
        second_start (int): read coordinate of the first base placed by the second alignment
        homology (Tuple[int, int]): read coordinates [start, end) of the microhomology, None if there is none
        shift (Tuple[int, int, int]): minimum, maximum and nominal shift of the junction
    """

    def __init__(self, first, second, first_end, second_start, homology=None, shift=(0, 0, 0)):
        self.first = first
        self.second = second
        self.first_end = first_end
        self.second_start = second_start
        self.homology = homology
        self.shift = shift

    @property
    def is_exact(self) -> bool:
        return self.first.is_anchored and self.second.is_anchored

    @property
    def untemplated(self) -> Tuple[int, int]:
        return (self.first_end, max(self.first_end, self.second_start))

    def first_anchor_end(self) -> int:
        if self.homology is not None:
            return self.first.read_end
        return self.first_end

    def second_anchor_start(self) -> int:
        if self.homology is not None:
            return self.second.read_start
        return self.second_start


def _placement_matches(context: EvidenceContext, read_seq: PackedSequence, alignment: ReadAlignment, start: int, end: int) -> Optional[List[bool]]:
    """
    compare read bases [start, end) to the reference bases the alignment places them on

    Returns:
        per-base match flags, None when there is no reference to compare to
    """
    if not context.reference_genome or start >= end:
        return None
    positions = [alignment.reference_position(offset) + 1 for offset in range(start, end)]
    lower = min(positions)
    ref = fetch_reference_bases(context.reference_genome, alignment.reference_name, lower, max(positions))
    if ref is None:
        return None
    expected = PackedSequence(''.join([ref[p - lower] for p in positions]), complement=alignment.is_reverse)
    return read_seq.match_flags(expected, start)


def _best_split(first_matches: List[bool], second_matches: List[bool]) -> int:
    """
    the number of overlapping bases to leave with the first alignment which minimises the
    mismatches to the reference. Ties keep bases with the first alignment
    """
    best = None
    best_cost = None
    for split in range(len(first_matches), -1, -1):
        cost = first_matches[:split].count(False) + second_matches[split:].count(False)
        if best_cost is None or cost < best_cost:
            best, best_cost = split, cost
    return best


def resolve_junction(context: EvidenceContext, read_seq: PackedSequence, first: ReadAlignment, second: ReadAlignment) -> JunctionResolution:
    """
    resolve the junction between two alignments of a read

    Args:
        context: the shared settings and reference
        read_seq: the read in read orientation
        first: the alignment earlier in the read
        second: the alignment later in the read
    """
    first_end = first.read_end
    second_start = second.read_start
    homology = None
    min_shift, max_shift, nominal_shift = 0, 0, 0

    if second.read_start < first.read_end:
        # each alignment keeps at least one base
        overlap_end = min(first.read_end, second.read_end - 1)
        overlap_start = min(max(second.read_start, first.read_start + 1), overlap_end)
        first_matches = second_matches = None
        if first.is_anchored and second.is_anchored:
            first_matches = _placement_matches(context, read_seq, first, overlap_start, overlap_end)
            second_matches = _placement_matches(context, read_seq, second, overlap_start, overlap_end)

        if first_matches is None or second_matches is None or all(first_matches + second_matches):
            first_end = second_start = overlap_end
            homology = (overlap_start, overlap_end)
            max_shift = overlap_end - overlap_start
        else:
            split = overlap_start + _best_split(first_matches, second_matches)
            first_end = second_start = split
            while first_end > overlap_start and not first_matches[first_end - 1 - overlap_start]:
                first_end -= 1
            while second_start < overlap_end and not second_matches[second_start - overlap_start]:
                second_start += 1
            logger.debug(
                'overlap [{}, {}) of {} and {} does not match the reference, {} untemplated bases'.format(
                    overlap_start, overlap_end, first.key, second.key, second_start - first_end
                )
            )

    if not first.is_anchored:
        max_shift += first.reference_span_width
        nominal_shift += first.reference_span_width // 2
    if not second.is_anchored:
        min_shift -= second.reference_span_width
        nominal_shift -= second.reference_span_width // 2

    return JunctionResolution(first, second, first_end, second_start, homology, (min_shift, max_shift, nominal_shift))


def _breakend_summary(context: EvidenceContext, alignment: ReadAlignment, direction: str, position: int, shift: Tuple[int, int, int]) -> BreakendSummary:
    """
    the breakend at a position for the junction shifted along the read
    """
    min_shift, max_shift, nominal_shift = shift
    positions = [position - alignment.strand_sign * s for s in (min_shift, max_shift)]
    upper = context.contig_length(alignment.reference_name)
    if upper is None:
        upper = max(positions + [1])
    interval = Interval(min(positions), max(positions)).clamp(1, upper)
    nominal = min(max(position - alignment.strand_sign * nominal_shift, interval.start), interval.end)
    return BreakendSummary(alignment.reference_name, direction, nominal, interval.start, interval.end)


def junction_breakends(context: EvidenceContext, junction: JunctionResolution) -> Tuple[BreakendSummary, BreakendSummary]:
    """
    Returns:
        the breakends of the first and second alignments
    """
    first, second = junction.first, junction.second
    first_position = first.read_end_position - first.strand_sign * (first.read_end - junction.first_end)
    second_position = second.read_start_position + second.strand_sign * (junction.second_start - second.read_start)
    first_direction = DIRECTION.BWD if first.is_reverse else DIRECTION.FWD
    second_direction = DIRECTION.FWD if second.is_reverse else DIRECTION.BWD
    return (
        _breakend_summary(context, first, first_direction, first_position, junction.shift),
        _breakend_summary(context, second, second_direction, second_position, junction.shift),
    )


def _extends_to_reference(context: EvidenceContext, read_seq: PackedSequence, alignment: ReadAlignment, start: int, end: int, anchor: int, position: int) -> bool:
    """
    True if extending the placement of the alignment over read coordinates [start, end) matches
    the reference for every base

    Args:
        anchor: read coordinate placed at the reference position
        position: 1-based reference position of the anchor base
    """
    if not alignment.is_linear:
        return False
    lower = position - alignment.strand_sign * (anchor - start)
    upper = position + alignment.strand_sign * (end - 1 - anchor)
    lower, upper = min(lower, upper), max(lower, upper)
    ref = fetch_reference_bases(context.reference_genome, alignment.reference_name, lower, upper)
    if ref is None:
        return False
    expected = PackedSequence(ref, reverse=alignment.is_reverse, complement=alignment.is_reverse)
    return PackedSequence.overlap_matches(read_seq, expected, start) == end - start


def is_reference_junction(context: EvidenceContext, read_seq: PackedSequence, junction: JunctionResolution) -> bool:
    """
    True if either alignment extended across the full read span of the pair explains it without a breakpoint
    """
    if not context.reference_genome:
        return False
    first, second = junction.first, junction.second
    start, end = first.read_start, second.read_end
    return _extends_to_reference(
        context, read_seq, first, start, end, first.read_end - 1, first.read_end_position
    ) or _extends_to_reference(context, read_seq, second, start, end, second.read_start, second.read_start_position)


def _mean_quality(context: EvidenceContext, qualities: Optional[List[Optional[int]]], offsets: Iterable[int]) -> float:
    # hard clipped bases have no quality
    values = [] if qualities is None else [qualities[i] for i in offsets if qualities[i] is not None]
    if not values:
        return float(context.default_base_quality)
    return sum(values) / len(values)


def junction_quality(context: EvidenceContext, qualities: Optional[List[int]], junction: JunctionResolution, read_length: int) -> float:
    """
    mean base quality of the read bases flanking the junction. Bases hard clipped by either
    record are excluded so that both records of the pair score the same bases
    """
    start = max(0, min(junction.first_end, junction.second_start) - context.junction_flank)
    end = min(read_length, max(junction.first_end, junction.second_start) + context.junction_flank)
    missing = junction.first.hard_clipped_offsets() | junction.second.hard_clipped_offsets()
    return _mean_quality(context, qualities, [i for i in range(start, end) if i not in missing])


def _scale_mapq(context: EvidenceContext, *mapqs: int) -> float:
    return min(list(mapqs) + [context.max_mapq]) / context.max_mapq


def _record_offsets(read_offsets, read_length: int, is_reverse: bool) -> List[int]:
    """
    convert read coordinates to offsets in the sequence stored by the record
    """
    if is_reverse:
        return sorted([read_length - 1 - r for r in read_offsets])
    return sorted(read_offsets)


def _record_bases(read, read_offsets, read_length: int) -> Tuple[str, Optional[Tuple[int, ...]]]:
    """
    Returns:
        the bases and qualities of the read coordinates in the order the record stores them
    """
    offsets = _record_offsets(read_offsets, read_length, read.is_reverse)
    sequence = _read.stored_sequence(read)
    qualities = _read.stored_qualities(read)
    seq = ''.join([sequence[i] for i in offsets])
    if qualities is None:
        return seq, None
    return seq, tuple([qualities[i] for i in offsets])


def _evidence_key(read, local: ReadAlignment, remote: ReadAlignment) -> str:
    return '{}:{}{}:{}>{}'.format(
        SPLIT_READ_ID_PREFIX, read.query_name or '', _read.segment_suffix(read), local.key, remote.key
    )


def _read_alignments(read) -> Tuple[ReadAlignment, List[ReadAlignment]]:
    """
    collect the alignment of the record and its chimeric alignments

    Returns:
        the local alignment and all alignments of the read in read order

    Raises:
        InvalidStateError: the read is not mapped
        FormatError: the chimeric alignments are malformed or inconsistent with the record
    """
    local = ReadAlignment.from_read(read)
    local_primary = _read.is_primary(read)
    alignments = [local]
    for index, chimeric in enumerate(_read.chimeric_alignments(read)):
        # the primary alignment is listed first by non-primary records
        remote = ReadAlignment.from_chimeric(chimeric, is_primary=not local_primary and index == 0)
        if remote.read_length != local.read_length:
            raise FormatError(
                'chimeric alignment read length does not match the record', str(chimeric), remote.read_length, local.read_length
            )
        if remote.sort_key == local.sort_key:
            continue
        alignments.append(remote)
    return local, sort_alignments(alignments)


def _can_derive(read) -> bool:
    _read.check_mapped(read)
    if read.query_sequence is None:
        logger.warning('skipping record {} since it does not store the read bases'.format(read.query_name))
        return False
    return True


def _split_read_evidence(context: EvidenceContext, read, local: ReadAlignment, alignments: List[ReadAlignment]) -> List[ReadEvidence]:
    read_seq = _read.read_orientation_sequence(read)
    qualities = _read.read_orientation_qualities(read)
    read_length = local.read_length
    preceding, following = adjacent_alignments(alignments, local)
    result = []

    for first, second in [(preceding, local), (local, following)]:
        if first is None or second is None:
            continue
        local_is_first = first is local
        remote = second if local_is_first else first
        # the breakend sequence stops at bases the record does not store
        stop_offsets = remote.placeholder_offsets() | local.hard_clipped_offsets()
        junction = resolve_junction(context, read_seq, first, second)
        first_breakend, second_breakend = junction_breakends(context, junction)

        if local_is_first:
            breakpoint = BreakpointSummary(first_breakend, second_breakend)
            anchor_end = junction.first_anchor_end()
            anchor = range(first.read_start, anchor_end)
            breakend_offsets = []
            for offset in range(anchor_end, read_length):
                if offset in stop_offsets:
                    break
                breakend_offsets.append(offset)
        else:
            breakpoint = BreakpointSummary(second_breakend, first_breakend)
            anchor_start = junction.second_anchor_start()
            anchor = range(anchor_start, second.read_end)
            breakend_offsets = []
            for offset in range(anchor_start - 1, -1, -1):
                if offset in stop_offsets:
                    break
                breakend_offsets.append(offset)

        local_placeholders = local.placeholder_offsets()
        anchor_seq, anchor_qual = _record_bases(read, [r for r in anchor if r not in local_placeholders], read_length)
        breakend_seq, breakend_qual_values = _record_bases(read, breakend_offsets, read_length)
        untemplated_seq, _ = _record_bases(read, range(*junction.untemplated), read_length)
        homology_seq = ''
        homology_count = 0
        if junction.homology is not None:
            homology_seq, _ = _record_bases(read, range(*junction.homology), read_length)
            homology_count = len(homology_seq)

        breakend_qual = junction_quality(context, qualities, junction, read_length) * _scale_mapq(
            context, local.mapping_quality, remote.mapping_quality
        )
        breakpoint_qual = breakend_qual
        if min(local.mapping_quality, remote.mapping_quality) < context.min_mapq:
            breakpoint_qual = 0.0

        result.append(
            ReadEvidence(
                evidence_type=EVIDENCE_TYPE.SPLIT_READ,
                evidence_id=_evidence_key(read, local, remote),
                remote_evidence_id=_evidence_key(read, remote, local),
                breakend=breakpoint,
                anchor_seq=anchor_seq,
                anchor_qual=anchor_qual,
                breakend_seq=breakend_seq,
                breakend_qual_values=breakend_qual_values,
                untemplated_seq=untemplated_seq,
                homology_seq=homology_seq,
                homology_anchored_base_count=homology_count,
                local_mapq=local.mapping_quality,
                remote_mapq=remote.mapping_quality,
                is_exact=junction.is_exact,
                is_reference=is_reference_junction(context, read_seq, junction),
                involves_primary=local.is_primary or remote.is_primary,
                breakend_qual=breakend_qual,
                breakpoint_qual=breakpoint_qual,
            )
        )
    return result


def split_read_evidence(context: EvidenceContext, read) -> List[ReadEvidence]:
    """
    derive breakpoint evidence for each alignment of the read adjacent to the alignment of this record

    Args:
        context: the shared settings and reference
        read (pysam.AlignedSegment): the alignment record

    Returns:
        the evidence with the preceding alignment (if any) followed by the evidence with the following alignment (if any)

    Raises:
        InvalidStateError: the read is not mapped
        FormatError: the SA tag or a cigar is malformed
    """
    if not _can_derive(read):
        return []
    local, alignments = _read_alignments(read)
    return _split_read_evidence(context, read, local, alignments)


def _soft_clip_evidence(context: EvidenceContext, read, local: ReadAlignment, alignments: List[ReadAlignment]) -> List[ReadEvidence]:
    preceding, following = adjacent_alignments(alignments, local)
    # offsets are into the full read as stored, hard clipped bases included
    hard_start, hard_end = _read.hard_clipping(read)
    read_length = local.read_length
    aligned_start = _cigar.start_clip_length(read.cigartuples)
    aligned_end = read_length - _cigar.end_clip_length(read.cigartuples)
    soft_clipped = {
        DIRECTION.BWD: range(hard_start, aligned_start),
        DIRECTION.FWD: range(aligned_end, read_length - hard_end),
    }
    # a chimeric alignment explains the clip on the side of the read it lies on
    explained = {
        DIRECTION.BWD: (following if local.is_reverse else preceding) is not None,
        DIRECTION.FWD: (preceding if local.is_reverse else following) is not None,
    }
    sequence = _read.stored_sequence(read)
    qualities = _read.stored_qualities(read)
    placeholders = _record_offsets(local.placeholder_offsets(), read_length, local.is_reverse)
    anchor = [i for i in range(aligned_start, aligned_end) if i not in placeholders]
    anchor_seq = ''.join([sequence[i] for i in anchor])
    anchor_qual = None if qualities is None else tuple([qualities[i] for i in anchor])
    width = 0 if local.is_anchored else local.reference_span_width
    mapq_scale = _scale_mapq(context, local.mapping_quality)
    result = []

    for direction in [DIRECTION.BWD, DIRECTION.FWD]:
        clip = soft_clipped[direction]
        if len(clip) < context.min_clip_length or explained[direction]:
            continue
        if direction == DIRECTION.BWD:
            position = local.reference_start + 1
            breakend = BreakendSummary(local.reference_name, direction, position + width // 2, position, position + width)
            junction = (aligned_start, aligned_start)
        else:
            position = local.reference_end
            breakend = BreakendSummary(local.reference_name, direction, position - width // 2, position - width, position)
            junction = (aligned_end, aligned_end)
        clip_seq = ''.join([sequence[i] for i in clip])
        clip_qual = None if qualities is None else tuple([qualities[i] for i in clip])
        window = range(max(0, junction[0] - context.junction_flank), min(read_length, junction[1] + context.junction_flank))
        breakend_qual = _mean_quality(context, qualities, window) * mapq_scale
        result.append(
            ReadEvidence(
                evidence_type=EVIDENCE_TYPE.SOFT_CLIP,
                evidence_id='{}:{}{}:{}{}'.format(
                    SOFT_CLIP_ID_PREFIX, read.query_name or '', _read.segment_suffix(read), local.key, direction
                ),
                remote_evidence_id=None,
                breakend=breakend,
                anchor_seq=anchor_seq,
                anchor_qual=anchor_qual,
                breakend_seq=clip_seq,
                breakend_qual_values=clip_qual,
                untemplated_seq=clip_seq,
                homology_seq='',
                homology_anchored_base_count=0,
                local_mapq=local.mapping_quality,
                remote_mapq=None,
                is_exact=local.is_anchored,
                is_reference=False,
                involves_primary=local.is_primary,
                breakend_qual=breakend_qual if local.mapping_quality >= context.min_mapq else 0.0,
                breakpoint_qual=0.0,
            )
        )
    return result


def soft_clip_evidence(context: EvidenceContext, read) -> List[ReadEvidence]:
    """
    derive breakend evidence for the soft clipped ends of the record which are not explained by a chimeric alignment

    Args:
        context: the shared settings and reference
        read (pysam.AlignedSegment): the alignment record

    Returns:
        the evidence for the clip at the start of the alignment (wrt the reference) followed by the clip at the end

    Raises:
        InvalidStateError: the read is not mapped
        FormatError: the SA tag or a cigar is malformed
    """
    if not _can_derive(read):
        return []
    local, alignments = _read_alignments(read)
    return _soft_clip_evidence(context, read, local, alignments)


def single_read_evidence(context: EvidenceContext, read) -> List[ReadEvidence]:
    """
    all evidence derived from a single alignment record: split read evidence followed by soft clip evidence
    """
    if not _can_derive(read):
        return []
    local, alignments = _read_alignments(read)
    return _split_read_evidence(context, read, local, alignments) + _soft_clip_evidence(context, read, local, alignments)

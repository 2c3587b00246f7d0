"""
holds methods related to processing cigar tuples. Cigar tuples are generally
an iterable list of tuples where the first element in each tuple is the
CIGAR value (i.e. 1 for an insertion), and the second value is the frequency
"""
import re

from ..constants import CIGAR
from ..error import FormatError
from ..types import CigarTuples

ANCHORED_STATES = {CIGAR.M, CIGAR.EQ}
ALIGNED_STATES = {CIGAR.M, CIGAR.X, CIGAR.EQ}
REFERENCE_ALIGNED_STATES = ALIGNED_STATES | {CIGAR.D, CIGAR.N}
QUERY_ALIGNED_STATES = ALIGNED_STATES | {CIGAR.I, CIGAR.S}
CLIPPING_STATE = {CIGAR.S, CIGAR.H}

_CIGAR_CHARS = {'M': CIGAR.M, 'I': CIGAR.I, 'D': CIGAR.D, 'N': CIGAR.N, 'S': CIGAR.S,
                'H': CIGAR.H, 'P': CIGAR.P, '=': CIGAR.EQ, 'X': CIGAR.X}
_CIGAR_STRING_PATTERN = re.compile(r'^(\d+[MIDNSHP=X])+$')


def convert_string_to_cigar(string: str) -> CigarTuples:
    """
    Given a cigar string, converts it to the appropriate cigar tuple

    Raises:
        FormatError: the string is not a valid cigar

    Example:
        >>> convert_string_to_cigar('8M2I1D9X')
        [(CIGAR.M, 8), (CIGAR.I, 2), (CIGAR.D, 1), (CIGAR.X, 9)]
    """
    if not string or not _CIGAR_STRING_PATTERN.match(string):
        raise FormatError('invalid cigar string', string)
    cigar = []
    for freq, state in re.findall(r'(\d+)(\D)', string):
        if int(freq) == 0:
            raise FormatError('cigar operations must have a non-zero length', string)
        cigar.append((_CIGAR_CHARS[state], int(freq)))
    return cigar


def convert_cigar_to_string(cigar: CigarTuples) -> str:
    """
    Example:
        >>> convert_cigar_to_string([(CIGAR.S, 3), (CIGAR.M, 2), (CIGAR.EQ, 5)])
        '3S2M5='
    """
    return ''.join(['{}{}'.format(f, CIGAR.reverse(s) if s != CIGAR.EQ else '=') for s, f in cigar])


def alignment_matches(cigar: CigarTuples) -> int:
    """
    counts the number of aligned bases irrespective of match/mismatch
    this is equivalent to counting all CIGAR.M
    """
    result = 0
    for v, f in cigar:
        if v in ALIGNED_STATES:
            result += f
    return result


def query_length(cigar: CigarTuples) -> int:
    """
    length of the full read, including any hard clipped bases

    Example:
        >>> query_length([(CIGAR.H, 3), (CIGAR.M, 2), (CIGAR.S, 5)])
        10
    """
    return sum([f for v, f in cigar if v in QUERY_ALIGNED_STATES | {CIGAR.H}] + [0])


def reference_length(cigar: CigarTuples) -> int:
    """
    number of reference bases spanned by the alignment
    """
    return sum([f for v, f in cigar if v in REFERENCE_ALIGNED_STATES] + [0])


def start_clip_length(cigar: CigarTuples) -> int:
    """
    number of soft and hard clipped bases before the first aligned base (wrt the reference)

    Example:
        >>> start_clip_length([(CIGAR.H, 2), (CIGAR.S, 3), (CIGAR.M, 2)])
        5
    """
    result = 0
    for v, f in cigar:
        if v not in CLIPPING_STATE:
            break
        result += f
    return result


def end_clip_length(cigar: CigarTuples) -> int:
    """
    number of soft and hard clipped bases after the last aligned base (wrt the reference)
    """
    return start_clip_length(cigar[::-1])


def is_anchored(cigar: CigarTuples) -> bool:
    """
    True if any bases are placed by a match. Alignments made up of only mismatch/skip operations
    (ex. 1X2N1X) denote a breakend interval and are not anchored

    Example:
        >>> is_anchored(convert_string_to_cigar('1X2N1X3S'))
        False
    """
    return any([v in ANCHORED_STATES for v, f in cigar])

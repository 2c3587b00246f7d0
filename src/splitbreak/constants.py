"""
module holding the controlled vocabularies and constants used throughout the splitbreak package
"""
from typing import Dict, List


class BaseNamespace:
    """
    Namespace to hold module constants. Members are the public, upper case class attributes

    Example:
        >>> STRAND.values()
        ['+', '-']
        >>> STRAND.enforce('+')
        '+'
    """

    @classmethod
    def keys(cls) -> List[str]:
        return [k for k in vars(cls) if k.isupper() and not k.startswith('_')]

    @classmethod
    def values(cls) -> List:
        return [getattr(cls, k) for k in cls.keys()]

    @classmethod
    def items(cls) -> List:
        return [(k, getattr(cls, k)) for k in cls.keys()]

    @classmethod
    def to_dict(cls) -> Dict:
        return dict(cls.items())

    @classmethod
    def enforce(cls, value):
        """
        checks that the input value is a member of the namespace and returns it

        Raises:
            KeyError: the value is not a member
        """
        if value not in cls.values():
            raise KeyError('value {} is not a valid member of {}'.format(repr(value), cls.__name__), cls.values())
        return value

    @classmethod
    def reverse(cls, value) -> str:
        """
        gets the attribute name for a given value

        Example:
            >>> CIGAR.reverse(4)
            'S'
        """
        for key, member in cls.items():
            if member == value:
                return key
        raise KeyError('unable to reverse. value {} is not a valid member of {}'.format(repr(value), cls.__name__))


class STRAND(BaseNamespace):
    """
    holds controlled vocabulary for allowed strand values

    Attributes:
        POS: the positive/forward strand
        NEG: the negative/reverse strand
    """

    POS: str = '+'
    NEG: str = '-'


class DIRECTION(BaseNamespace):
    """
    holds controlled vocabulary for breakend directions

    Attributes:
        FWD: the anchor lies to the left (lower positions) of the breakend; bases past the breakend position
            are rearranged. Equivalent to a left orientation wrt the positive strand
        BWD: the anchor lies to the right (higher positions) of the breakend
    """

    FWD: str = 'f'
    BWD: str = 'b'


class EVIDENCE_TYPE(BaseNamespace):
    """
    holds controlled vocabulary for the variants of single read evidence

    Attributes:
        SPLIT_READ: two-sided (breakpoint) evidence from a read with chimeric alignments
        SOFT_CLIP: single-sided (breakend) evidence from soft clipping with no chimeric alignment
    """

    SPLIT_READ: str = 'split read'
    SOFT_CLIP: str = 'soft clip'


class CIGAR(BaseNamespace):
    """
    Enum-like. For readable cigar values

    Attributes:
        M: alignment match (can be a sequence match or mismatch)
        I: insertion to the reference
        D: deletion from the reference
        N: skipped region from the reference
        S: soft clipping (clipped sequences present in SEQ)
        H: hard clipping (clipped sequences NOT present in SEQ)
        P: padding (silent deletion from padded reference)
        EQ: sequence match (=)
        X: sequence mismatch

    Note:
        descriptions are taken from the `samfile documentation <https://samtools.github.io/hts-specs/SAMv1.pdf>`_
    """

    M = 0
    I = 1  # noqa: E741
    D = 2
    N = 3
    S = 4
    H = 5
    P = 6
    EQ = 7
    X = 8


NA_MAPPING_QUALITY: int = 255
"""mapping quality value to indicate mapping was not performed/calculated"""

SA_TAG: str = 'SA'
"""read tag holding the chimeric (supplementary) alignments"""

NM_TAG: str = 'NM'
"""read tag holding the edit distance to the reference"""

DNA_BASES: str = 'ACGT'
"""the unambiguous bases which can be represented in a packed sequence"""

AMBIGUOUS_BASE: str = 'N'

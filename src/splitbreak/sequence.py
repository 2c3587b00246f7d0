"""
compact 2-bit encoding of nucleotide sequences used for k-mer extraction and overlap scoring

Bases are packed 32 to an unsigned 64-bit word, the first base of each word in the most
significant bits. Codes are A=0, C=1, G=2, T=3 so the complement of a code is ``3 - code``.

Symbols other than A, C, G, T (case-insensitive) cannot be represented by 2 bits. They are
stored with the code for A and recorded in a parallel ambiguity mask. Decoding returns ``N``
for these positions and they never count as matching bases. K-mers spanning them use the
code for A, so callers which hash k-mers must check :meth:`PackedSequence.is_ambiguous` when
placeholder bases matter.
"""
from typing import Optional, Union

import numpy as np

from .constants import AMBIGUOUS_BASE, DNA_BASES
from .error import InvalidInputError

BASES_PER_WORD: int = 32
BITS_PER_BASE: int = 2
MAX_KMER_SIZE: int = BASES_PER_WORD
_BASE_MASK: int = 0b11
_WORD_MASK: int = (1 << 64) - 1
# low bit of every 2-bit base slot
_LOW_BITS: int = int('01' * BASES_PER_WORD, 2)

_ENCODE = np.zeros(256, dtype=np.uint8)
_VALID = np.zeros(256, dtype=bool)
for _code, _base in enumerate(DNA_BASES):
    for _char in (_base, _base.lower()):
        _ENCODE[ord(_char)] = _code
        _VALID[ord(_char)] = True

_SHIFTS = np.array(
    [BITS_PER_BASE * (BASES_PER_WORD - 1 - i) for i in range(BASES_PER_WORD)], dtype=np.uint64
)


def encode_kmer(bases: str) -> int:
    """
    reference packing of a short sequence into an integer, first base most significant

    Example:
        >>> encode_kmer('ACGT')
        27
    """
    if not 1 <= len(bases) <= MAX_KMER_SIZE:
        raise InvalidInputError('k-mer size must be between 1 and {}'.format(MAX_KMER_SIZE), len(bases))
    value = 0
    for base in bases.upper():
        if base not in DNA_BASES:
            raise InvalidInputError('cannot encode an ambiguous base in a k-mer', bases)
        value = (value << BITS_PER_BASE) | DNA_BASES.index(base)
    return value


def _popcount(value: int) -> int:
    return bin(value).count('1')


def _pack_words(codes: np.ndarray) -> np.ndarray:
    """
    pack an array of per-base values (each < 4) into 64-bit words
    """
    nwords = (len(codes) + BASES_PER_WORD - 1) // BASES_PER_WORD
    padded = np.zeros(nwords * BASES_PER_WORD, dtype=np.uint64)
    padded[: len(codes)] = codes
    padded = padded.reshape((nwords, BASES_PER_WORD)) << _SHIFTS
    return np.bitwise_or.reduce(padded, axis=1) if nwords else np.zeros(0, dtype=np.uint64)


class PackedSequence:
    """
    immutable 2-bit packed nucleotide sequence

    Example:
        >>> seq = PackedSequence('AACGT', reverse=True)
        >>> seq.get_bases(0, 5)
        'TGCAA'
    """

    __slots__ = ('_length', '_words', '_ambiguous', 'reverse', 'complement')

    def __init__(self, bases: Union[str, bytes], reverse: bool = False, complement: bool = False):
        """
        Args:
            bases: the sequence to encode
            reverse: reverse the order of the bases before encoding
            complement: complement each base before encoding
        """
        if isinstance(bases, str):
            bases = bases.encode('ascii')
        raw = np.frombuffer(bytes(bases), dtype=np.uint8)
        if reverse:
            raw = raw[::-1]
        codes = _ENCODE[raw]
        ambiguous = ~_VALID[raw]
        if complement:
            codes = np.where(ambiguous, 0, _BASE_MASK - codes).astype(np.uint8)

        self._length = len(raw)
        self._words = _pack_words(codes)
        # ambiguous positions flag the low bit of their slot so masks line up with k-mer extraction
        self._ambiguous: Optional[np.ndarray] = _pack_words(ambiguous.astype(np.uint8)) if ambiguous.any() else None
        self.reverse = reverse
        self.complement = complement

    def __len__(self):
        return self._length

    def length(self) -> int:
        return self._length

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, repr(str(self)))

    def __str__(self):
        return self.get_bases(0, self._length)

    def __eq__(self, other):
        if not isinstance(other, PackedSequence):
            return False
        return str(self) == str(other)

    def __hash__(self):
        return hash(str(self))

    def _extract(self, words: np.ndarray, start: int, k: int) -> int:
        """
        pull the 2k bits for bases [start, start + k) out of a word array. k must be <= 32
        """
        word_index, offset = divmod(start, BASES_PER_WORD)
        value = int(words[word_index])
        window = BASES_PER_WORD
        if offset + k > BASES_PER_WORD:
            value = (value << 64) | int(words[word_index + 1])
            window += BASES_PER_WORD
        shift = BITS_PER_BASE * (window - offset - k)
        return (value >> shift) & ((1 << (BITS_PER_BASE * k)) - 1)

    def is_ambiguous(self, index: int) -> bool:
        """
        True if the base at the given offset was not one of A, C, G, T
        """
        if index < 0 or index >= self._length:
            raise IndexError('base offset out of range', index, self._length)
        if self._ambiguous is None:
            return False
        return bool(self._extract(self._ambiguous, index, 1))

    def get(self, index: int) -> str:
        """
        Returns:
            the base at a 0-based offset

        Raises:
            IndexError: the offset is outside the sequence
        """
        if index < 0 or index >= self._length:
            raise IndexError('base offset out of range', index, self._length)
        if self.is_ambiguous(index):
            return AMBIGUOUS_BASE
        return DNA_BASES[self._extract(self._words, index, 1)]

    def get_bases(self, start: int, length: int) -> str:
        """
        decode a contiguous range of bases

        Raises:
            IndexError: the range is not within the sequence
        """
        if start < 0 or length < 0 or start + length > self._length:
            raise IndexError('base range out of range', start, length, self._length)
        bases = []
        for i in range(start, start + length, BASES_PER_WORD):
            k = min(BASES_PER_WORD, start + length - i)
            codes = self._extract(self._words, i, k)
            ambiguous = 0 if self._ambiguous is None else self._extract(self._ambiguous, i, k)
            for j in range(k):
                shift = BITS_PER_BASE * (k - 1 - j)
                if (ambiguous >> shift) & 1:
                    bases.append(AMBIGUOUS_BASE)
                else:
                    bases.append(DNA_BASES[(codes >> shift) & _BASE_MASK])
        return ''.join(bases)

    def get_kmer(self, start: int, k: int) -> int:
        """
        pack k consecutive bases into an integer with the first base in the most significant position

        Args:
            start: offset of the first base
            k: number of bases (1-32)

        Raises:
            InvalidInputError: k is not supported or the range is out of bounds
        """
        if k < 1 or k > MAX_KMER_SIZE:
            raise InvalidInputError('k-mer size must be between 1 and {}'.format(MAX_KMER_SIZE), k)
        if start < 0 or start + k > self._length:
            raise InvalidInputError('k-mer range is out of bounds', start, k, self._length)
        return self._extract(self._words, start, k)

    def _mismatch_bits(self, other: 'PackedSequence', start: int, other_start: int, k: int) -> int:
        """
        one set low bit per base slot where the bases differ or either base is ambiguous
        """
        diff = self._extract(self._words, start, k) ^ other._extract(other._words, other_start, k)
        mismatches = (diff | (diff >> 1)) & _LOW_BITS
        for seq, offset in ((self, start), (other, other_start)):
            if seq._ambiguous is not None:
                mismatches |= seq._extract(seq._ambiguous, offset, k)
        return mismatches & (_LOW_BITS >> (BITS_PER_BASE * (BASES_PER_WORD - k)))

    def match_flags(self, other: 'PackedSequence', offset: int = 0):
        """
        per-base comparison over the overlap of the two sequences (see :meth:`overlap_matches`)

        Returns:
            List[bool]: True for each overlapping position of self where the bases agree
        """
        start = max(0, offset)
        other_start = start - offset
        size = min(self._length - start, other._length - other_start)
        flags = []
        for i in range(0, max(size, 0), BASES_PER_WORD):
            k = min(BASES_PER_WORD, size - i)
            mismatches = self._mismatch_bits(other, start + i, other_start + i, k)
            for j in range(k):
                flags.append(not (mismatches >> (BITS_PER_BASE * (k - 1 - j))) & 1)
        return flags

    @staticmethod
    def overlap_matches(seq_a: 'PackedSequence', seq_b: 'PackedSequence', offset: int) -> int:
        """
        count the matching bases when seq_b is placed offset bases to the right of seq_a

        Args:
            seq_a: the first sequence
            seq_b: the second sequence
            offset: shift of seq_b relative to seq_a. Negative values shift seq_b to the left

        Returns:
            the number of overlapping positions where ``seq_a[i] == seq_b[i - offset]``

        Example:
            >>> PackedSequence.overlap_matches(PackedSequence('ACGT'), PackedSequence('ACTTT'), 0)
            3
        """
        start = max(0, offset)
        other_start = start - offset
        size = min(seq_a._length - start, seq_b._length - other_start)
        matches = 0
        for i in range(0, max(size, 0), BASES_PER_WORD):
            k = min(BASES_PER_WORD, size - i)
            matches += k - _popcount(seq_a._mismatch_bits(seq_b, start + i, other_start + i, k))
        return matches

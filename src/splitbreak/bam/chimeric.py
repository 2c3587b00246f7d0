"""
chimeric (supplementary) alignments as stored in the SA tag of a read

Each entry has the form ``contig,pos,strand,cigar,mapq,nm`` where pos is 1-based and entries
are semicolon delimited
"""
from typing import List

from ..constants import NM_TAG, STRAND
from ..error import FormatError
from ..types import CigarTuples
from .cigar import alignment_matches, convert_cigar_to_string, convert_string_to_cigar

SA_ENTRY_DELIM = ';'
SA_FIELD_DELIM = ','


class ChimericAlignment:
    reference_name: str
    pos: int
    is_reverse: bool
    cigar: CigarTuples
    mapping_quality: int
    nm: int

    def __init__(self, reference_name, pos, is_reverse, cigar, mapping_quality, nm=0):
        """
        Args:
            reference_name (str): the contig the alignment is placed on
            pos (int): 1-based position of the first aligned base
            is_reverse (bool): the alignment is to the reverse strand
            cigar (CigarTuples): the alignment cigar, wrt the reference
            mapping_quality (int): mapping quality of the alignment
            nm (int): edit distance (mismatches and indels) to the reference
        """
        self.reference_name = reference_name
        self.pos = pos
        self.is_reverse = is_reverse
        self.cigar = cigar
        self.mapping_quality = mapping_quality
        self.nm = nm

    @property
    def strand(self) -> str:
        return STRAND.NEG if self.is_reverse else STRAND.POS

    @property
    def reference_start(self) -> int:
        """0-based position of the first aligned base"""
        return self.pos - 1

    @property
    def cigarstring(self) -> str:
        return convert_cigar_to_string(self.cigar)

    @classmethod
    def parse(cls, text: str) -> 'ChimericAlignment':
        """
        Raises:
            FormatError: the entry is malformed

        Example:
            >>> ChimericAlignment.parse('polyA,100,+,2M8S,10,0')
            ChimericAlignment(polyA,100,+,2M8S,10,0)
        """
        fields = text.strip().split(SA_FIELD_DELIM)
        if len(fields) != 6:
            raise FormatError('chimeric alignment requires 6 comma delimited fields', text)
        reference_name, pos, strand, cigar, mapq, nm = fields
        if not reference_name:
            raise FormatError('chimeric alignment is missing the reference name', text)
        if strand not in STRAND.values():
            raise FormatError('chimeric alignment strand must be + or -', text)
        try:
            pos = int(pos)
            mapq = int(mapq)
            nm = int(nm)
        except ValueError:
            raise FormatError('chimeric alignment position, mapping quality and edit distance must be integers', text)
        if pos < 1:
            raise FormatError('chimeric alignment position must be 1-based', text)
        cigar = convert_string_to_cigar(cigar)
        if not alignment_matches(cigar):
            raise FormatError('chimeric alignment does not align any bases', text)
        return cls(reference_name, pos, strand == STRAND.NEG, cigar, mapq, nm)

    @classmethod
    def from_read(cls, read) -> 'ChimericAlignment':
        """
        build the chimeric alignment representation of an alignment record

        Args:
            read (pysam.AlignedSegment): the mapped read
        """
        nm = read.get_tag(NM_TAG) if read.has_tag(NM_TAG) else 0
        return cls(
            read.reference_name,
            read.reference_start + 1,
            read.is_reverse,
            read.cigartuples,
            read.mapping_quality,
            nm,
        )

    @classmethod
    def to_string(cls, read) -> str:
        """
        the SA tag entry which other alignments of the same read use to refer to this record
        """
        return str(cls.from_read(read))

    def key(self):
        return (self.reference_name, self.pos, self.strand, self.cigarstring)

    def __str__(self):
        return SA_FIELD_DELIM.join(
            [
                str(self.reference_name),
                str(self.pos),
                self.strand,
                self.cigarstring,
                str(self.mapping_quality),
                str(self.nm),
            ]
        )

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, str(self))

    def __eq__(self, other):
        if not isinstance(other, ChimericAlignment):
            return False
        return str(self) == str(other)

    def __hash__(self):
        return hash(str(self))


def parse_sa_tag(text: str) -> List[ChimericAlignment]:
    """
    parse all entries of an SA tag. Empty entries (ex. a trailing delimiter) are ignored

    Raises:
        FormatError: any entry is malformed
    """
    if not text:
        return []
    return [ChimericAlignment.parse(entry) for entry in text.split(SA_ENTRY_DELIM) if entry.strip()]

"""
loading of reference sequences and lookup of reference bases
"""
from typing import Dict, Optional

from Bio import SeqIO

from .types import ReferenceGenome
from .util import logger


def load_reference_genome(*filepaths: str) -> ReferenceGenome:
    """
    Args:
        filepaths: the paths to the files containing the input fasta genomes

    Returns:
        a dictionary representing the sequences in the fasta file

    Raises:
        KeyError: a sequence name is defined more than once
    """
    reference_genome = {}
    for filename in filepaths:
        logger.info('loading reference genome: {}'.format(filename))
        with open(filename, 'r') as fh:
            for chrom, seq in SeqIO.to_dict(SeqIO.parse(fh, 'fasta')).items():
                if chrom in reference_genome:
                    raise KeyError('Duplicate chromosome name', chrom, filename)
                reference_genome[chrom] = seq.upper()
    return reference_genome


def reference_lengths(reference_genome: Optional[ReferenceGenome]) -> Dict[str, int]:
    """
    the length of each contig in the reference genome
    """
    if not reference_genome:
        return {}
    return {chrom: len(record.seq) for chrom, record in reference_genome.items()}


def fetch_reference_bases(reference_genome: Optional[ReferenceGenome], chrom: str, start: int, end: int) -> Optional[str]:
    """
    Args:
        reference_genome: the reference sequences
        chrom: the contig name
        start: 1-based position of the first base
        end: 1-based position of the last base (inclusive)

    Returns:
        the upper case reference bases or None if the contig is not known or the range is not
        within the contig
    """
    if not reference_genome or chrom not in reference_genome:
        return None
    seq = reference_genome[chrom].seq
    if start < 1 or end > len(seq) or end < start:
        return None
    return str(seq[start - 1:end]).upper()

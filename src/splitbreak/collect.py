"""
iteration over alignment records to derive their evidence
"""
import dataclasses
from typing import Iterable, Iterator, List, Optional

import pysam

from .context import EvidenceContext
from .error import FormatError, InvalidStateError
from .evidence import ReadEvidence, single_read_evidence
from .util import logger


def iter_evidence(context: EvidenceContext, reads: Iterable) -> Iterator[ReadEvidence]:
    """
    derive the evidence of each record. Unmapped and secondary records are skipped as are records
    with malformed chimeric alignments or which are flagged as mapped but have no alignment

    Args:
        context: the shared settings and reference
        reads (Iterable[pysam.AlignedSegment]): the alignment records
    """
    for read in reads:
        if read.is_unmapped or read.is_secondary:
            logger.debug('skipping unmapped or secondary record {}'.format(read.query_name))
            continue
        try:
            evidence = single_read_evidence(context, read)
        except FormatError as err:
            logger.warning('skipping record {} with malformed alignment annotation: {}'.format(read.query_name, err))
            continue
        except InvalidStateError as err:
            logger.warning('skipping record {} in an invalid state: {}'.format(read.query_name, err))
            continue
        for item in evidence:
            yield item


def evidence_from_bam(context: EvidenceContext, filename: str, region: Optional[str] = None) -> List[ReadEvidence]:
    """
    derive the evidence of all records in a bam file

    Args:
        context: the shared settings and reference
        filename: path to the bam file
        region: restrict to records overlapping a region (ex. chr1:100-200). Requires an indexed bam

    Note:
        contig lengths are taken from the bam header when the context does not supply them
    """
    logger.info('reading: {}'.format(filename))
    with pysam.AlignmentFile(filename, 'rb') as fh:
        if not context.reference_lengths:
            context = dataclasses.replace(context, reference_lengths=dict(zip(fh.references, fh.lengths)))
        reads = fh.fetch(region=region) if region else fh.fetch(until_eof=True)
        result = list(iter_evidence(context, reads))
    logger.info('derived {} evidence from {}'.format(len(result), filename))
    return result

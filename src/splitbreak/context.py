"""
the shared settings and reference used while deriving evidence
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

from .config import DEFAULTS
from .reference import load_reference_genome, reference_lengths
from .types import ReferenceGenome


@dataclass(frozen=True)
class EvidenceContext:
    """
    read-only settings and reference shared by all evidence derivations

    Attributes:
        reference_genome: reference sequences used to resolve overlapping alignments, None if unavailable
        reference_lengths: contig lengths used to bound breakend intervals
        min_mapq: breakpoints below this mapping quality on either side are scored zero
        max_mapq: mapping qualities are capped at this value when scoring
        junction_flank: read bases either side of the junction contributing base qualities to the score
        default_base_quality: base quality used when the read has no qualities
        min_clip_length: minimum soft clip length for soft clip breakend evidence
    """

    reference_genome: Optional[ReferenceGenome] = None
    reference_lengths: Dict[str, int] = field(default_factory=dict)
    min_mapq: int = DEFAULTS['min_mapq']
    max_mapq: int = DEFAULTS['max_mapq']
    junction_flank: int = DEFAULTS['junction_flank']
    default_base_quality: int = DEFAULTS['default_base_quality']
    min_clip_length: int = DEFAULTS['min_clip_length']

    def __post_init__(self):
        if self.max_mapq <= 0:
            raise ValueError('max_mapq must be a positive integer', self.max_mapq)
        if self.junction_flank < 1:
            raise ValueError('junction_flank must be a positive integer', self.junction_flank)
        if self.min_clip_length < 1:
            raise ValueError('min_clip_length must be a positive integer', self.min_clip_length)
        if self.reference_genome and not self.reference_lengths:
            object.__setattr__(self, 'reference_lengths', reference_lengths(self.reference_genome))

    @classmethod
    def from_defaults(cls, reference_filename: Optional[str] = None, **kwargs) -> 'EvidenceContext':
        """
        build a context from the current defaults (including any environment overrides)

        Args:
            reference_filename: fasta file to load the reference genome from
            kwargs: settings overriding the defaults

        Example:
            >>> EvidenceContext.from_defaults(min_mapq=10).min_mapq
            10
        """
        settings = DEFAULTS.to_dict()
        settings.update(kwargs)
        if reference_filename:
            settings['reference_genome'] = load_reference_genome(reference_filename)
        return cls(**settings)

    def contig_length(self, chrom: str) -> Optional[int]:
        return self.reference_lengths.get(chrom)

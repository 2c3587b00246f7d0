"""
breakend and breakpoint position summaries
"""
from typing import Optional

from .constants import DIRECTION
from .interval import Interval


class BreakendSummary(Interval):
    """
    one side of a structural variant junction. Coordinates are given as 1-indexed and the
    confidence interval [start, end] is inclusive and contains the nominal position
    """

    chr: str
    direction: str
    nominal: int

    @property
    def key(self):
        return (self.chr, self.direction, self.nominal, self.start, self.end)

    def __init__(
        self,
        chr: str,
        direction: str,
        nominal: int,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ):
        """
        Args:
            chr: the reference name
            direction (DIRECTION): which side of the position the anchoring alignment lies on
            nominal: the most likely position of the breakend
            start: start of the confidence interval if the position is uncertain
            end: end of the confidence interval if the position is uncertain

        Examples:
            >>> BreakendSummary('1', DIRECTION.FWD, 10)
            >>> BreakendSummary('1', DIRECTION.BWD, 12, 10, 13)
        """
        Interval.__init__(self, nominal if start is None else start, nominal if end is None else end)
        self.chr = chr
        self.direction = DIRECTION.enforce(direction)
        self.nominal = int(nominal)
        if self.nominal not in self:
            raise AttributeError('nominal position must lie within the confidence interval', self.nominal, self.start, self.end)

    @property
    def is_exact_position(self) -> bool:
        return len(self) == 1

    def __repr__(self):
        return '{}({}:{}{}{})'.format(
            self.__class__.__name__,
            self.chr,
            self.nominal,
            '[{}-{}]'.format(self.start, self.end) if not self.is_exact_position else '',
            self.direction,
        )

    def __eq__(self, other):
        if not isinstance(other, BreakendSummary) or isinstance(other, BreakpointSummary):
            return False
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)


class BreakpointSummary:
    """
    a pair of breakends (local and remote) describing a single rearrangement junction.
    Attributes of the local breakend are accessible directly on the breakpoint
    """

    local: BreakendSummary
    remote: BreakendSummary

    def __init__(self, local: BreakendSummary, remote: BreakendSummary):
        self.local = local
        self.remote = remote

    @property
    def chr(self) -> str:
        return self.local.chr

    @property
    def direction(self) -> str:
        return self.local.direction

    @property
    def nominal(self) -> int:
        return self.local.nominal

    @property
    def start(self) -> int:
        return self.local.start

    @property
    def end(self) -> int:
        return self.local.end

    @property
    def key(self):
        return (self.local.key, self.remote.key)

    @property
    def interchromosomal(self) -> bool:
        """:class:`bool`: True if the breakends are on different chromosomes, False otherwise"""
        return self.local.chr != self.remote.chr

    def remote_breakpoint(self) -> 'BreakpointSummary':
        """
        the same breakpoint seen from the remote breakend

        Example:
            >>> bp = BreakpointSummary(BreakendSummary('1', 'f', 10), BreakendSummary('2', 'b', 100))
            >>> bp.remote_breakpoint()
            BreakpointSummary(BreakendSummary(2:100b), BreakendSummary(1:10f))
        """
        return BreakpointSummary(self.remote, self.local)

    def __repr__(self):
        return '{}({}, {})'.format(self.__class__.__name__, repr(self.local), repr(self.remote))

    def __eq__(self, other):
        if not isinstance(other, BreakpointSummary):
            return False
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

"""
closed integer intervals used for breakend positions
"""


class Interval:
    """
    closed integer interval. Both the start and end are inclusive
    """

    def __init__(self, start: int, end=None):
        """
        Args:
            start: the start of the interval (inclusive)
            end: the end of the interval (inclusive)
        """
        self.start = int(start)
        self.end = int(end) if end is not None else self.start
        if self.start > self.end:
            raise AttributeError('interval start > end is not allowed', self.start, self.end)

    def __getitem__(self, index):
        try:
            index = int(index)
        except ValueError:
            raise IndexError('index input accessor must be an integer', index)
        if index == 0:
            return self.start
        elif index == 1:
            return self.end
        raise IndexError('index input accessor is out of bounds: 1 or 2 only', index)

    def __len__(self):
        """
        the number of positions in the interval

        Example:
            >>> len(Interval(1, 11))
            11
        """
        return self.end - self.start + 1

    def clamp(self, lower, upper):
        """
        restrict the interval to lie within [lower, upper]

        Example:
            >>> Interval(-3, 5).clamp(1, 10)
            Interval(1, 5)
        """
        start = min(max(self.start, lower), upper)
        end = max(min(self.end, upper), lower)
        return Interval(start, end)

    def __repr__(self):
        return '{}({}, {})'.format(self.__class__.__name__, self.start, self.end)

    def __eq__(self, other):
        try:
            return self[0] == other[0] and self[1] == other[1]
        except (TypeError, IndexError):
            return False

    def __contains__(self, other):
        try:
            if other[0] >= self[0] and other[1] <= self[1]:
                return True
        except TypeError:
            if other >= self[0] and other <= self[1]:
                return True
        return False

    def __hash__(self):
        return hash((self[0], self[1]))
